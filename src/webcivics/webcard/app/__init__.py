"""HTTP service exposing WebCard resolution over aiohttp."""
