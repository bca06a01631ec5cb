"""
Data Models

This package defines the pydantic models passed between the resolution stages and
returned to callers. None of them are persisted; every model lives for one resolution
run, except the outcome that is handed to the caller.

Key Models:
- profile.py: Content pointer, document, profiles, social links and merged fields
- outcome.py: The tagged resolution outcome (idle, loading, found, failed)
- services.py: The service descriptor table driving social link extraction
- health.py: Upstream failure gauge backing the readiness probe
"""
