from typing import Dict, List, Optional
from urllib.parse import urlparse

from aiohttp import web

from webcivics.webcard.app.config import SettingsAppKey

ALLOWED_DEBUG_HOSTS = {
    "localhost",
    "127.0.0.1",
}


def get_cors_headers(
    origin_value: Optional[str], allowed_origins: List[str], debug: bool
) -> Dict[str, str]:
    """Return CORS headers for a request from `origin_value`."""
    headers = {
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": (
            "Keep-Alive, User-Agent, X-Requested-With, "
            "If-Modified-Since, Cache-Control, Content-Type"
        ),
        "Vary": "Origin",
    }

    if "*" in allowed_origins:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin_value:
        parsed = urlparse(origin_value)
        base = (
            f"{parsed.scheme}://{parsed.netloc}"
            if parsed.scheme and parsed.netloc
            else origin_value
        )

        if base in allowed_origins:
            headers["Access-Control-Allow-Origin"] = origin_value
        elif debug and parsed.hostname in ALLOWED_DEBUG_HOSTS:
            headers["Access-Control-Allow-Origin"] = origin_value

    return headers


@web.middleware
async def cors_middleware(request: web.Request, handler):
    settings = request.app[SettingsAppKey]
    if request.method == "OPTIONS":
        response = web.Response(status=204)
    else:
        response = await handler(request)
    response.headers.update(
        get_cors_headers(
            request.headers.get("Origin"), settings.origins(), settings.debug
        )
    )
    return response
