"""Document fetching.

A single GET per document. Redirects are whatever aiohttp follows by default. The body
is read up to a configurable size ceiling.
"""

import asyncio
import codecs
import logging
from typing import Optional

from aiohttp import ClientError, ClientResponse, ClientSession, hdrs
import sentry_sdk

from webcivics.webcard.model.profile import Document
from webcivics.webcard.resolve.errors import ResolutionException

logger = logging.getLogger(__name__)

TURTLE = "text/turtle"
JSON_LD = "application/ld+json"

WEBID_ACCEPT = f"{TURTLE}, {JSON_LD}"

DEFAULT_MAX_DOCUMENT_BYTES = 1024 * 1024


def body_encoding(charset: Optional[str]) -> str:
    """Codec name for a declared charset, utf-8 if absent or unknown."""
    if not charset:
        return "utf-8"
    try:
        return codecs.lookup(charset).name
    except LookupError:
        logger.warning("Unknown charset %r, decoding as utf-8", charset)
        return "utf-8"


def media_type(content_type: Optional[str]) -> str:
    """Strip parameters from a Content-Type header, defaulting to Turtle."""
    if not content_type:
        return TURTLE
    value = content_type.split(";", 1)[0].strip().lower()
    return value or TURTLE


async def _read_limited(resp: ClientResponse, url: str, max_bytes: int) -> bytes:
    raw = bytearray()
    while True:
        chunk = await resp.content.read(max_bytes + 1 - len(raw))
        if not chunk:
            return bytes(raw)
        raw.extend(chunk)
        if len(raw) > max_bytes:
            raise ResolutionException.fetch_failure(
                url, resp.status, f"document exceeds {max_bytes} bytes"
            )


async def fetch_document(
    session: ClientSession,
    url: str,
    accept: Optional[str] = None,
    max_bytes: Optional[int] = DEFAULT_MAX_DOCUMENT_BYTES,
) -> Document:
    """Fetch a document body and its declared media type.

    Args:
        session: HTTP client session
        url: Document URL
        accept: Optional Accept header for content negotiation
        max_bytes: Size ceiling for the body; None or 0 disables it

    Returns:
        The fetched Document

    Raises:
        ResolutionException: FetchFailure on network errors, non-2xx responses, and
            bodies larger than `max_bytes`
    """
    headers = {hdrs.ACCEPT: accept} if accept else None
    try:
        async with session.get(url, headers=headers) as resp:
            if not 200 <= resp.status < 300:
                raise ResolutionException.fetch_failure(url, resp.status)

            if max_bytes:
                raw = await _read_limited(resp, url, max_bytes)
            else:
                raw = await resp.read()

            content_type = media_type(resp.headers.get(hdrs.CONTENT_TYPE))
            body = raw.decode(body_encoding(resp.charset), errors="replace")
    except (ClientError, asyncio.TimeoutError) as e:
        sentry_sdk.capture_exception(e)
        raise ResolutionException.fetch_failure(url, None, str(e)) from e

    logger.debug("Fetched %d bytes of %s from %s", len(raw), content_type, url)
    return Document(url=url, body=body, content_type=content_type)
