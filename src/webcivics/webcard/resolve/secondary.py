"""WebID resolution.

Resolves the personal linked-data document an ADP profile points to with
`adp:hasWebID`. Failures here never fail the run: they are returned as a message next
to an absent profile.
"""

import logging
from typing import Optional

from aiohttp import ClientSession
from pydantic import BaseModel

from webcivics.webcard.model.profile import SecondaryProfile
from webcivics.webcard.model.services import ServiceTable
from webcivics.webcard.resolve.errors import ResolutionException
from webcivics.webcard.resolve.extract import extract_secondary_profile
from webcivics.webcard.resolve.fetch import (
    DEFAULT_MAX_DOCUMENT_BYTES,
    WEBID_ACCEPT,
    fetch_document,
)
from webcivics.webcard.resolve.graph import load_graph

logger = logging.getLogger(__name__)


class SecondaryResult(BaseModel):
    """Result of WebID resolution; exactly one of the fields is set."""

    profile: Optional[SecondaryProfile] = None
    error: Optional[str] = None


async def resolve_secondary(
    session: ClientSession,
    endpoint: str,
    services: ServiceTable,
    max_bytes: Optional[int] = DEFAULT_MAX_DOCUMENT_BYTES,
) -> SecondaryResult:
    """Fetch, parse and extract the WebID document at `endpoint`.

    Both Turtle and JSON-LD are requested through content negotiation.

    Returns:
        SecondaryResult with the profile, or with a SecondaryError message
    """
    try:
        document = await fetch_document(
            session, endpoint, accept=WEBID_ACCEPT, max_bytes=max_bytes
        )
        graph = load_graph(document, allow_json_ld=True)
    except ResolutionException as e:
        error = ResolutionException.secondary_error(e.message)
        logger.warning("WebID resolution failed for %s: %s", endpoint, e.message)
        return SecondaryResult(error=error.message)

    return SecondaryResult(
        profile=extract_secondary_profile(graph, endpoint, services)
    )
