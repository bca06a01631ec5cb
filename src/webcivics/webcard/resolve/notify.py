"""Access request notification.

Sends a one-shot request for read access to the inbox advertised by a WebID document.
This is triggered explicitly by a user, never by the pipeline, and is never retried.
"""

import asyncio
import logging
from typing import Optional

from aiohttp import ClientError, ClientSession, hdrs
from pydantic import BaseModel
import sentry_sdk

logger = logging.getLogger(__name__)

ACCESS_REQUEST_TEMPLATE = """@prefix acl: <http://www.w3.org/ns/auth/acl#>.
@prefix foaf: <http://xmlns.com/foaf/0.1/>.
<#request>
  a acl:Authorization ;
  acl:agent <{agent}> ;
  acl:accessTo <{target}> ;
  acl:mode acl:Read .
"""


class NotificationResult(BaseModel):
    """Outcome of an access request. `status` is absent on network errors."""

    inbox: str
    success: bool
    status: Optional[int] = None
    message: str


def access_request_body(agent: str, target: str) -> str:
    """Turtle body of an `acl:Authorization` read request from `agent` for `target`."""
    return ACCESS_REQUEST_TEMPLATE.format(agent=agent, target=target)


async def send_access_request(
    session: ClientSession, inbox: str, target: str, agent: str
) -> NotificationResult:
    """POST an access request to `inbox`.

    Args:
        session: HTTP client session
        inbox: Inbox URL discovered in the WebID document
        target: The WebID access is requested to
        agent: The WebID of the requesting agent

    Returns:
        NotificationResult; success means a 2xx response
    """
    try:
        async with session.post(
            inbox,
            data=access_request_body(agent, target),
            headers={hdrs.CONTENT_TYPE: "text/turtle"},
        ) as resp:
            status = resp.status
    except (ClientError, asyncio.TimeoutError) as e:
        sentry_sdk.capture_exception(e)
        logger.warning("Access request to %s failed: %s", inbox, e)
        return NotificationResult(
            inbox=inbox,
            success=False,
            message=f"Error sending access request: {str(e) or type(e).__name__}",
        )

    if 200 <= status < 300:
        logger.info("Access request sent to %s", inbox)
        return NotificationResult(
            inbox=inbox,
            success=True,
            status=status,
            message="Access request sent successfully",
        )

    logger.warning("Access request to %s returned status %d", inbox, status)
    return NotificationResult(
        inbox=inbox,
        success=False,
        status=status,
        message=f"Failed to send access request (status: {status})",
    )
