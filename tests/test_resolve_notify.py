"""
Unit tests for access requests in webcivics.webcard.resolve.notify
"""

import pytest
from unittest.mock import AsyncMock, patch
from aiohttp import ClientConnectionError, ClientSession
from rdflib import Graph, URIRef

from conftest import TEST_WEBID, mock_context, mock_response
from webcivics.webcard.resolve.notify import access_request_body, send_access_request
from webcivics.webcard.resolve.vocabulary import ACL

INBOX = "https://ada.example/inbox/"
AGENT = "https://reader.example/card#me"


def post_session(context) -> AsyncMock:
    session = AsyncMock(spec=ClientSession)
    session.post.return_value = context
    return session


class TestAccessRequestBody:
    """Test suite for access_request_body."""

    def test_is_valid_turtle(self):
        graph = Graph().parse(
            data=access_request_body(AGENT, TEST_WEBID),
            format="turtle",
            publicID=INBOX,
        )
        request = URIRef(INBOX + "#request")
        assert graph.value(request, ACL["agent"]) == URIRef(AGENT)
        assert graph.value(request, ACL["accessTo"]) == URIRef(TEST_WEBID)
        assert graph.value(request, ACL["mode"]) == ACL["Read"]


class TestSendAccessRequest:
    """Test suite for send_access_request."""

    @pytest.mark.asyncio
    async def test_success(self):
        session = post_session(mock_context(mock_response(status=201)))

        result = await send_access_request(session, INBOX, TEST_WEBID, AGENT)

        assert result.success is True
        assert result.status == 201
        assert result.message == "Access request sent successfully"
        session.post.assert_called_once_with(
            INBOX,
            data=access_request_body(AGENT, TEST_WEBID),
            headers={"Content-Type": "text/turtle"},
        )

    @pytest.mark.asyncio
    async def test_rejected(self):
        session = post_session(mock_context(mock_response(status=403)))

        result = await send_access_request(session, INBOX, TEST_WEBID, AGENT)

        assert result.success is False
        assert result.status == 403
        assert "status: 403" in result.message

    @pytest.mark.asyncio
    @patch("webcivics.webcard.resolve.notify.sentry_sdk")
    async def test_network_error(self, mock_sentry):
        session = post_session(mock_context(error=ClientConnectionError("refused")))

        result = await send_access_request(session, INBOX, TEST_WEBID, AGENT)

        assert result.success is False
        assert result.status is None
        assert "refused" in result.message
        mock_sentry.capture_exception.assert_called_once()
