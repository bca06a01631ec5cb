"""
Unit tests for WebID resolution in webcivics.webcard.resolve.secondary
"""

import json
import pytest
from unittest.mock import patch
from aiohttp import ClientConnectionError

from conftest import TEST_WEBID, WEBID_DOCUMENT, mock_context, mock_response, mock_session
from webcivics.webcard.resolve.fetch import WEBID_ACCEPT
from webcivics.webcard.resolve.secondary import resolve_secondary


class TestResolveSecondary:
    """Test suite for resolve_secondary."""

    @pytest.mark.asyncio
    async def test_turtle_document(self, services):
        session = mock_session(mock_context(mock_response(body=WEBID_DOCUMENT)))

        result = await resolve_secondary(session, TEST_WEBID, services)

        assert result.error is None
        assert result.profile is not None
        assert result.profile.name == "Ada Lovelace"
        assert result.profile.inbox == "https://ada.example/inbox/"
        session.get.assert_called_once_with(
            TEST_WEBID, headers={"Accept": WEBID_ACCEPT}
        )

    @pytest.mark.asyncio
    async def test_json_ld_document(self, services):
        body = json.dumps(
            {
                "@id": "#me",
                "foaf:name": "Ada JSON",
                "vcard:hasEmail": "ada@example.org",
            }
        )
        session = mock_session(
            mock_context(mock_response(body=body, content_type="application/ld+json"))
        )

        result = await resolve_secondary(session, TEST_WEBID, services)

        assert result.profile is not None
        assert result.profile.name == "Ada JSON"
        assert result.profile.email == "ada@example.org"

    @pytest.mark.asyncio
    async def test_not_found(self, services):
        session = mock_session(mock_context(mock_response(status=404)))

        result = await resolve_secondary(session, TEST_WEBID, services)

        assert result.profile is None
        assert "error-resolve-1007" in result.error
        assert "status: 404" in result.error

    @pytest.mark.asyncio
    @patch("webcivics.webcard.resolve.fetch.sentry_sdk")
    async def test_network_error(self, mock_sentry, services):
        session = mock_session(mock_context(error=ClientConnectionError("refused")))

        result = await resolve_secondary(session, TEST_WEBID, services)

        assert result.profile is None
        assert result.error is not None

    @pytest.mark.asyncio
    async def test_unparsable_document(self, services):
        session = mock_session(mock_context(mock_response(body="<#me> foaf:name")))

        result = await resolve_secondary(session, TEST_WEBID, services)

        assert result.profile is None
        assert "RDF parsing error" in result.error

    @pytest.mark.asyncio
    async def test_unknown_charset(self, services):
        response = mock_response(body=WEBID_DOCUMENT)
        response.charset = "bogus-cs"
        session = mock_session(mock_context(response))

        result = await resolve_secondary(session, TEST_WEBID, services)

        assert result.error is None
        assert result.profile.name == "Ada Lovelace"
