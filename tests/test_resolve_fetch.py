"""
Unit tests for document fetching in webcivics.webcard.resolve.fetch
"""

import io
import pytest
from unittest.mock import patch
from aiohttp import ClientConnectionError

from conftest import ADP_DOCUMENT, TEST_GATEWAY_URL, mock_context, mock_response, mock_session
from webcivics.webcard.resolve.errors import ErrorKind, ResolutionException
from webcivics.webcard.resolve.fetch import (
    JSON_LD,
    TURTLE,
    WEBID_ACCEPT,
    body_encoding,
    fetch_document,
    media_type,
)


class TestMediaType:
    """Test suite for media_type."""

    def test_strips_parameters(self):
        assert media_type("text/turtle; charset=utf-8") == TURTLE

    def test_lowercases(self):
        assert media_type("Application/LD+JSON") == JSON_LD

    def test_defaults_to_turtle(self):
        assert media_type(None) == TURTLE
        assert media_type("") == TURTLE


class TestFetchDocument:
    """Test suite for fetch_document."""

    @pytest.mark.asyncio
    async def test_success(self):
        session = mock_session(
            mock_context(mock_response(body=ADP_DOCUMENT, content_type="text/turtle"))
        )

        document = await fetch_document(session, TEST_GATEWAY_URL)

        assert document.url == TEST_GATEWAY_URL
        assert document.body == ADP_DOCUMENT
        assert document.content_type == TURTLE
        session.get.assert_called_once_with(TEST_GATEWAY_URL, headers=None)

    @pytest.mark.asyncio
    async def test_accept_header(self):
        session = mock_session(mock_context(mock_response(body="x")))

        await fetch_document(session, TEST_GATEWAY_URL, accept=WEBID_ACCEPT)

        session.get.assert_called_once_with(
            TEST_GATEWAY_URL, headers={"Accept": WEBID_ACCEPT}
        )

    @pytest.mark.asyncio
    async def test_missing_content_type(self):
        session = mock_session(mock_context(mock_response(body="x", content_type=None)))
        document = await fetch_document(session, TEST_GATEWAY_URL)
        assert document.content_type == TURTLE

    @pytest.mark.asyncio
    async def test_not_found(self):
        session = mock_session(mock_context(mock_response(status=404)))

        with pytest.raises(ResolutionException) as exc_info:
            await fetch_document(session, TEST_GATEWAY_URL)

        assert exc_info.value.kind == ErrorKind.FetchFailure
        assert exc_info.value.status == 404
        assert "status: 404" in exc_info.value.message

    @pytest.mark.asyncio
    @patch("webcivics.webcard.resolve.fetch.sentry_sdk")
    async def test_network_error(self, mock_sentry):
        session = mock_session(mock_context(error=ClientConnectionError("reset")))

        with pytest.raises(ResolutionException) as exc_info:
            await fetch_document(session, TEST_GATEWAY_URL)

        assert exc_info.value.kind == ErrorKind.FetchFailure
        assert exc_info.value.status is None
        assert "network error" in exc_info.value.message
        mock_sentry.capture_exception.assert_called_once()

    @pytest.mark.asyncio
    async def test_body_over_limit(self):
        session = mock_session(mock_context(mock_response(body="x" * 101)))

        with pytest.raises(ResolutionException) as exc_info:
            await fetch_document(session, TEST_GATEWAY_URL, max_bytes=100)

        assert exc_info.value.kind == ErrorKind.FetchFailure
        assert "exceeds 100 bytes" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_body_at_limit(self):
        session = mock_session(mock_context(mock_response(body="x" * 100)))
        document = await fetch_document(session, TEST_GATEWAY_URL, max_bytes=100)
        assert len(document.body) == 100

    @pytest.mark.asyncio
    async def test_limit_disabled(self):
        response = mock_response(body="x" * 10)
        session = mock_session(mock_context(response))

        document = await fetch_document(session, TEST_GATEWAY_URL, max_bytes=None)

        assert document.body == "x" * 10
        response.read.assert_awaited_once()
        response.content.read.assert_not_called()

    @pytest.mark.asyncio
    async def test_declared_charset(self):
        response = mock_response(body="")
        response.content.read.side_effect = io.BytesIO(
            "<#this> <#name> \"Adá\" .".encode("latin-1")
        ).read
        response.charset = "ISO-8859-1"
        session = mock_session(mock_context(response))

        document = await fetch_document(session, TEST_GATEWAY_URL)

        assert "Adá" in document.body

    @pytest.mark.asyncio
    async def test_unknown_charset_decodes_as_utf8(self):
        response = mock_response(body=ADP_DOCUMENT)
        response.charset = "bogus-cs"
        session = mock_session(mock_context(response))

        document = await fetch_document(session, TEST_GATEWAY_URL)

        assert document.body == ADP_DOCUMENT


class TestBodyEncoding:
    """Test suite for body_encoding."""

    def test_known(self):
        assert body_encoding("UTF-8") == "utf-8"
        assert body_encoding("latin-1") == "iso8859-1"

    def test_absent_or_unknown(self):
        assert body_encoding(None) == "utf-8"
        assert body_encoding("bogus-cs") == "utf-8"
