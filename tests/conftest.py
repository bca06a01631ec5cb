"""
Shared test configuration and fixtures for WebCard tests.

Provides sample ADP and WebID documents and helpers for mocking aiohttp client
sessions, so resolution stages can be tested without network access.
"""

import io
import json
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import ClientSession

from webcivics.webcard.model.services import DEFAULT_SERVICES

TEST_CID = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"
TEST_GATEWAY_URL = f"https://ipfs.io/ipfs/{TEST_CID}"
TEST_WEBID = "https://ada.example/profile/card#me"

ADP_DOCUMENT = """@prefix adp: <https://webcivics.github.io/adp/ontdev/adp#> .
@prefix foaf: <http://xmlns.com/foaf/0.1/> .

<#this> a foaf:Person ;
    foaf:name "Ada" ;
    foaf:img <https://ada.example/ada.png> ;
    adp:hasGithubAccount "ada" ;
    adp:hasTwitterAccount "ada_tw" ;
    adp:hasEcashAccount "ecash:qz1" ;
    foaf:page <https://blog.ada.example/> ;
    adp:hasWebID <https://ada.example/profile/card#me> .
"""

MINIMAL_ADP_DOCUMENT = """@prefix foaf: <http://xmlns.com/foaf/0.1/> .

<#this> foaf:name "Ada" .
"""

WEBID_DOCUMENT = """@prefix foaf: <http://xmlns.com/foaf/0.1/> .
@prefix vcard: <http://www.w3.org/2006/vcard/ns#> .
@prefix ldp: <http://www.w3.org/ns/ldp#> .

<#me> a foaf:Person ;
    foaf:name "Ada Lovelace" ;
    vcard:hasEmail <mailto:ada@example.org> ;
    foaf:homepage <https://blog.ada.example/> ;
    foaf:account <https://github.com/ada-lovelace> ;
    ldp:inbox <https://ada.example/inbox/> .
"""


def txt_record(value: str) -> str:
    """TXT data the way DNS-over-HTTPS JSON reports it, with quotes."""
    return f'"{value}"'


def signer_record(cid: str = TEST_CID) -> str:
    return txt_record(f"adp:signer <https://ipfs.io/ipfs/{cid}>")


def doh_body(*records: str, status: int = 0) -> dict:
    return {
        "Status": status,
        "Answer": [
            {"name": "_adp.ada.example.", "type": 16, "TTL": 300, "data": record}
            for record in records
        ],
    }


def mock_response(
    status: int = 200,
    body: str = "",
    content_type: Optional[str] = "text/turtle",
    json_body: Any = None,
) -> AsyncMock:
    """A ClientResponse stand-in whose body can be read once."""
    response = AsyncMock()
    response.status = status
    response.charset = None
    response.headers = {"Content-Type": content_type} if content_type else {}
    raw = body.encode("utf-8")
    response.content.read.side_effect = io.BytesIO(raw).read
    response.read.return_value = raw
    if json_body is not None:
        response.json.return_value = json_body
    else:
        response.json.side_effect = lambda content_type=None: json.loads(body)
    return response


def mock_context(response: Any = None, error: Optional[BaseException] = None) -> MagicMock:
    """The async context manager returned by `session.get` and `session.post`."""
    context = MagicMock()
    if error is not None:
        context.__aenter__.side_effect = error
    else:
        context.__aenter__.return_value = response
    context.__aexit__.return_value = False
    return context


def mock_session(*contexts: MagicMock) -> AsyncMock:
    """A ClientSession whose successive GETs enter the given contexts."""
    session = AsyncMock(spec=ClientSession)
    session.get.side_effect = list(contexts)
    return session


@pytest.fixture
def services():
    return DEFAULT_SERVICES
