"""Graph loading.

Documents are parsed as Turtle into an rdflib Graph. WebID documents may be served as
JSON-LD instead; when Turtle parsing of such a document fails and its declared type is
JSON-LD, it is parsed with rdflib's JSON-LD parser. A default context makes compact
keys such as `foaf:name` and `ldp:inbox` work for documents that do not declare their
prefixes, so the name, email, homepage and inbox fields are recognized either way.
Remote contexts are never fetched: every context reference by URL is replaced by the
default context before parsing.
"""

import json
import logging
from typing import Any, Dict

from rdflib import Graph
from rdflib.namespace import FOAF

from webcivics.webcard.model.profile import Document
from webcivics.webcard.resolve.errors import ResolutionException
from webcivics.webcard.resolve.fetch import JSON_LD
from webcivics.webcard.resolve.vocabulary import LDP, SCHEMA, VCARD

logger = logging.getLogger(__name__)

WEBID_CONTEXT: Dict[str, Any] = {
    "foaf": str(FOAF),
    "vcard": str(VCARD),
    "ldp": str(LDP),
    "schema": str(SCHEMA),
    "foaf:homepage": {"@id": str(FOAF.homepage), "@type": "@id"},
    "foaf:account": {"@id": str(FOAF.account), "@type": "@id"},
    "ldp:inbox": {"@id": str(LDP["inbox"]), "@type": "@id"},
}


def parse_turtle(document: Document) -> Graph:
    """Parse a Turtle document, resolving relative IRIs against its URL.

    Raises:
        ResolutionException: GraphParseError with the parser's message
    """
    graph = Graph()
    try:
        graph.parse(data=document.body, format="turtle", publicID=document.url)
    except Exception as e:
        raise ResolutionException.graph_parse_error(str(e)) from e
    return graph


def localize_contexts(value: Any) -> Any:
    """Copy of a JSON-LD value with remote `@context` and `@import` references removed.

    A context given by URL becomes the default context.
    """
    if isinstance(value, list):
        return [localize_contexts(item) for item in value]
    if isinstance(value, dict):
        localized = {}
        for key, item in value.items():
            if key == "@import":
                continue
            if key == "@context":
                localized[key] = _localize_context(item)
            else:
                localized[key] = localize_contexts(item)
        return localized
    return value


def _localize_context(context: Any) -> Any:
    if isinstance(context, str):
        return WEBID_CONTEXT
    if isinstance(context, list):
        return [_localize_context(item) for item in context]
    return localize_contexts(context)


def parse_json_ld(document: Document) -> Graph:
    """Parse a JSON-LD document with the WebID default context.

    Raises:
        ResolutionException: GraphParseError with the parser's message
    """
    graph = Graph()
    try:
        graph.parse(
            data=json.dumps(localize_contexts(json.loads(document.body))),
            format="json-ld",
            publicID=document.url,
            context=WEBID_CONTEXT,
        )
    except Exception as e:
        raise ResolutionException.graph_parse_error(f"JSON-LD: {e}") from e
    return graph


def load_graph(document: Document, allow_json_ld: bool = False) -> Graph:
    """Load a document into a graph.

    Args:
        document: The fetched document
        allow_json_ld: Permit the JSON-LD path, for WebID documents only

    Raises:
        ResolutionException: GraphParseError if no parser accepts the document
    """
    try:
        return parse_turtle(document)
    except ResolutionException:
        if not (allow_json_ld and document.content_type == JSON_LD):
            raise
    logger.debug("Turtle parsing failed for %s, parsing as JSON-LD", document.url)
    return parse_json_ld(document)
