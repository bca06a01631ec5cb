"""Profile extraction.

Walks a parsed graph and produces the attribute set of a profile. Lookups are by
predicate on any subject, taking the first match in document order.

The two document kinds link accounts differently, so there are two link strategies:

- ADP documents use one predicate per service (`adp:hasGithubAccount "octocat"`);
  `predicate_links` looks each service's predicate up and prepends its URL prefix.
- WebID documents use generic `foaf:account` references to full profile URLs;
  `account_links` matches each service's URL prefix against those URLs.

Extraction never raises. Absent attributes are represented as None.
"""

from typing import Iterator, List, Optional
from urllib.parse import urlparse

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.namespace import FOAF
from rdflib.term import Node

from webcivics.webcard.model.profile import (
    NO_NAME_FOUND,
    SOURCE_PRIMARY,
    SOURCE_SECONDARY,
    Profile,
    SecondaryProfile,
    SocialLink,
)
from webcivics.webcard.model.services import ServiceTable
from webcivics.webcard.resolve.vocabulary import ADP, LDP, VCARD, expand

GENERIC_PAGE = "generic-page"


def _objects(graph: Graph, predicate: URIRef) -> Iterator[Node]:
    return graph.objects(None, predicate)


def first_value(graph: Graph, predicate: URIRef) -> Optional[str]:
    """Lexical value of the first object of `predicate`, literal or reference."""
    for obj in _objects(graph, predicate):
        if isinstance(obj, (Literal, URIRef)):
            return str(obj)
    return None


def first_reference(graph: Graph, predicate: URIRef) -> Optional[str]:
    """First IRI object of `predicate`; literals are skipped."""
    for obj in _objects(graph, predicate):
        if isinstance(obj, URIRef):
            return str(obj)
    return None


def first_email(graph: Graph) -> Optional[str]:
    """vCard email as a plain address.

    Accepts a literal, a `mailto:` IRI, or a node carrying `vcard:value`.
    """
    for obj in _objects(graph, VCARD["hasEmail"]):
        if isinstance(obj, BNode):
            obj = graph.value(obj, VCARD["value"])
            if obj is None:
                continue
        value = str(obj)
        if value:
            return value.removeprefix("mailto:")
    return None


def page_label(uri: str) -> str:
    try:
        hostname = urlparse(uri).hostname
    except ValueError:
        return uri
    return hostname or uri


def predicate_links(graph: Graph, services: ServiceTable) -> List[SocialLink]:
    """Social links of an ADP document, one per service with a value, in table order."""
    links = []
    for service in services:
        account = first_value(graph, service.predicate_uri)
        if account:
            links.append(
                SocialLink(
                    name=service.name,
                    url=f"{service.url_prefix}{account}",
                    icon=service.icon,
                    predicate=service.predicate,
                    source=SOURCE_PRIMARY,
                )
            )
    return links


def generic_page_links(graph: Graph) -> List[SocialLink]:
    """Links for every `foaf:page` reference, labelled by host."""
    return [
        SocialLink(
            name=page_label(str(page)),
            url=str(page),
            predicate=GENERIC_PAGE,
            source=SOURCE_PRIMARY,
        )
        for page in _objects(graph, FOAF.page)
        if isinstance(page, URIRef)
    ]


def account_links(graph: Graph, services: ServiceTable) -> List[SocialLink]:
    """Social links of a WebID document.

    A `foaf:account` IRI belongs to a service when it contains the service's URL prefix.
    The account name is the last path segment of the IRI.
    """
    accounts = [
        str(account)
        for account in _objects(graph, FOAF.account)
        if isinstance(account, URIRef)
    ]
    links = []
    for service in services:
        for account in accounts:
            if service.url_prefix not in account:
                continue
            account_name = account.rstrip("/").rsplit("/", 1)[-1]
            links.append(
                SocialLink(
                    name=service.name,
                    url=f"{service.url_prefix}{account_name}",
                    icon=service.icon,
                    predicate=service.predicate,
                    source=SOURCE_SECONDARY,
                )
            )
    return links


def is_known_field_prefix(field_spec: str) -> bool:
    """Whether a `prefix:property` name can be looked up at all."""
    return expand(field_spec) is not None


def requested_field_value(graph: Graph, field_spec: str) -> Optional[str]:
    """Value of a single `prefix:property` field, or None.

    Unknown prefixes yield None as well; use `is_known_field_prefix` to tell the two
    cases apart.
    """
    predicate = expand(field_spec)
    if predicate is None:
        return None
    return first_value(graph, predicate)


def extract_profile(
    graph: Graph,
    services: ServiceTable,
    raw_document: str = "",
    requested_field: Optional[str] = None,
) -> Profile:
    """Extract the profile of an ADP document."""
    return Profile(
        name=first_value(graph, FOAF.name) or NO_NAME_FOUND,
        image=first_reference(graph, FOAF.img),
        payment_address=first_value(graph, ADP["hasEcashAccount"]),
        secondary_endpoint=first_reference(graph, ADP["hasWebID"]),
        social_links=predicate_links(graph, services) + generic_page_links(graph),
        raw_document=raw_document,
        requested_field=(
            requested_field_value(graph, requested_field)
            if requested_field
            else None
        ),
    )


def extract_secondary_profile(
    graph: Graph, endpoint: str, services: ServiceTable
) -> SecondaryProfile:
    """Extract the profile of a WebID document fetched from `endpoint`."""
    return SecondaryProfile(
        endpoint=endpoint,
        name=first_value(graph, FOAF.name) or None,
        email=first_email(graph),
        homepage=first_reference(graph, FOAF.homepage),
        inbox=first_reference(graph, LDP["inbox"]),
        social_links=account_links(graph, services),
    )
