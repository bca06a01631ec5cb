"""Service descriptor table.

Maps ADP account predicates to the external service they link to. The table is data,
loaded once at startup, so adding a service never changes extraction code.
"""

import logging
from typing import List, Optional, Sequence
from pydantic import BaseModel, TypeAdapter
from rdflib import URIRef

from webcivics.webcard.resolve.vocabulary import expand

logger = logging.getLogger(__name__)


class ServiceDescriptor(BaseModel):
    """An external service an agent can link an account on.

    Attributes:
        predicate: Compact ADP predicate, such as `adp:hasGithubAccount`
        name: Display name of the service
        url_prefix: Prefix that turns an account name into a profile URL
        icon: URL of the service icon
    """

    model_config = {"frozen": True}

    predicate: str
    name: str
    url_prefix: str
    icon: Optional[str] = None

    @property
    def predicate_uri(self) -> URIRef:
        uri = expand(self.predicate)
        if uri is None:
            raise ValueError(f"Unknown prefix in service predicate {self.predicate}")
        return uri


ServiceTable = Sequence[ServiceDescriptor]

DEFAULT_SERVICES: ServiceTable = (
    ServiceDescriptor(
        predicate="adp:hasTwitterAccount",
        name="Twitter",
        url_prefix="https://twitter.com/",
        icon="https://abs.twimg.com/favicons/twitter.2.ico",
    ),
    ServiceDescriptor(
        predicate="adp:hasLinkedinAccount",
        name="LinkedIn",
        url_prefix="https://www.linkedin.com/in/",
        icon="https://static.licdn.com/sc/h/akt4ae504epriuy69fpx4cw0a",
    ),
    ServiceDescriptor(
        predicate="adp:hasGithubAccount",
        name="GitHub",
        url_prefix="https://github.com/",
        icon="https://github.com/favicon.ico",
    ),
)

_service_list = TypeAdapter(List[ServiceDescriptor])


def validate_service_table(services: Sequence[ServiceDescriptor]) -> ServiceTable:
    """Check that predicates are unique and expandable, preserving order."""
    seen = set()
    for service in services:
        if service.predicate in seen:
            raise ValueError(f"Duplicate service predicate {service.predicate}")
        seen.add(service.predicate)
        _ = service.predicate_uri
    return tuple(services)


def load_service_table(path: Optional[str] = None) -> ServiceTable:
    """Load the service table from a JSON file, or return the built-in table.

    The file holds a JSON array of objects with `predicate`, `name`, `url_prefix` and
    `icon` keys. Order in the file is the order links are reported in.
    """
    if path is None:
        return DEFAULT_SERVICES

    with open(path) as fd:
        services = _service_list.validate_json(fd.read())
    logger.info("Loaded %d service descriptors from %s", len(services), path)
    return validate_service_table(services)
