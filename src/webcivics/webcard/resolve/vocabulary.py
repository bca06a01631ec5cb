"""RDF vocabularies used by ADP and WebID documents."""

from typing import Dict, Optional
from rdflib import Namespace, URIRef
from rdflib.namespace import FOAF

ADP = Namespace("https://webcivics.github.io/adp/ontdev/adp#")
SCHEMA = Namespace("https://schema.org/")
VCARD = Namespace("http://www.w3.org/2006/vcard/ns#")
LDP = Namespace("http://www.w3.org/ns/ldp#")
ACL = Namespace("http://www.w3.org/ns/auth/acl#")

# Prefixes a caller may use when asking for a single field.
FIELD_PREFIXES: Dict[str, Namespace] = {
    "adp": ADP,
    "foaf": Namespace(str(FOAF)),
    "schema": SCHEMA,
    "vcard": VCARD,
}


def expand(compact: str) -> Optional[URIRef]:
    """Expand a `prefix:property` name using the field prefix table.

    Returns None for names without a colon or with an unknown prefix.
    """
    prefix, sep, local = compact.partition(":")
    if not sep or not local:
        return None
    namespace = FIELD_PREFIXES.get(prefix)
    if namespace is None:
        return None
    return namespace[local]
