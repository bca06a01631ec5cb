"""Profile data models.

Pydantic models for the values passed between resolution stages, from the content
pointer found in DNS to the merged field list handed to the presentation layer.
"""

from typing import List, Optional
from pydantic import BaseModel, Field

NO_NAME_FOUND = "No Name Found"

SOURCE_PRIMARY = "primary"
SOURCE_SECONDARY = "secondary"


class ContentPointer(BaseModel):
    """Pointer to the primary document.

    Holds the CID extracted from the `adp:signer` URI and the gateway URL it is
    fetched from.
    """

    cid: str
    signer_uri: str
    resolved_uri: str


class Document(BaseModel):
    """Raw document body with its declared media type."""

    model_config = {"frozen": True}

    url: str
    body: str
    content_type: str


class SocialLink(BaseModel):
    """A link to an account on an external service."""

    name: str
    url: str
    icon: Optional[str] = None
    predicate: str
    source: str = SOURCE_PRIMARY


class Profile(BaseModel):
    """Attributes extracted from the ADP document.

    `name` falls back to "No Name Found"; every other attribute is optional.
    """

    name: str = NO_NAME_FOUND
    image: Optional[str] = None
    payment_address: Optional[str] = None
    secondary_endpoint: Optional[str] = None
    social_links: List[SocialLink] = Field(default_factory=list)
    raw_document: str = ""
    requested_field: Optional[str] = None


class SecondaryProfile(BaseModel):
    """Attributes extracted from the WebID document.

    `endpoint` is the URI the document was fetched from. `inbox` is only used to
    send access requests.
    """

    endpoint: str
    name: Optional[str] = None
    email: Optional[str] = None
    homepage: Optional[str] = None
    inbox: Optional[str] = None
    social_links: List[SocialLink] = Field(default_factory=list)


class MergedField(BaseModel):
    """One row of the reconciled profile."""

    field_name: str
    primary_value: Optional[str] = None
    secondary_value: Optional[str] = None
    predicate: str
    icon: Optional[str] = None
    has_conflict: bool = False


MergedProfile = List[MergedField]
