"""Profile reconciliation.

Merges the ADP profile and the WebID profile into a fixed, ordered list of fields.
A field conflicts when both sources have a value and the values differ. Fields neither
source has are dropped.
"""

from typing import List, Optional

from webcivics.webcard.model.profile import (
    SOURCE_PRIMARY,
    SOURCE_SECONDARY,
    MergedField,
    Profile,
    SecondaryProfile,
    SocialLink,
)
from webcivics.webcard.model.services import ServiceTable
from webcivics.webcard.resolve.extract import GENERIC_PAGE


def merge_field(
    field_name: str,
    primary_value: Optional[str],
    secondary_value: Optional[str],
    predicate: str,
    icon: Optional[str] = None,
) -> MergedField:
    return MergedField(
        field_name=field_name,
        primary_value=primary_value or None,
        secondary_value=secondary_value or None,
        predicate=predicate,
        icon=icon,
        has_conflict=bool(primary_value)
        and bool(secondary_value)
        and primary_value != secondary_value,
    )


def _find_link(
    links: List[SocialLink], predicate: str, source: str
) -> Optional[SocialLink]:
    return next(
        (
            link
            for link in links
            if link.predicate == predicate and link.source == source
        ),
        None,
    )


def merge_profiles(
    profile: Profile,
    secondary: Optional[SecondaryProfile],
    services: ServiceTable,
) -> List[MergedField]:
    """Merge both profiles field by field.

    Field order: name, one row per configured service in table order, payment address,
    WebID, email, homepage.
    """
    secondary_links = secondary.social_links if secondary is not None else []

    fields = [
        merge_field(
            "Name",
            profile.name,
            secondary.name if secondary is not None else None,
            "foaf:name",
        )
    ]

    for service in services:
        primary_link = _find_link(profile.social_links, service.predicate, SOURCE_PRIMARY)
        secondary_link = _find_link(
            secondary_links, service.predicate, SOURCE_SECONDARY
        )
        fields.append(
            merge_field(
                service.name,
                primary_link.url if primary_link is not None else None,
                secondary_link.url if secondary_link is not None else None,
                service.predicate,
                icon=service.icon,
            )
        )

    homepage = next(
        (link.url for link in profile.social_links if link.predicate == GENERIC_PAGE),
        None,
    )

    fields.extend(
        [
            merge_field(
                "eCash Address", profile.payment_address, None, "adp:hasEcashAccount"
            ),
            merge_field(
                "WebID",
                profile.secondary_endpoint,
                secondary.endpoint if secondary is not None else None,
                "adp:hasWebID",
            ),
            merge_field(
                "Email",
                None,
                secondary.email if secondary is not None else None,
                "vcard:hasEmail",
            ),
            merge_field(
                "Homepage",
                homepage,
                secondary.homepage if secondary is not None else None,
                "foaf:homepage",
            ),
        ]
    )

    return [
        field
        for field in fields
        if field.primary_value is not None or field.secondary_value is not None
    ]
