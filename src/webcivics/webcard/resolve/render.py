"""Machine-readable views of a resolved profile.

A caller may ask for a single field (`foaf:name`) instead of the whole profile, as
JSON or as a one-triple Turtle document, or for just the payment address.
"""

import json
from typing import Optional

from webcivics.webcard.model.profile import Profile

FORMAT_JSON = "json"
FORMAT_TURTLE = "turtle"


def output_format(value: Optional[str]) -> str:
    """Normalize a format selector; anything other than turtle means JSON."""
    if value is not None and value.strip().lower() == FORMAT_TURTLE:
        return FORMAT_TURTLE
    return FORMAT_JSON


def _turtle_string(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def render_field(field_spec: str, value: Optional[str], fmt: str = FORMAT_JSON) -> str:
    """Render one field.

    JSON: `{"<field_spec>": value}` with null when absent.
    Turtle: `<#this> <field_spec> "value" .` with an empty string when absent.
    """
    if output_format(fmt) == FORMAT_TURTLE:
        return f"<#this> {field_spec} {_turtle_string(value or '')} ."
    return json.dumps({field_spec: value or None})


def render_payment_address(profile: Profile) -> str:
    return json.dumps({"eCashAddress": profile.payment_address or None})
