"""
Unit tests for the service descriptor table in webcivics.webcard.model.services
"""

import json
import pytest
from pydantic import ValidationError

from webcivics.webcard.model.services import (
    DEFAULT_SERVICES,
    ServiceDescriptor,
    load_service_table,
    validate_service_table,
)
from webcivics.webcard.resolve.vocabulary import ADP


class TestServiceDescriptor:
    """Test suite for ServiceDescriptor."""

    def test_predicate_uri(self):
        descriptor = ServiceDescriptor(
            predicate="adp:hasGithubAccount", name="GitHub", url_prefix="https://github.com/"
        )
        assert descriptor.predicate_uri == ADP["hasGithubAccount"]

    def test_unknown_prefix(self):
        descriptor = ServiceDescriptor(
            predicate="ex:hasAccount", name="Ex", url_prefix="https://ex.example/"
        )
        with pytest.raises(ValueError):
            _ = descriptor.predicate_uri

    def test_default_table_order(self):
        assert [service.name for service in DEFAULT_SERVICES] == [
            "Twitter",
            "LinkedIn",
            "GitHub",
        ]


class TestLoadServiceTable:
    """Test suite for loading the service table."""

    def test_default(self):
        assert load_service_table() == DEFAULT_SERVICES

    def test_from_file(self, tmp_path):
        path = tmp_path / "services.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "predicate": "adp:hasMastodonAccount",
                        "name": "Mastodon",
                        "url_prefix": "https://mastodon.social/@",
                    },
                    {
                        "predicate": "adp:hasGithubAccount",
                        "name": "GitHub",
                        "url_prefix": "https://github.com/",
                        "icon": "https://github.com/favicon.ico",
                    },
                ]
            )
        )

        table = load_service_table(str(path))

        assert [service.name for service in table] == ["Mastodon", "GitHub"]
        assert table[0].icon is None

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "services.json"
        path.write_text(json.dumps([{"name": "Missing predicate"}]))

        with pytest.raises(ValidationError):
            load_service_table(str(path))

    def test_duplicate_predicates(self):
        with pytest.raises(ValueError, match="Duplicate"):
            validate_service_table([DEFAULT_SERVICES[0], DEFAULT_SERVICES[0]])
