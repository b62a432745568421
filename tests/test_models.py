"""Tests for domain models and engine configuration."""

from datetime import datetime, timezone

import pytest

from src.pipeline.config import DEFAULT_CONFIG, EngineConfig
from src.pipeline.models import (
    Card,
    CardStatus,
    Field,
    FieldType,
    IdentifierKind,
    Step,
)

CREATED_AT = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)


class TestCard:
    def test_agents_deduplicated_in_order(self):
        card = Card("c-1", "f", "s", "T", CREATED_AT, agents=["u-2", "u-1", "u-2"])
        assert card.agents == ["u-2", "u-1"]

    def test_defaults(self):
        card = Card("c-1", "f", "s", "T", CREATED_AT)
        assert card.status is CardStatus.IN_PROGRESS
        assert card.field_values == {}
        assert card.parent_card_id is None


class TestField:
    def test_checklist_items(self):
        fld = Field("f", "Docs", FieldType.CHECKLIST, configuration={"items": ["A", "B"]})
        assert fld.checklist_items == ["A", "B"]
        assert Field("f", "Docs", FieldType.CHECKLIST).checklist_items == []

    def test_identifier_kind(self):
        assert Field("f", "Doc", FieldType.IDENTIFIER).identifier_kind is IdentifierKind.AUTO
        fld = Field("f", "Doc", FieldType.TEXT, configuration={"validation": "cnpj_cpf", "cnpjCpfType": "cnpj"})
        assert fld.is_identifier
        assert fld.identifier_kind is IdentifierKind.CNPJ

    def test_unknown_identifier_kind_falls_back_to_auto(self):
        fld = Field("f", "Doc", FieldType.IDENTIFIER, configuration={"identifier_kind": "rg"})
        assert fld.identifier_kind is IdentifierKind.AUTO

    def test_required_fields(self):
        step = Step(
            "s", "f", 1, "S",
            fields=[
                Field("a", "A", FieldType.TEXT, is_required=True),
                Field("b", "B", FieldType.TEXT),
            ],
        )
        assert [f.id for f in step.required_fields] == ["a"]


class TestEngineConfig:
    def test_system_slugs(self):
        assert DEFAULT_CONFIG.system_slugs == {"assigned_to", "assigned_team_id", "agents"}

    def test_from_dict_empty(self):
        assert EngineConfig.from_dict(None) == EngineConfig()

    def test_from_dict_lists_become_tuples(self):
        config = EngineConfig.from_dict({"agents_keywords": ["agents"], "saved_status_reset_seconds": 1})
        assert config.agents_keywords == ("agents",)
        assert config.saved_status_reset_seconds == 1

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match="Unknown engine settings: bogus"):
            EngineConfig.from_dict({"bogus": 1})
