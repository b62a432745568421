"""Tests for the required-field gate on forward moves."""

import pytest

from src.pipeline.exceptions import RequiredFieldsMissingError
from src.pipeline.form import CardFormValues
from src.pipeline.models import Field, FieldType, Step
from src.pipeline.validation import (
    INVALID_IDENTIFIER,
    advisory_message,
    ensure_can_advance,
    identifier_errors,
    is_move_disabled,
    missing_labels,
    missing_required_fields,
)

CHECKLIST = Field(
    "f-docs", "Documents", FieldType.CHECKLIST, is_required=True,
    configuration={"items": ["Contract", "ID"]},
)


def _flow(*fields):
    return [
        Step("s-1", "flow", 1, "One"),
        Step("s-2", "flow", 2, "Two", fields=list(fields)),
        Step("s-3", "flow", 3, "Three"),
    ]


class TestChecklistScenario:
    def test_partial_checklist_blocks_then_complete_unblocks(self):
        _, current, nxt = _flow(CHECKLIST)
        values = CardFormValues(checklist={"f-docs": {"Contract": True, "ID": False}})
        assert is_move_disabled(current, nxt, values)

        values.set_checklist_item("f-docs", "ID", True)
        assert not is_move_disabled(current, nxt, values)

    def test_label_marks_incomplete_checklist(self):
        _, current, _ = _flow(CHECKLIST)
        assert missing_labels(current, CardFormValues()) == ["Documents (incomplete checklist)"]


class TestTypeRules:
    @pytest.mark.parametrize(
        "field_type,value,satisfied",
        [
            (FieldType.NUMBER, 0, True),
            (FieldType.NUMBER, 12.5, True),
            (FieldType.TEXT, "  ", False),
            (FieldType.TEXT, " ok ", True),
            (FieldType.TEXT, None, False),
            (FieldType.DATE, "2026-02-01", True),
            (FieldType.TEXT, [], False),
            (FieldType.TEXT, ["a"], True),
            (FieldType.TEXT, False, False),
            (FieldType.TEXT, {"k": "v"}, True),
        ],
    )
    def test_value_rules(self, field_type, value, satisfied):
        fld = Field("f-x", "X", field_type, is_required=True)
        _, current, nxt = _flow(fld)
        values = CardFormValues(fields={"f-x": value})
        assert is_move_disabled(current, nxt, values) is not satisfied

    def test_optional_fields_never_block(self):
        _, current, nxt = _flow(Field("f-x", "X", FieldType.TEXT))
        assert not is_move_disabled(current, nxt, CardFormValues())

    def test_no_required_fields(self):
        _, current, nxt = _flow()
        assert not is_move_disabled(current, nxt, CardFormValues())
        assert missing_required_fields(current, CardFormValues()) == []


class TestMissingPointers:
    def test_last_step_is_disabled(self):
        *_, last = _flow()
        assert is_move_disabled(last, None, CardFormValues())

    def test_unresolved_step_is_disabled(self):
        assert is_move_disabled(None, None, CardFormValues())


class TestSystemFields:
    def test_assignee_checked_against_form_slot(self):
        owner = Field("f-owner", "Responsável", FieldType.USER_SELECT, is_required=True)
        _, current, nxt = _flow(owner)
        values = CardFormValues(fields={"f-owner": "u-1"})
        assert is_move_disabled(current, nxt, values)
        values.assign_user("u-1")
        assert not is_move_disabled(current, nxt, values)

    def test_team_and_agents(self):
        team = Field("f-team", "Time", FieldType.USER_SELECT, is_required=True)
        agents = Field("f-agents", "Agents", FieldType.USER_SELECT, slug="agents", is_required=True)
        _, current, nxt = _flow(team, agents)
        values = CardFormValues()
        assert missing_labels(current, values) == ["Time", "Agents"]
        values.assign_team("t-1")
        values.set_agents(["u-1"])
        assert not is_move_disabled(current, nxt, values)


class TestIdentifiers:
    def _step(self, required=True):
        return Step(
            "s-2", "flow", 2, "Two",
            fields=[Field("f-doc", "Tax id", FieldType.IDENTIFIER, is_required=required)],
        )

    def test_invalid_identifier_blocks(self):
        values = CardFormValues(fields={"f-doc": "529.982.247-26"})
        assert missing_labels(self._step(), values) == [f"Tax id ({INVALID_IDENTIFIER})"]

    def test_valid_identifier_passes(self):
        values = CardFormValues(fields={"f-doc": "529.982.247-25"})
        assert missing_labels(self._step(), values) == []

    def test_field_errors_for_optional_identifier(self):
        values = CardFormValues(fields={"f-doc": "123"})
        assert identifier_errors(self._step(required=False), values) == {"f-doc": INVALID_IDENTIFIER}

    def test_empty_identifier_has_no_error(self):
        assert identifier_errors(self._step(required=False), CardFormValues()) == {}
        assert identifier_errors(None, CardFormValues()) == {}


class TestEnsureCanAdvance:
    def test_raises_with_every_label(self):
        amount = Field("f-amount", "Amount", FieldType.NUMBER, is_required=True)
        _, current, _ = _flow(CHECKLIST, amount)
        with pytest.raises(RequiredFieldsMissingError) as exc_info:
            ensure_can_advance("c-1", current, CardFormValues())
        assert exc_info.value.card_id == "c-1"
        assert exc_info.value.missing_labels == ["Documents (incomplete checklist)", "Amount"]
        assert "Complete the required fields" in str(exc_info.value)

    def test_passes_when_complete(self):
        _, current, _ = _flow(Field("f-x", "X", FieldType.NUMBER, is_required=True))
        ensure_can_advance("c-1", current, CardFormValues(fields={"f-x": 0}))

    def test_advisory_message(self):
        _, current, _ = _flow(Field("f-x", "X", FieldType.TEXT, is_required=True))
        assert advisory_message(current, CardFormValues()) == (
            "Complete the required fields before advancing: X"
        )
        assert advisory_message(current, CardFormValues(fields={"f-x": "y"})) is None
