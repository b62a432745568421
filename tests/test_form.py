"""Tests for form hydration and write-back."""

from datetime import datetime, timezone

from src.pipeline.form import (
    CardFormValues,
    apply_form,
    blank_to_none,
    checklist_summary,
    hydrate_form,
)
from src.pipeline.models import AssigneeType, Card, Field, FieldType, Step

CREATED_AT = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)


def _card(**kwargs):
    return Card("c-1", "sales", "s-lead", "ACME", CREATED_AT, **kwargs)


class TestBlankToNone:
    def test_blank_strings(self):
        assert blank_to_none("") is None
        assert blank_to_none("   ") is None

    def test_values_kept(self):
        assert blank_to_none("u-1") == "u-1"
        assert blank_to_none(0) == 0
        assert blank_to_none(None) is None


class TestHydrate:
    def test_no_card(self):
        assert hydrate_form(None, None) == CardFormValues()

    def test_generic_fields_copied(self, sales_steps):
        form = hydrate_form(_card(field_values={"f-company": "ACME Ltd"}), sales_steps[0])
        assert form.title == "ACME"
        assert form.fields == {"f-company": "ACME Ltd"}

    def test_reserved_slugs_lifted(self, sales_steps):
        card = _card(field_values={"assigned_to": "u-2", "f-company": "ACME"})
        form = hydrate_form(card, sales_steps[0])
        assert form.assigned_to == "u-2"
        assert form.assignee_type is AssigneeType.USER
        assert "assigned_to" not in form.fields

    def test_step_declared_assignee_field_lifted(self, sales_steps):
        card = _card(field_values={"f-owner": "u-3"})
        form = hydrate_form(card, sales_steps[0])
        assert form.assigned_to == "u-3"
        assert "f-owner" not in form.fields

    def test_blank_team_slug_is_none(self, sales_steps):
        card = _card(field_values={"assigned_team_id": ""})
        form = hydrate_form(card, sales_steps[0])
        assert form.assigned_team_id is None
        assert "assigned_team_id" not in form.fields

    def test_blank_slug_does_not_override_card_attribute(self, sales_steps):
        card = _card(assigned_to="u-1", field_values={"assigned_to": "  "})
        assert hydrate_form(card, sales_steps[0]).assigned_to == "u-1"

    def test_team_only_sets_team_type(self, sales_steps):
        form = hydrate_form(_card(assigned_team_id="t-1"), sales_steps[0])
        assert form.assignee_type is AssigneeType.TEAM
        assert form.assigned_to is None

    def test_unassigned_defaults_to_user_type(self, sales_steps):
        assert hydrate_form(_card(), sales_steps[0]).assignee_type is AssigneeType.USER

    def test_agents_come_from_card(self, sales_steps):
        card = _card(agents=["u-1", "u-2", "u-1"], field_values={"agents": ["u-9"]})
        form = hydrate_form(card, sales_steps[0])
        assert form.agents == ["u-1", "u-2"]
        assert "agents" not in form.fields

    def test_zero_value_kept(self, sales_steps):
        form = hydrate_form(_card(value=0), sales_steps[0])
        assert form.value == 0.0

    def test_hydrated_form_is_a_copy(self, sales_steps):
        card = _card(checklist_progress={"f-docs": {"Contract": True}})
        form = hydrate_form(card, sales_steps[1])
        form.set_checklist_item("f-docs", "ID", True)
        assert card.checklist_progress == {"f-docs": {"Contract": True}}


class TestApplyForm:
    def test_title_trimmed(self):
        values = CardFormValues(title="  New title ")
        assert apply_form(_card(), values).title == "New title"

    def test_system_keys_dropped(self, sales_steps):
        values = CardFormValues(
            title="ACME",
            fields={"assigned_to": "u-1", "f-owner": "u-1", "f-company": "ACME"},
            assigned_to="u-1",
        )
        card = apply_form(_card(), values, sales_steps[0])
        assert card.field_values == {"f-company": "ACME"}
        assert card.assigned_to == "u-1"

    def test_round_trip_never_duplicates_system_values(self, sales_steps):
        card = _card(
            assigned_to="u-1",
            agents=["u-1"],
            field_values={
                "assigned_team_id": "t-1",
                "f-owner": "u-1",
                "agents": ["u-1"],
                "f-company": "ACME",
            },
        )
        step = sales_steps[0]
        first = apply_form(card, hydrate_form(card, step), step)
        second = apply_form(first, hydrate_form(first, step), step)
        assert first.field_values == {"f-company": "ACME"}
        assert second.field_values == first.field_values
        assert second.agents == ["u-1"]

    def test_blank_assignee_written_as_none(self):
        values = CardFormValues(title="ACME", assigned_to=" ")
        assert apply_form(_card(assigned_to="u-1"), values).assigned_to is None

    def test_input_card_untouched(self):
        card = _card(field_values={"f-company": "Old"})
        apply_form(card, CardFormValues(title="ACME", fields={"f-company": "New"}))
        assert card.field_values == {"f-company": "Old"}


class TestFormValues:
    def test_assign_user_clears_team(self):
        values = CardFormValues(assigned_team_id="t-1")
        values.assign_user("u-1")
        assert values.assigned_team_id is None
        assert values.assignee_type is AssigneeType.USER

    def test_assign_team_clears_user(self):
        values = CardFormValues(assigned_to="u-1")
        values.assign_team("t-1")
        assert values.assigned_to is None
        assert values.assignee_type is AssigneeType.TEAM

    def test_set_agents_deduplicates(self):
        values = CardFormValues()
        values.set_agents(["u-1", "", "u-2", "u-1"])
        assert values.agents == ["u-1", "u-2"]

    def test_copy_is_deep(self):
        values = CardFormValues(fields={"f": ["a"]})
        clone = values.copy()
        clone.fields["f"].append("b")
        assert values.fields == {"f": ["a"]}

    def test_checklist_summary(self):
        fld = Field("f-docs", "Docs", FieldType.CHECKLIST, configuration={"items": ["A", "B"]})
        values = CardFormValues(checklist={"f-docs": {"A": True}})
        assert checklist_summary(fld, values) == "1 of 2 items done"

    def test_step_without_fields(self):
        form = hydrate_form(_card(field_values={"x": 1}), Step("s-lead", "sales", 1, "Lead"))
        assert form.fields == {"x": 1}
