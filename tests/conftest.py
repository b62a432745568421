"""Shared test configuration."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.adapters.memory import InMemoryDataService
from src.pipeline.models import Card, Field, FieldType, Step, StepType

CREATED_AT = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)


def pytest_addoption(parser):
    parser.addoption(
        "--run-slow", action="store_true", default=False, help="Run slow TUI tests"
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="Need --run-slow to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def sales_steps() -> list[Step]:
    """Five-step sales flow: lead, proposal, review (freezing), won, lost."""
    return [
        Step(
            id="s-lead",
            flow_id="sales",
            position=1,
            title="Lead",
            fields=[
                Field("f-company", "Company", FieldType.TEXT, is_required=True),
                Field("f-owner", "Responsável", FieldType.USER_SELECT),
                Field("f-notes", "Notes", FieldType.TEXT, configuration={"variant": "long"}),
            ],
        ),
        Step(
            id="s-proposal",
            flow_id="sales",
            position=2,
            title="Proposal",
            fields=[
                Field(
                    "f-docs",
                    "Documents",
                    FieldType.CHECKLIST,
                    is_required=True,
                    configuration={"items": ["Contract", "ID"]},
                ),
                Field("f-amount", "Amount", FieldType.NUMBER, is_required=True),
                Field("f-tax-id", "Tax id", FieldType.IDENTIFIER),
            ],
        ),
        Step(
            id="s-review",
            flow_id="sales",
            position=3,
            title="Legal review",
            step_type=StepType.FREEZING,
            responsible_team_id="t-legal",
        ),
        Step(
            id="s-won",
            flow_id="sales",
            position=4,
            title="Won",
            step_type=StepType.FINISHER,
            responsible_user_id="u-closer",
        ),
        Step(id="s-lost", flow_id="sales", position=5, title="Lost", step_type=StepType.FAIL),
    ]


@pytest.fixture
def support_steps() -> list[Step]:
    return [
        Step(id="s-open", flow_id="support", position=1, title="Open"),
        Step(id="s-solved", flow_id="support", position=2, title="Solved"),
    ]


@pytest.fixture
def service(sales_steps, support_steps) -> InMemoryDataService:
    svc = InMemoryDataService(actor="u-tester")
    svc.add_flow("sales", sales_steps, name="Sales")
    svc.add_flow("support", support_steps, name="Support")
    return svc


@pytest.fixture
def lead_card(service) -> Card:
    """A card sitting on the lead step with no recorded history."""
    return service.add_card(
        Card(
            id="c-100",
            flow_id="sales",
            step_id="s-lead",
            title="ACME",
            created_at=CREATED_AT,
            field_values={"f-company": "ACME Ltd"},
        )
    )
