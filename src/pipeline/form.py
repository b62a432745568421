"""Card editing buffer and its hydration from / write-back to a Card."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Any

from .classifier import FieldRole, classify_step_fields, is_system_slug
from .config import DEFAULT_CONFIG, EngineConfig
from .models import AssigneeType, Card, Field, Step


def blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


@dataclass
class CardFormValues:
    title: str = ""
    fields: dict[str, Any] = field(default_factory=dict)
    checklist: dict[str, dict[str, bool]] = field(default_factory=dict)
    assigned_to: str | None = None
    assigned_team_id: str | None = None
    assignee_type: AssigneeType = AssigneeType.USER
    agents: list[str] = field(default_factory=list)
    product: str | None = None
    value: float | None = None

    def copy(self) -> CardFormValues:
        return copy.deepcopy(self)

    def set_field(self, field_id: str, value: Any) -> None:
        self.fields[field_id] = value

    def set_checklist_item(self, field_id: str, item: str, checked: bool) -> None:
        self.checklist.setdefault(field_id, {})[item] = bool(checked)

    def assign_user(self, user_id: str | None) -> None:
        self.assigned_to = blank_to_none(user_id)
        self.assigned_team_id = None
        self.assignee_type = AssigneeType.USER

    def assign_team(self, team_id: str | None) -> None:
        self.assigned_team_id = blank_to_none(team_id)
        self.assigned_to = None
        self.assignee_type = AssigneeType.TEAM

    def set_agents(self, agent_ids: list[str]) -> None:
        self.agents = list(dict.fromkeys(a for a in agent_ids if a))


def empty_form() -> CardFormValues:
    return CardFormValues()


def _system_field_roles(step: Step | None, config: EngineConfig) -> dict[str, FieldRole]:
    return {
        fld.id: cls.role
        for fld, cls in classify_step_fields(step, config)
        if cls.is_system
    }


def hydrate_form(
    card: Card | None,
    step: Step | None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> CardFormValues:
    """Build the editing buffer for ``card`` as seen from its current ``step``.

    Values stored under a reserved slug, or under the id of a field the current
    step declares as assignee / team / agents, are lifted into their dedicated
    slots and never appear in ``fields``. Agents always come from the card's
    own agent list.
    """
    if card is None:
        return empty_form()

    roles = _system_field_roles(step, config)
    assigned_to = blank_to_none(card.assigned_to)
    assigned_team_id = blank_to_none(card.assigned_team_id)
    generic: dict[str, Any] = {}

    for key, value in (card.field_values or {}).items():
        if is_system_slug(key, config):
            if key == config.assigned_to_slug and blank_to_none(value) is not None:
                assigned_to = value
            elif key == config.assigned_team_slug and blank_to_none(value) is not None:
                assigned_team_id = value
            continue

        role = roles.get(key)
        if role is FieldRole.ASSIGNEE_USER:
            if blank_to_none(value) is not None:
                assigned_to = value
            continue
        if role is FieldRole.ASSIGNEE_TEAM:
            if blank_to_none(value) is not None:
                assigned_team_id = value
            continue
        if role is FieldRole.AGENTS:
            continue

        generic[key] = copy.deepcopy(value)

    if assigned_to:
        assignee_type = AssigneeType.USER
    elif assigned_team_id:
        assignee_type = AssigneeType.TEAM
    else:
        assignee_type = AssigneeType.USER

    return CardFormValues(
        title=card.title,
        fields=generic,
        checklist=copy.deepcopy(card.checklist_progress or {}),
        assigned_to=assigned_to,
        assigned_team_id=assigned_team_id,
        assignee_type=assignee_type,
        agents=list(card.agents),
        product=card.product,
        value=None if card.value is None else float(card.value),
    )


def apply_form(
    card: Card,
    values: CardFormValues,
    step: Step | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> Card:
    """Return a copy of ``card`` carrying the edited values.

    System values go to their card attributes only; any system key that found
    its way into ``values.fields`` is dropped.
    """
    roles = _system_field_roles(step, config)
    field_values = {
        key: copy.deepcopy(value)
        for key, value in values.fields.items()
        if not is_system_slug(key, config) and key not in roles
    }
    return replace(
        card,
        title=values.title.strip(),
        field_values=field_values,
        checklist_progress=copy.deepcopy(values.checklist),
        assigned_to=blank_to_none(values.assigned_to),
        assigned_team_id=blank_to_none(values.assigned_team_id),
        agents=list(dict.fromkeys(values.agents)),
        product=values.product,
        value=values.value,
    )


def checklist_summary(fld: Field, values: CardFormValues) -> str:
    items = fld.checklist_items
    progress = values.checklist.get(fld.id) or {}
    done = sum(1 for item in items if progress.get(item) is True)
    return f"{done} of {len(items)} items done"
