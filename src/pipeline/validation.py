"""Required-field gate for forward transitions.

Only forward moves are gated. A step without required fields never blocks.
Rules per value: checklist needs every configured item checked, numbers count
as filled (0 included), strings must be non-blank after trimming, anything
else must be truthy. Assignee, team and agents fields are checked against their
dedicated slots in the form rather than the generic field map.
"""

from __future__ import annotations

from .classifier import FieldClassification, FieldRole, classify_step_fields
from .config import DEFAULT_CONFIG, EngineConfig
from .exceptions import RequiredFieldsMissingError
from .form import CardFormValues
from .identifiers import validate_identifier
from .models import Field, Step
from .values import ChecklistValue, TextValue, field_value

INVALID_IDENTIFIER = "Invalid CPF/CNPJ"


def _identifier_is_invalid(fld: Field, values: CardFormValues) -> bool:
    value = field_value(fld, values.fields.get(fld.id))
    if not isinstance(value, TextValue) or not value.is_filled:
        return False
    return not validate_identifier(value.text, fld.identifier_kind)


def is_field_satisfied(
    fld: Field, classification: FieldClassification, values: CardFormValues
) -> bool:
    if classification.role is FieldRole.AGENTS:
        return bool(values.agents)
    if classification.role is FieldRole.ASSIGNEE_USER:
        return bool(values.assigned_to)
    if classification.role is FieldRole.ASSIGNEE_TEAM:
        return bool(values.assigned_team_id)

    value = field_value(fld, values.fields.get(fld.id), values.checklist)
    if value is None or not value.is_filled:
        return False
    if fld.is_identifier and _identifier_is_invalid(fld, values):
        return False
    return True


def missing_required_fields(
    step: Step | None,
    values: CardFormValues,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[Field]:
    return [
        fld
        for fld, cls in classify_step_fields(step, config)
        if fld.is_required and not is_field_satisfied(fld, cls, values)
    ]


def is_move_disabled(
    current_step: Step | None,
    next_step: Step | None,
    values: CardFormValues,
    config: EngineConfig = DEFAULT_CONFIG,
) -> bool:
    """True when there is nowhere to advance to or a required field is unmet."""
    if current_step is None or next_step is None:
        return True
    return bool(missing_required_fields(current_step, values, config))


def missing_labels(
    step: Step | None,
    values: CardFormValues,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[str]:
    labels = []
    for fld in missing_required_fields(step, values, config):
        value = field_value(fld, values.fields.get(fld.id), values.checklist)
        if isinstance(value, ChecklistValue):
            labels.append(f"{fld.label} (incomplete checklist)")
        elif fld.is_identifier and _identifier_is_invalid(fld, values):
            labels.append(f"{fld.label} ({INVALID_IDENTIFIER})")
        else:
            labels.append(fld.label)
    return labels


def ensure_can_advance(
    card_id: str,
    step: Step | None,
    values: CardFormValues,
    config: EngineConfig = DEFAULT_CONFIG,
) -> None:
    """Raise RequiredFieldsMissingError naming every unmet requirement."""
    labels = missing_labels(step, values, config)
    if labels:
        raise RequiredFieldsMissingError(card_id, labels)


def advisory_message(
    step: Step | None,
    values: CardFormValues,
    config: EngineConfig = DEFAULT_CONFIG,
) -> str | None:
    labels = missing_labels(step, values, config)
    if not labels:
        return None
    return "Complete the required fields before advancing: " + ", ".join(labels)


def identifier_errors(step: Step | None, values: CardFormValues) -> dict[str, str]:
    """Field-level tax-id errors. These never block saving."""
    if step is None:
        return {}
    return {
        fld.id: INVALID_IDENTIFIER
        for fld in step.fields
        if fld.is_identifier and _identifier_is_invalid(fld, values)
    }
