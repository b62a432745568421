"""Domain models for the card pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class StepType(Enum):
    NORMAL = "normal"
    FINISHER = "finisher"
    FAIL = "fail"
    FREEZING = "freezing"


class FieldType(Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    CHECKLIST = "checklist"
    USER_SELECT = "user_select"
    IDENTIFIER = "identifier"


class ActionType(Enum):
    MOVE = "move"
    COMPLETE = "complete"
    CANCEL = "cancel"


class MovementDirection(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"
    SAME = "same"


class CardStatus(Enum):
    IN_PROGRESS = "inprogress"
    COMPLETED = "completed"
    CANCELED = "canceled"


class AssigneeType(Enum):
    USER = "user"
    TEAM = "team"
    UNASSIGNED = "unassigned"


class IdentifierKind(Enum):
    AUTO = "auto"
    CPF = "cpf"
    CNPJ = "cnpj"


class SaveStatus(Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"


@dataclass
class Field:
    id: str
    label: str
    field_type: FieldType
    slug: str | None = None
    is_required: bool = False
    position: int = 0
    configuration: dict[str, Any] = field(default_factory=dict)

    @property
    def checklist_items(self) -> list[str]:
        return list(self.configuration.get("items") or [])

    @property
    def is_long_text(self) -> bool:
        return self.configuration.get("variant") == "long"

    @property
    def is_identifier(self) -> bool:
        # Older forms declare tax-id inputs as text fields with a validation tag.
        return (
            self.field_type is FieldType.IDENTIFIER
            or self.configuration.get("validation") == "cnpj_cpf"
        )

    @property
    def identifier_kind(self) -> IdentifierKind:
        raw = self.configuration.get("identifier_kind") or self.configuration.get("cnpjCpfType")
        try:
            return IdentifierKind(raw) if raw else IdentifierKind.AUTO
        except ValueError:
            return IdentifierKind.AUTO


@dataclass
class Step:
    id: str
    flow_id: str
    position: int
    title: str
    color: str = "#2563eb"
    step_type: StepType = StepType.NORMAL
    fields: list[Field] = field(default_factory=list)
    responsible_user_id: str | None = None
    responsible_team_id: str | None = None

    @property
    def required_fields(self) -> list[Field]:
        return [f for f in self.fields if f.is_required]


@dataclass
class Card:
    id: str
    flow_id: str
    step_id: str
    title: str
    created_at: datetime
    field_values: dict[str, Any] = field(default_factory=dict)
    checklist_progress: dict[str, dict[str, bool]] = field(default_factory=dict)
    parent_card_id: str | None = None
    assigned_to: str | None = None
    assigned_team_id: str | None = None
    agents: list[str] = field(default_factory=list)
    card_type: str | None = None
    value: float | None = None
    product: str | None = None
    status: CardStatus = CardStatus.IN_PROGRESS

    def __post_init__(self) -> None:
        self.agents = list(dict.fromkeys(self.agents))


@dataclass
class MovementHistoryEntry:
    id: str
    to_step_id: str | None
    moved_at: datetime
    from_step_id: str | None = None
    moved_by: str | None = None
    action_type: ActionType = ActionType.MOVE
    from_step_title: str | None = None
    to_step_title: str | None = None
    from_step_position: int | None = None
    to_step_position: int | None = None
    movement_direction: MovementDirection | None = None
    details: dict[str, Any] = field(default_factory=dict)
