from .models import (
    ActionType,
    Card,
    CardStatus,
    Field,
    FieldType,
    MovementHistoryEntry,
    Step,
    StepType,
)
from .form import CardFormValues
from .interface import DataService
from .session import CardEditorSession, CardView

__all__ = [
    "Card",
    "Step",
    "Field",
    "MovementHistoryEntry",
    "ActionType",
    "CardStatus",
    "FieldType",
    "StepType",
    "CardFormValues",
    "DataService",
    "CardEditorSession",
    "CardView",
]
