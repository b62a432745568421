"""Typed field values.

The generic field map holds heterogeneous payloads. ``field_value`` lifts a raw
payload into one variant of a small tagged union, using the declared field type
to tell dates from free text, so callers dispatch on the variant rather than on
raw Python types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .models import Field, FieldType


@dataclass(frozen=True)
class TextValue:
    text: str

    @property
    def is_filled(self) -> bool:
        return bool(self.text.strip())


@dataclass(frozen=True)
class NumberValue:
    number: float

    @property
    def is_filled(self) -> bool:
        # 0 is a legitimate entry.
        return True


@dataclass(frozen=True)
class DateValue:
    iso: str

    @property
    def is_filled(self) -> bool:
        return bool(self.iso.strip())


@dataclass(frozen=True)
class ChecklistValue:
    items: tuple[str, ...]
    checked: dict[str, bool] = field(default_factory=dict, hash=False)

    @property
    def checked_count(self) -> int:
        return sum(1 for item in self.items if self.checked.get(item) is True)

    @property
    def is_filled(self) -> bool:
        return all(self.checked.get(item) is True for item in self.items)


@dataclass(frozen=True)
class ListValue:
    values: tuple[Any, ...]

    @property
    def is_filled(self) -> bool:
        return len(self.values) > 0


@dataclass(frozen=True)
class ObjectValue:
    raw: Any

    @property
    def is_filled(self) -> bool:
        return bool(self.raw)


FieldValue = Union[TextValue, NumberValue, DateValue, ChecklistValue, ListValue, ObjectValue]


def field_value(
    fld: Field,
    raw: Any,
    checklist: dict[str, dict[str, bool]] | None = None,
) -> FieldValue | None:
    """Return the typed value of ``fld``, or None when nothing was entered.

    Checklist state lives in the checklist progress map, not the field map,
    so checklists are read from ``checklist`` and ``raw`` is ignored.
    """
    if fld.field_type is FieldType.CHECKLIST:
        progress = (checklist or {}).get(fld.id) or {}
        return ChecklistValue(items=tuple(fld.checklist_items), checked=dict(progress))

    if raw is None:
        return None
    if isinstance(raw, bool):
        return ObjectValue(raw)
    if isinstance(raw, (int, float)):
        return NumberValue(raw)
    if isinstance(raw, str):
        if fld.field_type is FieldType.DATE:
            return DateValue(raw)
        return TextValue(raw)
    if isinstance(raw, (list, tuple, set)):
        return ListValue(tuple(raw))
    return ObjectValue(raw)
