"""Frozen / read-only derivation for an open card."""

from __future__ import annotations

from dataclasses import dataclass

from .models import Card, Step, StepType


@dataclass(frozen=True)
class AccessState:
    frozen: bool = False
    read_only: bool = False

    @property
    def disabled(self) -> bool:
        """Gates editing, assignment, save, moves and delete. Views stay visible."""
        return self.frozen or self.read_only


def derive_access(
    card: Card | None,
    current_step: Step | None,
    open_flow_id: str | None = None,
) -> AccessState:
    if card is None:
        return AccessState()
    frozen = current_step is not None and current_step.step_type is StepType.FREEZING
    read_only = bool(open_flow_id) and card.flow_id != open_flow_id
    return AccessState(frozen=frozen, read_only=read_only)
