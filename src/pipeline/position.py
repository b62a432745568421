"""Current / next / previous step pointers and progress."""

from __future__ import annotations

from dataclasses import dataclass

from .models import Step


@dataclass(frozen=True)
class StepPosition:
    current: Step | None
    previous: Step | None
    next: Step | None
    index: int
    total: int

    @property
    def is_resolved(self) -> bool:
        return self.current is not None


def order_steps(steps: list[Step]) -> list[Step]:
    """Steps sorted by position. Positions are compared, never offset."""
    return sorted(steps, key=lambda s: s.position)


def locate_step(steps: list[Step], step_id: str | None) -> StepPosition:
    """Find ``step_id`` in the ordered list and its neighbours.

    An unknown id yields an unresolved position with every pointer None.
    """
    ordered = order_steps(steps)
    index = next((i for i, s in enumerate(ordered) if s.id == step_id), -1)
    if index < 0:
        return StepPosition(None, None, None, -1, len(ordered))
    return StepPosition(
        current=ordered[index],
        previous=ordered[index - 1] if index > 0 else None,
        next=ordered[index + 1] if index + 1 < len(ordered) else None,
        index=index,
        total=len(ordered),
    )


def progress_percentage(steps: list[Step], step_id: str | None) -> float:
    """``(index + 1) / total * 100`` within ``steps``; 0 when not found or empty."""
    if not steps:
        return 0.0
    position = locate_step(steps, step_id)
    if not position.is_resolved:
        return 0.0
    return (position.index + 1) / position.total * 100
