"""Movement timeline reconstruction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .models import ActionType, Card, MovementDirection, MovementHistoryEntry, Step
from .position import order_steps

TERMINAL_ACTIONS = frozenset({ActionType.COMPLETE, ActionType.CANCEL})


@dataclass(frozen=True)
class TimelineEntry:
    entry: MovementHistoryEntry
    step: Step
    direction: MovementDirection = MovementDirection.FORWARD
    synthesized: bool = False

    @property
    def is_backward(self) -> bool:
        return self.direction is MovementDirection.BACKWARD

    @property
    def is_terminal_action(self) -> bool:
        return self.entry.action_type in TERMINAL_ACTIONS

    @property
    def title(self) -> str:
        return self.entry.to_step_title or self.step.title


def filter_history(
    entries: list[MovementHistoryEntry], current_step_id: str
) -> list[MovementHistoryEntry]:
    """Drop entries without a destination, and moves into the current step.

    Complete and cancel actions are kept even on the current step.
    """
    kept = []
    for entry in entries:
        if not entry.to_step_id:
            continue
        if entry.action_type in TERMINAL_ACTIONS or entry.to_step_id != current_step_id:
            kept.append(entry)
    return kept


def synthesize_history(card: Card, steps: list[Step], current_step: Step) -> list[TimelineEntry]:
    """One pseudo-entry per step before the current one, stamped at creation.

    This approximates a card that walked every earlier step; it cannot tell a
    card that skipped steps from one that visited them all.
    """
    return [
        TimelineEntry(
            entry=MovementHistoryEntry(
                id=f"{card.id}-{step.id}-fallback",
                to_step_id=step.id,
                moved_at=card.created_at,
            ),
            step=step,
            synthesized=True,
        )
        for step in order_steps(steps)
        if step.position < current_step.position
    ]


def _current_position(step_id: str | None, steps_by_id: dict[str, Step]) -> int | None:
    step = steps_by_id.get(step_id) if step_id else None
    return step.position if step else None


def movement_direction(
    entry: MovementHistoryEntry, steps_by_id: dict[str, Step]
) -> MovementDirection:
    """Explicit direction tag first, then positions recorded at move time,
    then the positions of the steps as they are now.

    Recorded positions are only used as a pair; a half-recorded entry is
    compared entirely on the current layout.
    """
    if entry.movement_direction is not None:
        return entry.movement_direction
    if entry.from_step_id is None:
        return MovementDirection.FORWARD
    if entry.from_step_position is not None and entry.to_step_position is not None:
        from_pos, to_pos = entry.from_step_position, entry.to_step_position
    else:
        from_pos = _current_position(entry.from_step_id, steps_by_id)
        to_pos = _current_position(entry.to_step_id, steps_by_id)
    if from_pos is None or to_pos is None:
        return MovementDirection.FORWARD
    if to_pos < from_pos:
        return MovementDirection.BACKWARD
    if to_pos == from_pos:
        return MovementDirection.SAME
    return MovementDirection.FORWARD


def build_timeline(
    entries: list[MovementHistoryEntry],
    card: Card | None,
    steps: list[Step],
    current_step: Step | None,
) -> list[TimelineEntry]:
    """Display-ready timeline in source order (oldest first)."""
    if card is None or current_step is None:
        return []

    history = filter_history(entries, card.step_id)
    if not history:
        return synthesize_history(card, steps, current_step)

    steps_by_id = {s.id: s for s in steps}
    return [
        TimelineEntry(
            entry=entry,
            step=steps_by_id[entry.to_step_id],
            direction=movement_direction(entry, steps_by_id),
        )
        for entry in history
        if entry.to_step_id in steps_by_id
    ]


def last_history_update(timeline: list[TimelineEntry]) -> datetime | None:
    if not timeline:
        return None
    return timeline[-1].entry.moved_at


def format_last_update(moment: datetime | None, fmt: str = "%d/%m") -> str | None:
    return moment.strftime(fmt) if moment else None
