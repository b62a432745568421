"""In-memory data service for tests, the CLI and the terminal board."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone

from ..pipeline.config import DEFAULT_CONFIG, EngineConfig
from ..pipeline.form import CardFormValues, apply_form
from ..pipeline.history import movement_direction
from ..pipeline.models import ActionType, Card, MovementHistoryEntry, Step
from ..pipeline.position import order_steps
from ..pipeline.transitions import default_assignment, status_for_action, status_for_step

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryDataService:
    """DataService backed by dicts."""

    def __init__(self, actor: str | None = None, config: EngineConfig = DEFAULT_CONFIG):
        self.actor = actor
        self.config = config
        self.flow_names: dict[str, str] = {}
        self._steps: dict[str, Step] = {}
        self._cards: dict[str, Card] = {}
        self._history: dict[str, list[MovementHistoryEntry]] = {}
        self._next_card_id = 1
        self._next_entry_id = 1

    # -- Seeding --

    def add_flow(self, flow_id: str, steps: list[Step], name: str | None = None) -> None:
        self.flow_names[flow_id] = name or flow_id
        for step in steps:
            if step.flow_id != flow_id:
                raise ValueError(f"Step {step.id} belongs to flow {step.flow_id}, not {flow_id}")
            self._steps[step.id] = step

    def add_card(self, card: Card) -> Card:
        if card.step_id not in self._steps:
            raise KeyError(f"Step not found: {card.step_id}")
        self._cards[card.id] = card
        self._history.setdefault(card.id, [])
        return card

    def add_history(self, card_id: str, entry: MovementHistoryEntry) -> None:
        self._history.setdefault(card_id, []).append(entry)

    async def create_card(
        self,
        flow_id: str,
        title: str,
        step_id: str | None = None,
        **attrs,
    ) -> Card:
        steps = await self.fetch_steps_for_flow(flow_id)
        if not steps:
            raise ValueError(f"Flow {flow_id} has no steps")
        start = steps[0] if step_id is None else self._get_step(step_id)

        card_id = f"c-{self._next_card_id}"
        self._next_card_id += 1
        card = Card(
            id=card_id,
            flow_id=flow_id,
            step_id=start.id,
            title=title,
            created_at=attrs.pop("created_at", None) or _now(),
            status=status_for_step(start),
            **attrs,
        )
        self._record(card.id, None, start, ActionType.MOVE, card.created_at)
        self._cards[card_id] = card
        return card

    # -- Reads --

    def _get_step(self, step_id: str) -> Step:
        if step_id not in self._steps:
            raise KeyError(f"Step not found: {step_id}")
        return self._steps[step_id]

    async def get_card(self, card_id: str) -> Card:
        if card_id not in self._cards:
            raise KeyError(f"Card not found: {card_id}")
        return self._cards[card_id]

    async def list_cards(self, flow_id: str) -> list[Card]:
        return [c for c in self._cards.values() if c.flow_id == flow_id]

    async def fetch_steps_for_flow(self, flow_id: str) -> list[Step]:
        if flow_id not in self.flow_names:
            raise KeyError(f"Flow not found: {flow_id}")
        return order_steps([s for s in self._steps.values() if s.flow_id == flow_id])

    async def fetch_card_history(
        self, card_id: str, parent_card_id: str | None = None
    ) -> list[MovementHistoryEntry]:
        """History oldest first. Child cards read their parent's history."""
        target = parent_card_id
        if target is None:
            card = self._cards.get(card_id)
            target = card.parent_card_id if card and card.parent_card_id else card_id
        return sorted(self._history.get(target, []), key=lambda e: e.moved_at)

    # -- Writes --

    def _record(
        self,
        card_id: str,
        source: Step | None,
        target: Step,
        action: ActionType,
        moved_at: datetime | None = None,
    ) -> MovementHistoryEntry:
        entry = MovementHistoryEntry(
            id=f"h-{self._next_entry_id}",
            to_step_id=target.id,
            moved_at=moved_at or _now(),
            from_step_id=source.id if source else None,
            moved_by=self.actor,
            action_type=action,
            from_step_title=source.title if source else None,
            to_step_title=target.title,
            from_step_position=source.position if source else None,
            to_step_position=target.position,
        )
        if source is not None:
            entry = replace(entry, movement_direction=movement_direction(entry, {}))
        self._next_entry_id += 1
        self._history.setdefault(card_id, []).append(entry)
        return entry

    async def save_card(self, card: Card, values: CardFormValues) -> Card:
        stored = await self.get_card(card.id)
        step = self._steps.get(stored.step_id)
        updated = apply_form(stored, values, step, self.config)
        self._cards[card.id] = updated
        logger.debug("Stored card %s", card.id)
        return updated

    async def move_card_to_step(self, card: Card, step_id: str) -> Card:
        stored = await self.get_card(card.id)
        target = self._get_step(step_id)
        if target.flow_id != stored.flow_id:
            raise ValueError(f"Step {step_id} is not part of flow {stored.flow_id}")
        source = self._steps.get(stored.step_id)

        # History first: a card must never sit on a step without its entry.
        self._record(stored.id, source, target, ActionType.MOVE)
        updated = replace(
            stored,
            step_id=target.id,
            status=status_for_step(target),
            **default_assignment(stored, target),
        )
        self._cards[stored.id] = updated
        logger.debug("Card %s moved %s -> %s", stored.id, stored.step_id, target.id)
        return updated

    async def close_card(self, card: Card, action: ActionType) -> Card:
        status = status_for_action(action)
        stored = await self.get_card(card.id)
        step = self._get_step(stored.step_id)
        self._record(stored.id, step, step, action)
        updated = replace(stored, status=status)
        self._cards[stored.id] = updated
        return updated

    async def delete_card(self, card_id: str) -> None:
        await self.get_card(card_id)
        del self._cards[card_id]
        self._history.pop(card_id, None)
