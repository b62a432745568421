"""Effective step list resolution for cards opened from another flow."""

from __future__ import annotations

import logging

from .interface import DataService
from .models import Card, Step

logger = logging.getLogger(__name__)


def belongs_to(card: Card, steps: list[Step]) -> bool:
    return any(s.id == card.step_id for s in steps)


class StepResolver:
    """Pick the step list that a card's position is computed against.

    The supplied list is used verbatim when it contains the card's step.
    Otherwise the card's own flow is fetched from the data service; until that
    fetch has produced steps the supplied list is used, so callers never block.
    Fetched flows are cached for the lifetime of the resolver.
    """

    def __init__(self, service: DataService):
        self._service = service
        self._flows: dict[str, list[Step]] = {}

    def needs_other_flow(self, card: Card | None, steps: list[Step]) -> bool:
        return card is not None and bool(card.flow_id) and not belongs_to(card, steps)

    def effective_steps(self, card: Card | None, steps: list[Step]) -> list[Step]:
        if not self.needs_other_flow(card, steps):
            return steps
        fetched = self._flows.get(card.flow_id)
        return fetched if fetched else steps

    async def resolve(self, card: Card | None, steps: list[Step]) -> list[Step]:
        if self.needs_other_flow(card, steps) and card.flow_id not in self._flows:
            try:
                self._flows[card.flow_id] = await self._service.fetch_steps_for_flow(card.flow_id)
                logger.debug(
                    "Resolved %d steps of flow %s for card %s",
                    len(self._flows[card.flow_id]), card.flow_id, card.id,
                )
            except Exception:
                logger.warning(
                    "Could not fetch steps of flow %s; using the supplied steps",
                    card.flow_id, exc_info=True,
                )
        return self.effective_steps(card, steps)
