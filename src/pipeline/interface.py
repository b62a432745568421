"""Abstract data service protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .models import ActionType, Card, MovementHistoryEntry, Step

if TYPE_CHECKING:
    from .form import CardFormValues


class DataService(Protocol):
    """Persistence boundary for cards, steps and movement history.

    ``move_card_to_step`` and ``close_card`` must record their history entry
    before, or together with, the change to the card.
    """

    async def get_card(self, card_id: str) -> Card: ...

    async def list_cards(self, flow_id: str) -> list[Card]: ...

    async def fetch_steps_for_flow(self, flow_id: str) -> list[Step]: ...

    async def fetch_card_history(
        self, card_id: str, parent_card_id: str | None = None
    ) -> list[MovementHistoryEntry]: ...

    async def save_card(self, card: Card, values: CardFormValues) -> Card: ...

    async def move_card_to_step(self, card: Card, step_id: str) -> Card: ...

    async def close_card(self, card: Card, action: ActionType) -> Card: ...

    async def delete_card(self, card_id: str) -> None: ...
