"""Side effects of moving a card, defined as data."""

from __future__ import annotations

from typing import Any

from .models import ActionType, Card, CardStatus, Step, StepType

STEP_TYPE_STATUS: dict[StepType, CardStatus] = {
    StepType.NORMAL: CardStatus.IN_PROGRESS,
    StepType.FREEZING: CardStatus.IN_PROGRESS,   # frozen, still open
    StepType.FINISHER: CardStatus.COMPLETED,
    StepType.FAIL: CardStatus.CANCELED,
}

CLOSE_ACTION_STATUS: dict[ActionType, CardStatus] = {
    ActionType.COMPLETE: CardStatus.COMPLETED,
    ActionType.CANCEL: CardStatus.CANCELED,
}


def status_for_step(step: Step) -> CardStatus:
    return STEP_TYPE_STATUS[step.step_type]


def status_for_action(action: ActionType) -> CardStatus:
    if action not in CLOSE_ACTION_STATUS:
        raise ValueError(f"Not a closing action: {action.value}")
    return CLOSE_ACTION_STATUS[action]


def default_assignment(card: Card, target: Step) -> dict[str, Any]:
    """Card attribute updates applied when ``card`` enters ``target``.

    A step's responsible user takes over the card and joins its agents; failing
    that, a responsible team takes over. Staying on the same step changes nothing.
    """
    if card.step_id == target.id:
        return {}
    if target.responsible_user_id:
        updates: dict[str, Any] = {
            "assigned_to": target.responsible_user_id,
            "assigned_team_id": None,
        }
        if target.responsible_user_id not in card.agents:
            updates["agents"] = [*card.agents, target.responsible_user_id]
        return updates
    if target.responsible_team_id:
        return {"assigned_team_id": target.responsible_team_id, "assigned_to": None}
    return {}
