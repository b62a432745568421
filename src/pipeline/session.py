"""Editing session for a single open card.

A session owns the live form buffer for one card and derives everything the
presentation layer needs (``CardView``) from committed state. Writes go
through the data service; local card state only changes after a write has
succeeded, and write failures become notifications instead of exceptions.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .access import AccessState, derive_access
from .classifier import FieldRole, classify_field, is_system_slug
from .config import DEFAULT_CONFIG, EngineConfig
from .exceptions import CardLockedError, InvalidMoveError, PipelineError
from .form import CardFormValues, empty_form, hydrate_form
from .history import TimelineEntry, build_timeline, format_last_update, last_history_update
from .identifiers import format_identifier
from .interface import DataService
from .models import ActionType, Card, Field, MovementHistoryEntry, SaveStatus, Step
from .position import StepPosition, locate_step, progress_percentage
from .resolver import StepResolver
from .validation import ensure_can_advance, identifier_errors, is_move_disabled, missing_labels

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    message: str
    severity: str = "error"


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    message: str | None = None


@dataclass(frozen=True)
class CardView:
    """Read-model rendered by the presentation layer as-is."""

    current_step: Step | None
    next_step: Step | None
    previous_step: Step | None
    progress_percentage: float
    is_frozen_card: bool
    is_read_only: bool
    is_disabled: bool
    form_values: CardFormValues
    is_move_disabled: bool
    timeline_entries: list[TimelineEntry]
    last_history_update: datetime | None
    last_history_label: str | None
    effective_steps: list[Step]
    missing_required: list[str] = field(default_factory=list)
    field_errors: dict[str, str] = field(default_factory=dict)
    save_status: SaveStatus = SaveStatus.IDLE
    is_moving: bool = False
    can_save: bool = False
    can_move_forward: bool = False
    can_move_back: bool = False
    can_delete: bool = False


class CardEditorSession:
    def __init__(
        self,
        card: Card | None,
        steps: list[Step],
        service: DataService,
        open_flow_id: str | None = None,
        config: EngineConfig = DEFAULT_CONFIG,
    ):
        self.card = card
        self.steps = list(steps)
        self.open_flow_id = open_flow_id
        self.config = config
        self.history: list[MovementHistoryEntry] = []
        self.notifications: list[Notification] = []
        self.save_status = SaveStatus.IDLE
        self.is_moving = False
        self.closed = False
        self._service = service
        self._resolver = StepResolver(service)
        self._reset_handle: asyncio.TimerHandle | None = None
        self._hydrate()

    # -- Derived state --

    @property
    def effective_steps(self) -> list[Step]:
        return self._resolver.effective_steps(self.card, self.steps)

    @property
    def position(self) -> StepPosition:
        return locate_step(self.effective_steps, self.card.step_id if self.card else None)

    @property
    def access(self) -> AccessState:
        return derive_access(self.card, self.position.current, self.open_flow_id)

    @property
    def is_dirty(self) -> bool:
        return self.form != self._initial_form

    def view(self) -> CardView:
        position = self.position
        access = self.access
        move_disabled = is_move_disabled(position.current, position.next, self.form, self.config)
        timeline = build_timeline(self.history, self.card, self.effective_steps, position.current)
        last_update = last_history_update(timeline)
        idle = (
            not self.closed
            and self.card is not None
            and position.current is not None
            and not access.disabled
        )
        busy = self._busy_message() is not None

        return CardView(
            current_step=position.current,
            next_step=position.next,
            previous_step=position.previous,
            progress_percentage=progress_percentage(
                self.steps, self.card.step_id if self.card else None
            ),
            is_frozen_card=access.frozen,
            is_read_only=access.read_only,
            is_disabled=access.disabled,
            form_values=self.form,
            is_move_disabled=move_disabled,
            timeline_entries=timeline,
            last_history_update=last_update,
            last_history_label=format_last_update(last_update, self.config.last_update_format),
            effective_steps=self.effective_steps,
            missing_required=missing_labels(position.current, self.form, self.config),
            field_errors=identifier_errors(position.current, self.form),
            save_status=self.save_status,
            is_moving=self.is_moving,
            can_save=idle and not busy,
            can_move_forward=idle and not move_disabled and not busy,
            can_move_back=idle and position.previous is not None and not busy,
            can_delete=idle,
        )

    # -- Loading --

    async def load(self) -> CardView:
        """Resolve a foreign flow if needed, fetch history and rebuild the form."""
        await self._resolver.resolve(self.card, self.steps)
        await self._load_history()
        self._hydrate()
        return self.view()

    async def _load_history(self) -> None:
        if self.card is None:
            self.history = []
            return
        try:
            self.history = await self._service.fetch_card_history(
                self.card.id, self.card.parent_card_id
            )
        except Exception:
            logger.warning("Could not load history for card %s", self.card.id, exc_info=True)
            self.history = []

    def _hydrate(self) -> None:
        self.form = hydrate_form(self.card, self.position.current, self.config)
        self._initial_form = self.form.copy()

    # -- Editing --

    def _field(self, field_id: str) -> Field | None:
        current = self.position.current
        if current is None:
            return None
        return next((f for f in current.fields if f.id == field_id), None)

    def _check_editable(self) -> None:
        if self.closed or self.card is None:
            raise InvalidMoveError(self.card.id if self.card else "?", "the editor is closed")
        access = self.access
        if access.disabled:
            raise CardLockedError(self.card.id, access.frozen, access.read_only)
        if self.position.current is None:
            raise InvalidMoveError(self.card.id, "its current step could not be resolved")

    def set_field(self, field_id: str, value: Any) -> None:
        """Set a field, routing assignee / team / agents fields to their slots."""
        self._check_editable()
        if is_system_slug(field_id, self.config):
            self._set_system_value(self._slug_roles()[field_id], value)
            return
        fld = self._field(field_id)
        if fld is None:
            self.form.set_field(field_id, value)
            return
        classification = classify_field(fld, self.config)
        if classification.is_system:
            self._set_system_value(classification.role, value)
        elif fld.is_identifier and isinstance(value, str):
            self.form.set_field(field_id, format_identifier(value, fld.identifier_kind))
        else:
            self.form.set_field(field_id, value)

    def _slug_roles(self) -> dict[str, FieldRole]:
        return {
            self.config.assigned_to_slug: FieldRole.ASSIGNEE_USER,
            self.config.assigned_team_slug: FieldRole.ASSIGNEE_TEAM,
            self.config.agents_slug: FieldRole.AGENTS,
        }

    def _set_system_value(self, role: FieldRole, value: Any) -> None:
        if role is FieldRole.ASSIGNEE_USER:
            self.form.assign_user(value)
        elif role is FieldRole.ASSIGNEE_TEAM:
            self.form.assign_team(value)
        elif isinstance(value, str):
            self.form.set_agents([value])
        else:
            self.form.set_agents(list(value or []))

    def set_title(self, title: str) -> None:
        self._check_editable()
        self.form.title = title

    def toggle_checklist_item(self, field_id: str, item: str, checked: bool | None = None) -> bool:
        self._check_editable()
        if checked is None:
            checked = not (self.form.checklist.get(field_id) or {}).get(item, False)
        self.form.set_checklist_item(field_id, item, checked)
        return checked

    def assign_user(self, user_id: str | None) -> None:
        self._check_editable()
        self.form.assign_user(user_id)

    def assign_team(self, team_id: str | None) -> None:
        self._check_editable()
        self.form.assign_team(team_id)

    def set_agents(self, agent_ids: list[str]) -> None:
        self._check_editable()
        self.form.set_agents(agent_ids)

    # -- Actions --

    def _notify(self, message: str, severity: str = "error") -> None:
        self.notifications.append(Notification(message, severity))

    def _busy_message(self) -> str | None:
        if self.is_moving:
            return "A move is already in progress"
        if self.save_status is SaveStatus.SAVING:
            return "A save is already in progress"
        return None

    def _refuse(self, exc: PipelineError) -> ActionResult:
        self._notify(str(exc), "warning")
        return ActionResult(False, str(exc))

    def _fail(self, action: str, exc: Exception) -> ActionResult:
        card_id = self.card.id if self.card else "?"
        logger.warning("%s failed for card %s: %s", action, card_id, exc, exc_info=True)
        message = f"{action} failed: {exc}"
        self._notify(message)
        return ActionResult(False, message)

    def _schedule_saved_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
        delay = self.config.saved_status_reset_seconds
        if delay <= 0:
            self.save_status = SaveStatus.IDLE
            return
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(delay, self._reset_saved_status)

    def _reset_saved_status(self) -> None:
        self._reset_handle = None
        if self.save_status is SaveStatus.SAVED:
            self.save_status = SaveStatus.IDLE

    async def save(self) -> ActionResult:
        try:
            self._check_editable()
        except PipelineError as exc:
            return self._refuse(exc)
        busy = self._busy_message()
        if busy:
            return ActionResult(False, busy)

        self.save_status = SaveStatus.SAVING
        try:
            updated = await self._service.save_card(self.card, self.form.copy())
        except Exception as exc:
            self.save_status = SaveStatus.IDLE
            return self._fail("Save", exc)

        self.card = updated
        self._hydrate()
        self.save_status = SaveStatus.SAVED
        self._schedule_saved_reset()
        logger.info("Saved card %s", updated.id)
        return ActionResult(True, "Saved")

    async def _move(self, target: Step) -> ActionResult:
        self.is_moving = True
        try:
            if self.is_dirty:
                self.card = await self._service.save_card(self.card, self.form.copy())
                self._hydrate()
            moved = await self._service.move_card_to_step(self.card, target.id)
        except Exception as exc:
            return self._fail("Move", exc)
        finally:
            self.is_moving = False

        self.card = moved
        await self._load_history()
        self._hydrate()
        logger.info("Moved card %s to step %s", moved.id, target.id)
        return ActionResult(True, f"Moved to {target.title}")

    async def move_forward(self) -> ActionResult:
        """Advance to the next step once every required field is satisfied."""
        try:
            self._check_editable()
            busy = self._busy_message()
            if busy:
                return ActionResult(False, busy)
            position = self.position
            if position.next is None:
                raise InvalidMoveError(self.card.id, "there is no next step")
            ensure_can_advance(self.card.id, position.current, self.form, self.config)
        except PipelineError as exc:
            return self._refuse(exc)
        return await self._move(position.next)

    async def move_back(self) -> ActionResult:
        """Return to the previous step. Never gated by required fields."""
        try:
            self._check_editable()
            busy = self._busy_message()
            if busy:
                return ActionResult(False, busy)
            position = self.position
            if position.previous is None:
                raise InvalidMoveError(self.card.id, "there is no previous step")
        except PipelineError as exc:
            return self._refuse(exc)
        return await self._move(position.previous)

    async def _close_card(self, action: ActionType) -> ActionResult:
        try:
            self._check_editable()
            busy = self._busy_message()
            if busy:
                return ActionResult(False, busy)
        except PipelineError as exc:
            return self._refuse(exc)

        self.is_moving = True
        try:
            closed = await self._service.close_card(self.card, action)
        except Exception as exc:
            return self._fail(action.value.capitalize(), exc)
        finally:
            self.is_moving = False

        self.card = closed
        await self._load_history()
        self._hydrate()
        logger.info("Card %s marked %s", closed.id, action.value)
        return ActionResult(True, f"Card {closed.status.value}")

    async def complete(self) -> ActionResult:
        return await self._close_card(ActionType.COMPLETE)

    async def cancel(self) -> ActionResult:
        return await self._close_card(ActionType.CANCEL)

    async def delete(self) -> ActionResult:
        try:
            self._check_editable()
        except PipelineError as exc:
            return self._refuse(exc)
        card_id = self.card.id
        try:
            await self._service.delete_card(card_id)
        except Exception as exc:
            return self._fail("Delete", exc)
        logger.info("Deleted card %s", card_id)
        self.close()
        return ActionResult(True, "Deleted")

    def close(self) -> None:
        """Discard the form buffer. In-flight writes are left to finish."""
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
        self.form = empty_form()
        self._initial_form = self.form.copy()
        self.closed = True
