"""Seed an in-memory data service from a YAML board file.

Layout::

    settings: {...}            # optional EngineConfig overrides
    flows:
      - id: sales
        name: Sales
        steps:
          - id: lead
            title: Lead
            position: 1
            type: normal          # normal | finisher | fail | freezing
            responsible_user_id: u-1
            fields:
              - id: f-doc
                label: Tax id
                type: identifier
                required: true
                configuration: {identifier_kind: auto}
    cards:
      - id: c-1
        flow_id: sales
        step_id: lead
        title: ACME
        created_at: 2026-01-05T10:00:00Z
        field_values: {f-doc: "529.982.247-25"}
        history:
          - to_step_id: lead
            moved_at: 2026-01-05T10:00:00Z
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from ..pipeline.config import EngineConfig
from ..pipeline.exceptions import BoardFileError
from ..pipeline.models import (
    ActionType,
    Card,
    Field,
    FieldType,
    MovementDirection,
    MovementHistoryEntry,
    Step,
    StepType,
)
from .memory import InMemoryDataService

logger = logging.getLogger(__name__)


def _timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise BoardFileError(f"Invalid timestamp: {value!r}") from e
    else:
        raise BoardFileError(f"Invalid timestamp: {value!r}")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _enum(enum_cls, value: Any, default=None):
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError as e:
        raise BoardFileError(f"Invalid {enum_cls.__name__}: {value!r}") from e


def _field(data: dict) -> Field:
    return Field(
        id=str(data["id"]),
        label=str(data.get("label", data["id"])),
        field_type=_enum(FieldType, data.get("type"), FieldType.TEXT),
        slug=data.get("slug"),
        is_required=bool(data.get("required", False)),
        position=int(data.get("position", 0)),
        configuration=dict(data.get("configuration") or {}),
    )


def _step(flow_id: str, data: dict) -> Step:
    return Step(
        id=str(data["id"]),
        flow_id=flow_id,
        position=int(data["position"]),
        title=str(data.get("title", data["id"])),
        color=data.get("color", "#2563eb"),
        step_type=_enum(StepType, data.get("type"), StepType.NORMAL),
        fields=[_field(f) for f in data.get("fields") or []],
        responsible_user_id=data.get("responsible_user_id"),
        responsible_team_id=data.get("responsible_team_id"),
    )


def _entry(card_id: str, index: int, data: dict) -> MovementHistoryEntry:
    return MovementHistoryEntry(
        id=str(data.get("id") or f"{card_id}-h{index}"),
        to_step_id=data.get("to_step_id"),
        moved_at=_timestamp(data["moved_at"]),
        from_step_id=data.get("from_step_id"),
        moved_by=data.get("moved_by"),
        action_type=_enum(ActionType, data.get("action_type"), ActionType.MOVE),
        from_step_title=data.get("from_step_title"),
        to_step_title=data.get("to_step_title"),
        from_step_position=data.get("from_step_position"),
        to_step_position=data.get("to_step_position"),
        movement_direction=_enum(MovementDirection, data.get("movement_direction")),
        details=dict(data.get("details") or {}),
    )


def _card(data: dict) -> Card:
    value = data.get("value")
    return Card(
        id=str(data["id"]),
        flow_id=str(data["flow_id"]),
        step_id=str(data["step_id"]),
        title=str(data.get("title", "")),
        created_at=_timestamp(data["created_at"]),
        field_values=dict(data.get("field_values") or {}),
        checklist_progress=dict(data.get("checklist_progress") or {}),
        parent_card_id=data.get("parent_card_id"),
        assigned_to=data.get("assigned_to"),
        assigned_team_id=data.get("assigned_team_id"),
        agents=list(data.get("agents") or []),
        card_type=data.get("card_type"),
        value=None if value is None else float(value),
        product=data.get("product"),
    )


def parse_board(document: dict, actor: str | None = None) -> InMemoryDataService:
    if not isinstance(document, dict):
        raise BoardFileError("Board file must contain a mapping")
    try:
        config = EngineConfig.from_dict(document.get("settings"))
    except (TypeError, ValueError) as e:
        raise BoardFileError(str(e)) from e

    service = InMemoryDataService(actor=actor, config=config)
    try:
        for flow in document.get("flows") or []:
            flow_id = str(flow["id"])
            steps = [_step(flow_id, s) for s in flow.get("steps") or []]
            service.add_flow(flow_id, steps, name=flow.get("name"))
        for data in document.get("cards") or []:
            card = service.add_card(_card(data))
            for i, entry in enumerate(data.get("history") or [], start=1):
                service.add_history(card.id, _entry(card.id, i, entry))
    except (KeyError, TypeError, ValueError) as e:
        raise BoardFileError(f"Malformed board file: {e}") from e
    return service


def load_board(path: Path, actor: str | None = None) -> InMemoryDataService:
    """Read a YAML board file into a fresh InMemoryDataService."""
    try:
        document = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise BoardFileError(f"Cannot read board file {path}: {e}") from e
    service = parse_board(document or {}, actor=actor)
    logger.info("Loaded board %s (%d flows)", path, len(service.flow_names))
    return service
