"""Plain-data and text renderings of the card read-model."""

from __future__ import annotations

from typing import Any

from .history import TimelineEntry
from .models import Step
from .session import CardView


def _step_ref(step: Step | None) -> dict[str, Any] | None:
    if step is None:
        return None
    return {
        "id": step.id,
        "title": step.title,
        "position": step.position,
        "type": step.step_type.value,
    }


def timeline_to_list(timeline: list[TimelineEntry]) -> list[dict[str, Any]]:
    return [
        {
            "id": t.entry.id,
            "step_id": t.step.id,
            "title": t.title,
            "moved_at": t.entry.moved_at.isoformat(),
            "moved_by": t.entry.moved_by,
            "action": t.entry.action_type.value,
            "direction": t.direction.value,
            "synthesized": t.synthesized,
        }
        for t in timeline
    ]


def view_to_dict(view: CardView) -> dict[str, Any]:
    form = view.form_values
    return {
        "current_step": _step_ref(view.current_step),
        "next_step": _step_ref(view.next_step),
        "previous_step": _step_ref(view.previous_step),
        "progress_pct": round(view.progress_percentage, 1),
        "is_frozen": view.is_frozen_card,
        "is_read_only": view.is_read_only,
        "is_disabled": view.is_disabled,
        "is_move_disabled": view.is_move_disabled,
        "missing_required": view.missing_required,
        "field_errors": view.field_errors,
        "form": {
            "title": form.title,
            "fields": form.fields,
            "checklist": form.checklist,
            "assigned_to": form.assigned_to,
            "assigned_team_id": form.assigned_team_id,
            "assignee_type": form.assignee_type.value,
            "agents": form.agents,
            "product": form.product,
            "value": form.value,
        },
        "timeline": timeline_to_list(view.timeline_entries),
        "last_update": view.last_history_label,
    }


def _progress_bar(pct: float, width: int = 20) -> str:
    filled = round(pct / 100 * width)
    return "#" * filled + "-" * (width - filled)


def render_view_lines(view: CardView) -> list[str]:
    """Human-readable summary used by the CLI and the terminal board."""
    current = view.current_step
    lines = [
        f"Step: {current.title if current else '(unresolved)'}",
        f"Progress: [{_progress_bar(view.progress_percentage)}] {view.progress_percentage:.0f}%",
    ]
    if view.previous_step:
        lines.append(f"Previous: {view.previous_step.title}")
    if view.next_step:
        lines.append(f"Next: {view.next_step.title}")
    if view.is_frozen_card:
        lines.append("Frozen: editing disabled")
    elif view.is_read_only:
        lines.append("Read-only: card belongs to another flow")
    if view.missing_required:
        lines.append("Missing: " + ", ".join(view.missing_required))
    for field_id, error in view.field_errors.items():
        lines.append(f"{field_id}: {error}")

    form = view.form_values
    if form.assigned_to:
        lines.append(f"Assignee: {form.assigned_to}")
    elif form.assigned_team_id:
        lines.append(f"Team: {form.assigned_team_id}")
    if form.agents:
        lines.append("Agents: " + ", ".join(form.agents))

    if view.timeline_entries:
        lines.append(f"History (last update {view.last_history_label}):")
        for t in view.timeline_entries:
            marker = "<-" if t.is_backward else "->"
            action = f" [{t.entry.action_type.value}]" if t.is_terminal_action else ""
            who = f" by {t.entry.moved_by}" if t.entry.moved_by else ""
            lines.append(f"  {marker} {t.title}{action} {t.entry.moved_at:%Y-%m-%d}{who}")
    return lines
