"""Pure handler functions for card pipeline MCP tools.

Each handler takes (args, service) and returns MCP result format.
No SDK dependency, testable with InMemoryDataService.
"""

from __future__ import annotations

import json
from typing import Any

from ..pipeline.config import DEFAULT_CONFIG
from ..pipeline.exceptions import PipelineError
from ..pipeline.interface import DataService
from ..pipeline.render import timeline_to_list, view_to_dict
from ..pipeline.session import ActionResult, CardEditorSession


def _text_result(text: str) -> dict[str, Any]:
    """Build MCP tool result with a text content block."""
    return {"content": [{"type": "text", "text": text}]}


def _json_result(data: Any) -> dict[str, Any]:
    """Build MCP tool result with JSON-serialized content."""
    return _text_result(json.dumps(data, indent=2, default=str))


async def _open(args: dict[str, Any], service: DataService) -> CardEditorSession:
    card = await service.get_card(args["card_id"])
    open_flow_id = args.get("flow_id") or None
    steps = await service.fetch_steps_for_flow(open_flow_id or card.flow_id)
    session = CardEditorSession(
        card,
        steps,
        service,
        open_flow_id=open_flow_id,
        config=getattr(service, "config", DEFAULT_CONFIG),
    )
    await session.load()
    return session


def _action_result(result: ActionResult, session: CardEditorSession) -> dict[str, Any]:
    if not result.ok:
        return _text_result(f"Error: {result.message}")
    return _json_result({"message": result.message, "card": view_to_dict(session.view())})


async def list_cards_handler(args: dict[str, Any], service: DataService) -> dict[str, Any]:
    """List cards of a flow with their step."""
    flow_id = args["flow_id"]
    try:
        steps = {s.id: s for s in await service.fetch_steps_for_flow(flow_id)}
    except KeyError:
        return _text_result(f"Error: Flow not found: {flow_id}")
    cards = await service.list_cards(flow_id)
    return _json_result([
        {
            "id": c.id,
            "title": c.title,
            "step": steps[c.step_id].title if c.step_id in steps else c.step_id,
            "status": c.status.value,
        }
        for c in cards
    ])


async def get_card_view_handler(args: dict[str, Any], service: DataService) -> dict[str, Any]:
    """Get the full read-model of a card."""
    try:
        session = await _open(args, service)
    except KeyError as e:
        return _text_result(f"Error: {e.args[0]}")
    return _json_result(view_to_dict(session.view()))


async def get_card_timeline_handler(args: dict[str, Any], service: DataService) -> dict[str, Any]:
    """Get the movement timeline of a card."""
    try:
        session = await _open(args, service)
    except KeyError as e:
        return _text_result(f"Error: {e.args[0]}")
    view = session.view()
    return _json_result({
        "timeline": timeline_to_list(view.timeline_entries),
        "last_update": view.last_history_label,
    })


async def update_card_field_handler(args: dict[str, Any], service: DataService) -> dict[str, Any]:
    """Set one field value and save the card."""
    try:
        session = await _open(args, service)
        value = args.get("value")
        if isinstance(value, str) and args.get("json_value"):
            value = json.loads(value)
        session.set_field(args["field_id"], value)
    except KeyError as e:
        return _text_result(f"Error: {e.args[0]}")
    except PipelineError as e:
        return _text_result(f"Error: {e}")
    except json.JSONDecodeError as e:
        return _text_result(f"Error: Invalid JSON value: {e}")
    return _action_result(await session.save(), session)


async def toggle_checklist_item_handler(args: dict[str, Any], service: DataService) -> dict[str, Any]:
    """Toggle a checklist item and save the card."""
    try:
        session = await _open(args, service)
        session.toggle_checklist_item(args["field_id"], args["item"])
    except KeyError as e:
        return _text_result(f"Error: {e.args[0]}")
    except PipelineError as e:
        return _text_result(f"Error: {e}")
    return _action_result(await session.save(), session)


async def move_card_handler(args: dict[str, Any], service: DataService) -> dict[str, Any]:
    """Move a card forward (default) or back one step."""
    direction = args.get("direction") or "forward"
    if direction not in ("forward", "back"):
        return _text_result(f"Error: Unknown direction: {direction}")
    try:
        session = await _open(args, service)
    except KeyError as e:
        return _text_result(f"Error: {e.args[0]}")
    if direction == "forward":
        result = await session.move_forward()
    else:
        result = await session.move_back()
    return _action_result(result, session)


async def complete_card_handler(args: dict[str, Any], service: DataService) -> dict[str, Any]:
    """Mark a card completed on its current step."""
    try:
        session = await _open(args, service)
    except KeyError as e:
        return _text_result(f"Error: {e.args[0]}")
    return _action_result(await session.complete(), session)


async def cancel_card_handler(args: dict[str, Any], service: DataService) -> dict[str, Any]:
    """Mark a card canceled on its current step."""
    try:
        session = await _open(args, service)
    except KeyError as e:
        return _text_result(f"Error: {e.args[0]}")
    return _action_result(await session.cancel(), session)
