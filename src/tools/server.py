"""MCP server factory binding handlers to a data service."""

from typing import Any

from claude_agent_sdk import create_sdk_mcp_server, tool

from ..pipeline.interface import DataService
from . import handlers

SERVER_NAME = "cardflow_pipeline"
TOOL_PREFIX = f"mcp__{SERVER_NAME}__"

PIPELINE_TOOLS = [
    f"{TOOL_PREFIX}list_cards",
    f"{TOOL_PREFIX}get_card_view",
    f"{TOOL_PREFIX}get_card_timeline",
    f"{TOOL_PREFIX}update_card_field",
    f"{TOOL_PREFIX}toggle_checklist_item",
    f"{TOOL_PREFIX}move_card",
    f"{TOOL_PREFIX}complete_card",
    f"{TOOL_PREFIX}cancel_card",
]


def create_pipeline_server(service: DataService):
    """Create an MCP server exposing card pipeline tools.

    Each handler is bound to its dependency via closure so the @tool wrappers
    are clean single-argument async functions as the SDK expects.
    """

    @tool(
        "list_cards",
        "List the cards of a flow with their current step and status",
        {"flow_id": str},
    )
    async def list_cards(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.list_cards_handler(args, service)

    @tool(
        "get_card_view",
        "Get a card's pipeline state: current/next/previous step, progress, "
        "frozen/read-only flags, form values, missing required fields and timeline. "
        "Pass flow_id to evaluate it from the board of another flow.",
        {"card_id": str, "flow_id": str},
    )
    async def get_card_view(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.get_card_view_handler(args, service)

    @tool(
        "get_card_timeline",
        "Get the movement timeline of a card, oldest first",
        {"card_id": str},
    )
    async def get_card_timeline(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.get_card_timeline_handler(args, service)

    @tool(
        "update_card_field",
        "Set a field value on a card's current step and save. "
        "Set json_value to true to send lists or numbers as JSON text.",
        {"card_id": str, "field_id": str, "value": str, "json_value": bool},
    )
    async def update_card_field(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.update_card_field_handler(args, service)

    @tool(
        "toggle_checklist_item",
        "Toggle one item of a checklist field and save",
        {"card_id": str, "field_id": str, "item": str},
    )
    async def toggle_checklist_item(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.toggle_checklist_item_handler(args, service)

    @tool(
        "move_card",
        "Move a card one step. direction is 'forward' (requires every required field) or 'back'.",
        {"card_id": str, "direction": str},
    )
    async def move_card(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.move_card_handler(args, service)

    @tool(
        "complete_card",
        "Mark a card completed on its current step",
        {"card_id": str},
    )
    async def complete_card(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.complete_card_handler(args, service)

    @tool(
        "cancel_card",
        "Mark a card canceled on its current step",
        {"card_id": str},
    )
    async def cancel_card(args: dict[str, Any]) -> dict[str, Any]:
        return await handlers.cancel_card_handler(args, service)

    return create_sdk_mcp_server(
        name=SERVER_NAME,
        version="0.1.0",
        tools=[
            list_cards,
            get_card_view,
            get_card_timeline,
            update_card_field,
            toggle_checklist_item,
            move_card,
            complete_card,
            cancel_card,
        ],
    )
