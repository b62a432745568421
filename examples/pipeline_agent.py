"""Let an agent work a card through the pipeline via the MCP tools.

Usage:
  python -m examples.pipeline_agent [examples/board.yaml] [card_id]

The board file is loaded into memory; nothing is written back.
"""

import asyncio
import os
import sys
from pathlib import Path

os.environ.pop("CLAUDECODE", None)

from claude_agent_sdk import AssistantMessage, ClaudeAgentOptions, ClaudeSDKClient

from src.adapters.board_file import load_board
from src.tools.server import PIPELINE_TOOLS, SERVER_NAME, create_pipeline_server


async def main(board_path: Path, card_id: str):
    service = load_board(board_path, actor="agent")
    server = create_pipeline_server(service)

    options = ClaudeAgentOptions(
        mcp_servers={SERVER_NAME: server},
        allowed_tools=PIPELINE_TOOLS,
        permission_mode="acceptEdits",
        max_turns=8,
    )

    async with ClaudeSDKClient(options=options) as client:
        await client.query(
            f"Look at card {card_id}. List what blocks it from moving to its next step, "
            "fill in anything you can infer from the card itself, then try to advance it "
            "and report the outcome."
        )

        async for message in client.receive_response():
            if isinstance(message, AssistantMessage):
                for block in message.content:
                    if hasattr(block, "text"):
                        print(block.text)
                    elif hasattr(block, "name"):
                        print(f"  [tool: {block.name}]")


if __name__ == "__main__":
    board = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(__file__).with_name("board.yaml")
    card = sys.argv[2] if len(sys.argv) > 2 else "c-2"
    asyncio.run(main(board, card))
