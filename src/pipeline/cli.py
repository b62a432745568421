"""CLI entry point for inspecting and moving cards of a board file.

Usage:
  python -m src.pipeline show <card_id> [--board board.yaml] [--open-flow FLOW]
  python -m src.pipeline timeline <card_id> [--board board.yaml]
  python -m src.pipeline advance <card_id> [--board board.yaml]
  python -m src.pipeline back <card_id> [--board board.yaml]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys


def main() -> None:
    parser = argparse.ArgumentParser(description="Card pipeline CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    for name, help_text in (
        ("show", "Show a card's pipeline state"),
        ("timeline", "Show a card's movement timeline"),
        ("advance", "Move a card to its next step"),
        ("back", "Move a card to its previous step"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("card_id", help="Card ID")
        sub.add_argument("--board", default="board.yaml", help="Board file (YAML)")
        sub.add_argument("--open-flow", default=None, help="Flow currently open on screen")
        sub.add_argument("--json", action="store_true", help="Print JSON instead of text")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(_run(args)))


async def _open_session(args):
    from pathlib import Path

    from src.adapters.board_file import load_board
    from src.pipeline.session import CardEditorSession

    service = load_board(Path(args.board))
    card = await service.get_card(args.card_id)
    steps = await service.fetch_steps_for_flow(args.open_flow or card.flow_id)
    session = CardEditorSession(
        card, steps, service, open_flow_id=args.open_flow, config=service.config
    )
    await session.load()
    return session


async def _run(args) -> int:
    from src.pipeline.exceptions import BoardFileError
    from src.pipeline.render import render_view_lines, timeline_to_list, view_to_dict

    try:
        session = await _open_session(args)
    except BoardFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1

    if args.command in ("advance", "back"):
        result = await (session.move_forward() if args.command == "advance" else session.move_back())
        if not result.ok:
            print(f"Error: {result.message}", file=sys.stderr)
            return 1
        print(result.message)
        print("(board files are not written back; the move lasts for this run only)")

    view = session.view()
    if args.command == "timeline":
        if args.json:
            print(json.dumps(timeline_to_list(view.timeline_entries), indent=2))
        else:
            for entry in timeline_to_list(view.timeline_entries):
                print(f"{entry['moved_at']}  {entry['direction']:<8}  {entry['title']}")
        return 0

    if args.json:
        print(json.dumps(view_to_dict(view), indent=2, default=str))
    else:
        print(session.card.title)
        for line in render_view_lines(view):
            print(f"  {line}")
    return 0


if __name__ == "__main__":
    main()
