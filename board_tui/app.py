"""Card board TUI: one column per step of a flow, with a card detail panel."""

from __future__ import annotations

import argparse
from pathlib import Path

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import Footer, Header, Static

from src.adapters.board_file import load_board
from src.pipeline.config import DEFAULT_CONFIG
from src.pipeline.interface import DataService
from src.pipeline.models import Card, CardStatus, Step, StepType
from src.pipeline.render import render_view_lines
from src.pipeline.session import ActionResult, CardEditorSession, CardView

STEP_TYPE_BADGES = {
    StepType.FINISHER: "[green]finish[/]",
    StepType.FAIL: "[red]fail[/]",
    StepType.FREEZING: "[cyan]freeze[/]",
}


def step_header(step: Step, count: int) -> str:
    badge = STEP_TYPE_BADGES.get(step.step_type)
    suffix = f" {badge}" if badge else ""
    return f"[bold underline]{escape(step.title)}[/]{suffix} [dim]({count})[/]"


def card_label(card: Card) -> str:
    status = "" if card.status is CardStatus.IN_PROGRESS else f" [dim]{card.status.value}[/]"
    return f"[bold]{escape(card.title)}[/] [dim]{card.id}[/]{status}"


def render_card_detail(title: str, view: CardView) -> str:
    lines = [f"[bold]{escape(title)}[/]", ""]
    lines.extend(escape(line) for line in render_view_lines(view))
    return "\n".join(lines)


class CardSelected(Message):
    def __init__(self, card_id: str) -> None:
        super().__init__()
        self.card_id = card_id


class CardTile(Static):
    can_focus = True

    def __init__(self, card: Card, col_index: int, **kwargs) -> None:
        super().__init__(card_label(card), **kwargs)
        self.card = card
        self.col_index = col_index

    def on_focus(self) -> None:
        self.post_message(CardSelected(self.card.id))


class StepColumn(VerticalScroll):
    def __init__(self, step: Step, cards: list[Card], col_index: int, **kwargs) -> None:
        super().__init__(**kwargs)
        self.step = step
        self.cards = cards
        self.col_index = col_index

    def compose(self) -> ComposeResult:
        yield Static(step_header(self.step, len(self.cards)), classes="column-header")
        if not self.cards:
            yield Static("[dim]empty[/]", classes="empty-label")
            return
        for card in self.cards:
            yield CardTile(card, self.col_index, classes="card")


class DetailPanel(VerticalScroll):
    content_text: reactive[str] = reactive("")
    title_text: reactive[str] = reactive("Details")

    def compose(self) -> ComposeResult:
        yield Static("[dim]Select a card to view details[/]", id="detail-content")

    def watch_content_text(self, value: str) -> None:
        if self.is_mounted:
            self.query_one("#detail-content", Static).update(value)

    def watch_title_text(self, value: str) -> None:
        self.border_title = value


class CardBoardApp(App):
    TITLE = "Card Board"

    CSS = """
    #main-layout { height: 1fr; width: 100%; }
    #board { width: 1fr; height: 100%; }
    StepColumn {
        width: 1fr;
        height: 100%;
        border-right: solid $surface-lighten-2;
    }
    .column-header {
        text-align: center;
        background: $surface-lighten-1;
        margin-bottom: 1;
    }
    .empty-label { text-align: center; color: $text-muted; }
    .card { padding: 0 1; }
    CardTile:focus { background: $surface-lighten-1; }
    #detail-panel {
        width: 50;
        height: 100%;
        border-left: solid $primary;
        padding: 1 1;
    }
    #detail-panel.hidden { display: none; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("n", "advance", "Next step"),
        Binding("b", "move_back", "Previous step"),
        Binding("c", "complete", "Complete"),
        Binding("x", "cancel_card", "Cancel"),
        Binding("d", "toggle_detail", "Detail"),
        Binding("left", "col_left", "< Col", show=True),
        Binding("right", "col_right", "Col >", show=True),
    ]

    def __init__(self, service: DataService, flow_id: str | None = None) -> None:
        super().__init__()
        self.service = service
        flows = list(getattr(service, "flow_names", {}))
        self.flow_id = flow_id or (flows[0] if flows else None)
        self.steps: list[Step] = []
        self.selected_card_id: str | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            yield Horizontal(id="board")
            yield DetailPanel(id="detail-panel")
        yield Footer()

    async def on_mount(self) -> None:
        if self.flow_id:
            self.sub_title = getattr(self.service, "flow_names", {}).get(self.flow_id, self.flow_id)
        await self.action_refresh()

    async def action_refresh(self) -> None:
        if self.flow_id is None:
            self.notify("Board has no flows", severity="warning")
            return
        self.steps = await self.service.fetch_steps_for_flow(self.flow_id)
        cards = await self.service.list_cards(self.flow_id)
        board = self.query_one("#board", Horizontal)
        await board.remove_children()
        columns = [
            StepColumn(step, [c for c in cards if c.step_id == step.id], i)
            for i, step in enumerate(self.steps)
        ]
        await board.mount_all(columns)
        if self.selected_card_id:
            await self._show_detail(self.selected_card_id)

    async def _open_session(self, card_id: str) -> CardEditorSession:
        card = await self.service.get_card(card_id)
        session = CardEditorSession(
            card, self.steps, self.service, open_flow_id=self.flow_id,
            config=getattr(self.service, "config", DEFAULT_CONFIG),
        )
        await session.load()
        return session

    async def _show_detail(self, card_id: str) -> None:
        panel = self.query_one("#detail-panel", DetailPanel)
        try:
            session = await self._open_session(card_id)
        except KeyError:
            self.selected_card_id = None
            panel.title_text = "Details"
            panel.content_text = "[dim]Select a card to view details[/]"
            return
        panel.title_text = session.card.id
        panel.content_text = render_card_detail(session.card.title, session.view())

    def on_card_selected(self, message: CardSelected) -> None:
        self.selected_card_id = message.card_id
        self.run_worker(self._show_detail(message.card_id), exclusive=True)

    async def _run_action(self, action: str) -> None:
        if not self.selected_card_id:
            self.notify("Select a card first", severity="warning")
            return
        try:
            session = await self._open_session(self.selected_card_id)
        except KeyError as e:
            self.notify(str(e.args[0]), severity="error")
            return
        result: ActionResult = await getattr(session, action)()
        self.notify(result.message or action, severity="information" if result.ok else "warning")
        await self.action_refresh()

    async def action_advance(self) -> None:
        await self._run_action("move_forward")

    async def action_move_back(self) -> None:
        await self._run_action("move_back")

    async def action_complete(self) -> None:
        await self._run_action("complete")

    async def action_cancel_card(self) -> None:
        await self._run_action("cancel")

    def action_toggle_detail(self) -> None:
        self.query_one("#detail-panel", DetailPanel).toggle_class("hidden")

    def _focus_column(self, offset: int) -> None:
        focused = self.focused
        current = focused.col_index if isinstance(focused, CardTile) else -1
        columns = list(self.query(StepColumn))
        index = current + offset
        while 0 <= index < len(columns):
            tiles = list(columns[index].query(CardTile))
            if tiles:
                tiles[0].focus()
                return
            index += offset

    def action_col_left(self) -> None:
        self._focus_column(-1)

    def action_col_right(self) -> None:
        self._focus_column(1)


def run_board() -> None:
    """Entry point for the cardflow-board CLI."""
    parser = argparse.ArgumentParser(description="Card pipeline board")
    parser.add_argument("board", nargs="?", default="board.yaml", help="Board file (YAML)")
    parser.add_argument("--flow", default=None, help="Flow to open")
    args = parser.parse_args()
    app = CardBoardApp(load_board(Path(args.board)), flow_id=args.flow)
    app.run()


if __name__ == "__main__":
    run_board()
