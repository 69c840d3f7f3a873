"""``flatvim-demo``: one Textual buffer view driven by a flatvim session."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.widgets import Footer, Static

from flatvim.buffer import BufferMirror
from flatvim.config import EngineConfig, VimMode
from flatvim.runtime import telemetry
from flatvim.session import Session

from .controller import TextualUIHooks, TextualVimAdapter

SELECTION_STYLE = "on blue"
CURSOR_STYLE = "reverse"


@dataclass
class UIState:
    buffer_text: str = ""
    status_text: str = ""
    last_event: str = ""


def render_mirror(mirror: BufferMirror) -> Text:
    """Buffer text plus one trailing cell so the cursor can sit past the end."""

    text = Text(mirror.text + " ")
    if mirror.selection is not None:
        span = mirror.selection.to_range(mirror.text)
        text.stylize(SELECTION_STYLE, span.start, span.end)
    cursor = min(mirror.cursor, len(mirror.text))
    text.stylize(CURSOR_STYLE, cursor, cursor + 1)
    return text


class FlatVimApp(App[None]):
    CSS = """
    #buffer-view {
        height: 1fr;
        border: round $accent;
        padding: 0 1;
    }

    #status-line {
        height: 1;
        padding: 0 1;
        background: $boost;
    }
    """

    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(
        self,
        *,
        text: str = "",
        initial_mode: VimMode = VimMode.NORMAL,
        config: Optional[EngineConfig] = None,
    ) -> None:
        super().__init__()
        self.state = UIState(buffer_text=text)
        self.session = Session(
            text=text, initial_mode=initial_mode, config=config, name="textual"
        )
        self.adapter: Optional[TextualVimAdapter] = None
        self.logger = telemetry.get_logger("flatvim.textual")

    def compose(self) -> ComposeResult:
        yield Static(id="buffer-view")
        yield Static(id="status-line")
        yield Footer()

    def on_mount(self) -> None:
        hooks = TextualUIHooks(
            update_buffer=self._show_buffer,
            update_status=self._show_status,
            handle_event=self._note_event,
            log=self.logger.debug,
        )
        self.adapter = TextualVimAdapter(self.session, hooks)

    def on_unmount(self) -> None:
        if self.adapter is not None:
            self.adapter.detach()

    def on_key(self, event: events.Key) -> None:
        if self.adapter is None or event.key == "ctrl+q":
            return
        self.adapter.handle_textual_key(event.key, character=event.character)
        event.stop()

    def _show_buffer(self, mirror: BufferMirror) -> None:
        self.state.buffer_text = mirror.text
        self.query_one("#buffer-view", Static).update(render_mirror(mirror))

    def _show_status(self, status: str) -> None:
        self.state.status_text = status
        self.query_one("#status-line", Static).update(status)

    def _note_event(self, name: str, payload: Any | None) -> None:
        self.state.last_event = name


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the flatvim Textual demo.")
    parser.add_argument("--file", type=Path, help="load this file into the buffer")
    parser.add_argument(
        "--mode",
        default=VimMode.NORMAL.value,
        choices=[mode.value for mode in VimMode],
        help="mode to start in (default: normal)",
    )
    parser.add_argument(
        "--log-preset",
        choices=sorted(telemetry.PRESETS),
        help="telemetry preset to apply before starting",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    text = args.file.read_text(encoding="utf-8") if args.file else ""
    FlatVimApp(
        text=text,
        initial_mode=VimMode.parse(args.mode),
        config=EngineConfig.from_env(),
    ).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
