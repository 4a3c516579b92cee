"""Textual application entry point for absurdpg."""

from __future__ import annotations

import logging
import os
import sys

from rich.console import RenderableType
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.logging import TextualHandler

from .connections import AsyncpgProbe, ConnectionProbe
from .loop import EventLoop
from .render import Renderer, Theme
from .state import InteractionState, KeyPress, Resize
from .widgets import FrameView

LOG = logging.getLogger(__name__)

# Keys Textual would otherwise consume for focus handling or its own quit bindings.
FORWARDED_KEYS = (
    "tab",
    "shift+tab",
    "up",
    "down",
    "left",
    "right",
    "enter",
    "backspace",
    "delete",
    "home",
    "end",
    "ctrl+c",
    "ctrl+q",
)


class AbsurdpgApp(App[None]):
    """Hosts the event loop and turns terminal input into its events."""

    ENABLE_COMMAND_PALETTE = False
    CSS = """
    Screen {
        layout: vertical;
    }
    """

    BINDINGS = [Binding(key, f"press('{key}')", show=False, priority=True) for key in FORWARDED_KEYS]

    def __init__(
        self,
        *,
        probe: ConnectionProbe | None = None,
        theme: Theme | None = None,
        state: InteractionState | None = None,
    ) -> None:
        super().__init__()
        self._frame_view = FrameView()
        self._event_loop = EventLoop(
            probe or AsyncpgProbe(),
            Renderer(theme),
            self._show_frame,
            state=state,
        )

    @property
    def event_loop(self) -> EventLoop:
        """Expose the event loop for tests."""

        return self._event_loop

    @property
    def frame_view(self) -> FrameView:
        return self._frame_view

    def compose(self) -> ComposeResult:
        yield self._frame_view

    async def on_mount(self) -> None:
        self._event_loop.post(Resize(self.size.width, self.size.height))
        self.run_worker(self._drive(), name="event-loop", exclusive=True)

    async def _drive(self) -> None:
        await self._event_loop.run()
        self.exit(return_code=0)

    def on_resize(self, event: events.Resize) -> None:
        self._event_loop.post(Resize(event.size.width, event.size.height))

    def on_key(self, event: events.Key) -> None:
        if event.is_printable:
            self._event_loop.post(KeyPress(event.key, event.character))
            event.stop()

    def action_press(self, key: str) -> None:
        self._event_loop.post(KeyPress(key))

    def _show_frame(self, frame: RenderableType) -> None:
        self._frame_view.show(frame)


def _configure_logging() -> None:
    name = os.environ.get("ABSURDPG_LOG_LEVEL", "WARNING").upper()
    level = getattr(logging, name, logging.WARNING)
    logging.basicConfig(level=level, handlers=[TextualHandler()])


def main() -> None:
    """Invoke the Textual application."""

    _configure_logging()
    try:
        app = AbsurdpgApp()
        app.run()
    except Exception:
        LOG.exception("Terminal UI failed to start")
        sys.exit(1)
    sys.exit(app.return_code or 0)


if __name__ == "__main__":
    main()
