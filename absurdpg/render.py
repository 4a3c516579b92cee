"""Pure rendering of the interaction state into Rich renderables."""

from __future__ import annotations

from dataclasses import dataclass

from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from .state import (
    PASSWORD,
    Connecting,
    Dashboard,
    ErrorScreen,
    InputForm,
    InteractionState,
    TextField,
)

FIELD_PLACEHOLDERS = ("Username", "Password", "Host", "Port (default 5432)", "Database Name")
TABS = ("Dashboard", "Queries", "Logs", "Settings")


@dataclass(frozen=True, slots=True)
class Theme:
    """Colours and sizes used by the renderer."""

    title: str = "bold #89B4FA"
    text: str = "#CDD6F4"
    placeholder: str = "dim #CDD6F4"
    cursor: str = "reverse"
    button: str = "bold #F38BA8"
    error: str = "bold #F38BA8"
    border: str = "#B4BEFE"
    tab: str = "bold #B4BEFE"
    active_tab: str = "bold #F38BA8"
    panel_width: int = 50
    mask_character: str = "*"


class Renderer:
    """Maps an :class:`InteractionState` to a frame; holds no state of its own."""

    def __init__(self, theme: Theme | None = None) -> None:
        self._theme = theme or Theme()

    @property
    def theme(self) -> Theme:
        return self._theme

    def render(self, state: InteractionState) -> RenderableType:
        screen = state.screen
        if isinstance(screen, InputForm):
            body = self._render_form(screen)
        elif isinstance(screen, Connecting):
            body = Text("Loading database information...", style=self._theme.text)
        elif isinstance(screen, ErrorScreen):
            body = self._render_error(screen)
        elif isinstance(screen, Dashboard):
            body = self._render_dashboard(screen)
        else:  # pragma: no cover - exhaustive over Screen
            raise TypeError(f"Unknown screen: {screen!r}")
        panel = Panel(
            Align.center(body),
            border_style=self._theme.border,
            padding=(1, 2),
            width=self._theme.panel_width,
        )
        viewport = state.viewport
        return Align.center(
            panel,
            vertical="middle",
            width=viewport.width or None,
            height=viewport.height or None,
        )

    def _render_form(self, form: InputForm) -> RenderableType:
        lines: list[RenderableType] = [Text("Configure PostgreSQL", style=self._theme.title), Text()]
        for idx, entry in enumerate(form.fields):
            lines.append(self._render_field(idx, entry, focused=idx == form.focused))
        lines.append(Text())
        lines.append(Text("Connect (Press Enter)", style=self._theme.button))
        return Group(*lines)

    def _render_field(self, idx: int, entry: TextField, *, focused: bool) -> Text:
        line = Text("> " if focused else "  ", style=self._theme.text)
        value = entry.value
        if idx == PASSWORD:
            value = self._theme.mask_character * len(value)
        if not value and not focused:
            line.append(FIELD_PLACEHOLDERS[idx], style=self._theme.placeholder)
            return line
        if not focused:
            line.append(value, style=self._theme.text)
            return line
        line.append(value[: entry.cursor], style=self._theme.text)
        if entry.cursor < len(value):
            line.append(value[entry.cursor], style=self._theme.cursor)
            line.append(value[entry.cursor + 1 :], style=self._theme.text)
        else:
            line.append(" ", style=self._theme.cursor)
            if not value:
                line.append(FIELD_PLACEHOLDERS[idx], style=self._theme.placeholder)
        return line

    def _render_error(self, screen: ErrorScreen) -> RenderableType:
        message = Text("Error: ", style=self._theme.error)
        message.append(screen.message, style=self._theme.text)
        return Group(message, Text(), Text("Press Enter to retry", style=self._theme.button))

    def _render_dashboard(self, screen: Dashboard) -> RenderableType:
        tabs = Text()
        for idx, name in enumerate(TABS):
            style = self._theme.active_tab if idx == screen.selected_tab else self._theme.tab
            tabs.append(f" {name} ", style=style)
            if idx < len(TABS) - 1:
                tabs.append(" ")
        lines: list[RenderableType] = [tabs, Text(), Text("Tables:", style=self._theme.text)]
        if not screen.tables:
            lines.append(Text("No tables found.", style=self._theme.placeholder))
        for table in screen.tables:
            count = screen.row_counts.get(table, 0)
            lines.append(Text(f"{table}: {count} rows", style=self._theme.text))
        lines.append(Text())
        lines.append(Text("Press q or Ctrl+C to quit", style=self._theme.button))
        return Group(*lines)


__all__ = ["FIELD_PLACEHOLDERS", "Renderer", "TABS", "Theme"]
