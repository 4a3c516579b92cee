"""Tests for the frame renderer."""

from __future__ import annotations

import io

from rich.console import Console

from absurdpg.render import FIELD_PLACEHOLDERS, TABS, Renderer, Theme
from absurdpg.state import (
    Connecting,
    Dashboard,
    ErrorScreen,
    InputForm,
    InteractionState,
    Viewport,
)


def _text(state: InteractionState, renderer: Renderer | None = None) -> str:
    console = Console(file=io.StringIO(), width=80, height=30, record=True, color_system=None)
    console.print((renderer or Renderer()).render(state))
    return console.export_text()


def test_form_shows_placeholders_and_connect_hint() -> None:
    output = _text(InteractionState())

    assert "Configure PostgreSQL" in output
    for placeholder in FIELD_PLACEHOLDERS[1:]:
        assert placeholder in output
    assert "Connect (Press Enter)" in output


def test_form_masks_password() -> None:
    form = InputForm.from_values(("alice", "hunter2", "db", "5432", "shop"))

    output = _text(InteractionState(screen=form))

    assert "alice" in output
    assert "hunter2" not in output
    assert "*******" in output


def test_connecting_layout() -> None:
    output = _text(InteractionState(screen=Connecting(InputForm())))

    assert "Loading database information..." in output


def test_error_layout_includes_reason() -> None:
    output = _text(InteractionState(screen=ErrorScreen("could not ping the database", InputForm())))

    assert "Error: could not ping the database" in output
    assert "Press Enter to retry" in output


def test_dashboard_lists_tables_and_tabs() -> None:
    screen = Dashboard(tables=("users", "orders"), row_counts={"users": 3, "orders": 0}, selected_tab=2)

    output = _text(InteractionState(screen=screen))

    for tab in TABS:
        assert tab in output
    assert "users: 3 rows" in output
    assert "orders: 0 rows" in output
    assert output.index("users") < output.index("orders")
    assert "Press q or Ctrl+C to quit" in output


def test_empty_dashboard_says_so() -> None:
    assert "No tables found." in _text(InteractionState(screen=Dashboard()))


def test_render_is_deterministic() -> None:
    state = InteractionState(screen=Dashboard(tables=("users",), row_counts={"users": 1}), viewport=Viewport(80, 20))
    renderer = Renderer()

    assert _text(state, renderer) == _text(state, renderer)


def test_theme_is_injected() -> None:
    theme = Theme(mask_character="#", panel_width=60)
    renderer = Renderer(theme)
    form = InputForm.from_values(("", "abc", "", "", ""))

    assert renderer.theme is theme
    assert "###" in _text(InteractionState(screen=form), renderer)


def test_frame_fills_viewport_height() -> None:
    output = _text(InteractionState(viewport=Viewport(80, 30)))

    assert len(output.splitlines()) == 30
