"""Interaction state machine driving the four screens.

The state is immutable: :func:`transition` takes the current
:class:`InteractionState` and one event and returns a :class:`Transition`
holding the next state plus an optional effect the event loop must carry out.
Nothing in this module performs I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Mapping

from .models import ConnectionParameters, IntrospectionResult, ProbeFailure

LOG = logging.getLogger(__name__)

FIELD_COUNT = 5
TAB_COUNT = 4

# Form order of the editable fields.
USER, PASSWORD, HOST, PORT, DATABASE = range(FIELD_COUNT)


@dataclass(frozen=True, slots=True)
class TextField:
    """Single line of editable text with a cursor."""

    value: str = ""
    cursor: int = 0

    def insert(self, text: str) -> TextField:
        head, tail = self.value[: self.cursor], self.value[self.cursor :]
        return TextField(head + text + tail, self.cursor + len(text))

    def backspace(self) -> TextField:
        if self.cursor == 0:
            return self
        return TextField(self.value[: self.cursor - 1] + self.value[self.cursor :], self.cursor - 1)

    def delete(self) -> TextField:
        if self.cursor >= len(self.value):
            return self
        return TextField(self.value[: self.cursor] + self.value[self.cursor + 1 :], self.cursor)

    def move(self, delta: int) -> TextField:
        cursor = max(0, min(len(self.value), self.cursor + delta))
        return replace(self, cursor=cursor)

    def home(self) -> TextField:
        return replace(self, cursor=0)

    def end(self) -> TextField:
        return replace(self, cursor=len(self.value))


def _empty_fields() -> tuple[TextField, ...]:
    return tuple(TextField() for _ in range(FIELD_COUNT))


@dataclass(frozen=True, slots=True)
class InputForm:
    """Connection form; exactly one field is focused."""

    fields: tuple[TextField, ...] = field(default_factory=_empty_fields)
    focused: int = 0

    @classmethod
    def from_values(cls, values: tuple[str, ...] | list[str], focused: int = 0) -> InputForm:
        if len(values) != FIELD_COUNT:
            raise ValueError(f"Expected {FIELD_COUNT} field values, got {len(values)}.")
        return cls(tuple(TextField(value, len(value)) for value in values), focused % FIELD_COUNT)

    @property
    def values(self) -> tuple[str, ...]:
        return tuple(entry.value for entry in self.fields)

    def focus(self, delta: int) -> InputForm:
        return replace(self, focused=(self.focused + delta + FIELD_COUNT) % FIELD_COUNT)

    def edit(self, updated: TextField) -> InputForm:
        fields = list(self.fields)
        fields[self.focused] = updated
        return replace(self, fields=tuple(fields))

    def parameters(self) -> ConnectionParameters:
        values = self.values
        return ConnectionParameters(
            host=values[HOST],
            port=values[PORT],
            user=values[USER],
            password=values[PASSWORD],
            database=values[DATABASE],
        )


@dataclass(frozen=True, slots=True)
class Connecting:
    """A probe is outstanding; the form is kept for a retry."""

    form: InputForm


@dataclass(frozen=True, slots=True)
class Dashboard:
    """Tables and row counts from the latest successful probe."""

    tables: tuple[str, ...] = ()
    row_counts: Mapping[str, int] = field(default_factory=dict)
    selected_tab: int = 0


@dataclass(frozen=True, slots=True)
class ErrorScreen:
    """Failed probe; Enter returns to the retained form."""

    message: str
    form: InputForm


Screen = InputForm | Connecting | Dashboard | ErrorScreen


@dataclass(frozen=True, slots=True)
class Viewport:
    width: int = 0
    height: int = 0


@dataclass(frozen=True, slots=True)
class InteractionState:
    """Current screen plus the terminal size."""

    screen: Screen = field(default_factory=InputForm)
    viewport: Viewport = field(default_factory=Viewport)

    @property
    def field_values(self) -> tuple[str, ...]:
        form = _form_of(self.screen)
        return form.values if form else ()

    @property
    def focused_field(self) -> int | None:
        form = _form_of(self.screen)
        return form.focused if form else None

    @property
    def last_error(self) -> str | None:
        if isinstance(self.screen, ErrorScreen):
            return self.screen.message
        return None

    @property
    def tables(self) -> tuple[str, ...]:
        if isinstance(self.screen, Dashboard):
            return self.screen.tables
        return ()

    @property
    def row_counts(self) -> Mapping[str, int]:
        if isinstance(self.screen, Dashboard):
            return self.screen.row_counts
        return {}

    @property
    def selected_tab(self) -> int | None:
        if isinstance(self.screen, Dashboard):
            return self.screen.selected_tab
        return None


def _form_of(screen: Screen) -> InputForm | None:
    if isinstance(screen, InputForm):
        return screen
    if isinstance(screen, (Connecting, ErrorScreen)):
        return screen.form
    return None


@dataclass(frozen=True, slots=True)
class KeyPress:
    """Key event using Textual key names (``tab``, ``shift+tab``, ``ctrl+c``...)."""

    key: str
    character: str | None = None

    @property
    def is_printable(self) -> bool:
        return self.character is not None and len(self.character) == 1 and self.character.isprintable()


@dataclass(frozen=True, slots=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class ProbeCompleted:
    result: IntrospectionResult


Event = KeyPress | Resize | ProbeCompleted


@dataclass(frozen=True, slots=True)
class SpawnProbe:
    """Ask the event loop to run a probe with these parameters."""

    params: ConnectionParameters


@dataclass(frozen=True, slots=True)
class Quit:
    """Ask the event loop to stop."""


Effect = SpawnProbe | Quit


@dataclass(frozen=True, slots=True)
class Transition:
    state: InteractionState
    effect: Effect | None = None


QUIT_KEY = "ctrl+c"

_FIELD_EDITS = {
    "backspace": TextField.backspace,
    "delete": TextField.delete,
    "left": lambda entry: entry.move(-1),
    "right": lambda entry: entry.move(1),
    "home": TextField.home,
    "end": TextField.end,
}


def transition(state: InteractionState, event: Event) -> Transition:
    """Apply one event to the state."""

    if isinstance(event, Resize):
        viewport = Viewport(event.width, event.height)
        if viewport == state.viewport:
            return Transition(state)
        return Transition(replace(state, viewport=viewport))
    if isinstance(event, ProbeCompleted):
        return _complete_probe(state, event.result)
    if isinstance(event, KeyPress):
        return _press(state, event)
    raise TypeError(f"Unsupported event: {event!r}")


def _complete_probe(state: InteractionState, result: IntrospectionResult) -> Transition:
    screen = state.screen
    if not isinstance(screen, Connecting):
        LOG.debug("Ignoring probe result outside the connecting screen", extra={"screen": type(screen).__name__})
        return Transition(state)
    if isinstance(result, ProbeFailure):
        return Transition(replace(state, screen=ErrorScreen(result.reason, screen.form)))
    dashboard = Dashboard(tables=tuple(result.tables), row_counts=dict(result.row_counts))
    return Transition(replace(state, screen=dashboard))


def _press(state: InteractionState, event: KeyPress) -> Transition:
    if event.key == QUIT_KEY:
        return Transition(state, Quit())
    screen = state.screen
    if isinstance(screen, InputForm):
        return _press_form(state, screen, event)
    if isinstance(screen, ErrorScreen):
        if event.key == "enter":
            return Transition(replace(state, screen=screen.form))
        return Transition(state)
    if isinstance(screen, Dashboard):
        if event.key == "q":
            return Transition(state, Quit())
        if event.key in ("left", "right"):
            step = -1 if event.key == "left" else 1
            tab = (screen.selected_tab + step + TAB_COUNT) % TAB_COUNT
            return Transition(replace(state, screen=replace(screen, selected_tab=tab)))
        return Transition(state)
    # Connecting: no interactive surface until the probe reports back.
    return Transition(state)


def _press_form(state: InteractionState, form: InputForm, event: KeyPress) -> Transition:
    key = event.key
    if key in ("tab", "down"):
        return Transition(replace(state, screen=form.focus(1)))
    if key in ("shift+tab", "up"):
        return Transition(replace(state, screen=form.focus(-1)))
    if key == "enter":
        return Transition(replace(state, screen=Connecting(form)), SpawnProbe(form.parameters()))
    current = form.fields[form.focused]
    if key in _FIELD_EDITS:
        return Transition(replace(state, screen=form.edit(_FIELD_EDITS[key](current))))
    if event.is_printable:
        return Transition(replace(state, screen=form.edit(current.insert(event.character or ""))))
    return Transition(state)


__all__ = [
    "Connecting",
    "Dashboard",
    "Effect",
    "ErrorScreen",
    "Event",
    "FIELD_COUNT",
    "InputForm",
    "InteractionState",
    "KeyPress",
    "ProbeCompleted",
    "Quit",
    "Resize",
    "Screen",
    "SpawnProbe",
    "TAB_COUNT",
    "TextField",
    "Transition",
    "Viewport",
    "transition",
]
