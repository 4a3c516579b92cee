"""Single-threaded dispatcher that owns the interaction state."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable

from rich.console import RenderableType

from .connections import ConnectionProbe
from .models import ConnectionParameters, IntrospectionResult, ProbeFailure
from .render import Renderer
from .state import Event, InteractionState, ProbeCompleted, Quit, SpawnProbe, transition

LOG = logging.getLogger(__name__)

FrameSink = Callable[[RenderableType], None]


class EventLoop:
    """Pulls events off a queue, applies them and displays the next frame.

    All state changes happen inside :meth:`run`. The probe runs on a daemon
    thread and its result only re-enters through the queue, so quitting never
    waits for a hung connection.
    """

    def __init__(
        self,
        probe: ConnectionProbe,
        renderer: Renderer,
        display: FrameSink,
        *,
        state: InteractionState | None = None,
    ) -> None:
        self._probe = probe
        self._renderer = renderer
        self._display = display
        self._state = state or InteractionState()
        self._queue: asyncio.Queue[Event] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._backlog: list[Event] = []
        self._pending: object | None = None

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def probe_pending(self) -> bool:
        return self._pending is not None

    def post(self, event: Event) -> None:
        """Queue an event from the loop thread."""

        if self._queue is None:
            self._backlog.append(event)
            return
        self._queue.put_nowait(event)

    async def run(self) -> None:
        """Process events until a quit is requested."""

        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        for event in self._backlog:
            self._queue.put_nowait(event)
        self._backlog.clear()
        self._show()
        try:
            while True:
                event = await self._queue.get()
                outcome = transition(self._state, event)
                self._state = outcome.state
                if isinstance(outcome.effect, Quit):
                    LOG.info("Quit requested")
                    return
                if isinstance(outcome.effect, SpawnProbe):
                    self._launch(outcome.effect.params)
                self._show()
        finally:
            self._shutdown()

    def _show(self) -> None:
        self._display(self._renderer.render(self._state))

    def _launch(self, params: ConnectionParameters) -> None:
        if self._pending is not None:
            raise RuntimeError("A probe is already outstanding.")
        LOG.info("Starting probe", extra={"host": params.host, "database": params.database})
        token = object()
        self._pending = token
        worker = threading.Thread(
            target=self._run_probe,
            args=(token, params),
            name="absurdpg-probe",
            daemon=True,
        )
        worker.start()

    def _run_probe(self, token: object, params: ConnectionParameters) -> None:
        try:
            result = self._probe.probe(params)
        except asyncio.CancelledError:
            LOG.warning("Probe was cancelled")
            result = ProbeFailure("probe cancelled")
        except Exception as exc:
            LOG.exception("Probe raised unexpectedly")
            result = ProbeFailure(str(exc) or type(exc).__name__)
        try:
            self._loop.call_soon_threadsafe(self._deliver, token, result)
        except RuntimeError:
            LOG.debug("Event loop closed before the probe finished; result dropped")

    def _deliver(self, token: object, result: IntrospectionResult) -> None:
        # Runs on the loop thread; the only hand-off point from the worker.
        if token is not self._pending:
            return
        self._pending = None
        self.post(ProbeCompleted(result))

    def _shutdown(self) -> None:
        self._pending = None


__all__ = ["EventLoop", "FrameSink"]
