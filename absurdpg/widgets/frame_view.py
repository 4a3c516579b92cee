"""Full-screen widget that shows the latest rendered frame."""

from __future__ import annotations

from rich.console import RenderableType
from textual.widgets import Static


class FrameView(Static):
    """Displays frames produced by the renderer."""

    DEFAULT_CSS = """
    FrameView {
        width: 100%;
        height: 100%;
        background: $background;
    }
    """

    def __init__(self) -> None:
        super().__init__("", id="frame")
        self._frames = 0

    @property
    def frames_shown(self) -> int:
        return self._frames

    def show(self, frame: RenderableType) -> None:
        self._frames += 1
        self.update(frame)


__all__ = ["FrameView"]
