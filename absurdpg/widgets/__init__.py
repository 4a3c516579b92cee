"""Widget library for the Textual UI."""

from __future__ import annotations

from .frame_view import FrameView

__all__ = ["FrameView"]
