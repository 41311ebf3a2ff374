"""
Interface of the rendering engine the queue drives.

Any object with ``select_composition`` and ``render_media`` matching
:class:`RenderEngine` can be plugged into the queue. The default
implementation lives in :mod:`quiz_render.core.quiz_video`.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from quiz_render.core.errors import RenderCancelledError


class CancelSignal:
    """One-shot cancellation flag shared between the queue and a render."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Ask the render to stop. Calling it again, or after the render ended, does nothing."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            msg = "Render was cancelled"
            raise RenderCancelledError(msg)


def make_cancel_signal() -> CancelSignal:
    return CancelSignal()


@dataclass(frozen=True)
class Composition:
    """A renderable composition with its props already bound."""

    id: str
    width: int
    height: int
    fps: int
    duration_in_frames: int
    props: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class RenderOutput:
    buffer: bytes | None


ProgressCallback = Callable[[float], None]


class RenderEngine(Protocol):
    def select_composition(
        self,
        serve_url: str,
        composition_id: str,
        input_props: dict[str, Any],
    ) -> Composition: ...

    def render_media(
        self,
        *,
        cancel_signal: CancelSignal,
        serve_url: str,
        composition: Composition,
        codec: str,
        on_progress: ProgressCallback,
    ) -> RenderOutput: ...


# media type, file extension. The built-in engine only writes gif and webp;
# h264 is here for engines plugged in through RenderEngine that emit MP4.
CODECS: dict[str, tuple[str, str]] = {
    "gif": ("image/gif", ".gif"),
    "webp": ("image/webp", ".webp"),
    "h264": ("video/mp4", ".mp4"),
}


def media_type_for(codec: str) -> str:
    return CODECS.get(codec, ("application/octet-stream", ".bin"))[0]


def extension_for(codec: str) -> str:
    return CODECS.get(codec, ("application/octet-stream", ".bin"))[1]


__all__ = [
    "CODECS",
    "CancelSignal",
    "Composition",
    "ProgressCallback",
    "RenderEngine",
    "RenderOutput",
    "extension_for",
    "make_cancel_signal",
    "media_type_for",
]
