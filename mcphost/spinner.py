"""An animated one-line spinner shown while work is in progress."""

from __future__ import annotations

import sys
import threading
from collections.abc import Sequence
from types import TracebackType
from typing import TextIO

from mcphost.styles import AdaptiveColor, Style
from mcphost.theme import get_theme

POINTS: tuple[str, ...] = ("∙∙∙", "●∙∙", "∙●∙", "∙∙●")
DOT: tuple[str, ...] = ("⣾ ", "⣽ ", "⣻ ", "⢿ ", "⡿ ", "⣟ ", "⣯ ", "⣷ ")

_CLEAR_LINE = "\r\x1b[2K"


class Spinner:
    """Draws a spinner and a message on one line from a background thread."""

    def __init__(
        self,
        message: str,
        *,
        frames: Sequence[str] = POINTS,
        interval: float = 1 / 7,
        color: AdaptiveColor | None = None,
        stream: TextIO | None = None,
    ) -> None:
        if not frames:
            raise ValueError("a spinner needs at least one frame")
        self.message = message
        self.frames = tuple(frames)
        self.interval = interval
        self.color = color if color is not None else get_theme().primary
        self._stream = stream
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def frame_line(self, index: int) -> str:
        """The line drawn for animation step ``index``."""
        theme = get_theme()
        frame = self.frames[index % len(self.frames)]
        spinner = Style(foreground=self.color, bold=True).render(frame)
        message = Style(foreground=theme.text, italic=True).render(self.message)
        return f" {spinner} {message}"

    def _animate(self) -> None:
        stream = self.stream
        index = 0
        while not self._stop.is_set():
            stream.write(_CLEAR_LINE + self.frame_line(index))
            stream.flush()
            index += 1
            self._stop.wait(self.interval)
        stream.write(_CLEAR_LINE)
        stream.flush()

    def start(self) -> None:
        """Begin the animation; does nothing if it is already running."""
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._animate, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """End the animation and clear its line."""
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None

    def __enter__(self) -> Spinner:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()