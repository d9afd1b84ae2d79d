"""Progress display for the streamed status lines of an Ollama model pull."""

from __future__ import annotations

import codecs
import json
import shutil
import sys
from dataclasses import dataclass
from types import TracebackType
from typing import IO, Any, TextIO

from mcphost.styles import Style

PADDING = 2
MAX_WIDTH = 80
_GRADIENT_START = (0x5A, 0x56, 0xE0)
_GRADIENT_END = (0xEE, 0x6F, 0xF8)
_EMPTY_COLOR = "#606060"
_HELP_STYLE = Style(foreground="#626262")
_MEBIBYTE = 1024 * 1024


@dataclass(frozen=True)
class OllamaPullProgress:
    """One status line of a pull response."""

    status: str = ""
    digest: str = ""
    total: int = 0
    completed: int = 0


@dataclass(frozen=True)
class ProgressUpdate:
    """The fraction done (0 to 1) and the status text to show."""

    percent: float
    status: str


def _field(data: dict[str, Any], name: str, kind: type, default: Any) -> Any:
    value = data.get(name)
    if value is None:
        return default
    if kind is int and isinstance(value, bool) or not isinstance(value, kind):
        raise ValueError(f"field {name!r} has the wrong type")
    return value


def _decode(line: str) -> OllamaPullProgress:
    data = json.loads(line)
    if not isinstance(data, dict):
        raise ValueError("progress line is not an object")
    return OllamaPullProgress(
        status=_field(data, "status", str, ""),
        digest=_field(data, "digest", str, ""),
        total=_field(data, "total", int, 0),
        completed=_field(data, "completed", int, 0),
    )


def parse_progress_line(line: str) -> ProgressUpdate | None:
    """Turn one JSON status line into an update, or None if it is malformed."""
    try:
        progress = _decode(line)
    except ValueError:
        return None

    status = progress.status
    percent = 0.0
    if progress.total > 0 and progress.completed >= 0:
        percent = progress.completed / progress.total
        if progress.digest:
            status = f"{progress.status} ({progress.digest[:12]})"
        total_mb = progress.total / _MEBIBYTE
        completed_mb = progress.completed / _MEBIBYTE
        status = f"{status} - {completed_mb:.1f}/{total_mb:.1f} MB"
    else:
        lowered = progress.status.lower()
        if "pulling" in lowered or "downloading" in lowered:
            percent = 0.1
        elif "success" in lowered or "complete" in lowered:
            percent = 1.0
    return ProgressUpdate(percent=percent, status=status)


def _gradient_color(position: float) -> str:
    channels = (
        round(start + (end - start) * position)
        for start, end in zip(_GRADIENT_START, _GRADIENT_END)
    )
    return "#" + "".join(f"{channel:02x}" for channel in channels)


def render_bar(percent: float, width: int) -> str:
    """A gradient bar followed by the percentage, ``width`` columns in all."""
    percent = min(max(percent, 0.0), 1.0)
    label = f" {percent * 100:3.0f}%"
    bar_width = max(width - len(label), 0)
    filled = min(round(bar_width * percent), bar_width)
    cells = [
        Style(foreground=_gradient_color(i / max(bar_width - 1, 1))).render("█")
        for i in range(filled)
    ]
    empty = Style(foreground=_EMPTY_COLOR).render("░" * (bar_width - filled))
    return "".join(cells) + empty + label


def _default_width() -> int:
    columns = shutil.get_terminal_size().columns
    return max(min(columns - PADDING * 2 - 4, MAX_WIDTH), 10)


class ProgressReader:
    """Wraps a pull response stream and draws progress as it is read.

    Reads pass the data through unchanged; complete lines are parsed and
    the display is redrawn. End of stream or ``close`` marks it complete.
    """

    def __init__(
        self, reader: IO[Any], output: TextIO | None = None, width: int | None = None
    ) -> None:
        self._reader = reader
        self._output = output if output is not None else sys.stdout
        self.width = width if width is not None else _default_width()
        self.percent = 0.0
        self.status = "Initializing..."
        self.complete = False
        self._pending = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._drawn_lines = 0
        self._finalized = False
        self._draw()

    def _view(self) -> str:
        pad = " " * PADDING
        bar = render_bar(self.percent, self.width)
        if self.complete:
            return f"\n{pad}{bar}\n\n{pad}Complete!\n"
        hint = _HELP_STYLE.render("Press 'q' or Ctrl+C to cancel")
        return f"\n{pad}{bar}\n{pad}{self.status}\n\n{pad}{hint}"

    def _draw(self) -> None:
        if self._finalized:
            return
        view = self._view()
        if self._drawn_lines:
            self._output.write(f"\x1b[{self._drawn_lines}F\x1b[J")
        self._output.write(view)
        self._output.flush()
        self._drawn_lines = view.count("\n")
        if self.complete:
            self._finalized = True

    def _apply(self, update: ProgressUpdate) -> None:
        if self.complete:
            return
        self.status = update.status
        self.percent = min(max(update.percent, 0.0), 1.0)
        if update.percent >= 1.0:
            self.complete = True
        self._draw()

    def _finish(self) -> None:
        self.complete = True
        self._draw()

    def read(self, size: int = -1) -> Any:
        """Read from the wrapped stream, updating the display from what was read."""
        data = self._reader.read(size)
        if data:
            text = self._decoder.decode(data) if isinstance(data, bytes) else data
            self._pending += text
            while "\n" in self._pending:
                line, self._pending = self._pending.split("\n", 1)
                line = line.strip()
                if line:
                    update = parse_progress_line(line)
                    if update is not None:
                        self._apply(update)
        elif size != 0:
            self._finish()
        return data

    def close(self) -> None:
        """Mark the pull complete and draw the final view."""
        self._finish()

    def __enter__(self) -> ProgressReader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()