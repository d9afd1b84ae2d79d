"""Terminal styling: colors, padded and bordered blocks, and markdown output."""

from __future__ import annotations

import io
import os
import re
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Union

from rich.console import Console
from rich.markdown import Markdown
from rich.theme import Theme as RichTheme
from wcwidth import wcwidth

ANSI_PATTERN = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")
_TRAILING_BLANK = re.compile(r"(?: |\x1b\[[0-9;]*m)+$")
_UNWRAPPED_WIDTH = 10000


class Align(Enum):
    """Position of content within available space (0 = start, 1 = end)."""

    LEFT = 0.0
    CENTER = 0.5
    RIGHT = 1.0
    TOP = 0.0
    BOTTOM = 1.0


@dataclass(frozen=True)
class AdaptiveColor:
    """A color with separate values for light and dark backgrounds."""

    light: str = ""
    dark: str = ""

    def resolve(self, dark: bool) -> str:
        """The color value for a dark or light background."""
        return self.dark if dark else self.light


Color = Union[AdaptiveColor, str, None]


@dataclass(frozen=True)
class Border:
    """The characters drawing each edge and corner of a border."""

    top: str
    bottom: str
    left: str
    right: str
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str


NORMAL_BORDER = Border("─", "─", "│", "│", "┌", "┐", "└", "┘")
ROUNDED_BORDER = Border("─", "─", "│", "│", "╭", "╮", "╰", "╯")
THICK_BORDER = Border("━", "━", "┃", "┃", "┏", "┓", "┗", "┛")


def _detect_color() -> bool:
    if "NO_COLOR" in os.environ:
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _detect_dark() -> bool:
    fgbg = os.environ.get("COLORFGBG", "")
    background = fgbg.rsplit(";", 1)[-1]
    if not background.isdigit():
        return True
    value = int(background)
    return value < 7 or value == 8


@dataclass
class _Settings:
    color: bool
    dark: bool


_settings = _Settings(color=_detect_color(), dark=_detect_dark())


def set_color_enabled(enabled: bool) -> None:
    """Turn ANSI color and attribute output on or off."""
    _settings.color = bool(enabled)


def set_dark_background(dark: bool) -> None:
    """Declare whether the terminal background is dark."""
    _settings.dark = bool(dark)


def has_dark_background() -> bool:
    """Whether the terminal background is treated as dark."""
    return _settings.dark


def _line_width(line: str) -> int:
    plain = ANSI_PATTERN.sub("", line)
    return sum(max(wcwidth(ch), 0) for ch in plain)


def visible_width(text: str) -> int:
    """Display width of the widest line, ignoring escape sequences."""
    return max((_line_width(line) for line in text.split("\n")), default=0)


def height(text: str) -> int:
    """Number of lines in ``text``."""
    return text.count("\n") + 1


def _sgr_color(color: Color, base: int) -> str | None:
    value = color.resolve(_settings.dark) if isinstance(color, AdaptiveColor) else color
    if not value:
        return None
    if value.startswith("#"):
        digits = value[1:]
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) != 6:
            return None
        try:
            red, green, blue = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
        except ValueError:
            return None
        return f"{base};2;{red};{green};{blue}"
    if value.isdigit():
        return f"{base};5;{int(value)}"
    return None


def _apply_sgr(text: str, codes: list[str]) -> str:
    if not text or not codes or not _settings.color:
        return text
    return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


def _pad_line(line: str, target: int, align: Align, codes: list[str]) -> str:
    gap = target - _line_width(line)
    if gap <= 0:
        return line
    left = int(gap * align.value)
    return _apply_sgr(" " * left, codes) + line + _apply_sgr(" " * (gap - left), codes)


def _split_at(text: str, width: int) -> tuple[str, str]:
    """Split ``text`` after at most ``width`` columns (at least one character)."""
    head: list[str] = []
    used = 0
    position = 0
    while position < len(text):
        escape = ANSI_PATTERN.match(text, position)
        if escape:
            head.append(escape.group(0))
            position = escape.end()
            continue
        ch_width = max(wcwidth(text[position]), 0)
        if used + ch_width > width and used > 0:
            break
        head.append(text[position])
        used += ch_width
        position += 1
    return "".join(head), text[position:]


def _wrap_line(line: str, width: int) -> list[str]:
    if width < 1 or _line_width(line) <= width:
        return [line]
    lines: list[str] = []
    current: str | None = None
    current_width = 0
    for word in line.split(" "):
        word_width = _line_width(word)
        if current is not None and current_width + 1 + word_width <= width:
            current += " " + word
            current_width += 1 + word_width
            continue
        if current is not None:
            lines.append(current)
        while word_width > width:
            head, word = _split_at(word, width)
            lines.append(head)
            word_width = _line_width(word)
        current, current_width = word, word_width
    lines.append(current or "")
    return lines


def _expand_sides(value: int | tuple[int, ...]) -> tuple[int, int, int, int]:
    if isinstance(value, int):
        return (value,) * 4
    sizes = tuple(value)
    if len(sizes) == 1:
        return sizes * 4
    if len(sizes) == 2:
        return (sizes[0], sizes[1], sizes[0], sizes[1])
    if len(sizes) == 3:
        return (sizes[0], sizes[1], sizes[2], sizes[1])
    if len(sizes) == 4:
        return sizes  # type: ignore[return-value]
    raise ValueError(f"expected 1 to 4 side values, got {len(sizes)}")


@dataclass(frozen=True)
class Style:
    """A reusable text style: colors, attributes, layout and border.

    Padding and margin take one to four values in the order
    top, right, bottom, left. ``border_foreground`` may be one color or
    a tuple of four, one per side.
    """

    foreground: Color = None
    background: Color = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    padding: int | tuple[int, ...] = 0
    margin: int | tuple[int, ...] = 0
    width: int | None = None
    height: int | None = None
    align: Align = Align.LEFT
    align_vertical: Align = Align.TOP
    border: Border | None = None
    border_sides: tuple[bool, bool, bool, bool] | None = None
    border_foreground: Color | tuple[Color, ...] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "padding", _expand_sides(self.padding))
        object.__setattr__(self, "margin", _expand_sides(self.margin))
        colors = self.border_foreground
        if isinstance(colors, tuple):
            if len(colors) == 1:
                colors = colors * 4
            elif len(colors) == 2:
                colors = (colors[0], colors[1], colors[0], colors[1])
            elif len(colors) != 4:
                raise ValueError("border_foreground takes 1, 2 or 4 colors")
        else:
            colors = (colors,) * 4
        object.__setattr__(self, "border_foreground", colors)

    def _text_codes(self) -> list[str]:
        codes = [
            code
            for enabled, code in (
                (self.bold, "1"),
                (self.italic, "3"),
                (self.underline, "4"),
                (self.strikethrough, "9"),
            )
            if enabled
        ]
        codes += [
            code
            for code in (_sgr_color(self.foreground, 38), _sgr_color(self.background, 48))
            if code
        ]
        return codes

    def render(self, text: str) -> str:
        """Apply the style to ``text`` and return the rendered block."""
        text = str(text).replace("\r\n", "\n").replace("\t", "    ")
        top, right, bottom, left = self.padding  # type: ignore[misc]
        lines = text.split("\n")

        wrap_at = 0
        if self.width is not None:
            wrap_at = max(self.width - left - right, 0)
            lines = [piece for line in lines for piece in _wrap_line(line, wrap_at)]

        background = _sgr_color(self.background, 48)
        bg_codes = [background] if background else []
        text_codes = self._text_codes()

        content_width = max(wrap_at, max(_line_width(line) for line in lines))
        lines = [_pad_line(_apply_sgr(line, text_codes), content_width, self.align, bg_codes) for line in lines]

        if self.height is not None and len(lines) < self.height:
            gap = self.height - len(lines)
            above = int(gap * self.align_vertical.value)
            blank = _apply_sgr(" " * content_width, bg_codes)
            lines = [blank] * above + lines + [blank] * (gap - above)

        if left or right:
            left_pad = _apply_sgr(" " * left, bg_codes)
            right_pad = _apply_sgr(" " * right, bg_codes)
            lines = [left_pad + line + right_pad for line in lines]
        block_width = content_width + left + right
        blank = _apply_sgr(" " * block_width, bg_codes)
        lines = [blank] * top + lines + [blank] * bottom

        if self.border is not None:
            lines = self._apply_border(lines, block_width)

        return "\n".join(self._apply_margin(lines))

    def _apply_border(self, lines: list[str], width: int) -> list[str]:
        border = self.border
        assert border is not None
        show_top, show_right, show_bottom, show_left = self.border_sides or (True,) * 4
        top_c, right_c, bottom_c, left_c = (
            [code] if code else [] for code in (_sgr_color(c, 38) for c in self.border_foreground)  # type: ignore[union-attr]
        )
        left_edge = _apply_sgr(border.left, left_c) if show_left else ""
        right_edge = _apply_sgr(border.right, right_c) if show_right else ""
        framed = [left_edge + line + right_edge for line in lines]
        if show_top:
            edge = (
                (border.top_left if show_left else "")
                + border.top * width
                + (border.top_right if show_right else "")
            )
            framed.insert(0, _apply_sgr(edge, top_c))
        if show_bottom:
            edge = (
                (border.bottom_left if show_left else "")
                + border.bottom * width
                + (border.bottom_right if show_right else "")
            )
            framed.append(_apply_sgr(edge, bottom_c))
        return framed

    def _apply_margin(self, lines: list[str]) -> list[str]:
        top, right, bottom, left = self.margin  # type: ignore[misc]
        if not any((top, right, bottom, left)):
            return lines
        inner = max(_line_width(line) for line in lines)
        lines = [" " * left + _pad_line(line, inner, Align.LEFT, []) + " " * right if (left or right) else line for line in lines]
        blank = " " * (inner + left + right)
        return [blank] * top + lines + [blank] * bottom


def place_horizontal(width: int, align: Align, text: str) -> str:
    """Pad each line of ``text`` to ``width`` columns at the given alignment."""
    if width - visible_width(text) <= 0:
        return text
    return "\n".join(_pad_line(line, width, align, []) for line in text.split("\n"))


def join_vertical(align: Align, *args: str) -> str:
    """Stack blocks vertically, padding lines to the widest one."""
    if not args:
        return ""
    lines = [line for block in args for line in block.split("\n")]
    target = max(_line_width(line) for line in lines)
    return "\n".join(_pad_line(line, target, align, []) for line in lines)


_DARK_PALETTE = {
    "text": "#F9FAFB",
    "muted": "#9CA3AF",
    "heading": "#22D3EE",
    "emph": "#FDE047",
    "strong": "#F9FAFB",
    "link": "#60A5FA",
    "code": "#D1D5DB",
}

_LIGHT_PALETTE = {
    "text": "#1F2937",
    "muted": "#6B7280",
    "heading": "#0891B2",
    "emph": "#D97706",
    "strong": "#1F2937",
    "link": "#2563EB",
    "code": "#374151",
}


def markdown_theme() -> RichTheme:
    """Markdown styles matched to the terminal background."""
    palette = _DARK_PALETTE if _settings.dark else _LIGHT_PALETTE
    text, muted, heading = palette["text"], palette["muted"], palette["heading"]
    styles = {
        "markdown.paragraph": text,
        "markdown.text": text,
        "markdown.block_quote": f"italic {muted}",
        "markdown.list": text,
        "markdown.item": text,
        "markdown.item.bullet": text,
        "markdown.item.number": text,
        "markdown.h1.border": heading,
        "markdown.s": f"strike {muted}",
        "markdown.em": f"italic {palette['emph']}",
        "markdown.emph": f"italic {palette['emph']}",
        "markdown.strong": f"bold {palette['strong']}",
        "markdown.hr": muted,
        "markdown.link": f"bold {palette['link']}",
        "markdown.link_url": f"underline {palette['link']}",
        "markdown.code": palette["code"],
        "markdown.code_block": palette["code"],
        "markdown.table.border": muted,
        "markdown.table.header": f"bold {heading}",
    }
    styles.update({f"markdown.h{level}": f"bold {heading}" for level in range(1, 7)})
    return RichTheme(styles)


def _strip_trailing_blank(line: str) -> str:
    return _TRAILING_BLANK.sub(lambda m: "".join(ANSI_PATTERN.findall(m.group(0))), line)


def to_markdown(content: str, width: int) -> str:
    """Render markdown to terminal text wrapped at ``width`` columns."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=width if width > 0 else _UNWRAPPED_WIDTH,
        force_terminal=_settings.color,
        no_color=not _settings.color,
        color_system="truecolor" if _settings.color else None,
        theme=markdown_theme(),
        highlight=False,
        emoji=False,
        legacy_windows=False,
    )
    console.print(Markdown(content))
    return "\n".join(_strip_trailing_blank(line) for line in buffer.getvalue().split("\n"))