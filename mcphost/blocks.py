"""Rendered UI messages and the bordered content blocks that hold them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

from mcphost.styles import (
    THICK_BORDER,
    AdaptiveColor,
    Align,
    Style,
    place_horizontal,
)
from mcphost.theme import get_theme

_MUTED_OPPOSITE_BORDER = AdaptiveColor(light="#F3F4F6", dark="#1F2937")


class MessageType(Enum):
    """The kind of a displayed message."""

    USER = auto()
    ASSISTANT = auto()
    TOOL = auto()
    TOOL_CALL = auto()
    SYSTEM = auto()
    ERROR = auto()


@dataclass
class UIMessage:
    """A message rendered for display."""

    type: MessageType = MessageType.USER
    content: str = ""
    height: int = 0
    timestamp: datetime | None = None
    streaming: bool = False
    id: str = ""
    position: int = 0


def render_content_block(
    content: str,
    container_width: int,
    *,
    align: Align | None = None,
    border_color: AdaptiveColor | None = None,
    full_width: bool = False,
    padding_top: int = 1,
    padding_bottom: int = 1,
    padding_left: int = 2,
    padding_right: int = 2,
    margin_top: int = 0,
    margin_bottom: int = 0,
    width: int | None = None,
) -> str:
    """Render ``content`` in a padded block with a thick side border.

    Left-aligned blocks get the colored border on the left and a faint
    one on the right; right-aligned blocks the other way round.
    """
    block_width = container_width if width is None else width
    position = align if align is not None else Align.LEFT
    color = border_color if border_color is not None else AdaptiveColor("", "")

    options: dict = {
        "padding": (padding_top, padding_right, padding_bottom, padding_left),
        "foreground": get_theme().text,
        "border": THICK_BORDER,
    }
    if position is Align.LEFT:
        options.update(
            align=position,
            border_sides=(False, True, False, True),
            border_foreground=(None, _MUTED_OPPOSITE_BORDER, None, color),
        )
    elif position is Align.RIGHT:
        options.update(
            align=position,
            border_sides=(False, True, False, True),
            border_foreground=(None, color, None, _MUTED_OPPOSITE_BORDER),
        )
    if full_width:
        options["width"] = block_width

    rendered = Style(**options).render(content)
    rendered = place_horizontal(block_width, position, rendered)
    return "\n" * max(margin_top, 0) + rendered + "\n" * max(margin_bottom, 0)


def strip_output_tags(result: str, stderr_style: Style | None = None) -> str:
    """Replace <stdout>/<stderr> sections with their content.

    Newlines at the edges of each section are dropped; stderr content is
    rendered with ``stderr_style`` when one is given. The whole result is
    stripped of surrounding whitespace.
    """
    parts: list[str] = []
    remaining = result
    while True:
        err_start = remaining.find("<stderr>")
        err_end = remaining.find("</stderr>")
        out_start = remaining.find("<stdout>")
        out_end = remaining.find("</stdout>")

        if err_start != -1 and err_end > err_start and (out_start == -1 or err_start < out_start):
            parts.append(remaining[:err_start])
            body = remaining[err_start + len("<stderr>") : err_end].strip("\n")
            if body:
                parts.append(stderr_style.render(body) if stderr_style else body)
            remaining = remaining[err_end + len("</stderr>") :]
        elif out_start != -1 and out_end > out_start:
            parts.append(remaining[:out_start])
            body = remaining[out_start + len("<stdout>") : out_end].strip("\n")
            if body:
                parts.append(body)
            remaining = remaining[out_end + len("</stdout>") :]
        else:
            parts.append(remaining)
            break
    return "".join(parts).strip()