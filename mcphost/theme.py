"""The UI color theme and the styles built from it."""

from __future__ import annotations

from dataclasses import dataclass

from mcphost.styles import (
    ROUNDED_BORDER,
    AdaptiveColor,
    Align,
    Style,
    place_horizontal,
)


@dataclass(frozen=True)
class Theme:
    """A complete set of UI colors."""

    primary: AdaptiveColor
    secondary: AdaptiveColor
    success: AdaptiveColor
    warning: AdaptiveColor
    error: AdaptiveColor
    info: AdaptiveColor
    text: AdaptiveColor
    muted: AdaptiveColor
    very_muted: AdaptiveColor
    background: AdaptiveColor
    border: AdaptiveColor
    muted_border: AdaptiveColor
    system: AdaptiveColor
    tool: AdaptiveColor
    accent: AdaptiveColor
    highlight: AdaptiveColor


def default_theme() -> Theme:
    """The default theme: Catppuccin Latte on light, Mocha on dark backgrounds."""
    return Theme(
        primary=AdaptiveColor(light="#8839ef", dark="#cba6f7"),
        secondary=AdaptiveColor(light="#04a5e5", dark="#89dceb"),
        success=AdaptiveColor(light="#40a02b", dark="#a6e3a1"),
        warning=AdaptiveColor(light="#df8e1d", dark="#f9e2af"),
        error=AdaptiveColor(light="#d20f39", dark="#f38ba8"),
        info=AdaptiveColor(light="#1e66f5", dark="#89b4fa"),
        text=AdaptiveColor(light="#4c4f69", dark="#cdd6f4"),
        muted=AdaptiveColor(light="#6c6f85", dark="#a6adc8"),
        very_muted=AdaptiveColor(light="#9ca0b0", dark="#6c7086"),
        background=AdaptiveColor(light="#eff1f5", dark="#1e1e2e"),
        border=AdaptiveColor(light="#acb0be", dark="#585b70"),
        muted_border=AdaptiveColor(light="#ccd0da", dark="#313244"),
        system=AdaptiveColor(light="#179299", dark="#94e2d5"),
        tool=AdaptiveColor(light="#fe640b", dark="#fab387"),
        accent=AdaptiveColor(light="#ea76cb", dark="#f5c2e7"),
        highlight=AdaptiveColor(light="#df8e1d", dark="#45475a"),
    )


class _ThemeSlot:
    """Holds the theme in use."""

    def __init__(self, theme: Theme) -> None:
        self.theme = theme


_active = _ThemeSlot(default_theme())


def get_theme() -> Theme:
    """The theme currently in use."""
    return _active.theme


def set_theme(theme: Theme) -> None:
    """Replace the theme in use."""
    _active.theme = theme


def style_card(width: int, theme: Theme) -> Style:
    """A rounded, bordered card container."""
    return Style(
        width=width,
        border=ROUNDED_BORDER,
        border_foreground=theme.border,
        padding=(1, 2),
        margin=(0, 0, 1, 0),
    )


def style_header(theme: Theme) -> Style:
    """Bold header text in the primary color."""
    return Style(foreground=theme.primary, bold=True)


def style_subheader(theme: Theme) -> Style:
    """Bold subheader text in the secondary color."""
    return Style(foreground=theme.secondary, bold=True)


def style_muted(theme: Theme) -> Style:
    """Italic, muted text."""
    return Style(foreground=theme.muted, italic=True)


def style_success(theme: Theme) -> Style:
    """Bold text in the success color."""
    return Style(foreground=theme.success, bold=True)


def style_error(theme: Theme) -> Style:
    """Bold text in the error color."""
    return Style(foreground=theme.error, bold=True)


def style_warning(theme: Theme) -> Style:
    """Bold text in the warning color."""
    return Style(foreground=theme.warning, bold=True)


def style_info(theme: Theme) -> Style:
    """Bold text in the info color."""
    return Style(foreground=theme.info, bold=True)


def create_separator(width: int, char: str, color: AdaptiveColor) -> str:
    """A separator of ``width`` columns with ``char`` centered in it."""
    return Style(foreground=color, width=width).render(
        place_horizontal(width, Align.CENTER, char)
    )


def create_progress_bar(width: int, percentage: float, theme: Theme) -> str:
    """A simple bar of filled and empty cells for ``percentage`` (0-100)."""
    filled = int(width * percentage / 100)
    empty = width - filled
    filled_bar = Style(foreground=theme.success).render(
        place_horizontal(filled, Align.LEFT, "█")
    )
    empty_bar = Style(foreground=theme.muted).render(
        place_horizontal(empty, Align.LEFT, "░")
    )
    return filled_bar + empty_bar


def create_badge(text: str, color: AdaptiveColor) -> str:
    """Bold text on a colored background with one column of padding each side."""
    return Style(
        foreground=AdaptiveColor(light="#FFFFFF", dark="#000000"),
        background=color,
        padding=(0, 1),
        bold=True,
    ).render(text)


def create_gradient_text(
    text: str, start_color: AdaptiveColor, end_color: AdaptiveColor
) -> str:
    """Bold text in the start color; the end color is reserved for a true gradient."""
    return Style(foreground=start_color, bold=True).render(text)


def format_compact_line(
    symbol: str,
    label: str,
    content: str,
    symbol_color: AdaptiveColor,
    label_color: AdaptiveColor,
    content_color: AdaptiveColor,
) -> str:
    """One compact line: symbol, an 8-column label and the content."""
    styled_symbol = Style(foreground=symbol_color, bold=True).render(symbol)
    styled_label = Style(foreground=label_color, bold=True, width=8).render(label)
    styled_content = Style(foreground=content_color).render(content)
    return f"{styled_symbol}  {styled_label:<8} {styled_content}"