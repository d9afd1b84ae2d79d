"""Full-width message rendering and the container that lays messages out."""

from __future__ import annotations

import getpass
import os
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from mcphost.blocks import MessageType, UIMessage, render_content_block, strip_output_tags
from mcphost.compact import CompactRenderer
from mcphost.styles import (
    ROUNDED_BORDER,
    THICK_BORDER,
    Align,
    Style,
    height,
    join_vertical,
    place_horizontal,
    to_markdown,
    visible_width,
)
from mcphost.theme import get_theme

_BLOCK_INSET = 8
_MAX_ARGS_LENGTH = 100
_MAX_RESULT_LINES = 10
_SHELL_WORDS = ("bash", "command", "shell")


def system_username() -> str:
    """The current user's login name, or "User" when it cannot be found."""
    try:
        name = getpass.getuser()
    except Exception:
        name = ""
    if name:
        return name
    for variable in ("USER", "USERNAME"):
        value = os.environ.get(variable, "")
        if value:
            return value
    return "User"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _local(timestamp: datetime | None) -> datetime:
    return (timestamp or datetime.now()).astimezone()


def _short_time(timestamp: datetime | None) -> str:
    return _local(timestamp).strftime("%H:%M")


def _is_shell_tool(tool_name: str) -> bool:
    return any(word in tool_name for word in _SHELL_WORDS) or tool_name == "run_shell_cmd"


class MessageRenderer:
    """Renders messages as bordered blocks with an info line beneath."""

    def __init__(self, width: int, debug: bool = False) -> None:
        self.width = width
        self.debug = debug

    def _info_line(self, text: str) -> str:
        return Style(foreground=get_theme().very_muted).render(text)

    def _placeholder(self, text: str) -> str:
        return Style(italic=True, foreground=get_theme().muted, align=Align.CENTER).render(text)

    def _render_markdown(self, content: str, width: int) -> str:
        return to_markdown(content, width).removesuffix("\n")

    def render_user_message(self, content: str, timestamp: datetime | None = None) -> UIMessage:
        """A right-aligned block with the user's name and time."""
        theme = get_theme()
        body = self._render_markdown(content, self.width - _BLOCK_INSET)
        info = f" {system_username()} ({_short_time(timestamp)})"
        full = body.removesuffix("\n") + "\n" + self._info_line(info)
        rendered = render_content_block(
            full,
            self.width,
            align=Align.RIGHT,
            border_color=theme.secondary,
            margin_bottom=1,
        )
        return UIMessage(
            type=MessageType.USER,
            content=rendered,
            height=height(rendered),
            timestamp=timestamp or datetime.now(),
        )

    def render_assistant_message(
        self, content: str, timestamp: datetime | None = None, model_name: str = ""
    ) -> UIMessage:
        """A left-aligned block labelled with the model name."""
        theme = get_theme()
        if content.strip() == "":
            body = self._placeholder("Finished without output")
        else:
            body = self._render_markdown(content, self.width - _BLOCK_INSET)
        info = f" {model_name or 'Assistant'} ({_short_time(timestamp)})"
        full = body.removesuffix("\n") + "\n" + self._info_line(info)
        rendered = render_content_block(
            full,
            self.width,
            align=Align.LEFT,
            border_color=theme.primary,
            margin_bottom=1,
        )
        return UIMessage(
            type=MessageType.ASSISTANT,
            content=rendered,
            height=height(rendered),
            timestamp=timestamp or datetime.now(),
        )

    def render_system_message(self, content: str, timestamp: datetime | None = None) -> UIMessage:
        """A left-aligned block for messages from the host itself."""
        theme = get_theme()
        if content.strip() == "":
            body = self._placeholder("No content available")
        else:
            body = self._render_markdown(content, self.width - _BLOCK_INSET)
        info = f" MCPHost System ({_short_time(timestamp)})"
        full = body.removesuffix("\n") + "\n" + self._info_line(info)
        rendered = render_content_block(
            full,
            self.width,
            align=Align.LEFT,
            border_color=theme.system,
            margin_bottom=1,
        )
        return UIMessage(
            type=MessageType.SYSTEM,
            content=rendered,
            height=height(rendered),
            timestamp=timestamp or datetime.now(),
        )

    def render_debug_config_message(
        self, config: Mapping[str, Any], timestamp: datetime | None = None
    ) -> UIMessage:
        """Configuration settings, one per line, under a debug header."""
        theme = get_theme()
        style = Style(
            width=self.width - 1,
            foreground=theme.muted,
            border=THICK_BORDER,
            border_sides=(False, False, False, True),
            border_foreground=theme.tool,
            padding=(0, 0, 0, 1),
        )
        time_text = _local(timestamp).strftime("%d %b %Y %I:%M %p")
        header = Style(foreground=theme.tool, bold=True).render("🔧 Debug Configuration")
        config_lines = [
            f"  {key}: {_format_value(value)}" for key, value in config.items() if value is not None
        ]
        info = Style(width=self.width - 1, foreground=theme.muted).render(f" MCPHost ({time_text})")

        parts = [header]
        if config_lines:
            parts.append(Style(foreground=theme.muted).render("\n".join(config_lines)))
        parts.append(info)

        rendered = style.render(join_vertical(Align.LEFT, *parts))
        return UIMessage(
            type=MessageType.SYSTEM,
            content=rendered,
            height=height(rendered),
            timestamp=timestamp or datetime.now(),
        )

    def render_error_message(self, error_msg: str, timestamp: datetime | None = None) -> UIMessage:
        """A left-aligned block holding an error."""
        theme = get_theme()
        body = Style(foreground=theme.error, bold=True).render(error_msg)
        info = f" Error ({_short_time(timestamp)})"
        full = body + "\n" + self._info_line(info)
        rendered = render_content_block(
            full,
            self.width,
            align=Align.LEFT,
            border_color=theme.error,
            margin_bottom=1,
        )
        return UIMessage(
            type=MessageType.ERROR,
            content=rendered,
            height=height(rendered),
            timestamp=timestamp or datetime.now(),
        )

    def render_tool_call_message(
        self, tool_name: str, tool_args: str, timestamp: datetime | None = None
    ) -> UIMessage:
        """A block announcing a tool call in progress."""
        theme = get_theme()
        info = self._info_line(f" Executing {tool_name} ({_short_time(timestamp)})")
        if tool_args not in ("", "{}"):
            args = Style(foreground=theme.muted, italic=True).render(
                f"Arguments: {self.format_tool_args(tool_args)}"
            )
            full = args + "\n" + info
        else:
            full = info
        rendered = render_content_block(
            full,
            self.width,
            align=Align.LEFT,
            border_color=theme.tool,
            margin_bottom=1,
        )
        return UIMessage(
            type=MessageType.TOOL_CALL,
            content=rendered,
            height=height(rendered),
            timestamp=timestamp or datetime.now(),
        )

    def render_tool_message(
        self, tool_name: str, tool_args: str, tool_result: str, is_error: bool
    ) -> UIMessage:
        """A block holding a tool's result or error."""
        theme = get_theme()
        if is_error:
            full = Style(foreground=theme.error).render(f"Error: {tool_result}")
        else:
            full = self.format_tool_result(tool_name, tool_result, self.width - _BLOCK_INSET)
        if full.strip() == "":
            full = Style(italic=True, foreground=theme.muted).render("(no output)")
        rendered = render_content_block(
            full.removesuffix("\n"),
            self.width,
            align=Align.LEFT,
            border_color=theme.muted,
            margin_bottom=1,
        )
        return UIMessage(type=MessageType.TOOL, content=rendered, height=height(rendered))

    def format_tool_args(self, args: str) -> str:
        """Strip the outer braces of JSON arguments and shorten them."""
        args = args.strip()
        if args.startswith("{") and args.endswith("}"):
            args = args[1:-1].strip()
        if args == "":
            return "(no arguments)"
        if not self.debug and len(args) > _MAX_ARGS_LENGTH:
            return args[:_MAX_ARGS_LENGTH] + "..."
        return args

    def format_tool_result(self, tool_name: str, result: str, width: int) -> str:
        """Render a tool result as muted text, truncated unless in debug mode."""
        theme = get_theme()
        if not self.debug:
            lines = result.split("\n")
            if len(lines) > _MAX_RESULT_LINES:
                result = "\n".join(lines[:_MAX_RESULT_LINES]) + "\n... (truncated)"

        if _is_shell_tool(tool_name) and ("<stdout>" in result or "<stderr>" in result):
            result = strip_output_tags(result, Style(foreground=theme.error))

        return Style(width=width, foreground=theme.muted).render(result)

    def truncate_text(self, text: str, max_width: int) -> str:
        """Put text on one line and cut it to ``max_width`` columns with "..."."""
        text = text.replace("\n", " ")
        if self.debug or visible_width(text) <= max_width:
            return text
        for end in range(len(text) - 1, -1, -1):
            truncated = text[:end] + "..."
            if visible_width(truncated) <= max_width:
                return truncated
        return "..."


class MessageContainer:
    """Holds rendered messages and lays them out for display."""

    def __init__(self, width: int, height: int, compact: bool = False) -> None:
        self.messages: list[UIMessage] = []
        self.width = width
        self.height = height
        self.compact_mode = compact
        self.model_name = ""
        self.was_cleared = False

    def add_message(self, msg: UIMessage) -> None:
        """Append a message."""
        self.messages.append(msg)
        self.was_cleared = False

    def update_last_message(self, content: str) -> None:
        """Re-render the last message with new content if it is from the assistant."""
        if not self.messages:
            return
        last = self.messages[-1]
        if last.type is not MessageType.ASSISTANT:
            return
        if self.compact_mode:
            renderer: CompactRenderer | MessageRenderer = CompactRenderer(self.width, False)
        else:
            renderer = MessageRenderer(self.width, False)
        updated = renderer.render_assistant_message(content, last.timestamp, self.model_name)
        updated.streaming = last.streaming
        self.messages[-1] = updated

    def clear(self) -> None:
        """Remove every message; the welcome screen is not shown afterwards."""
        self.messages = []
        self.was_cleared = True

    def set_size(self, width: int, height: int) -> None:
        """Change the area the container renders into."""
        self.width = width
        self.height = height

    def render(self) -> str:
        """Render all messages, or a welcome screen when there are none."""
        if not self.messages:
            if self.was_cleared:
                return ""
            if self.compact_mode:
                return self._render_compact_empty_state()
            return self._render_empty_state()

        if self.compact_mode:
            return "\n".join(msg.content for msg in self.messages)

        parts: list[str] = []
        for msg in self.messages:
            if parts:
                parts.append("")
            parts.append(place_horizontal(self.width, Align.CENTER, msg.content))
        return Style(width=self.width).render(join_vertical(Align.TOP, *parts))

    def _render_empty_state(self) -> str:
        theme = get_theme()
        box = Style(
            width=self.width - 4,
            border=ROUNDED_BORDER,
            border_foreground=theme.system,
            padding=(2, 4),
            align=Align.CENTER,
        )
        title = Style(foreground=theme.system, bold=True).render("MCPHost")
        subtitle = Style(foreground=theme.primary, bold=True, margin=(1, 0, 0, 0)).render(
            "AI Assistant with MCP Tools"
        )
        features = (
            "Natural language conversations",
            "Powerful tool integrations",
            "Multi-provider LLM support",
            "Usage tracking & analytics",
        )
        feature_style = Style(foreground=theme.muted, margin=(0, 0, 0, 2))
        feature_list = [feature_style.render("• " + feature) for feature in features]
        prompt = Style(foreground=theme.accent, italic=True, margin=(2, 0, 0, 0)).render(
            "Start by typing your message below or use /help for commands"
        )
        content = join_vertical(
            Align.CENTER,
            title,
            subtitle,
            "",
            join_vertical(Align.LEFT, *feature_list),
            "",
            prompt,
        )
        return Style(
            width=self.width,
            height=self.height,
            align=Align.CENTER,
            align_vertical=Align.CENTER,
        ).render(box.render(content))

    def _render_compact_empty_state(self) -> str:
        theme = get_theme()
        welcome = Style(foreground=theme.system, bold=True).render(
            "MCPHost - AI Assistant with MCP Tools"
        )
        help_line = Style(foreground=theme.muted).render("Type your message or /help for commands")
        return f"{welcome}\n{help_line}\n\n"