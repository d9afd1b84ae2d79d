"""Compact, one-line-per-message rendering of conversation messages."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from mcphost.blocks import MessageType, UIMessage, strip_output_tags
from mcphost.styles import Style, to_markdown
from mcphost.theme import get_theme

_RESERVED_COLUMNS = 28
_MIN_CONTENT_WIDTH = 40
_MAX_RESULT_LINES = 5


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _prefix_first_line(prefix: str, content: str) -> list[str]:
    """Put ``prefix`` before the first line of ``content``; later lines stay bare."""
    first, *rest = content.split("\n")
    return [f"{prefix} {first}", *rest]


class CompactRenderer:
    """Renders messages as short lines led by a symbol and a label."""

    def __init__(self, width: int, debug: bool = False) -> None:
        self.width = width
        self.debug = debug

    @property
    def _content_width(self) -> int:
        return max(self.width - _RESERVED_COLUMNS, _MIN_CONTENT_WIDTH)

    def render_user_message(self, content: str, timestamp: datetime | None = None) -> UIMessage:
        """A user message: "> User" followed by the markdown-rendered content."""
        theme = get_theme()
        symbol = Style(foreground=theme.secondary).render(">")
        label = Style(foreground=theme.secondary, bold=True).render("User")
        lines = _prefix_first_line(f"{symbol}  {label}", self._format_user_assistant_content(content))
        return UIMessage(
            type=MessageType.USER,
            content="\n".join(lines),
            height=len(lines),
            timestamp=timestamp or datetime.now(),
        )

    def render_assistant_message(
        self, content: str, timestamp: datetime | None = None, model_name: str = ""
    ) -> UIMessage:
        """An assistant message labelled with the model name."""
        theme = get_theme()
        symbol = Style(foreground=theme.primary).render("<")
        label = Style(foreground=theme.primary, bold=True).render(model_name or "Assistant")
        body = self._format_user_assistant_content(content)
        if body == "":
            body = Style(foreground=theme.muted, italic=True).render("(no output)")
        lines = _prefix_first_line(f"{symbol}  {label}", body)
        return UIMessage(
            type=MessageType.ASSISTANT,
            content="\n".join(lines),
            height=len(lines),
            timestamp=timestamp or datetime.now(),
        )

    def render_tool_call_message(
        self, tool_name: str, tool_args: str, timestamp: datetime | None = None
    ) -> UIMessage:
        """A single line announcing a tool call and its arguments."""
        theme = get_theme()
        symbol = Style(foreground=theme.tool).render("[")
        label = Style(foreground=theme.tool, bold=True).render(tool_name)
        args = self.format_tool_args(tool_args)
        if args:
            args = Style(foreground=theme.muted).render(args)
        return UIMessage(
            type=MessageType.TOOL_CALL,
            content=f"{symbol}  {label} {args}",
            height=1,
            timestamp=timestamp or datetime.now(),
        )

    def render_tool_message(
        self, tool_name: str, tool_args: str, tool_result: str, is_error: bool
    ) -> UIMessage:
        """A tool result, limited to a few lines."""
        theme = get_theme()
        muted = Style(foreground=theme.muted)
        symbol = muted.render("]")
        formatted = self.format_tool_result(tool_result)

        if is_error:
            label_text = "Error"
            body = muted.render(formatted)
        else:
            label_text = self.determine_result_type(tool_name, tool_result)
            body = muted.render(formatted)
            if formatted == "":
                body = Style(foreground=theme.muted, italic=True).render("(no output)")

        label = Style(foreground=theme.muted, bold=True).render(label_text)
        lines = _prefix_first_line(f"{symbol}  {label}", body)
        return UIMessage(type=MessageType.TOOL, content="\n".join(lines), height=len(lines))

    def render_system_message(self, content: str, timestamp: datetime | None = None) -> UIMessage:
        """A single-line system message."""
        theme = get_theme()
        symbol = Style(foreground=theme.system).render("*")
        label = Style(foreground=theme.system, bold=True).render("System")
        body = self.format_compact_content(content)
        return UIMessage(
            type=MessageType.SYSTEM,
            content=f"{symbol}  {label:<8} {body}",
            height=1,
            timestamp=timestamp or datetime.now(),
        )

    def render_error_message(self, error_msg: str, timestamp: datetime | None = None) -> UIMessage:
        """A single-line error message."""
        theme = get_theme()
        symbol = Style(foreground=theme.error).render("!")
        label = Style(foreground=theme.error, bold=True).render("Error")
        body = Style(foreground=theme.error).render(self.format_compact_content(error_msg))
        return UIMessage(
            type=MessageType.ERROR,
            content=f"{symbol}  {label:<8} {body}",
            height=1,
            timestamp=timestamp or datetime.now(),
        )

    def render_debug_config_message(
        self, config: Mapping[str, Any], timestamp: datetime | None = None
    ) -> UIMessage:
        """Configuration settings as key=value pairs on one line."""
        theme = get_theme()
        symbol = Style(foreground=theme.tool).render("*")
        label = Style(foreground=theme.tool, bold=True).render("Debug")
        body = ", ".join(
            f"{key}={_format_value(value)}" for key, value in config.items() if value is not None
        )
        if len(body) > self.width - 20:
            body = body[: max(self.width - 23, 0)] + "..."
        return UIMessage(
            type=MessageType.SYSTEM,
            content=f"{symbol}  {label:<8} {body}",
            height=1,
            timestamp=timestamp or datetime.now(),
        )

    def format_compact_content(self, content: str) -> str:
        """Flatten content to one line, truncating it unless in debug mode."""
        if not content:
            return ""
        content = content.replace("\n", " ").replace("\t", " ")
        while "  " in content:
            content = content.replace("  ", " ")
        content = content.strip()
        max_len = self._content_width
        if not self.debug and len(content) > max_len:
            content = content[: max_len - 3] + "..."
        return content

    def _format_user_assistant_content(self, content: str) -> str:
        if not content:
            return ""
        return to_markdown(content, self._content_width).removesuffix("\n")

    def wrap_text(self, text: str, width: int) -> str:
        """Word-wrap each line of ``text`` to ``width``, keeping existing breaks."""
        if width <= 0:
            return text
        wrapped: list[str] = []
        for line in text.split("\n"):
            words = line.split()
            if len(line) <= width or not words:
                wrapped.append(line)
                continue
            current = ""
            for word in words:
                if current and len(current) + len(word) + 1 > width:
                    wrapped.append(current)
                    current = word
                else:
                    current = f"{current} {word}" if current else word
            if current:
                wrapped.append(current)
        return "\n".join(wrapped)

    def format_tool_args(self, args: str) -> str:
        """Reduce JSON tool arguments to a short value for display."""
        if args in ("", "{}"):
            return ""
        args = args.strip()
        if args.startswith("{") and args.endswith("}"):
            args = args[1:-1].strip()
        args = args.replace('"', "")
        colon = args.find(":")
        if colon != -1:
            args = args[colon + 1 :].strip()
        return self.format_compact_content(args)

    def format_tool_result(self, result: str) -> str:
        """Wrap a tool result and keep at most five lines of it."""
        if not result:
            return ""
        if "<stdout>" in result or "<stderr>" in result:
            result = self.format_bash_output(result)
        lines = self.wrap_text(result, self._content_width).split("\n")
        if len(lines) > _MAX_RESULT_LINES:
            lines = lines[:_MAX_RESULT_LINES]
            if lines[-1] != "":
                lines[-1] += "..."
            else:
                lines.append("...")
        return "\n".join(lines)

    def format_bash_output(self, result: str) -> str:
        """Remove stdout/stderr tags, coloring stderr content as an error."""
        return strip_output_tags(result, Style(foreground=get_theme().error))

    def determine_result_type(self, tool_name: str, result: str) -> str:
        """A short label describing what kind of tool produced the result."""
        name = tool_name.lower()
        if "read" in name:
            return "Text"
        if "write" in name:
            return "Write"
        if any(word in name for word in ("bash", "command", "shell")) or name == "run_shell_cmd":
            return "Bash"
        if "list" in name or "ls" in name:
            return "List"
        if "search" in name or "grep" in name:
            return "Search"
        if "fetch" in name or "http" in name:
            return "Fetch"
        return "Result"