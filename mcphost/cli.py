"""The interactive command-line front end: message display, slash commands and setup."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, TextIO, TypeVar

from mcphost.blocks import MessageType, UIMessage
from mcphost.compact import CompactRenderer
from mcphost.messages import MessageContainer, MessageRenderer
from mcphost.prompt_input import SlashCommandInput
from mcphost.spinner import Spinner
from mcphost.styles import Style, height
from mcphost.usage import ModelInfo, UsageTracker

_T = TypeVar("_T")

_FALLBACK_WIDTH = 80
_FALLBACK_HEIGHT = 24
_SIDE_PADDING = 4
_CONTAINER_HEIGHT_RESERVE = 4
_PROMPT_TITLE = (
    "Enter your prompt (Type /help for commands, Ctrl+C to quit, ESC to cancel generation)"
)
_NO_TRACKING = "Usage tracking is not available for this model."

_HELP_TEXT = """## Available Commands

- `/help`: Show this help message
- `/tools`: List all available tools
- `/servers`: List configured MCP servers
- `/usage`: Show token usage and cost statistics
- `/reset-usage`: Reset usage statistics
- `/clear`: Clear message history
- `/quit`: Exit the application
- `Ctrl+C`: Exit at any time
- `ESC`: Cancel ongoing LLM generation

You can also just type your message to chat with the AI assistant."""


@dataclass(frozen=True)
class SlashCommandResult:
    """The outcome of handling a slash command."""

    handled: bool = False
    clear_history: bool = False


def _numbered_list(title: str, items: Sequence[str], empty: str) -> str:
    if not items:
        return f"## {title}\n\n{empty}"
    lines = "".join(f"{number}. `{item}`\n" for number, item in enumerate(items, start=1))
    return f"## {title}\n\n{lines}"


class CLI:
    """Renders the conversation to a terminal and handles slash commands."""

    def __init__(
        self,
        debug: bool = False,
        compact: bool = False,
        *,
        width: int | None = None,
        height: int | None = None,
        output: TextIO | None = None,
    ) -> None:
        self.compact_mode = compact
        self.model_name = ""
        self.usage_tracker: UsageTracker | None = None
        self._output = output
        self._last_stream_height = 0
        self._usage_displayed = False
        self.width, self.height = self._terminal_size(width, height)
        self.message_renderer = MessageRenderer(self.width, debug)
        self.compact_renderer = CompactRenderer(self.width, debug)
        self.message_container = MessageContainer(
            self.width, self.height - _CONTAINER_HEIGHT_RESERVE, compact
        )

    @property
    def output(self) -> TextIO:
        return self._output if self._output is not None else sys.stdout

    def _terminal_size(self, width: int | None, height: int | None) -> tuple[int, int]:
        if width is not None:
            return width, height if height is not None else _FALLBACK_HEIGHT
        try:
            size = os.get_terminal_size(self.output.fileno())
        except (OSError, ValueError, AttributeError):
            return _FALLBACK_WIDTH, height if height is not None else _FALLBACK_HEIGHT
        return size.columns - _SIDE_PADDING, height if height is not None else size.lines

    @property
    def _renderer(self) -> MessageRenderer | CompactRenderer:
        return self.compact_renderer if self.compact_mode else self.message_renderer

    def _show(self, msg: UIMessage) -> None:
        self.message_container.add_message(msg)
        self._display_container()

    def set_usage_tracker(self, tracker: UsageTracker | None) -> None:
        """Attach a usage tracker, sized to the display."""
        self.usage_tracker = tracker
        if tracker is not None:
            tracker.width = self.width

    def set_model_name(self, model_name: str) -> None:
        """Set the model name shown on assistant messages."""
        self.model_name = model_name
        self.message_container.model_name = model_name

    def get_prompt(self) -> str:
        """Read the user's next prompt; raise EOFError if it was cancelled."""
        self.message_container.messages = []
        self._last_stream_height = 0
        return SlashCommandInput(self.width, _PROMPT_TITLE).run().strip()

    def show_spinner(self, message: str, action: Callable[[], _T]) -> _T:
        """Run ``action`` while a spinner shows ``message``; return its result."""
        with Spinner(message):
            return action()

    def display_user_message(self, message: str) -> None:
        """Show a message typed by the user."""
        self._show(self._renderer.render_user_message(message, datetime.now()))

    def display_assistant_message(self, message: str, model_name: str = "") -> None:
        """Show a complete assistant message."""
        self._show(self._renderer.render_assistant_message(message, datetime.now(), model_name))

    def display_tool_call_message(self, tool_name: str, tool_args: str) -> None:
        """Show that a tool is being called."""
        self.message_container.messages = []
        self._last_stream_height = 0
        self._show(self._renderer.render_tool_call_message(tool_name, tool_args, datetime.now()))

    def display_tool_message(
        self, tool_name: str, tool_args: str, tool_result: str, is_error: bool
    ) -> None:
        """Show the result of a tool call."""
        self._show(
            self._renderer.render_tool_message(tool_name, tool_args, tool_result, is_error)
        )

    def start_streaming_message(self, model_name: str) -> None:
        """Begin an assistant message that is updated as it streams in."""
        msg = self._renderer.render_assistant_message("", datetime.now(), model_name)
        msg.streaming = True
        self._last_stream_height = 0
        self._show(msg)

    def update_streaming_message(self, content: str) -> None:
        """Redraw the streaming message with its content so far."""
        self.message_container.update_last_message(content)
        self._display_container()

    def display_error(self, err: BaseException | str) -> None:
        """Show an error."""
        self._show(self._renderer.render_error_message(str(err), datetime.now()))

    def display_info(self, message: str) -> None:
        """Show an informational system message."""
        self._show(self._renderer.render_system_message(message, datetime.now()))

    def display_cancellation(self) -> None:
        """Show that generation was cancelled."""
        self.display_info("Generation cancelled by user (ESC pressed)")

    def display_debug_config(self, config: Mapping[str, Any]) -> None:
        """Show configuration settings."""
        self._show(self._renderer.render_debug_config_message(config, datetime.now()))

    def display_help(self) -> None:
        """Show the list of commands."""
        self._show(self.message_renderer.render_system_message(_HELP_TEXT, datetime.now()))

    def display_tools(self, tools: Sequence[str]) -> None:
        """Show the available tools."""
        content = _numbered_list(
            "Available Tools", tools, "No tools are currently available."
        )
        self._show(self.message_renderer.render_system_message(content, datetime.now()))

    def display_servers(self, servers: Sequence[str]) -> None:
        """Show the configured MCP servers."""
        content = _numbered_list(
            "Configured MCP Servers", servers, "No MCP servers are currently configured."
        )
        self._show(self.message_renderer.render_system_message(content, datetime.now()))

    def is_slash_command(self, text: str) -> bool:
        """Whether ``text`` is a slash command."""
        return text.startswith("/")

    def handle_slash_command(
        self, text: str, servers: Sequence[str], tools: Sequence[str]
    ) -> SlashCommandResult:
        """Carry out a slash command; "/quit" exits the program."""
        if text == "/help":
            self.display_help()
        elif text == "/tools":
            self.display_tools(tools)
        elif text == "/servers":
            self.display_servers(servers)
        elif text == "/clear":
            self.clear_messages()
            self.display_info("Conversation cleared. Starting fresh.")
            return SlashCommandResult(handled=True, clear_history=True)
        elif text == "/usage":
            self.display_usage_stats()
        elif text == "/reset-usage":
            self.reset_usage_stats()
        elif text == "/quit":
            self.output.write("\n  Goodbye!\n")
            self.output.flush()
            raise SystemExit(0)
        else:
            return SlashCommandResult(handled=False)
        return SlashCommandResult(handled=True)

    def clear_messages(self) -> None:
        """Remove every message from the display."""
        self.message_container.clear()
        self._display_container()

    def _display_container(self) -> None:
        container = self.message_container
        content = container.render()

        padding_left = 2
        if not self.compact_mode and container.messages:
            if container.messages[-1].type is MessageType.USER:
                padding_left = 0
        padded = Style(padding=(0, 0, 0, padding_left), width=self.width).render(content)

        out = self.output
        if self._last_stream_height > 0:
            out.write(f"\x1b[{self._last_stream_height}F")
        elif self._usage_displayed:
            out.write("\x1b[2F")
            self._usage_displayed = False
        out.write(padded + "\n")
        out.flush()

        if container.messages:
            last = container.messages[-1]
            container.messages = []
            if last.streaming:
                container.messages.append(last)
                self._last_stream_height = height(padded)

    def update_usage(self, input_text: str, output_text: str) -> None:
        """Record usage estimated from the request and response text."""
        if self.usage_tracker is not None:
            self.usage_tracker.estimate_and_update_usage(input_text, output_text)

    def update_usage_from_response(
        self,
        content: str,
        prompt_tokens: int | None,
        completion_tokens: int | None,
        input_text: str,
    ) -> None:
        """Record usage from reported token counts, estimating when they are missing."""
        if self.usage_tracker is None:
            return
        if prompt_tokens and completion_tokens and prompt_tokens > 0 and completion_tokens > 0:
            self.usage_tracker.update_usage(prompt_tokens, completion_tokens, 0, 0)
        else:
            self.usage_tracker.estimate_and_update_usage(input_text, content)

    def display_usage_stats(self) -> None:
        """Show the last request's and the session's usage."""
        if self.usage_tracker is None:
            self.display_info(_NO_TRACKING)
            return
        session = self.usage_tracker.session_stats()
        last = self.usage_tracker.last_request_stats()
        lines = ["## Usage Statistics\n\n"]
        if last is not None:
            lines.append(
                f"**Last Request:** {last.input_tokens} input + {last.output_tokens} "
                f"output tokens = ${last.total_cost:.6f}\n"
            )
        lines.append(
            f"**Session Total:** {session.total_input_tokens} input + "
            f"{session.total_output_tokens} output tokens = ${session.total_cost:.6f} "
            f"({session.request_count} requests)\n"
        )
        self._show(self._renderer.render_system_message("".join(lines), datetime.now()))

    def reset_usage_stats(self) -> None:
        """Forget all recorded usage."""
        if self.usage_tracker is None:
            self.display_info(_NO_TRACKING)
            return
        self.usage_tracker.reset()
        self.display_info("Usage statistics have been reset.")

    def display_usage_after_response(self) -> None:
        """Print the session usage line under the latest response."""
        if self.usage_tracker is None:
            return
        info = self.usage_tracker.render_usage_info()
        if info:
            self.output.write(Style(padding=(1, 0, 0, 2)).render(info))
            self.output.flush()
            self._usage_displayed = True

    def create_callback_handler(self) -> ToolCallbacks:
        """Callbacks that show tool calls and tool errors on this CLI."""
        return ToolCallbacks(self)


@dataclass
class ToolCallbacks:
    """Hooks invoked around tool runs that report them on a CLI.

    ``running`` holds the names of tool runs that have started and not yet ended.
    """

    cli: CLI
    running: set[str] = field(default_factory=set)

    def on_start(self, name: str, arguments_json: str) -> None:
        """A tool run begins: show its name and arguments."""
        self.running.add(name)
        self.cli.display_tool_call_message(name, arguments_json)

    def on_end(self, name: str, output: Any = None) -> None:
        """A tool run finished; it is no longer running and nothing is shown."""
        self.running.discard(name)

    def on_end_with_stream_output(self, name: str, output: Any = None) -> None:
        """A streaming tool run finished; it is no longer running and nothing is shown."""
        self.running.discard(name)

    def on_error(self, name: str, err: BaseException | str) -> None:
        """A tool run failed: show the error."""
        self.running.discard(name)
        self.cli.display_error(err)


class Agent(Protocol):
    """What the CLI setup needs to know about the agent."""

    @property
    def loading_message(self) -> str: ...

    @property
    def tools(self) -> Sequence[Any]: ...

    @property
    def loaded_server_names(self) -> Sequence[str]: ...


@dataclass
class CLISetupOptions:
    """Options for building a CLI and showing the startup information."""

    agent: Agent
    model_string: str = ""
    debug: bool = False
    compact: bool = False
    quiet: bool = False
    show_debug: bool = False
    model_info: ModelInfo | None = None
    is_oauth: bool = False
    width: int | None = None
    height: int | None = None
    output: TextIO | None = field(default=None, repr=False)


def parse_model_name(model_string: str) -> tuple[str, str]:
    """Split "provider:model"; both parts are "unknown" without a colon."""
    provider, sep, model = model_string.partition(":")
    if not sep:
        return "unknown", "unknown"
    return provider, model


def setup_cli(opts: CLISetupOptions) -> CLI | None:
    """Build the CLI and show model and tool information; None in quiet mode."""
    if opts.quiet:
        return None

    cli = CLI(
        opts.debug, opts.compact, width=opts.width, height=opts.height, output=opts.output
    )
    provider, model = parse_model_name(opts.model_string)
    known = provider != "unknown" and model != "unknown"

    if model != "unknown":
        cli.set_model_name(model)

    if known and provider != "ollama" and opts.model_info is not None:
        cli.set_usage_tracker(UsageTracker(opts.model_info, provider, 80, opts.is_oauth))

    cli.output.write("\n")
    if known:
        cli.display_info(f"Model loaded: {provider} ({model})")
    if opts.agent.loading_message:
        cli.display_info(opts.agent.loading_message)
    cli.display_info(f"Loaded {len(opts.agent.tools)} tools from MCP servers")
    cli.display_usage_after_response()
    return cli