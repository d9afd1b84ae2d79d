import io
import re
from dataclasses import dataclass, field

import pytest

from mcphost.blocks import MessageType
from mcphost.cli import (
    CLI,
    CLISetupOptions,
    SlashCommandResult,
    ToolCallbacks,
    parse_model_name,
    setup_cli,
)
from mcphost.usage import Cost, Limit, ModelInfo, UsageTracker, estimate_tokens

MODEL_INFO = ModelInfo(
    id="claude-3-5-sonnet-20241022",
    name="Claude 3.5 Sonnet v2",
    cost=Cost(input=3.0, output=15.0),
    limit=Limit(context=200000, output=8192),
)


@dataclass
class FakeAgent:
    loading_message: str = ""
    tools: list = field(default_factory=list)
    loaded_server_names: list = field(default_factory=list)


def make_cli(compact=False):
    out = io.StringIO()
    return CLI(False, compact, width=80, height=24, output=out), out


def test_parse_model_name():
    assert parse_model_name("openai:gpt-4o") == ("openai", "gpt-4o")
    assert parse_model_name("ollama:qwen:7b") == ("ollama", "qwen:7b")
    assert parse_model_name("nocolon") == ("unknown", "unknown")


def test_is_slash_command():
    cli, _ = make_cli()
    assert cli.is_slash_command("/help") is True
    assert cli.is_slash_command("hello /help") is False


@pytest.mark.parametrize("command", ["/help", "/tools", "/servers", "/usage", "/reset-usage"])
def test_handled_commands(command):
    cli, out = make_cli()
    result = cli.handle_slash_command(command, ["srv"], ["srv__tool"])
    assert result == SlashCommandResult(handled=True, clear_history=False)
    assert out.getvalue() != ""


def test_clear_command_requests_history_clear():
    cli, _ = make_cli()
    result = cli.handle_slash_command("/clear", [], [])
    assert result.handled and result.clear_history


def test_unknown_command_not_handled():
    cli, out = make_cli()
    assert cli.handle_slash_command("/nope", [], []) == SlashCommandResult(handled=False)
    assert out.getvalue() == ""


def test_quit_exits():
    cli, out = make_cli()
    with pytest.raises(SystemExit) as info:
        cli.handle_slash_command("/quit", [], [])
    assert info.value.code == 0
    assert "Goodbye!" in out.getvalue()


def test_display_tools_lists_names():
    cli, out = make_cli()
    cli.display_tools(["alphatool", "betatool"])
    text = out.getvalue()
    assert "alphatool" in text and "betatool" in text


def test_update_usage_from_response_uses_reported_tokens():
    cli, _ = make_cli()
    cli.set_usage_tracker(UsageTracker(MODEL_INFO, "anthropic", 80, False))
    cli.update_usage_from_response("reply", 1500, 500, "question")
    stats = cli.usage_tracker.session_stats()
    assert (stats.total_input_tokens, stats.total_output_tokens) == (1500, 500)
    assert stats.request_count == 1


def test_update_usage_from_response_estimates_without_tokens():
    cli, _ = make_cli()
    cli.set_usage_tracker(UsageTracker(MODEL_INFO, "anthropic", 80, False))
    cli.update_usage_from_response("a reply text here", 0, None, "the question text")
    stats = cli.usage_tracker.session_stats()
    assert stats.total_input_tokens == estimate_tokens("the question text")
    assert stats.total_output_tokens == estimate_tokens("a reply text here")


def test_set_usage_tracker_applies_width():
    cli, _ = make_cli()
    tracker = UsageTracker(MODEL_INFO, "anthropic", 10, False)
    cli.set_usage_tracker(tracker)
    assert tracker.width == cli.width


def test_reset_usage_command():
    cli, _ = make_cli()
    cli.set_usage_tracker(UsageTracker(MODEL_INFO, "anthropic", 80, False))
    cli.update_usage("x" * 40, "y" * 40)
    cli.handle_slash_command("/reset-usage", [], [])
    assert cli.usage_tracker.session_stats().request_count == 0
    assert cli.usage_tracker.last_request_stats() is None


def test_update_usage_without_tracker_is_ignored():
    cli, out = make_cli()
    cli.update_usage("abc", "def")
    assert cli.usage_tracker is None
    assert out.getvalue() == ""


def test_streaming_message_kept_and_overwritten():
    cli, out = make_cli()
    cli.start_streaming_message("model")
    assert len(cli.message_container.messages) == 1
    assert cli.message_container.messages[0].streaming is True
    cli.update_streaming_message("partial answer")
    moves = re.findall(r"\x1b\[(\d+)F", out.getvalue())
    assert moves and int(moves[0]) > 0
    assert cli.message_container.messages[0].type is MessageType.ASSISTANT


def test_non_streaming_messages_are_cleared_after_display():
    cli, out = make_cli()
    cli.display_info("hello there")
    assert cli.message_container.messages == []
    assert "hello" in out.getvalue()


def test_usage_display_moves_cursor_before_next_message():
    cli, out = make_cli()
    cli.set_usage_tracker(UsageTracker(MODEL_INFO, "anthropic", 80, True))
    cli.update_usage_from_response("reply", 1500, 500, "q")
    cli.display_usage_after_response()
    assert "Tokens: " in out.getvalue()
    before = len(out.getvalue())
    cli.display_info("next")
    assert out.getvalue()[before:].startswith("\x1b[2F")


def test_callbacks_show_tool_call_and_error():
    cli, out = make_cli()
    handler = cli.create_callback_handler()
    assert isinstance(handler, ToolCallbacks)
    handler.on_start("srv__tool", '{"path": "/tmp"}')
    assert "srv__tool" in out.getvalue()
    handler.on_error("srv__tool", ValueError("boom"))
    assert "boom" in out.getvalue()


def test_show_spinner_returns_and_raises():
    cli, _ = make_cli()
    assert cli.show_spinner("working", lambda: 42) == 42

    def fail():
        raise RuntimeError("bad")

    with pytest.raises(RuntimeError):
        cli.show_spinner("working", fail)


def test_setup_cli_quiet_returns_none():
    assert setup_cli(CLISetupOptions(agent=FakeAgent(), quiet=True)) is None


def test_setup_cli_configures_tracker_and_model():
    out = io.StringIO()
    opts = CLISetupOptions(
        agent=FakeAgent(tools=["a", "b"]),
        model_string="anthropic:claude-3-5-sonnet-20241022",
        model_info=MODEL_INFO,
        width=80,
        output=out,
    )
    cli = setup_cli(opts)
    assert cli.model_name == "claude-3-5-sonnet-20241022"
    assert cli.usage_tracker is not None
    assert cli.usage_tracker.provider == "anthropic"
    assert "Tokens: " in out.getvalue()


def test_setup_cli_skips_tracking_for_ollama():
    out = io.StringIO()
    opts = CLISetupOptions(
        agent=FakeAgent(loading_message="fallback"),
        model_string="ollama:qwen",
        model_info=MODEL_INFO,
        width=80,
        output=out,
    )
    cli = setup_cli(opts)
    assert cli.usage_tracker is None
    assert cli.model_name == "qwen"
    assert "fallback" in out.getvalue()