import getpass
from datetime import datetime

import pytest

from mcphost import styles
from mcphost.blocks import MessageType, UIMessage
from mcphost.messages import MessageContainer, MessageRenderer, system_username
from mcphost.styles import height

STAMP = datetime(2024, 1, 1, 12, 34)


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    monkeypatch.setattr(styles._settings, "color", False)


@pytest.fixture
def renderer():
    return MessageRenderer(80, debug=False)


def _raise_os_error():
    raise OSError("no user")


def test_system_username_falls_back_to_username_variable(monkeypatch):
    monkeypatch.setattr(getpass, "getuser", _raise_os_error)
    monkeypatch.delenv("USER", raising=False)
    monkeypatch.setenv("USERNAME", "alice")
    assert system_username() == "alice"


def test_system_username_default(monkeypatch):
    monkeypatch.setattr(getpass, "getuser", _raise_os_error)
    monkeypatch.delenv("USER", raising=False)
    monkeypatch.delenv("USERNAME", raising=False)
    assert system_username() == "User"


def test_format_tool_args_strips_braces(renderer):
    assert renderer.format_tool_args('{"path": "/tmp"}') == '"path": "/tmp"'
    assert renderer.format_tool_args("{}") == "(no arguments)"


def test_format_tool_args_truncates_unless_debug(renderer):
    long_args = "x" * 150
    short = renderer.format_tool_args(long_args)
    assert len(short) == 103
    assert short.endswith("...")
    assert MessageRenderer(80, debug=True).format_tool_args(long_args) == long_args


def test_format_tool_result_truncates_lines(renderer):
    result = "\n".join(f"line{i}" for i in range(15))
    out = renderer.format_tool_result("reader", result, 72)
    assert "line9" in out
    assert "line10" not in out
    assert "... (truncated)" in out


def test_format_tool_result_debug_keeps_all(renderer):
    result = "\n".join(f"line{i}" for i in range(15))
    out = MessageRenderer(80, debug=True).format_tool_result("reader", result, 72)
    assert "line14" in out
    assert "truncated" not in out


def test_format_tool_result_bash_tags_removed(renderer):
    out = renderer.format_tool_result("bash", "<stdout>\nhello\n</stdout>", 72)
    assert "hello" in out
    assert "<stdout>" not in out


def test_truncate_text(renderer):
    assert renderer.truncate_text("hello world", 8) == "hello..."
    assert renderer.truncate_text("a\nb", 10) == "a b"
    assert MessageRenderer(80, debug=True).truncate_text("a\nlong line here", 3) == "a long line here"


def test_render_user_message(renderer):
    msg = renderer.render_user_message("hello there", STAMP)
    assert msg.type is MessageType.USER
    assert "hello there" in msg.content
    assert f"{system_username()} (12:34)" in msg.content
    assert msg.height == height(msg.content)
    assert msg.content.endswith("\n")


def test_render_assistant_message_empty(renderer):
    msg = renderer.render_assistant_message("  ", STAMP, "")
    assert msg.type is MessageType.ASSISTANT
    assert "Finished without output" in msg.content
    assert "Assistant (12:34)" in msg.content


def test_render_assistant_message_model_name(renderer):
    msg = renderer.render_assistant_message("answer", STAMP, "gpt-4o")
    assert "answer" in msg.content
    assert "gpt-4o (12:34)" in msg.content


def test_render_system_message(renderer):
    msg = renderer.render_system_message("", STAMP)
    assert msg.type is MessageType.SYSTEM
    assert "No content available" in msg.content
    assert "MCPHost System (12:34)" in msg.content


def test_render_error_message(renderer):
    msg = renderer.render_error_message("it broke", STAMP)
    assert msg.type is MessageType.ERROR
    assert "it broke" in msg.content
    assert "Error (12:34)" in msg.content


def test_render_tool_call_message(renderer):
    msg = renderer.render_tool_call_message("my_tool", '{"a": 1}', STAMP)
    assert msg.type is MessageType.TOOL_CALL
    assert "Executing my_tool (12:34)" in msg.content
    assert 'Arguments: "a": 1' in msg.content
    bare = renderer.render_tool_call_message("my_tool", "{}", STAMP)
    assert "Arguments" not in bare.content


def test_render_tool_message(renderer):
    err = renderer.render_tool_message("t", "{}", "boom", True)
    assert err.type is MessageType.TOOL
    assert "Error: boom" in err.content
    empty = renderer.render_tool_message("t", "{}", "", False)
    assert "(no output)" in empty.content
    assert empty.height == height(empty.content)


def test_render_debug_config_message(renderer):
    msg = renderer.render_debug_config_message({"model": "gpt", "skip": None, "stream": True}, STAMP)
    assert msg.type is MessageType.SYSTEM
    assert "Debug Configuration" in msg.content
    assert "  model: gpt" in msg.content
    assert "stream: true" in msg.content
    assert "skip" not in msg.content
    assert "01 Jan 2024 12:34 PM" in msg.content


def test_container_empty_and_cleared():
    container = MessageContainer(80, 20)
    assert "MCPHost" in container.render()
    container.clear()
    assert container.render() == ""


def test_container_compact_empty():
    out = MessageContainer(80, 20, compact=True).render()
    assert out.startswith("MCPHost - AI Assistant with MCP Tools")
    assert out.endswith("\n\n")


def test_container_compact_messages():
    container = MessageContainer(80, 20, compact=True)
    container.add_message(UIMessage(type=MessageType.SYSTEM, content="one"))
    container.add_message(UIMessage(type=MessageType.SYSTEM, content="two"))
    assert container.render() == "one\ntwo"


def test_container_render_contains_messages(renderer):
    container = MessageContainer(80, 20)
    container.add_message(renderer.render_system_message("first", STAMP))
    container.add_message(renderer.render_error_message("second", STAMP))
    out = container.render()
    assert out.index("first") < out.index("second")


def test_update_last_message_rerenders_assistant():
    container = MessageContainer(80, 20)
    container.model_name = "model-x"
    start = MessageRenderer(80).render_assistant_message("", STAMP, "model-x")
    start.streaming = True
    container.add_message(start)
    container.update_last_message("streamed text")
    last = container.messages[-1]
    assert "streamed text" in last.content
    assert last.streaming is True
    assert last.timestamp == STAMP


def test_update_last_message_ignores_other_types():
    container = MessageContainer(80, 20)
    original = UIMessage(type=MessageType.USER, content="user text")
    container.add_message(original)
    container.update_last_message("changed")
    assert container.messages[-1].content == "user text"


def test_set_size():
    container = MessageContainer(80, 20)
    container.set_size(60, 10)
    assert (container.width, container.height) == (60, 10)