import dataclasses

import pytest

from mcphost import styles
from mcphost.blocks import MessageType, UIMessage, render_content_block, strip_output_tags
from mcphost.styles import Align, Style, height, visible_width


@pytest.fixture(autouse=True)
def plain_output():
    styles.set_color_enabled(False)
    yield
    styles.set_color_enabled(False)


def test_left_block_shape():
    block = render_content_block("hi", 40)
    lines = block.split("\n")
    assert height(block) == 3
    assert all(line.startswith("┃") for line in lines)
    assert all(visible_width(line) == 40 for line in lines)
    assert "hi" in lines[1]


def test_right_block_is_pushed_right():
    block = render_content_block("hi", 40, align=Align.RIGHT)
    lines = block.split("\n")
    assert all(line.rstrip().endswith("┃") for line in lines)
    assert all(line.startswith(" ") for line in lines)
    assert all(visible_width(line) == 40 for line in lines)


def test_center_block_has_full_border():
    block = render_content_block("hi", 40, align=Align.CENTER)
    lines = block.split("\n")
    assert "┏" in lines[0]
    assert "┛" in lines[-1]


def test_zero_padding():
    block = render_content_block(
        "x", 20, padding_top=0, padding_bottom=0, padding_left=0, padding_right=0
    )
    assert height(block) == 1
    assert block.startswith("┃x┃")


def test_margins():
    block = render_content_block("hi", 30, margin_top=2, margin_bottom=1)
    assert block.startswith("\n\n")
    assert block.endswith("\n")
    assert height(block) == 3 + 2 + 1


def test_full_width_wraps_long_text():
    text = "word " * 30
    block = render_content_block(text.strip(), 30, full_width=True)
    assert height(block) > 3
    assert visible_width(block) >= 30


def test_explicit_width_overrides_container():
    block = render_content_block("hi", 80, width=20)
    assert visible_width(block) == 20


def test_ui_message_replace_round_trip():
    msg = UIMessage(type=MessageType.ASSISTANT, content="hello", height=1)
    streamed = dataclasses.replace(msg, streaming=True)
    assert streamed.streaming is True
    assert streamed.content == msg.content
    assert msg.streaming is False


def test_strip_stdout_tags():
    assert strip_output_tags("<stdout>\nhello\n</stdout>") == "hello"


def test_strip_stderr_inline():
    assert strip_output_tags("a<stderr>oops</stderr>b") == "aoopsb"


def test_strip_keeps_order_stderr_first():
    assert strip_output_tags("<stderr>e</stderr><stdout>o</stdout>") == "eo"


def test_strip_keeps_order_stdout_first():
    assert strip_output_tags("<stdout>o</stdout><stderr>e</stderr>") == "oe"


def test_strip_without_tags_trims():
    assert strip_output_tags("  plain text \n") == "plain text"


def test_strip_unclosed_tag_left_alone():
    assert strip_output_tags("<stdout>x") == "<stdout>x"


def test_strip_empty_sections_dropped():
    assert strip_output_tags("<stdout>\n\n</stdout>done") == "done"


def test_stderr_style_applied():
    styles.set_color_enabled(True)
    result = strip_output_tags("<stderr>bad</stderr>", Style(bold=True))
    assert result != "bad"
    assert styles.ANSI_PATTERN.sub("", result) == "bad"