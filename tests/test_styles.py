import pytest
from rich.color import Color as RichColor

from mcphost.styles import (
    THICK_BORDER,
    AdaptiveColor,
    Align,
    Style,
    has_dark_background,
    height,
    join_vertical,
    markdown_theme,
    place_horizontal,
    set_color_enabled,
    set_dark_background,
    to_markdown,
    visible_width,
)


@pytest.fixture(autouse=True)
def plain_output():
    set_color_enabled(False)
    set_dark_background(True)
    yield
    set_color_enabled(False)
    set_dark_background(True)


def test_adaptive_color_resolve():
    color = AdaptiveColor(light="#8839ef", dark="#cba6f7")
    assert color.resolve(True) == "#cba6f7"
    assert color.resolve(False) == "#8839ef"


def test_dark_background_switch():
    set_dark_background(False)
    assert has_dark_background() is False
    set_dark_background(True)
    assert has_dark_background() is True


def test_visible_width_ignores_escapes():
    assert visible_width("\x1b[31mabc\x1b[0m") == len("abc")
    assert visible_width("ab\nabcd") == len("abcd")


def test_visible_width_wide_characters():
    assert visible_width("日本") == 4


def test_height_counts_lines():
    assert height("a\nb\nc") == len(["a", "b", "c"])
    assert height("") == 1


def test_plain_render_without_color():
    assert Style(foreground="#ff0000", bold=True).render("x") == "x"


def test_colored_render():
    set_color_enabled(True)
    out = Style(foreground=AdaptiveColor(light="#000000", dark="#ff0000"), bold=True).render("x")
    assert "38;2;255;0;0" in out
    assert visible_width(out) == 1
    set_dark_background(False)
    assert "38;2;0;0;0" in Style(foreground=AdaptiveColor(light="#000000", dark="#ff0000")).render("x")


def test_width_wraps_and_pads():
    text = "aaa bbb ccc ddd"
    out = Style(width=10).render(text)
    lines = out.split("\n")
    assert len(lines) > 1
    assert all(visible_width(line) == 10 for line in lines)
    assert " ".join(out.split()) == text


def test_long_word_is_broken():
    out = Style(width=4).render("abcdefghij")
    assert all(visible_width(line) == 4 for line in out.split("\n"))
    assert "".join(out.split()) == "abcdefghij"


def test_right_alignment():
    out = Style(width=6, align=Align.RIGHT).render("ab")
    assert out.endswith("ab")
    assert visible_width(out) == 6


def test_padding_adds_blank_lines_and_columns():
    out = Style(padding=(1, 2)).render("ab")
    lines = out.split("\n")
    assert lines[0].strip() == "" and lines[-1].strip() == ""
    assert lines[1].strip() == "ab"
    assert lines[1].startswith("  ab")
    assert height(out) == height("ab") + 2


def test_invalid_padding_raises():
    with pytest.raises(ValueError):
        Style(padding=(1, 2, 3, 4, 5))


def test_full_border():
    lines = Style(border=THICK_BORDER).render("hi").split("\n")
    assert lines[1] == THICK_BORDER.left + "hi" + THICK_BORDER.right
    assert lines[0].startswith(THICK_BORDER.top_left)
    assert lines[-1].endswith(THICK_BORDER.bottom_right)


def test_left_border_only():
    out = Style(border=THICK_BORDER, border_sides=(False, False, False, True)).render("hi")
    assert out == THICK_BORDER.left + "hi"


def test_margin_top():
    out = Style(margin=(1, 0)).render("x")
    assert out.split("\n")[1] == "x"
    assert out.split("\n")[0].strip() == ""


def test_place_horizontal_center():
    out = place_horizontal(10, Align.CENTER, "ab")
    assert visible_width(out) == 10
    assert out.strip() == "ab"
    left = len(out) - len(out.lstrip())
    right = len(out) - len(out.rstrip())
    assert left == right


def test_place_horizontal_wider_unchanged():
    assert place_horizontal(2, Align.LEFT, "abcdef") == "abcdef"


def test_join_vertical_pads_lines():
    out = join_vertical(Align.LEFT, "a", "bbbb")
    lines = out.split("\n")
    assert [line.rstrip() for line in lines] == ["a", "bbbb"]
    assert {visible_width(line) for line in lines} == {visible_width("bbbb")}


def test_markdown_theme_follows_background():
    theme = markdown_theme()
    assert theme.styles["markdown.strong"].bold is True
    assert theme.styles["markdown.h2"].color.triplet == RichColor.parse("#22D3EE").triplet
    set_dark_background(False)
    assert markdown_theme().styles["markdown.h2"].color.triplet == RichColor.parse("#0891B2").triplet


def test_to_markdown_strips_markup():
    out = to_markdown("hello **world**", 40)
    assert "hello world" in out
    assert "**" not in out


def test_to_markdown_wraps():
    text = " ".join(["alpha"] * 20)
    out = to_markdown(text, 20)
    assert all(visible_width(line) <= 20 for line in out.split("\n"))
    assert " ".join(out.split()) == text