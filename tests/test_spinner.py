import io
import time

import pytest

from mcphost.spinner import DOT, POINTS, Spinner
from mcphost.styles import set_color_enabled


@pytest.fixture(autouse=True)
def plain_output():
    set_color_enabled(False)
    yield
    set_color_enabled(False)


def test_first_frame_line():
    assert Spinner("Loading").frame_line(0) == " ∙∙∙ Loading"


def test_custom_frames_are_used():
    assert Spinner("x", frames=DOT).frame_line(1) == f" {DOT[1]} x"


def test_frames_cycle():
    spinner = Spinner("Working")
    for index in range(len(POINTS)):
        assert spinner.frame_line(index) == spinner.frame_line(index + len(POINTS))


def test_empty_frames_rejected():
    with pytest.raises(ValueError):
        Spinner("x", frames=())


def test_context_manager_draws_and_clears():
    stream = io.StringIO()
    with Spinner("Loading", interval=0.005, stream=stream):
        time.sleep(0.05)
    output = stream.getvalue()
    assert "Loading" in output
    assert output.endswith("\r\x1b[2K")


def test_stop_without_start_writes_nothing():
    stream = io.StringIO()
    spinner = Spinner("idle", stream=stream)
    spinner.stop()
    assert stream.getvalue() == ""


def test_start_twice_then_stop_finishes():
    stream = io.StringIO()
    spinner = Spinner("twice", interval=0.005, stream=stream)
    spinner.start()
    spinner.start()
    time.sleep(0.02)
    spinner.stop()
    written = stream.getvalue()
    assert written.endswith("\r\x1b[2K")
    spinner.stop()
    assert stream.getvalue() == written