from __future__ import annotations

import io
import json

import pytest

from config import THEME
from core.protocol import ClickEvent, ProtocolWriter, parse_click_line, widget_to_json
from core.widgets import State, Widget


def test_widget_to_json_carries_text_position_and_color() -> None:
    widget = Widget(block_id=3, text="42%", icon="C", state=State.CRITICAL, instance=1)

    obj = widget_to_json(widget)

    assert obj["full_text"] == "C 42%"
    assert obj["name"] == "3"
    assert obj["instance"] == "1"
    assert obj["color"] == THEME["critical"]["fg"]
    assert "background" not in obj


def test_widget_to_json_uses_custom_theme() -> None:
    theme = {"idle": {"fg": None, "bg": "#000000"}}

    obj = widget_to_json(Widget(block_id=0, text="x"), theme)

    assert "color" not in obj
    assert obj["background"] == "#000000"


def test_writer_emits_header_then_frames() -> None:
    stream = io.StringIO()
    writer = ProtocolWriter(stream)

    writer.start()
    writer.write_frame([Widget(0, "a"), Widget(1, "b")])
    writer.write_frame([])

    lines = stream.getvalue().splitlines()
    assert json.loads(lines[0]) == {"version": 1, "click_events": True}
    assert lines[1] == "["
    first = json.loads(lines[2].rstrip(","))
    assert [o["full_text"] for o in first] == ["a", "b"]
    assert lines[3] == "[],"


def test_writer_without_click_events() -> None:
    stream = io.StringIO()
    ProtocolWriter(stream, click_events=False).start()

    header = json.loads(stream.getvalue().splitlines()[0])
    assert header["click_events"] is False


def test_writer_requires_start() -> None:
    with pytest.raises(RuntimeError):
        ProtocolWriter(io.StringIO()).write_frame([])


@pytest.mark.parametrize("line", ["[", "]", "", "   \n"])
def test_framing_lines_are_skipped(line) -> None:
    assert parse_click_line(line) is None


def test_parse_click_line_with_leading_comma() -> None:
    line = ',{"name": "2", "instance": "0", "button": 3, "x": 1800, "y": 10, "modifiers": ["Shift"]}\n'

    event = parse_click_line(line)

    assert event == ClickEvent(block_id=2, instance=0, button=3, x=1800, y=10, modifiers=("Shift",))


def test_parse_click_line_tolerates_missing_fields() -> None:
    event = parse_click_line('{"name": "0"}')

    assert event.block_id == 0
    assert event.button == 0
    assert event.modifiers == ()


@pytest.mark.parametrize("line", [
    "{not json",
    '"just a string"',
    '{"instance": "0", "button": 1}',
    '{"name": "clock", "button": 1}',
])
def test_parse_click_line_rejects_unattributable_events(line) -> None:
    with pytest.raises(ValueError):
        parse_click_line(line)
