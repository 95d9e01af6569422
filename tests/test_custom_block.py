from __future__ import annotations

import signal
from unittest.mock import patch

import pytest

from blocks.custom import Custom
from core.errors import ConfigError, RenderError
from core.event_bus import UPDATE, EventBus
from core.protocol import ClickEvent
from core.update import Every, OnDemand, Once
from core.widgets import State


def _custom(config: dict, bus=None) -> Custom:
    config.setdefault("shell", "sh")
    return Custom(0, bus, config)


def _requests(bus: EventBus) -> list:
    received = []
    bus.subscribe(UPDATE, received.append)
    bus.poll(timeout=0)
    return received


def test_default_interval_is_ten_seconds() -> None:
    block = _custom({"command": "echo hi"})

    assert block.update_interval() == Every(10.0)


def test_interval_keywords() -> None:
    assert _custom({"command": "true", "interval": "once"}).update_interval() == Once()
    assert _custom({"command": "true", "interval": "on_demand"}).update_interval() == OnDemand()


def test_render_shows_trimmed_stdout() -> None:
    block = _custom({"command": "echo '  hello world  '"})

    widgets = block.render()

    assert len(widgets) == 1
    assert widgets[0].text == "hello world"
    assert widgets[0].block_id == 0
    assert widgets[0].state is State.IDLE


def test_nonzero_exit_still_shows_output() -> None:
    block = _custom({"command": "echo partial; exit 3"})

    assert block.render()[0].text == "partial"


def test_unstartable_shell_shows_error_text() -> None:
    block = _custom({"command": "echo hi", "shell": "/nonexistent/shell"})

    widgets = block.render()

    assert len(widgets) == 1
    assert "nonexistent" in widgets[0].text


def test_hide_when_empty() -> None:
    hidden = _custom({"command": "true", "hide_when_empty": True})
    shown = _custom({"command": "true"})

    assert hidden.render() == []
    assert len(shown.render()) == 1
    assert shown.render()[0].text == ""


def test_json_output_sets_icon_and_state() -> None:
    block = _custom({
        "command": """echo '{"text": "73%", "icon": "X", "state": "Warning"}'""",
        "json": True,
    })

    widget = block.render()[0]

    assert widget.text == "73%"
    assert widget.icon == "X"
    assert widget.state is State.WARNING
    assert widget.full_text == "X 73%"


def test_json_defaults_for_missing_icon_and_state() -> None:
    block = _custom({"command": """echo '{"text": "ok"}'""", "json": True})

    widget = block.render()[0]

    assert widget.icon == ""
    assert widget.state is State.IDLE


@pytest.mark.parametrize("output", [
    "not json",
    '{"icon": "X"}',
    '{"text": "a", "state": "Purple"}',
    '{"text": null}',
    '{"text": 42}',
])
def test_bad_json_is_render_error(output) -> None:
    block = _custom({"command": "true", "json": True})

    with patch("blocks.custom.run_shell", return_value=output):
        with pytest.raises(RenderError) as exc_info:
            block.render()

    assert "Error parsing JSON" in str(exc_info.value)


def test_command_and_cycle_are_mutually_exclusive() -> None:
    with pytest.raises(ConfigError):
        _custom({"command": "echo a", "cycle": ["echo b"]})


def test_empty_cycle_rejected() -> None:
    with pytest.raises(ConfigError):
        _custom({"cycle": []})


def test_cycle_advances_and_wraps_on_click() -> None:
    bus = EventBus()
    block = _custom({"cycle": ["echo one", "echo two"]}, bus=bus)

    assert block.render()[0].text == "one"
    block.click(ClickEvent(block_id=0))
    assert block.render()[0].text == "two"
    block.click(ClickEvent(block_id=0))
    assert block.render()[0].text == "one"

    assert [t.block_id for t in _requests(bus)] == [0, 0]


def test_on_click_spawns_command_and_requests_update() -> None:
    bus = EventBus()
    block = _custom({"command": "echo hi", "on_click": "touch /tmp/x"}, bus=bus)

    with patch("blocks.custom.spawn_shell") as spawn:
        block.click(ClickEvent(block_id=0, button=1))

    spawn.assert_called_once_with("sh", "touch /tmp/x")
    assert len(_requests(bus)) == 1


def test_plain_command_click_does_nothing() -> None:
    bus = EventBus()
    block = _custom({"command": "echo hi"}, bus=bus)

    block.click(ClickEvent(block_id=0))

    assert _requests(bus) == []


def test_signal_offset_converted_and_matched() -> None:
    bus = EventBus()
    block = _custom({"command": "echo hi", "signal": 2}, bus=bus)
    signum = int(signal.SIGRTMIN) + 2

    assert block.signals == frozenset({signum})

    block.signal(signum + 1)
    assert _requests(bus) == []

    block.signal(signum)
    assert len(_requests(bus)) == 1


def test_out_of_range_signal_rejected() -> None:
    with pytest.raises(ConfigError):
        _custom({"command": "echo hi", "signal": 1000})
    with pytest.raises(ConfigError):
        _custom({"command": "echo hi", "signal": -1})


def test_request_dropped_when_bus_closed() -> None:
    bus = EventBus()
    block = _custom({"cycle": ["echo a", "echo b"]}, bus=bus)
    bus.close()

    block.click(ClickEvent(block_id=0))

    assert block.current_command() == "echo b"
