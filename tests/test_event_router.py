from __future__ import annotations

from unittest.mock import MagicMock

from core.errors import ClickError, SignalError
from core.event_router import EventRouter
from core.protocol import ClickEvent
from core.update import OnDemand


def _block(block_id: int, signals=()):
    block = MagicMock()
    block.id.return_value = block_id
    block.signals = frozenset(signals)
    return block


def test_signal_subscribers_in_config_order() -> None:
    blocks = [_block(0, {40}), _block(1), _block(2, {40, 41})]
    router = EventRouter(blocks)

    assert router.subscribers(40) == [0, 2]
    assert router.subscribers(41) == [2]
    assert router.subscribers(42) == []
    assert router.signal_numbers == [40, 41]


def test_signal_delivered_only_to_subscribers() -> None:
    blocks = [_block(0, {40}), _block(1), _block(2, {40})]
    router = EventRouter(blocks)

    delivered = router.route_signal(40)

    assert delivered == [0, 2]
    blocks[0].signal.assert_called_once_with(40)
    blocks[1].signal.assert_not_called()
    blocks[2].signal.assert_called_once_with(40)


def test_failing_signal_handler_does_not_stop_delivery() -> None:
    blocks = [_block(0, {40}), _block(1, {40}), _block(2, {40})]
    blocks[0].signal.side_effect = SignalError("nope")
    blocks[1].signal.side_effect = RuntimeError("boom")
    router = EventRouter(blocks)

    delivered = router.route_signal(40)

    assert delivered == [2]
    blocks[2].signal.assert_called_once_with(40)


def test_unsubscribed_signal_is_noop() -> None:
    router = EventRouter([_block(0)])

    assert router.route_signal(50) == []


def test_click_goes_only_to_addressed_block() -> None:
    blocks = [_block(0), _block(1), _block(2)]
    router = EventRouter(blocks)
    event = ClickEvent(block_id=2, button=1)

    assert router.route_click(event) is True

    blocks[2].click.assert_called_once_with(event)
    blocks[0].click.assert_not_called()
    blocks[1].click.assert_not_called()


def test_click_for_unknown_block() -> None:
    router = EventRouter([_block(0)])

    assert router.route_click(ClickEvent(block_id=7)) is False


def test_click_errors_are_swallowed() -> None:
    blocks = [_block(0), _block(1)]
    blocks[0].click.side_effect = ClickError("bad")
    blocks[1].click.side_effect = OSError("spawn failed")
    router = EventRouter(blocks)

    assert router.route_click(ClickEvent(block_id=0)) is False
    assert router.route_click(ClickEvent(block_id=1)) is False


def test_router_works_with_real_blocks(fake_block) -> None:
    block = fake_block(0, OnDemand(), signals=frozenset({44}))
    router = EventRouter([block])

    router.route_signal(44)
    router.route_click(ClickEvent(block_id=0))

    assert block.signals_seen == [44]
    assert len(block.clicks) == 1
