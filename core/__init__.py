"""Core engine for the status bar.

Runs a fixed set of independently configured blocks, re-renders each on
its own cadence, routes signals and clicks to them, and emits the
combined output as an i3bar/swaybar protocol stream.

Architecture:
    Block          -- one unit of bar output; render() runs on a worker thread
    TaskQueue      -- earliest-wins schedule, one pending render per block
    EventBus       -- thread-safe inbox; workers and handlers publish, scheduler polls
    EventRouter    -- delivers signals and clicks to the owning blocks
    FrameAssembler -- latest output per block, emitted in config order
    Scheduler      -- the loop tying them together
    Registry       -- block kinds by name, for the config loader
"""

from core.block import Block
from core.event_bus import EventBus
from core.event_router import EventRouter
from core.frame import FrameAssembler
from core.registry import BLOCK_REGISTRY, register_block
from core.scheduler import Scheduler
from core.task_queue import Task, TaskQueue
from core.update import Every, OnDemand, Once, parse_update
from core.widgets import State, Widget

__all__ = [
    "Block",
    "EventBus",
    "EventRouter",
    "FrameAssembler",
    "BLOCK_REGISTRY",
    "register_block",
    "Scheduler",
    "Task",
    "TaskQueue",
    "Every",
    "OnDemand",
    "Once",
    "parse_update",
    "State",
    "Widget",
]
