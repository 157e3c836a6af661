#tests/test_monitoring_logger.py
"""
Tests for monitoring.logger.JsonFileLogger and log_event.

Covers:
- One JSON object per line with every MonitoringEvent field
- Parent directory creation
- close() detaches the sink from the bus
"""

from __future__ import annotations

import json
from pathlib import Path

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import JsonFileLogger, log_event


def test_events_are_written_as_json_lines(tmp_path: Path):
    bus = EventBus()
    sink = JsonFileLogger(tmp_path / "events.jsonl", bus)

    log_event(
        bus=bus,
        module="blockwalker.controller",
        event_type=EventType.TARGET_VISITED,
        message="visited 1, 0, 1",
        payload={"target": [1, 0, 1]},
        correlation_id="run-42",
    )
    log_event(
        bus=bus,
        module="blockwalker.controller",
        event_type=EventType.RUN_FINISHED,
        message="run finished",
    )
    sink.close()

    lines = sink.path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2

    first = json.loads(lines[0])
    assert first["module"] == "blockwalker.controller"
    assert first["event_type"] == "TARGET_VISITED"
    assert first["payload"] == {"target": [1, 0, 1]}
    assert first["correlation_id"] == "run-42"
    assert isinstance(first["ts"], (int, float))

    second = json.loads(lines[1])
    assert second["payload"] == {}
    assert second["correlation_id"] is None


def test_parent_directories_are_created(tmp_path: Path):
    path = tmp_path / "logs" / "walker" / "events.jsonl"
    bus = EventBus()
    sink = JsonFileLogger(path, bus)

    log_event(bus=bus, module="t", event_type=EventType.LOG, message="hello")
    sink.close()

    assert path.read_text(encoding="utf-8").strip()


def test_close_unsubscribes_from_bus(tmp_path: Path):
    bus = EventBus()
    sink = JsonFileLogger(tmp_path / "events.jsonl", bus)
    sink.close()

    # must not raise on a closed file
    log_event(bus=bus, module="t", event_type=EventType.LOG, message="late")

    assert sink.path.read_text(encoding="utf-8") == ""
