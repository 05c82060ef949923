#tests/test_monitoring_logger.py
"""
Tests for monitoring.logger.JsonFileLogger and log_event.

Covers:
- JSON structure validity
- Correct field encoding
- Parent directory creation
- close() detaches from the bus
"""

from __future__ import annotations

import json
from pathlib import Path

from capture.bus import EventBus
from monitoring.events import EventType, MonitoringEvent
from monitoring.logger import JsonFileLogger, log_event


def test_json_file_logger_writes_valid_json(tmp_path: Path):
    bus = EventBus()
    log_path = tmp_path / "events.log"

    logger = JsonFileLogger(log_path, bus)

    log_event(
        bus=bus,
        module="batching.controller",
        event_type=EventType.BATCH_SENT,
        message="Batch sent",
        payload={"events": 3, "goal_id": "g1"},
        correlation_id="session_20250101_120000",
    )

    logger.close()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 1

    data = json.loads(lines[0])

    assert data["module"] == "batching.controller"
    assert data["event_type"] == "BATCH_SENT"
    assert data["message"] == "Batch sent"
    assert data["payload"] == {"events": 3, "goal_id": "g1"}
    assert data["correlation_id"] == "session_20250101_120000"
    assert isinstance(data["ts"], (int, float))


def test_logger_parent_dir_created(tmp_path: Path):
    log_path = tmp_path / "nested" / "logs" / "events.log"

    bus = EventBus()
    logger = JsonFileLogger(log_path, bus)
    log_event(bus=bus, module="test", event_type=EventType.LOG, message="hello")
    logger.close()

    assert log_path.exists()
    assert log_path.read_text(encoding="utf-8").strip()


def test_close_unsubscribes(tmp_path: Path):
    bus = EventBus()
    logger = JsonFileLogger(tmp_path / "events.log", bus)
    assert bus.handler_count(MonitoringEvent) == 1

    logger.close()
    log_event(bus=bus, module="test", event_type=EventType.LOG, message="after close")

    assert bus.handler_count(MonitoringEvent) == 0
    assert (tmp_path / "events.log").read_text(encoding="utf-8") == ""
