# JSON logger subscribing to the monitoring bus
"""
Structured logging for the bridge.

Provides:
- JsonFileLogger: subscribes to a monitoring EventBus and writes
  MonitoringEvents as JSONL.
- log_event: convenience helper for publishing MonitoringEvents.

Usage:

    from pathlib import Path
    from capture.bus import EventBus
    from monitoring.logger import JsonFileLogger, log_event
    from monitoring.events import EventType

    monitor = EventBus()
    sink = JsonFileLogger(Path("logs/bridge/events.log"), monitor)

    log_event(
        bus=monitor,
        module="batching.controller",
        event_type=EventType.BATCH_SENT,
        message="Batch sent",
        payload={"events": 3},
    )
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

from capture.bus import EventBus

from .events import EventType, MonitoringEvent

log = logging.getLogger(__name__)


# ============================================================
# JSONL File Logger
# ============================================================

class JsonFileLogger:
    """
    JSON-lines logger for MonitoringEvent instances.

    - Subscribes to an EventBus and writes one JSON object per line.
    - UTF-8, parent directory created on demand.
    """

    def __init__(self, path: Path, bus: EventBus) -> None:
        self._path = path
        self._bus = bus
        path.parent.mkdir(parents=True, exist_ok=True)
        self._file = path.open("a", encoding="utf-8")
        bus.subscribe(MonitoringEvent, self._on_event)

    @property
    def path(self) -> Path:
        return self._path

    def _on_event(self, event: MonitoringEvent) -> None:
        line = json.dumps(event.to_dict(), ensure_ascii=False, default=str)
        try:
            self._file.write(line + "\n")
            self._file.flush()
        except OSError:
            log.exception("Failed to write monitoring event to %s", self._path)

    def close(self) -> None:
        """Unsubscribe and close the file handle."""
        self._bus.unsubscribe(MonitoringEvent, self._on_event)
        if not self._file.closed:
            self._file.close()


# ============================================================
# Convenience helper for emitting events
# ============================================================

def log_event(
    bus: EventBus,
    module: str,
    event_type: EventType,
    message: str,
    payload: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> None:
    """
    Create and publish a MonitoringEvent.

        log_event(
            bus=self._monitor,
            module=__name__,
            event_type=EventType.COMMAND_PHASE,
            message="Command completed",
            payload={"command_id": cid, "phase": "completed"},
            correlation_id=cid,
        )
    """
    event = MonitoringEvent(
        ts=time.time(),
        module=module,
        event_type=event_type,
        message=message,
        payload=payload or {},
        correlation_id=correlation_id,
    )
    bus.publish(event)
