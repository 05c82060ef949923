# path: src/orchestration/error_handling.py

"""
Error handling helpers for the bridge runtime loop.

Wraps SessionOrchestrator.tick() so an exception escaping a tick is
recorded on the monitoring bus before it propagates to the runtime.
"""

from __future__ import annotations

from typing import Optional

from capture.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event

from .session import SessionOrchestrator


def safe_tick_with_logging(
    orchestrator: SessionOrchestrator,
    dt: float,
    bus: Optional[EventBus] = None,
) -> None:
    """
    Call orchestrator.tick(dt) inside a try/except block.

    If the tick throws, emit a LOG event with subtype "TICK_EXCEPTION"
    and re-raise so the caller decides whether to abort or continue.
    """
    monitor = bus if bus is not None else orchestrator.monitor_bus
    try:
        orchestrator.tick(dt)
    except Exception as exc:
        log_event(
            bus=monitor,
            module="orchestration.safe_tick",
            event_type=EventType.LOG,
            message="Control loop tick raised an exception",
            payload={
                "subtype": "TICK_EXCEPTION",
                "session_id": orchestrator.session_id,
                "exception_repr": repr(exc),
            },
            correlation_id=orchestrator.session_id,
        )
        raise
