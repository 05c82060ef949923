# path: src/monitoring/events.py
"""
Monitoring event schema for the bridge.

MonitoringEvent is a structured, JSON-safe record of something the
pipeline did: a batch went out, a reply was routed, a command changed
phase. Events travel on a dedicated EventBus instance (separate from
the world-event bus, and never cleared on session reset) and are
consumed by monitoring.logger.JsonFileLogger and
monitoring.console.ConsoleObserver.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Typed monitoring events emitted throughout the bridge."""

    # Session lifecycle
    SESSION_STARTED = auto()

    # Outbound batches
    BATCH_SENT = auto()
    BATCH_INVALID = auto()
    BATCH_SEND_FAILED = auto()
    PERCEPTION_REQUESTED = auto()

    # Inbound replies
    REPLY_ROUTED = auto()

    # Plan approval workflow
    PLAN_APPROVAL_SENT = auto()

    # Command execution
    COMMAND_PHASE = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the batching, routing or dispatch layers.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module ("batching.controller", ...)
    event_type: EventType
    message: str                # Short human-readable description
    payload: Dict[str, Any]
    correlation_id: Optional[str] = None  # session id or command id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name  # store name, not enum
        return data
