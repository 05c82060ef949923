# src/capture/__init__.py
"""
Event capture layer.

- EventBus: typed, synchronous publish/subscribe keyed by payload class
- payloads: wire-level event payload shapes
- EventBatch: ordered bundle of events plus one game-state snapshot
- SessionClock: hhmmss timestamps relative to session start
- BuildRecorder: groups operator block edits into build events
"""

from .bus import EventBus
from .clock import SessionClock
from .signals import FlushBuildRequest
from .payloads import (
    EventType,
    ImageRef,
    VoxelInstance,
    SpeechPayload,
    BuildPayload,
    VoxelTypeCreatedPayload,
    VoxelTypeUpdatedPayload,
    ContinuePlanPayload,
    PerceptionPayload,
    PAYLOAD_TYPES,
    event_type_for,
)
from .batch import Event, EventBatch

__all__ = [
    "EventBus",
    "SessionClock",
    "FlushBuildRequest",
    "EventType",
    "ImageRef",
    "VoxelInstance",
    "SpeechPayload",
    "BuildPayload",
    "VoxelTypeCreatedPayload",
    "VoxelTypeUpdatedPayload",
    "ContinuePlanPayload",
    "PerceptionPayload",
    "PAYLOAD_TYPES",
    "event_type_for",
    "Event",
    "EventBatch",
]
