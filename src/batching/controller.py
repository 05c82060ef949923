# src/batching/controller.py
"""
Batch controller: accumulates bus events and decides when to send.

Per batch: OPEN -> accumulating -> FLUSH-TRIGGERED -> SENT -> new OPEN.

tick() triggers a flush when any of these holds:
1. the batch holds an immediate-type event (speech, continue-plan,
   perception)
2. time since last send >= interval and count >= minimum
3. count >= maximum

Conditions 2 and 3 first ask the photo-capture collaborator for four
directional images and add a perception event before flushing. Only
one capture may be in flight; extra triggers are ignored. A capture
that yields no images degrades to a plain flush.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from capture.batch import Event, EventBatch
from capture.bus import EventBus
from capture.clock import SessionClock
from capture.payloads import (
    DEFAULT_IMMEDIATE_TYPES,
    PAYLOAD_TYPES,
    ImageRef,
    PerceptionPayload,
)
from capture.signals import FlushBuildRequest
from monitoring.events import EventType as MonitorEventType
from monitoring.logger import log_event

log = logging.getLogger(__name__)

SendCallback = Callable[[bool, Optional[str], Optional[str]], None]
BatchSender = Callable[[EventBatch, SendCallback], None]


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@dataclass
class BatchingConfig:
    send_interval_s: float = 10.0
    max_events_per_batch: int = 10
    min_events_for_perception: int = 1

    # When False, tick() never triggers; flush() still works.
    auto_send: bool = True

    immediate_types: List[str] = field(default_factory=lambda: list(DEFAULT_IMMEDIATE_TYPES))


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class BatchController:
    def __init__(
        self,
        bus: EventBus,
        tracker: Any,
        session: Any,
        sender: BatchSender,
        clock: SessionClock,
        config: Optional[BatchingConfig] = None,
        capture: Any = None,
        time_fn: Callable[[], float] = time.monotonic,
        monitor: Optional[EventBus] = None,
    ) -> None:
        self._bus = bus
        self._tracker = tracker
        self._session = session
        self._sender = sender
        self._clock = clock
        self._config = config or BatchingConfig()
        self._capture = capture
        self._time_fn = time_fn
        self._monitor = monitor

        self._batch = EventBatch(session_id=self._session_id())
        self._last_send_at = time_fn()
        self._perception_in_flight = False
        self._attached = False

    # ------------------------------------------------------------------
    # Bus wiring
    # ------------------------------------------------------------------

    def attach(self) -> None:
        if self._attached:
            return
        for payload_cls in PAYLOAD_TYPES:
            self._bus.subscribe(payload_cls, self._on_payload)
        self._attached = True

    def detach(self) -> None:
        for payload_cls in PAYLOAD_TYPES:
            self._bus.unsubscribe(payload_cls, self._on_payload)
        self._attached = False

    def _on_payload(self, payload: Any) -> None:
        self._batch.add_event(Event.from_payload(payload, self._clock))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def config(self) -> BatchingConfig:
        return self._config

    @property
    def current_batch(self) -> EventBatch:
        return self._batch

    @property
    def event_count(self) -> int:
        return len(self._batch.events)

    @property
    def perception_in_flight(self) -> bool:
        return self._perception_in_flight

    def set_capture(self, capture: Any) -> None:
        self._capture = capture

    # ------------------------------------------------------------------
    # Clamped setters
    # ------------------------------------------------------------------

    def set_send_interval(self, seconds: float) -> None:
        self._config.send_interval_s = max(1.0, float(seconds))

    def set_max_events(self, count: int) -> None:
        self._config.max_events_per_batch = max(1, int(count))

    def set_min_events_for_perception(self, count: int) -> None:
        self._config.min_events_for_perception = max(1, int(count))

    def set_auto_send(self, enabled: bool) -> None:
        self._config.auto_send = bool(enabled)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def _session_id(self) -> str:
        return getattr(self._session, "session_id", "") or ""

    def tick(self) -> None:
        self._batch.session_id = self._session_id()
        if not self._config.auto_send:
            return

        count = self.event_count
        if count == 0:
            return

        if self._batch.has_type(self._config.immediate_types):
            self.flush()
            return

        if self._perception_in_flight:
            return

        cfg = self._config
        elapsed = self._time_fn() - self._last_send_at
        due = elapsed >= cfg.send_interval_s and count >= cfg.min_events_for_perception
        if due or count >= cfg.max_events_per_batch:
            self.request_perception()

    # ------------------------------------------------------------------
    # Perception
    # ------------------------------------------------------------------

    def request_perception(self) -> None:
        if self._capture is None:
            self.flush()
            return
        if self._perception_in_flight:
            log.debug("Perception capture already in flight; trigger ignored")
            return

        self._perception_in_flight = True
        self._last_send_at = self._time_fn()
        self._emit(MonitorEventType.PERCEPTION_REQUESTED, "Perception capture requested")
        try:
            self._capture.capture_four_directions(self._on_perception_captured)
        except Exception:
            log.exception("Photo capture failed; sending without perception")
            self._perception_in_flight = False
            self.flush()

    def _on_perception_captured(self, file_names: Optional[List[str]]) -> None:
        self._perception_in_flight = False
        images = [ImageRef(file_name=name) for name in (file_names or []) if name]
        if not images:
            log.warning("Perception capture returned no images; sending without perception")
            self.flush()
            return
        self._bus.publish(PerceptionPayload(images=images))
        self.flush()

    # ------------------------------------------------------------------
    # Flush
    # ------------------------------------------------------------------

    def flush(self) -> Optional[EventBatch]:
        """
        Send the current batch now.

        Returns the batch handed to the sender, or None when nothing was
        sent (empty or invalid; an invalid batch is kept).
        """
        self._bus.publish(FlushBuildRequest())

        batch = self._batch
        if not batch.events:
            return None

        batch.session_id = self._session_id()
        batch.game_state = self._tracker.fresh_snapshot()

        error = batch.validate()
        if error is not None:
            log.warning("Batch not sent, validation failed: %s", error)
            self._emit(MonitorEventType.BATCH_INVALID, error, {"events": len(batch.events)})
            return None

        self._batch = EventBatch(session_id=batch.session_id)
        self._last_send_at = self._time_fn()
        self._sender(batch, self._on_sent)
        return batch

    def discard_current_batch(self) -> int:
        dropped = len(self._batch.events)
        self._batch = EventBatch(session_id=self._session_id())
        return dropped

    def reset(self) -> None:
        self.discard_current_batch()
        self._last_send_at = self._time_fn()
        self._perception_in_flight = False

    def _on_sent(self, success: bool, response: Optional[str], error: Optional[str]) -> None:
        if success:
            log.debug("Batch delivered")
        else:
            log.error("Batch send failed: %s", error)

    def _emit(self, event_type: MonitorEventType, message: str, payload: Optional[dict] = None) -> None:
        if self._monitor is not None:
            log_event(self._monitor, __name__, event_type, message, payload or {})
