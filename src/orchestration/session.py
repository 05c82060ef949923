# src/orchestration/session.py
"""
Session orchestrator: wiring and the two outward calls.

Owns the session id and builds every pipeline component around the
injected collaborators (transport, world, registry, photo capture,
observer):

    producers -> EventBus -> BatchController -> transport
              -> ResponseRouter -> GameStateTracker / CommandDispatcher

Outward calls:
- send_batch(batch): POST /events, route the reply
- send_plan_approval(plan, approved_ids): POST /plan-permission, route the reply

tick(dt) is the single control-loop step.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional

from batching.controller import BatchController
from capture.batch import EventBatch
from capture.build_recorder import BuildRecorder
from capture.bus import EventBus
from capture.clock import SessionClock
from commands.base import CommandExecutor, ExecutorContext
from commands.dispatcher import CommandDispatcher
from commands.executors import default_executors
from env.schema import BridgeConfig
from monitoring.events import EventType as MonitorEventType
from monitoring.logger import log_event
from routing.messages import PlanBatch
from routing.permission import build_plan_approval
from routing.router import ResponseRouter, RouteResult
from transport.images import inline_images
from transport.pump import RequestPump
from world_state.goal_labels import GoalLabelStore
from world_state.tracker import GameStateTracker

log = logging.getLogger(__name__)

SendCompleteFn = Callable[[bool, Optional[str], Optional[str]], None]


def make_session_id(now: datetime) -> str:
    return f"session_{now.strftime('%Y%m%d_%H%M%S')}"


class SessionOrchestrator:
    def __init__(
        self,
        config: Optional[BridgeConfig] = None,
        transport: Any = None,
        world: Any = None,
        registry: Any = None,
        capture: Any = None,
        observer: Any = None,
        monitor_bus: Optional[EventBus] = None,
        executors: Optional[Iterable[CommandExecutor]] = None,
        time_fn: Callable[[], float] = time.monotonic,
        now_fn: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config or BridgeConfig()
        self._transport = transport
        self._world = world
        self._registry = registry
        self._capture = capture
        self._observer = observer
        self._now_fn = now_fn
        self._session_id = ""

        self.bus = EventBus()
        self.monitor_bus = monitor_bus if monitor_bus is not None else EventBus()
        self.clock = SessionClock(time_fn)
        self.goal_labels = GoalLabelStore()

        self.tracker = GameStateTracker(
            world=world,
            registry=registry,
            config=self.config.game_state,
            timestamp_fn=self.clock.hhmmss,
        )

        if registry is not None and hasattr(registry, "set_bus"):
            registry.set_bus(self.bus)

        context = ExecutorContext(
            world=world,
            body=world,
            registry=registry,
            bus=self.bus,
            capture=capture,
            observer=observer,
        )
        self.dispatcher = CommandDispatcher(
            executors if executors is not None else default_executors(context, self.config.movement),
            tracker=self.tracker,
            observer=observer,
            monitor=self.monitor_bus,
        )
        self.router = ResponseRouter(
            self.tracker,
            self.goal_labels,
            dispatcher=self.dispatcher,
            observer=observer,
            monitor=self.monitor_bus,
        )
        self.pump = RequestPump(transport, workers=self.config.http_workers)
        self.build_recorder = BuildRecorder(self.bus, self.config.build_recorder, time_fn=time_fn)
        self.controller = BatchController(
            self.bus,
            self.tracker,
            self,
            self.send_batch,
            self.clock,
            config=self.config.batching,
            capture=capture,
            time_fn=time_fn,
            monitor=self.monitor_bus,
        )

        self.new_session()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._session_id

    def new_session(self) -> str:
        """
        Start a fresh session: new id, empty bus subscriptions, labels,
        histories and batch, then re-wire the pipeline subscribers.
        """
        self._session_id = make_session_id(self._now_fn())
        self.bus.clear()
        self.goal_labels.clear()
        self.tracker.reset()
        self.dispatcher.reset()
        self.clock.reset()
        self.controller.detach()
        self.build_recorder.detach()
        self.controller.reset()
        self.controller.attach()
        self.build_recorder.attach()

        log.info("Started %s", self._session_id)
        log_event(
            self.monitor_bus,
            __name__,
            MonitorEventType.SESSION_STARTED,
            "Session started",
            correlation_id=self._session_id,
        )
        return self._session_id

    # ------------------------------------------------------------------
    # Control loop
    # ------------------------------------------------------------------

    def publish(self, payload: Any) -> None:
        """Publish an event payload from a producer."""
        self.bus.publish(payload)

    def tick(self, dt: float) -> None:
        self.pump.drain()
        self.build_recorder.tick()
        self.controller.tick()
        self.dispatcher.tick(dt)

    def shutdown(self) -> None:
        self.pump.shutdown()
        closer = getattr(self._transport, "close", None)
        if callable(closer):
            closer()

    # ------------------------------------------------------------------
    # Outward calls
    # ------------------------------------------------------------------

    def _photo_dir(self) -> Optional[Path]:
        return Path(self.config.api.photo_dir) if self.config.api.photo_dir else None

    def send_batch(self, batch: EventBatch, on_complete: Optional[SendCompleteFn] = None) -> None:
        if self._transport is None:
            log.error("No transport configured; batch dropped")
            if on_complete is not None:
                on_complete(False, None, "no transport")
            return

        body = batch.to_wire()
        if self.config.api.inline_images:
            inline_images(body, self._photo_dir())

        event_count = len(batch.events)

        def _on_response(response: Optional[str], error: Optional[str]) -> None:
            if error is not None:
                log_event(
                    self.monitor_bus,
                    __name__,
                    MonitorEventType.BATCH_SEND_FAILED,
                    error,
                    {"events": event_count},
                    correlation_id=batch.session_id,
                )
                if on_complete is not None:
                    on_complete(False, None, error)
                return

            log_event(
                self.monitor_bus,
                __name__,
                MonitorEventType.BATCH_SENT,
                "Batch sent",
                {"events": event_count},
                correlation_id=batch.session_id,
            )
            self.router.route(response)
            if on_complete is not None:
                on_complete(True, response, None)

        self.pump.submit(self.config.api.events_path, body, _on_response)

    def send_plan_approval(
        self,
        plan: PlanBatch,
        approved_ids: Optional[Iterable[str]] = None,
        additional_info: str = "",
        on_complete: Optional[SendCompleteFn] = None,
    ) -> bool:
        """
        Approve some (default: all) items of `plan`.

        Returns False without sending when there is neither an approved
        item nor additional info.
        """
        request = build_plan_approval(plan, self._session_id, approved_ids, additional_info)
        if request is None:
            log.warning("Plan approval for goal %s has nothing to send", plan.goal_id)
            return False
        if self._transport is None:
            log.error("No transport configured; plan approval dropped")
            if on_complete is not None:
                on_complete(False, None, "no transport")
            return False

        self.router.remember_goal_label(request.goal_id, request.goal_label)
        for item in request.approved_plans:
            self.tracker.remove_pending_plan(item.id)
        request.game_state = self.tracker.fresh_snapshot()

        approved: List[str] = [item.id for item in request.approved_plans]
        log_event(
            self.monitor_bus,
            __name__,
            MonitorEventType.PLAN_APPROVAL_SENT,
            f"Approved {len(approved)} plan items",
            {"goal_id": request.goal_id, "approved": approved},
            correlation_id=self._session_id,
        )

        def _on_response(response: Optional[str], error: Optional[str]) -> None:
            if error is not None:
                log.error("Plan approval failed: %s", error)
                if on_complete is not None:
                    on_complete(False, None, error)
                return
            self.router.route(response)
            if on_complete is not None:
                on_complete(True, response, None)

        self.pump.submit(self.config.api.permission_path, request.to_wire(), _on_response)
        return True

    def route_reply(self, reply: str) -> RouteResult:
        return self.router.route(reply)
