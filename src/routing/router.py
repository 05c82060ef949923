# src/routing/router.py
"""
Response router.

Classifies a reply from the planning service and hands it on:

1. Plan Batch (checked first): record pending plans and the goal
   label, then show the plan for approval. An empty plan only surfaces
   its talk_to_player text.
2. Command Batch: resolve missing goal labels, record each command in
   the last-command history, then forward to the dispatcher.
3. Anything else is plain text for the observer.

The router is the only writer of the GoalLabelStore.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from capture.bus import EventBus
from monitoring.events import EventType as MonitorEventType
from monitoring.logger import log_event
from world_state.goal_labels import GoalLabelStore
from world_state.schema import LastCommandEntry, PendingPlanEntry

from .messages import (
    CommandBatch,
    PlanBatch,
    command_batch_from_mapping,
    load_object,
    plan_batch_from_mapping,
)

log = logging.getLogger(__name__)

ROUTE_PLAN = "plan"
ROUTE_EMPTY_PLAN = "empty_plan"
ROUTE_COMMANDS = "commands"
ROUTE_TEXT = "text"


@dataclass
class RouteResult:
    kind: str
    plan: Optional[PlanBatch] = None
    commands: Optional[CommandBatch] = None
    text: Optional[str] = None


class ResponseRouter:
    def __init__(
        self,
        tracker: Any,
        goal_labels: GoalLabelStore,
        dispatcher: Any = None,
        observer: Any = None,
        monitor: Optional[EventBus] = None,
    ) -> None:
        self._tracker = tracker
        self._goal_labels = goal_labels
        self._dispatcher = dispatcher
        self._observer = observer
        self._monitor = monitor

    def set_dispatcher(self, dispatcher: Any) -> None:
        self._dispatcher = dispatcher

    def set_observer(self, observer: Any) -> None:
        self._observer = observer

    # ------------------------------------------------------------------
    # Goal labels
    # ------------------------------------------------------------------

    def remember_goal_label(self, goal_id: str, goal_label: str) -> None:
        if goal_id and goal_label:
            self._goal_labels.store(goal_id, goal_label)

    def resolve_goal_label(self, goal_id: str) -> str:
        return self._goal_labels.get(goal_id) or ""

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def route(self, reply: Optional[str]) -> RouteResult:
        data = load_object(reply)
        if data is not None:
            plan = plan_batch_from_mapping(data)
            if plan is not None:
                result = self._handle_plan(plan)
                self._emit(result, plan.goal_id)
                return result

            commands = command_batch_from_mapping(data)
            if commands is not None:
                result = self._handle_commands(commands)
                self._emit(result, commands.goal_id)
                return result

        result = self._handle_text(reply or "")
        self._emit(result, None)
        return result

    def _handle_plan(self, plan: PlanBatch) -> RouteResult:
        if plan.is_empty:
            log.info("Plan for goal %s is empty; nothing proposed", plan.goal_id)
            if plan.talk_to_player:
                self._show_text(plan.talk_to_player)
            return RouteResult(kind=ROUTE_EMPTY_PLAN, plan=plan, text=plan.talk_to_player)

        for item in plan.plan:
            self._tracker.add_pending_plan(
                PendingPlanEntry(
                    id=item.id,
                    goal_id=plan.goal_id,
                    goal_label=plan.goal_label,
                    action_type=item.action_type,
                    description=item.description,
                    depends_on=list(item.depends_on or []),
                )
            )
        self.remember_goal_label(plan.goal_id, plan.goal_label)

        if self._observer is not None:
            self._observer.show_plan(plan)
        return RouteResult(kind=ROUTE_PLAN, plan=plan, text=plan.talk_to_player)

    def _handle_commands(self, batch: CommandBatch) -> RouteResult:
        for command in batch.commands:
            goal_id = command.goal_id or batch.goal_id
            goal_label = (
                command.goal_label
                or self.resolve_goal_label(goal_id)
                or batch.goal_label
            )
            command.goal_id = goal_id
            command.goal_label = goal_label
            self._tracker.add_last_command(
                LastCommandEntry(
                    id=command.id,
                    goal_id=goal_id,
                    goal_label=goal_label,
                    type=command.type,
                    params=command.params,
                    phase=(command.phase or "pending").lower(),
                )
            )

        if self._observer is not None:
            self._observer.show_commands(batch)

        if self._dispatcher is None:
            log.warning("No command dispatcher; %d commands not executed", len(batch.commands))
        else:
            self._dispatcher.process_batch(batch)
        return RouteResult(kind=ROUTE_COMMANDS, commands=batch)

    def _handle_text(self, reply: str) -> RouteResult:
        if reply.strip():
            self._show_text(reply)
        return RouteResult(kind=ROUTE_TEXT, text=reply)

    def _show_text(self, text: str) -> None:
        if self._observer is not None:
            self._observer.show_text(text)
        else:
            log.info("Reply: %s", text)

    def _emit(self, result: RouteResult, goal_id: Optional[str]) -> None:
        if self._monitor is not None:
            log_event(
                self._monitor,
                __name__,
                MonitorEventType.REPLY_ROUTED,
                f"Reply routed as {result.kind}",
                {"kind": result.kind, "goal_id": goal_id},
            )
