# src/commands/dispatcher.py
"""
Command dispatcher.

Maps each command type to exactly one executor (fixed at construction)
and runs a command batch sequentially: the next command starts once
the previous one has reported completion, whatever the outcome.

Failure policy:
- missing id/type           -> failed, "Invalid command data"
- unknown command type      -> logged and skipped
- known type, no executor   -> failed, batch continues
- executor failure          -> failed (or interrupted), batch continues

Phases per command: pending -> executing -> completed | failed | interrupted.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional

from capture.bus import EventBus
from monitoring.events import EventType as MonitorEventType
from monitoring.logger import log_event
from routing.messages import CommandBatch, CommandData

from .base import INTERRUPTED, CommandExecutor

log = logging.getLogger(__name__)

KNOWN_COMMAND_TYPES = (
    "create_voxel_type",
    "update_voxel_type",
    "place_block",
    "destroy_block",
    "move_to",
    "continue_plan",
)

PHASE_PENDING = "pending"
PHASE_EXECUTING = "executing"
PHASE_COMPLETED = "completed"
PHASE_FAILED = "failed"
PHASE_INTERRUPTED = "interrupted"

CommandDoneFn = Callable[[CommandData, bool, Optional[str]], None]


class _BatchRun:
    """Sequential cursor over one command batch."""

    def __init__(self, dispatcher: "CommandDispatcher", batch: CommandBatch) -> None:
        self._dispatcher = dispatcher
        self._queue: Deque[CommandData] = deque(batch.commands)
        self._waiting = False
        self._advancing = False
        self._cancelled = False
        self.goal_id = batch.goal_id

    @property
    def finished(self) -> bool:
        return not self._queue and not self._waiting

    def advance(self) -> None:
        if self._advancing:
            return
        self._advancing = True
        try:
            while self._queue and not self._waiting and not self._cancelled:
                command = self._queue.popleft()
                self._waiting = True
                started = self._dispatcher.execute(command, self._on_done)
                if not started:
                    self._waiting = False
        finally:
            self._advancing = False

    def cancel(self) -> None:
        """Drop the commands not yet started; the one in flight is left alone."""
        self._cancelled = True
        self._queue.clear()

    def _on_done(self, command: CommandData, success: bool, reason: Optional[str]) -> None:
        self._waiting = False
        self.advance()
        if self.finished:
            self._dispatcher._run_finished(self)


class CommandDispatcher:
    def __init__(
        self,
        executors: Iterable[CommandExecutor],
        tracker: Any = None,
        observer: Any = None,
        monitor: Optional[EventBus] = None,
        known_types: Iterable[str] = KNOWN_COMMAND_TYPES,
    ) -> None:
        self._executors: Dict[str, CommandExecutor] = {}
        for executor in executors:
            if executor.command_type in self._executors:
                raise ValueError(f"Duplicate executor for command type {executor.command_type!r}")
            self._executors[executor.command_type] = executor

        self._known_types = frozenset(known_types) | frozenset(self._executors)
        self._tracker = tracker
        self._observer = observer
        self._monitor = monitor

        self._phases: Dict[str, str] = {}
        self._errors: Dict[str, str] = {}
        self._active: Dict[str, CommandExecutor] = {}
        self._runs: List[_BatchRun] = []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def executor_for(self, command_type: str) -> Optional[CommandExecutor]:
        return self._executors.get(command_type)

    @property
    def executors(self) -> Dict[str, CommandExecutor]:
        return dict(self._executors)

    def phase(self, command_id: str) -> Optional[str]:
        return self._phases.get(command_id)

    def error(self, command_id: str) -> Optional[str]:
        return self._errors.get(command_id)

    def is_active(self, command_id: str) -> bool:
        return command_id in self._active

    @property
    def running_batches(self) -> int:
        return len(self._runs)

    def set_observer(self, observer: Any) -> None:
        self._observer = observer

    # ------------------------------------------------------------------
    # Batch processing
    # ------------------------------------------------------------------

    def process_batch(self, batch: CommandBatch) -> None:
        if not batch.commands:
            log.warning("Command batch for goal %s is empty; nothing to execute", batch.goal_id)
            return
        for command in batch.commands:
            if command.id and command.id not in self._active:
                self._phases[command.id] = PHASE_PENDING
        run = _BatchRun(self, batch)
        self._runs.append(run)
        run.advance()
        if run.finished and run in self._runs:
            self._runs.remove(run)

    def _run_finished(self, run: _BatchRun) -> None:
        if run in self._runs:
            self._runs.remove(run)

    def execute(self, command: CommandData, on_done: Optional[CommandDoneFn] = None) -> bool:
        """
        Start one command.

        Returns True when an executor was started (on_done fires on its
        completion); False when the command was rejected or skipped
        before reaching an executor, in which case on_done is not called.
        """
        if not command.id or not command.type:
            log.warning("Invalid command data: %r", command)
            if command.id:
                self._set_phase(command.id, PHASE_FAILED, "Invalid command data")
            return False

        if command.type not in self._known_types:
            log.warning("Unknown command type %r (command %s); skipped", command.type, command.id)
            return False

        executor = self._executors.get(command.type)
        if executor is None:
            reason = f"No executor for command type: {command.type}"
            log.error(reason)
            self._set_phase(command.id, PHASE_FAILED, reason)
            return False

        self._active[command.id] = executor
        self._set_phase(command.id, PHASE_EXECUTING, None)

        def _complete(success: bool, reason: Optional[str]) -> None:
            self._active.pop(command.id, None)
            if success:
                phase = PHASE_COMPLETED
            elif reason == INTERRUPTED:
                phase = PHASE_INTERRUPTED
            else:
                phase = PHASE_FAILED
            self._set_phase(command.id, phase, reason)
            if on_done is not None:
                on_done(command, success, reason)

        executor.execute(command.id, command.params, _complete)
        return True

    # ------------------------------------------------------------------
    # Interruption / ticking
    # ------------------------------------------------------------------

    def interrupt(self, command_id: str) -> bool:
        executor = self._active.get(command_id)
        if executor is None:
            log.info("Interrupt ignored: command %s is not executing", command_id)
            return False
        if not executor.can_interrupt:
            log.warning("Command %s (%s) cannot be interrupted", command_id, executor.command_type)
            return False
        log.info("Interrupting command %s (%s)", command_id, executor.command_type)
        return executor.interrupt()

    def tick(self, dt: float) -> None:
        for executor in list(self._executors.values()):
            executor.tick(dt)

    def reset(self) -> None:
        for run in list(self._runs):
            run.cancel()
        for command_id in list(self._active):
            self.interrupt(command_id)
        self._phases.clear()
        self._errors.clear()
        self._runs.clear()

    # ------------------------------------------------------------------
    # Phase bookkeeping
    # ------------------------------------------------------------------

    def _set_phase(self, command_id: str, phase: str, reason: Optional[str]) -> None:
        self._phases[command_id] = phase
        if reason:
            self._errors[command_id] = reason
        else:
            self._errors.pop(command_id, None)

        if self._tracker is not None:
            self._tracker.update_last_command_phase(command_id, phase)
        if self._observer is not None:
            self._observer.command_status(command_id, phase, reason)
        if self._monitor is not None:
            log_event(
                self._monitor,
                __name__,
                MonitorEventType.COMMAND_PHASE,
                f"Command {command_id} {phase}",
                {"command_id": command_id, "phase": phase, "error": reason},
                correlation_id=command_id,
            )
