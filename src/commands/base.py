# src/commands/base.py
"""
Command executor contract.

One executor instance per command type. Every execute() call reports
through its completion exactly once, either synchronously or on a
later tick. While an execution is in flight, further execute() calls
are rejected as busy rather than queued.

Subclasses provide:
- command_type / can_interrupt class attributes
- params_cls with a from_mapping() constructor
- _run(command_id, params) for synchronous work (raise CommandFailed),
  or _start(command_id, params) for work that completes later via
  self._finish(...)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .completion import Completion, CompletionFn
from .params import ParamsError, decode_params

log = logging.getLogger(__name__)

INTERRUPTED = "interrupted"


class CommandFailed(Exception):
    """Domain failure inside an executor; the message is the reported reason."""

    @property
    def reason(self) -> str:
        return str(self)


@dataclass
class ExecutorContext:
    """World-side collaborators shared by the built-in executors."""

    world: Any = None        # BlockEditor
    body: Any = None         # AgentBody
    registry: Any = None     # VoxelTypeRegistry
    bus: Any = None          # capture.bus.EventBus
    capture: Any = None      # PhotoCapture
    observer: Any = None     # Observer


class CommandExecutor:
    command_type: str = ""
    can_interrupt: bool = False
    params_cls: Any = None

    def __init__(self, context: Optional[ExecutorContext] = None) -> None:
        self._ctx = context or ExecutorContext()
        self._busy = False
        self._completion: Optional[Completion] = None
        self._command_id: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def current_command_id(self) -> Optional[str]:
        return self._command_id

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def execute(self, command_id: str, params: Any, on_complete: Optional[CompletionFn]) -> Completion:
        done = Completion(on_complete, f"{self.command_type}:{command_id}")

        if self._busy:
            log.warning("%s rejected %s: busy with %s", self.command_type, command_id, self._command_id)
            done(False, f"{self.command_type} is already executing")
            return done

        try:
            parsed = self.parse(params)
        except ParamsError as exc:
            done(False, f"Invalid {self.params_cls.__name__}: {exc}")
            return done
        except Exception as exc:
            log.exception("%s could not decode params for %s", self.command_type, command_id)
            done(False, f"Invalid {self.params_cls.__name__}: {exc}")
            return done

        self._busy = True
        self._completion = done
        self._command_id = command_id
        try:
            self._start(command_id, parsed)
        except CommandFailed as exc:
            self._finish(False, exc.reason)
        except Exception as exc:
            log.exception("%s failed unexpectedly for %s", self.command_type, command_id)
            self._finish(False, str(exc) or type(exc).__name__)
        return done

    def interrupt(self) -> bool:
        """
        Cooperative cancellation.

        An in-flight deferred execution reports (False, "interrupted")
        through its stored completion. Returns False when this executor
        cannot be interrupted.
        """
        if not self.can_interrupt:
            return False
        self._on_interrupt()
        if self._completion is not None:
            self._finish(False, INTERRUPTED)
        else:
            self._busy = False
        return True

    def tick(self, dt: float) -> None:
        """Advance deferred work; no-op for synchronous executors."""
        return

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    def parse(self, params: Any) -> Any:
        return self.params_cls.from_mapping(decode_params(params))

    def _start(self, command_id: str, params: Any) -> None:
        self._run(command_id, params)
        self._finish(True, None)

    def _run(self, command_id: str, params: Any) -> None:
        raise NotImplementedError

    def _on_interrupt(self) -> None:
        return

    def _finish(self, success: bool, reason: Optional[str]) -> None:
        done = self._completion
        self._busy = False
        self._completion = None
        self._command_id = None
        if done is not None:
            done(success, reason)
