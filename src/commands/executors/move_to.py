# src/commands/executors/move_to.py
"""
move_to: tick-driven interpolation toward a target in the local basis.

The target is the agent position plus target_pos rotated into world
axes. Each tick moves at most `speed * dt` toward it; arriving within
`tolerance` snaps to the target and completes. Exceeding `timeout_s`
fails with "Movement timeout".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from world_state.schema import Vec3

from ..base import CommandExecutor, CommandFailed, ExecutorContext
from ..geometry import local_offset
from ..params import MoveToParams

log = logging.getLogger(__name__)


@dataclass
class MovementConfig:
    speed: float = 5.0
    tolerance: float = 0.1
    timeout_s: float = 30.0


@dataclass
class _Motion:
    target: Vec3
    elapsed: float = 0.0


class MoveToExecutor(CommandExecutor):
    command_type = "move_to"
    can_interrupt = True
    params_cls = MoveToParams

    def __init__(
        self,
        context: Optional[ExecutorContext] = None,
        config: Optional[MovementConfig] = None,
    ) -> None:
        super().__init__(context)
        self._config = config or MovementConfig()
        self._motion: Optional[_Motion] = None

    @property
    def target(self) -> Optional[Vec3]:
        return self._motion.target if self._motion is not None else None

    def _start(self, command_id: str, params: MoveToParams) -> None:
        body = self._ctx.body
        pose = body.agent_pose() if body is not None else None
        if pose is None:
            raise CommandFailed("Agent not available")

        target = pose.position + local_offset(pose, params.target_pos)
        self._motion = _Motion(target=target)
        log.info("move_to %s: heading to (%.2f, %.2f, %.2f)", command_id, target.x, target.y, target.z)

        if (target - pose.position).length() < self._config.tolerance:
            self._arrive()

    def tick(self, dt: float) -> None:
        motion = self._motion
        if motion is None:
            return
        body = self._ctx.body
        pose = body.agent_pose() if body is not None else None
        if pose is None:
            self._stop(False, "Agent not available")
            return

        delta = motion.target - pose.position
        distance = delta.length()
        if distance < self._config.tolerance:
            self._arrive()
            return

        motion.elapsed += dt
        if motion.elapsed >= self._config.timeout_s:
            log.warning("move_to %s timed out after %.1fs", self._command_id, motion.elapsed)
            self._stop(False, "Movement timeout")
            return

        step = min(distance, self._config.speed * dt)
        body.set_agent_position(pose.position + delta.scaled(step / distance))

        if distance - step < self._config.tolerance:
            self._arrive()

    def _arrive(self) -> None:
        motion = self._motion
        if motion is not None and self._ctx.body is not None:
            self._ctx.body.set_agent_position(motion.target)
        self._stop(True, None)

    def _stop(self, success: bool, reason: Optional[str]) -> None:
        self._motion = None
        self._finish(success, reason)

    def _on_interrupt(self) -> None:
        self._motion = None
