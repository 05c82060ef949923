# src/world_state/tracker.py
"""
Live game-state tracker.

Owns the single mutable record of what the agent currently knows and
renders it into independent GameStateSnapshot copies on demand.

- Setters are independent; no cross-field invariants.
- perform_auto_scan() recomputes position and surroundings from the
  world-query collaborator and leaves state untouched if it is missing
  or fails.
- snapshot() deep-copies every field, so later mutation never reaches
  a previously captured snapshot.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from .scan import nearby_voxels, relative_cell, six_direction_scan
from .schema import (
    GameStateSnapshot,
    LastCommandEntry,
    NearbyVoxel,
    PendingPlanEntry,
    SixDirectionScan,
    Vec3,
    VoxelTypeDescriptor,
)

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@dataclass
class GameStateConfig:
    max_pending_plans: int = 3
    max_last_commands: int = 3

    # Six-direction probe reach, also the distance reported on a miss
    six_direction_max_distance: int = 10

    # Half-width of the nearby-voxel cube
    nearby_radius: int = 2

    # Floor layer; never reported as a nearby voxel
    base_layer_y: int = 0


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------


class GameStateTracker:
    def __init__(
        self,
        world: Any = None,
        registry: Any = None,
        config: Optional[GameStateConfig] = None,
        timestamp_fn: Optional[Callable[[], str]] = None,
    ) -> None:
        self._world = world
        self._registry = registry
        self._config = config or GameStateConfig()
        self._timestamp_fn = timestamp_fn or (lambda: "")

        self._agent_position = Vec3()
        self._operator_relative_position = Vec3()
        self._six_direction = SixDirectionScan()
        self._nearby: List[NearbyVoxel] = []
        self._pending_plans: List[PendingPlanEntry] = []
        self._last_commands: List[LastCommandEntry] = []

    @property
    def config(self) -> GameStateConfig:
        return self._config

    def set_world(self, world: Any) -> None:
        self._world = world

    def set_registry(self, registry: Any) -> None:
        self._registry = registry

    # ------------------------------------------------------------------
    # Field setters
    # ------------------------------------------------------------------

    def update_agent_position(self, position: Vec3) -> None:
        self._agent_position = position

    def update_operator_relative_position(self, position: Vec3) -> None:
        self._operator_relative_position = position

    def update_six_direction_scan(self, scan: SixDirectionScan) -> None:
        self._six_direction = copy.deepcopy(scan)

    def update_nearby_voxels(self, voxels: List[NearbyVoxel]) -> None:
        self._nearby = copy.deepcopy(list(voxels))

    # ------------------------------------------------------------------
    # Auto scan
    # ------------------------------------------------------------------

    def perform_auto_scan(self) -> bool:
        """
        Refresh position, six-direction and nearby data from the world.

        Returns False (state unchanged) when the world collaborator, the
        agent or the operator is unavailable, or the query fails.
        """
        world = self._world
        if world is None:
            log.warning("Auto scan skipped: no world query available")
            return False

        cfg = self._config
        try:
            agent = world.agent_position()
            operator = world.operator_position()
            if agent is None or operator is None:
                log.warning("Auto scan skipped: agent or operator missing")
                return False

            agent_cell = agent.floor_cell()
            rel = relative_cell(operator, agent_cell)
            scan = six_direction_scan(
                world,
                self._registry,
                agent_cell,
                max_distance=cfg.six_direction_max_distance,
                base_layer_y=cfg.base_layer_y,
            )
            nearby = nearby_voxels(
                world,
                self._registry,
                agent_cell,
                radius=cfg.nearby_radius,
                base_layer_y=cfg.base_layer_y,
            )
        except Exception:
            log.exception("Auto scan failed; keeping previous state")
            return False

        self._agent_position = Vec3.from_cell(agent_cell)
        self._operator_relative_position = rel or Vec3()
        self._six_direction = scan
        self._nearby = nearby
        return True

    # ------------------------------------------------------------------
    # Pending plans
    # ------------------------------------------------------------------

    def add_pending_plan(self, entry: PendingPlanEntry) -> None:
        self._pending_plans.append(entry)
        while len(self._pending_plans) > self._config.max_pending_plans:
            self._pending_plans.pop(0)

    def remove_pending_plan(self, plan_id: str) -> bool:
        for i, entry in enumerate(self._pending_plans):
            if entry.id == plan_id:
                del self._pending_plans[i]
                return True
        return False

    def clear_pending_plans(self) -> None:
        self._pending_plans.clear()

    @property
    def pending_plans(self) -> List[PendingPlanEntry]:
        return copy.deepcopy(self._pending_plans)

    # ------------------------------------------------------------------
    # Last commands
    # ------------------------------------------------------------------

    def add_last_command(self, entry: LastCommandEntry) -> None:
        self._last_commands.append(entry)
        while len(self._last_commands) > self._config.max_last_commands:
            self._last_commands.pop(0)

    def remove_last_command(self, command_id: str) -> bool:
        for i, entry in enumerate(self._last_commands):
            if entry.id == command_id:
                del self._last_commands[i]
                return True
        return False

    def clear_last_commands(self) -> None:
        self._last_commands.clear()

    def update_last_command_phase(self, command_id: str, phase: str) -> bool:
        for entry in self._last_commands:
            if entry.id == command_id:
                entry.phase = (phase or "").lower()
                return True
        return False

    @property
    def last_commands(self) -> List[LastCommandEntry]:
        return copy.deepcopy(self._last_commands)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def _catalog(self) -> List[VoxelTypeDescriptor]:
        if self._registry is None:
            return []
        try:
            return copy.deepcopy(list(self._registry.list_all()))
        except Exception:
            log.exception("Voxel type catalog unavailable")
            return []

    def snapshot(self) -> GameStateSnapshot:
        """Independent deep copy of every tracked field plus the type catalog."""
        return GameStateSnapshot(
            timestamp=self._timestamp_fn(),
            agent_position=self._agent_position,
            operator_relative_position=self._operator_relative_position,
            six_direction_scan=copy.deepcopy(self._six_direction),
            nearby_voxels=copy.deepcopy(self._nearby),
            pending_plans=copy.deepcopy(self._pending_plans),
            last_commands=copy.deepcopy(self._last_commands),
            voxel_type_catalog=self._catalog(),
        )

    def fresh_snapshot(self) -> GameStateSnapshot:
        self.perform_auto_scan()
        return self.snapshot()

    def reset(self) -> None:
        """Forget histories and scan results (session reset)."""
        self._agent_position = Vec3()
        self._operator_relative_position = Vec3()
        self._six_direction = SixDirectionScan()
        self._nearby = []
        self._pending_plans.clear()
        self._last_commands.clear()
