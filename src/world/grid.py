# src/world/grid.py
"""
In-memory voxel world.

Sparse dict of cell -> type id plus the agent's pose and the
operator's position. Implements WorldQuery, BlockEditor and AgentBody
so the bridge can run headless (demo runtime, tests).
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Optional, Tuple

from commands.geometry import ActorPose
from world_state.schema import Cell, Vec3

from .protocols import AIR, RaycastHit


class VoxelGrid:
    def __init__(
        self,
        agent_position: Optional[Vec3] = None,
        operator_position: Optional[Vec3] = None,
    ) -> None:
        self._cells: Dict[Cell, int] = {}
        self._agent_position = agent_position
        self._operator_position = operator_position
        self._right = Vec3(1.0, 0.0, 0.0)
        self._up = Vec3(0.0, 1.0, 0.0)
        self._forward = Vec3(0.0, 0.0, 1.0)

    # ------------------------------------------------------------------
    # Setup helpers
    # ------------------------------------------------------------------

    def fill(self, cells: Iterable[Cell], type_id: int) -> None:
        for cell in cells:
            self.place_voxel(cell, type_id)

    def fill_floor(self, half_extent: int, type_id: int = 1, y: int = 0) -> None:
        for x in range(-half_extent, half_extent + 1):
            for z in range(-half_extent, half_extent + 1):
                self._cells[(x, y, z)] = type_id

    def set_basis(self, right: Vec3, up: Vec3, forward: Vec3) -> None:
        self._right, self._up, self._forward = right, up, forward

    def set_operator_position(self, position: Optional[Vec3]) -> None:
        self._operator_position = position

    @property
    def occupied(self) -> Dict[Cell, int]:
        return dict(self._cells)

    # ------------------------------------------------------------------
    # WorldQuery
    # ------------------------------------------------------------------

    def agent_position(self) -> Optional[Vec3]:
        return self._agent_position

    def operator_position(self) -> Optional[Vec3]:
        return self._operator_position

    def voxel_at(self, cell: Cell) -> int:
        return self._cells.get(tuple(cell), AIR)

    def raycast(self, origin: Vec3, direction: Vec3, max_distance: float) -> Optional[RaycastHit]:
        """
        Voxel traversal (Amanatides & Woo) from `origin` along `direction`.

        The cell containing the origin is tested first.
        """
        length = direction.length()
        if length == 0.0:
            return None
        d = (direction.x / length, direction.y / length, direction.z / length)
        o = (origin.x, origin.y, origin.z)
        cell = [math.floor(o[0]), math.floor(o[1]), math.floor(o[2])]

        step = [0, 0, 0]
        t_max = [math.inf, math.inf, math.inf]
        t_delta = [math.inf, math.inf, math.inf]
        for axis in range(3):
            if d[axis] > 0:
                step[axis] = 1
                t_max[axis] = (cell[axis] + 1 - o[axis]) / d[axis]
                t_delta[axis] = 1.0 / d[axis]
            elif d[axis] < 0:
                step[axis] = -1
                t_max[axis] = (o[axis] - cell[axis]) / -d[axis]
                t_delta[axis] = -1.0 / d[axis]

        t = 0.0
        while t <= max_distance:
            key: Tuple[int, int, int] = (cell[0], cell[1], cell[2])
            type_id = self._cells.get(key, AIR)
            if type_id != AIR:
                return RaycastHit(cell=key, type_id=type_id)
            axis = t_max.index(min(t_max))
            t = t_max[axis]
            cell[axis] += step[axis]
            t_max[axis] += t_delta[axis]
        return None

    # ------------------------------------------------------------------
    # BlockEditor
    # ------------------------------------------------------------------

    def place_voxel(self, cell: Cell, type_id: int) -> None:
        if type_id == AIR:
            self.remove_voxel(cell)
            return
        self._cells[tuple(cell)] = int(type_id)

    def remove_voxel(self, cell: Cell) -> None:
        self._cells.pop(tuple(cell), None)

    # ------------------------------------------------------------------
    # AgentBody
    # ------------------------------------------------------------------

    def agent_pose(self) -> Optional[ActorPose]:
        if self._agent_position is None:
            return None
        return ActorPose(
            position=self._agent_position,
            right=self._right,
            up=self._up,
            forward=self._forward,
        )

    def set_agent_position(self, position: Vec3) -> None:
        self._agent_position = position
