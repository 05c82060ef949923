# src/world_state/scan.py
"""
Local surroundings probes used by the game-state tracker.

- six_direction_scan: nearest occupied cell along each axis
- nearby_voxels: occupied cells in a small cube around the agent

The planner's spatial reasoning depends on these exact rules:
the ray starts one full cell beyond the agent's own cell, distance is
taxicab and at least 1, and a miss reads ("empty", "0", max_distance).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from .schema import (
    Cell,
    DirectionReading,
    NearbyVoxel,
    SixDirectionScan,
    Vec3,
)

log = logging.getLogger(__name__)

AXES: Tuple[Tuple[str, Cell], ...] = (
    ("up", (0, 1, 0)),
    ("down", (0, -1, 0)),
    ("front", (0, 0, 1)),
    ("back", (0, 0, -1)),
    ("left", (-1, 0, 0)),
    ("right", (1, 0, 0)),
)

EMPTY_NAME = "empty"
EMPTY_ID = "0"
BASE_NAME = "base_0"
BASE_ID = "1"
UNKNOWN_NAME = "unknown"


def taxicab(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) + abs(a[2] - b[2])


def voxel_name(registry: Any, type_id: int) -> str:
    if registry is None:
        return UNKNOWN_NAME
    descriptor = registry.lookup(type_id)
    if descriptor is None or not descriptor.name:
        return UNKNOWN_NAME
    return descriptor.name


def _read_direction(
    world: Any,
    registry: Any,
    agent_cell: Cell,
    name: str,
    axis: Cell,
    max_distance: int,
    base_layer_y: int,
) -> DirectionReading:
    direction = Vec3.from_cell(axis)
    center = Vec3(agent_cell[0] + 0.5, agent_cell[1] + 0.5, agent_cell[2] + 0.5)
    origin = center + direction

    hit = world.raycast(origin, direction, float(max_distance))
    if hit is None:
        return DirectionReading(EMPTY_NAME, EMPTY_ID, max_distance)

    distance = max(1, taxicab(hit.cell, agent_cell))
    if hit.cell[1] == base_layer_y:
        return DirectionReading(BASE_NAME, BASE_ID, distance)
    return DirectionReading(voxel_name(registry, hit.type_id), str(hit.type_id), distance)


def six_direction_scan(
    world: Any,
    registry: Any,
    agent_cell: Cell,
    max_distance: int = 10,
    base_layer_y: int = 0,
) -> SixDirectionScan:
    readings: Dict[str, DirectionReading] = {}
    for name, axis in AXES:
        readings[name] = _read_direction(
            world, registry, agent_cell, name, axis, max_distance, base_layer_y
        )
    return SixDirectionScan(**readings)


def nearby_voxels(
    world: Any,
    registry: Any,
    agent_cell: Cell,
    radius: int = 2,
    base_layer_y: int = 0,
) -> List[NearbyVoxel]:
    """Occupied cells within a cube of `radius` around the agent, base layer excluded."""
    out: List[NearbyVoxel] = []
    ax, ay, az = agent_cell
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            for dz in range(-radius, radius + 1):
                cell = (ax + dx, ay + dy, az + dz)
                if cell[1] == base_layer_y:
                    continue
                type_id = world.voxel_at(cell)
                if not type_id:
                    continue
                out.append(
                    NearbyVoxel(
                        position=Vec3(float(dx), float(dy), float(dz)),
                        voxel_name=voxel_name(registry, type_id),
                        voxel_id=str(type_id),
                    )
                )
    return out


def relative_cell(target: Optional[Vec3], origin_cell: Cell) -> Optional[Vec3]:
    if target is None:
        return None
    cell = target.floor_cell()
    return Vec3.from_cell(
        (cell[0] - origin_cell[0], cell[1] - origin_cell[1], cell[2] - origin_cell[2])
    )
