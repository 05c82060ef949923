# src/commands/geometry.py
"""
Actor-local geometry for block and movement commands.

Command offsets are given in the agent's local basis:
x = right, y = up, z = front. Target cells are resolved from the
rounded agent position plus the rounded local offset, then expanded
along a named direction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from world_state.schema import Cell, Vec3


@dataclass(frozen=True)
class ActorPose:
    position: Vec3
    right: Vec3 = field(default_factory=lambda: Vec3(1.0, 0.0, 0.0))
    up: Vec3 = field(default_factory=lambda: Vec3(0.0, 1.0, 0.0))
    forward: Vec3 = field(default_factory=lambda: Vec3(0.0, 0.0, 1.0))


def direction_vector(pose: ActorPose, name: Optional[str]) -> Optional[Vec3]:
    """Basis vector for front/back/right/left/up/down; None for anything else."""
    key = (name or "").strip().lower()
    if key == "front":
        return pose.forward
    if key == "back":
        return pose.forward.scaled(-1.0)
    if key == "right":
        return pose.right
    if key == "left":
        return pose.right.scaled(-1.0)
    if key == "up":
        return pose.up
    if key == "down":
        return pose.up.scaled(-1.0)
    return None


def local_offset(pose: ActorPose, offset: Vec3) -> Vec3:
    """Rotate a (right, up, front) offset into world axes."""
    return pose.right.scaled(offset.x) + pose.up.scaled(offset.y) + pose.forward.scaled(offset.z)


def _add_cell(a: Cell, b: Cell) -> Cell:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def target_cells(
    pose: ActorPose,
    offset: Vec3,
    direction: Optional[Vec3],
    count: int,
) -> List[Cell]:
    """
    Cells start + direction * i for i in [0, count).

    A None direction contributes nothing; callers reject count > 1
    without a usable direction before calling this.
    """
    start = _add_cell(pose.position.round_cell(), local_offset(pose, offset).round_cell())
    step = direction.round_cell() if direction is not None else (0, 0, 0)
    return [
        (start[0] + step[0] * i, start[1] + step[1] * i, start[2] + step[2] * i)
        for i in range(max(1, count))
    ]
