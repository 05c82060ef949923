# src/world_state/__init__.py
"""
Game-state tracking: live mutable state plus immutable snapshots.
"""

from .schema import (
    Vec3,
    VoxelTypeDescriptor,
    DirectionReading,
    SixDirectionScan,
    NearbyVoxel,
    PendingPlanEntry,
    LastCommandEntry,
    GameStateSnapshot,
)
from .goal_labels import GoalLabelStore
from .tracker import GameStateConfig, GameStateTracker

__all__ = [
    "Vec3",
    "VoxelTypeDescriptor",
    "DirectionReading",
    "SixDirectionScan",
    "NearbyVoxel",
    "PendingPlanEntry",
    "LastCommandEntry",
    "GameStateSnapshot",
    "GoalLabelStore",
    "GameStateConfig",
    "GameStateTracker",
]
