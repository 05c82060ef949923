# src/commands/executors/__init__.py
"""Built-in command executors."""

from typing import List, Optional

from ..base import CommandExecutor, ExecutorContext
from .blocks import DestroyBlockExecutor, PlaceBlockExecutor
from .continue_plan import ContinuePlanExecutor
from .move_to import MovementConfig, MoveToExecutor
from .voxel_types import CreateVoxelTypeExecutor, UpdateVoxelTypeExecutor


def default_executors(
    context: ExecutorContext,
    movement: Optional[MovementConfig] = None,
) -> List[CommandExecutor]:
    return [
        CreateVoxelTypeExecutor(context),
        UpdateVoxelTypeExecutor(context),
        PlaceBlockExecutor(context),
        DestroyBlockExecutor(context),
        MoveToExecutor(context, movement),
        ContinuePlanExecutor(context),
    ]


__all__ = [
    "PlaceBlockExecutor",
    "DestroyBlockExecutor",
    "MoveToExecutor",
    "MovementConfig",
    "CreateVoxelTypeExecutor",
    "UpdateVoxelTypeExecutor",
    "ContinuePlanExecutor",
    "default_executors",
]
