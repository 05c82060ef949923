# src/commands/__init__.py
"""
Command execution: executor contract, built-in executors and the
dispatcher that routes command batches to them.
"""

from .base import INTERRUPTED, CommandExecutor, CommandFailed, ExecutorContext
from .completion import Completion
from .dispatcher import KNOWN_COMMAND_TYPES, CommandDispatcher
from .geometry import ActorPose, direction_vector, local_offset, target_cells
from .params import ParamsError

__all__ = [
    "INTERRUPTED",
    "CommandExecutor",
    "CommandFailed",
    "ExecutorContext",
    "Completion",
    "KNOWN_COMMAND_TYPES",
    "CommandDispatcher",
    "ActorPose",
    "direction_vector",
    "local_offset",
    "target_cells",
    "ParamsError",
]
