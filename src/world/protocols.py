# World collaborator interfaces
# src/world/protocols.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol, Sequence

from world_state.schema import Cell, Vec3, VoxelTypeDescriptor

if TYPE_CHECKING:
    from commands.geometry import ActorPose
    from routing.messages import CommandBatch, PlanBatch

AIR = 0

CaptureCallback = Callable[[Optional[List[str]]], None]


@dataclass(frozen=True)
class RaycastHit:
    cell: Cell
    type_id: int


class WorldQuery(Protocol):
    """Read-only access to the voxel world, in grid-local coordinates."""

    def agent_position(self) -> Optional[Vec3]:
        """Agent position, or None when no agent is spawned."""
        ...

    def operator_position(self) -> Optional[Vec3]:
        """Human operator position, or None when unavailable."""
        ...

    def raycast(self, origin: Vec3, direction: Vec3, max_distance: float) -> Optional[RaycastHit]:
        """First occupied cell along the ray within max_distance, if any."""
        ...

    def voxel_at(self, cell: Cell) -> int:
        """Type id stored at `cell`; 0 is empty."""
        ...


class BlockEditor(Protocol):
    def place_voxel(self, cell: Cell, type_id: int) -> None:
        ...

    def remove_voxel(self, cell: Cell) -> None:
        ...

    def voxel_at(self, cell: Cell) -> int:
        ...


class AgentBody(Protocol):
    """The agent's pose and locomotion."""

    def agent_pose(self) -> Optional["ActorPose"]:
        ...

    def set_agent_position(self, position: Vec3) -> None:
        ...


class VoxelTypeRegistry(Protocol):
    def lookup(self, type_id: int) -> Optional[VoxelTypeDescriptor]:
        ...

    def list_all(self) -> List[VoxelTypeDescriptor]:
        ...

    def find_by_name(self, name: str) -> Optional[VoxelTypeDescriptor]:
        ...

    def create(
        self,
        name: str,
        description: str = "",
        face_textures: Optional[Sequence[str]] = None,
        initiator: Optional[str] = None,
    ) -> VoxelTypeDescriptor:
        ...

    def update(
        self,
        type_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        face_textures: Optional[Sequence[str]] = None,
    ) -> Optional[VoxelTypeDescriptor]:
        ...


class PhotoCapture(Protocol):
    def capture_four_directions(self, callback: CaptureCallback) -> None:
        """
        Render front/back/left/right photos and report their file names.

        The callback receives the list of names, or None/[] on failure.
        It may fire synchronously or on a later tick.
        """
        ...


class Observer(Protocol):
    """Operator-facing channel: chat text, plan approval, command status."""

    def show_text(self, text: str) -> None:
        ...

    def show_plan(self, plan: "PlanBatch") -> None:
        ...

    def show_commands(self, batch: "CommandBatch") -> None:
        ...

    def command_status(self, command_id: str, phase: str, error: Optional[str]) -> None:
        ...
