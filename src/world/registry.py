# src/world/registry.py
"""
In-memory voxel type registry.

Type id 0 is reserved for air. When constructed with an event bus,
creations, updates and deletions are published as
VoxelTypeCreatedPayload / VoxelTypeUpdatedPayload.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional, Sequence

from capture.payloads import VoxelTypeCreatedPayload, VoxelTypeUpdatedPayload
from world_state.schema import VoxelTypeDescriptor, normalize_faces

log = logging.getLogger(__name__)


class InMemoryVoxelTypeRegistry:
    def __init__(self, bus: Any = None) -> None:
        self._types: Dict[int, VoxelTypeDescriptor] = {}
        self._display_names: Dict[int, str] = {}
        self._next_id = 1
        self._bus = bus

    def set_bus(self, bus: Any) -> None:
        self._bus = bus

    def _publish(self, payload: Any) -> None:
        if self._bus is not None:
            self._bus.publish(payload)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def lookup(self, type_id: int) -> Optional[VoxelTypeDescriptor]:
        descriptor = self._types.get(int(type_id))
        return copy.deepcopy(descriptor) if descriptor is not None else None

    def list_all(self) -> List[VoxelTypeDescriptor]:
        return [copy.deepcopy(self._types[k]) for k in sorted(self._types)]

    def find_by_name(self, name: str) -> Optional[VoxelTypeDescriptor]:
        """Match on type name first, then on display name; case-insensitive."""
        if not name:
            return None
        needle = name.strip().lower()
        for type_id in sorted(self._types):
            if self._types[type_id].name.lower() == needle:
                return copy.deepcopy(self._types[type_id])
        for type_id in sorted(self._display_names):
            if self._display_names[type_id].lower() == needle:
                return copy.deepcopy(self._types[type_id])
        return None

    def display_name(self, type_id: int) -> str:
        return self._display_names.get(int(type_id), "")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def register(
        self,
        type_id: int,
        name: str,
        description: str = "",
        face_textures: Optional[Sequence[str]] = None,
        display_name: str = "",
    ) -> VoxelTypeDescriptor:
        """Install a type under a fixed id without publishing (world load)."""
        descriptor = VoxelTypeDescriptor(
            id=str(type_id),
            name=name,
            description=description,
            face_textures=list(face_textures or []),
        )
        self._types[int(type_id)] = descriptor
        if display_name:
            self._display_names[int(type_id)] = display_name
        self._next_id = max(self._next_id, int(type_id) + 1)
        return copy.deepcopy(descriptor)

    def create(
        self,
        name: str,
        description: str = "",
        face_textures: Optional[Sequence[str]] = None,
        initiator: Optional[str] = None,
    ) -> VoxelTypeDescriptor:
        type_id = self._next_id
        self._next_id += 1
        descriptor = self.register(type_id, name, description, face_textures)
        log.info("Created voxel type %s (%s)", type_id, name)
        self._publish(VoxelTypeCreatedPayload(voxel_type=copy.deepcopy(descriptor), initiator=initiator))
        return descriptor

    def update(
        self,
        type_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        face_textures: Optional[Sequence[str]] = None,
    ) -> Optional[VoxelTypeDescriptor]:
        """Apply only the fields that are not None; returns the new descriptor."""
        current = self._types.get(int(type_id))
        if current is None:
            return None
        old = copy.deepcopy(current)
        if name is not None:
            current.name = name
        if description is not None:
            current.description = description
        if face_textures is not None:
            current.face_textures = normalize_faces(list(face_textures))
        self._publish(
            VoxelTypeUpdatedPayload(
                voxel_id=current.id,
                old_voxel_type=old,
                new_voxel_type=copy.deepcopy(current),
            )
        )
        return copy.deepcopy(current)

    def delete(self, type_id: int) -> bool:
        current = self._types.pop(int(type_id), None)
        if current is None:
            return False
        self._display_names.pop(int(type_id), None)
        self._publish(VoxelTypeUpdatedPayload(voxel_id=current.id, old_voxel_type=current, new_voxel_type=None))
        return True
