# src/commands/executors/voxel_types.py
"""create_voxel_type / update_voxel_type: delegate to the type registry."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from world_state.schema import FACE_COUNT

from ..base import CommandExecutor, CommandFailed
from ..params import CreateVoxelTypeParams, UpdateVoxelTypeParams, parse_int_id

log = logging.getLogger(__name__)


class _RegistryExecutor(CommandExecutor):
    can_interrupt = False

    def _registry(self) -> Any:
        if self._ctx.registry is None:
            raise CommandFailed("Voxel type registry not available")
        return self._ctx.registry


class CreateVoxelTypeExecutor(_RegistryExecutor):
    command_type = "create_voxel_type"
    params_cls = CreateVoxelTypeParams

    def _run(self, command_id: str, params: CreateVoxelTypeParams) -> None:
        fields = params.voxel_type
        created = self._registry().create(
            name=fields.name,
            description=fields.description,
            face_textures=fields.face_textures,
            initiator="agent",
        )
        log.info("create_voxel_type %s: created %s (%s)", command_id, created.id, created.name)


def merge_faces(current: List[str], supplied: List[str]) -> Optional[List[str]]:
    """Overlay non-empty supplied faces onto current; None when nothing changes."""
    if not supplied or not any(supplied):
        return None
    merged = list(current) + [""] * (FACE_COUNT - len(current))
    for i, face in enumerate(supplied[:FACE_COUNT]):
        if face:
            merged[i] = face
    return merged[:FACE_COUNT]


class UpdateVoxelTypeExecutor(_RegistryExecutor):
    command_type = "update_voxel_type"
    params_cls = UpdateVoxelTypeParams

    def _run(self, command_id: str, params: UpdateVoxelTypeParams) -> None:
        type_id = parse_int_id(params.voxel_id)
        if type_id is None:
            raise CommandFailed(f"Invalid voxel_id: {params.voxel_id}")

        registry = self._registry()
        current = registry.lookup(type_id)
        if current is None:
            raise CommandFailed(f"Voxel type not found: {params.voxel_id}")

        fields = params.new_voxel_type
        updated = registry.update(
            type_id,
            name=fields.name or None,
            description=fields.description or None,
            face_textures=merge_faces(current.face_textures, fields.face_textures),
        )
        if updated is None:
            raise CommandFailed(f"Voxel type not found: {params.voxel_id}")
        log.info("update_voxel_type %s: updated %s", command_id, type_id)
