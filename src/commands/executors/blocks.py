# src/commands/executors/blocks.py
"""
place_block / destroy_block.

Both resolve a run of cells from an offset in the agent's local basis
(x=right, y=up, z=front), expanded along a named direction for
`count` cells, then edit the world cell by cell.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from world.protocols import AIR
from world_state.schema import Cell

from ..base import CommandExecutor, CommandFailed
from ..geometry import ActorPose, direction_vector, target_cells
from ..params import DestroyBlockParams, PlaceBlockParams, parse_int_id

log = logging.getLogger(__name__)


def _resolve_cells(pose: ActorPose, params: Any) -> List[Cell]:
    direction = direction_vector(pose, params.expand_direction)
    if params.count > 1 and direction is None:
        raise CommandFailed(f"Invalid expand_direction: {params.expand_direction}")
    return target_cells(pose, params.start_offset, direction, params.count)


class _BlockExecutor(CommandExecutor):
    can_interrupt = True

    def _pose(self) -> ActorPose:
        body = self._ctx.body
        pose = body.agent_pose() if body is not None else None
        if pose is None:
            raise CommandFailed("Agent not available")
        return pose

    def _world(self) -> Any:
        if self._ctx.world is None:
            raise CommandFailed("World not available")
        return self._ctx.world


class PlaceBlockExecutor(_BlockExecutor):
    command_type = "place_block"
    params_cls = PlaceBlockParams

    def resolve_type_id(self, params: PlaceBlockParams) -> Optional[int]:
        """voxel_id wins when it names a registered type; otherwise match by name."""
        registry = self._ctx.registry
        if registry is None:
            return None
        type_id = parse_int_id(params.voxel_id) if params.voxel_id else None
        if type_id is not None and type_id != AIR and registry.lookup(type_id) is not None:
            return type_id
        if params.voxel_name:
            descriptor = registry.find_by_name(params.voxel_name)
            if descriptor is not None:
                return parse_int_id(descriptor.id)
        return None

    def _run(self, command_id: str, params: PlaceBlockParams) -> None:
        world = self._world()
        cells = _resolve_cells(self._pose(), params)
        type_id = self.resolve_type_id(params)
        if not type_id:
            raise CommandFailed(
                f"Voxel type not found: {params.voxel_name} (id: {params.voxel_id})"
            )
        for cell in cells:
            world.place_voxel(cell, type_id)
        log.info("place_block %s: placed type %s at %d cells", command_id, type_id, len(cells))


class DestroyBlockExecutor(_BlockExecutor):
    command_type = "destroy_block"
    params_cls = DestroyBlockParams

    def matches(self, params: DestroyBlockParams, type_id: int) -> bool:
        if not params.filtered:
            return True
        if str(type_id) in params.voxel_ids:
            return True

        registry = self._ctx.registry
        if registry is None or not params.voxel_names:
            return False
        wanted = {n.lower() for n in params.voxel_names}
        descriptor = registry.lookup(type_id)
        if descriptor is not None and descriptor.name.lower() in wanted:
            return True
        display = getattr(registry, "display_name", None)
        return bool(display) and (display(type_id) or "").lower() in wanted

    def _run(self, command_id: str, params: DestroyBlockParams) -> None:
        world = self._world()
        destroyed = 0
        for cell in _resolve_cells(self._pose(), params):
            type_id = world.voxel_at(cell)
            if type_id == AIR:
                continue
            if not self.matches(params, type_id):
                continue
            world.remove_voxel(cell)
            destroyed += 1
        log.info("destroy_block %s: removed %d cells", command_id, destroyed)
