# src/capture/build_recorder.py
"""
Groups operator block edits into player_build events.

Edits accumulate until either the operator has been idle for
`collect_interval_s`, or the batch controller asks for a flush via
FlushBuildRequest. Either way the pending list is published as one
BuildPayload and then cleared.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from world_state.schema import Vec3

from .bus import EventBus
from .payloads import BuildPayload, VoxelInstance
from .signals import FlushBuildRequest

log = logging.getLogger(__name__)

REMOVED_ID = "0"
REMOVED_NAME = "air"


@dataclass
class BuildRecorderConfig:
    collect_interval_s: float = 2.0


class BuildRecorder:
    def __init__(
        self,
        bus: EventBus,
        config: Optional[BuildRecorderConfig] = None,
        time_fn: Callable[[], float] = time.monotonic,
    ) -> None:
        self._bus = bus
        self._config = config or BuildRecorderConfig()
        self._time_fn = time_fn
        self._pending: List[VoxelInstance] = []
        self._last_edit_at: Optional[float] = None
        self._attached = False

    def attach(self) -> None:
        if not self._attached:
            self._bus.subscribe(FlushBuildRequest, self._on_flush_request)
            self._attached = True

    def detach(self) -> None:
        self._bus.unsubscribe(FlushBuildRequest, self._on_flush_request)
        self._attached = False

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_place(self, position: Vec3, voxel_id: str, voxel_name: str) -> None:
        self._record(VoxelInstance(voxel_id=str(voxel_id), voxel_name=voxel_name, position=position))

    def record_remove(self, position: Vec3) -> None:
        self._record(VoxelInstance(voxel_id=REMOVED_ID, voxel_name=REMOVED_NAME, position=position))

    def _record(self, instance: VoxelInstance) -> None:
        self._pending.append(instance)
        self._last_edit_at = self._time_fn()

    # ------------------------------------------------------------------
    # Flushing
    # ------------------------------------------------------------------

    def tick(self) -> None:
        if not self._pending or self._last_edit_at is None:
            return
        if self._time_fn() - self._last_edit_at >= self._config.collect_interval_s:
            self.flush()

    def flush(self) -> bool:
        if not self._pending:
            return False
        payload = BuildPayload(voxel_instances=list(self._pending))
        self._pending.clear()
        self._last_edit_at = None
        log.debug("Publishing build group with %d edits", len(payload.voxel_instances))
        self._bus.publish(payload)
        return True

    def _on_flush_request(self, _signal: FlushBuildRequest) -> None:
        self.flush()
