# src/commands/executors/continue_plan.py
"""
continue_plan: ask the planner for the next step.

Publishes an agent_continue_plan event carrying the current summary
and candidate next steps. With request_snapshot, four directional
photos are captured first; the command completes when the capture
callback fires.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from capture.payloads import ContinuePlanPayload, ImageRef

from ..base import CommandExecutor, CommandFailed
from ..params import ContinuePlanParams

log = logging.getLogger(__name__)

PHOTO_ORDER = ("front", "back", "left", "right")


def order_photos(file_names: List[str]) -> List[str]:
    """Sort photo names front/back/left/right by the direction tag in the name."""

    def rank(name: str) -> int:
        lowered = name.lower()
        for i, tag in enumerate(PHOTO_ORDER):
            if f"_{tag}_" in lowered or lowered.startswith(f"{tag}_"):
                return i
        return len(PHOTO_ORDER)

    return sorted((n for n in file_names if n), key=rank)


class ContinuePlanExecutor(CommandExecutor):
    command_type = "continue_plan"
    can_interrupt = True
    params_cls = ContinuePlanParams

    def __init__(self, context=None) -> None:
        super().__init__(context)
        self._pending: Optional[ContinuePlanParams] = None

    def _start(self, command_id: str, params: ContinuePlanParams) -> None:
        if self._ctx.bus is None:
            raise CommandFailed("Event bus not available")

        if params.request_snapshot and self._ctx.capture is not None:
            self._pending = params
            self._ctx.capture.capture_four_directions(
                lambda names, pending=params: self._on_photos(pending, names)
            )
            return

        if params.request_snapshot:
            log.warning("continue_plan %s: snapshot requested but no camera; sending without images", command_id)
        self._publish(params, [])
        self._finish(True, None)

    def _on_photos(self, params: ContinuePlanParams, file_names: Optional[List[str]]) -> None:
        if self._pending is not params:
            # interrupted while the capture was pending
            return
        self._pending = None
        if not file_names:
            self._finish(False, "Failed to take snapshot")
            return
        ordered = order_photos(file_names)
        if self._ctx.observer is not None and hasattr(self._ctx.observer, "show_images"):
            self._ctx.observer.show_images(ordered, params.current_summary)
        self._publish(params, [ImageRef(file_name=name) for name in ordered])
        self._finish(True, None)

    def _publish(self, params: ContinuePlanParams, images: List[ImageRef]) -> None:
        self._ctx.bus.publish(
            ContinuePlanPayload.from_steps(params.current_summary, params.possible_next_steps, images)
        )

    def _on_interrupt(self) -> None:
        self._pending = None
