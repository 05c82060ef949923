# src/world_state/goal_labels.py
"""goal_id -> goal_label lookup shared between plan approval and command batches."""

from __future__ import annotations

import logging
from typing import Dict, Optional

log = logging.getLogger(__name__)


class GoalLabelStore:
    """
    Ephemeral label map.

    Written when a plan is accepted or approved, read when a command
    batch references a goal without carrying its label. Cleared on
    session reset.
    """

    def __init__(self) -> None:
        self._labels: Dict[str, str] = {}

    def store(self, goal_id: str, goal_label: str) -> None:
        if not goal_id:
            log.warning("GoalLabelStore.store called with empty goal_id; ignored")
            return
        self._labels[goal_id] = goal_label or ""

    def get(self, goal_id: Optional[str]) -> Optional[str]:
        if not goal_id:
            return None
        return self._labels.get(goal_id)

    def clear(self) -> None:
        self._labels.clear()

    def __len__(self) -> int:
        return len(self._labels)
