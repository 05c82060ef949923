# src/routing/permission.py
"""Plan approval request sent to POST /plan-permission."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from world_state.schema import GameStateSnapshot

from .messages import PlanBatch, PlanItem


@dataclass
class PlanApprovalRequest:
    session_id: str
    goal_id: str
    goal_label: str = ""
    additional_info: str = ""
    approved_plans: List[PlanItem] = field(default_factory=list)
    game_state: Optional[GameStateSnapshot] = None

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "session_id": self.session_id,
            "goal_id": self.goal_id,
            "goal_label": self.goal_label,
        }
        if self.additional_info:
            body["additional_info"] = self.additional_info
        body["approved_plans"] = [item.to_wire() for item in self.approved_plans]
        if self.game_state is not None:
            body["game_state"] = self.game_state.to_wire()
        return body


def build_plan_approval(
    plan: PlanBatch,
    session_id: str,
    approved_ids: Optional[Iterable[str]] = None,
    additional_info: str = "",
) -> Optional[PlanApprovalRequest]:
    """
    Select the approved items from `plan`.

    approved_ids of None approves every item. Returns None when there is
    neither an approved item nor additional info to send.
    """
    if approved_ids is None:
        approved = list(plan.plan)
    else:
        wanted = set(approved_ids)
        approved = [item for item in plan.plan if item.id in wanted]

    info = (additional_info or "").strip()
    if not approved and not info:
        return None

    return PlanApprovalRequest(
        session_id=session_id,
        goal_id=plan.goal_id,
        goal_label=plan.goal_label,
        additional_info=info,
        approved_plans=approved,
    )
