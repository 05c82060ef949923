# src/routing/__init__.py
"""
Inbound reply handling and the plan approval request.
"""

from .messages import (
    PlanItem,
    PlanBatch,
    CommandData,
    CommandBatch,
    parse_plan_batch,
    parse_command_batch,
)
from .permission import PlanApprovalRequest, build_plan_approval
from .router import ResponseRouter, RouteResult

__all__ = [
    "PlanItem",
    "PlanBatch",
    "CommandData",
    "CommandBatch",
    "parse_plan_batch",
    "parse_command_batch",
    "PlanApprovalRequest",
    "build_plan_approval",
    "ResponseRouter",
    "RouteResult",
]
