# src/routing/messages.py
"""
Reply shapes from the remote planning service.

- PlanBatch: proposed, not-yet-approved plan items under one goal
- CommandBatch: concrete commands to execute now

Parsing is shape-based; there is no discriminant tag on the wire.
Object keys are whitespace-stripped before matching.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

log = logging.getLogger(__name__)


# ============================================================
# Plan Batch
# ============================================================

@dataclass
class PlanItem:
    id: str
    action_type: str = ""
    description: str = ""
    depends_on: Optional[List[str]] = None

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "action_type": self.action_type,
            "description": self.description,
            "depends_on": list(self.depends_on) if self.depends_on is not None else None,
        }


@dataclass
class PlanBatch:
    goal_id: str
    session_id: str
    goal_label: str = ""
    talk_to_player: str = ""
    plan: List[PlanItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.plan


# ============================================================
# Command Batch
# ============================================================

@dataclass
class CommandData:
    id: str
    type: str
    params: str = "{}"
    goal_id: str = ""
    goal_label: str = ""
    phase: str = ""


@dataclass
class CommandBatch:
    goal_id: str
    session_id: str
    goal_label: str = ""
    commands: List[CommandData] = field(default_factory=list)


# ============================================================
# Parsing helpers
# ============================================================

def _normalize_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).strip(): _normalize_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize_keys(v) for v in value]
    return value


def load_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode a JSON object with normalized keys; None for anything else."""
    if not text or not text.strip():
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    return _normalize_keys(data)


def _text(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _params_text(value: Any) -> str:
    """Command params as JSON text; objects are re-encoded, strings kept as-is."""
    if value is None:
        return "{}"
    if isinstance(value, str):
        return value if value.strip() else "{}"
    return json.dumps(value, ensure_ascii=False)


def _string_list(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, list):
        return [str(v) for v in value if v is not None]
    return [str(value)]


# ============================================================
# Public parsers
# ============================================================

def plan_batch_from_mapping(data: Dict[str, Any]) -> Optional[PlanBatch]:
    goal_id = _text(data, "goal_id")
    session_id = _text(data, "session_id")
    if not goal_id or not session_id:
        return None

    raw_plan = data.get("plan")
    has_plan = isinstance(raw_plan, list)
    has_talk = isinstance(data.get("talk_to_player"), str)
    if not has_plan and not has_talk:
        return None

    items: List[PlanItem] = []
    for raw in raw_plan if has_plan else []:
        if not isinstance(raw, dict):
            continue
        items.append(
            PlanItem(
                id=_text(raw, "id"),
                action_type=_text(raw, "action_type"),
                description=_text(raw, "description"),
                depends_on=_string_list(raw.get("depends_on")),
            )
        )

    return PlanBatch(
        goal_id=goal_id,
        session_id=session_id,
        goal_label=_text(data, "goal_label"),
        talk_to_player=_text(data, "talk_to_player"),
        plan=items,
    )


def command_batch_from_mapping(data: Dict[str, Any]) -> Optional[CommandBatch]:
    goal_id = _text(data, "goal_id")
    session_id = _text(data, "session_id")
    raw_commands = data.get("commands")
    if not goal_id or not session_id or not isinstance(raw_commands, list) or not raw_commands:
        return None

    commands: List[CommandData] = []
    for raw in raw_commands:
        if not isinstance(raw, dict):
            log.warning("Skipping non-object command entry: %r", raw)
            continue
        commands.append(
            CommandData(
                id=_text(raw, "id"),
                type=_text(raw, "type"),
                params=_params_text(raw.get("params")),
                goal_id=_text(raw, "goal_id"),
                goal_label=_text(raw, "goal_label"),
                phase=_text(raw, "phase"),
            )
        )
    if not commands:
        return None

    return CommandBatch(
        goal_id=goal_id,
        session_id=session_id,
        goal_label=_text(data, "goal_label"),
        commands=commands,
    )


def parse_plan_batch(text: Optional[str]) -> Optional[PlanBatch]:
    data = load_object(text)
    return plan_batch_from_mapping(data) if data is not None else None


def parse_command_batch(text: Optional[str]) -> Optional[CommandBatch]:
    data = load_object(text)
    return command_batch_from_mapping(data) if data is not None else None
