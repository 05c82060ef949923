# src/capture/batch.py
"""
Event and EventBatch: the outbound request body for POST /events.

A batch is mutable only while the batch controller owns it; once it
is handed to the transport the controller swaps in a fresh instance.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from world_state.schema import GameStateSnapshot

from .clock import SessionClock
from .payloads import event_type_for


@dataclass
class Event:
    timestamp: str
    type: str
    payload: Any

    @classmethod
    def from_payload(cls, payload: Any, clock: SessionClock) -> "Event":
        return cls(
            timestamp=clock.hhmmss(),
            type=event_type_for(payload) or "",
            payload=payload,
        )

    def to_wire(self) -> Dict[str, Any]:
        payload = self.payload
        if payload is not None and hasattr(payload, "to_wire"):
            payload = payload.to_wire()
        return {"timestamp": self.timestamp, "type": self.type, "payload": payload}


@dataclass
class EventBatch:
    session_id: str = ""
    events: List[Optional[Event]] = field(default_factory=list)
    game_state: Optional[GameStateSnapshot] = None

    def add_event(self, event: Event) -> None:
        self.events.append(event)

    def __len__(self) -> int:
        return len(self.events)

    def has_type(self, types: Any) -> bool:
        return any(e is not None and e.type in types for e in self.events)

    def validate(self) -> Optional[str]:
        """Return the first validation error, or None if the batch is sendable."""
        if not self.session_id:
            return "session_id is empty"
        if not self.events:
            return "events is empty"
        for i, event in enumerate(self.events):
            if event is None:
                return f"event[{i}] is null"
            if not event.timestamp:
                return f"event[{i}].timestamp is empty"
            if not event.type:
                return f"event[{i}].type is empty"
            if event.payload is None:
                return f"event[{i}].payload is null"
        return None

    def is_valid(self) -> bool:
        return self.validate() is None

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "session_id": self.session_id,
            "events": [e.to_wire() if e is not None else None for e in self.events],
        }
        if self.game_state is not None:
            body["game_state"] = self.game_state.to_wire()
        return body

    def to_json(self) -> str:
        return json.dumps(self.to_wire(), ensure_ascii=False)
