# src/world_state/schema.py
"""
Snapshot data shapes for the game-state tracker.

Everything here is a plain dataclass; `to_wire()` renders the JSON
shape the remote planning service expects. Wire keys keep their
historical names (player_position_rel, six_direction,
voxel_definitions) for compatibility with the service.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

Cell = Tuple[int, int, int]

FACE_COUNT = 6


# ============================================================
# Geometry
# ============================================================

@dataclass(frozen=True)
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_cell(cls, cell: Cell) -> "Vec3":
        return cls(float(cell[0]), float(cell[1]), float(cell[2]))

    @classmethod
    def from_mapping(cls, data: Any) -> "Vec3":
        if not isinstance(data, dict):
            return cls()
        return cls(
            float(data.get("x", 0.0) or 0.0),
            float(data.get("y", 0.0) or 0.0),
            float(data.get("z", 0.0) or 0.0),
        )

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def scaled(self, k: float) -> "Vec3":
        return Vec3(self.x * k, self.y * k, self.z * k)

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def floor_cell(self) -> Cell:
        return (math.floor(self.x), math.floor(self.y), math.floor(self.z))

    def round_cell(self) -> Cell:
        return (round(self.x), round(self.y), round(self.z))

    def to_wire(self) -> Dict[str, float]:
        return {"x": float(self.x), "y": float(self.y), "z": float(self.z)}


# ============================================================
# Voxel type catalog
# ============================================================

def normalize_faces(faces: Optional[List[str]]) -> List[str]:
    """Pad with empty strings or truncate to exactly six faces."""
    out = [str(f) if f is not None else "" for f in (faces or [])][:FACE_COUNT]
    out.extend([""] * (FACE_COUNT - len(out)))
    return out


@dataclass
class VoxelTypeDescriptor:
    """A buildable block type: id, name, description and six face textures."""

    id: str
    name: str
    description: str = ""
    face_textures: List[str] = field(default_factory=lambda: [""] * FACE_COUNT)

    def __post_init__(self) -> None:
        self.id = str(self.id)
        self.face_textures = normalize_faces(self.face_textures)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "VoxelTypeDescriptor":
        faces = data.get("face_textures")
        return cls(
            id=str(data.get("id", "") or ""),
            name=str(data.get("name", "") or ""),
            description=str(data.get("description", "") or ""),
            face_textures=list(faces) if isinstance(faces, list) else [],
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "face_textures": list(self.face_textures),
        }

    def to_catalog_wire(self) -> Dict[str, Any]:
        """Catalog entry shape: numeric id where the id is numeric."""
        ident: Any = int(self.id) if self.id.isdigit() else self.id
        return {
            "id": ident,
            "name": self.name,
            "face_textures": list(self.face_textures),
            "description": self.description,
        }


# ============================================================
# Tracked entries
# ============================================================

@dataclass
class DirectionReading:
    name: str
    id: str
    distance: int

    def to_wire(self) -> Dict[str, Any]:
        return {"name": self.name, "id": self.id, "distance": int(self.distance)}


DIRECTION_NAMES: Tuple[str, ...] = ("up", "down", "front", "back", "left", "right")


@dataclass
class SixDirectionScan:
    up: DirectionReading = field(default_factory=lambda: DirectionReading("up", "", 0))
    down: DirectionReading = field(default_factory=lambda: DirectionReading("down", "", 0))
    front: DirectionReading = field(default_factory=lambda: DirectionReading("front", "", 0))
    back: DirectionReading = field(default_factory=lambda: DirectionReading("back", "", 0))
    left: DirectionReading = field(default_factory=lambda: DirectionReading("left", "", 0))
    right: DirectionReading = field(default_factory=lambda: DirectionReading("right", "", 0))

    def get(self, direction: str) -> DirectionReading:
        return getattr(self, direction)

    def to_wire(self) -> Dict[str, Any]:
        return {name: self.get(name).to_wire() for name in DIRECTION_NAMES}


@dataclass
class NearbyVoxel:
    position: Vec3
    voxel_name: str
    voxel_id: str

    def to_wire(self) -> Dict[str, Any]:
        return {
            "position": self.position.to_wire(),
            "voxel_name": self.voxel_name,
            "voxel_id": self.voxel_id,
        }


@dataclass
class PendingPlanEntry:
    id: str
    goal_id: str = ""
    goal_label: str = ""
    action_type: str = ""
    description: str = ""
    depends_on: List[str] = field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "goal_id": self.goal_id,
            "goal_label": self.goal_label,
            "action_type": self.action_type,
            "description": self.description,
            "depends_on": list(self.depends_on),
        }


COMMAND_PHASES: Tuple[str, ...] = (
    "pending",
    "executing",
    "completed",
    "failed",
    "interrupted",
)


@dataclass
class LastCommandEntry:
    id: str
    goal_id: str = ""
    goal_label: str = ""
    type: str = ""
    params: str = "{}"
    phase: str = "pending"

    def params_object(self) -> Dict[str, Any]:
        """Decoded params; {} when the text is empty, invalid, or not an object."""
        text = (self.params or "").strip()
        if not text:
            return {}
        try:
            value = json.loads(text)
        except ValueError:
            return {}
        return value if isinstance(value, dict) else {}

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "goal_id": self.goal_id,
            "goal_label": self.goal_label,
            "type": self.type,
            "params": self.params_object(),
            "phase": self.phase,
        }


# ============================================================
# Snapshot
# ============================================================

@dataclass
class GameStateSnapshot:
    """Point-in-time copy of everything the tracker knows."""

    timestamp: str = ""
    agent_position: Vec3 = field(default_factory=Vec3)
    operator_relative_position: Vec3 = field(default_factory=Vec3)
    six_direction_scan: SixDirectionScan = field(default_factory=SixDirectionScan)
    nearby_voxels: List[NearbyVoxel] = field(default_factory=list)
    pending_plans: List[PendingPlanEntry] = field(default_factory=list)
    last_commands: List[LastCommandEntry] = field(default_factory=list)
    voxel_type_catalog: List[VoxelTypeDescriptor] = field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "agent_position": self.agent_position.to_wire(),
            "player_position_rel": self.operator_relative_position.to_wire(),
            "six_direction": self.six_direction_scan.to_wire(),
            "nearby_voxels": [v.to_wire() for v in self.nearby_voxels],
            "pending_plans": [p.to_wire() for p in self.pending_plans],
            "last_commands": [c.to_wire() for c in self.last_commands],
            "voxel_definitions": [d.to_catalog_wire() for d in self.voxel_type_catalog],
        }
