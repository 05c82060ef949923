# src/capture/payloads.py
"""
Event payload shapes and their wire encoding.

Each payload class maps to exactly one EventType; the batch layer
derives an event's type from its payload class. Wire quirks kept for
the remote service:

- multi-image payloads use the key "image" for a list of descriptors
- an ImageRef emits only its non-empty fields, and {} when all are empty
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from world_state.schema import Vec3, VoxelTypeDescriptor

log = logging.getLogger(__name__)

MAX_IMAGES = 4


# ============================================================
# Event Types
# ============================================================

class EventType(str, Enum):
    """Wire type tags for batched events."""

    PLAYER_SPEAK = "player_speak"
    PLAYER_BUILD = "player_build"
    VOXEL_TYPE_CREATED = "voxel_type_created"
    VOXEL_TYPE_UPDATED = "voxel_type_updated"
    AGENT_CONTINUE_PLAN = "agent_continue_plan"
    AGENT_PERCEPTION = "agent_perception"


DEFAULT_IMMEDIATE_TYPES = (
    EventType.PLAYER_SPEAK.value,
    EventType.AGENT_CONTINUE_PLAN.value,
    EventType.AGENT_PERCEPTION.value,
)


# ============================================================
# Images
# ============================================================

@dataclass
class ImageRef:
    file_name: str = ""
    base64: str = ""
    url: str = ""
    file_path: str = ""

    def is_empty(self) -> bool:
        return not (self.file_name or self.base64 or self.url or self.file_path)

    def to_wire(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for key in ("file_name", "base64", "url", "file_path"):
            value = getattr(self, key)
            if value:
                out[key] = value
        return out


def _cap_images(images: Optional[List[ImageRef]], owner: str) -> List[ImageRef]:
    images = list(images or [])
    if len(images) > MAX_IMAGES:
        log.warning("%s carries %d images; keeping first %d", owner, len(images), MAX_IMAGES)
        images = images[:MAX_IMAGES]
    return images


def _images_wire(images: List[ImageRef]) -> List[Dict[str, str]]:
    return [img.to_wire() if img is not None else {} for img in images]


# ============================================================
# Payloads
# ============================================================

@dataclass
class SpeechPayload:
    text: str
    image: Optional[ImageRef] = None

    def to_wire(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "image": self.image.to_wire() if self.image is not None else None,
        }


@dataclass
class VoxelInstance:
    voxel_id: str
    voxel_name: str
    position: Vec3

    def to_wire(self) -> Dict[str, Any]:
        return {
            "voxel_id": self.voxel_id,
            "voxel_name": self.voxel_name,
            "position": self.position.to_wire(),
        }


@dataclass
class BuildPayload:
    voxel_instances: List[VoxelInstance] = field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        return {"voxel_instances": [v.to_wire() for v in self.voxel_instances]}


@dataclass
class VoxelTypeCreatedPayload:
    voxel_type: VoxelTypeDescriptor
    initiator: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return {"voxel_type": self.voxel_type.to_wire(), "initiator": self.initiator}


@dataclass
class VoxelTypeUpdatedPayload:
    """new_voxel_type of None means the type was deleted."""

    voxel_id: str
    old_voxel_type: Optional[VoxelTypeDescriptor] = None
    new_voxel_type: Optional[VoxelTypeDescriptor] = None

    @property
    def deleted(self) -> bool:
        return self.new_voxel_type is None

    def to_wire(self) -> Dict[str, Any]:
        return {
            "voxel_id": self.voxel_id,
            "old_voxel_type": self.old_voxel_type.to_wire() if self.old_voxel_type else None,
            "new_voxel_type": self.new_voxel_type.to_wire() if self.new_voxel_type else None,
        }


@dataclass
class ContinuePlanPayload:
    current_summary: str = ""
    possible_next_steps: str = ""
    images: List[ImageRef] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.images = _cap_images(self.images, "ContinuePlanPayload")

    @classmethod
    def from_steps(
        cls,
        current_summary: str,
        steps: List[str],
        images: Optional[List[ImageRef]] = None,
    ) -> "ContinuePlanPayload":
        return cls(
            current_summary=current_summary,
            possible_next_steps=", ".join(s for s in steps if s),
            images=list(images or []),
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "current_summary": self.current_summary,
            "possible_next_steps": self.possible_next_steps,
            "image": _images_wire(self.images),
        }


@dataclass
class PerceptionPayload:
    images: List[ImageRef] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.images = _cap_images(self.images, "PerceptionPayload")

    def to_wire(self) -> Dict[str, Any]:
        return {"image": _images_wire(self.images)}


# ============================================================
# Type mapping
# ============================================================

PAYLOAD_TYPES: Dict[Type[Any], EventType] = {
    SpeechPayload: EventType.PLAYER_SPEAK,
    BuildPayload: EventType.PLAYER_BUILD,
    VoxelTypeCreatedPayload: EventType.VOXEL_TYPE_CREATED,
    VoxelTypeUpdatedPayload: EventType.VOXEL_TYPE_UPDATED,
    ContinuePlanPayload: EventType.AGENT_CONTINUE_PLAN,
    PerceptionPayload: EventType.AGENT_PERCEPTION,
}


def event_type_for(payload: Any) -> Optional[str]:
    """Wire type string for a payload instance, or None if unrecognized."""
    et = PAYLOAD_TYPES.get(type(payload))
    return et.value if et is not None else None
