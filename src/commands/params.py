# src/commands/params.py
"""
Command parameter decoding.

Params arrive as opaque JSON text (or an already-decoded mapping).
Each command type has a small dataclass built with from_mapping();
any shape problem raises ParamsError, which the executor base turns
into a failed completion.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from world_state.schema import Vec3


class ParamsError(ValueError):
    pass


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------


def decode_params(params: Any) -> Dict[str, Any]:
    if params is None:
        return {}
    if isinstance(params, Mapping):
        return dict(params)
    if isinstance(params, str):
        if not params.strip():
            return {}
        try:
            value = json.loads(params)
        except ValueError as exc:
            raise ParamsError(f"not valid JSON ({exc.msg})") from exc
        if not isinstance(value, dict):
            raise ParamsError("expected a JSON object")
        return value
    raise ParamsError(f"unsupported params type {type(params).__name__}")


def _str(data: Mapping[str, Any], key: str, default: str = "") -> str:
    value = data.get(key, default)
    if value is None:
        return default
    if isinstance(value, (dict, list)):
        raise ParamsError(f"{key} must be a string")
    return str(value)


def _int(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ParamsError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ParamsError(f"{key} must be an integer") from exc


def _bool(data: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    if isinstance(value, (int, float)):
        return bool(value)
    return default


def _vec3(data: Mapping[str, Any], key: str) -> Vec3:
    value = data.get(key)
    if value is None:
        return Vec3()
    if not isinstance(value, Mapping):
        raise ParamsError(f"{key} must be an object with x, y, z")
    try:
        return Vec3(
            float(value.get("x", 0) or 0),
            float(value.get("y", 0) or 0),
            float(value.get("z", 0) or 0),
        )
    except (TypeError, ValueError, OverflowError) as exc:
        raise ParamsError(f"{key} has a non-numeric component") from exc


def _str_list(data: Mapping[str, Any], key: str) -> List[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ParamsError(f"{key} must be a list")
    return [str(v) for v in value if v is not None and str(v) != ""]


# ---------------------------------------------------------------------------
# Per-command params
# ---------------------------------------------------------------------------


@dataclass
class PlaceBlockParams:
    start_offset: Vec3 = field(default_factory=Vec3)
    expand_direction: str = "up"
    count: int = 1
    voxel_name: str = ""
    voxel_id: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PlaceBlockParams":
        count = _int(data, "count", 1)
        return cls(
            start_offset=_vec3(data, "start_offset"),
            expand_direction=_str(data, "expand_direction", "up") or "up",
            count=count if count > 0 else 1,
            voxel_name=_str(data, "voxel_name"),
            voxel_id=_str(data, "voxel_id"),
        )


@dataclass
class DestroyBlockParams:
    start_offset: Vec3 = field(default_factory=Vec3)
    expand_direction: str = "up"
    count: int = 1
    voxel_names: List[str] = field(default_factory=list)
    voxel_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DestroyBlockParams":
        count = _int(data, "count", 1)
        return cls(
            start_offset=_vec3(data, "start_offset"),
            expand_direction=_str(data, "expand_direction", "up") or "up",
            count=count if count > 0 else 1,
            voxel_names=_str_list(data, "voxel_names"),
            voxel_ids=_str_list(data, "voxel_ids"),
        )

    @property
    def filtered(self) -> bool:
        return bool(self.voxel_names or self.voxel_ids)


@dataclass
class MoveToParams:
    target_pos: Vec3 = field(default_factory=Vec3)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "MoveToParams":
        if "target_pos" not in data:
            raise ParamsError("target_pos is required")
        return cls(target_pos=_vec3(data, "target_pos"))


@dataclass
class VoxelTypeFields:
    """Voxel type fields from a command; empty strings mean 'not supplied'."""

    name: str = ""
    description: str = ""
    face_textures: List[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Any, key: str) -> "VoxelTypeFields":
        if not isinstance(data, Mapping):
            raise ParamsError(f"{key} must be an object")
        faces = data.get("face_textures")
        if faces is not None and not isinstance(faces, list):
            raise ParamsError(f"{key}.face_textures must be a list")
        return cls(
            name=_str(data, "name"),
            description=_str(data, "description"),
            face_textures=["" if f is None else str(f) for f in (faces or [])],
        )


@dataclass
class CreateVoxelTypeParams:
    voxel_type: VoxelTypeFields

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CreateVoxelTypeParams":
        if data.get("voxel_type") is None:
            raise ParamsError("voxel_type is required")
        fields = VoxelTypeFields.from_mapping(data["voxel_type"], "voxel_type")
        if not fields.name:
            raise ParamsError("voxel_type.name is required")
        return cls(voxel_type=fields)


@dataclass
class UpdateVoxelTypeParams:
    voxel_id: str
    new_voxel_type: VoxelTypeFields

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UpdateVoxelTypeParams":
        if data.get("new_voxel_type") is None:
            raise ParamsError("new_voxel_type is required")
        return cls(
            voxel_id=_str(data, "voxel_id"),
            new_voxel_type=VoxelTypeFields.from_mapping(data["new_voxel_type"], "new_voxel_type"),
        )


@dataclass
class ContinuePlanParams:
    current_summary: str = ""
    possible_next_steps: List[str] = field(default_factory=list)
    request_snapshot: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ContinuePlanParams":
        return cls(
            current_summary=_str(data, "current_summary"),
            possible_next_steps=_str_list(data, "possible_next_steps"),
            request_snapshot=_bool(data, "request_snapshot"),
        )


def parse_int_id(value: Optional[str]) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None
