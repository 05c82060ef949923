# src/transport/images.py
"""
Embed captured photos into an outbound wire body.

Image descriptors ({file_name, base64, url, file_path}) found under
an event payload's "image" key get their base64 field filled from
file_path, or from photo_dir/file_name, when base64 is empty.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

log = logging.getLogger(__name__)


def _descriptors(payload: Any) -> Iterator[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return
    image = payload.get("image")
    if isinstance(image, dict):
        yield image
    elif isinstance(image, list):
        for item in image:
            if isinstance(item, dict):
                yield item


def resolve_image_path(descriptor: Dict[str, Any], photo_dir: Optional[Path]) -> Optional[Path]:
    if descriptor.get("file_path"):
        return Path(descriptor["file_path"])
    if descriptor.get("file_name") and photo_dir is not None:
        return photo_dir / descriptor["file_name"]
    return None


def inline_images(body: Dict[str, Any], photo_dir: Optional[Path] = None) -> int:
    """Fill base64 in place for every resolvable image; returns how many were filled."""
    filled = 0
    for event in body.get("events") or []:
        if not isinstance(event, dict):
            continue
        for descriptor in _descriptors(event.get("payload")):
            if descriptor.get("base64"):
                continue
            path = resolve_image_path(descriptor, photo_dir)
            if path is None:
                continue
            if not path.is_file():
                log.warning("Image file not found: %s", path)
                continue
            descriptor["base64"] = base64.b64encode(path.read_bytes()).decode("ascii")
            filled += 1
    return filled
