# src/transport/__init__.py
"""Outbound requests to the planning service."""

from .http_client import ApiConfig, HttpTransport
from .images import inline_images
from .pump import RequestPump

__all__ = ["ApiConfig", "HttpTransport", "inline_images", "RequestPump"]
