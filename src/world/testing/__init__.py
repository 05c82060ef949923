# src/world/testing/__init__.py
"""Fakes for exercising the bridge without a game client or network."""

from .fakes import (
    FailingWorld,
    FakePhotoCapture,
    FakeTransport,
    RecordingObserver,
    SentRequest,
)

__all__ = [
    "FailingWorld",
    "FakePhotoCapture",
    "FakeTransport",
    "RecordingObserver",
    "SentRequest",
]
