# src/capture/signals.py
"""
Control signals carried on the event bus.

These are not batched; they ask producers to do something.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FlushBuildRequest:
    """
    Published by the batch controller right before a send.

    Producers that buffer grouped side effects (block edits) must
    publish their pending payload synchronously when they receive it,
    so it lands in the batch being flushed.
    """

    reason: str = "flush"
