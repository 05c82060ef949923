# src/commands/completion.py
"""Completion callback wrapper enforcing a single report per execution."""

from __future__ import annotations

import logging
from typing import Callable, Optional

log = logging.getLogger(__name__)

CompletionFn = Callable[[bool, Optional[str]], None]


class Completion:
    """
    Callable that forwards the first (success, reason) report and drops
    any later one with an error log.
    """

    def __init__(self, callback: Optional[CompletionFn], label: str = "") -> None:
        self._callback = callback
        self._label = label
        self.call_count = 0
        self.success: Optional[bool] = None
        self.reason: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.call_count > 0

    def __call__(self, success: bool, reason: Optional[str] = None) -> None:
        self.call_count += 1
        if self.call_count > 1:
            log.error(
                "Completion for %s reported %d times; dropping (%s, %s)",
                self._label or "<command>",
                self.call_count,
                success,
                reason,
            )
            return
        self.success = success
        self.reason = reason
        if self._callback is not None:
            self._callback(success, reason)
