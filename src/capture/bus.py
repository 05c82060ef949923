# src/capture/bus.py
"""
Typed in-process event bus.

Handlers are registered per event class and invoked synchronously,
in registration order, on the publisher's thread. Producers scattered
through the world-interaction code publish here; the batch controller
and monitoring sinks subscribe.

- publish() with no subscribers is a no-op.
- unsubscribe() of an unknown handler is a no-op.
- clear() drops every subscription (session reset).
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Callable, Dict, List, Type

log = logging.getLogger(__name__)


# ============================================================
# Type aliases
# ============================================================

HandlerFn = Callable[[Any], None]


# ============================================================
# Event Bus
# ============================================================

class EventBus:
    """
    Publish/subscribe registry keyed by the exact class of the event.

    The handler table is guarded by a Lock; publish iterates over a
    snapshot so handlers may subscribe or unsubscribe re-entrantly.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[Any], List[HandlerFn]] = {}
        self._lock = Lock()

    # --------------------------------------------------------
    # Subscription API
    # --------------------------------------------------------

    def subscribe(self, event_cls: Type[Any], handler: HandlerFn) -> None:
        """Register `handler` for events whose type is exactly `event_cls`."""
        with self._lock:
            self._handlers.setdefault(event_cls, []).append(handler)

    def unsubscribe(self, event_cls: Type[Any], handler: HandlerFn) -> None:
        """
        Remove a previously registered handler.

        Safe to call even if `handler` is not present.
        """
        with self._lock:
            handlers = self._handlers.get(event_cls)
            if handlers and handler in handlers:
                handlers.remove(handler)
                if not handlers:
                    del self._handlers[event_cls]

    def handler_count(self, event_cls: Type[Any]) -> int:
        with self._lock:
            return len(self._handlers.get(event_cls, ()))

    # --------------------------------------------------------
    # Publish API
    # --------------------------------------------------------

    def publish(self, event: Any) -> None:
        """
        Deliver `event` to every handler registered for its class.

        A failing handler is logged and does not stop delivery to the
        remaining handlers.
        """
        if event is None:
            return

        with self._lock:
            handlers = list(self._handlers.get(type(event), ()))

        for fn in handlers:
            try:
                fn(event)
            except Exception:
                log.exception(
                    "Event handler %r failed for %s", fn, type(event).__name__
                )

    # --------------------------------------------------------
    # Utility
    # --------------------------------------------------------

    def clear(self) -> None:
        """Drop all subscriptions."""
        with self._lock:
            self._handlers.clear()
