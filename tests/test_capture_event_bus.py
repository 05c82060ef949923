#tests/test_capture_event_bus.py
"""
Tests for capture.bus.EventBus

Covers:
- Publish/subscribe keyed by exact payload class
- Registration order and fan-out
- No-op publish / unsubscribe edge cases
- clear() and failing handlers
- Basic thread-safety smoke check
"""

from __future__ import annotations

import threading
from typing import Any, List

from capture.bus import EventBus
from capture.payloads import PerceptionPayload, SpeechPayload
from capture.signals import FlushBuildRequest


def test_event_bus_publish_subscribe_basic() -> None:
    bus = EventBus()
    received: List[SpeechPayload] = []

    bus.subscribe(SpeechPayload, received.append)

    bus.publish(SpeechPayload(text="first"))
    bus.publish(SpeechPayload(text="second"))

    assert [p.text for p in received] == ["first", "second"]


def test_event_bus_dispatches_on_exact_type_only() -> None:
    bus = EventBus()
    speech: List[Any] = []
    perception: List[Any] = []

    bus.subscribe(SpeechPayload, speech.append)
    bus.subscribe(PerceptionPayload, perception.append)

    bus.publish(PerceptionPayload())

    assert speech == []
    assert len(perception) == 1


def test_event_bus_handlers_run_in_registration_order() -> None:
    bus = EventBus()
    seen: List[str] = []

    bus.subscribe(FlushBuildRequest, lambda _: seen.append("a"))
    bus.subscribe(FlushBuildRequest, lambda _: seen.append("b"))
    bus.subscribe(FlushBuildRequest, lambda _: seen.append("c"))

    bus.publish(FlushBuildRequest())

    assert seen == ["a", "b", "c"]


def test_event_bus_publish_without_subscribers_is_noop() -> None:
    bus = EventBus()
    bus.publish(SpeechPayload(text="nobody listens"))
    bus.publish(None)


def test_event_bus_unsubscribe_and_missing_handler() -> None:
    bus = EventBus()
    received: List[Any] = []

    bus.subscribe(SpeechPayload, received.append)
    bus.unsubscribe(SpeechPayload, received.append)
    # not registered: must not raise
    bus.unsubscribe(SpeechPayload, received.append)
    bus.unsubscribe(PerceptionPayload, received.append)

    bus.publish(SpeechPayload(text="x"))

    assert received == []
    assert bus.handler_count(SpeechPayload) == 0


def test_event_bus_clear_drops_everything() -> None:
    bus = EventBus()
    received: List[Any] = []
    bus.subscribe(SpeechPayload, received.append)
    bus.subscribe(FlushBuildRequest, received.append)

    bus.clear()
    bus.publish(SpeechPayload(text="x"))
    bus.publish(FlushBuildRequest())

    assert received == []


def test_event_bus_failing_handler_does_not_stop_others() -> None:
    bus = EventBus()
    received: List[Any] = []

    def broken(_: Any) -> None:
        raise RuntimeError("boom")

    bus.subscribe(SpeechPayload, broken)
    bus.subscribe(SpeechPayload, received.append)

    bus.publish(SpeechPayload(text="still delivered"))

    assert len(received) == 1


def test_event_bus_handler_may_unsubscribe_during_publish() -> None:
    bus = EventBus()
    calls: List[str] = []

    def once(_: Any) -> None:
        calls.append("once")
        bus.unsubscribe(SpeechPayload, once)

    bus.subscribe(SpeechPayload, once)
    bus.publish(SpeechPayload(text="1"))
    bus.publish(SpeechPayload(text="2"))

    assert calls == ["once"]


def test_event_bus_thread_safety_smoke() -> None:
    bus = EventBus()
    count = 100
    received: List[Any] = []
    lock = threading.Lock()

    def subscriber(evt: Any) -> None:
        with lock:
            received.append(evt)

    bus.subscribe(SpeechPayload, subscriber)

    def publisher_thread(start: int) -> None:
        for i in range(start, start + count):
            bus.publish(SpeechPayload(text=str(i)))

    threads = [
        threading.Thread(target=publisher_thread, args=(0,)),
        threading.Thread(target=publisher_thread, args=(1000,)),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(received) == 2 * count
