#tests/test_runtime_main.py
"""
Smoke tests for orchestration.runtime_main and orchestration.error_handling

Covers:
- The demo orchestrator runs a control loop against a fake transport
- CLI argument parsing
- safe_tick_with_logging reports and re-raises tick exceptions
"""

from __future__ import annotations

from typing import List

import pytest

from capture.payloads import SpeechPayload
from env.schema import BridgeConfig
from monitoring.events import EventType, MonitoringEvent
from orchestration.error_handling import safe_tick_with_logging
from orchestration.runtime_main import build_monitoring_stack, build_orchestrator, parse_args, run_loop
from world.testing.fakes import FakeTransport, RecordingObserver


def test_demo_loop_sends_speech_and_executes_reply():
    transport = FakeTransport()
    transport.queue_reply(
        '{"goal_id": "g", "session_id": "s", "commands": '
        '[{"id": "c1", "type": "place_block", "params": {"start_offset": {"x": 1, "y": 0, "z": 0}, "voxel_name": "Stone"}}]}'
    )
    observer = RecordingObserver()
    orch = build_orchestrator(BridgeConfig(), transport=transport, observer=observer)

    orch.publish(SpeechPayload(text="put a stone to my right"))
    run_loop(orch, ticks=3, dt=0.1, realtime=False)
    orch.shutdown()

    assert len(transport.sent) == 1
    assert observer.phases_for("c1") == ["executing", "completed"]


def test_parse_args_defaults_and_flags():
    args = parse_args([])
    assert args.ticks == 600
    assert args.dt == 0.1
    assert args.no_sleep is False

    args = parse_args(["--profile", "remote", "--ticks", "5", "--say", "hi", "--no-sleep", "-v"])
    assert (args.profile, args.ticks, args.say, args.no_sleep, args.verbose) == ("remote", 5, "hi", True, True)


def test_monitoring_stack_without_log_file():
    bus, sink = build_monitoring_stack(BridgeConfig())
    assert sink is None
    assert bus is not None


def test_monitoring_stack_with_log_file(tmp_path):
    bus, sink = build_monitoring_stack(BridgeConfig(monitoring_log=str(tmp_path / "events.log")))
    try:
        assert sink is not None
        assert sink.path.parent.exists()
    finally:
        sink.close()


def test_safe_tick_reports_and_reraises():
    orch = build_orchestrator(BridgeConfig(), transport=FakeTransport())
    events: List[MonitoringEvent] = []
    orch.monitor_bus.subscribe(MonitoringEvent, events.append)

    def boom(dt):
        raise RuntimeError("tick failed")

    orch.tick = boom

    with pytest.raises(RuntimeError):
        safe_tick_with_logging(orch, 0.1)

    assert events[-1].event_type == EventType.LOG
    assert events[-1].payload["subtype"] == "TICK_EXCEPTION"
    assert events[-1].correlation_id == orch.session_id
