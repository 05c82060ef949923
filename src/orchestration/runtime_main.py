# path: src/orchestration/runtime_main.py

"""
Headless bridge runtime.

Wires a SessionOrchestrator to an in-memory voxel world, the HTTP
transport and the rich console, then drives the control loop:

    python -m orchestration.runtime_main --ticks 600 --say "build a tower"

Useful against a local planning service for end-to-end checks without
a game client.
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional, Tuple

from capture.bus import EventBus
from capture.payloads import SpeechPayload
from env.loader import load_bridge_config
from env.schema import BridgeConfig
from monitoring.console import ConsoleObserver
from monitoring.logger import JsonFileLogger
from transport.http_client import HttpTransport
from world.grid import VoxelGrid
from world.registry import InMemoryVoxelTypeRegistry
from world_state.schema import Vec3

from .error_handling import safe_tick_with_logging
from .session import SessionOrchestrator

log = logging.getLogger(__name__)


def build_demo_world() -> Tuple[VoxelGrid, InMemoryVoxelTypeRegistry]:
    """A flat floor with a few registered block types."""
    registry = InMemoryVoxelTypeRegistry()
    registry.register(1, "base", "Floor layer", display_name="Base")
    registry.register(2, "stone", "Grey stone", display_name="Stone")
    registry.register(3, "dirt", "Brown dirt", display_name="Dirt")

    world = VoxelGrid(agent_position=Vec3(0.0, 1.0, 0.0), operator_position=Vec3(3.0, 1.0, 3.0))
    world.fill_floor(half_extent=16, type_id=1, y=0)
    return world, registry


def build_monitoring_stack(config: BridgeConfig) -> Tuple[EventBus, Optional[JsonFileLogger]]:
    """Monitoring bus plus an optional JSONL sink from config.monitoring_log."""
    bus = EventBus()
    sink = None
    if config.monitoring_log:
        sink = JsonFileLogger(path=Path(config.monitoring_log), bus=bus)
    return bus, sink


def build_orchestrator(
    config: BridgeConfig,
    transport=None,
    monitor_bus: Optional[EventBus] = None,
    observer=None,
) -> SessionOrchestrator:
    world, registry = build_demo_world()
    return SessionOrchestrator(
        config=config,
        transport=transport if transport is not None else HttpTransport.from_config(config.api),
        world=world,
        registry=registry,
        observer=observer,
        monitor_bus=monitor_bus,
    )


def run_loop(orchestrator: SessionOrchestrator, ticks: int, dt: float, realtime: bool = True) -> None:
    for _ in range(ticks):
        safe_tick_with_logging(orchestrator, dt)
        if realtime:
            time.sleep(dt)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Headless voxel agent bridge runtime.")
    parser.add_argument("--config", type=Path, default=None, help="Path to bridge.yaml")
    parser.add_argument("--profile", default=None, help="Profile name inside bridge.yaml")
    parser.add_argument("--ticks", type=int, default=600, help="Number of control-loop ticks")
    parser.add_argument("--dt", type=float, default=0.1, help="Seconds per tick")
    parser.add_argument("--say", default="", help="Operator speech published at start")
    parser.add_argument("--no-sleep", action="store_true", help="Run ticks back to back")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_bridge_config(args.config, args.profile)
    monitor_bus, sink = build_monitoring_stack(config)
    observer = ConsoleObserver(monitor=monitor_bus)
    orchestrator = build_orchestrator(config, monitor_bus=monitor_bus, observer=observer)

    if args.say:
        orchestrator.publish(SpeechPayload(text=args.say))

    try:
        run_loop(orchestrator, args.ticks, args.dt, realtime=not args.no_sleep)
    except KeyboardInterrupt:
        log.info("Shutting down bridge runtime")
    finally:
        orchestrator.shutdown()
        observer.close()
        if sink is not None:
            sink.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
