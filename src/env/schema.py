# BridgeConfig aggregate
# src/env/schema.py

from dataclasses import dataclass, field

from batching.controller import BatchingConfig
from capture.build_recorder import BuildRecorderConfig
from commands.executors.move_to import MovementConfig
from transport.http_client import ApiConfig
from world_state.tracker import GameStateConfig


@dataclass
class BridgeConfig:
    """Resolved configuration for one active profile."""
    profile: str = "default"
    api: ApiConfig = field(default_factory=ApiConfig)
    batching: BatchingConfig = field(default_factory=BatchingConfig)
    game_state: GameStateConfig = field(default_factory=GameStateConfig)
    movement: MovementConfig = field(default_factory=MovementConfig)
    build_recorder: BuildRecorderConfig = field(default_factory=BuildRecorderConfig)
    http_workers: int = 0          # 0 = send inline on the control loop
    monitoring_log: str = ""       # JSONL path; empty disables the file sink
