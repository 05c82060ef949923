#tests/test_command_dispatcher.py
"""
Tests for commands.dispatcher.CommandDispatcher

Covers:
- Sequential execution: a deferred command holds back its successors
- Phases reach the tracker and the observer
- Unknown command types are skipped
- Known types without an executor fail without stopping the batch
- Failed siblings do not stop the batch
- Interrupting an in-flight command
- reset() interrupts the active command and drops the rest of its batch
- Undecodable params fail one command, not the batch
- Invalid command data
- Duplicate executor registration
"""

from __future__ import annotations

import pytest

from commands.base import ExecutorContext
from commands.dispatcher import CommandDispatcher
from commands.executors import MovementConfig, MoveToExecutor, PlaceBlockExecutor
from routing.messages import CommandBatch, CommandData
from world.grid import VoxelGrid
from world.registry import InMemoryVoxelTypeRegistry
from world.testing.fakes import RecordingObserver
from world_state.schema import LastCommandEntry, Vec3
from world_state.tracker import GameStateTracker


def make_dispatcher(with_move: bool = True):
    registry = InMemoryVoxelTypeRegistry()
    registry.register(2, "stone")
    world = VoxelGrid(agent_position=Vec3(0, 0, 0), operator_position=Vec3(0, 0, 0))
    ctx = ExecutorContext(world=world, body=world, registry=registry)
    executors = [PlaceBlockExecutor(ctx)]
    if with_move:
        executors.append(MoveToExecutor(ctx, MovementConfig(speed=1.0, tolerance=0.1)))
    tracker = GameStateTracker()
    observer = RecordingObserver()
    dispatcher = CommandDispatcher(executors, tracker=tracker, observer=observer)
    return dispatcher, world, tracker, observer


def batch(*commands: CommandData) -> CommandBatch:
    return CommandBatch(goal_id="g1", session_id="s1", commands=list(commands))


def move(command_id: str, z: float) -> CommandData:
    return CommandData(id=command_id, type="move_to", params='{"target_pos": {"x": 0, "y": 0, "z": %s}}' % z)


def place(command_id: str, name: str = "stone", offset_x: int = 0) -> CommandData:
    return CommandData(
        id=command_id,
        type="place_block",
        params='{"voxel_name": "%s", "start_offset": {"x": %d, "y": 1, "z": 0}}' % (name, offset_x),
    )


def test_commands_run_sequentially_across_ticks() -> None:
    dispatcher, world, _, observer = make_dispatcher()

    dispatcher.process_batch(batch(move("m1", 2), place("p1")))

    assert dispatcher.phase("m1") == "executing"
    assert dispatcher.phase("p1") == "pending"
    assert world.occupied == {}
    assert dispatcher.running_batches == 1

    dispatcher.tick(1.0)
    assert dispatcher.phase("p1") == "pending"

    dispatcher.tick(1.0)
    assert dispatcher.phase("m1") == "completed"
    assert dispatcher.phase("p1") == "completed"
    # placed relative to the moved agent
    assert world.occupied == {(0, 1, 2): 2}
    assert observer.phases_for("m1") == ["executing", "completed"]
    assert dispatcher.running_batches == 0


def test_phases_reach_the_tracker() -> None:
    dispatcher, _, tracker, _ = make_dispatcher()
    tracker.add_last_command(LastCommandEntry(id="p1", type="place_block"))
    tracker.add_last_command(LastCommandEntry(id="p2", type="place_block"))

    dispatcher.process_batch(batch(place("p1"), place("p2", name="marble")))

    phases = {entry.id: entry.phase for entry in tracker.last_commands}
    assert phases == {"p1": "completed", "p2": "failed"}
    assert dispatcher.error("p2") == "Voxel type not found: marble (id: )"
    assert dispatcher.error("p1") is None


def test_unknown_type_is_skipped() -> None:
    dispatcher, world, _, observer = make_dispatcher()

    dispatcher.process_batch(batch(CommandData(id="x1", type="dance"), place("p1")))

    assert observer.phases_for("x1") == []
    assert dispatcher.phase("x1") == "pending"
    assert dispatcher.phase("p1") == "completed"
    assert world.occupied == {(0, 1, 0): 2}


def test_known_type_without_executor_fails_and_batch_continues() -> None:
    dispatcher, world, _, _ = make_dispatcher(with_move=False)

    dispatcher.process_batch(batch(move("m1", 2), place("p1")))

    assert dispatcher.phase("m1") == "failed"
    assert dispatcher.error("m1") == "No executor for command type: move_to"
    assert dispatcher.phase("p1") == "completed"


def test_failed_sibling_does_not_stop_batch() -> None:
    dispatcher, world, _, _ = make_dispatcher()

    dispatcher.process_batch(batch(place("p1", name="marble"), place("p2", offset_x=1)))

    assert dispatcher.phase("p1") == "failed"
    assert dispatcher.phase("p2") == "completed"
    assert world.occupied == {(1, 1, 0): 2}


def test_interrupt_marks_command_interrupted_and_continues() -> None:
    dispatcher, world, _, observer = make_dispatcher()
    dispatcher.process_batch(batch(move("m1", 10), place("p1")))

    assert dispatcher.is_active("m1")
    assert dispatcher.interrupt("m1") is True

    assert dispatcher.phase("m1") == "interrupted"
    assert dispatcher.error("m1") == "interrupted"
    assert not dispatcher.is_active("m1")
    assert dispatcher.phase("p1") == "completed"
    assert dispatcher.interrupt("m1") is False


def test_second_batch_waits_on_busy_executor_rules() -> None:
    dispatcher, _, _, _ = make_dispatcher()
    dispatcher.process_batch(batch(move("m1", 5)))
    dispatcher.process_batch(CommandBatch(goal_id="g2", session_id="s1", commands=[move("m2", 1)]))

    assert dispatcher.phase("m1") == "executing"
    assert dispatcher.phase("m2") == "failed"
    assert dispatcher.error("m2") == "move_to is already executing"


def test_invalid_command_data() -> None:
    dispatcher, _, _, observer = make_dispatcher()

    dispatcher.process_batch(batch(CommandData(id="c1", type=""), CommandData(id="", type="place_block")))

    assert dispatcher.phase("c1") == "failed"
    assert dispatcher.error("c1") == "Invalid command data"
    assert observer.phases_for("") == []


def test_duplicate_executor_types_are_rejected() -> None:
    ctx = ExecutorContext()
    with pytest.raises(ValueError):
        CommandDispatcher([PlaceBlockExecutor(ctx), PlaceBlockExecutor(ctx)])


def test_reset_interrupts_active_commands() -> None:
    dispatcher, _, _, observer = make_dispatcher()
    dispatcher.process_batch(batch(move("m1", 10)))

    dispatcher.reset()

    assert observer.phases_for("m1") == ["executing", "interrupted"]
    assert dispatcher.phase("m1") is None
    assert dispatcher.running_batches == 0


def test_reset_drops_commands_not_yet_started() -> None:
    dispatcher, world, _, observer = make_dispatcher()
    dispatcher.process_batch(batch(move("m1", 10), place("p1")))

    dispatcher.reset()

    assert observer.phases_for("p1") == []
    assert dispatcher.phase("p1") is None
    assert world.occupied == {}
    assert dispatcher.running_batches == 0


def test_reset_stops_queued_moves_from_running() -> None:
    dispatcher, world, _, observer = make_dispatcher()
    dispatcher.process_batch(batch(move("m1", 10), move("m2", 5)))

    dispatcher.reset()
    for _ in range(5):
        dispatcher.tick(0.5)

    assert observer.phases_for("m2") == []
    assert dispatcher.is_active("m2") is False
    assert world.agent_position() == Vec3(0, 0, 0)


def test_overflowing_params_fail_without_stopping_batch() -> None:
    dispatcher, world, _, _ = make_dispatcher()
    bad = CommandData(id="c1", type="place_block", params='{"voxel_name": "stone", "count": 1e400}')

    dispatcher.process_batch(batch(bad, place("p1")))

    assert dispatcher.phase("c1") == "failed"
    assert dispatcher.error("c1") == "Invalid PlaceBlockParams: count must be an integer"
    assert dispatcher.is_active("c1") is False
    assert dispatcher.phase("p1") == "completed"
    assert world.occupied == {(0, 1, 0): 2}
