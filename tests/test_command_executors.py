#tests/test_command_executors.py
"""
Tests for commands.executors and commands.completion

Covers:
- place_block target cells in the agent's local basis
- place_block type resolution (id first, then name) and failures
- Params that cannot be decoded (overflow, unexpected errors) fail locally
- destroy_block name/id filtering
- move_to arrival, timeout and interruption over ticks
- Busy executors reject a second execute()
- create_voxel_type / update_voxel_type partial updates
- continue_plan with and without a snapshot
- Completion reports exactly once
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from capture.bus import EventBus
from capture.payloads import ContinuePlanPayload, VoxelTypeCreatedPayload, VoxelTypeUpdatedPayload
from commands.base import ExecutorContext
from commands.completion import Completion
from commands.executors import (
    ContinuePlanExecutor,
    CreateVoxelTypeExecutor,
    DestroyBlockExecutor,
    MovementConfig,
    MoveToExecutor,
    PlaceBlockExecutor,
    UpdateVoxelTypeExecutor,
)
from commands.executors.continue_plan import order_photos
from world.grid import VoxelGrid
from world.registry import InMemoryVoxelTypeRegistry
from world.testing.fakes import FakePhotoCapture, RecordingObserver
from world_state.schema import Vec3


class Results:
    def __init__(self) -> None:
        self.calls: List[Tuple[bool, Optional[str]]] = []

    def __call__(self, success: bool, reason: Optional[str]) -> None:
        self.calls.append((success, reason))


def make_context(agent=(5.0, 10.0, 5.0), capture=None) -> ExecutorContext:
    registry = InMemoryVoxelTypeRegistry()
    registry.register(1, "base")
    registry.register(2, "stone", display_name="Cobble")
    registry.register(3, "dirt")
    world = VoxelGrid(agent_position=Vec3(*agent), operator_position=Vec3(0, 0, 0))
    bus = EventBus()
    registry.set_bus(bus)
    return ExecutorContext(
        world=world,
        body=world,
        registry=registry,
        bus=bus,
        capture=capture,
        observer=RecordingObserver(),
    )


# ---------------------------------------------------------------------------
# place_block
# ---------------------------------------------------------------------------


def test_place_block_stacks_up_from_agent_cell() -> None:
    ctx = make_context()
    results = Results()

    PlaceBlockExecutor(ctx).execute(
        "c1",
        '{"start_offset": {"x": 0, "y": 0, "z": 0}, "expand_direction": "up", "count": 3, "voxel_name": "stone"}',
        results,
    )

    assert results.calls == [(True, None)]
    assert ctx.world.occupied == {(5, 10, 5): 2, (5, 11, 5): 2, (5, 12, 5): 2}


def test_place_block_uses_local_basis() -> None:
    ctx = make_context(agent=(0.0, 0.0, 0.0))
    ctx.world.set_basis(
        right=Vec3(0, 0, -1),
        up=Vec3(0, 1, 0),
        forward=Vec3(1, 0, 0),
    )
    results = Results()

    PlaceBlockExecutor(ctx).execute(
        "c1",
        {"start_offset": {"x": 0, "y": 0, "z": 2}, "expand_direction": "right", "count": 2, "voxel_id": "3"},
        results,
    )

    assert results.calls == [(True, None)]
    assert set(ctx.world.occupied) == {(2, 0, 0), (2, 0, -1)}


def test_place_block_voxel_id_wins_over_name() -> None:
    ctx = make_context()
    PlaceBlockExecutor(ctx).execute("c1", {"voxel_id": "3", "voxel_name": "stone"}, Results())
    assert ctx.world.voxel_at((5, 10, 5)) == 3


def test_place_block_falls_back_to_display_name() -> None:
    ctx = make_context()
    PlaceBlockExecutor(ctx).execute("c1", {"voxel_id": "99", "voxel_name": "cobble"}, Results())
    assert ctx.world.voxel_at((5, 10, 5)) == 2


def test_place_block_unknown_type_fails() -> None:
    ctx = make_context()
    results = Results()

    PlaceBlockExecutor(ctx).execute("c1", {"voxel_name": "marble", "voxel_id": "77"}, results)

    assert results.calls == [(False, "Voxel type not found: marble (id: 77)")]
    assert ctx.world.occupied == {}


def test_place_block_invalid_direction_fails_for_runs() -> None:
    ctx = make_context()
    results = Results()

    PlaceBlockExecutor(ctx).execute(
        "c1", {"expand_direction": "sideways", "count": 2, "voxel_name": "stone"}, results
    )

    assert results.calls == [(False, "Invalid expand_direction: sideways")]


def test_place_block_single_cell_ignores_bad_direction() -> None:
    ctx = make_context()
    results = Results()

    PlaceBlockExecutor(ctx).execute("c1", {"expand_direction": "sideways", "voxel_name": "stone"}, results)

    assert results.calls == [(True, None)]


def test_place_block_invalid_params_fail() -> None:
    ctx = make_context()
    results = Results()

    PlaceBlockExecutor(ctx).execute("c1", "{not json", results)

    assert results.calls[0][0] is False
    assert results.calls[0][1].startswith("Invalid PlaceBlockParams:")


def test_place_block_overflowing_count_fails() -> None:
    ctx = make_context()
    results = Results()
    executor = PlaceBlockExecutor(ctx)

    executor.execute("c1", '{"voxel_name": "stone", "count": 1e400}', results)

    assert results.calls == [(False, "Invalid PlaceBlockParams: count must be an integer")]
    assert executor.busy is False
    assert ctx.world.occupied == {}


def test_place_block_overflowing_offset_fails() -> None:
    ctx = make_context()
    results = Results()
    huge = "1" + "0" * 400

    PlaceBlockExecutor(ctx).execute("c1", '{"voxel_name": "stone", "start_offset": {"x": %s}}' % huge, results)

    assert results.calls == [(False, "Invalid PlaceBlockParams: start_offset has a non-numeric component")]


def test_unexpected_decode_error_becomes_failure() -> None:
    class BrokenParse(PlaceBlockExecutor):
        def parse(self, params):
            raise RuntimeError("decoder exploded")

    results = Results()
    executor = BrokenParse(make_context())

    executor.execute("c1", {"voxel_name": "stone"}, results)

    assert results.calls == [(False, "Invalid PlaceBlockParams: decoder exploded")]
    assert executor.busy is False


def test_place_block_without_agent_fails() -> None:
    ctx = make_context()
    ctx.body = VoxelGrid()
    results = Results()

    PlaceBlockExecutor(ctx).execute("c1", {"voxel_name": "stone"}, results)

    assert results.calls == [(False, "Agent not available")]


# ---------------------------------------------------------------------------
# destroy_block
# ---------------------------------------------------------------------------


def test_destroy_block_filters_by_name() -> None:
    ctx = make_context()
    ctx.world.place_voxel((5, 10, 6), 2)
    ctx.world.place_voxel((5, 10, 7), 3)
    results = Results()

    DestroyBlockExecutor(ctx).execute(
        "c1",
        {"start_offset": {"x": 0, "y": 0, "z": 1}, "expand_direction": "front", "count": 2, "voxel_names": ["stone"]},
        results,
    )

    assert results.calls == [(True, None)]
    assert ctx.world.occupied == {(5, 10, 7): 3}


def test_destroy_block_filters_by_id_and_display_name() -> None:
    ctx = make_context()
    ctx.world.fill([(5, 10, 5), (5, 11, 5), (5, 12, 5)], 2)
    ctx.world.place_voxel((5, 11, 5), 3)

    DestroyBlockExecutor(ctx).execute(
        "c1", {"count": 3, "voxel_ids": ["3"], "voxel_names": ["COBBLE"]}, Results()
    )

    assert ctx.world.occupied == {}


def test_destroy_block_without_filter_removes_everything_in_range() -> None:
    ctx = make_context()
    ctx.world.fill([(5, 10, 5), (5, 12, 5)], 3)
    results = Results()

    DestroyBlockExecutor(ctx).execute("c1", {"count": 3}, results)

    assert results.calls == [(True, None)]
    assert ctx.world.occupied == {}


# ---------------------------------------------------------------------------
# move_to
# ---------------------------------------------------------------------------


def test_move_to_arrives_over_ticks() -> None:
    ctx = make_context(agent=(0.0, 0.0, 0.0))
    results = Results()
    mover = MoveToExecutor(ctx, MovementConfig(speed=2.0, tolerance=0.1, timeout_s=30.0))

    mover.execute("m1", {"target_pos": {"x": 0, "y": 0, "z": 3}}, results)
    assert results.calls == []
    assert mover.busy

    mover.tick(1.0)
    assert ctx.world.agent_position() == Vec3(0.0, 0.0, 2.0)
    assert results.calls == []

    mover.tick(1.0)
    assert results.calls == [(True, None)]
    assert ctx.world.agent_position() == Vec3(0.0, 0.0, 3.0)
    assert not mover.busy


def test_move_to_zero_offset_completes_immediately() -> None:
    ctx = make_context()
    results = Results()

    MoveToExecutor(ctx).execute("m1", {"target_pos": {"x": 0, "y": 0, "z": 0}}, results)

    assert results.calls == [(True, None)]


def test_move_to_requires_target() -> None:
    results = Results()
    MoveToExecutor(make_context()).execute("m1", {}, results)
    assert results.calls == [(False, "Invalid MoveToParams: target_pos is required")]


def test_move_to_times_out() -> None:
    ctx = make_context(agent=(0.0, 0.0, 0.0))
    results = Results()
    mover = MoveToExecutor(ctx, MovementConfig(speed=0.1, timeout_s=1.0))

    mover.execute("m1", {"target_pos": {"x": 100, "y": 0, "z": 0}}, results)
    mover.tick(0.5)
    mover.tick(0.5)

    assert results.calls == [(False, "Movement timeout")]
    mover.tick(0.5)
    assert len(results.calls) == 1


def test_move_to_interrupt_reports_once() -> None:
    ctx = make_context(agent=(0.0, 0.0, 0.0))
    results = Results()
    mover = MoveToExecutor(ctx)

    mover.execute("m1", {"target_pos": {"x": 50, "y": 0, "z": 0}}, results)
    assert mover.interrupt() is True
    mover.tick(1.0)

    assert results.calls == [(False, "interrupted")]
    assert not mover.busy


def test_busy_executor_rejects_second_command() -> None:
    ctx = make_context(agent=(0.0, 0.0, 0.0))
    first, second = Results(), Results()
    mover = MoveToExecutor(ctx)

    mover.execute("m1", {"target_pos": {"x": 50, "y": 0, "z": 0}}, first)
    mover.execute("m2", {"target_pos": {"x": 1, "y": 0, "z": 0}}, second)

    assert second.calls == [(False, "move_to is already executing")]
    assert first.calls == []
    assert mover.current_command_id == "m1"


# ---------------------------------------------------------------------------
# Voxel types
# ---------------------------------------------------------------------------


def test_create_voxel_type_publishes_agent_initiated_event() -> None:
    ctx = make_context()
    created: List[VoxelTypeCreatedPayload] = []
    ctx.bus.subscribe(VoxelTypeCreatedPayload, created.append)
    results = Results()

    CreateVoxelTypeExecutor(ctx).execute(
        "v1", {"voxel_type": {"name": "glass", "face_textures": ["glass.png"]}}, results
    )

    assert results.calls == [(True, None)]
    assert created[0].initiator == "agent"
    assert ctx.registry.find_by_name("glass").id == "4"


def test_create_voxel_type_requires_name() -> None:
    results = Results()
    CreateVoxelTypeExecutor(make_context()).execute("v1", {"voxel_type": {"description": "x"}}, results)
    assert results.calls == [(False, "Invalid CreateVoxelTypeParams: voxel_type.name is required")]


def test_update_voxel_type_changes_only_supplied_fields() -> None:
    ctx = make_context()
    ctx.registry.register(5, "glass", "Clear", ["a.png", "b.png"])
    updated: List[VoxelTypeUpdatedPayload] = []
    ctx.bus.subscribe(VoxelTypeUpdatedPayload, updated.append)
    results = Results()

    UpdateVoxelTypeExecutor(ctx).execute(
        "v2",
        {"voxel_id": "5", "new_voxel_type": {"description": "Frosted", "face_textures": ["", "c.png"]}},
        results,
    )

    assert results.calls == [(True, None)]
    glass = ctx.registry.lookup(5)
    assert glass.name == "glass"
    assert glass.description == "Frosted"
    assert glass.face_textures[:2] == ["a.png", "c.png"]
    assert updated[0].old_voxel_type.description == "Clear"


def test_update_voxel_type_failures() -> None:
    ctx = make_context()
    executor = UpdateVoxelTypeExecutor(ctx)
    bad_id, missing = Results(), Results()

    executor.execute("v1", {"voxel_id": "abc", "new_voxel_type": {}}, bad_id)
    executor.execute("v2", {"voxel_id": "42", "new_voxel_type": {}}, missing)

    assert bad_id.calls == [(False, "Invalid voxel_id: abc")]
    assert missing.calls == [(False, "Voxel type not found: 42")]


# ---------------------------------------------------------------------------
# continue_plan
# ---------------------------------------------------------------------------


def test_continue_plan_without_snapshot_publishes_immediately() -> None:
    ctx = make_context()
    published: List[ContinuePlanPayload] = []
    ctx.bus.subscribe(ContinuePlanPayload, published.append)
    results = Results()

    ContinuePlanExecutor(ctx).execute(
        "p1",
        {"current_summary": "Walls done", "possible_next_steps": ["roof", "door"]},
        results,
    )

    assert results.calls == [(True, None)]
    assert published[0].to_wire() == {
        "current_summary": "Walls done",
        "possible_next_steps": "roof, door",
        "image": [],
    }


def test_continue_plan_with_snapshot_waits_for_capture() -> None:
    capture = FakePhotoCapture(
        file_names=["AgentCam_right_x.png", "AgentCam_front_x.png", "AgentCam_left_x.png", "AgentCam_back_x.png"],
        deferred=True,
    )
    ctx = make_context(capture=capture)
    published: List[ContinuePlanPayload] = []
    ctx.bus.subscribe(ContinuePlanPayload, published.append)
    results = Results()
    executor = ContinuePlanExecutor(ctx)

    executor.execute("p1", {"current_summary": "s", "request_snapshot": True}, results)
    assert results.calls == []
    assert executor.busy

    capture.complete()

    assert results.calls == [(True, None)]
    names = [img.file_name for img in published[0].images]
    assert names == ["AgentCam_front_x.png", "AgentCam_back_x.png", "AgentCam_left_x.png", "AgentCam_right_x.png"]
    assert ctx.observer.images == [names]


def test_continue_plan_failed_snapshot() -> None:
    capture = FakePhotoCapture(file_names=[])
    ctx = make_context(capture=capture)
    published: List[ContinuePlanPayload] = []
    ctx.bus.subscribe(ContinuePlanPayload, published.append)
    results = Results()

    ContinuePlanExecutor(ctx).execute("p1", {"request_snapshot": "true"}, results)

    assert results.calls == [(False, "Failed to take snapshot")]
    assert published == []


def test_continue_plan_interrupted_during_capture() -> None:
    capture = FakePhotoCapture(deferred=True)
    ctx = make_context(capture=capture)
    results = Results()
    executor = ContinuePlanExecutor(ctx)

    executor.execute("p1", {"request_snapshot": True}, results)
    executor.interrupt()
    capture.complete()

    assert results.calls == [(False, "interrupted")]


def test_order_photos_puts_unknown_last() -> None:
    assert order_photos(["x.png", "back_1.png", "front_1.png", ""]) == ["front_1.png", "back_1.png", "x.png"]


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------


def test_completion_forwards_first_report_only() -> None:
    results = Results()
    done = Completion(results, "place_block:c1")

    done(True, None)
    done(False, "late")

    assert results.calls == [(True, None)]
    assert done.call_count == 2
    assert done.success is True
    assert done.done
