from pokerclock_core import ClockController, apply_command, build_snapshot, default_state


def _levels():
    return [
        {"level": 1, "smallBlind": 25, "bigBlind": 50, "ante": 0, "durationSeconds": 60, "isBreak": False},
        {"level": 0, "durationSeconds": 30, "isBreak": True, "label": "Break"},
        {"level": 2, "smallBlind": 50, "bigBlind": 100, "ante": 100, "durationSeconds": 120, "isBreak": False},
    ]


def _running_state(index=0, remaining=60):
    state = default_state(_levels())
    state.update({"status": "running", "currentLevelIndex": index, "timeRemainingSeconds": remaining})
    return state


def test_default_state_starts_in_draft_with_first_level_duration():
    state = default_state(_levels())
    assert state["status"] == "draft"
    assert state["currentLevelIndex"] == 0
    assert state["timeRemainingSeconds"] == 60
    assert state["lastSyncedAt"] is None
    assert state["stateVersion"] == 0


def test_default_state_reads_legacy_duration_minutes():
    state = default_state([{"level": 1, "durationMinutes": 20}])
    assert state["timeRemainingSeconds"] == 1200


def test_empty_schedule_is_completed_and_start_is_noop():
    state = default_state([])
    assert state["status"] == "completed"
    assert state["timeRemainingSeconds"] == 0
    outcome = apply_command(state, {"type": "START"})
    assert not outcome.snapshot_required
    assert outcome.state == state


def test_start_and_pause_emit_snapshots_without_touching_time():
    state = default_state(_levels())
    outcome = apply_command(state, {"type": "START"})
    assert outcome.snapshot_required
    assert outcome.state["status"] == "running"
    assert outcome.state["timeRemainingSeconds"] == 60
    assert outcome.state["stateVersion"] == 1

    running = dict(outcome.state, timeRemainingSeconds=42)
    outcome = apply_command(running, {"type": "PAUSE"})
    assert outcome.snapshot_required
    assert outcome.state["status"] == "paused"
    assert outcome.state["timeRemainingSeconds"] == 42


def test_commands_invalid_for_status_are_noops():
    draft = default_state(_levels())
    assert not apply_command(draft, {"type": "PAUSE"}).snapshot_required
    assert not apply_command(draft, {"type": "RESET"}).snapshot_required
    assert not apply_command(draft, {"type": "TICK"}).snapshot_required
    running = _running_state()
    assert not apply_command(running, {"type": "START"}).snapshot_required
    assert not apply_command(running, {"type": "UNKNOWN"}).snapshot_required


def test_apply_command_does_not_mutate_input():
    state = _running_state(remaining=10)
    before = repr(state)
    apply_command(state, {"type": "TICK"})
    apply_command(state, {"type": "JUMP_TO_LEVEL", "index": 2})
    assert repr(state) == before


def test_tick_decrements_without_snapshot():
    outcome = apply_command(_running_state(remaining=30), {"type": "TICK"})
    assert outcome.state["timeRemainingSeconds"] == 29
    assert not outcome.snapshot_required
    assert outcome.events == ["tick"]


def test_tick_in_last_ten_seconds_emits_warning():
    outcome = apply_command(_running_state(remaining=11), {"type": "TICK"})
    assert outcome.events == ["tick", "warning"]
    outcome = apply_command(_running_state(remaining=12), {"type": "TICK"})
    assert outcome.events == ["tick"]


def test_tick_from_one_second_advances_to_next_level():
    outcome = apply_command(_running_state(index=0, remaining=1), {"type": "TICK"})
    assert outcome.snapshot_required
    assert outcome.state["status"] == "running"
    assert outcome.state["currentLevelIndex"] == 1
    assert outcome.state["timeRemainingSeconds"] == 30
    assert "level_advanced" in outcome.events


def test_tick_on_last_level_completes_and_never_goes_negative():
    outcome = apply_command(_running_state(index=2, remaining=1), {"type": "TICK"})
    assert outcome.state["status"] == "completed"
    assert outcome.state["timeRemainingSeconds"] == 0
    assert outcome.state["currentLevelIndex"] == 2
    assert outcome.events[-1] == "completed"

    after = apply_command(outcome.state, {"type": "TICK"})
    assert after.state["timeRemainingSeconds"] == 0
    assert not after.snapshot_required


def test_tick_at_zero_while_running_completes_level():
    outcome = apply_command(_running_state(index=0, remaining=0), {"type": "TICK"})
    assert outcome.state["currentLevelIndex"] == 1
    assert outcome.state["timeRemainingSeconds"] == 30
    assert outcome.events == ["level_advanced"]


def test_jump_to_level_pauses_with_full_duration():
    outcome = apply_command(_running_state(remaining=5), {"type": "JUMP_TO_LEVEL", "index": 2})
    assert outcome.snapshot_required
    assert outcome.state["status"] == "paused"
    assert outcome.state["currentLevelIndex"] == 2
    assert outcome.state["timeRemainingSeconds"] == 120


def test_jump_out_of_range_is_a_noop():
    state = _running_state(remaining=17)
    for index in (-1, 3, None, "x", True):
        outcome = apply_command(state, {"type": "JUMP_TO_LEVEL", "index": index})
        assert not outcome.snapshot_required
        assert repr(outcome.state) == repr(state)


def test_jump_from_completed_reopens_clock_paused():
    state = default_state(_levels())
    state.update({"status": "completed", "currentLevelIndex": 2, "timeRemainingSeconds": 0})
    outcome = apply_command(state, {"type": "JUMP_TO_LEVEL", "index": 1})
    assert outcome.state["status"] == "paused"
    assert outcome.state["timeRemainingSeconds"] == 30


def test_next_and_previous_level_stop_at_schedule_edges():
    state = default_state(_levels())
    outcome = apply_command(state, {"type": "PREVIOUS_LEVEL"})
    assert not outcome.snapshot_required
    outcome = apply_command(state, {"type": "NEXT_LEVEL"})
    assert outcome.state["currentLevelIndex"] == 1
    assert outcome.cmd_payload["index"] == 1
    last = dict(state, currentLevelIndex=2)
    assert not apply_command(last, {"type": "NEXT_LEVEL"}).snapshot_required


def test_reset_restores_full_duration_and_pauses():
    outcome = apply_command(_running_state(index=2, remaining=7), {"type": "RESET"})
    assert outcome.snapshot_required
    assert outcome.state["status"] == "paused"
    assert outcome.state["timeRemainingSeconds"] == 120


def test_toggle_switches_between_running_and_paused():
    outcome = apply_command(default_state(_levels()), {"type": "TOGGLE"})
    assert outcome.state["status"] == "running"
    assert outcome.cmd_payload["resolvedType"] == "START"
    outcome = apply_command(outcome.state, {"type": "TOGGLE"})
    assert outcome.state["status"] == "paused"


def test_build_snapshot_has_no_timestamp():
    snap = build_snapshot(_running_state(index=1, remaining=12))
    assert snap == {"status": "running", "currentLevelIndex": 1, "timeRemainingSeconds": 12}


def test_controller_persists_only_discrete_transitions():
    persisted = []
    clock = ClockController(_levels(), on_persist=persisted.append)
    clock.start()
    for _ in range(5):
        clock.tick()
    clock.pause()
    assert [s["status"] for s in persisted] == ["running", "paused"]
    assert persisted[-1]["timeRemainingSeconds"] == 55
    assert clock.remaining_seconds == 55


def test_controller_fires_hooks_through_level_change_and_completion():
    calls = []
    clock = ClockController(
        [{"level": 1, "durationSeconds": 2}, {"level": 2, "durationSeconds": 1}],
        on_tick=lambda remaining: calls.append(("tick", remaining)),
        on_warning=lambda remaining: calls.append(("warning", remaining)),
        on_level_advance=lambda: calls.append(("advance",)),
        on_complete=lambda: calls.append(("complete",)),
    )
    clock.start()
    clock.tick()
    clock.tick()
    clock.tick()
    assert calls == [
        ("tick", 1),
        ("warning", 1),
        ("tick", 0),
        ("advance",),
        ("tick", 0),
        ("complete",),
    ]
    assert clock.status == "completed"
    assert clock.remaining_seconds == 0


def test_muted_controller_suppresses_audible_notifications():
    calls = []
    clock = ClockController(
        [{"level": 1, "durationSeconds": 1}, {"level": 2, "durationSeconds": 60}],
        on_warning=lambda remaining: calls.append("warning"),
        on_level_advance=lambda: calls.append("advance"),
        muted=True,
    )
    clock.start()
    clock.tick()
    assert calls == []
    assert clock.current_level_index == 1


def test_controller_state_is_a_copy():
    clock = ClockController(_levels())
    snapshot = clock.state
    snapshot["status"] = "running"
    assert clock.status == "draft"


def test_controller_records_store_timestamp_as_high_water_mark():
    clock = ClockController(_levels(), on_persist=lambda snap: "2026-03-01T20:00:00Z")
    clock.start()
    assert clock.state["lastSyncedAt"] == "2026-03-01T20:00:00+00:00"
    # The store echoing our own write back is not adopted again.
    echo = {"status": "running", "currentLevelIndex": 0, "timeRemainingSeconds": 60,
            "updatedAt": "2026-03-01T20:00:00Z"}
    outcome = clock.reconcile(echo)
    assert not outcome.applied
    assert outcome.reason == "stale_snapshot"


def test_controller_exposes_upcoming_level():
    clock = ClockController(_levels())
    assert clock.next_level["isBreak"]
    clock.jump_to_level(2)
    assert clock.next_level is None
