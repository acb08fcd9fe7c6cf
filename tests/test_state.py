from datetime import datetime, timezone

import pytest

from kubehop.state import HookState, StateError, get_hook_state, update_hook_state


def test_missing_state_file_returns_none(tmp_path):
    assert get_hook_state(tmp_path / "absent.state") is None


def test_empty_state_file_returns_default(tmp_path):
    path = tmp_path / "hook.state"
    path.write_text("")
    assert get_hook_state(path) == HookState()


def test_update_then_get_round_trip(tmp_path):
    path = tmp_path / "hook.state"
    before = datetime.now(timezone.utc).replace(microsecond=0)
    update_hook_state("my-hook", path)
    after = datetime.now(timezone.utc)

    state = get_hook_state(path)
    assert state.hook_name == "my-hook"
    assert before <= state.last_execution_time <= after


def test_update_replaces_previous_state(tmp_path):
    path = tmp_path / "hook.state"
    update_hook_state("first", path)
    update_hook_state("second", path)
    assert get_hook_state(path).hook_name == "second"


def test_reads_unquoted_nanosecond_timestamp(tmp_path):
    path = tmp_path / "hook.state"
    path.write_text("hookName: sync\nlastExecutionTime: 2021-05-01T10:20:30.123456789Z\n")
    state = get_hook_state(path)
    assert state.hook_name == "sync"
    assert state.last_execution_time == datetime(2021, 5, 1, 10, 20, 30, 123456, tzinfo=timezone.utc)


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "hook.state"
    path.write_text("hookName: [unclosed")
    with pytest.raises(StateError):
        get_hook_state(path)


def test_non_mapping_raises(tmp_path):
    path = tmp_path / "hook.state"
    path.write_text("- a\n- b\n")
    with pytest.raises(StateError):
        get_hook_state(path)


def test_invalid_timestamp_raises(tmp_path):
    path = tmp_path / "hook.state"
    path.write_text("hookName: sync\nlastExecutionTime: yesterday\n")
    with pytest.raises(StateError):
        get_hook_state(path)