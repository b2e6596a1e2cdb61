import pytest

from airedge.state import (
    IntermediateTIState,
    TaskInstanceState,
    TerminalTIState,
    TerminalTIStateNonSuccess,
)


def test_str_values():
    assert str(TaskInstanceState("up_for_retry")) == "up_for_retry"
    assert str(TerminalTIState.FAILED.to_task_instance_state()) == "failed"
    assert (
        str(IntermediateTIState.UPSTREAM_FAILED.to_task_instance_state())
        == "upstream_failed"
    )
    assert str(TerminalTIStateNonSuccess.SKIPPED.to_terminal_state()) == "skipped"


@pytest.mark.parametrize(
    "value, terminal, intermediate",
    [
        ("removed", True, False),
        ("scheduled", False, True),
        ("queued", False, True),
        ("running", False, False),
        ("success", True, False),
        ("restarting", False, True),
        ("failed", True, False),
        ("up_for_retry", False, True),
        ("up_for_reschedule", False, True),
        ("upstream_failed", False, True),
        ("skipped", True, False),
        ("deferred", False, True),
    ],
)
def test_classification(value, terminal, intermediate):
    state = TaskInstanceState(value)
    assert state.is_terminal() is terminal
    assert state.is_intermediate() is intermediate


@pytest.mark.parametrize(
    "cls", [IntermediateTIState, TerminalTIState, TerminalTIStateNonSuccess]
)
def test_round_trip_through_full_state(cls):
    for member in cls:
        full = member.to_task_instance_state()
        assert isinstance(full, TaskInstanceState)
        assert cls.from_task_instance_state(full) is member
        assert str(full) == str(member)


def test_narrowing_returns_none():
    assert IntermediateTIState.from_task_instance_state(TaskInstanceState.SUCCESS) is None
    assert TerminalTIState.from_task_instance_state(TaskInstanceState.RUNNING) is None
    assert (
        TerminalTIStateNonSuccess.from_task_instance_state(TaskInstanceState.SUCCESS)
        is None
    )


def test_non_success_and_terminal():
    assert TerminalTIStateNonSuccess.from_terminal_state(TerminalTIState.SUCCESS) is None
    for member in TerminalTIStateNonSuccess:
        terminal = member.to_terminal_state()
        assert TerminalTIStateNonSuccess.from_terminal_state(terminal) is member
        assert terminal.to_task_instance_state() == member.to_task_instance_state()


def test_intermediate_matches_predicate():
    for state in TaskInstanceState:
        narrowed = IntermediateTIState.from_task_instance_state(state)
        assert (narrowed is not None) == state.is_intermediate()