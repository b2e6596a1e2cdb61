"""Task instance states and their narrower subsets."""

from __future__ import annotations

from enum import Enum


class TaskInstanceState(str, Enum):
    """All possible states that a task instance can be in."""

    REMOVED = "removed"
    SCHEDULED = "scheduled"
    QUEUED = "queued"
    RUNNING = "running"
    SUCCESS = "success"
    RESTARTING = "restarting"
    FAILED = "failed"
    UP_FOR_RETRY = "up_for_retry"
    UP_FOR_RESCHEDULE = "up_for_reschedule"
    UPSTREAM_FAILED = "upstream_failed"
    SKIPPED = "skipped"
    DEFERRED = "deferred"

    def is_terminal(self) -> bool:
        """True if the task instance has reached a terminal state."""
        return TerminalTIState.from_task_instance_state(self) is not None

    def is_intermediate(self) -> bool:
        """True if the task instance is neither terminal nor running."""
        return IntermediateTIState.from_task_instance_state(self) is not None

    def __str__(self) -> str:
        return self.value


class _SubState(str, Enum):
    def to_task_instance_state(self) -> TaskInstanceState:
        return TaskInstanceState(self.value)

    @classmethod
    def from_task_instance_state(cls, state: TaskInstanceState):
        try:
            return cls(state.value)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


class IntermediateTIState(_SubState):
    """States that are neither terminal nor running."""

    SCHEDULED = "scheduled"
    QUEUED = "queued"
    RESTARTING = "restarting"
    UP_FOR_RETRY = "up_for_retry"
    UP_FOR_RESCHEDULE = "up_for_reschedule"
    UPSTREAM_FAILED = "upstream_failed"
    DEFERRED = "deferred"

    def to_task_instance_state(self) -> TaskInstanceState:
        return TaskInstanceState(self.value)

    @classmethod
    def from_task_instance_state(
        cls, state: TaskInstanceState
    ) -> IntermediateTIState | None:
        """Narrow a state, or return None if it is not intermediate."""
        try:
            return cls(state.value)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


class TerminalTIState(_SubState):
    """States that are terminal."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    REMOVED = "removed"

    def to_task_instance_state(self) -> TaskInstanceState:
        return TaskInstanceState(self.value)

    @classmethod
    def from_task_instance_state(
        cls, state: TaskInstanceState
    ) -> TerminalTIState | None:
        """Narrow a state, or return None if it is not terminal."""
        try:
            return cls(state.value)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


class TerminalTIStateNonSuccess(_SubState):
    """Terminal states other than success."""

    REMOVED = "removed"
    FAILED = "failed"
    SKIPPED = "skipped"

    def to_task_instance_state(self) -> TaskInstanceState:
        return TaskInstanceState(self.value)

    def to_terminal_state(self) -> TerminalTIState:
        return TerminalTIState(self.value)

    @classmethod
    def from_task_instance_state(
        cls, state: TaskInstanceState
    ) -> TerminalTIStateNonSuccess | None:
        """Narrow a state, or return None if it is not a terminal failure-like state."""
        try:
            return cls(state.value)
        except ValueError:
            return None

    @classmethod
    def from_terminal_state(
        cls, state: TerminalTIState
    ) -> TerminalTIStateNonSuccess | None:
        """Narrow a terminal state, or return None for success."""
        try:
            return cls(state.value)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value