"""Identification of task instances."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .map_index import MapIndex
from .serialization import _field, _map_index_field, _require_mapping, _unsigned


class TaskInstanceLike:
    """Mixin for types that describe a task instance."""

    dag_id: str
    task_id: str
    run_id: str
    try_number: int
    map_index: MapIndex

    def ti_key(self) -> TaskInstanceKey:
        """Return the key identifying this task instance."""
        return TaskInstanceKey(
            self.dag_id, self.task_id, self.run_id, self.try_number, self.map_index
        )


@dataclass(frozen=True)
class TaskInstanceKey(TaskInstanceLike):
    """Key used to identify a task instance."""

    dag_id: str
    task_id: str
    run_id: str
    try_number: int
    map_index: MapIndex

    def __str__(self) -> str:
        return (
            f"{self.dag_id}.{self.task_id} {self.run_id}, "
            f"try_number: {self.try_number}, map_index: {self.map_index}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "dag_id": self.dag_id,
            "task_id": self.task_id,
            "run_id": self.run_id,
            "try_number": self.try_number,
            "map_index": self.map_index.to_int(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> TaskInstanceKey:
        _require_mapping(data, "TaskInstanceKey")
        return cls(
            dag_id=_field(data, "dag_id", str),
            task_id=_field(data, "task_id", str),
            run_id=_field(data, "run_id", str),
            try_number=_unsigned(data, "try_number"),
            map_index=_map_index_field(data, "map_index"),
        )