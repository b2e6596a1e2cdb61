"""Responses returned by the edge API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .edge_models import EdgeWorkerState
from .map_index import MapIndex
from .serialization import (
    _enum_field,
    _field,
    _map_index_field,
    _parse_datetime,
    _require_mapping,
    _str_list_field,
    _unsigned,
)
from .taskinstance import TaskInstanceLike
from .workloads import ExecuteTask


@dataclass(frozen=True)
class HealthReturn:
    """Result of a health check."""

    status: str

    @classmethod
    def from_dict(cls, data: Any) -> HealthReturn:
        _require_mapping(data, "HealthReturn")
        return cls(status=_field(data, "status", str))


@dataclass(frozen=True)
class WorkerRegistrationReturn:
    """Result of a worker registration."""

    last_update: datetime

    @classmethod
    def from_dict(cls, data: Any) -> WorkerRegistrationReturn:
        _require_mapping(data, "WorkerRegistrationReturn")
        return cls(last_update=_parse_datetime(_field(data, "last_update", str)))


@dataclass(frozen=True)
class WorkerSetStateReturn:
    """Result of setting a worker's state."""

    state: EdgeWorkerState
    queues: list[str] | None = None
    maintenance_comments: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> WorkerSetStateReturn:
        _require_mapping(data, "WorkerSetStateReturn")
        return cls(
            state=_enum_field(data, "state", EdgeWorkerState),
            queues=_str_list_field(data, "queues", optional=True),
            maintenance_comments=_field(data, "maintenance_comments", str, optional=True),
        )


@dataclass(frozen=True)
class EdgeJobFetched(TaskInstanceLike):
    """A job to be executed on the edge worker."""

    dag_id: str
    task_id: str
    run_id: str
    map_index: MapIndex
    try_number: int
    command: ExecuteTask
    concurrency_slots: int

    @classmethod
    def from_dict(cls, data: Any) -> EdgeJobFetched:
        _require_mapping(data, "EdgeJobFetched")
        return cls(
            dag_id=_field(data, "dag_id", str),
            task_id=_field(data, "task_id", str),
            run_id=_field(data, "run_id", str),
            map_index=_map_index_field(data, "map_index"),
            try_number=_unsigned(data, "try_number"),
            command=ExecuteTask.from_dict(_field(data, "command", dict)),
            concurrency_slots=_unsigned(data, "concurrency_slots"),
        )