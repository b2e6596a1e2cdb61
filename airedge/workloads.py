"""Workloads handed from the scheduler to workers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from .map_index import MapIndex
from .serialization import (
    JsonSerdeError,
    _field,
    _format_datetime,
    _map_index_field,
    _parse_datetime,
    _require_mapping,
    _unsigned,
)
from .taskinstance import TaskInstanceLike
from .types import SecretString

UniqueTaskInstanceId = UUID


@dataclass(frozen=True)
class BundleInfo:
    """Which bundle a task runs with."""

    name: str
    version: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "version": self.version}

    @classmethod
    def from_dict(cls, data: Any) -> BundleInfo:
        _require_mapping(data, "BundleInfo")
        return cls(
            name=_field(data, "name", str),
            version=_field(data, "version", str, optional=True),
        )


@dataclass(frozen=True)
class TaskInstance(TaskInstanceLike):
    """A task instance with the fields executors and the task SDK need."""

    id: UUID
    task_id: str
    dag_id: str
    run_id: str
    try_number: int
    map_index: MapIndex
    pool_slots: int
    queue: str
    priority_weight: int
    queued_dttm: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "task_id": self.task_id,
            "dag_id": self.dag_id,
            "run_id": self.run_id,
            "try_number": self.try_number,
            "map_index": self.map_index.to_int(),
            "pool_slots": self.pool_slots,
            "queue": self.queue,
            "priority_weight": self.priority_weight,
            "queued_dttm": (
                None if self.queued_dttm is None else _format_datetime(self.queued_dttm)
            ),
        }

    @classmethod
    def from_dict(cls, data: Any) -> TaskInstance:
        _require_mapping(data, "TaskInstance")
        raw_id = _field(data, "id", str)
        try:
            ti_id = UUID(raw_id)
        except ValueError as exc:
            raise JsonSerdeError(f"invalid UUID: {raw_id!r}") from exc
        queued = _field(data, "queued_dttm", str, optional=True)
        return cls(
            id=ti_id,
            task_id=_field(data, "task_id", str),
            dag_id=_field(data, "dag_id", str),
            run_id=_field(data, "run_id", str),
            try_number=_unsigned(data, "try_number"),
            map_index=_map_index_field(data, "map_index"),
            pool_slots=_unsigned(data, "pool_slots"),
            queue=_field(data, "queue", str),
            priority_weight=_unsigned(data, "priority_weight"),
            queued_dttm=None if queued is None else _parse_datetime(queued),
        )


@dataclass(frozen=True)
class ExecuteTask:
    """Instruction to execute the given task."""

    token: SecretString
    ti: TaskInstance
    dag_rel_path: str
    bundle_info: BundleInfo
    log_path: str | None = None

    TYPE = "ExecuteTask"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.TYPE,
            "token": self.token.secret(),
            "ti": self.ti.to_dict(),
            "dag_rel_path": self.dag_rel_path,
            "bundle_info": self.bundle_info.to_dict(),
            "log_path": self.log_path,
        }

    @classmethod
    def from_dict(cls, data: Any) -> ExecuteTask:
        _require_mapping(data, "ExecuteTask")
        tag = _field(data, "type", str)
        if tag != cls.TYPE:
            raise JsonSerdeError(f"unknown variant `{tag}`, expected `{cls.TYPE}`")
        return cls(
            token=SecretString(_field(data, "token", str)),
            ti=TaskInstance.from_dict(_field(data, "ti", dict)),
            dag_rel_path=_field(data, "dag_rel_path", str),
            bundle_info=BundleInfo.from_dict(_field(data, "bundle_info", dict)),
            log_path=_field(data, "log_path", str, optional=True),
        )