"""Models describing an edge worker."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .serialization import _field, _require_mapping, _unsigned


class EdgeWorkerState(str, Enum):
    """Status of an edge worker instance."""

    STARTING = "starting"
    RUNNING = "running"
    IDLE = "idle"
    TERMINATING = "terminating"
    OFFLINE = "offline"
    UNKNOWN = "unknown"
    MAINTENANCE_REQUEST = "maintenance_request"
    MAINTENANCE_PENDING = "maintenance_pending"
    MAINTENANCE_MODE = "maintenance_mode"
    MAINTENANCE_EXIT = "maintenance_exit"
    OFFLINE_MAINTENANCE = "offline_maintenance"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SysInfo:
    """System information of a worker."""

    airflow_version: str
    edge_provider_version: str
    concurrency: int
    free_concurrency: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "airflow_version": self.airflow_version,
            "edge_provider_version": self.edge_provider_version,
            "concurrency": self.concurrency,
            "free_concurrency": self.free_concurrency,
        }

    @classmethod
    def from_dict(cls, data: Any) -> SysInfo:
        _require_mapping(data, "SysInfo")
        return cls(
            airflow_version=_field(data, "airflow_version", str),
            edge_provider_version=_field(data, "edge_provider_version", str),
            concurrency=_unsigned(data, "concurrency"),
            free_concurrency=_unsigned(data, "free_concurrency"),
        )