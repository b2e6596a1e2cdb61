"""Interface of a client for the edge API and the errors it raises."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from .api_models import (
    EdgeJobFetched,
    HealthReturn,
    WorkerRegistrationReturn,
    WorkerSetStateReturn,
)
from .edge_models import EdgeWorkerState, SysInfo
from .state import TaskInstanceState
from .taskinstance import TaskInstanceKey


class EdgeApiError(Exception):
    """Base class of all errors raised by an edge API client."""


class EdgeNotEnabledError(EdgeApiError):
    """The edge provider is not enabled on the server."""

    def __init__(self) -> None:
        super().__init__("Edge provider not enabled on server.")


class VersionMismatchError(EdgeApiError):
    """The server rejected the worker because of a version mismatch."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Version mismatch: {message}")


class EdgeApiClient(ABC):
    """Asynchronous client of the edge API."""

    @abstractmethod
    async def health(self) -> HealthReturn:
        """Check the health of the edge API."""

    @abstractmethod
    async def worker_register(
        self,
        hostname: str,
        state: EdgeWorkerState,
        queues: list[str] | None,
        sysinfo: SysInfo,
    ) -> WorkerRegistrationReturn:
        """Register the worker with the edge API."""

    @abstractmethod
    async def worker_set_state(
        self,
        hostname: str,
        state: EdgeWorkerState,
        jobs_active: int,
        queues: list[str] | None,
        sysinfo: SysInfo,
        maintenance_comments: str | None,
    ) -> WorkerSetStateReturn:
        """Update the worker's state on the central site, which also heartbeats."""

    @abstractmethod
    async def jobs_fetch(
        self,
        hostname: str,
        queues: list[str] | None,
        free_concurrency: int,
    ) -> EdgeJobFetched | None:
        """Fetch a job to execute, or None if there is none."""

    @abstractmethod
    async def jobs_set_state(
        self, key: TaskInstanceKey, state: TaskInstanceState
    ) -> None:
        """Set the state of a job."""

    @abstractmethod
    async def logs_logfile_path(self, key: TaskInstanceKey) -> str:
        """Return the log file path to expect from a task's execution."""

    @abstractmethod
    async def logs_push(
        self,
        key: TaskInstanceKey,
        log_chunk_time: datetime,
        log_chunk_data: str,
    ) -> None:
        """Push an incremental chunk of log text to the central site."""