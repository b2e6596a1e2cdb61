"""Interfaces between the edge worker and the environment that runs its jobs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from .api_models import EdgeJobFetched
from .taskinstance import TaskInstanceKey

if TYPE_CHECKING:
    from .edge_worker import WorkerState


@dataclass(frozen=True)
class IntercomMessage:
    """A message delivered to a running edge worker."""


@dataclass(frozen=True)
class Shutdown(IntercomMessage):
    """Stop fetching jobs and shut down once running jobs have completed."""


@dataclass(frozen=True)
class Terminate(IntercomMessage):
    """Abort all running jobs and shut down immediately."""


@dataclass(frozen=True)
class JobCompleted(IntercomMessage):
    """A job has completed."""

    key: TaskInstanceKey


class Intercom(ABC):
    """Sends messages to an edge worker."""

    @abstractmethod
    async def send(self, msg: IntercomMessage) -> None:
        """Deliver ``msg`` to the worker."""


class EdgeJob(ABC):
    """A job launched by a worker runtime."""

    @abstractmethod
    def is_running(self) -> bool:
        """True while the job has not finished."""

    @abstractmethod
    def abort(self) -> None:
        """Abort the job."""

    @abstractmethod
    def ti_key(self) -> TaskInstanceKey:
        """Key of the task instance the job executes."""

    @abstractmethod
    def concurrency_slots(self) -> int:
        """Number of concurrency slots the job occupies."""

    @abstractmethod
    async def is_success(self) -> bool:
        """True if the finished job succeeded."""


class WorkerRuntime(ABC):
    """The environment an edge worker runs in."""

    @abstractmethod
    async def sleep(self, duration: timedelta) -> IntercomMessage | None:
        """Wait up to ``duration``; return a message if one arrived meanwhile."""

    @abstractmethod
    def intercom(self) -> Intercom:
        """Return a handle for sending messages to the worker."""

    @abstractmethod
    def launch(self, job: EdgeJobFetched, dag_bag: Any) -> EdgeJob:
        """Start executing ``job`` with the DAGs in ``dag_bag``."""

    @abstractmethod
    def concurrency(self) -> int:
        """Total number of concurrency slots available."""

    @abstractmethod
    async def on_update(self, state: WorkerState) -> None:
        """Called whenever the worker's state may have changed."""

    @abstractmethod
    def hostname(self) -> str:
        """Name of the host the worker runs on."""