"""The edge worker: registers, heartbeats, fetches and supervises jobs."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterator

from .api_models import EdgeJobFetched
from .client import EdgeApiClient, EdgeApiError, VersionMismatchError
from .clock import MIN_UTC, TimeProvider
from .edge_models import EdgeWorkerState, SysInfo
from .runtime import EdgeJob, JobCompleted, Shutdown, Terminate, WorkerRuntime
from .state import TaskInstanceState

logger = logging.getLogger(__name__)

EDGE_HEARTBEAT_INTERVAL = 30
"""Seconds between heartbeats when nothing else triggers one."""

EDGE_JOB_POLL_INTERVAL = 5
"""Seconds to sleep between polls for new jobs."""


@dataclass
class WorkerState:
    """Mutable state of an edge worker."""

    concurrency: int
    airflow_version: str
    edge_provider_version: str
    used_concurrency: int = 0
    last_heartbeat: datetime = MIN_UTC
    drain: bool = False
    maintenance_mode: bool = False
    maintenance_comments: str | None = None

    def free_concurrency(self) -> int:
        """Number of slots not used by running jobs."""
        return self.concurrency - self.used_concurrency

    def sys_info(self) -> SysInfo:
        """System information reported to the central site."""
        return SysInfo(
            airflow_version=self.airflow_version,
            edge_provider_version=self.edge_provider_version,
            concurrency=self.concurrency,
            free_concurrency=self.free_concurrency(),
        )

    def get_state(self) -> EdgeWorkerState:
        """The worker state as seen from the worker."""
        if self.last_heartbeat == MIN_UTC:
            return EdgeWorkerState.STARTING
        if self.used_concurrency > 0:
            if self.drain:
                return EdgeWorkerState.TERMINATING
            if self.maintenance_mode:
                return EdgeWorkerState.MAINTENANCE_PENDING
            return EdgeWorkerState.RUNNING
        if self.drain:
            if self.maintenance_mode:
                return EdgeWorkerState.OFFLINE_MAINTENANCE
            return EdgeWorkerState.OFFLINE
        if self.maintenance_mode:
            return EdgeWorkerState.MAINTENANCE_MODE
        return EdgeWorkerState.IDLE


class EdgeWorkerError(Exception):
    """The worker stopped because a call to the edge API failed."""

    def __init__(self, error: EdgeApiError) -> None:
        self.error = error
        super().__init__(str(error))


@contextmanager
def _api_call() -> Iterator[None]:
    try:
        yield
    except EdgeApiError as exc:
        raise EdgeWorkerError(exc) from exc


class EdgeWorker:
    """Runs jobs fetched from the edge API on a worker runtime."""

    def __init__(
        self,
        client: EdgeApiClient,
        time_provider: TimeProvider,
        runtime: WorkerRuntime,
        dag_bag: Any,
        airflow_version: str,
        edge_provider_version: str,
    ) -> None:
        self._client = client
        self._time_provider = time_provider
        self._runtime = runtime
        self._dag_bag = dag_bag
        self._state = WorkerState(
            concurrency=runtime.concurrency(),
            airflow_version=airflow_version,
            edge_provider_version=edge_provider_version,
        )
        self._state_changed = False
        self._jobs: list[EdgeJob] = []
        self._queues: list[str] | None = None

    def with_queues(self, queues: list[str] | None) -> EdgeWorker:
        """Pull jobs only from ``queues``; None means all queues."""
        self._queues = None if queues is None else list(queues)
        return self

    async def start(self) -> None:
        """Register, run until drained, then report the worker offline."""
        await self._runtime.on_update(self._state)
        hostname = self._runtime.hostname()
        logger.info("Starting worker %s ...", hostname)

        with _api_call():
            registration = await self._client.worker_register(
                hostname,
                EdgeWorkerState.STARTING,
                self._queues,
                self._state.sys_info(),
            )
        self._state.last_heartbeat = registration.last_update
        logger.info("Worker registered.")

        self._state_changed = await self._heartbeat()

        while not self._state.drain or self._jobs:
            await self._do_loop()

        await self._runtime.on_update(self._state)
        logger.info("Stopping worker.")
        final_state = (
            EdgeWorkerState.OFFLINE_MAINTENANCE
            if self._state.maintenance_mode
            else EdgeWorkerState.OFFLINE
        )
        with _api_call():
            await self._client.worker_set_state(
                hostname,
                final_state,
                0,
                self._queues,
                self._state.sys_info(),
                self._state.maintenance_comments,
            )
        logger.info("Worker stopped.")

    async def _do_loop(self) -> None:
        new_job = False
        jobs_was_empty = not self._jobs
        was_full = self._state.free_concurrency() == 0

        if (
            not (self._state.drain or self._state.maintenance_mode)
            and self._state.free_concurrency() > 0
        ):
            new_job = await self._fetch_job()
        await self._check_running_jobs()

        since_heartbeat = self._time_provider.now() - self._state.last_heartbeat
        if (
            self._state.drain
            or int(since_heartbeat.total_seconds()) > EDGE_HEARTBEAT_INTERVAL
            or self._state_changed
            or jobs_was_empty != (not self._jobs)
        ):
            self._state_changed = await self._heartbeat()

        # Sleep unless a job arrived or this iteration freed slots of a full worker.
        if not new_job and (not was_full or self._state.free_concurrency() == 0):
            await self._sleep()

    async def _check_running_jobs(self) -> None:
        used_concurrency = 0
        results = []
        for job in self._jobs:
            logger.debug("Checking job: %s", job.ti_key())
            if job.is_running():
                used_concurrency += job.concurrency_slots()
            elif await job.is_success():
                logger.info("Job finished: %s", job.ti_key())
                results.append((job.ti_key(), TaskInstanceState.SUCCESS))
            else:
                logger.error("Job failed: %s", job.ti_key())
                results.append((job.ti_key(), TaskInstanceState.FAILED))

        for key, state in results:
            with _api_call():
                await self._client.jobs_set_state(key, state)

        self._jobs = [job for job in self._jobs if job.is_running()]
        self._state.used_concurrency = used_concurrency
        await self._runtime.on_update(self._state)

    async def _fetch_job(self) -> bool:
        logger.debug("Attempting to fetch a new job...")
        with _api_call():
            job = await self._client.jobs_fetch(
                self._runtime.hostname(),
                self._queues,
                self._state.free_concurrency(),
            )
        if job is None:
            logger.debug("No new job to process, %d jobs running", len(self._jobs))
            return False

        key = job.ti_key()
        logger.info("Received job: %s", key)
        self._launch_job(job)
        with _api_call():
            await self._client.jobs_set_state(key, TaskInstanceState.RUNNING)
        return True

    def _launch_job(self, job: EdgeJobFetched) -> None:
        self._jobs.append(self._runtime.launch(job, self._dag_bag))

    async def _sleep(self) -> None:
        msg = await self._runtime.sleep(timedelta(seconds=EDGE_JOB_POLL_INTERVAL))
        if msg is None:
            return
        logger.debug("Received intercom message: %r", msg)
        if isinstance(msg, Shutdown):
            logger.info(
                "Request to shut down Edge Worker received, waiting for jobs to complete."
            )
            self._state.drain = True
        elif isinstance(msg, JobCompleted):
            logger.debug("Received job completed for %s", msg.key)
        elif isinstance(msg, Terminate):
            logger.info("Request to terminate Edge Worker received, stopping immediately.")
            self._state.drain = True
            for job in self._jobs:
                job.abort()
        await self._runtime.on_update(self._state)

    async def _heartbeat(self) -> bool:
        logger.debug("Sending heartbeat")
        state = self._state.get_state()
        try:
            info = await self._client.worker_set_state(
                self._runtime.hostname(),
                state,
                len(self._jobs),
                self._queues,
                self._state.sys_info(),
                self._state.maintenance_comments,
            )
        except VersionMismatchError as exc:
            logger.error("Worker version mismatch, exiting")
            logger.error("%s", exc.message)
            self._state.drain = True
            return False
        except EdgeApiError as exc:
            raise EdgeWorkerError(exc) from exc

        self._queues = info.queues

        if info.state == EdgeWorkerState.MAINTENANCE_REQUEST:
            logger.info("Maintenance mode requested!")
            self._state.maintenance_mode = True
        elif (
            info.state in (EdgeWorkerState.IDLE, EdgeWorkerState.RUNNING)
            and self._state.maintenance_mode
        ):
            logger.info("Maintenance mode exit requested!")
            self._state.maintenance_mode = False

        self._state.maintenance_comments = (
            info.maintenance_comments if self._state.maintenance_mode else None
        )

        logger.info("Heartbeat sent, state: %s", info.state)
        self._state.last_heartbeat = self._time_provider.now()
        await self._runtime.on_update(self._state)
        return info.state != state