"""Edge API client over HTTP."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx

from .api_models import (
    EdgeJobFetched,
    HealthReturn,
    WorkerRegistrationReturn,
    WorkerSetStateReturn,
)
from .auth import JWTGenerator
from .client import (
    EdgeApiClient,
    EdgeApiError,
    EdgeNotEnabledError,
    VersionMismatchError,
)
from .edge_models import EdgeWorkerState, SysInfo
from .serialization import JsonSerdeError, dumps
from .state import TaskInstanceState
from .taskinstance import TaskInstanceKey

_USER_AGENT = "airedge-edge-sdk"
_JSON_HEADERS = {"accept": "application/json", "content-type": "application/json"}


class EdgeRequestError(EdgeApiError):
    """A request failed in transport, with an HTTP error status, or in decoding."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class EdgeTokenError(EdgeApiError):
    """The authorisation token for a request could not be generated."""


def _key_path(prefix: str, key: TaskInstanceKey) -> str:
    return (
        f"{prefix}/{key.dag_id}/{key.task_id}/{key.run_id}/"
        f"{key.try_number}/{key.map_index}"
    )


class HttpxEdgeApiClient(EdgeApiClient):
    """Edge API client sending JSON requests with httpx."""

    def __init__(
        self,
        base_url: str,
        jwt_generator: JWTGenerator,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url
        self._jwt_generator = jwt_generator
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={**_JSON_HEADERS, "user-agent": _USER_AGENT}
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this object created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpxEdgeApiClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def _token(self, path: str) -> str:
        try:
            return self._jwt_generator.generate(path)
        except Exception as exc:
            raise EdgeTokenError(str(exc)) from exc

    async def _request(
        self, method: str, path: str, body: Any = None
    ) -> httpx.Response:
        headers = {**_JSON_HEADERS, "authorization": self._token(path)}
        content = None if body is None else dumps(body).encode("utf-8")
        try:
            response = await self._client.request(
                method, f"{self._base_url}/{path}", content=content, headers=headers
            )
        except httpx.HTTPError as exc:
            raise EdgeRequestError(str(exc)) from exc

        status = response.status_code
        if status == 404:
            raise EdgeNotEnabledError()
        if status == 400:
            raise VersionMismatchError(response.text)
        if status >= 400:
            raise EdgeRequestError(
                f"HTTP status {status} for {method} {path}", status_code=status
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise EdgeRequestError(f"error decoding response body: {exc}") from exc

    @classmethod
    def _decode(cls, response: httpx.Response, model: Any) -> Any:
        data = cls._json(response)
        try:
            return model.from_dict(data)
        except JsonSerdeError as exc:
            raise EdgeRequestError(f"error decoding response body: {exc}") from exc

    async def health(self) -> HealthReturn:
        response = await self._request("GET", "health")
        return self._decode(response, HealthReturn)

    async def worker_register(
        self,
        hostname: str,
        state: EdgeWorkerState,
        queues: list[str] | None,
        sysinfo: SysInfo,
    ) -> WorkerRegistrationReturn:
        body = {
            "state": state,
            "jobs_active": 0,
            "queues": queues,
            "sysinfo": sysinfo,
            "maintenance_comments": None,
        }
        response = await self._request("POST", f"worker/{hostname}", body)
        return self._decode(response, WorkerRegistrationReturn)

    async def worker_set_state(
        self,
        hostname: str,
        state: EdgeWorkerState,
        jobs_active: int,
        queues: list[str] | None,
        sysinfo: SysInfo,
        maintenance_comments: str | None,
    ) -> WorkerSetStateReturn:
        body = {
            "state": state,
            "jobs_active": jobs_active,
            "queues": queues,
            "sysinfo": sysinfo,
            "maintenance_comments": maintenance_comments,
        }
        response = await self._request("PATCH", f"worker/{hostname}", body)
        return self._decode(response, WorkerSetStateReturn)

    async def jobs_fetch(
        self,
        hostname: str,
        queues: list[str] | None,
        free_concurrency: int,
    ) -> EdgeJobFetched | None:
        body = {"queues": queues, "free_concurrency": free_concurrency}
        response = await self._request("POST", f"jobs/fetch/{hostname}", body)
        data = self._json(response)
        if data is None:
            return None
        try:
            return EdgeJobFetched.from_dict(data)
        except JsonSerdeError as exc:
            raise EdgeRequestError(f"error decoding response body: {exc}") from exc

    async def jobs_set_state(
        self, key: TaskInstanceKey, state: TaskInstanceState
    ) -> None:
        await self._request("PATCH", f"{_key_path('jobs/state', key)}/{state}")

    async def logs_logfile_path(self, key: TaskInstanceKey) -> str:
        response = await self._request("GET", _key_path("logs/logfile_path", key))
        data = self._json(response)
        if not isinstance(data, str):
            raise EdgeRequestError("error decoding response body: expected a string")
        return data

    async def logs_push(
        self,
        key: TaskInstanceKey,
        log_chunk_time: datetime,
        log_chunk_data: str,
    ) -> None:
        body = {"log_chunk_time": log_chunk_time, "log_chunk_data": log_chunk_data}
        await self._request("POST", _key_path("logs/push", key), body)

    def __repr__(self) -> str:
        return f"HttpxEdgeApiClient(base_url={self._base_url!r})"