from datetime import datetime, timezone

import httpx
import pytest
import respx

from airedge.auth import JWTGenerator, MockJWTGenerator
from airedge.client import EdgeApiError, EdgeNotEnabledError, VersionMismatchError
from airedge.edge_models import EdgeWorkerState, SysInfo
from airedge.http_client import EdgeRequestError, EdgeTokenError, HttpxEdgeApiClient
from airedge.map_index import MapIndex
from airedge.state import TaskInstanceState
from airedge.taskinstance import TaskInstanceKey

BASE = "http://edge.test"


def make_client():
    return HttpxEdgeApiClient(BASE, MockJWTGenerator("secret"))


def sys_info():
    return SysInfo(
        airflow_version="3.0.0",
        edge_provider_version="1.0.0",
        concurrency=1,
        free_concurrency=1,
    )


def ti_key():
    return TaskInstanceKey("dag_id", "task_id", "run_id", 1, MapIndex.none())


def when():
    return datetime.fromtimestamp(1570864850, tz=timezone.utc)


def queues():
    return ["queue1", "queue2"]


@pytest.mark.asyncio
async def test_health():
    with respx.mock() as mock:
        route = mock.get(f"{BASE}/health").mock(
            return_value=httpx.Response(200, text='{"status": "healthy"}')
        )
        async with make_client() as client:
            result = await client.health()
    assert route.called
    assert route.calls.last.request.headers["authorization"] == "health:secret"
    assert result.status == "healthy"


@pytest.mark.asyncio
async def test_worker_register():
    with respx.mock() as mock:
        route = mock.post(f"{BASE}/worker/hello").mock(
            return_value=httpx.Response(
                200, text='{"last_update": "2019-10-12T07:20:50Z"}'
            )
        )
        async with make_client() as client:
            result = await client.worker_register(
                "hello", EdgeWorkerState.STARTING, None, sys_info()
            )
    request = route.calls.last.request
    assert request.headers["authorization"] == "worker/hello:secret"
    assert request.content == (
        b'{"state":"starting","jobs_active":0,"queues":null,"sysinfo":'
        b'{"airflow_version":"3.0.0","edge_provider_version":"1.0.0",'
        b'"concurrency":1,"free_concurrency":1},"maintenance_comments":null}'
    )
    assert result.last_update == when()


@pytest.mark.asyncio
async def test_worker_set_state():
    with respx.mock() as mock:
        route = mock.route(method="PATCH", url=f"{BASE}/worker/hello").mock(
            return_value=httpx.Response(
                200,
                text='{"state": "starting", "queues":["queue1","queue2"], '
                '"maintenance_comments":"test"}',
            )
        )
        async with make_client() as client:
            result = await client.worker_set_state(
                "hello", EdgeWorkerState.RUNNING, 1, queues(), sys_info(), "test"
            )
    request = route.calls.last.request
    assert request.headers["authorization"] == "worker/hello:secret"
    assert request.content == (
        b'{"state":"running","jobs_active":1,"queues":["queue1","queue2"],'
        b'"sysinfo":{"airflow_version":"3.0.0","edge_provider_version":"1.0.0",'
        b'"concurrency":1,"free_concurrency":1},"maintenance_comments":"test"}'
    )
    assert result.state == EdgeWorkerState.STARTING
    assert result.queues == queues()
    assert result.maintenance_comments == "test"


JOB_BODY = """{
    "dag_id":"mydag",
    "task_id":"mytask",
    "run_id":"myrun",
    "map_index":3,
    "try_number":2,
    "concurrency_slots":4,
    "command":{
        "token": "token",
        "ti":{
            "id": "cd39d984-0c40-4938-9e74-c240c48a76e4",
            "dag_id":"mydag",
            "task_id":"mytask",
            "run_id":"myrun",
            "try_number":2,
            "map_index":3,
            "pool_slots":7,
            "queue":"myqueue",
            "priority_weight":2
        },
        "dag_rel_path":"dagfilepath",
        "bundle_info":{"name":"mybundle","version":"v123"},
        "log_path":"logfilepath",
        "type":"ExecuteTask"
    }
}"""


@pytest.mark.asyncio
async def test_jobs_fetch():
    with respx.mock() as mock:
        route = mock.post(f"{BASE}/jobs/fetch/hello").mock(
            return_value=httpx.Response(200, text=JOB_BODY)
        )
        async with make_client() as client:
            result = await client.jobs_fetch("hello", queues(), 1)
    request = route.calls.last.request
    assert request.headers["authorization"] == "jobs/fetch/hello:secret"
    assert request.content == b'{"queues":["queue1","queue2"],"free_concurrency":1}'
    assert result is not None
    assert result.dag_id == "mydag"
    assert result.task_id == "mytask"
    assert result.run_id == "myrun"
    assert result.map_index == MapIndex.some(3)
    assert result.try_number == 2
    assert result.concurrency_slots == 4
    assert result.command.ti.pool_slots == 7
    assert result.command.bundle_info.name == "mybundle"
    assert result.command.log_path == "logfilepath"


@pytest.mark.asyncio
async def test_jobs_fetch_none():
    with respx.mock() as mock:
        mock.post(f"{BASE}/jobs/fetch/hello").mock(
            return_value=httpx.Response(200, text="null")
        )
        async with make_client() as client:
            result = await client.jobs_fetch("hello", None, 1)
    assert result is None


@pytest.mark.asyncio
async def test_jobs_set_state():
    path = "jobs/state/dag_id/task_id/run_id/1/-1/failed"
    with respx.mock() as mock:
        route = mock.route(method="PATCH", url=f"{BASE}/{path}").mock(
            return_value=httpx.Response(200)
        )
        async with make_client() as client:
            result = await client.jobs_set_state(ti_key(), TaskInstanceState.FAILED)
    assert result is None
    assert route.call_count == 1
    assert route.calls.last.request.headers["authorization"] == f"{path}:secret"


@pytest.mark.asyncio
async def test_logs_logfile_path():
    path = "logs/logfile_path/dag_id/task_id/run_id/1/-1"
    with respx.mock() as mock:
        route = mock.get(f"{BASE}/{path}").mock(
            return_value=httpx.Response(200, text='"mylogpath"')
        )
        async with make_client() as client:
            result = await client.logs_logfile_path(ti_key())
    assert route.calls.last.request.headers["authorization"] == f"{path}:secret"
    assert result == "mylogpath"


@pytest.mark.asyncio
async def test_logs_push():
    path = "logs/push/dag_id/task_id/run_id/1/-1"
    with respx.mock() as mock:
        route = mock.post(f"{BASE}/{path}").mock(return_value=httpx.Response(200))
        async with make_client() as client:
            result = await client.logs_push(ti_key(), when(), "Hello world!")
    assert result is None
    assert route.call_count == 1
    request = route.calls.last.request
    assert request.headers["authorization"] == f"{path}:secret"
    assert request.content == (
        b'{"log_chunk_time":"2019-10-12T07:20:50Z","log_chunk_data":"Hello world!"}'
    )


@pytest.mark.asyncio
async def test_not_found():
    with respx.mock() as mock:
        mock.post(f"{BASE}/worker/hello").mock(return_value=httpx.Response(404))
        async with make_client() as client:
            with pytest.raises(EdgeNotEnabledError):
                await client.worker_register(
                    "hello", EdgeWorkerState.RUNNING, None, sys_info()
                )


@pytest.mark.asyncio
async def test_bad_request():
    with respx.mock() as mock:
        mock.post(f"{BASE}/worker/hello").mock(
            return_value=httpx.Response(400, text="Wrong version!")
        )
        async with make_client() as client:
            with pytest.raises(VersionMismatchError) as info:
                await client.worker_register(
                    "hello", EdgeWorkerState.RUNNING, None, sys_info()
                )
    assert info.value.message == "Wrong version!"


@pytest.mark.asyncio
async def test_http_error():
    with respx.mock() as mock:
        mock.post(f"{BASE}/worker/hello").mock(
            return_value=httpx.Response(403, text="Not authorized!")
        )
        async with make_client() as client:
            with pytest.raises(EdgeRequestError) as info:
                await client.worker_register(
                    "hello", EdgeWorkerState.RUNNING, None, sys_info()
                )
    assert info.value.status_code == 403
    assert isinstance(info.value, EdgeApiError)


@pytest.mark.asyncio
async def test_transport_error():
    with respx.mock() as mock:
        mock.get(f"{BASE}/health").mock(side_effect=httpx.ConnectError("refused"))
        async with make_client() as client:
            with pytest.raises(EdgeRequestError) as info:
                await client.health()
    assert info.value.status_code is None


@pytest.mark.asyncio
async def test_invalid_response_body():
    with respx.mock() as mock:
        mock.get(f"{BASE}/health").mock(
            return_value=httpx.Response(200, text="not json")
        )
        async with make_client() as client:
            with pytest.raises(EdgeRequestError):
                await client.health()


class _FailingGenerator(JWTGenerator):
    def generate(self, method):
        raise ValueError(f"cannot sign {method}")


@pytest.mark.asyncio
async def test_token_error():
    with respx.mock(assert_all_called=False) as mock:
        route = mock.get(f"{BASE}/health").mock(return_value=httpx.Response(200))
        async with HttpxEdgeApiClient(BASE, _FailingGenerator()) as client:
            with pytest.raises(EdgeTokenError) as info:
                await client.health()
    assert not route.called
    assert "health" in str(info.value)


@pytest.mark.asyncio
async def test_passed_client_is_not_closed():
    http = httpx.AsyncClient()
    with respx.mock() as mock:
        mock.get(f"{BASE}/health").mock(
            return_value=httpx.Response(200, text='{"status": "healthy"}')
        )
        async with HttpxEdgeApiClient(BASE, MockJWTGenerator("secret"), http) as client:
            result = await client.health()
    assert result.status == "healthy"
    assert http.is_closed is False
    await http.aclose()
    assert http.is_closed is True