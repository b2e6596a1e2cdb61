# airedge

An asynchronous edge worker and API client for a workflow scheduler's edge
execution API. A worker registers with the central site, sends heartbeats,
fetches jobs, launches them through a runtime you supply and reports their
results back.

## Installation

```
pip install airedge
```

For running the tests:

```
pip install "airedge[test]"
pytest
```

## Building blocks

- `airedge.clock` – `TimeProvider`, `StdTimeProvider` (system clock),
  `MockTimeProvider` (a fixed time) and `MIN_UTC`.
- `airedge.map_index` – `MapIndex`, where `-1` stands for an unmapped task;
  invalid values raise `MapIndexConversionError`.
- `airedge.state` – `TaskInstanceState` and its subsets `IntermediateTIState`,
  `TerminalTIState` and `TerminalTIStateNonSuccess`, with conversions between them.
- `airedge.types` – `DagRunType` and `SecretString`, which hides its value in
  `str()` and `repr()`; `secret()` returns it.
- `airedge.auth` – the `JWTGenerator` interface and `MockJWTGenerator`, whose
  tokens have the form `<method>:<secret>`.
- `airedge.jwt_generator` – `HS512JWTGenerator`, producing HS512-signed tokens
  with `aud`, `method`, `iat`, `nbf`, `exp` (600 seconds by default, see
  `with_valid_for`) and optionally `iss` (see `with_issuer`). Failures raise
  `JWTCreationError`.
- `airedge.taskinstance` – `TaskInstanceKey` and the `TaskInstanceLike` mixin.
- `airedge.workloads` – `BundleInfo`, `TaskInstance` and `ExecuteTask`.
- `airedge.edge_models` – `EdgeWorkerState` and `SysInfo`.
- `airedge.api_models` – the API responses `HealthReturn`,
  `WorkerRegistrationReturn`, `WorkerSetStateReturn` and `EdgeJobFetched`.
- `airedge.serialization` – `dumps`/`loads` to and from compact JSON text,
  `serialize`/`deserialize` to and from plain JSON structures; errors raise
  `JsonSerdeError`.
- `airedge.client` – the abstract `EdgeApiClient` and its errors
  (`EdgeApiError`, `EdgeNotEnabledError` for HTTP 404, `VersionMismatchError`
  for HTTP 400).
- `airedge.http_client` – `HttpxEdgeApiClient`, an implementation over httpx.
  Other failures raise `EdgeRequestError` (with `status_code` for HTTP errors)
  or `EdgeTokenError`.
- `airedge.runtime` – the interfaces a worker runtime provides: `WorkerRuntime`,
  `EdgeJob`, `Intercom` and the intercom messages `Shutdown`, `Terminate` and
  `JobCompleted`.
- `airedge.edge_worker` – `EdgeWorker`, the main loop, its `WorkerState` and
  `EdgeWorkerError`.

## Example

```python
import asyncio

from airedge.clock import StdTimeProvider
from airedge.http_client import HttpxEdgeApiClient
from airedge.jwt_generator import HS512JWTGenerator
from airedge.types import SecretString


async def check() -> None:
    generator = HS512JWTGenerator(SecretString("secret"), "api", StdTimeProvider())
    async with HttpxEdgeApiClient("http://localhost:8080/edge_worker/v1", generator, None) as client:
        health = await client.health()
        print(health.status)


asyncio.run(check())
```

To run a worker, implement `WorkerRuntime` and `EdgeJob` for your environment
and pass the runtime to `EdgeWorker`:

```python
from airedge.edge_worker import EdgeWorker

worker = EdgeWorker(client, StdTimeProvider(), runtime, dag_bag, "3.0.0", "1.0.0")
await worker.with_queues(["default"]).start()
```

The worker keeps running until its runtime delivers a `Shutdown` or
`Terminate` message, or until the server reports a version mismatch, and
then reports itself offline.

## What this package does not do

- It has no command-line program; the worker is started from your own code.
- It ships no concrete `WorkerRuntime` or `EdgeJob`: running tasks, sleeping
  and delivering intercom messages are up to the runtime you write.
- It does not define or load DAGs. The `dag_bag` given to `EdgeWorker` is
  passed unchanged to `WorkerRuntime.launch`.