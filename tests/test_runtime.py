import dataclasses

import pytest

from airedge.map_index import MapIndex
from airedge.runtime import (
    EdgeJob,
    Intercom,
    IntercomMessage,
    JobCompleted,
    Shutdown,
    Terminate,
    WorkerRuntime,
)
from airedge.taskinstance import TaskInstanceKey


def _key():
    return TaskInstanceKey("dag_id", "task_id", "run_id", 1, MapIndex.none())


def test_job_completed_carries_key():
    msg = JobCompleted(_key())
    assert msg.key == _key()
    assert msg.key.dag_id == "dag_id"


def test_messages_compare_by_kind():
    assert Shutdown() == Shutdown()
    assert Terminate() == Terminate()
    assert (Shutdown() == Terminate()) is False
    assert JobCompleted(_key()) == JobCompleted(_key())


def test_messages_are_hashable():
    messages = {Shutdown(), Shutdown(), JobCompleted(_key()), JobCompleted(_key())}
    assert len(messages) == 2


def test_messages_are_frozen():
    msg = JobCompleted(_key())
    with pytest.raises(dataclasses.FrozenInstanceError):
        msg.key = _key()


def _describe(msg):
    match msg:
        case Shutdown():
            return "shutdown"
        case Terminate():
            return "terminate"
        case JobCompleted(key=key):
            return f"completed {key.task_id}"
        case IntercomMessage():
            return "other"
    return "not a message"


def test_message_kinds_dispatch():
    assert _describe(Shutdown()) == "shutdown"
    assert _describe(Terminate()) == "terminate"
    assert _describe(JobCompleted(_key())) == "completed task_id"
    assert _describe("nothing") == "not a message"


@pytest.mark.parametrize("abstract", [Intercom, EdgeJob, WorkerRuntime])
def test_interfaces_cannot_be_instantiated(abstract):
    with pytest.raises(TypeError):
        abstract()


class _FinishedJob(EdgeJob):
    def __init__(self, key):
        self._key = key
        self.aborted = False

    def is_running(self):
        return False

    def abort(self):
        self.aborted = True

    def ti_key(self):
        return self._key

    def concurrency_slots(self):
        return 3

    async def is_success(self):
        return not self.aborted


@pytest.mark.asyncio
async def test_complete_job_behaves():
    job = _FinishedJob(_key())
    assert await job.is_success() is True
    job.abort()
    assert await job.is_success() is False
    assert job.concurrency_slots() == 3
    assert JobCompleted(job.ti_key()) == JobCompleted(_key())


@pytest.mark.asyncio
async def test_complete_intercom_sends():
    class ListIntercom(Intercom):
        def __init__(self):
            self.sent = []

        async def send(self, msg):
            self.sent.append(msg)

    intercom = ListIntercom()
    await intercom.send(Terminate())
    assert intercom.sent == [Terminate()]