import pytest

from airedge.edge_models import EdgeWorkerState, SysInfo
from airedge.serialization import dumps


def sys_info():
    return SysInfo("3.0.0", "1.0.0", 1, 1)


def test_sysinfo_wire_format():
    assert dumps(sys_info()) == (
        '{"airflow_version":"3.0.0","edge_provider_version":"1.0.0",'
        '"concurrency":1,"free_concurrency":1}'
    )


def test_sysinfo_round_trip():
    info = sys_info()
    assert SysInfo.from_dict(info.to_dict()) == info


def test_sysinfo_negative_concurrency():
    data = {**sys_info().to_dict(), "concurrency": -1}
    with pytest.raises(ValueError):
        SysInfo.from_dict(data)


def test_sysinfo_missing_field():
    data = sys_info().to_dict()
    del data["airflow_version"]
    with pytest.raises(ValueError):
        SysInfo.from_dict(data)


def test_state_values():
    assert EdgeWorkerState("maintenance_request") is EdgeWorkerState.MAINTENANCE_REQUEST
    assert str(EdgeWorkerState.OFFLINE_MAINTENANCE) == "offline_maintenance"
    assert dumps(EdgeWorkerState.STARTING) == '"starting"'


def test_state_unknown_value():
    with pytest.raises(ValueError):
        EdgeWorkerState("sleeping")