# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import random

import pytest

from egressverifier.compute import StubComputeClient
from egressverifier.config import ProbeSettings
from egressverifier.errors import (
    ComputeApiError,
    CreationError,
    ErrorCategory,
    InstanceStateError,
    LifecycleError,
    PermissionDeniedError,
    ReadinessTimeoutError,
)
from egressverifier.lifecycle import InstanceLifecycle
from egressverifier.models import LifecycleState, ProbeInstance, ProbeRequest, ValidationResult
from egressverifier.naming import InstanceNameGenerator
from egressverifier.poll import ManualClock


def _lifecycle(client, *, settings=None, clock=None, **kwargs):
    return InstanceLifecycle(
        client,
        settings=settings or ProbeSettings(),
        name_generator=InstanceNameGenerator(random.Random(7)),
        clock=clock or ManualClock(),
        **kwargs,
    )


def _instance():
    return ProbeInstance(name="verifier-0000abcd", zone="us-east1-b")


def test_create_inserts_then_labels():
    client = StubComputeClient(project="proj", region="us-east1")
    lifecycle = _lifecycle(client, labels={"team": "network"})

    instance = lifecycle.create(ProbeRequest(subnet_id="subnet-a"), "#!/bin/bash", "cos-97-lts")

    expected_name = InstanceNameGenerator(random.Random(7))()
    assert instance.name == expected_name
    assert instance.zone == "us-east1-b"
    assert instance.state is LifecycleState.PROVISIONING
    assert [op for op, _ in client.calls] == ["insert", "set_labels"]
    assert client.labels[expected_name] == {"team": "network"}

    spec = client.inserted[0]
    assert spec.machine_type == "e2-standard-2"
    assert spec.source_image == "projects/cos-cloud/global/images/family/cos-97-lts"
    assert spec.subnetwork == "projects/proj/regions/us-east1/subnetworks/subnet-a"
    assert spec.userdata == "#!/bin/bash"
    assert spec.network is None


def test_create_uses_requested_machine_type_and_vpc():
    client = StubComputeClient(project="proj")
    lifecycle = _lifecycle(client, settings=ProbeSettings(vpc_name="shared-vpc"))

    lifecycle.create(ProbeRequest(subnet_id="subnet-a", machine_type="n2-standard-4"), "", "cos-101-lts")

    spec = client.inserted[0]
    assert spec.machine_type == "n2-standard-4"
    assert spec.network == "projects/proj/global/networks/shared-vpc"


def test_create_insert_failure_has_no_instance():
    client = StubComputeClient(errors={"insert": ComputeApiError("quota exceeded", status_code=403)})
    lifecycle = _lifecycle(client)

    with pytest.raises(CreationError) as excinfo:
        lifecycle.create(ProbeRequest(subnet_id="subnet-a"), "", "cos-97-lts")

    assert excinfo.value.instance is None
    assert "quota exceeded" in excinfo.value.message
    assert client.count("set_labels") == 0


def test_create_label_failure_carries_created_instance():
    client = StubComputeClient(errors={"set_labels": ComputeApiError("bad label", status_code=400)})
    lifecycle = _lifecycle(client)

    with pytest.raises(CreationError) as excinfo:
        lifecycle.create(ProbeRequest(subnet_id="subnet-a"), "", "cos-97-lts")

    assert excinfo.value.instance is not None
    assert excinfo.value.instance.name == client.inserted[0].name


def test_create_skips_labels_when_none_configured():
    client = StubComputeClient()
    _lifecycle(client, labels={}).create(ProbeRequest(subnet_id="subnet-a"), "", "cos-97-lts")
    assert client.count("set_labels") == 0


@pytest.mark.parametrize("status", ["STOPPING", "STOPPED", "TERMINATED", "SUSPENDED"])
def test_await_running_fatal_states_abort(status):
    client = StubComputeClient(statuses=["PROVISIONING", status, "RUNNING"])
    instance = _instance()

    with pytest.raises(InstanceStateError, match=status):
        _lifecycle(client).await_running(instance)

    assert client.count("get") == 2
    assert instance.state.is_fatal


@pytest.mark.parametrize("status", ["PROVISIONING", "STAGING", "", "REPAIRING"])
def test_await_running_keeps_polling_non_terminal_states(status):
    clock = ManualClock()
    client = StubComputeClient(statuses=[status, status, "RUNNING"])
    instance = _instance()

    _lifecycle(client, clock=clock).await_running(instance)

    assert client.count("get") == 3
    assert clock.sleeps == [5.0, 5.0]
    assert instance.state is LifecycleState.RUNNING


def test_await_running_permission_denied():
    client = StubComputeClient(statuses=[ComputeApiError("forbidden", status_code=403)])
    instance = _instance()

    with pytest.raises(PermissionDeniedError):
        _lifecycle(client).await_running(instance)
    assert instance.state is LifecycleState.PERMISSION_DENIED


def test_await_running_treats_transient_errors_as_unknown():
    client = StubComputeClient(statuses=[ComputeApiError("unavailable", status_code=503), "RUNNING"])
    _lifecycle(client).await_running(_instance())
    assert client.count("get") == 2


def test_await_running_other_api_errors_abort():
    client = StubComputeClient(statuses=[ComputeApiError("not found", status_code=404)])

    with pytest.raises(LifecycleError) as excinfo:
        _lifecycle(client).await_running(_instance())
    assert excinfo.value.category is ErrorCategory.INSTANCE_STATE
    assert client.count("get") == 1


def test_await_running_times_out_at_deadline():
    clock = ManualClock()
    client = StubComputeClient(statuses=["PROVISIONING"])

    with pytest.raises(ReadinessTimeoutError):
        _lifecycle(client, clock=clock).await_running(_instance())

    assert clock.now == 120
    assert client.count("get") == 25


def test_await_running_honours_explicit_timeout():
    clock = ManualClock()
    client = StubComputeClient(statuses=["STAGING"])

    with pytest.raises(ReadinessTimeoutError):
        _lifecycle(client, clock=clock).await_running(_instance(), timeout=10)
    assert clock.now == 10


def test_terminate_records_stop_failure():
    client = StubComputeClient(errors={"stop": ComputeApiError("stop refused", status_code=500)})
    result = ValidationResult()

    _lifecycle(client).terminate(_instance(), result)

    assert result.categories() == [ErrorCategory.TEARDOWN]
    assert "stop refused" in result.failures[0].message


def test_terminate_marks_instance_stopping():
    client = StubComputeClient()
    instance = _instance()
    result = ValidationResult()

    _lifecycle(client).terminate(instance, result)

    assert result.ok
    assert instance.state is LifecycleState.STOPPING
    assert client.calls == [("stop", instance.name)]


def test_terminating_stops_once_when_block_raises():
    client = StubComputeClient()
    lifecycle = _lifecycle(client)
    result = ValidationResult()

    with pytest.raises(RuntimeError):
        with lifecycle.terminating(_instance(), result):
            raise RuntimeError("boom")

    assert client.count("stop") == 1
