# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Probe instance lifecycle: create, wait for RUNNING, stop.

All provider status strings are converted to ``LifecycleState`` in
``describe``; everything past that point works on the enumeration only.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from .compute.client import ComputeClient, InstanceSpec
from .config import ProbeSettings, load_probe_settings
from .constants import DEFAULT_LABELS, IMAGE_PROJECT
from .errors import (
    ComputeApiError,
    CreationError,
    InstanceStateError,
    LifecycleError,
    PermissionDeniedError,
    PollTimeoutError,
    ReadinessTimeoutError,
    TeardownError,
)
from .models import LifecycleState, ProbeInstance, ProbeRequest, ValidationResult
from .naming import InstanceNameGenerator
from .poll import Clock, poll_immediate

logger = logging.getLogger(__name__)


class InstanceLifecycle:
    """Owns exactly one probe instance per run, from insert to stop."""

    def __init__(
        self,
        compute: ComputeClient,
        *,
        settings: ProbeSettings | None = None,
        labels: dict[str, str] | None = None,
        name_generator: Callable[[], str] | None = None,
        clock: Clock | None = None,
    ):
        self.compute = compute
        self.settings = settings or load_probe_settings()
        self.labels = dict(DEFAULT_LABELS if labels is None else labels)
        self.name_generator = name_generator or InstanceNameGenerator()
        self.clock = clock

    def build_spec(self, request: ProbeRequest, userdata: str, image_id: str) -> InstanceSpec:
        project = self.compute.project
        network = None
        if self.settings.vpc_name:
            network = f"projects/{project}/global/networks/{self.settings.vpc_name}"
        return InstanceSpec(
            name=self.name_generator(),
            machine_type=request.machine_type or self.settings.default_machine_type,
            source_image=f"projects/{IMAGE_PROJECT}/global/images/family/{image_id}",
            subnetwork=f"projects/{project}/regions/{self.compute.region}/subnetworks/{request.subnet_id}",
            userdata=userdata,
            network=network,
            disk_size_gb=self.settings.disk_size_gb,
        )

    def create(self, request: ProbeRequest, userdata: str, image_id: str) -> ProbeInstance:
        """Insert the instance, then label it. Neither call is retried."""
        spec = self.build_spec(request, userdata, image_id)
        try:
            self.compute.insert(spec)
        except ComputeApiError as exc:
            raise CreationError(f"unable to create instance {spec.name}: {exc.message}") from exc

        instance = ProbeInstance(name=spec.name, zone=self.compute.zone)
        logger.info("Created instance %s in %s", instance.name, instance.zone)

        if self.labels:
            logger.info("Applying labels to %s", instance.name)
            try:
                self.compute.set_labels(instance.name, self.labels)
            except ComputeApiError as exc:
                raise CreationError(
                    f"unable to apply labels to instance {instance.name}: {exc.message}", instance=instance
                ) from exc
        return instance

    def describe(self, instance: ProbeInstance) -> LifecycleState:
        try:
            status = self.compute.get(instance.name)
        except ComputeApiError as exc:
            if exc.is_permission_error:
                logger.error("Permission denied while describing %s: %s", instance.name, exc.message)
                instance.state = LifecycleState.PERMISSION_DENIED
                return instance.state
            if exc.is_transient:
                logger.warning("Transient error describing %s, will retry: %s", instance.name, exc.message)
                instance.state = LifecycleState.UNKNOWN
                return instance.state
            raise LifecycleError(f"unable to describe instance {instance.name}: {exc.message}") from exc

        instance.state = LifecycleState.from_status(status)
        if not status:
            logger.debug("Instance %s has no status yet", instance.name)
        return instance.state

    def await_running(
        self,
        instance: ProbeInstance,
        timeout: float | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        timeout = self.settings.readiness_timeout if timeout is None else timeout

        def _is_running() -> bool:
            state = self.describe(instance)
            if state.is_running:
                logger.info("Instance %s is %s", instance.name, state.value)
                return True
            if state.is_fatal:
                raise InstanceStateError(
                    f"instance {instance.name} already exists with {state.value} state, please run again"
                )
            if state is LifecycleState.PERMISSION_DENIED:
                raise PermissionDeniedError(f"missing required permissions to describe instance {instance.name}")
            logger.debug("Waiting on instance %s: %s", instance.name, state.value)
            return False

        try:
            poll_immediate(
                _is_running,
                self.settings.readiness_interval,
                timeout,
                clock=self.clock,
                cancel=cancel,
            )
        except PollTimeoutError as exc:
            raise ReadinessTimeoutError(
                f"instance {instance.name} did not reach RUNNING within {timeout:g}s (last state {instance.state.value})"
            ) from exc

    def terminate(self, instance: ProbeInstance, result: ValidationResult) -> None:
        """Best-effort stop; a failure is recorded on ``result``, never raised."""
        logger.info("Terminating instance %s", instance.name)
        try:
            self.compute.stop(instance.name)
        except Exception as exc:  # noqa: BLE001
            logger.error("Unable to stop instance %s: %s", instance.name, exc)
            result.add_error(TeardownError(f"unable to stop instance {instance.name}: {exc}"))
            return
        instance.state = LifecycleState.STOPPING

    @contextmanager
    def terminating(self, instance: ProbeInstance, result: ValidationResult) -> Iterator[ProbeInstance]:
        """Yield ``instance`` and stop it exactly once on the way out, however the block exits."""
        try:
            yield instance
        finally:
            self.terminate(instance, result)


__all__ = ["InstanceLifecycle"]
