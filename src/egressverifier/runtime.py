# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level egress-verifier facade."""

from __future__ import annotations

import threading
from collections.abc import Callable
from contextlib import suppress

from .compute.client import ComputeClient
from .config import ProbeSettings, load_probe_settings
from .console import ConsoleLogAnalyzer
from .controller import EgressController
from .lifecycle import InstanceLifecycle
from .models import ProbeRequest, ProxyConfig, ValidationResult
from .poll import Clock


class EgressVerifier:
    """
    Convenience wrapper that wires one compute client through the lifecycle,
    the console analyzer and the controller.
    """

    def __init__(
        self,
        compute_client: ComputeClient,
        *,
        settings: ProbeSettings | None = None,
        labels: dict[str, str] | None = None,
        name_generator: Callable[[], str] | None = None,
        clock: Clock | None = None,
    ):
        self.compute_client = compute_client
        self.settings = settings or load_probe_settings()
        self.lifecycle = InstanceLifecycle(
            compute_client,
            settings=self.settings,
            labels=labels,
            name_generator=name_generator,
            clock=clock,
        )
        self.analyzer = ConsoleLogAnalyzer(compute_client, settings=self.settings, clock=clock)
        self.controller = EgressController(self.lifecycle, self.analyzer, self.settings)

    def validate_machine_type(self, machine_type: str | None = None) -> None:
        self.compute_client.validate_machine_type(machine_type or self.settings.default_machine_type)

    def validate_egress(
        self,
        subnet_id: str,
        *,
        image_id: str | None = None,
        machine_type: str | None = None,
        timeout: float = 2.0,
        proxy: ProxyConfig | None = None,
        cancel: threading.Event | None = None,
    ) -> ValidationResult:
        request = ProbeRequest(
            subnet_id=subnet_id,
            image_id=image_id,
            machine_type=machine_type,
            timeout=timeout,
            proxy=proxy or ProxyConfig(),
        )
        return self.controller.validate_egress(request, cancel=cancel)

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.compute_client, "close"):
                self.compute_client.close()

    def __enter__(self) -> "EgressVerifier":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()
