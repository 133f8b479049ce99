# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory ComputeClient implementations."""

from __future__ import annotations

from collections.abc import Iterable

from ..errors import ComputeApiError
from .client import ComputeClient, InstanceSpec, zone_for_region


class StubComputeClient(ComputeClient):
    """
    Deterministic, programmable ComputeClient for tests.

    ``statuses`` and ``console_outputs`` are consumed one per call; the last
    entry repeats once the sequence is exhausted. An item that is an exception
    is raised instead of returned. ``errors`` maps an operation name
    (``insert``, ``set_labels``, ``stop``, ...) to the exception it raises.
    """

    def __init__(
        self,
        *,
        statuses: Iterable[str | BaseException] = ("RUNNING",),
        console_outputs: Iterable[str | BaseException] = ("",),
        errors: dict[str, BaseException] | None = None,
        machine_types: Iterable[str] = ("e2-standard-2",),
        project: str = "stub-project",
        region: str = "us-east1",
    ):
        self.project = project
        self.region = region
        self.zone = zone_for_region(region)
        self._statuses = list(statuses) or [""]
        self._console_outputs = list(console_outputs) or [""]
        self._errors = dict(errors or {})
        self.machine_types = set(machine_types)
        self.calls: list[tuple[str, str]] = []
        self.inserted: list[InstanceSpec] = []
        self.labels: dict[str, dict[str, str]] = {}
        self.closed = False

    def _record(self, operation: str, name: str) -> None:
        self.calls.append((operation, name))
        error = self._errors.get(operation)
        if error is not None:
            raise error

    @staticmethod
    def _next(sequence: list[str | BaseException], index: int) -> str:
        item = sequence[min(index, len(sequence) - 1)]
        if isinstance(item, BaseException):
            raise item
        return item

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    def insert(self, spec: InstanceSpec) -> None:
        self._record("insert", spec.name)
        self.inserted.append(spec)

    def get(self, name: str) -> str:
        index = self.count("get")
        self._record("get", name)
        return self._next(self._statuses, index)

    def set_labels(self, name: str, labels: dict[str, str]) -> None:
        self._record("set_labels", name)
        self.labels[name] = dict(labels)

    def get_console_output(self, name: str) -> str:
        index = self.count("get_console_output")
        self._record("get_console_output", name)
        return self._next(self._console_outputs, index)

    def stop(self, name: str) -> None:
        self._record("stop", name)

    def validate_machine_type(self, machine_type: str) -> None:
        self._record("validate_machine_type", machine_type)
        if machine_type not in self.machine_types:
            raise ComputeApiError(f"machine type {machine_type} not found in zone {self.zone}")

    def close(self) -> None:
        self.closed = True
