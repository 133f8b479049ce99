# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Compute control-plane client abstraction and factory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from ..config import ComputeSettings, load_compute_settings
from ..constants import DEFAULT_ZONE_SUFFIX


@dataclass(frozen=True)
class InstanceSpec:
    """What ``ComputeClient.insert`` needs to create one probe instance."""

    name: str
    machine_type: str
    source_image: str
    subnetwork: str
    userdata: str
    network: str | None = None
    disk_size_gb: int = 10

    def to_body(self, zone: str) -> dict[str, Any]:
        """Render the GCE ``Instance`` resource body."""
        interface: dict[str, Any] = {"subnetwork": self.subnetwork}
        if self.network:
            interface["network"] = self.network
        return {
            "name": self.name,
            "machineType": f"zones/{zone}/machineTypes/{self.machine_type}",
            "disks": [
                {
                    "boot": True,
                    "autoDelete": True,
                    "type": "PERSISTENT",
                    "initializeParams": {
                        "diskSizeGb": str(self.disk_size_gb),
                        "sourceImage": self.source_image,
                    },
                }
            ],
            "networkInterfaces": [interface],
            "metadata": {"items": [{"key": "user-data", "value": self.userdata}]},
        }


class ComputeClient(Protocol):
    """Single-attempt compute calls; every method raises ComputeApiError on failure."""

    project: str
    region: str
    zone: str

    def insert(self, spec: InstanceSpec) -> None: ...

    def get(self, name: str) -> str: ...

    def set_labels(self, name: str, labels: dict[str, str]) -> None: ...

    def get_console_output(self, name: str) -> str: ...

    def stop(self, name: str) -> None: ...

    def validate_machine_type(self, machine_type: str) -> None: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


def zone_for_region(region: str) -> str:
    return f"{region}-{DEFAULT_ZONE_SUFFIX}"


def create_default_compute_client(
    project: str,
    region: str,
    access_token: str,
    settings: ComputeSettings | None = None,
) -> ComputeClient:
    """Factory for the default httpx-backed GCE client."""
    from .gce import GceComputeClient

    return GceComputeClient(project, region, access_token, settings or load_compute_settings())
