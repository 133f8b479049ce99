# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Compute client exports."""

from .adapters import StubComputeClient
from .client import ComputeClient, InstanceSpec, create_default_compute_client, zone_for_region
from .gce import GceComputeClient

__all__ = [
    "ComputeClient",
    "GceComputeClient",
    "InstanceSpec",
    "StubComputeClient",
    "create_default_compute_client",
    "zone_for_region",
]
