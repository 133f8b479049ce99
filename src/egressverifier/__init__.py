# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
egress-verifier package entrypoint.

This package checks whether a cloud subnet permits the outbound connectivity a
managed cluster needs: it boots a disposable probe instance in the subnet,
reads the probe script's verdict from the serial console and always tears the
instance down again. Compute calls are abstracted behind an injectable client
interface, and domain objects are modeled with typed dataclasses.
"""

from .compute import ComputeClient, GceComputeClient, StubComputeClient, create_default_compute_client
from .config import ComputeSettings, ProbeSettings, load_compute_settings, load_probe_settings
from .console import ConsoleLogAnalyzer
from .controller import EgressController
from .errors import ErrorCategory
from .lifecycle import InstanceLifecycle
from .log import setup_logging
from .models import LifecycleState, ProbeInstance, ProbeRequest, ProxyConfig, ValidationResult
from .poll import poll_immediate
from .runtime import EgressVerifier
from .version import __version__

__all__ = [
    "ComputeClient",
    "ComputeSettings",
    "ConsoleLogAnalyzer",
    "EgressController",
    "EgressVerifier",
    "ErrorCategory",
    "GceComputeClient",
    "InstanceLifecycle",
    "LifecycleState",
    "ProbeInstance",
    "ProbeRequest",
    "ProbeSettings",
    "ProxyConfig",
    "StubComputeClient",
    "ValidationResult",
    "create_default_compute_client",
    "load_compute_settings",
    "load_probe_settings",
    "poll_immediate",
    "setup_logging",
    "__version__",
]
