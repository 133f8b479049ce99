# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for egress-verifier."""

from .probe import LifecycleState, ProbeInstance, ProbeRequest, ProxyConfig
from .result import Failure, ValidationResult

__all__ = [
    "Failure",
    "LifecycleState",
    "ProbeInstance",
    "ProbeRequest",
    "ProxyConfig",
    "ValidationResult",
]
