# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe request, instance and lifecycle-state models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class LifecycleState(str, Enum):
    PROVISIONING = "PROVISIONING"
    STAGING = "STAGING"
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"
    STOPPED = "STOPPED"
    TERMINATED = "TERMINATED"
    SUSPENDED = "SUSPENDED"
    UNKNOWN = "UNKNOWN"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    @classmethod
    def from_status(cls, status: str | None) -> LifecycleState:
        """
        Convert a provider-reported status string.

        Anything that is not one of the provider's instance states (including
        the empty string) is UNKNOWN, which keeps a readiness wait polling.
        """
        raw = str(status or "").strip().upper()
        if raw in _PROVIDER_STATES:
            return cls(raw)
        return cls.UNKNOWN

    @property
    def is_pending(self) -> bool:
        return self in _PENDING

    @property
    def is_fatal(self) -> bool:
        return self in _FATAL

    @property
    def is_running(self) -> bool:
        return self is LifecycleState.RUNNING

    @property
    def is_terminal(self) -> bool:
        return self.is_running or self.is_fatal or self is LifecycleState.PERMISSION_DENIED


_PENDING = frozenset({LifecycleState.PROVISIONING, LifecycleState.STAGING})
_FATAL = frozenset(
    {
        LifecycleState.STOPPING,
        LifecycleState.STOPPED,
        LifecycleState.TERMINATED,
        LifecycleState.SUSPENDED,
    }
)
# PERMISSION_DENIED and UNKNOWN are ours, never reported by the provider.
_PROVIDER_STATES = frozenset(state.value for state in _PENDING | _FATAL | {LifecycleState.RUNNING})


@dataclass(frozen=True)
class ProxyConfig:
    http_proxy: str = ""
    https_proxy: str = ""
    cacert: bytes | None = None
    no_tls: bool = False


@dataclass(frozen=True)
class ProbeRequest:
    """Everything a single validation run needs; immutable once the run starts."""

    subnet_id: str
    image_id: str | None = None
    machine_type: str | None = None
    timeout: float = 2.0
    proxy: ProxyConfig = field(default_factory=ProxyConfig)


@dataclass
class ProbeInstance:
    name: str
    zone: str
    state: LifecycleState = LifecycleState.PROVISIONING
