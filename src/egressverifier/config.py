# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for egress-verifier."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"egress-verifier/{__version__}"
DEFAULT_API_BASE_URL = "https://compute.googleapis.com/compute/v1"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _positive(value: float, default: float) -> float:
    return value if value > 0 else default


@dataclass
class ComputeSettings:
    """Compute control-plane client defaults."""

    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: float = 30.0
    verify_ssl: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls) -> "ComputeSettings":
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            api_base_url=os.getenv("EGRESSVERIFIER_API_BASE_URL", cls.api_base_url).rstrip("/"),
            timeout=_positive(_float_env("EGRESSVERIFIER_API_TIMEOUT", cls.timeout), cls.timeout),
            verify_ssl=_bool_env("EGRESSVERIFIER_VERIFY_SSL", cls.verify_ssl),
            user_agent=os.getenv("EGRESSVERIFIER_USER_AGENT", cls.user_agent),
        )


@dataclass
class ProbeSettings:
    """Timing and image defaults for a single validation run."""

    readiness_interval: float = 5.0
    readiness_timeout: float = 120.0
    console_interval: float = 30.0
    console_timeout: float = 240.0
    default_machine_type: str = "e2-standard-2"
    default_image: str = "cos-97-lts"
    validator_image: str = "quay.io/app-sre/osd-network-verifier:v0.1.159-9a6e0eb"
    disk_size_gb: int = 10
    vpc_name: str | None = None

    @classmethod
    def from_env(cls) -> "ProbeSettings":
        """Create settings from environment variables (evaluated at call time)."""
        disk_size_gb = _int_env("EGRESSVERIFIER_DISK_SIZE_GB", cls.disk_size_gb)
        if disk_size_gb <= 0:
            disk_size_gb = cls.disk_size_gb
        return cls(
            readiness_interval=_positive(
                _float_env("EGRESSVERIFIER_READINESS_INTERVAL", cls.readiness_interval), cls.readiness_interval
            ),
            readiness_timeout=_positive(
                _float_env("EGRESSVERIFIER_READINESS_TIMEOUT", cls.readiness_timeout), cls.readiness_timeout
            ),
            console_interval=_positive(
                _float_env("EGRESSVERIFIER_CONSOLE_INTERVAL", cls.console_interval), cls.console_interval
            ),
            console_timeout=_positive(
                _float_env("EGRESSVERIFIER_CONSOLE_TIMEOUT", cls.console_timeout), cls.console_timeout
            ),
            default_machine_type=os.getenv("EGRESSVERIFIER_MACHINE_TYPE", cls.default_machine_type),
            default_image=os.getenv("EGRESSVERIFIER_DEFAULT_IMAGE", cls.default_image),
            validator_image=os.getenv("EGRESSVERIFIER_VALIDATOR_IMAGE", cls.validator_image),
            disk_size_gb=disk_size_gb,
            vpc_name=os.getenv("EGRESSVERIFIER_GCP_VPC_NAME") or None,
        )


def load_compute_settings() -> ComputeSettings:
    """Load compute client settings from environment with sensible defaults."""
    return ComputeSettings.from_env()


def load_probe_settings() -> ProbeSettings:
    """Load probe run settings from environment with sensible defaults."""
    return ProbeSettings.from_env()
