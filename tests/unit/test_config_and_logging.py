# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging

from egressverifier import config
from egressverifier import log as log_module
from egressverifier.config import DEFAULT_API_BASE_URL, DEFAULT_USER_AGENT


def test_probe_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("EGRESSVERIFIER_READINESS_INTERVAL", "2")
    monkeypatch.setenv("EGRESSVERIFIER_READINESS_TIMEOUT", "60")
    monkeypatch.setenv("EGRESSVERIFIER_CONSOLE_INTERVAL", "10")
    monkeypatch.setenv("EGRESSVERIFIER_CONSOLE_TIMEOUT", "300")
    monkeypatch.setenv("EGRESSVERIFIER_MACHINE_TYPE", "n2-standard-2")
    monkeypatch.setenv("EGRESSVERIFIER_DEFAULT_IMAGE", "cos-105-lts")
    monkeypatch.setenv("EGRESSVERIFIER_VALIDATOR_IMAGE", "registry.example/validator:2")
    monkeypatch.setenv("EGRESSVERIFIER_DISK_SIZE_GB", "20")
    monkeypatch.setenv("EGRESSVERIFIER_GCP_VPC_NAME", "shared-vpc")

    settings = config.load_probe_settings()

    assert settings.readiness_interval == 2
    assert settings.readiness_timeout == 60
    assert settings.console_interval == 10
    assert settings.console_timeout == 300
    assert settings.default_machine_type == "n2-standard-2"
    assert settings.default_image == "cos-105-lts"
    assert settings.validator_image == "registry.example/validator:2"
    assert settings.disk_size_gb == 20
    assert settings.vpc_name == "shared-vpc"


def test_probe_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("EGRESSVERIFIER_READINESS_INTERVAL", "soon")
    monkeypatch.setenv("EGRESSVERIFIER_READINESS_TIMEOUT", "-5")
    monkeypatch.setenv("EGRESSVERIFIER_CONSOLE_TIMEOUT", "0")
    monkeypatch.setenv("EGRESSVERIFIER_DISK_SIZE_GB", "ten")
    monkeypatch.delenv("EGRESSVERIFIER_GCP_VPC_NAME", raising=False)

    settings = config.load_probe_settings()

    assert settings.readiness_interval == config.ProbeSettings.readiness_interval
    assert settings.readiness_timeout == config.ProbeSettings.readiness_timeout
    assert settings.console_timeout == config.ProbeSettings.console_timeout
    assert settings.disk_size_gb == config.ProbeSettings.disk_size_gb
    assert settings.vpc_name is None


def test_compute_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("EGRESSVERIFIER_API_BASE_URL", "https://compute.example.test/v1/")
    monkeypatch.setenv("EGRESSVERIFIER_API_TIMEOUT", "4.5")
    monkeypatch.setenv("EGRESSVERIFIER_VERIFY_SSL", "0")
    monkeypatch.setenv("EGRESSVERIFIER_USER_AGENT", "Custom/1.0")

    settings = config.load_compute_settings()

    assert settings.api_base_url == "https://compute.example.test/v1"
    assert settings.timeout == 4.5
    assert settings.verify_ssl is False
    assert settings.user_agent == "Custom/1.0"


def test_compute_settings_defaults(monkeypatch):
    for name in (
        "EGRESSVERIFIER_API_BASE_URL",
        "EGRESSVERIFIER_API_TIMEOUT",
        "EGRESSVERIFIER_VERIFY_SSL",
        "EGRESSVERIFIER_USER_AGENT",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = config.load_compute_settings()

    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.verify_ssl is True
    assert settings.user_agent == DEFAULT_USER_AGENT


def test_settings_read_env_at_call_time(monkeypatch):
    monkeypatch.setenv("EGRESSVERIFIER_CONSOLE_INTERVAL", "7")
    assert config.load_probe_settings().console_interval == 7
    monkeypatch.setenv("EGRESSVERIFIER_CONSOLE_INTERVAL", "8")
    assert config.load_probe_settings().console_interval == 8


def test_setup_logging_uses_requested_level(monkeypatch):
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

    log_module.setup_logging("debug")
    assert captured["level"] == logging.DEBUG

    log_module.setup_logging("not-a-level")
    assert captured["level"] == logging.WARNING


def test_setup_logging_reads_env_level(monkeypatch):
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
    monkeypatch.setenv(log_module.LOG_LEVEL_ENV, "info")

    log_module.setup_logging()
    assert captured["level"] == logging.INFO


def test_setup_logging_keeps_http_request_logs_quiet_unless_debug(monkeypatch):
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: None)
    for name in log_module.HTTP_LOGGERS:
        monkeypatch.setattr(logging.getLogger(name), "level", logging.getLogger(name).level)

    log_module.setup_logging("info")
    assert all(logging.getLogger(name).level == logging.WARNING for name in log_module.HTTP_LOGGERS)

    log_module.setup_logging("debug")
    assert all(logging.getLogger(name).level == logging.DEBUG for name in log_module.HTTP_LOGGERS)
