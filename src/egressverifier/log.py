# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging setup for the verifier CLI."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "EGRESSVERIFIER_LOG_LEVEL"

# httpx logs every Compute call at INFO; console polling makes that noisy.
HTTP_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: str | None = None) -> None:
    """
    Configure root logging at ``level`` (or ``$EGRESSVERIFIER_LOG_LEVEL``).

    Per-request HTTP logs stay at WARNING unless the verifier runs at DEBUG.
    """
    name = (level or os.getenv(LOG_LEVEL_ENV) or "WARNING").upper()
    effective = getattr(logging, name, None)
    if not isinstance(effective, int):
        effective = logging.WARNING
    logging.basicConfig(
        level=effective,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    http_level = logging.DEBUG if effective <= logging.DEBUG else logging.WARNING
    for logger_name in HTTP_LOGGERS:
        logging.getLogger(logger_name).setLevel(http_level)


__all__ = ["HTTP_LOGGERS", "LOG_LEVEL_ENV", "setup_logging"]
