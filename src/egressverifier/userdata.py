# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Boot script templating for the probe instance."""

from __future__ import annotations

import base64
import math
import re
from collections.abc import Mapping

from .config import ProbeSettings
from .constants import (
    USERDATA_BEGIN_MARKER,
    USERDATA_END_MARKER,
    VALIDATOR_END_MARKER,
    VALIDATOR_START_MARKER,
)
from .models import ProbeRequest

# Every line the script prints is mirrored to the serial console so that
# getSerialPortOutput can see it.
USERDATA_TEMPLATE = """#!/bin/bash
exec > >(tee -a /dev/ttyS0) 2>&1
echo "${USERDATA_BEGIN}"
mkdir -p /var/lib/egress-verifier
echo "${CACERT}" | base64 -d > /var/lib/egress-verifier/proxy-ca.pem
echo "${VALIDATOR_START_VERIFIER}"
docker run --rm \\
  -e "HTTP_PROXY=${HTTP_PROXY}" \\
  -e "HTTPS_PROXY=${HTTPS_PROXY}" \\
  -v /var/lib/egress-verifier:/config:ro \\
  ${VALIDATOR_IMAGE} \\
  --timeout=${TIMEOUT} \\
  --cacert=/config/proxy-ca.pem \\
  --no-tls=${NOTLS}
echo "${VALIDATOR_END_VERIFIER}"
echo "${USERDATA_END}"
"""

_VARIABLE_RE = re.compile(r"\$\{([^}]*)\}|\$([A-Za-z0-9_]+)")


def format_duration(seconds: float) -> str:
    """Render seconds the way the validator image parses durations (``2s``, ``1m30s``)."""
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"duration must be a finite, non-negative number of seconds, got {seconds!r}")
    if seconds == 0:
        return "0s"
    if seconds < 1:
        return f"{round(seconds * 1000):d}ms"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    secs_text = f"{secs:g}s"
    if hours:
        return f"{int(hours)}h{int(minutes)}m{secs_text}"
    if minutes:
        return f"{int(minutes)}m{secs_text}"
    return secs_text


def build_userdata_variables(request: ProbeRequest, settings: ProbeSettings) -> dict[str, str]:
    proxy = request.proxy
    return {
        "USERDATA_BEGIN": USERDATA_BEGIN_MARKER,
        "USERDATA_END": USERDATA_END_MARKER,
        "VALIDATOR_START_VERIFIER": VALIDATOR_START_MARKER,
        "VALIDATOR_END_VERIFIER": VALIDATOR_END_MARKER,
        "VALIDATOR_IMAGE": settings.validator_image,
        "TIMEOUT": format_duration(request.timeout),
        "HTTP_PROXY": proxy.http_proxy,
        "HTTPS_PROXY": proxy.https_proxy,
        "CACERT": base64.b64encode(proxy.cacert or b"").decode("ascii"),
        "NOTLS": "true" if proxy.no_tls else "false",
    }


def generate_userdata(variables: Mapping[str, str], template: str = USERDATA_TEMPLATE) -> str:
    """Expand ``$NAME`` and ``${NAME}`` references; unknown names expand to ''."""

    def _expand(match: re.Match[str]) -> str:
        name = match.group(1) if match.group(1) is not None else match.group(2)
        return str(variables.get(name, ""))

    return _VARIABLE_RE.sub(_expand, template)


__all__ = [
    "USERDATA_TEMPLATE",
    "build_userdata_variables",
    "format_duration",
    "generate_userdata",
]
