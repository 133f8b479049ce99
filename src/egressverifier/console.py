# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Serial console analysis.

Console output only ever grows, and while the boot script is still running it
may hold a partial run. Nothing is parsed until the completion marker shows
up; the text is then parsed once, as a whole, on the tick that first sees it.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field

from .compute.client import ComputeClient
from .config import ProbeSettings, load_probe_settings
from .constants import USERDATA_END_MARKER
from .errors import AnalysisTimeoutError, ComputeApiError, ConsoleError, ErrorCategory, PollTimeoutError
from .models import ProbeInstance, ValidationResult
from .poll import Clock, poll_immediate

logger = logging.getLogger(__name__)

FAILURE_LINE_RE = re.compile(r"^.*(?:Cannot|Could not|Failed|command not found).*$", re.MULTILINE)
UNREACHABLE_RE = re.compile(r"Unable to reach (\S+)")

EGRESS_FAILURE_MESSAGE = "internet connectivity problem: please ensure there's internet access in given vpc subnets"


@dataclass
class ConsoleFindings:
    connectivity_failed: bool = False
    unreachable_endpoints: list[str] = field(default_factory=list)
    failure_lines: list[str] = field(default_factory=list)

    def apply_to(self, result: ValidationResult) -> ValidationResult:
        # One aggregate failure however many indicator lines matched.
        if self.connectivity_failed:
            result.add_failure(ErrorCategory.EGRESS_URL, EGRESS_FAILURE_MESSAGE)
        return result.add_unreachable(self.unreachable_endpoints)


def parse_console_output(text: str) -> ConsoleFindings:
    """Extract failure signals from one complete console snapshot."""
    failure_lines = FAILURE_LINE_RE.findall(text)
    return ConsoleFindings(
        connectivity_failed=bool(failure_lines),
        unreachable_endpoints=UNREACHABLE_RE.findall(text),
        failure_lines=failure_lines,
    )


def has_completion_marker(text: str) -> bool:
    return USERDATA_END_MARKER in text


class ConsoleLogAnalyzer:
    def __init__(
        self,
        compute: ComputeClient,
        *,
        settings: ProbeSettings | None = None,
        clock: Clock | None = None,
    ):
        self.compute = compute
        self.settings = settings or load_probe_settings()
        self.clock = clock

    def run(
        self,
        instance: ProbeInstance,
        interval: float | None = None,
        timeout: float | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> ConsoleFindings:
        """
        Poll the console until the boot script reports completion.

        Fetch errors end the wait immediately; a missing marker at the deadline
        raises ``AnalysisTimeoutError``.
        """
        interval = self.settings.console_interval if interval is None else interval
        timeout = self.settings.console_timeout if timeout is None else timeout
        findings: list[ConsoleFindings] = []

        def _script_finished() -> bool:
            try:
                text = self.compute.get_console_output(instance.name)
            except ComputeApiError as exc:
                raise ConsoleError(f"unable to read console output of {instance.name}: {exc.message}") from exc
            if not text:
                logger.debug("Console output for %s not yet populated, continuing to wait...", instance.name)
                return False
            if not has_completion_marker(text):
                logger.debug("Console output for %s has data but the script has not finished, continuing to wait...", instance.name)
                return False

            logger.debug("Full console output for %s:\n---\n%s\n---", instance.name, text)
            findings.append(parse_console_output(text))
            return True

        try:
            poll_immediate(_script_finished, interval, timeout, clock=self.clock, cancel=cancel)
        except PollTimeoutError as exc:
            raise AnalysisTimeoutError(
                f"probe script on {instance.name} did not report completion within {timeout:g}s"
            ) from exc

        return findings[0]


__all__ = [
    "ConsoleFindings",
    "ConsoleLogAnalyzer",
    "EGRESS_FAILURE_MESSAGE",
    "has_completion_marker",
    "parse_console_output",
]
