# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""One egress validation run: create, wait, analyze, terminate."""

from __future__ import annotations

import logging
import threading

from .config import ProbeSettings, load_probe_settings
from .console import ConsoleLogAnalyzer
from .errors import CreationError, EgressVerifierError, ErrorCategory
from .lifecycle import InstanceLifecycle
from .models import ProbeRequest, ValidationResult
from .userdata import build_userdata_variables, generate_userdata

logger = logging.getLogger(__name__)


class EgressController:
    """
    Coordinates the instance lifecycle and console analysis for a single run.

    Control errors end the run early but are recorded on the returned
    ``ValidationResult`` instead of being raised. Once an instance exists it
    is stopped exactly once before ``validate_egress`` returns.
    """

    def __init__(
        self,
        lifecycle: InstanceLifecycle,
        analyzer: ConsoleLogAnalyzer,
        settings: ProbeSettings | None = None,
    ):
        self.lifecycle = lifecycle
        self.analyzer = analyzer
        self.settings = settings or load_probe_settings()

    def effective_image(self, request: ProbeRequest) -> str:
        return request.image_id or self.settings.default_image

    def validate_egress(self, request: ProbeRequest, *, cancel: threading.Event | None = None) -> ValidationResult:
        result = ValidationResult()
        logger.debug("Using configured timeout of %gs for each egress request", request.timeout)

        try:
            userdata = generate_userdata(build_userdata_variables(request, self.settings))
        except ValueError as exc:
            logger.error("Rejecting probe request for %s: %s", request.subnet_id, exc)
            return result.add_failure(ErrorCategory.CREATION, f"invalid probe request: {exc}")
        logger.debug("Generated userdata script:\n---\n%s\n---", userdata)
        image_id = self.effective_image(request)

        try:
            instance = self.lifecycle.create(request, userdata, image_id)
        except CreationError as exc:
            result.add_error(exc)
            if exc.instance is not None:
                self.lifecycle.terminate(exc.instance, result)
            return result

        with self.lifecycle.terminating(instance, result):
            logger.debug("Waiting for instance %s to be running", instance.name)
            try:
                self.lifecycle.await_running(instance, cancel=cancel)
            except EgressVerifierError as exc:
                logger.error("Instance %s never became ready: %s", instance.name, exc.message)
                return result.add_error(exc)

            logger.info("Gathering and parsing console log output...")
            try:
                findings = self.analyzer.run(instance, cancel=cancel)
            except EgressVerifierError as exc:
                logger.error("Console analysis of %s failed: %s", instance.name, exc.message)
                result.add_error(exc)
            else:
                findings.apply_to(result)

        return result


__all__ = ["EgressController"]
