# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    CREATION = "CREATION"
    INSTANCE_STATE = "INSTANCE_STATE"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    READINESS_TIMEOUT = "READINESS_TIMEOUT"
    ANALYSIS_TIMEOUT = "ANALYSIS_TIMEOUT"
    CANCELLED = "CANCELLED"
    CONSOLE = "CONSOLE"
    EGRESS_URL = "EGRESS_URL"
    TEARDOWN = "TEARDOWN"
    API_ERROR = "API_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Control errors abort the remaining steps of a run; the rest are findings.
CONTROL_CATEGORIES = frozenset(
    {
        ErrorCategory.CREATION,
        ErrorCategory.INSTANCE_STATE,
        ErrorCategory.PERMISSION_DENIED,
        ErrorCategory.READINESS_TIMEOUT,
        ErrorCategory.ANALYSIS_TIMEOUT,
        ErrorCategory.CANCELLED,
        ErrorCategory.CONSOLE,
        ErrorCategory.API_ERROR,
        ErrorCategory.UNKNOWN_ERROR,
    }
)


class EgressVerifierError(Exception):
    """Base class for every error raised by the validation core."""

    category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR

    def __init__(self, message: str, *, category: ErrorCategory | None = None):
        super().__init__(message)
        self.message = message
        if category is not None:
            self.category = category


class ComputeApiError(EgressVerifierError):
    """A compute control-plane call failed (HTTP error or transport failure)."""

    category = ErrorCategory.API_ERROR

    def __init__(self, message: str, *, status_code: int | None = None, operation: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.operation = operation

    @property
    def is_permission_error(self) -> bool:
        return self.status_code in (401, 403)

    @property
    def is_transient(self) -> bool:
        return self.status_code is None or self.status_code == 429 or self.status_code >= 500


class CreationError(EgressVerifierError):
    """Probe instance could not be created or labelled.

    ``instance`` is set when the resource exists despite the failure and still
    needs to be torn down.
    """

    category = ErrorCategory.CREATION

    def __init__(self, message: str, *, instance: Any = None):
        super().__init__(message)
        self.instance = instance


class LifecycleError(EgressVerifierError):
    category = ErrorCategory.INSTANCE_STATE


class InstanceStateError(LifecycleError):
    category = ErrorCategory.INSTANCE_STATE


class PermissionDeniedError(LifecycleError):
    category = ErrorCategory.PERMISSION_DENIED


class ReadinessTimeoutError(LifecycleError):
    category = ErrorCategory.READINESS_TIMEOUT


class PollTimeoutError(EgressVerifierError):
    category = ErrorCategory.UNKNOWN_ERROR

    def __init__(self, message: str = "timed out waiting for the condition", *, timeout: float | None = None):
        super().__init__(message)
        self.timeout = timeout


class PollCancelledError(EgressVerifierError):
    category = ErrorCategory.CANCELLED

    def __init__(self, message: str = "polling cancelled"):
        super().__init__(message)


class AnalysisTimeoutError(EgressVerifierError):
    category = ErrorCategory.ANALYSIS_TIMEOUT


class ConsoleError(EgressVerifierError):
    category = ErrorCategory.CONSOLE


class TeardownError(EgressVerifierError):
    category = ErrorCategory.TEARDOWN


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """Map an exception raised during a run to an ErrorCategory."""
    if isinstance(exc, ComputeApiError) and exc.is_permission_error:
        return ErrorCategory.PERMISSION_DENIED
    if isinstance(exc, EgressVerifierError):
        return exc.category
    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.CREATION: "Probe instance could not be created",
        ErrorCategory.INSTANCE_STATE: "Probe instance entered an unexpected state",
        ErrorCategory.PERMISSION_DENIED: "Missing required permissions for the account",
        ErrorCategory.READINESS_TIMEOUT: "Probe instance did not reach RUNNING in time",
        ErrorCategory.ANALYSIS_TIMEOUT: "Probe script did not finish in time",
        ErrorCategory.CANCELLED: "Validation was cancelled",
        ErrorCategory.CONSOLE: "Console output could not be retrieved",
        ErrorCategory.EGRESS_URL: "Egress connectivity problem detected",
        ErrorCategory.TEARDOWN: "Probe instance could not be stopped",
        ErrorCategory.API_ERROR: "Compute API call failed",
        ErrorCategory.UNKNOWN_ERROR: "Unexpected error during validation",
        None: "",
    }
    return mapping.get(category, "Unexpected error during validation")
