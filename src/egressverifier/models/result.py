# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Validation result accumulated over a single run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..errors import CONTROL_CATEGORIES, ErrorCategory, categorize_exception


@dataclass(frozen=True)
class Failure:
    category: ErrorCategory
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"category": self.category.value, "message": self.message}


@dataclass
class ValidationResult:
    """
    Append-only record of what a run found.

    The caller reads success from the absence of failures, never from the
    absence of an exception: control errors are recorded here as well.
    """

    failures: list[Failure] = field(default_factory=list)
    unreachable_endpoints: list[str] = field(default_factory=list)

    def add_failure(self, category: ErrorCategory, message: str) -> ValidationResult:
        self.failures.append(Failure(category=category, message=message))
        return self

    def add_error(self, exc: BaseException | None) -> ValidationResult:
        """Record an exception as a classified failure; None is ignored."""
        if exc is None:
            return self
        message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
        return self.add_failure(categorize_exception(exc), message)

    def add_unreachable(self, endpoints: list[str]) -> ValidationResult:
        self.unreachable_endpoints.extend(endpoints)
        return self

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def errors(self) -> list[Failure]:
        """Failures that stopped the run early or prevented a verdict."""
        return [f for f in self.failures if f.category in CONTROL_CATEGORIES]

    @property
    def exceptions(self) -> list[Failure]:
        """Findings that did not stop the run (egress problems, teardown trouble)."""
        return [f for f in self.failures if f.category not in CONTROL_CATEGORIES]

    def categories(self) -> list[ErrorCategory]:
        return [f.category for f in self.failures]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "errors": [f.to_dict() for f in self.errors],
            "exceptions": [f.to_dict() for f in self.exceptions],
            "unreachable_endpoints": list(self.unreachable_endpoints),
        }
