# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe instance name generation."""

from __future__ import annotations

import random
import re

# GCE resource names: lowercase letter first, then letters, digits or dashes.
_NAME_RE = re.compile(r"^[a-z]([-a-z0-9]{0,61}[a-z0-9])?$")


class InstanceNameGenerator:
    """
    Produces ``<prefix>-<8 hex digits>`` names.

    The random source is injected; pass a seeded ``random.Random`` for
    reproducible names.
    """

    def __init__(self, rng: random.Random | None = None, prefix: str = "verifier"):
        prefix = prefix.strip().lower()
        if not _NAME_RE.match(prefix) or len(prefix) > 54:
            raise ValueError(f"invalid instance name prefix: {prefix!r}")
        self._rng = rng or random.SystemRandom()
        self.prefix = prefix

    def __call__(self) -> str:
        return f"{self.prefix}-{self._rng.getrandbits(32):08x}"


def is_valid_instance_name(name: str) -> bool:
    return bool(_NAME_RE.match(name or ""))


__all__ = ["InstanceNameGenerator", "is_valid_instance_name"]
