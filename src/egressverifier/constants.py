# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Literals shared by the boot script and the console analyzer."""

# The boot script echoes these to the serial console; the analyzer waits for
# USERDATA_END_MARKER, so both sides must use these exact strings.
USERDATA_BEGIN_MARKER = "USERDATA BEGIN"
USERDATA_END_MARKER = "USERDATA END"
VALIDATOR_START_MARKER = "VALIDATOR START"
VALIDATOR_END_MARKER = "VALIDATOR END"

# GCE only offers container-optimized images from this project.
IMAGE_PROJECT = "cos-cloud"
# Zone b exists in every region and carries the widest machine-type selection.
DEFAULT_ZONE_SUFFIX = "b"
DEFAULT_LABELS = {"egress-verifier": "owned"}
