# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""egress-verifier CLI."""

from __future__ import annotations

import argparse
import json
import math
import os
import sys
from pathlib import Path
from typing import Any

from ..compute import create_default_compute_client
from ..config import load_compute_settings, load_probe_settings
from ..constants import DEFAULT_LABELS
from ..errors import ComputeApiError, ErrorCategory, error_category_to_reason
from ..log import setup_logging
from ..models import ProxyConfig, ValidationResult
from ..runtime import EgressVerifier

ACCESS_TOKEN_ENV = "EGRESSVERIFIER_ACCESS_TOKEN"


def _label(value: str) -> tuple[str, str]:
    key, sep, label_value = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"labels must look like key=value, got {value!r}")
    return key.strip().lower(), label_value.strip().lower()


def _positive_seconds(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"timeout must be a number of seconds, got {value!r}") from None
    if not math.isfinite(seconds) or seconds <= 0:
        raise argparse.ArgumentTypeError(f"timeout must be a positive, finite number of seconds, got {value!r}")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Verify that a GCP subnet allows the egress traffic a managed cluster needs"
    )
    parser.add_argument("--project", required=True, help="GCP project that owns the subnet")
    parser.add_argument("--region", required=True, help="Region of the subnet, e.g. us-east1")
    parser.add_argument("--subnet-id", required=True, help="Subnet to launch the probe instance in")
    parser.add_argument("--instance-type", help="Machine type for the probe instance")
    parser.add_argument("--image-id", help="Container-optimized image family (default: cos-97-lts)")
    parser.add_argument(
        "--timeout",
        type=_positive_seconds,
        default=2.0,
        help="Timeout in seconds for each egress request made by the probe",
    )
    parser.add_argument("--http-proxy", default="", help="HTTP proxy URL the probe should use")
    parser.add_argument("--https-proxy", default="", help="HTTPS proxy URL the probe should use")
    parser.add_argument("--cacert", type=Path, help="PEM file with an additional CA bundle for the proxy")
    parser.add_argument("--no-tls", action="store_true", help="Skip TLS verification for egress requests")
    parser.add_argument(
        "--label",
        dest="labels",
        action="append",
        type=_label,
        default=[],
        help="Extra key=value label for the probe instance (repeatable)",
    )
    parser.add_argument(
        "--access-token",
        default=None,
        help=f"OAuth2 access token for the Compute API (default: ${ACCESS_TOKEN_ENV})",
    )
    parser.add_argument("--json", action="store_true", help="Output JSON instead of human-friendly summary")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def _print_json(result: ValidationResult) -> None:
    json.dump(result.to_dict(), sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _pretty_print(result: ValidationResult) -> None:
    payload: dict[str, Any] = result.to_dict()
    print(f"[egress-verifier] Status: {'PASS' if result.ok else 'FAIL'}")
    for label, key in (("Errors", "errors"), ("Exceptions", "exceptions")):
        items = payload[key]
        if not items:
            continue
        print(f"{label}:")
        for item in items:
            reason = error_category_to_reason(ErrorCategory(item["category"]))
            print(f"- {item['category']} ({reason}): {item['message']}")
    endpoints = payload["unreachable_endpoints"]
    if endpoints:
        print(f"Unreachable endpoints ({len(endpoints)}):")
        for endpoint in endpoints:
            print(f"- {endpoint}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.debug else None)

    access_token = args.access_token or os.getenv(ACCESS_TOKEN_ENV)
    if not access_token:
        parser.error(f"an access token is required (--access-token or ${ACCESS_TOKEN_ENV})")

    cacert = None
    if args.cacert:
        try:
            cacert = args.cacert.read_bytes()
        except OSError as exc:
            parser.error(f"unable to read --cacert {args.cacert}: {exc.strerror or exc}")
    proxy = ProxyConfig(
        http_proxy=args.http_proxy,
        https_proxy=args.https_proxy,
        cacert=cacert,
        no_tls=args.no_tls,
    )
    labels = dict(DEFAULT_LABELS)
    labels.update(dict(args.labels))

    settings = load_probe_settings()
    client = create_default_compute_client(args.project, args.region, access_token, load_compute_settings())

    with EgressVerifier(client, settings=settings, labels=labels) as verifier:
        try:
            verifier.validate_machine_type(args.instance_type)
        except ComputeApiError as exc:
            print(f"Instance type {args.instance_type or settings.default_machine_type} is invalid: {exc}", file=sys.stderr)
            return 1
        result = verifier.validate_egress(
            args.subnet_id,
            image_id=args.image_id,
            machine_type=args.instance_type,
            timeout=args.timeout,
            proxy=proxy,
        )

    if args.json:
        _print_json(result)
    else:
        _pretty_print(result)

    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
