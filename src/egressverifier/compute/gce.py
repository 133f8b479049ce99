# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed ComputeClient for the GCE Compute v1 REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import ComputeSettings, load_compute_settings
from ..errors import ComputeApiError
from .client import ComputeClient, InstanceSpec, zone_for_region

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text.strip() or response.reason_phrase


class GceComputeClient(ComputeClient):
    """Synchronous GCE client; one HTTP request per call, no retries."""

    def __init__(
        self,
        project: str,
        region: str,
        access_token: str,
        settings: ComputeSettings | None = None,
        client: httpx.Client | None = None,
    ):
        self.project = project
        self.region = region
        self.zone = zone_for_region(region)
        self.settings = settings or load_compute_settings()
        self._client = client or httpx.Client(
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "User-Agent": self.settings.user_agent,
        }

    @property
    def _zone_url(self) -> str:
        return f"{self.settings.api_base_url}/projects/{self.project}/zones/{self.zone}"

    def _instance_url(self, name: str, action: str = "") -> str:
        url = f"{self._zone_url}/instances/{name}"
        return f"{url}/{action}" if action else url

    def _call(self, operation: str, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._client.request(method, url, headers=self._headers, **kwargs)
        except httpx.HTTPError as exc:
            raise ComputeApiError(f"{operation} failed: {exc}", operation=operation) from exc

        if response.is_error:
            message = _error_message(response)
            logger.debug("%s returned HTTP %s: %s", operation, response.status_code, message)
            raise ComputeApiError(
                f"{operation} failed: HTTP {response.status_code}: {message}",
                status_code=response.status_code,
                operation=operation,
            )
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise ComputeApiError(
                f"{operation} returned a non-JSON body", status_code=response.status_code, operation=operation
            ) from exc
        return payload if isinstance(payload, dict) else {}

    def insert(self, spec: InstanceSpec) -> None:
        self._call("instances.insert", "POST", f"{self._zone_url}/instances", json=spec.to_body(self.zone))

    def describe(self, name: str) -> dict[str, Any]:
        return self._call("instances.get", "GET", self._instance_url(name))

    def get(self, name: str) -> str:
        return str(self.describe(name).get("status") or "")

    def set_labels(self, name: str, labels: dict[str, str]) -> None:
        # setLabels rejects requests without the current fingerprint.
        fingerprint = self.describe(name).get("labelFingerprint")
        body: dict[str, Any] = {"labels": dict(labels)}
        if fingerprint:
            body["labelFingerprint"] = fingerprint
        self._call("instances.setLabels", "POST", self._instance_url(name, "setLabels"), json=body)

    def get_console_output(self, name: str) -> str:
        payload = self._call(
            "instances.getSerialPortOutput",
            "GET",
            self._instance_url(name, "serialPort"),
            params={"port": 1},
        )
        return str(payload.get("contents") or "")

    def stop(self, name: str) -> None:
        self._call("instances.stop", "POST", self._instance_url(name, "stop"))

    def validate_machine_type(self, machine_type: str) -> None:
        logger.debug("Listing machine types in %s to validate %s", self.zone, machine_type)
        params: dict[str, str] = {}
        while True:
            page = self._call("machineTypes.list", "GET", f"{self._zone_url}/machineTypes", params=params)
            items = page.get("items") or []
            logger.debug("Machine type page contains %d entries", len(items))
            if any(item.get("name") == machine_type for item in items if isinstance(item, dict)):
                logger.debug("Machine type %s supported", machine_type)
                return
            token = page.get("nextPageToken")
            if not token:
                break
            params = {"pageToken": str(token)}
        raise ComputeApiError(
            f"machine type {machine_type} not found in zone {self.zone}", operation="machineTypes.list"
        )

    def close(self) -> None:
        self._client.close()
