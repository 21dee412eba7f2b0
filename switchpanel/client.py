"""REST client for the switch panel backend."""

from __future__ import annotations

import threading
from types import TracebackType
from typing import Any, Self

import requests
from loguru import logger
from pydantic import ValidationError

from switchpanel.exceptions import (
    APIError,
    AuthenticationError,
    DeviceMutationError,
    RequestCancelled,
)
from switchpanel.models.device import Device, DeviceDraft, Session
from switchpanel.snapshot import StatusSnapshot, parse_status_payload

API_PATH = "api"


class SwitchPanelClient:
    """HTTP client using the backend's cookie session.

    Read calls raise :class:`APIError` on transport failures. Device
    mutations raise :class:`DeviceMutationError` with a message fit for the
    person who triggered them.

    Usage::

        with SwitchPanelClient("https://panel.local", "admin", "secret") as client:
            for device in client.list_devices():
                print(device.name, device.ip_address)
    """

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        verify_ssl: bool = True,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self._session: requests.Session | None = None

    def connect(self) -> None:
        """Open the HTTP session and log in when credentials are configured."""
        self._session = requests.Session()
        self._session.verify = self.verify_ssl

        if self.username is None:
            return

        url = f"{self.base_url}/{API_PATH}/login"
        try:
            resp = self._session.post(
                url, json={"username": self.username, "password": self.password or ""}, timeout=self.timeout
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            self._session.close()
            self._session = None
            raise AuthenticationError(f"Login failed: {e}") from e

        logger.info(f"Logged in to {self.base_url} as {self.username}")

    def disconnect(self) -> None:
        """Log out and close the HTTP session."""
        if self._session is None:
            return
        if self.username is not None:
            try:
                self._session.post(f"{self.base_url}/{API_PATH}/logout", timeout=self.timeout)
            except requests.RequestException:
                logger.debug("Logout request failed (ignored)")
        self._session.close()
        self._session = None

    def is_connected(self) -> bool:
        return self._session is not None

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        self.disconnect()

    # ── low-level ──────────────────────────────────────────────────────

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> requests.Response:
        if self._session is None:
            raise APIError("Not connected. Call connect() first.")
        url = f"{self.base_url}/{API_PATH}/{endpoint}"
        try:
            resp = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise APIError(f"{method} {endpoint} failed: {e}") from e
        if resp.status_code == 401:
            raise AuthenticationError(f"{method} {endpoint}: session is not authenticated")
        if not resp.ok:
            raise APIError(f"{method} {endpoint} failed with HTTP {resp.status_code}", status_code=resp.status_code)
        return resp

    def _json(self, resp: requests.Response, endpoint: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise APIError(f"{endpoint} returned invalid JSON", status_code=resp.status_code) from e

    def _mutate(self, method: str, endpoint: str, action: str, **kwargs: Any) -> requests.Response:
        try:
            return self._request(method, endpoint, **kwargs)
        except AuthenticationError:
            raise
        except APIError as e:
            raise DeviceMutationError(f"Failed to {action}: {e}", status_code=e.status_code) from e

    # ── session ────────────────────────────────────────────────────────

    def me(self) -> Session:
        """The logged-in session; raises :class:`AuthenticationError` when logged out."""
        resp = self._request("GET", "me")
        return Session.model_validate(self._json(resp, "me"))

    # ── devices ────────────────────────────────────────────────────────

    def list_devices(self) -> list[Device]:
        resp = self._request("GET", "switches")
        data = self._json(resp, "switches") or []
        try:
            return [Device.model_validate(d) for d in data]
        except ValidationError as e:
            raise APIError(f"switches returned malformed devices: {e.error_count()} error(s)") from e

    def get_status(self, device_id: int) -> Any:
        """Raw decoded status payload, in whichever shape the backend sends."""
        resp = self._request("GET", "switches/status", params={"id": device_id})
        return self._json(resp, "switches/status")

    def fetch_snapshot(self, device_id: int) -> StatusSnapshot:
        return parse_status_payload(self.get_status(device_id))

    def create_device(self, draft: DeviceDraft, cancel: threading.Event | None = None) -> Device:
        """Add a device.

        Args:
            draft: Name, address and SNMP settings of the new device.
            cancel: When set before the request is sent or before its
                response is used, :class:`RequestCancelled` is raised instead.
        """
        if cancel is not None and cancel.is_set():
            raise RequestCancelled("Add device cancelled")
        resp = self._mutate("POST", "switches", "add switch", json=draft.model_dump())
        if cancel is not None and cancel.is_set():
            logger.debug(f"Add device {draft.ip_address} cancelled after the request completed")
            raise RequestCancelled("Add device cancelled")
        try:
            device = Device.model_validate(self._json(resp, "switches"))
        except ValidationError as e:
            raise DeviceMutationError("Failed to add switch: backend returned a malformed device") from e
        logger.info(f"Added device {device.id} ({device.ip_address})")
        return device

    def update_device(self, device: Device) -> None:
        self._mutate("PUT", "switches", "update switch", json=device.to_update_payload())
        logger.info(f"Updated device {device.id}")

    def delete_device(self, device_id: int) -> None:
        self._mutate("DELETE", "switches", "delete switch", params={"id": device_id})
        logger.info(f"Deleted device {device_id}")

    def sync_device(self, device_id: int) -> None:
        """Ask the backend to re-detect the device's port topology."""
        self._mutate("POST", "switches/sync", "sync switch", params={"id": device_id})
        logger.info(f"Synced device {device_id}")
