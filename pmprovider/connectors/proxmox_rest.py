"""
Proxmox VE REST API Client
==========================

Thin REST client with ticket auth, retries on idempotent reads, and the
``/cluster/nextid`` lookup used for VMID allocation.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from ..core.logger import get_connector_logger

logger = get_connector_logger("proxmox")

# Proxmox refuses VMIDs below this value.
MIN_VMID = 100

_RETRYABLE_METHODS = ("GET",)


class ProxmoxAPIError(RuntimeError):
    """Raised when Proxmox REST calls fail."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or {}


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    backoff_seconds: float = 1.0
    backoff_multiplier: float = 2.0


class ProxmoxRestClient:
    """Synchronous REST client for the Proxmox VE API.

    The underlying ``requests.Session`` is shared by every caller once
    :meth:`login` has run; it is not mutated afterwards.
    """

    def __init__(
        self,
        api_url: str,
        *,
        tls_insecure: bool = False,
        timeout_seconds: float = 30.0,
        retries: Optional[RetryConfig] = None,
        max_probe: int = 1000,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_url:
            raise ValueError("api_url must not be empty")
        self._base_url = api_url.rstrip("/")
        self._timeout = timeout_seconds
        self._retry = retries or RetryConfig()
        self._max_probe = max_probe
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._session.verify = not tls_insecure
        self._ticket: Optional[str] = None
        if tls_insecure:
            logger.warning("TLS certificate verification disabled for %s", self._base_url)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def authenticated(self) -> bool:
        return self._ticket is not None

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def login(self, username: str, password: str) -> str:
        """Obtain an auth ticket and attach it to the session.

        Returns:
            The ticket string.

        Raises:
            ProxmoxAPIError: if the credentials are rejected or no ticket
                comes back.
        """
        logger.info("Logging in to %s as %s", self._base_url, username)
        data = self._request(
            "POST",
            "/access/ticket",
            data={"username": username, "password": password},
            auth=False,
        )
        payload = data.get("data") or {}
        ticket = payload.get("ticket")
        if not ticket:
            raise ProxmoxAPIError("No ticket returned from login.")
        self._ticket = ticket
        self._session.cookies.set("PVEAuthCookie", ticket)
        csrf = payload.get("CSRFPreventionToken")
        if csrf:
            self._session.headers["CSRFPreventionToken"] = csrf
        return ticket

    def get_next_id(self, floor: int) -> int:
        """Return the first free VMID at or above ``floor``.

        Floors below :data:`MIN_VMID` let Proxmox pick its own lowest free
        id.  Otherwise ``floor`` is checked and, while Proxmox reports it as
        taken, the next ``max_probe`` ids above it are tried in turn.
        """
        if floor < MIN_VMID:
            data = self._request("GET", "/cluster/nextid")
            return self._parse_vmid(data)

        for candidate in range(floor, floor + self._max_probe):
            try:
                data = self._request("GET", "/cluster/nextid", params={"vmid": candidate})
            except ProxmoxAPIError as exc:
                if exc.status_code == 400 and "vmid" in exc.errors:
                    logger.debug("VMID %d is taken, probing %d", candidate, candidate + 1)
                    continue
                raise
            return self._parse_vmid(data)

        raise ProxmoxAPIError(
            f"No free VMID in [{floor}, {floor + self._max_probe})"
        )

    def get(self, path: str, **params: Any) -> Any:
        return self._request("GET", path, params=params or None).get("data")

    def post(self, path: str, **data: Any) -> Any:
        return self._request("POST", path, data=data or None).get("data")

    def put(self, path: str, **data: Any) -> Any:
        return self._request("PUT", path, data=data or None).get("data")

    def delete(self, path: str, **params: Any) -> Any:
        return self._request("DELETE", path, params=params or None).get("data")

    @staticmethod
    def _parse_vmid(data: Dict[str, Any]) -> int:
        raw = data.get("data")
        try:
            return int(raw)
        except (TypeError, ValueError) as exc:
            raise ProxmoxAPIError(f"Invalid nextid response: {raw!r}") from exc

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        auth: bool = True,
        error_excerpt_limit: int = 200,
    ) -> Dict[str, Any]:
        if auth and not self._ticket:
            raise ProxmoxAPIError("Not authenticated. Call login() first.")

        url = f"{self._base_url}{path}"
        attempts = max(1, self._retry.max_attempts) if method in _RETRYABLE_METHODS else 1
        for attempt in range(attempts):
            try:
                response = self._session.request(
                    method,
                    url,
                    params=params,
                    data=data,
                    timeout=self._timeout,
                )
            except requests.RequestException as exc:
                if attempt < attempts - 1:
                    self._sleep(attempt)
                    continue
                raise ProxmoxAPIError(f"Request failed: {exc}") from exc

            if response.status_code in (429,) or response.status_code >= 500:
                if attempt < attempts - 1:
                    self._sleep(attempt)
                    continue
            if not response.ok:
                errors = self._error_fields(response)
                detail = (response.reason or response.text)[:error_excerpt_limit]
                if errors:
                    detail = f"{detail} {errors}"
                raise ProxmoxAPIError(
                    f"Proxmox HTTP {response.status_code}: {detail}",
                    status_code=response.status_code,
                    errors=errors,
                )
            try:
                payload = response.json()
            except ValueError as exc:
                raise ProxmoxAPIError("Invalid JSON response") from exc
            return payload if isinstance(payload, dict) else {"data": payload}

        raise ProxmoxAPIError("Request failed after retries.")

    @staticmethod
    def _error_fields(response: requests.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return {}
        if isinstance(payload, dict) and isinstance(payload.get("errors"), dict):
            return payload["errors"]
        return {}

    def _sleep(self, attempt: int) -> None:
        delay = self._retry.backoff_seconds * (
            self._retry.backoff_multiplier ** attempt
        )
        time.sleep(delay)
