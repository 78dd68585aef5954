"""
Portal HTTP gateway — client side of the REST surface.

All outbound calls from editing sessions and the admin dashboard poller go
through this class. It implements the persistence boundary used by
``DraftSession`` (``load`` / ``save`` / ``mark_completed``) and the admin read
boundary used by ``AdminDashboardPoller``.

HTTP failures are mapped back onto the portal exception hierarchy:

    401 / 403            → AuthError
    404                  → NotFoundError
    409                  → InvalidStateError
    400 / 413 / 415 / 422 → ValidationError
    5xx, timeout, connection failure → PersistenceError

Every request carries a timeout. There is no retry; the autosave cycle is
the retry.

Testability: pass a stub ``session`` instead of letting the gateway create a
real ``requests.Session``.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

from showcase.core.exceptions import (
    AuthError,
    InvalidStateError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from showcase.services.draft_mutator import edit_to_dict

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 15
_API_PREFIX = "/api/v1"

EXPORT_PATHS = {
    "all": "/admin/export-excel",
    "cumulative": "/admin/export-cumulative-report",
}


class PortalGateway:
    """REST client for one bearer credential.

    Usage:
        gateway = PortalGateway("https://portal.example.org", token=token)
        session = DraftSession(gateway)
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._session: requests.Session | None = session

    # ── HTTP session ─────────────────────────────────────────────────────────

    @property
    def session(self) -> requests.Session:
        """Return (or lazily create) the requests.Session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _url(self, path: str) -> str:
        return f"{self.base_url}{_API_PREFIX}{path}"

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _error_message(resp) -> tuple[str, dict]:
        try:
            body = resp.json()
        except ValueError:
            return resp.text or f"HTTP {resp.status_code}", {}
        if not isinstance(body, dict):
            return f"HTTP {resp.status_code}", {}
        return body.get("error") or f"HTTP {resp.status_code}", body.get("details") or {}

    def _raise_for_status(self, resp, method: str, path: str) -> None:
        status = resp.status_code
        if status < 400:
            return
        message, details = self._error_message(resp)
        logger.warning("Portal %s %s failed: %d %s", method, path, status, message)
        if status in (401, 403):
            raise AuthError(message, forbidden=status == 403)
        if status == 404:
            raise NotFoundError(resource="Submission" if "/submissions" in path else "Resource")
        if status == 409:
            raise InvalidStateError(message, current_status=details.get("status"))
        if status in (400, 413, 415, 422):
            raise ValidationError(message, details=details)
        raise PersistenceError(f"Portal returned HTTP {status}: {message}")

    def _request(self, method: str, path: str, *, json_body: Any = None, raw: bool = False):
        t0 = time.monotonic()
        try:
            resp = self.session.request(
                method,
                self._url(path),
                json=json_body,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            logger.warning("Portal %s %s timed out after %ss", method, path, self.timeout)
            raise PersistenceError(f"Portal request timed out: {method} {path}") from exc
        except requests.RequestException as exc:
            logger.warning("Portal %s %s connection failed: %s", method, path, exc)
            raise PersistenceError(f"Portal unreachable: {exc}") from exc

        duration_ms = int((time.monotonic() - t0) * 1000)
        logger.debug("Portal %s %s → %d (%dms)", method, path, resp.status_code, duration_ms)
        self._raise_for_status(resp, method, path)
        if raw:
            return resp
        try:
            return resp.json()
        except ValueError as exc:
            raise PersistenceError(f"Portal returned invalid JSON for {method} {path}") from exc

    # ── Auth ─────────────────────────────────────────────────────────────────

    def login(self, email: str, password: str) -> dict:
        """Sign in and keep the returned bearer credential for later calls."""
        body = self._request("POST", "/auth/login", json_body={"email": email, "password": password})
        self.token = body.get("token")
        return body.get("user") or {}

    # ── Persistence boundary ─────────────────────────────────────────────────

    def load(self) -> dict:
        return self._request("GET", "/submissions/current")

    load_current = load

    def save(self, submission_id: int, snapshot) -> dict:
        return self._request("PUT", f"/submissions/{submission_id}", json_body=snapshot.to_dict())

    def apply_edit(self, submission_id: int, edit) -> dict:
        return self._request("PATCH", f"/submissions/{submission_id}", json_body=edit_to_dict(edit))

    def mark_completed(self, submission_id: int) -> dict:
        return self._request("POST", f"/submissions/{submission_id}/complete")

    # ── Admin read boundary ──────────────────────────────────────────────────

    def list_submissions(self) -> list[dict]:
        return self._request("GET", "/admin/submissions")

    def get_stats(self) -> dict:
        return self._request("GET", "/admin/stats")

    def get_report(self, top_n: int | None = None) -> dict:
        path = "/admin/reports/summary"
        if top_n is not None:
            path += f"?top={int(top_n)}"
        return self._request("GET", path)

    def download_export(self, kind: str) -> tuple[bytes, str]:
        """Download an export; returns (content, filename)."""
        if kind not in EXPORT_PATHS:
            raise ValueError(f"Unknown export kind '{kind}'")
        resp = self._request("GET", EXPORT_PATHS[kind], raw=True)
        disposition = resp.headers.get("Content-Disposition", "")
        filename = disposition.split("filename=", 1)[-1].strip('"') if "filename=" in disposition else ""
        return resp.content, filename
