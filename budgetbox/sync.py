"""Sync coordinator between the local budget store and the remote service.

Each operation makes a single HTTP attempt.  Failures never raise to
the caller: they come back as a :class:`SyncOutcome` with a message
suitable for display, and local budget data is left intact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .config import API_BASE, HTTP_TIMEOUT
from .exceptions import AuthenticationError, SyncError
from .models import BudgetFields, SyncStatus, utc_now_iso
from .store import BudgetStore

logger = logging.getLogger(__name__)

LOGIN_OK = "Authenticated with backend for sync."
LOGIN_FAILED = "Invalid demo credentials"
LOGIN_UNREACHABLE = "Unable to login to backend"
SYNC_OK = "Synced to server successfully."
SYNC_FAILED = "Could not sync. Data is safe locally."
FETCH_OK = "Pulled latest server version."
FETCH_EMPTY = "No server copy found. Still local-first."
FETCH_FAILED = "Could not fetch server copy. Working offline."


@dataclass(frozen=True)
class SyncOutcome:
    ok: bool
    message: str


class SyncCoordinator:
    """Pushes and pulls the budget of a :class:`BudgetStore`."""

    def __init__(
        self,
        store: BudgetStore,
        base_url: str = API_BASE,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = HTTP_TIMEOUT,
    ) -> None:
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # Public API -------------------------------------------------------------

    def login(self, email: str, password: str) -> SyncOutcome:
        """Exchange the credential pair for a bearer token kept in the store."""
        try:
            data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        except AuthenticationError as exc:
            logger.info("Login rejected for %s: %s", email, exc)
            return SyncOutcome(False, LOGIN_FAILED)
        except SyncError as exc:
            logger.warning("Login failed for %s: %s", email, exc)
            return SyncOutcome(False, LOGIN_UNREACHABLE)

        token = data.get("token")
        if not token:
            return SyncOutcome(False, LOGIN_UNREACHABLE)
        self.store.set_auth_token(token)
        logger.info("Authenticated %s with %s", email, self.base_url)
        return SyncOutcome(True, LOGIN_OK)

    def sync(self) -> SyncOutcome:
        """Push the current budget; status ends synced on success and local-only on failure."""
        state = self.store.state
        payload = {"budget": state.budget.to_dict(), "email": state.user_email}
        headers = {"Authorization": f"Bearer {state.auth_token}"} if state.auth_token else {}
        self.store.set_sync_status(SyncStatus.SYNC_PENDING)
        try:
            data = self._request("POST", "/budget/sync", json=payload, headers=headers)
        except AuthenticationError as exc:
            logger.warning("Sync rejected for %s: %s", payload["email"], exc)
            self.store.set_sync_status(SyncStatus.LOCAL_ONLY)
            return SyncOutcome(False, f"Sync rejected: {exc}")
        except SyncError as exc:
            logger.warning("Sync failed for %s: %s", payload["email"], exc)
            self.store.set_sync_status(SyncStatus.LOCAL_ONLY)
            return SyncOutcome(False, SYNC_FAILED)

        self.store.mark_synced(data.get("timestamp") or utc_now_iso())
        logger.info("Synced budget for %s", payload["email"])
        return SyncOutcome(True, SYNC_OK)

    def fetch_latest(self) -> SyncOutcome:
        """Overwrite the local budget with the server copy when one exists."""
        email = self.store.state.user_email
        try:
            data = self._request("GET", "/budget/latest", params={"email": email})
        except (AuthenticationError, SyncError) as exc:
            logger.warning("Fetch failed for %s: %s", email, exc)
            return SyncOutcome(False, FETCH_FAILED)

        budget = data.get("budget")
        if not budget:
            return SyncOutcome(True, FETCH_EMPTY)
        self.store.hydrate_from_server(BudgetFields.from_dict(budget), data.get("updatedAt") or None)
        logger.info("Hydrated budget for %s from server", email)
        return SyncOutcome(True, FETCH_OK)

    def check_health(self) -> bool:
        try:
            data = self._request("GET", "/health")
        except (AuthenticationError, SyncError):
            return False
        return bool(data.get("ok"))

    # Internal ---------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            raise SyncError(f"{method} {path} failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(_error_text(response) or "Not authorized")
        if not response.ok:
            raise SyncError(
                _error_text(response) or f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise SyncError(f"{method} {path} returned invalid JSON") from exc
        return data if isinstance(data, dict) else {}


def _error_text(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or "")
    return ""
