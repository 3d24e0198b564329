"""Local durable storage for the client budget state.

The whole :class:`~budgetbox.models.BudgetState` is written as one
versioned JSON document.  Reads never fail: a missing, corrupt or
unreadable document yields the default state.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .config import DEMO_EMAIL, STATE_PATH, STORE_NAME, STORE_VERSION
from .exceptions import StorageError
from .models import BudgetState

logger = logging.getLogger(__name__)


def _migrate_v0(state: Dict[str, Any]) -> Dict[str, Any]:
    # v0 documents stored the snapshot list under "snapshots"
    migrated = dict(state)
    if "history" not in migrated and "snapshots" in migrated:
        migrated["history"] = migrated.pop("snapshots")
    return migrated


# version -> upgrade to version + 1
MIGRATIONS: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    0: _migrate_v0,
}


def migrate_state(state: Dict[str, Any], version: int) -> Dict[str, Any]:
    """Upgrade a stored state payload from ``version`` to the current version."""
    while version < STORE_VERSION:
        step = MIGRATIONS.get(version)
        if step is not None:
            state = step(state)
        version += 1
    return state


class StateStorage:
    """Reads and writes the budget state document on disk."""

    def __init__(self, path: Optional[Path] = None, default_email: str = DEMO_EMAIL):
        self.path = Path(path) if path is not None else STATE_PATH
        self.default_email = default_email

    def default_state(self) -> BudgetState:
        return BudgetState(user_email=self.default_email)

    def load(self) -> BudgetState:
        if not self.path.exists():
            return self.default_state()
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Could not read local state %s: %s", self.path, exc)
            return self.default_state()
        if not isinstance(data, dict):
            return self.default_state()

        if "state" in data and isinstance(data["state"], dict):
            state = data["state"]
            try:
                version = int(data.get("version", 0))
            except (TypeError, ValueError):
                version = 0
        else:
            # bare state documents predate the versioned envelope
            state, version = data, 0

        if version > STORE_VERSION:
            logger.warning(
                "Local state version %s is newer than supported version %s; using defaults",
                version,
                STORE_VERSION,
            )
            return self.default_state()
        state = migrate_state(state, version)
        try:
            return BudgetState.from_dict(state, default_email=self.default_email)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Discarding malformed local state %s: %s", self.path, exc)
            return self.default_state()

    def save(self, state: BudgetState) -> None:
        """Write ``state`` to disk.

        Raises:
            StorageError: If the document cannot be written
        """
        payload = {
            'name': STORE_NAME,
            'version': STORE_VERSION,
            'state': state.to_dict(),
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open('w', encoding='utf-8') as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
        except OSError as exc:
            raise StorageError(f"Failed to save budget state to {self.path}: {exc}") from exc

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
