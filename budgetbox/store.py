"""Budget state store.

:class:`BudgetStore` owns the single :class:`~budgetbox.models.BudgetState`
aggregate of a client session.  Every mutation notifies subscribers and
writes the whole state through to local storage.  The application root
constructs one store and hands it to the UI and the sync coordinator.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from .config import HISTORY_LIMIT
from .exceptions import StorageError
from .metrics import Totals, get_totals, get_warnings
from .models import (
    STATUS_EVENTS,
    BudgetFields,
    BudgetSnapshot,
    BudgetState,
    SyncEvent,
    SyncStatus,
    field_name,
    next_status,
    parse_status,
    utc_now_iso,
)
from .state_storage import StateStorage

logger = logging.getLogger(__name__)

Listener = Callable[[BudgetState], None]


class BudgetStore:
    """Mutable budget aggregate with change notification and write-through persistence."""

    def __init__(
        self,
        state: Optional[BudgetState] = None,
        storage: Optional[StateStorage] = None,
        clock: Callable[[], str] = utc_now_iso,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        self._state = state if state is not None else BudgetState()
        self._storage = storage
        self._clock = clock
        self._id_factory = id_factory
        self._history_limit = history_limit
        self._listeners: List[Listener] = []

    @classmethod
    def load(cls, storage: StateStorage, **kwargs: Any) -> "BudgetStore":
        """Build a store hydrated from ``storage``."""
        return cls(state=storage.load(), storage=storage, **kwargs)

    # Read access ------------------------------------------------------------

    @property
    def state(self) -> BudgetState:
        return self._state

    @property
    def budget(self) -> BudgetFields:
        return self._state.budget

    @property
    def sync_status(self) -> SyncStatus:
        return self._state.sync_status

    def totals(self) -> Totals:
        return get_totals(self._state.budget)

    def warnings(self) -> List[str]:
        return get_warnings(self._state.budget)

    def export_current(self) -> Dict[str, Any]:
        return {
            "budget": self._state.budget.to_dict(),
            "lastUpdatedAt": self._state.last_updated_at,
        }

    def export_json(self) -> str:
        return json.dumps(self.export_current(), indent=2)

    def export_filename(self) -> str:
        return f"budgetbox-current-{self._clock()}.json"

    # Subscriptions ----------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Mutations --------------------------------------------------------------

    def update_field(self, field: str, value: float) -> None:
        """Set one budget field; a synced budget becomes sync-pending."""
        name = field_name(field)
        setattr(self._state.budget, name, value)
        self._apply(SyncEvent.EDIT)
        self._state.last_updated_at = self._clock()
        self._commit()

    def set_sync_status(self, status: SyncStatus | str) -> None:
        target = parse_status(status)
        self._state.sync_status = next_status(self._state.sync_status, STATUS_EVENTS[target])
        self._commit()

    def mark_synced(self, timestamp: str) -> None:
        self._apply(SyncEvent.SYNC_SUCCESS)
        self._state.last_synced_at = timestamp
        self._commit()

    def hydrate_from_server(self, budget: BudgetFields, synced_at: Optional[str] = None) -> None:
        """Replace the whole budget with the server copy.  Unsaved local edits are lost."""
        self._state.budget = budget.copy()
        self._apply(SyncEvent.PULL)
        self._state.last_synced_at = synced_at or self._clock()
        self._commit()

    def set_user_email(self, email: str) -> None:
        self._state.user_email = email
        self._commit()

    def set_auth_token(self, token: Optional[str]) -> None:
        self._state.auth_token = token
        self._commit()

    def add_snapshot(self, label: Optional[str] = None) -> BudgetSnapshot:
        snapshot = BudgetSnapshot(
            id=self._id_factory(),
            timestamp=self._clock(),
            budget=self._state.budget.copy(),
            label=label or None,
        )
        self._state.history = [snapshot, *self._state.history][: self._history_limit]
        self._commit()
        return snapshot

    def find_snapshot(self, snapshot_id: str) -> Optional[BudgetSnapshot]:
        for snapshot in self._state.history:
            if snapshot.id == snapshot_id:
                return snapshot
        return None

    def restore_snapshot(self, snapshot_id: str) -> bool:
        """Copy a snapshot back into the budget.  Returns False for unknown ids."""
        snapshot = self.find_snapshot(snapshot_id)
        if snapshot is None:
            return False
        self._state.budget = snapshot.budget.copy()
        self._apply(SyncEvent.RESTORE)
        self._state.last_updated_at = self._clock()
        self._commit()
        return True

    # Internal ---------------------------------------------------------------

    def _apply(self, event: SyncEvent) -> None:
        self._state.sync_status = next_status(self._state.sync_status, event)

    def _commit(self) -> None:
        self._persist()
        for listener in list(self._listeners):
            listener(self._state)

    def _persist(self) -> None:
        if self._storage is None:
            return
        try:
            self._storage.save(self._state)
        except StorageError as exc:
            logger.warning("Local save failed, keeping state in memory: %s", exc)
