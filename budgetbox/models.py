"""Budget data model and the sync status state machine.

The client keeps a single :class:`BudgetState` aggregate.  Attribute
names are snake_case in Python; the JSON documents exchanged with the
remote service and written to local storage keep the camelCase keys
used on the wire (``monthlyBills``, ``lastSyncedAt`` ...).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import InvalidTransitionError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def coerce_amount(value: Any) -> float:
    """Convert user or JSON input to a float, mapping blanks and NaN to 0."""
    if value is None or value == "":
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount):
        return 0.0
    return amount


# ---------------------------------------------------------------------------
# Budget fields
# ---------------------------------------------------------------------------

# python attribute -> wire key
WIRE_NAMES: Dict[str, str] = {
    "income": "income",
    "monthly_bills": "monthlyBills",
    "food": "food",
    "transport": "transport",
    "subscriptions": "subscriptions",
    "miscellaneous": "miscellaneous",
}
_ATTR_NAMES = {wire: attr for attr, wire in WIRE_NAMES.items()}

EXPENSE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("monthly_bills", "Monthly Bills"),
    ("food", "Food"),
    ("transport", "Transport"),
    ("subscriptions", "Subscriptions"),
    ("miscellaneous", "Miscellaneous"),
)


def field_name(name: str) -> str:
    """Resolve a python or wire field name to the python attribute name."""
    if name in WIRE_NAMES:
        return name
    if name in _ATTR_NAMES:
        return _ATTR_NAMES[name]
    raise ValueError(f"Unknown budget field: {name!r}")


@dataclass
class BudgetFields:
    income: float = 0.0
    monthly_bills: float = 0.0
    food: float = 0.0
    transport: float = 0.0
    subscriptions: float = 0.0
    miscellaneous: float = 0.0

    def copy(self) -> "BudgetFields":
        return replace(self)

    def expense_values(self) -> List[float]:
        return [getattr(self, name) for name, _ in EXPENSE_FIELDS]

    def to_dict(self) -> Dict[str, float]:
        return {WIRE_NAMES[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "BudgetFields":
        if not isinstance(data, dict):
            data = {}
        values = {}
        for attr, wire in WIRE_NAMES.items():
            raw = data.get(wire, data.get(attr))
            values[attr] = coerce_amount(raw)
        return cls(**values)


# ---------------------------------------------------------------------------
# Sync status
# ---------------------------------------------------------------------------


class SyncStatus(str, Enum):
    LOCAL_ONLY = "local-only"
    SYNC_PENDING = "sync-pending"
    SYNCED = "synced"


class SyncEvent(str, Enum):
    EDIT = "edit"
    SYNC_START = "sync_start"
    SYNC_SUCCESS = "sync_success"
    SYNC_FAILURE = "sync_failure"
    PULL = "pull"
    RESTORE = "restore"


_L, _P, _S = SyncStatus.LOCAL_ONLY, SyncStatus.SYNC_PENDING, SyncStatus.SYNCED

TRANSITIONS: Dict[Tuple[SyncStatus, SyncEvent], SyncStatus] = {
    (_L, SyncEvent.EDIT): _L,
    (_P, SyncEvent.EDIT): _P,
    (_S, SyncEvent.EDIT): _P,
    (_L, SyncEvent.SYNC_START): _P,
    (_P, SyncEvent.SYNC_START): _P,
    (_S, SyncEvent.SYNC_START): _P,
    (_L, SyncEvent.SYNC_SUCCESS): _S,
    (_P, SyncEvent.SYNC_SUCCESS): _S,
    (_S, SyncEvent.SYNC_SUCCESS): _S,
    (_L, SyncEvent.SYNC_FAILURE): _L,
    (_P, SyncEvent.SYNC_FAILURE): _L,
    (_S, SyncEvent.SYNC_FAILURE): _L,
    (_L, SyncEvent.PULL): _S,
    (_P, SyncEvent.PULL): _S,
    (_S, SyncEvent.PULL): _S,
    (_L, SyncEvent.RESTORE): _L,
    (_P, SyncEvent.RESTORE): _L,
    (_S, SyncEvent.RESTORE): _L,
}

# Direct status writes map onto the event that produces that status.
STATUS_EVENTS: Dict[SyncStatus, SyncEvent] = {
    _L: SyncEvent.SYNC_FAILURE,
    _P: SyncEvent.SYNC_START,
    _S: SyncEvent.SYNC_SUCCESS,
}


def parse_status(value: Any) -> SyncStatus:
    try:
        return SyncStatus(value)
    except ValueError:
        raise InvalidTransitionError(f"Unknown sync status: {value!r}") from None


def next_status(current: SyncStatus, event: SyncEvent) -> SyncStatus:
    """Look up the status reached from ``current`` on ``event``."""
    try:
        return TRANSITIONS[(SyncStatus(current), SyncEvent(event))]
    except (KeyError, ValueError):
        raise InvalidTransitionError(
            f"No transition from {current!r} on {event!r}"
        ) from None


# ---------------------------------------------------------------------------
# Snapshots and the aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BudgetSnapshot:
    id: str
    timestamp: str
    budget: BudgetFields
    label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "budget": self.budget.to_dict(),
        }
        if self.label:
            payload["label"] = self.label
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BudgetSnapshot":
        return cls(
            id=str(data["id"]),
            timestamp=str(data.get("timestamp") or ""),
            budget=BudgetFields.from_dict(data.get("budget")),
            label=data.get("label") or None,
        )


@dataclass
class BudgetState:
    budget: BudgetFields = field(default_factory=BudgetFields)
    sync_status: SyncStatus = SyncStatus.LOCAL_ONLY
    last_updated_at: Optional[str] = None
    last_synced_at: Optional[str] = None
    user_email: str = ""
    auth_token: Optional[str] = None
    history: List[BudgetSnapshot] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "budget": self.budget.to_dict(),
            "syncStatus": self.sync_status.value,
            "lastUpdatedAt": self.last_updated_at,
            "lastSyncedAt": self.last_synced_at,
            "userEmail": self.user_email,
            "authToken": self.auth_token,
            "history": [snap.to_dict() for snap in self.history],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_email: str = "") -> "BudgetState":
        try:
            status = SyncStatus(data.get("syncStatus"))
        except ValueError:
            status = SyncStatus.LOCAL_ONLY
        history: List[BudgetSnapshot] = []
        for entry in data.get("history") or []:
            if not isinstance(entry, dict) or "id" not in entry:
                continue
            history.append(BudgetSnapshot.from_dict(entry))
        return cls(
            budget=BudgetFields.from_dict(data.get("budget")),
            sync_status=status,
            last_updated_at=data.get("lastUpdatedAt"),
            last_synced_at=data.get("lastSyncedAt"),
            user_email=data.get("userEmail") or default_email,
            auth_token=data.get("authToken") or None,
            history=history,
        )
