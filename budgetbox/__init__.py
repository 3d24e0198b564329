"""Top‑level package for BudgetBox, a local-first personal budget.

The primary modules are:

* ``models`` – budget fields, snapshots and the sync status state machine
* ``metrics`` – pure functions deriving totals and warnings
* ``store`` – the budget state store with write-through local persistence
* ``sync`` – the HTTP client that pushes and pulls the budget
* ``api`` – the FastAPI service keeping one budget per email
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run budgetbox/dashboard.py
```

and the service with ``python -m budgetbox.api``.
"""

from .metrics import Totals, get_totals, get_warnings  # noqa: F401
from .models import BudgetFields, BudgetSnapshot, BudgetState, SyncStatus  # noqa: F401
from .state_storage import StateStorage  # noqa: F401
from .store import BudgetStore  # noqa: F401
from .sync import SyncCoordinator, SyncOutcome  # noqa: F401

__all__ = [
    "BudgetFields",
    "BudgetSnapshot",
    "BudgetState",
    "BudgetStore",
    "StateStorage",
    "SyncCoordinator",
    "SyncOutcome",
    "SyncStatus",
    "Totals",
    "get_totals",
    "get_warnings",
]
