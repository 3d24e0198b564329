#!/usr/bin/env python3
"""Print the locally persisted budget state."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budgetbox.metrics import format_currency, get_totals, get_warnings
from budgetbox.state_storage import StateStorage
from budgetbox.visualization import snapshot_frame


def main(path: Optional[Path] = None, limit: int = 20) -> int:
    storage = StateStorage(path)
    if not storage.path.exists():
        print(f"No local state found at {storage.path}")
        return 1

    state = storage.load()
    totals = get_totals(state.budget)
    print(f"State file: {storage.path}")
    print(f"User: {state.user_email} ({'token' if state.auth_token else 'no token'})")
    print(f"Sync status: {state.sync_status.value}")
    print(f"Last updated: {state.last_updated_at or '-'}  Last synced: {state.last_synced_at or '-'}")

    print("\nBudget:")
    for key, value in state.budget.to_dict().items():
        print(f"  {key:<14} {format_currency(value)}")
    print(f"\nSpend {format_currency(totals.expenses)}  Savings {format_currency(totals.savings)}  "
          f"Burn rate {totals.burn_rate:.2f}")

    warnings = get_warnings(state.budget)
    if warnings:
        print("\nWarnings:")
        for warning in warnings:
            print(f"  - {warning}")

    if state.history:
        print(f"\nSnapshots ({len(state.history)}):")
        print(snapshot_frame(state.history[:limit]).to_string(index=False))
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show the locally persisted budget state.')
    parser.add_argument('--path', type=Path, default=None, help='State document to read')
    parser.add_argument('--limit', type=int, default=20, help='How many snapshots to show')
    args = parser.parse_args()
    sys.exit(main(path=args.path, limit=args.limit))
