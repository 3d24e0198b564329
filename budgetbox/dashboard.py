"""Streamlit app for BudgetBox.

A single page holding the monthly budget form, the derived metrics,
warnings, the sync panel and the snapshot history.  Every edit is
written to the local state document immediately, so the page keeps
working with the remote service offline.

To run the dashboard from the command line::

    streamlit run budgetbox/dashboard.py

or use ``run_dashboard.py`` in the project root.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

import pandas as pd
import streamlit as st

# Support both ``streamlit run budgetbox/dashboard.py`` (no package
# context) and imports as ``budgetbox.dashboard``.
if __package__:
    from . import config
    from . import visualization as viz
    from .metrics import format_currency
    from .models import EXPENSE_FIELDS, SyncStatus, coerce_amount
    from .state_storage import StateStorage
    from .store import BudgetStore
    from .sync import SyncCoordinator
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from budgetbox import config  # type: ignore
    from budgetbox import visualization as viz  # type: ignore
    from budgetbox.metrics import format_currency  # type: ignore
    from budgetbox.models import EXPENSE_FIELDS, SyncStatus, coerce_amount  # type: ignore
    from budgetbox.state_storage import StateStorage  # type: ignore
    from budgetbox.store import BudgetStore  # type: ignore
    from budgetbox.sync import SyncCoordinator  # type: ignore

STATUS_LABELS = {
    SyncStatus.LOCAL_ONLY: "🟠 Local Only",
    SyncStatus.SYNC_PENDING: "🔵 Sync Pending",
    SyncStatus.SYNCED: "🟢 Synced",
}


def _ensure_store(storage: Optional[StateStorage] = None) -> BudgetStore:
    """Return the session's store, loading it from local storage on first use."""
    if 'budget_store' not in st.session_state:
        st.session_state['budget_store'] = BudgetStore.load(storage or StateStorage())
        st.session_state['form_revision'] = 0
    return st.session_state['budget_store']


def _ensure_coordinator(store: BudgetStore) -> SyncCoordinator:
    if 'sync_coordinator' not in st.session_state:
        st.session_state['sync_coordinator'] = SyncCoordinator(store)
    return st.session_state['sync_coordinator']


def _flash(message: Optional[str]) -> None:
    st.session_state['flash_message'] = message


def _reset_form() -> None:
    # Number inputs are keyed by revision so replaced budgets show their new values.
    st.session_state['form_revision'] = st.session_state.get('form_revision', 0) + 1


def _format_time(value: Optional[str]) -> str:
    if not value:
        return "-"
    stamp = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(stamp):
        return value
    return stamp.tz_convert(None).strftime("%Y-%m-%d %H:%M:%S")


def _seed_amount(current: float) -> float:
    return max(float(current), 0.0)


def _edited_amount(current: float, entered) -> Optional[float]:
    """Return the new field value, or ``None`` if the input still shows its seed.

    Inputs cannot go below zero, so a negative stored amount is shown as 0
    and stays untouched until the user changes the input.
    """
    value = coerce_amount(entered)
    if value == _seed_amount(current):
        return None
    return value


def render_header(store: BudgetStore, online: bool) -> None:
    st.title("BudgetBox: Personal Budgeting")
    st.caption("Auto-saves every change locally. Works offline.")
    left, right = st.columns(2)
    with left:
        st.markdown("🟢 Online" if online else "🔴 Offline: saving locally")
    with right:
        st.markdown(f"Sync Status: **{STATUS_LABELS[store.sync_status]}**")
    message = st.session_state.get('flash_message')
    if message:
        st.info(message)


def render_budget_form(store: BudgetStore) -> None:
    revision = st.session_state.get('form_revision', 0)
    state = store.state
    st.subheader("Monthly Budget")
    st.caption(
        f"Last saved: {_format_time(state.last_updated_at)} · "
        f"Last synced: {_format_time(state.last_synced_at)}"
    )

    fields = [("income", "Income")] + list(EXPENSE_FIELDS)
    columns = st.columns(3)
    for idx, (name, label) in enumerate(fields):
        current = getattr(store.budget, name)
        with columns[idx % 3]:
            entered = st.number_input(
                label,
                min_value=0.0,
                value=_seed_amount(current),
                step=500.0,
                key=f"field_{name}_{revision}",
            )
        value = _edited_amount(current, entered)
        if value is not None:
            store.update_field(name, value)


def render_sync_panel(store: BudgetStore, coordinator: SyncCoordinator, online: bool) -> None:
    st.subheader("Sync")
    st.caption("Local-first by default. Use sync to push/pull when you are online.")
    email = st.text_input("Email", value=store.state.user_email)
    if email != store.state.user_email:
        store.set_user_email(email)
    password = st.text_input("Password", value=config.DEMO_PASSWORD, type="password")

    login_col, sync_col, pull_col = st.columns(3)
    with login_col:
        if st.button("Login to backend" if online else "Offline: login later", disabled=not online):
            outcome = coordinator.login(email, password)
            if outcome.ok:
                _flash(outcome.message)
            else:
                st.error(outcome.message)
    with sync_col:
        if st.button("Sync now" if online else "Offline", disabled=not online):
            with st.spinner("Syncing..."):
                outcome = coordinator.sync()
            _flash(outcome.message)
            st.rerun()
    with pull_col:
        if st.button("Pull latest copy"):
            with st.spinner("Fetching..."):
                outcome = coordinator.fetch_latest()
            _flash(outcome.message)
            _reset_form()
            st.rerun()

    st.markdown(
        "- **Local Only**: saved on this device\n"
        "- **Sync Pending**: edits waiting for the server\n"
        "- **Synced**: server and local aligned"
    )


def render_metrics(store: BudgetStore) -> None:
    totals = store.totals()
    cols = st.columns(4)
    cols[0].metric("Burn Rate", f"{totals.burn_rate:.2f}")
    cols[1].metric("Total Spend", format_currency(totals.expenses))
    cols[2].metric("Savings Potential", format_currency(totals.savings))
    cols[3].metric("Month-End Prediction", format_currency(totals.month_end_prediction))

    chart_col, warn_col = st.columns(2)
    with chart_col:
        if viz.category_breakdown(store.budget).empty:
            st.caption("Start entering expenses to see category breakdown.")
        else:
            st.plotly_chart(viz.create_category_pie(store.budget), use_container_width=True)
    with warn_col:
        st.markdown("**Warnings**")
        warnings = store.warnings()
        if not warnings:
            st.success("No warnings. Spending looks healthy.")
        for warning in warnings:
            st.warning(warning)


def render_history(store: BudgetStore) -> None:
    st.subheader("Snapshots")
    label_col, save_col, export_col = st.columns([2, 1, 1])
    with label_col:
        label = st.text_input("Snapshot label (optional)", key="snapshot_label")
    with save_col:
        if st.button("Save snapshot"):
            store.add_snapshot(label or None)
            _flash("Snapshot saved locally.")
            st.rerun()
    with export_col:
        st.download_button(
            "Export current JSON",
            data=store.export_json(),
            file_name=store.export_filename(),
            mime="application/json",
        )

    history = store.state.history
    if not history:
        st.info("No snapshots yet. Save one to compare later.")
        return

    if len(history) > 1:
        st.plotly_chart(viz.create_snapshot_trend(history), use_container_width=True)

    for snap in history:
        spend = sum(snap.budget.expense_values())
        info_col, action_col = st.columns([4, 1])
        with info_col:
            title = f"{_format_time(snap.timestamp)}"
            if snap.label:
                title = f"{title} · {snap.label}"
            st.markdown(f"**{title}**  \nIncome {format_currency(snap.budget.income)} · Spend {format_currency(spend)}")
        with action_col:
            if st.button("Restore", key=f"restore_{snap.id}"):
                store.restore_snapshot(snap.id)
                _flash("Snapshot restored. Sync to update the server copy.")
                _reset_form()
                st.rerun()


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(page_title="BudgetBox", page_icon="💰", layout="wide")
    store = _ensure_store()
    coordinator = _ensure_coordinator(store)
    online = coordinator.check_health()

    render_header(store, online)
    form_col, sync_col = st.columns([2, 1])
    with form_col:
        render_budget_form(store)
    with sync_col:
        render_sync_panel(store, coordinator, online)
    st.divider()
    render_metrics(store)
    st.divider()
    render_history(store)


if __name__ == '__main__':
    main()
