"""Plotly visualisation helpers for the BudgetBox dashboard.

Each function accepts budget objects from :mod:`budgetbox.models` and
returns a `plotly.graph_objects.Figure` that Streamlit renders via
``st.plotly_chart``.  Empty inputs produce an empty figure titled
"No data to display" rather than raising.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .models import EXPENSE_FIELDS, BudgetFields, BudgetSnapshot

COLORS = ["#2563eb", "#10b981", "#f97316", "#8b5cf6", "#ef4444"]


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def category_breakdown(budget: BudgetFields) -> pd.DataFrame:
    """Expense categories with a positive amount, in form order.

    Returns
    -------
    pandas.DataFrame
        Columns ``Category`` and ``Amount``.
    """
    rows = [
        {"Category": label, "Amount": getattr(budget, name)}
        for name, label in EXPENSE_FIELDS
        if getattr(budget, name) > 0
    ]
    return pd.DataFrame(rows, columns=["Category", "Amount"])


def create_category_pie(budget: BudgetFields, title: str | None = None) -> go.Figure:
    """Donut chart of spend per expense category.

    Parameters
    ----------
    budget : BudgetFields
        Current budget.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Donut chart, or an empty figure when nothing has been spent.
    """
    df = category_breakdown(budget)
    if df.empty:
        return _empty_figure()
    fig = px.pie(
        df,
        names="Category",
        values="Amount",
        hole=0.45,
        color_discrete_sequence=COLORS,
    )
    fig.update_layout(title=title or "Category breakdown")
    return fig


def snapshot_frame(history: Sequence[BudgetSnapshot]) -> pd.DataFrame:
    rows = [
        {
            "Saved At": pd.to_datetime(snap.timestamp, errors="coerce", utc=True),
            "Label": snap.label or "",
            "Income": snap.budget.income,
            "Spend": sum(snap.budget.expense_values()),
        }
        for snap in history
    ]
    df = pd.DataFrame(rows, columns=["Saved At", "Label", "Income", "Spend"])
    return df.sort_values("Saved At").reset_index(drop=True)


def create_snapshot_trend(history: Sequence[BudgetSnapshot], title: str | None = None) -> go.Figure:
    """Line chart of income against spend across saved snapshots (oldest first)."""
    df = snapshot_frame(history)
    if df.empty:
        return _empty_figure()
    long_df = df.melt(id_vars=["Saved At"], value_vars=["Income", "Spend"], var_name="Series", value_name="Amount")
    fig = px.line(long_df, x="Saved At", y="Amount", color="Series", markers=True)
    fig.update_layout(
        title=title or "Snapshots over time",
        xaxis_title="Saved At",
        yaxis_title="Amount",
    )
    return fig
