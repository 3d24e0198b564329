"""Derived budget metrics.

Pure functions mapping :class:`~budgetbox.models.BudgetFields` to
totals and warning messages.  Nothing here keeps state; the UI calls
these on every render.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Union

from .models import BudgetFields

FOOD_SHARE_LIMIT = 0.4
SUBSCRIPTION_SHARE_LIMIT = 0.3

FOOD_WARNING = "Food spend is above 40% of income. Trim dining/groceries."
SUBSCRIPTION_WARNING = "Subscriptions exceed 30% of income. Cancel unused apps."
OVERSPEND_WARNING = "Your expenses are higher than income. Cut variable costs."
BURN_RATE_WARNING = "Burn rate is above 1.0. You will run out before month-end."


@dataclass(frozen=True)
class Totals:
    expenses: float
    burn_rate: float
    savings: float
    month_end_prediction: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "expenses": self.expenses,
            "burnRate": self.burn_rate,
            "savings": self.savings,
            "monthEndPrediction": self.month_end_prediction,
        }


def get_totals(budget: BudgetFields) -> Totals:
    """Sum the expense fields and derive burn rate and savings.

    Burn rate is ``expenses / income`` and falls back to 0 when income
    is not positive.  The month-end prediction is the savings figure.
    """
    expenses = sum(budget.expense_values())
    burn_rate = expenses / budget.income if budget.income > 0 else 0.0
    savings = budget.income - expenses
    return Totals(
        expenses=expenses,
        burn_rate=burn_rate,
        savings=savings,
        month_end_prediction=savings,
    )


def get_warnings(budget: BudgetFields) -> List[str]:
    """Return the warnings that apply to ``budget``, in display order.

    The income-share checks only run when income is positive; the
    overspend and burn-rate checks always run.
    """
    totals = get_totals(budget)
    warnings: List[str] = []
    if budget.income > 0 and budget.food / budget.income > FOOD_SHARE_LIMIT:
        warnings.append(FOOD_WARNING)
    if budget.income > 0 and budget.subscriptions / budget.income > SUBSCRIPTION_SHARE_LIMIT:
        warnings.append(SUBSCRIPTION_WARNING)
    if totals.savings < 0:
        warnings.append(OVERSPEND_WARNING)
    if totals.burn_rate > 1:
        warnings.append(BURN_RATE_WARNING)
    return warnings


def format_currency(amount: Union[float, int], symbol: str = "₹") -> str:
    """Format an amount as whole currency units.

    Example:
        >>> format_currency(12500)
        '₹12,500'
        >>> format_currency(-2000)
        '-₹2,000'
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.0f}"
