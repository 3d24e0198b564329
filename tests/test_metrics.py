import pytest

from budgetbox.metrics import (
    BURN_RATE_WARNING,
    FOOD_WARNING,
    OVERSPEND_WARNING,
    SUBSCRIPTION_WARNING,
    format_currency,
    get_totals,
    get_warnings,
)
from budgetbox.models import BudgetFields


def test_totals_sum_expense_fields():
    budget = BudgetFields(income=40000, monthly_bills=10000, food=6000, transport=2000,
                          subscriptions=1000, miscellaneous=1000)
    totals = get_totals(budget)
    assert totals.expenses == 20000
    assert totals.burn_rate == pytest.approx(0.5)
    assert totals.savings == 20000
    assert totals.month_end_prediction == totals.savings


def test_burn_rate_is_zero_without_income():
    totals = get_totals(BudgetFields(food=500))
    assert totals.burn_rate == 0
    assert totals.savings == -500


def test_food_warning_fires_above_forty_percent():
    warnings = get_warnings(BudgetFields(income=50000, food=25000))
    assert FOOD_WARNING in warnings
    assert "Food spend" in warnings[0]
    assert SUBSCRIPTION_WARNING not in warnings


def test_subscription_warning_fires_above_thirty_percent():
    warnings = get_warnings(BudgetFields(income=10000, subscriptions=3500))
    assert warnings == [SUBSCRIPTION_WARNING]


def test_overspend_and_burn_rate_warnings():
    budget = BudgetFields(income=10000, monthly_bills=6000, food=3000, transport=1000,
                          subscriptions=1000, miscellaneous=1000)
    totals = get_totals(budget)
    assert totals.savings == -2000
    assert totals.burn_rate == pytest.approx(1.2)

    warnings = get_warnings(budget)
    assert OVERSPEND_WARNING in warnings
    assert BURN_RATE_WARNING in warnings
    assert "expenses are higher than income" in OVERSPEND_WARNING
    assert "Burn rate is above 1.0" in BURN_RATE_WARNING


def test_income_ratio_warnings_suppressed_without_income():
    warnings = get_warnings(BudgetFields(food=900, subscriptions=900))
    assert FOOD_WARNING not in warnings
    assert SUBSCRIPTION_WARNING not in warnings
    # savings is negative, burn rate stays 0
    assert warnings == [OVERSPEND_WARNING]


def test_warnings_are_ordered():
    budget = BudgetFields(income=1000, food=600, subscriptions=500)
    assert get_warnings(budget) == [
        FOOD_WARNING,
        SUBSCRIPTION_WARNING,
        OVERSPEND_WARNING,
        BURN_RATE_WARNING,
    ]


def test_balanced_budget_has_no_warnings():
    assert get_warnings(BudgetFields(income=1000, food=100)) == []
    assert get_warnings(BudgetFields()) == []


def test_format_currency():
    assert format_currency(12500) == "₹12,500"
    assert format_currency(-2000) == "-₹2,000"
    assert format_currency(0) == "₹0"
