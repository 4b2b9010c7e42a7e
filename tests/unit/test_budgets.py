"""Unit tests for budget usage and status bands"""

import pytest
from datetime import date
from pocket_ledger.domain.budgets import (
    budget_percent,
    budget_status,
    summarize_budgets,
    usage_by_category,
    validate_budget_limit,
)
from pocket_ledger.domain.exceptions import InvalidBudgetLimit
from pocket_ledger.domain.models import Budget, BudgetStatus, Transaction, TransactionType

SEVERITY = [BudgetStatus.UNUSED, BudgetStatus.SAFE, BudgetStatus.WARNING, BudgetStatus.DANGER]


def _budget(limit=1_000_000, category_id="food"):
    return Budget(id=f"budget_{category_id}", category_id=category_id, limit=limit)


def _tx(amount, category_id="food", type=TransactionType.EXPENSE, day=date(2024, 3, 5)):
    return Transaction(id=None, type=type, amount=amount, wallet_id="cash", date=day, category_id=category_id)


def test_budget_danger_at_95_percent():
    assert budget_status(_budget(), {"food": 950_000}) == BudgetStatus.DANGER


def test_budget_unused_when_nothing_spent():
    assert budget_status(_budget(), {"food": 0}) == BudgetStatus.UNUSED
    assert budget_status(_budget(), {}) == BudgetStatus.UNUSED


@pytest.mark.parametrize(
    "used,expected",
    [
        (4_000, BudgetStatus.UNUSED),  # 0.4% rounds to 0
        (5_000, BudgetStatus.SAFE),  # 0.5% rounds up to 1
        (690_000, BudgetStatus.SAFE),
        (700_000, BudgetStatus.WARNING),
        (894_999, BudgetStatus.WARNING),
        (895_000, BudgetStatus.DANGER),  # 89.5% rounds up to 90
        (1_000_000, BudgetStatus.DANGER),
        (5_000_000, BudgetStatus.DANGER),
    ],
)
def test_budget_status_bands(used, expected):
    assert budget_status(_budget(), {"food": used}) == expected


def test_budget_status_monotonic_in_used():
    budget = _budget()
    severities = [
        SEVERITY.index(budget_status(budget, {"food": used}))
        for used in range(0, 1_500_001, 25_000)
    ]

    assert severities == sorted(severities)


def test_budget_percent_capped():
    assert budget_percent(2_000_000, 1_000_000) == 100
    assert budget_percent(333_333, 1_000_000) == 33


@pytest.mark.parametrize("limit", [0, -1, -1_000_000])
def test_invalid_limit_fails_fast(limit):
    with pytest.raises(InvalidBudgetLimit):
        validate_budget_limit(limit)
    with pytest.raises(InvalidBudgetLimit):
        budget_percent(100, limit)


def test_usage_by_category():
    transactions = [
        _tx(100_000),
        _tx(50_000),
        _tx(75_000, category_id="transport"),
        _tx(5_000_000, category_id="salary", type=TransactionType.INCOME),
        _tx(200_000, category_id=None, type=TransactionType.TRANSFER),
        _tx(999_000, day=date(2024, 2, 29)),
    ]

    assert usage_by_category(transactions, "2024-03") == {"food": 150_000, "transport": 75_000}


def test_summarize_budgets():
    budgets = [_budget(1_000_000, "food"), _budget(500_000, "transport"), _budget(200_000, "fun")]
    usage = {"food": 950_000, "transport": 100_000}
    names = {"food": "Food", "transport": "Transport", "fun": "Entertainment"}

    overview = summarize_budgets(budgets, usage, names, "2024-03")

    assert overview.month == "2024-03"
    assert overview.total_limit == 1_700_000
    assert overview.total_used == 1_050_000
    assert overview.total_remaining == 650_000
    assert overview.status_counts == {"unused": 1, "safe": 1, "warning": 0, "danger": 1}

    food = overview.items[0]
    assert food.category_name == "Food"
    assert food.percent == 95
    assert food.remaining == 50_000
    assert food.status == BudgetStatus.DANGER
