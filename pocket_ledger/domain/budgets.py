"""Budget usage aggregation and status bands"""

from collections import defaultdict
from typing import Dict, Mapping, Sequence

from pocket_ledger.domain.amounts import round_amount
from pocket_ledger.domain.exceptions import InvalidBudgetLimit
from pocket_ledger.domain.models import (
    Budget,
    BudgetOverview,
    BudgetStatus,
    BudgetUsage,
    Transaction,
    TransactionType,
)
from pocket_ledger.utils.date_utils import in_month


def usage_by_category(transactions: Sequence[Transaction], target_month: str) -> Dict[str, int]:
    """Sum expense amounts per category for transactions dated in target_month (YYYY-MM)"""
    usage: Dict[str, int] = defaultdict(int)
    for tx in transactions:
        if tx.type == TransactionType.EXPENSE and tx.category_id and in_month(tx.date, target_month):
            usage[tx.category_id] += tx.amount
    return dict(usage)


def validate_budget_limit(limit: int) -> None:
    if limit <= 0:
        raise InvalidBudgetLimit("Budget limit must be greater than zero")


def budget_percent(used: int, limit: int) -> int:
    """Share of the limit consumed, capped at 100"""
    validate_budget_limit(limit)
    return min(100, round_amount(used / limit * 100))


def budget_status(budget: Budget, usage: Mapping[str, int]) -> BudgetStatus:
    """
    Map consumption to a status band.

    Bands:
    - 0%:      unused
    - 1-69%:   safe
    - 70-89%:  warning
    - 90%+:    danger
    """
    percent = budget_percent(usage.get(budget.category_id, 0), budget.limit)

    if percent == 0:
        return BudgetStatus.UNUSED
    elif percent < 70:
        return BudgetStatus.SAFE
    elif percent < 90:
        return BudgetStatus.WARNING
    else:
        return BudgetStatus.DANGER


def summarize_budgets(
    budgets: Sequence[Budget],
    usage: Mapping[str, int],
    category_names: Mapping[str, str],
    month: str,
) -> BudgetOverview:
    """Per-budget usage plus totals and a count per status band"""
    items = []
    counts = {status.value: 0 for status in BudgetStatus}

    for budget in budgets:
        used = usage.get(budget.category_id, 0)
        status = budget_status(budget, usage)
        counts[status.value] += 1
        items.append(
            BudgetUsage(
                budget=budget,
                category_name=category_names.get(budget.category_id, ""),
                used=used,
                percent=budget_percent(used, budget.limit),
                status=status,
                remaining=budget.limit - used,
            )
        )

    total_limit = sum(b.limit for b in budgets)
    total_used = sum(item.used for item in items)

    return BudgetOverview(
        month=month,
        items=items,
        total_limit=total_limit,
        total_used=total_used,
        total_remaining=total_limit - total_used,
        status_counts=counts,
    )
