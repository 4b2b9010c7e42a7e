"""Wallet balance effects of transactions and the dashboard summary"""

from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from pocket_ledger.domain.budgets import summarize_budgets, usage_by_category
from pocket_ledger.domain.models import (
    Budget,
    BudgetStatus,
    DashboardSummary,
    MonthTotals,
    Transaction,
    TransactionType,
    Wallet,
)
from pocket_ledger.utils.date_utils import in_month, previous_month, shift_month

# (balance change per wallet id, transaction count change per category id)
Effects = Tuple[Dict[str, int], Dict[str, int]]


def transaction_effects(tx: Transaction) -> Effects:
    """
    What one transaction does to wallets and category counters.

    - income:   wallet += amount, category count += 1
    - expense:  wallet -= amount, category count += 1
    - transfer: source -= amount + fee, destination += amount
    """
    balances: Dict[str, int] = defaultdict(int)
    counts: Dict[str, int] = defaultdict(int)

    if tx.type == TransactionType.TRANSFER:
        balances[tx.wallet_id] -= tx.amount + tx.fee
        if tx.to_wallet_id:
            balances[tx.to_wallet_id] += tx.amount
    else:
        balances[tx.wallet_id] += tx.amount if tx.type == TransactionType.INCOME else -tx.amount
        if tx.category_id:
            counts[tx.category_id] += 1

    return dict(balances), dict(counts)


def net_effects(removed: Optional[Transaction] = None, added: Optional[Transaction] = None) -> Effects:
    """
    Combined change of reversing `removed` and applying `added`.

    Wallets and categories whose net change is zero are left out, so an
    edit that keeps the same wallet writes it once.
    """
    balances: Dict[str, int] = defaultdict(int)
    counts: Dict[str, int] = defaultdict(int)

    for tx, sign in ((removed, -1), (added, 1)):
        if tx is None:
            continue
        tx_balances, tx_counts = transaction_effects(tx)
        for wallet_id, delta in tx_balances.items():
            balances[wallet_id] += sign * delta
        for category_id, delta in tx_counts.items():
            counts[category_id] += sign * delta

    return (
        {wallet_id: delta for wallet_id, delta in balances.items() if delta},
        {category_id: delta for category_id, delta in counts.items() if delta},
    )


def month_totals(transactions: Sequence[Transaction], month: str) -> Tuple[int, int]:
    """(income, expense) dated in month; transfers count as neither"""
    income = expense = 0
    for tx in transactions:
        if not in_month(tx.date, month):
            continue
        if tx.type == TransactionType.INCOME:
            income += tx.amount
        elif tx.type == TransactionType.EXPENSE:
            expense += tx.amount
    return income, expense


def growth_rate(current: int, previous: int) -> float:
    """Change against last month in percent; 0 when last month had nothing"""
    if previous == 0:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def dashboard_summary(
    wallets: Sequence[Wallet],
    transactions: Sequence[Transaction],
    budgets: Sequence[Budget],
    category_names: Mapping[str, str],
    month: str,
    trend_months: int = 6,
    top_categories: int = 5,
) -> DashboardSummary:
    """
    Fold wallets, transactions and budgets into the home screen figures.

    Budget warnings are the budgets at 70% of their limit or more, fullest
    first. The trend runs over the trend_months months ending at month.
    """
    income, expense = month_totals(transactions, month)
    previous_income, previous_expense = month_totals(transactions, previous_month(month))

    trend: List[MonthTotals] = []
    for offset in range(trend_months - 1, -1, -1):
        key = shift_month(month, -offset)
        trend_income, trend_expense = month_totals(transactions, key)
        trend.append(MonthTotals(month=key, income=trend_income, expense=trend_expense))

    usage = usage_by_category(transactions, month)
    spending = sorted(usage.items(), key=lambda item: item[1], reverse=True)[:top_categories]

    overview = summarize_budgets(budgets, usage, category_names, month)
    warnings = [item for item in overview.items if item.status in (BudgetStatus.WARNING, BudgetStatus.DANGER)]
    warnings.sort(key=lambda item: item.percent, reverse=True)

    return DashboardSummary(
        month=month,
        total_balance=sum(wallet.balance for wallet in wallets),
        income=income,
        expense=expense,
        cash_flow=income - expense,
        income_growth=growth_rate(income, previous_income),
        expense_growth=growth_rate(expense, previous_expense),
        monthly_trend=trend,
        top_categories=spending,
        budget_warnings=warnings,
        category_names={category_id: category_names.get(category_id, category_id) for category_id, _ in spending},
    )
