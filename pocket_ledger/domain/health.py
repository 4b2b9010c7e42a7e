"""Financial health scoring engine - weighted points over monthly cash flow"""

from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence

from pocket_ledger.domain.ledger import month_totals
from pocket_ledger.domain.models import (
    HealthFactors,
    HealthReport,
    ScheduleRecord,
    Transaction,
    TransactionType,
)
from pocket_ledger.utils.date_utils import in_month, previous_month

MAX_SCORE = 100
MAX_RECOMMENDATIONS = 3


def analyze_month(
    transactions: Sequence[Transaction],
    schedules: Sequence[ScheduleRecord],
    month: str,
) -> HealthFactors:
    """
    Extract the month's cash-flow metrics.

    Requirements:
    - Income and expense from transactions dated in the month (transfers ignored)
    - Debt load = unpaid installments covering the month
    - Ratios are 0 when there is no income
    """
    income, expense = month_totals(transactions, month)
    cash_flow = income - expense

    debt_this_month = sum(s.amount for s in schedules if s.month == month and not s.paid)

    by_category: Dict[str, int] = defaultdict(int)
    for tx in transactions:
        if tx.type == TransactionType.EXPENSE and in_month(tx.date, month):
            by_category[tx.category_id or "other"] += tx.amount

    return HealthFactors(
        month=month,
        income=income,
        expense=expense,
        cash_flow=cash_flow,
        debt_this_month=debt_this_month,
        expense_ratio=expense / income if income > 0 else 0.0,
        saving_rate=(income - expense) / income if income > 0 else 0.0,
        debt_ratio=debt_this_month / income if income > 0 else 0.0,
        expense_by_category=sorted(by_category.items(), key=lambda item: item[1], reverse=True),
    )


def calculate_health_score(
    expense_ratio: float,
    saving_rate: float,
    debt_ratio: float,
    cash_flow: int,
    income: int,
) -> int:
    """
    Calculate health score from 0 (worst) to 100 (best).

    Point bands:
    - 30: Expense ratio (<=50% of income spent earns full points)
    - 25: Saving rate (>=20% of income kept earns full points)
    - 30: Debt ratio (installments <=20% of income earns full points)
    - 15: Cash flow (surplus above 10% of income earns full points)
    """
    score = 0

    if expense_ratio <= 0.5:
        score += 30
    elif expense_ratio <= 0.6:
        score += 25
    elif expense_ratio <= 0.7:
        score += 15
    elif expense_ratio <= 0.8:
        score += 5

    if saving_rate >= 0.2:
        score += 25
    elif saving_rate >= 0.15:
        score += 20
    elif saving_rate >= 0.1:
        score += 15
    elif saving_rate >= 0.05:
        score += 10
    elif saving_rate > 0:
        score += 5

    if debt_ratio <= 0.2:
        score += 30
    elif debt_ratio <= 0.3:
        score += 25
    elif debt_ratio <= 0.4:
        score += 15
    elif debt_ratio <= 0.5:
        score += 5

    if cash_flow > income * 0.1:
        score += 15
    elif cash_flow > 0:
        score += 10
    elif cash_flow == 0:
        score += 5

    return min(score, MAX_SCORE)


def determine_health_label(score: int) -> str:
    if score >= 80:
        return "Excellent"
    elif score >= 65:
        return "Good"
    elif score >= 50:
        return "Fair"
    else:
        return "Needs Improvement"


def percent_change(current: int, previous: int) -> float:
    """Month-over-month change; a jump from nothing counts as +100%"""
    if previous > 0:
        return round((current - previous) / previous * 100, 1)
    return 100.0 if current > 0 else 0.0


def build_recommendations(factors: HealthFactors, category_names: Optional[Mapping[str, str]] = None) -> List[str]:
    """Advice for the weakest factors, at most three"""
    category_names = category_names or {}
    recommendations = []

    if factors.expense_ratio > 0.7:
        recommendations.append("Spending is too high. Cut back on non-essential expenses.")
    if factors.debt_ratio > 0.4:
        recommendations.append("Installments take a large share of income. Consider restructuring debt.")
    if factors.saving_rate < 0.1:
        recommendations.append("Saving rate is low. Set aside at least 10% of income.")
    if factors.cash_flow < 0:
        recommendations.append("Cash flow is negative. Review expenses and look for extra income.")
    if factors.expense_by_category:
        top_id, top_amount = factors.expense_by_category[0]
        if top_amount > factors.expense * 0.5:
            name = category_names.get(top_id, top_id)
            recommendations.append(f'Category "{name}" dominates spending. Review these expenses.')

    if not recommendations:
        recommendations.append("Your finances look healthy. Keep up the good habits!")

    return recommendations[:MAX_RECOMMENDATIONS]


def make_health_report(
    transactions: Sequence[Transaction],
    schedules: Sequence[ScheduleRecord],
    month: str,
    category_names: Optional[Mapping[str, str]] = None,
) -> HealthReport:
    """
    Main entry point: analyze a month and score it.

    Returns complete HealthReport with factors, trend against the previous
    month, score, label and recommendations.
    """
    factors = analyze_month(transactions, schedules, month)
    score = calculate_health_score(
        factors.expense_ratio,
        factors.saving_rate,
        factors.debt_ratio,
        factors.cash_flow,
        factors.income,
    )
    previous_income, previous_expense = month_totals(transactions, previous_month(month))

    return HealthReport(
        factors=factors,
        score=score,
        label=determine_health_label(score),
        income_change=percent_change(factors.income, previous_income),
        expense_change=percent_change(factors.expense, previous_expense),
        recommendations=build_recommendations(factors, category_names),
        category_names={
            category_id: (category_names or {}).get(category_id, category_id)
            for category_id, _ in factors.expense_by_category
        },
    )
