"""Loan aggregation and schedule state changes - core business logic for installments"""

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from pocket_ledger.domain.exceptions import AlreadyPaid
from pocket_ledger.domain.models import (
    DueItem,
    Loan,
    LoanStatus,
    LoanSummary,
    LoanType,
    PortfolioStats,
    ScheduleRecord,
    ScheduleStatus,
)
from pocket_ledger.domain.schedules import rebalance_amount
from pocket_ledger.domain.status import classify, effective_loan_status
from pocket_ledger.utils.date_utils import month_key


def aggregate_loan(loan: Loan, schedules: Sequence[ScheduleRecord], today: date) -> LoanSummary:
    """Fold one loan's schedule into progress figures"""
    paid_schedules = [s for s in schedules if s.paid]
    total = len(schedules)
    progress = len(paid_schedules) / total * 100 if total else 0.0

    unpaid = sorted((s for s in schedules if not s.paid), key=lambda s: s.due_date)

    return LoanSummary(
        loan_id=loan.id or "",
        status=effective_loan_status(loan, schedules, today),
        total_schedules=total,
        paid_schedules=len(paid_schedules),
        progress_percent=round(progress, 1),
        paid_amount=loan.paid_amount,
        remaining_amount=loan.remaining_amount,
        next_due=unpaid[0] if unpaid else None,
    )


def aggregate_portfolio(
    loans: Sequence[Loan],
    schedules_by_loan: Dict[str, List[ScheduleRecord]],
    today: date,
    window_days: int = 30,
) -> PortfolioStats:
    """
    Fold every loan and installment into dashboard statistics.

    - Remaining/paid totals count loans stored as active
    - Overdue loans are counted on their effective status
    - This month's total sums unpaid installments covering today's month
    - Upcoming payments counts every unpaid installment due after today
    - Due soon lists unpaid installments due within window_days, earliest first
    """
    stats = PortfolioStats()
    current_month = month_key(today)
    horizon = today + timedelta(days=window_days)

    for loan in loans:
        loan_schedules = schedules_by_loan.get(loan.id or "", [])

        if loan.status == LoanStatus.ACTIVE:
            stats.total_active_loans += 1
            stats.total_remaining += loan.remaining_amount
            stats.total_paid += loan.paid_amount

        if effective_loan_status(loan, loan_schedules, today) == LoanStatus.OVERDUE:
            stats.overdue_loans += 1

        for record in loan_schedules:
            if record.paid:
                continue

            if record.month == current_month:
                stats.total_this_month += record.amount
                stats.total_monthly_payment += record.amount

            if record.due_date > today:
                stats.upcoming_payments += 1

            days_left = (record.due_date - today).days
            item = DueItem(loan_id=loan.id or "", loan_name=loan.name, schedule=record, days_left=days_left)
            if classify(record, today) == ScheduleStatus.OVERDUE:
                stats.overdue_schedules.append(item)
            elif record.due_date <= horizon:
                stats.due_soon.append(item)

    stats.overdue_schedules.sort(key=lambda item: item.schedule.due_date)
    stats.due_soon.sort(key=lambda item: item.schedule.due_date)

    outstanding = stats.total_paid + stats.total_remaining
    stats.paid_percent = round(stats.total_paid / outstanding * 100, 1) if outstanding else 0.0
    return stats


def apply_payment(loan: Loan, record: ScheduleRecord, now: datetime) -> Tuple[Loan, ScheduleRecord]:
    """
    Mark an installment paid and credit its amount to the loan.

    Raises:
        AlreadyPaid: the installment was paid before; paying again would
            count the amount twice
    """
    if record.paid:
        raise AlreadyPaid(f"Installment {record.month} is already paid")

    paid_record = replace(record, paid=True, paid_at=now, status=ScheduleStatus.PAID, updated_at=now)

    remaining = max(0, loan.remaining_amount - record.amount)
    updated_loan = replace(
        loan,
        paid_amount=loan.paid_amount + record.amount,
        remaining_amount=remaining,
        status=LoanStatus.PAID if remaining <= 0 else loan.status,
        updated_at=now,
    )
    return updated_loan, paid_record


def apply_amount_edit(
    loan: Loan,
    record: ScheduleRecord,
    new_amount: int,
    now: datetime,
) -> Tuple[Loan, ScheduleRecord]:
    """
    Change one installment's amount and ripple the difference into the loan.

    The difference lands on paid_amount for a paid installment and on
    remaining_amount otherwise; total_amount follows so paid + remaining
    still equals total.
    """
    edited = replace(rebalance_amount(record, new_amount), updated_at=now)
    delta = new_amount - record.amount

    paid_amount = loan.paid_amount
    remaining = loan.remaining_amount
    if record.paid:
        paid_amount += delta
    else:
        remaining = max(0, remaining + delta)

    if remaining <= 0:
        status = LoanStatus.PAID
    elif loan.status == LoanStatus.PAID:
        status = LoanStatus.ACTIVE
    else:
        status = loan.status

    updated_loan = replace(
        loan,
        paid_amount=paid_amount,
        remaining_amount=remaining,
        total_amount=paid_amount + remaining,
        status=status,
        updated_at=now,
    )
    return updated_loan, edited


def filter_loans(
    loans: Sequence[Loan],
    query: Optional[str] = None,
    status: Optional[LoanStatus] = None,
    loan_type: Optional[LoanType] = None,
    created_from: Optional[date] = None,
    created_to: Optional[date] = None,
    statuses: Optional[Dict[str, LoanStatus]] = None,
) -> List[Loan]:
    """
    Search by name/lender/account number, then narrow by status, type and creation date.

    statuses maps loan id to the status shown to the user (see
    effective_loan_status); loans missing from it match on their stored status.
    """
    result = list(loans)

    if query and query.strip():
        needle = query.strip().lower()
        result = [
            loan
            for loan in result
            if needle in loan.name.lower()
            or (loan.lender and needle in loan.lender.lower())
            or (loan.account_number and needle in loan.account_number)
        ]

    if status is not None:
        statuses = statuses or {}
        result = [loan for loan in result if statuses.get(loan.id or "", loan.status) == status]

    if loan_type is not None:
        result = [loan for loan in result if loan.type == loan_type]

    if created_from is not None or created_to is not None:
        def created_in_range(loan: Loan) -> bool:
            if loan.created_at is None:
                return False
            created = loan.created_at.date()
            if created_from is not None and created < created_from:
                return False
            return created_to is None or created <= created_to

        result = [loan for loan in result if created_in_range(loan)]

    return result


def paginate(items: Sequence, page: int, per_page: int) -> Tuple[list, int]:
    """Return (items on page, total pages); pages are 1-based"""
    per_page = max(1, per_page)
    total_pages = (len(items) + per_page - 1) // per_page
    start = (max(1, page) - 1) * per_page
    return list(items[start:start + per_page]), total_pages
