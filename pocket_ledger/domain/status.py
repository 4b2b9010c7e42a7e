"""Payment status derivation for installments and loans"""

from datetime import date, timedelta
from typing import Iterable

from pocket_ledger.domain.models import Loan, LoanStatus, ScheduleRecord, ScheduleStatus


def classify(record: ScheduleRecord, today: date) -> ScheduleStatus:
    """Paid wins over dates; otherwise overdue once the due date has passed"""
    if record.paid:
        return ScheduleStatus.PAID
    if record.due_date < today:
        return ScheduleStatus.OVERDUE
    return ScheduleStatus.PENDING


def is_due_soon(record: ScheduleRecord, today: date, window_days: int = 30) -> bool:
    return not record.paid and today <= record.due_date <= today + timedelta(days=window_days)


def display_status(record: ScheduleRecord, today: date, window_days: int = 30) -> ScheduleStatus:
    """classify() plus the due-soon view shown on dashboards"""
    status = classify(record, today)
    if status == ScheduleStatus.PENDING and is_due_soon(record, today, window_days):
        return ScheduleStatus.DUE_SOON
    return status


def effective_loan_status(loan: Loan, schedules: Iterable[ScheduleRecord], today: date) -> LoanStatus:
    """
    Overall loan status as shown to the user.

    Stored status only moves on payments and edits, so a loan with a missed
    installment still reads "active" in storage; this derives "overdue" from
    the schedule without writing anything back.
    """
    if loan.remaining_amount <= 0:
        return LoanStatus.PAID
    if loan.status == LoanStatus.OVERDUE:
        return LoanStatus.OVERDUE
    if any(classify(record, today) == ScheduleStatus.OVERDUE for record in schedules):
        return LoanStatus.OVERDUE
    return LoanStatus.ACTIVE
