"""Unit tests for installment and loan status derivation"""

from dataclasses import replace
from datetime import date
from factories import make_loan, make_schedule
from pocket_ledger.domain.models import LoanStatus, ScheduleStatus
from pocket_ledger.domain.status import classify, display_status, effective_loan_status, is_due_soon

TODAY = date(2024, 3, 10)


def _record(due: date, paid: bool = False):
    record = make_schedule(["2024-03"])[0]
    return replace(record, due_date=due, paid=paid)


def test_classify_paid_wins_over_dates():
    assert classify(_record(date(2024, 1, 1), paid=True), TODAY) == ScheduleStatus.PAID
    assert classify(_record(date(2024, 12, 1), paid=True), TODAY) == ScheduleStatus.PAID


def test_classify_overdue_after_due_date():
    assert classify(_record(date(2024, 3, 9)), TODAY) == ScheduleStatus.OVERDUE


def test_classify_due_today_is_pending():
    assert classify(_record(TODAY), TODAY) == ScheduleStatus.PENDING
    assert classify(_record(date(2024, 3, 11)), TODAY) == ScheduleStatus.PENDING


def test_classify_is_deterministic():
    record = _record(date(2024, 3, 1))
    results = {classify(record, TODAY) for _ in range(5)}

    assert results == {ScheduleStatus.OVERDUE}
    assert record.status == ScheduleStatus.PENDING  # input untouched


def test_is_due_soon_window():
    assert is_due_soon(_record(TODAY), TODAY)
    assert is_due_soon(_record(date(2024, 4, 9)), TODAY)  # exactly 30 days
    assert not is_due_soon(_record(date(2024, 4, 10)), TODAY)
    assert not is_due_soon(_record(date(2024, 3, 9)), TODAY)
    assert not is_due_soon(_record(date(2024, 3, 15), paid=True), TODAY)
    assert is_due_soon(_record(date(2024, 3, 15)), TODAY, window_days=5)


def test_display_status():
    assert display_status(_record(date(2024, 3, 20)), TODAY) == ScheduleStatus.DUE_SOON
    assert display_status(_record(date(2024, 6, 20)), TODAY) == ScheduleStatus.PENDING
    assert display_status(_record(date(2024, 3, 1)), TODAY) == ScheduleStatus.OVERDUE
    assert display_status(_record(date(2024, 3, 20), paid=True), TODAY) == ScheduleStatus.PAID


def test_effective_status_overdue_from_schedule():
    """Stored status stays active; a missed installment reads as overdue"""
    loan = make_loan(paid=1_000_000)
    schedules = make_schedule(["2024-01", "2024-02", "2024-03"], paid_months=("2024-01",))

    assert effective_loan_status(loan, schedules, TODAY) == LoanStatus.OVERDUE
    assert loan.status == LoanStatus.ACTIVE


def test_effective_status_active_when_current():
    loan = make_loan(paid=2_000_000)
    schedules = make_schedule(["2024-01", "2024-02", "2024-03"], paid_months=("2024-01", "2024-02"))

    assert effective_loan_status(loan, schedules, TODAY) == LoanStatus.ACTIVE


def test_effective_status_paid_and_stored_overdue():
    assert effective_loan_status(make_loan(total=1_000, paid=1_000), [], TODAY) == LoanStatus.PAID
    assert effective_loan_status(make_loan(status=LoanStatus.OVERDUE), [], TODAY) == LoanStatus.OVERDUE
