"""Unit tests for loan aggregation, payments and amount edits"""

import pytest
from datetime import date, datetime, timezone
from factories import make_loan, make_schedule
from pocket_ledger.domain.exceptions import AlreadyPaid
from pocket_ledger.domain.loans import (
    aggregate_loan,
    aggregate_portfolio,
    apply_amount_edit,
    apply_payment,
    filter_loans,
    paginate,
)
from pocket_ledger.domain.models import LoanStatus, LoanType, ScheduleStatus

TODAY = date(2024, 3, 10)
NOW = datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc)
YEAR = [f"2024-{m:02d}" for m in range(1, 13)]


def test_aggregate_loan_progress():
    loan = make_loan(paid=3_000_000)
    schedules = make_schedule(YEAR, paid_months=YEAR[:3])

    summary = aggregate_loan(loan, schedules, TODAY)

    assert summary.total_schedules == 12
    assert summary.paid_schedules == 3
    assert summary.progress_percent == 25.0
    assert summary.next_due.month == "2024-04"
    assert summary.status == LoanStatus.ACTIVE


def test_aggregate_loan_without_schedules():
    summary = aggregate_loan(make_loan(), [], TODAY)

    assert summary.progress_percent == 0.0
    assert summary.next_due is None


def test_aggregate_loan_rounds_progress():
    summary = aggregate_loan(make_loan(), make_schedule(YEAR[:3], paid_months=YEAR[:1]), TODAY)

    assert summary.progress_percent == 33.3


def test_apply_payment_credits_loan():
    """Paying January of a 12 x 1_000_000 loan"""
    loan = make_loan()
    january = make_schedule(YEAR)[0]

    updated, paid = apply_payment(loan, january, NOW)

    assert updated.paid_amount == 1_000_000
    assert updated.remaining_amount == 11_000_000
    assert updated.status == LoanStatus.ACTIVE
    assert paid.paid is True
    assert paid.paid_at == NOW
    assert paid.status == ScheduleStatus.PAID
    assert loan.paid_amount == 0  # original untouched


def test_apply_payment_twice_rejected():
    loan = make_loan()
    january = make_schedule(YEAR)[0]
    updated, paid = apply_payment(loan, january, NOW)

    with pytest.raises(AlreadyPaid):
        apply_payment(updated, paid, NOW)


def test_final_payment_marks_loan_paid():
    loan = make_loan(total=12_000_000, paid=11_000_000)
    december = make_schedule(YEAR)[-1]

    updated, _ = apply_payment(loan, december, NOW)

    assert updated.remaining_amount == 0
    assert updated.status == LoanStatus.PAID


def test_overpayment_clamps_remaining():
    loan = make_loan(total=1_500_000, paid=1_000_000)
    record = make_schedule(YEAR[:1])[0]

    updated, _ = apply_payment(loan, record, NOW)

    assert updated.remaining_amount == 0
    assert updated.paid_amount == 2_000_000
    assert updated.status == LoanStatus.PAID


def test_amount_edit_unpaid_moves_remaining():
    loan = make_loan()
    february = make_schedule(YEAR)[1]

    updated, edited = apply_amount_edit(loan, february, 1_250_000, NOW)

    assert edited.amount == 1_250_000
    assert edited.principal + edited.interest == 1_250_000
    assert updated.remaining_amount == 11_250_000
    assert updated.paid_amount == 0
    assert updated.total_amount == updated.paid_amount + updated.remaining_amount


def test_amount_edit_paid_moves_paid_amount():
    loan = make_loan(paid=1_000_000)
    january = make_schedule(YEAR, paid_months=YEAR[:1])[0]

    updated, edited = apply_amount_edit(loan, january, 900_000, NOW)

    assert edited.paid is True
    assert updated.paid_amount == 900_000
    assert updated.remaining_amount == 11_000_000
    assert updated.total_amount == 11_900_000


def test_amount_edit_reopens_paid_loan():
    loan = make_loan(total=1_000_000, paid=1_000_000, status=LoanStatus.PAID)
    record = make_schedule(YEAR[:2], paid_months=YEAR[:1])[1]
    record.amount = record.principal = 0

    updated, _ = apply_amount_edit(loan, record, 200_000, NOW)

    assert updated.remaining_amount == 200_000
    assert updated.status == LoanStatus.ACTIVE


def test_aggregate_portfolio():
    """
    Loan A (active): Jan paid, Feb overdue, Mar due in 15 days, Apr due in 46 days.
    Loan B (paid off): everything paid.
    """
    loan_a = make_loan("a", total=4_000_000, paid=1_000_000, name="Car")
    loan_b = make_loan("b", total=2_000_000, paid=2_000_000, status=LoanStatus.PAID, name="Phone")
    schedules = {
        "a": make_schedule(YEAR[:4], paid_months=YEAR[:1], loan_id="a"),
        "b": make_schedule(YEAR[:2], paid_months=YEAR[:2], loan_id="b"),
    }

    stats = aggregate_portfolio([loan_a, loan_b], schedules, TODAY)

    assert stats.total_active_loans == 1
    assert stats.total_remaining == 3_000_000
    assert stats.total_paid == 1_000_000
    assert stats.overdue_loans == 1
    assert stats.total_this_month == 1_000_000
    assert stats.total_monthly_payment == 1_000_000
    assert stats.upcoming_payments == 2
    assert stats.paid_percent == 25.0
    assert [item.schedule.month for item in stats.overdue_schedules] == ["2024-02"]
    assert [item.schedule.month for item in stats.due_soon] == ["2024-03"]
    assert stats.due_soon[0].days_left == 15
    assert stats.due_soon[0].loan_name == "Car"


def test_aggregate_portfolio_due_soon_sorted_across_loans():
    loan_a = make_loan("a")
    loan_b = make_loan("b")
    schedules = {
        "a": make_schedule(["2024-03"], due_day=28, loan_id="a"),
        "b": make_schedule(["2024-03"], due_day=12, loan_id="b"),
    }

    stats = aggregate_portfolio([loan_a, loan_b], schedules, TODAY)

    assert [item.loan_id for item in stats.due_soon] == ["b", "a"]


def test_aggregate_portfolio_empty():
    stats = aggregate_portfolio([], {}, TODAY)

    assert stats.total_active_loans == 0
    assert stats.paid_percent == 0.0
    assert stats.due_soon == []


def test_filter_loans():
    loans = [
        make_loan("1", name="Motorbike", lender="Bank Mandiri", account_number="111222", type=LoanType.VEHICLE,
                  created_at=datetime(2024, 1, 5, tzinfo=timezone.utc)),
        make_loan("2", name="House", lender="BTN", type=LoanType.MORTGAGE, status=LoanStatus.PAID,
                  created_at=datetime(2024, 2, 5, tzinfo=timezone.utc)),
        make_loan("3", name="Laptop", created_at=datetime(2024, 3, 5, tzinfo=timezone.utc)),
    ]

    assert [loan.id for loan in filter_loans(loans, query="motor")] == ["1"]
    assert [loan.id for loan in filter_loans(loans, query="btn")] == ["2"]
    assert [loan.id for loan in filter_loans(loans, query="1222")] == ["1"]
    assert [loan.id for loan in filter_loans(loans, status=LoanStatus.PAID)] == ["2"]
    assert [loan.id for loan in filter_loans(loans, loan_type=LoanType.VEHICLE)] == ["1"]
    assert [loan.id for loan in filter_loans(loans, created_from=date(2024, 2, 1))] == ["2", "3"]
    assert [loan.id for loan in filter_loans(loans, created_to=date(2024, 2, 5))] == ["1", "2"]
    assert len(filter_loans(loans, query="   ")) == 3


def test_filter_loans_by_shown_status():
    loans = [make_loan("1"), make_loan("2"), make_loan("3", status=LoanStatus.PAID)]
    shown = {"1": LoanStatus.OVERDUE, "2": LoanStatus.ACTIVE}

    assert [loan.id for loan in filter_loans(loans, status=LoanStatus.OVERDUE, statuses=shown)] == ["1"]
    assert [loan.id for loan in filter_loans(loans, status=LoanStatus.ACTIVE, statuses=shown)] == ["2"]
    assert [loan.id for loan in filter_loans(loans, status=LoanStatus.PAID, statuses=shown)] == ["3"]
    assert filter_loans(loans, status=LoanStatus.OVERDUE) == []


def test_paginate():
    items = list(range(25))

    assert paginate(items, 1, 10) == (list(range(10)), 3)
    assert paginate(items, 3, 10) == ([20, 21, 22, 23, 24], 3)
    assert paginate(items, 4, 10) == ([], 3)
    assert paginate([], 1, 10) == ([], 0)
