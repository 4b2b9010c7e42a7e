"""Installment schedule generation for flat-rate loans"""

import math
from dataclasses import replace
from datetime import date
from typing import List

from pocket_ledger.domain.amounts import round_amount
from pocket_ledger.domain.exceptions import InvalidAmount, InvalidLoanTerms
from pocket_ledger.domain.models import ScheduleRecord, ScheduleStatus
from pocket_ledger.utils.date_utils import add_months, clamped_date

# Fifty years of monthly installments
MAX_TERM_MONTHS = 600


def generate_schedule(
    principal: int,
    annual_interest_percent: float,
    term_months: int,
    start_date: date,
    due_day: int,
) -> List[ScheduleRecord]:
    """
    Generate one installment per month starting at start_date's month.

    Interest is flat: computed once on the original principal and charged
    identically every month, not against a shrinking balance.

    Requirements:
    - principal and interest are rounded separately, amount is their sum
    - due on due_day of each covered month, pulled back to the month's last
      day when the month is shorter (31 -> Feb 28/29)

    Example:
        12_000_000 at 0% over 12 months from 2024-01-01, due day 25
        -> 12 x 1_000_000, due 2024-01-25 ... 2024-12-25

    Raises:
        InvalidLoanTerms: non-positive principal or term, term over
            MAX_TERM_MONTHS, negative or non-finite rate, due day outside 1..31
    """
    if principal <= 0:
        raise InvalidLoanTerms("Principal must be positive")
    if term_months <= 0:
        raise InvalidLoanTerms("Term must be at least one month")
    if term_months > MAX_TERM_MONTHS:
        raise InvalidLoanTerms(f"Term cannot exceed {MAX_TERM_MONTHS} months")
    if not math.isfinite(annual_interest_percent):
        raise InvalidLoanTerms("Interest rate must be a finite number")
    if annual_interest_percent < 0:
        raise InvalidLoanTerms("Interest rate cannot be negative")
    if not 1 <= due_day <= 31:
        raise InvalidLoanTerms("Due day must be between 1 and 31")

    monthly_principal = round_amount(principal / term_months)
    monthly_interest = round_amount(principal * annual_interest_percent / 100 / 12)

    schedule = []
    for i in range(term_months):
        year, month = add_months(start_date.year, start_date.month, i)
        schedule.append(
            ScheduleRecord(
                month=f"{year:04d}-{month:02d}",
                amount=monthly_principal + monthly_interest,
                principal=monthly_principal,
                interest=monthly_interest,
                due_date=clamped_date(year, month, due_day),
                paid=False,
                status=ScheduleStatus.PENDING,
            )
        )

    return schedule


def total_financed(schedule: List[ScheduleRecord]) -> int:
    """Principal plus all interest, i.e. what the borrower repays"""
    return sum(record.amount for record in schedule)


def rebalance_amount(record: ScheduleRecord, new_amount: int) -> ScheduleRecord:
    """
    Return a copy of record carrying new_amount, split in the old ratio.

    Principal takes its rounded share and interest takes the rest, so
    principal + interest == amount holds exactly after the edit.
    """
    if new_amount <= 0:
        raise InvalidAmount("Installment amount must be a positive number")

    if record.amount > 0:
        principal = round_amount(new_amount * record.principal / record.amount)
    else:
        principal = new_amount

    return replace(
        record,
        amount=new_amount,
        principal=principal,
        interest=new_amount - principal,
    )
