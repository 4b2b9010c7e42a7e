"""Due-date reminders for unpaid installments"""

from datetime import date
from typing import Iterable, List, Optional, Sequence

from pocket_ledger.domain.amounts import format_currency
from pocket_ledger.domain.models import Loan, Reminder, ScheduleRecord
from pocket_ledger.utils.date_utils import month_key

DEFAULT_REMINDER_DAYS = (7, 3, 1, 0)


def reminder_key(loan_id: str, month: str, days_left: int) -> str:
    return f"loan_reminder_{loan_id}_{month}_{days_left}"


def reminder_for(
    loan: Loan,
    record: ScheduleRecord,
    today: date,
    reminder_days: Sequence[int] = DEFAULT_REMINDER_DAYS,
) -> Optional[Reminder]:
    """
    Build a reminder when an unpaid installment of this month is exactly
    7, 3, 1 or 0 days away.
    """
    if record.paid or record.month != month_key(today):
        return None

    days_left = (record.due_date - today).days
    if days_left not in reminder_days:
        return None

    amount = format_currency(record.amount)
    if days_left == 0:
        level, message = "urgent", f'Installment "{loan.name}" is due TODAY ({amount})'
    elif days_left == 1:
        level, message = "urgent", f'Installment "{loan.name}" is due TOMORROW ({amount})'
    elif days_left <= 3:
        level, message = "notice", f'Installment "{loan.name}" is due in {days_left} days ({amount})'
    else:
        level, message = "warning", f'Installment "{loan.name}" is due in {days_left} days ({amount})'

    return Reminder(
        key=reminder_key(loan.id or "", record.month, days_left),
        loan_id=loan.id or "",
        loan_name=loan.name,
        month=record.month,
        amount=record.amount,
        days_left=days_left,
        level=level,
        message=message,
    )


def pending_reminders(
    loans: Iterable[Loan],
    schedules_by_loan: dict,
    today: date,
    already_sent: set,
    reminder_days: Sequence[int] = DEFAULT_REMINDER_DAYS,
) -> List[Reminder]:
    """Reminders due today whose key has not been sent yet"""
    reminders = []
    for loan in loans:
        for record in schedules_by_loan.get(loan.id, []):
            reminder = reminder_for(loan, record, today, reminder_days)
            if reminder is not None and reminder.key not in already_sent:
                reminders.append(reminder)
    return reminders
