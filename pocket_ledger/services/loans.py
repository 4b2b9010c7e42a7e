"""Loan use cases: create with schedule, pay, edit, delete, report"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, List, Optional, Tuple

from pocket_ledger.config import settings
from pocket_ledger.domain.exceptions import (
    InvalidAmount,
    InvalidLoanTerms,
    LoanNotFound,
    PersistenceError,
    ScheduleNotFound,
)
from pocket_ledger.domain.loans import (
    aggregate_loan,
    aggregate_portfolio,
    apply_amount_edit,
    apply_payment,
    filter_loans,
    paginate,
)
from pocket_ledger.domain.models import (
    Loan,
    LoanStatus,
    LoanSummary,
    LoanType,
    PaymentHistory,
    PaymentMethod,
    PortfolioStats,
    Reminder,
    ScheduleRecord,
)
from pocket_ledger.domain.reminders import pending_reminders
from pocket_ledger.domain.schedules import generate_schedule, total_financed
from pocket_ledger.domain.status import display_status, effective_loan_status
from pocket_ledger.infrastructure.database.documents import DocumentStore
from pocket_ledger.infrastructure.database.repositories import LoanRepository
from pocket_ledger.infrastructure.observability.logging import log_loan_created, log_payment, log_reminder
from pocket_ledger.infrastructure.observability.metrics import (
    loan_created_counter,
    schedule_edit_counter,
    schedule_payment_counter,
)
from pocket_ledger.utils.clock import Clock

# Detail fields a user may change after creation; amounts follow the schedule
EDITABLE_FIELDS = {
    "name": "name",
    "due_day": "dueDay",
    "type": "type",
    "interest_rate": "interestRate",
    "lender": "lender",
    "account_number": "accountNumber",
    "notes": "notes",
    "start_date": "startDate",
    "end_date": "endDate",
}


@dataclass
class LoanTerms:
    """Input for creating a loan"""

    name: str
    principal: int
    term_months: int
    start_date: date
    due_day: int
    interest_rate: float = 0.0
    type: LoanType = LoanType.PERSONAL
    end_date: Optional[date] = None
    lender: Optional[str] = None
    account_number: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class LoanPage:
    items: List[Tuple[Loan, LoanSummary]]
    total: int
    page: int
    total_pages: int


class LoanService:
    """Loan operations for one user; validation happens before any write"""

    def __init__(self, store: DocumentStore, clock: Clock):
        self.store = store
        self.clock = clock
        self.repo = LoanRepository(store)

    def create_loan(self, terms: LoanTerms) -> Tuple[Loan, List[ScheduleRecord]]:
        """
        Create a loan and its full schedule in one atomic write.

        The loan's total is principal plus all flat-rate interest, i.e. the
        sum of the generated installments.
        """
        if not terms.name or not terms.name.strip():
            raise InvalidLoanTerms("Loan name is required")

        schedule = generate_schedule(
            terms.principal,
            terms.interest_rate or 0.0,
            terms.term_months,
            terms.start_date,
            terms.due_day,
        )
        total = total_financed(schedule)
        now = self.clock.now()
        for record in schedule:
            record.created_at = now

        loan = Loan(
            id=None,
            name=terms.name.strip(),
            due_day=terms.due_day,
            status=LoanStatus.ACTIVE,
            total_amount=total,
            paid_amount=0,
            remaining_amount=total,
            start_date=terms.start_date,
            type=terms.type,
            end_date=terms.end_date or schedule[-1].due_date,
            interest_rate=terms.interest_rate or None,
            lender=terms.lender or None,
            account_number=terms.account_number or None,
            notes=terms.notes or None,
            created_at=now,
        )
        loan = self.repo.create_loan(loan, schedule)

        loan_created_counter.labels(loan_type=loan.type.value).inc()
        log_loan_created(self.store.user_id, loan.id, total, len(schedule))
        return loan, schedule

    def get_loan(self, loan_id: str) -> Tuple[Loan, List[ScheduleRecord], LoanSummary]:
        loan = self._require_loan(loan_id)
        today = self.clock.today()
        schedules = self._classified(self.repo.list_schedules(loan_id), today)
        return loan, schedules, aggregate_loan(loan, schedules, today)

    def list_loans(
        self,
        query: Optional[str] = None,
        status: Optional[LoanStatus] = None,
        loan_type: Optional[LoanType] = None,
        created_from: Optional[date] = None,
        created_to: Optional[date] = None,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> LoanPage:
        today = self.clock.today()
        all_loans = self.repo.list_loans()
        schedules_by_loan = self.repo.schedules_by_loan(all_loans)
        statuses = {
            loan.id: effective_loan_status(loan, schedules_by_loan[loan.id], today) for loan in all_loans
        }

        loans = filter_loans(all_loans, query, status, loan_type, created_from, created_to, statuses)
        page_items, total_pages = paginate(loans, page, per_page or settings.default_page_size)
        items = [(loan, aggregate_loan(loan, schedules_by_loan[loan.id], today)) for loan in page_items]

        return LoanPage(items=items, total=len(loans), page=max(1, page), total_pages=total_pages)

    def update_loan_details(self, loan_id: str, changes: Dict) -> Loan:
        """Change descriptive fields; the schedule and totals are left alone"""
        self._require_loan(loan_id)

        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise InvalidLoanTerms(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        if "name" in changes and not (changes["name"] or "").strip():
            raise InvalidLoanTerms("Loan name is required")
        if "due_day" in changes and not (changes["due_day"] and 1 <= int(changes["due_day"]) <= 31):
            raise InvalidLoanTerms("Due day must be between 1 and 31")
        rate = changes.get("interest_rate")
        if rate is not None and not (math.isfinite(rate) and rate >= 0):
            raise InvalidLoanTerms("Interest rate must be a finite, non-negative number")

        fields = {}
        for key, value in changes.items():
            if isinstance(value, (LoanType, LoanStatus)):
                value = value.value
            elif isinstance(value, date):
                value = value.isoformat()
            fields[EDITABLE_FIELDS[key]] = value
        fields["updatedAt"] = self.clock.now().isoformat()

        self.repo.update_loan_fields(loan_id, fields)
        return self._require_loan(loan_id)

    def mark_paid(
        self,
        loan_id: str,
        schedule_id: str,
        method: Optional[PaymentMethod] = None,
        note: Optional[str] = None,
    ) -> Tuple[Loan, ScheduleRecord]:
        """
        Mark one installment paid and credit the loan.

        The installment and loan totals are written together. The payment
        history entry is written afterwards; if that append fails the
        payment still stands and the failure is logged.

        Raises:
            ScheduleNotFound: loan or installment id does not resolve
            AlreadyPaid: installment was paid before
        """
        loan, record = self._require_schedule(loan_id, schedule_id)
        now = self.clock.now()
        updated_loan, paid_record = apply_payment(loan, record, now)

        with self.store.batch():
            self.repo.save_schedule(paid_record)
            self.repo.save_totals(updated_loan)

        method = method or PaymentMethod(settings.default_payment_method)
        try:
            self.repo.add_payment(
                PaymentHistory(
                    loan_id=loan_id,
                    schedule_id=schedule_id,
                    amount=paid_record.amount,
                    payment_date=now,
                    method=method,
                    notes=note or "Installment payment",
                    created_at=now,
                )
            )
        except PersistenceError as e:
            logging.warning(
                f"Payment history append failed: {e}",
                extra={"user_id": self.store.user_id, "loan_id": loan_id, "schedule_id": schedule_id},
            )

        schedule_payment_counter.labels(method=method.value).inc()
        log_payment(self.store.user_id, loan_id, schedule_id, paid_record.amount, updated_loan.remaining_amount)
        return updated_loan, paid_record

    def edit_schedule_amount(self, loan_id: str, schedule_id: str, new_amount: int) -> Tuple[Loan, ScheduleRecord]:
        """
        Change one installment's amount, keeping its principal/interest ratio.

        Raises:
            InvalidAmount: new_amount is not positive
            ScheduleNotFound: loan or installment id does not resolve
        """
        if new_amount <= 0:
            raise InvalidAmount("Installment amount must be a positive number")

        loan, record = self._require_schedule(loan_id, schedule_id)
        updated_loan, edited = apply_amount_edit(loan, record, new_amount, self.clock.now())

        with self.store.batch():
            self.repo.save_schedule(edited)
            self.repo.save_totals(updated_loan)

        schedule_edit_counter.inc()
        return updated_loan, edited

    def edit_all_schedules(self, loan_id: str, amounts: Dict[str, int]) -> Tuple[Loan, List[ScheduleRecord]]:
        """Apply several amount edits to one loan as a single write"""
        loan = self._require_loan(loan_id)
        schedules = {record.id: record for record in self.repo.list_schedules(loan_id)}

        for schedule_id, amount in amounts.items():
            if schedule_id not in schedules:
                raise ScheduleNotFound(f"Installment {schedule_id} not found on loan {loan_id}")
            if amount <= 0:
                raise InvalidAmount("Installment amount must be a positive number")

        now = self.clock.now()
        edited_records = []
        for schedule_id, amount in amounts.items():
            record = schedules[schedule_id]
            if amount == record.amount:
                continue
            loan, edited = apply_amount_edit(loan, record, amount, now)
            schedules[schedule_id] = edited
            edited_records.append(edited)

        if edited_records:
            with self.store.batch():
                for record in edited_records:
                    self.repo.save_schedule(record)
                self.repo.save_totals(loan)
            schedule_edit_counter.inc(len(edited_records))

        ordered = sorted(schedules.values(), key=lambda record: record.due_date)
        return loan, self._classified(ordered, self.clock.today())

    def delete_loan(self, loan_id: str) -> int:
        """Delete the loan and every installment it owns; returns installments removed"""
        self._require_loan(loan_id)
        removed = self.repo.delete_loan(loan_id)
        logging.info(
            "Loan deleted",
            extra={"user_id": self.store.user_id, "loan_id": loan_id, "schedules_removed": removed},
        )
        return removed

    def portfolio(self) -> PortfolioStats:
        loans = self.repo.list_loans()
        today = self.clock.today()
        schedules_by_loan = {
            loan_id: self._classified(records, today)
            for loan_id, records in self.repo.schedules_by_loan(loans).items()
        }
        return aggregate_portfolio(loans, schedules_by_loan, today, settings.due_soon_window_days)

    def payment_history(self, loan_id: Optional[str] = None) -> List[PaymentHistory]:
        return self.repo.list_payments(loan_id)

    def collect_reminders(self) -> List[Reminder]:
        """Reminders due today that have not been sent; each is sent once"""
        loans = [loan for loan in self.repo.list_loans() if loan.status != LoanStatus.PAID]
        today = self.clock.today()
        reminders = pending_reminders(
            loans,
            self.repo.schedules_by_loan(loans),
            today,
            self.repo.sent_reminder_keys(),
            settings.reminder_days,
        )
        if not reminders:
            return []

        sent_at = self.clock.now().isoformat()
        with self.store.batch():
            for reminder in reminders:
                self.repo.record_reminder(reminder.key, sent_at)

        for reminder in reminders:
            log_reminder(self.store.user_id, reminder.key, reminder.level, reminder.message)
        return reminders

    def _require_loan(self, loan_id: str) -> Loan:
        loan = self.repo.get_loan(loan_id)
        if loan is None:
            raise LoanNotFound(f"Loan {loan_id} not found")
        return loan

    def _require_schedule(self, loan_id: str, schedule_id: str) -> Tuple[Loan, ScheduleRecord]:
        loan = self.repo.get_loan(loan_id)
        if loan is None:
            raise ScheduleNotFound(f"Loan {loan_id} not found")
        record = self.repo.get_schedule(loan_id, schedule_id)
        if record is None:
            raise ScheduleNotFound(f"Installment {schedule_id} not found on loan {loan_id}")
        return loan, record

    @staticmethod
    def _classified(records: List[ScheduleRecord], today: date) -> List[ScheduleRecord]:
        window = settings.due_soon_window_days
        return [replace(record, status=display_status(record, today, window)) for record in records]
