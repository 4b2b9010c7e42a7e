"""Live portfolio statistics driven by store change notifications"""

from typing import Callable, Dict, Optional

from pocket_ledger.config import settings
from pocket_ledger.domain.loans import aggregate_portfolio
from pocket_ledger.domain.models import Loan, PortfolioStats, ScheduleRecord
from pocket_ledger.infrastructure.database import mappers
from pocket_ledger.infrastructure.database.documents import (
    DELETED,
    Delta,
    DocumentStore,
    StoredDocument,
    Subscription,
)
from pocket_ledger.infrastructure.database.repositories import LOANS, LoanRepository, schedules_path
from pocket_ledger.utils.clock import Clock


class PortfolioWatcher:
    """
    Keeps PortfolioStats current while loans and installments change.

    Subscribes to the loans collection and to the schedule collection of
    every known loan; stats are recomputed after each committed change.
    close() cancels every subscription.
    """

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock,
        on_change: Optional[Callable[[PortfolioStats], None]] = None,
    ):
        self.store = store
        self.clock = clock
        self.on_change = on_change
        self.stats = PortfolioStats()
        self._repo = LoanRepository(store)
        self._loans: Dict[str, Loan] = {}
        self._schedules: Dict[str, Dict[str, ScheduleRecord]] = {}
        self._schedule_subscriptions: Dict[str, Subscription] = {}
        self._loan_subscription: Optional[Subscription] = None

    def start(self) -> "PortfolioWatcher":
        for loan in self._repo.list_loans():
            self._loans[loan.id] = loan
            self._watch_schedules(loan.id)
            self._schedules[loan.id] = {record.id: record for record in self._repo.list_schedules(loan.id)}

        self._loan_subscription = self.store.subscribe(LOANS, self._on_loan_change)
        self._recompute()
        return self

    def close(self) -> None:
        if self._loan_subscription is not None:
            self._loan_subscription.cancel()
            self._loan_subscription = None
        for subscription in self._schedule_subscriptions.values():
            subscription.cancel()
        self._schedule_subscriptions.clear()

    @property
    def active(self) -> bool:
        return self._loan_subscription is not None

    def _watch_schedules(self, loan_id: str) -> None:
        self._schedules.setdefault(loan_id, {})
        self._schedule_subscriptions[loan_id] = self.store.subscribe(
            schedules_path(loan_id),
            lambda delta: self._on_schedule_change(loan_id, delta),
        )

    def _on_loan_change(self, delta: Delta) -> None:
        if delta.kind == DELETED:
            self._loans.pop(delta.doc_id, None)
            self._schedules.pop(delta.doc_id, None)
            subscription = self._schedule_subscriptions.pop(delta.doc_id, None)
            if subscription is not None:
                subscription.cancel()
        else:
            self._loans[delta.doc_id] = mappers.loan_from_document(StoredDocument(id=delta.doc_id, data=delta.data or {}))
            if delta.doc_id not in self._schedule_subscriptions:
                self._watch_schedules(delta.doc_id)
        self._recompute()

    def _on_schedule_change(self, loan_id: str, delta: Delta) -> None:
        records = self._schedules.setdefault(loan_id, {})
        if delta.kind == DELETED:
            records.pop(delta.doc_id, None)
        else:
            doc = StoredDocument(id=delta.doc_id, data=delta.data or {})
            records[delta.doc_id] = mappers.schedule_from_document(doc, loan_id)
        self._recompute()

    def _recompute(self) -> None:
        schedules_by_loan = {
            loan_id: sorted(records.values(), key=lambda record: record.due_date)
            for loan_id, records in self._schedules.items()
        }
        self.stats = aggregate_portfolio(
            list(self._loans.values()),
            schedules_by_loan,
            self.clock.today(),
            settings.due_soon_window_days,
        )
        if self.on_change is not None:
            self.on_change(self.stats)
