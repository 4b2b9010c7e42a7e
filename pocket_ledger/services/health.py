"""Financial health report for a month"""

import logging
from typing import Optional

from pocket_ledger.domain.health import make_health_report
from pocket_ledger.domain.models import HealthReport
from pocket_ledger.infrastructure.database.documents import DocumentStore
from pocket_ledger.infrastructure.database.repositories import (
    CategoryRepository,
    LoanRepository,
    TransactionRepository,
)
from pocket_ledger.infrastructure.observability.metrics import health_score_histogram
from pocket_ledger.utils.clock import Clock
from pocket_ledger.utils.date_utils import month_key, parse_month


class HealthService:
    def __init__(self, store: DocumentStore, clock: Clock):
        self.store = store
        self.clock = clock
        self.loans = LoanRepository(store)
        self.categories = CategoryRepository(store)
        self.transactions = TransactionRepository(store)

    def report(self, month: Optional[str] = None) -> HealthReport:
        month = month or month_key(self.clock.today())
        parse_month(month)

        loans = self.loans.list_loans()
        schedules = [record for records in self.loans.schedules_by_loan(loans).values() for record in records]

        report = make_health_report(
            self.transactions.list_transactions(),
            schedules,
            month,
            self.categories.names(),
        )

        health_score_histogram.observe(report.score)
        logging.info(
            "Health report computed",
            extra={"user_id": self.store.user_id, "month": month, "score": report.score, "label": report.label},
        )
        return report
