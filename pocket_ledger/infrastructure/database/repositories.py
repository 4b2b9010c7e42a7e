"""Data access layer returning typed domain entities"""

from typing import Dict, List, Optional, Set

from pocket_ledger.domain.models import (
    Budget,
    Category,
    Loan,
    PaymentHistory,
    ScheduleRecord,
    Transaction,
    Wallet,
)
from pocket_ledger.infrastructure.database import mappers
from pocket_ledger.infrastructure.database.documents import DocumentStore

LOANS = "loans"
LOAN_PAYMENTS = "loanPayments"
REMINDER_LOG = "reminderLog"
WALLETS = "wallets"
CATEGORIES = "categories"
BUDGETS = "budgets"
TRANSACTIONS = "transactions"


def schedules_path(loan_id: str) -> str:
    return f"{LOANS}/{loan_id}/schedules"


class LoanRepository:
    """Repository for loans, their schedules and payment history"""

    def __init__(self, store: DocumentStore):
        self.store = store

    def list_loans(self) -> List[Loan]:
        """All loans, newest first"""
        docs = self.store.list(LOANS, order_by="createdAt", descending=True)
        return [mappers.loan_from_document(doc) for doc in docs]

    def get_loan(self, loan_id: str) -> Optional[Loan]:
        doc = self.store.get(LOANS, loan_id)
        return mappers.loan_from_document(doc) if doc else None

    def create_loan(self, loan: Loan, schedule: List[ScheduleRecord]) -> Loan:
        """Persist loan with its schedule in one commit"""
        with self.store.batch():
            loan_id = self.store.create(LOANS, mappers.loan_to_document(loan))
            for record in schedule:
                record.loan_id = loan_id
                record.id = self.store.create(schedules_path(loan_id), mappers.schedule_to_document(record))
        loan.id = loan_id
        return loan

    def update_loan_fields(self, loan_id: str, fields: Dict) -> None:
        self.store.update(LOANS, loan_id, fields)

    def save_totals(self, loan: Loan) -> None:
        self.store.update(LOANS, loan.id, mappers.loan_totals_document(loan))

    def list_schedules(self, loan_id: str) -> List[ScheduleRecord]:
        """Installments ordered by due date"""
        docs = self.store.list(schedules_path(loan_id), order_by="dueDate")
        return [mappers.schedule_from_document(doc, loan_id) for doc in docs]

    def schedules_by_loan(self, loans: List[Loan]) -> Dict[str, List[ScheduleRecord]]:
        return {loan.id: self.list_schedules(loan.id) for loan in loans}

    def get_schedule(self, loan_id: str, schedule_id: str) -> Optional[ScheduleRecord]:
        doc = self.store.get(schedules_path(loan_id), schedule_id)
        return mappers.schedule_from_document(doc, loan_id) if doc else None

    def save_schedule(self, record: ScheduleRecord) -> None:
        self.store.update(schedules_path(record.loan_id), record.id, mappers.schedule_to_document(record))

    def delete_loan(self, loan_id: str) -> int:
        """Delete every schedule record, then the loan; returns schedules removed"""
        schedules = self.store.list(schedules_path(loan_id))
        with self.store.batch():
            for doc in schedules:
                self.store.delete(schedules_path(loan_id), doc.id)
            self.store.delete(LOANS, loan_id)
        return len(schedules)

    def add_payment(self, payment: PaymentHistory) -> PaymentHistory:
        payment.id = self.store.create(LOAN_PAYMENTS, mappers.payment_to_document(payment))
        return payment

    def list_payments(self, loan_id: Optional[str] = None) -> List[PaymentHistory]:
        """Payment history, most recent first"""
        docs = self.store.list(LOAN_PAYMENTS, order_by="paymentDate", descending=True)
        payments = [mappers.payment_from_document(doc) for doc in docs]
        if loan_id is not None:
            payments = [p for p in payments if p.loan_id == loan_id]
        return payments

    def sent_reminder_keys(self) -> Set[str]:
        return {doc.data.get("key") for doc in self.store.list(REMINDER_LOG)}

    def record_reminder(self, key: str, sent_at: str) -> None:
        self.store.create(REMINDER_LOG, {"key": key, "sentAt": sent_at})


class WalletRepository:
    def __init__(self, store: DocumentStore):
        self.store = store

    def list_wallets(self) -> List[Wallet]:
        return [mappers.wallet_from_document(doc) for doc in self.store.list(WALLETS)]

    def get_wallet(self, wallet_id: str) -> Optional[Wallet]:
        doc = self.store.get(WALLETS, wallet_id)
        return mappers.wallet_from_document(doc) if doc else None

    def create_wallet(self, wallet: Wallet) -> Wallet:
        wallet.id = self.store.create(WALLETS, mappers.wallet_to_document(wallet))
        return wallet

    def set_balance(self, wallet_id: str, balance: int) -> None:
        self.store.update(WALLETS, wallet_id, {"balance": balance})

    def update_wallet(self, wallet_id: str, fields: Dict) -> None:
        self.store.update(WALLETS, wallet_id, fields)

    def delete_wallet(self, wallet_id: str) -> None:
        self.store.delete(WALLETS, wallet_id)


class CategoryRepository:
    def __init__(self, store: DocumentStore):
        self.store = store

    def list_categories(self) -> List[Category]:
        return [mappers.category_from_document(doc) for doc in self.store.list(CATEGORIES)]

    def get_category(self, category_id: str) -> Optional[Category]:
        doc = self.store.get(CATEGORIES, category_id)
        return mappers.category_from_document(doc) if doc else None

    def create_category(self, category: Category) -> Category:
        category.id = self.store.create(CATEGORIES, mappers.category_to_document(category))
        return category

    def set_transaction_count(self, category_id: str, count: int) -> None:
        self.store.update(CATEGORIES, category_id, {"transactionCount": count})

    def update_category(self, category_id: str, fields: Dict) -> None:
        self.store.update(CATEGORIES, category_id, fields)

    def delete_category(self, category_id: str) -> None:
        self.store.delete(CATEGORIES, category_id)

    def names(self) -> Dict[str, str]:
        return {c.id: c.name for c in self.list_categories()}


class BudgetRepository:
    def __init__(self, store: DocumentStore):
        self.store = store

    def list_budgets(self) -> List[Budget]:
        docs = self.store.list(BUDGETS, order_by="createdAt", descending=True)
        return [mappers.budget_from_document(doc) for doc in docs]

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        doc = self.store.get(BUDGETS, budget_id)
        return mappers.budget_from_document(doc) if doc else None

    def create_budget(self, budget: Budget) -> Budget:
        budget.id = self.store.create(BUDGETS, mappers.budget_to_document(budget))
        return budget

    def save_budget(self, budget: Budget) -> None:
        self.store.update(BUDGETS, budget.id, mappers.budget_to_document(budget))

    def delete_budget(self, budget_id: str) -> None:
        self.store.delete(BUDGETS, budget_id)


class TransactionRepository:
    def __init__(self, store: DocumentStore):
        self.store = store

    def list_transactions(self) -> List[Transaction]:
        """All transactions, most recent date first"""
        docs = self.store.list(TRANSACTIONS, order_by="date", descending=True)
        return [mappers.transaction_from_document(doc) for doc in docs]

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        doc = self.store.get(TRANSACTIONS, transaction_id)
        return mappers.transaction_from_document(doc) if doc else None

    def create_transaction(self, tx: Transaction) -> Transaction:
        tx.id = self.store.create(TRANSACTIONS, mappers.transaction_to_document(tx))
        return tx

    def save_transaction(self, tx: Transaction) -> None:
        """Overwrite the stored transaction; cleared fields are removed"""
        self.store.set(TRANSACTIONS, tx.id, mappers.transaction_to_document(tx))

    def delete_transaction(self, transaction_id: str) -> None:
        self.store.delete(TRANSACTIONS, transaction_id)
