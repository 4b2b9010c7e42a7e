"""Wallets, categories, transactions and the dashboard"""

import logging
from datetime import date
from typing import Dict, List, Optional

from pocket_ledger.domain.exceptions import (
    CategoryNotFound,
    InvalidCategory,
    InvalidTransaction,
    InvalidWallet,
    TransactionNotFound,
    WalletNotFound,
)
from pocket_ledger.domain.ledger import Effects, dashboard_summary, net_effects
from pocket_ledger.domain.models import (
    Category,
    CategoryType,
    DashboardSummary,
    Transaction,
    TransactionType,
    Wallet,
    WalletType,
)
from pocket_ledger.infrastructure.database.documents import DocumentStore
from pocket_ledger.infrastructure.database.repositories import (
    BudgetRepository,
    CategoryRepository,
    TransactionRepository,
    WalletRepository,
)
from pocket_ledger.utils.clock import Clock
from pocket_ledger.utils.date_utils import in_month, month_key, parse_month

# Python field -> document key; balances only move through transactions
WALLET_FIELDS = {
    "name": "name",
    "type": "type",
    "color": "color",
    "account_number": "accountNumber",
    "description": "description",
}

CATEGORY_FIELDS = {
    "name": "name",
    "type": "type",
    "color": "color",
    "icon": "icon",
    "description": "description",
}


class LedgerService:
    """
    Records money movements and keeps wallet balances and category
    counters in step with them.

    Every transaction write (record, edit, delete) commits the transaction
    together with its balance and counter effects. See
    domain.ledger.transaction_effects for what each type does.
    """

    def __init__(self, store: DocumentStore, clock: Clock):
        self.store = store
        self.clock = clock
        self.wallets = WalletRepository(store)
        self.categories = CategoryRepository(store)
        self.budgets = BudgetRepository(store)
        self.transactions = TransactionRepository(store)

    # Wallets

    def create_wallet(
        self,
        name: str,
        type: WalletType = WalletType.CASH,
        balance: int = 0,
        color: Optional[str] = None,
        account_number: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Wallet:
        if not name or not name.strip():
            raise InvalidWallet("Wallet name is required")

        wallet = Wallet(
            id=None,
            name=name.strip(),
            type=type,
            balance=balance,
            account_number=account_number or None,
            description=description or None,
            created_at=self.clock.now(),
        )
        if color:
            wallet.color = color
        return self.wallets.create_wallet(wallet)

    def list_wallets(self) -> List[Wallet]:
        return self.wallets.list_wallets()

    def update_wallet(self, wallet_id: str, changes: Dict) -> Wallet:
        """Change descriptive fields; the balance is left alone"""
        self._require_wallet(wallet_id)

        unknown = set(changes) - set(WALLET_FIELDS)
        if unknown:
            raise InvalidWallet(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        if "name" in changes and not (changes["name"] or "").strip():
            raise InvalidWallet("Wallet name is required")
        if "type" in changes and changes["type"] is None:
            raise InvalidWallet("Wallet type is required")

        fields = _document_fields(changes, WALLET_FIELDS)
        fields["updatedAt"] = self.clock.now().isoformat()
        self.wallets.update_wallet(wallet_id, fields)
        return self._require_wallet(wallet_id)

    def delete_wallet(self, wallet_id: str) -> None:
        """Remove a wallet; transactions that used it are kept as history"""
        self._require_wallet(wallet_id)
        self.wallets.delete_wallet(wallet_id)
        logging.info("Wallet deleted", extra={"user_id": self.store.user_id, "wallet_id": wallet_id})

    # Categories

    def create_category(
        self,
        name: str,
        type: CategoryType,
        color: Optional[str] = None,
        icon: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Category:
        if not name or not name.strip():
            raise InvalidCategory("Category name is required")

        category = Category(
            id=None,
            name=name.strip(),
            type=type,
            description=description or None,
            created_at=self.clock.now(),
        )
        if color:
            category.color = color
        if icon:
            category.icon = icon
        return self.categories.create_category(category)

    def list_categories(self, type: Optional[CategoryType] = None) -> List[Category]:
        categories = self.categories.list_categories()
        if type is not None:
            categories = [c for c in categories if c.type == type]
        return categories

    def update_category(self, category_id: str, changes: Dict) -> Category:
        """
        Change a category's details.

        Raises:
            InvalidCategory: unknown field, empty name, or a type change on a
                category that already has transactions or a budget
        """
        category = self._require_category(category_id)

        unknown = set(changes) - set(CATEGORY_FIELDS)
        if unknown:
            raise InvalidCategory(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        if "name" in changes and not (changes["name"] or "").strip():
            raise InvalidCategory("Category name is required")
        if "type" in changes and changes["type"] is None:
            raise InvalidCategory("Category type is required")

        new_type = changes.get("type")
        if new_type is not None and CategoryType(new_type) != category.type:
            if category.transaction_count > 0:
                raise InvalidCategory(f"Category {category.name} has transactions; its type cannot change")
            if any(b.category_id == category_id for b in self.budgets.list_budgets()):
                raise InvalidCategory(f"Category {category.name} has a budget; its type cannot change")

        fields = _document_fields(changes, CATEGORY_FIELDS)
        fields["updatedAt"] = self.clock.now().isoformat()
        self.categories.update_category(category_id, fields)
        return self._require_category(category_id)

    def delete_category(self, category_id: str) -> int:
        """Remove a category and any budget on it; returns budgets removed"""
        self._require_category(category_id)
        budgets = [b for b in self.budgets.list_budgets() if b.category_id == category_id]

        with self.store.batch():
            for budget in budgets:
                self.budgets.delete_budget(budget.id)
            self.categories.delete_category(category_id)

        logging.info(
            "Category deleted",
            extra={"user_id": self.store.user_id, "category_id": category_id, "budgets_removed": len(budgets)},
        )
        return len(budgets)

    # Transactions

    def list_transactions(self, month: Optional[str] = None) -> List[Transaction]:
        transactions = self.transactions.list_transactions()
        if month:
            parse_month(month)
            transactions = [tx for tx in transactions if in_month(tx.date, month)]
        return transactions

    def record_transaction(
        self,
        type: TransactionType,
        amount: int,
        wallet_id: str,
        date: date,
        category_id: Optional[str] = None,
        note: Optional[str] = None,
        to_wallet_id: Optional[str] = None,
        fee: int = 0,
    ) -> Transaction:
        """
        Save the transaction together with its balance and counter effects.

        Raises:
            InvalidTransaction: non-positive amount, negative fee, missing category or destination
            WalletNotFound: source or destination wallet does not exist
            CategoryNotFound: category does not exist
            InvalidCategory: category type differs from transaction type
        """
        tx = self._validated(type, amount, wallet_id, date, category_id, note, to_wallet_id, fee)
        tx.created_at = self.clock.now()

        with self.store.batch():
            tx = self.transactions.create_transaction(tx)
            self._apply(net_effects(added=tx))

        logging.info(
            "Transaction recorded",
            extra={"user_id": self.store.user_id, "transaction_id": tx.id, "type": type.value, "amount": amount},
        )
        return tx

    def update_transaction(
        self,
        transaction_id: str,
        type: TransactionType,
        amount: int,
        wallet_id: str,
        date: date,
        category_id: Optional[str] = None,
        note: Optional[str] = None,
        to_wallet_id: Optional[str] = None,
        fee: int = 0,
    ) -> Transaction:
        """
        Replace a transaction. The old version's effects are reversed and the
        new version's applied in the same commit, so moving an expense to
        another wallet refunds the first wallet and charges the second.

        Raises the same errors as record_transaction, plus TransactionNotFound.
        """
        old = self._require_transaction(transaction_id)
        tx = self._validated(type, amount, wallet_id, date, category_id, note, to_wallet_id, fee)
        tx.id = transaction_id
        tx.created_at = old.created_at
        tx.updated_at = self.clock.now()

        with self.store.batch():
            self.transactions.save_transaction(tx)
            self._apply(net_effects(removed=old, added=tx))

        logging.info(
            "Transaction updated",
            extra={
                "user_id": self.store.user_id,
                "transaction_id": transaction_id,
                "type": type.value,
                "amount": amount,
            },
        )
        return tx

    def delete_transaction(self, transaction_id: str) -> None:
        """Remove a transaction and reverse its effects on wallets and category counters"""
        tx = self._require_transaction(transaction_id)

        with self.store.batch():
            self.transactions.delete_transaction(transaction_id)
            self._apply(net_effects(removed=tx))

    # Dashboard

    def dashboard(self, month: Optional[str] = None) -> DashboardSummary:
        month = month or month_key(self.clock.today())
        parse_month(month)
        return dashboard_summary(
            self.wallets.list_wallets(),
            self.transactions.list_transactions(),
            self.budgets.list_budgets(),
            self.categories.names(),
            month,
        )

    # Internals

    def _validated(
        self,
        type: TransactionType,
        amount: int,
        wallet_id: str,
        date: date,
        category_id: Optional[str],
        note: Optional[str],
        to_wallet_id: Optional[str],
        fee: int,
    ) -> Transaction:
        """Check a transaction against the stored wallets and categories; writes nothing"""
        if amount <= 0:
            raise InvalidTransaction("Amount must be greater than zero")
        if fee < 0:
            raise InvalidTransaction("Fee cannot be negative")

        self._require_wallet(wallet_id)

        if type == TransactionType.TRANSFER:
            if not to_wallet_id:
                raise InvalidTransaction("Transfer needs a destination wallet")
            if to_wallet_id == wallet_id:
                raise InvalidTransaction("Source and destination wallet must differ")
            self._require_wallet(to_wallet_id)
            category_id = None
        else:
            if not category_id:
                raise InvalidTransaction("Category is required")
            category = self._require_category(category_id)
            if category.type.value != type.value:
                raise InvalidCategory(f"Category {category.name} is not an {type.value} category")
            to_wallet_id = None
            fee = 0

        return Transaction(
            id=None,
            type=type,
            amount=amount,
            wallet_id=wallet_id,
            date=date,
            category_id=category_id,
            note=note or None,
            to_wallet_id=to_wallet_id,
            fee=fee,
        )

    def _apply(self, effects: Effects) -> None:
        # Wallets or categories removed since are skipped
        balances, counts = effects
        for wallet_id, delta in balances.items():
            wallet = self.wallets.get_wallet(wallet_id)
            if wallet is not None:
                self.wallets.set_balance(wallet_id, wallet.balance + delta)
        for category_id, delta in counts.items():
            category = self.categories.get_category(category_id)
            if category is not None:
                self.categories.set_transaction_count(category_id, max(0, category.transaction_count + delta))

    def _require_wallet(self, wallet_id: str) -> Wallet:
        wallet = self.wallets.get_wallet(wallet_id)
        if wallet is None:
            raise WalletNotFound(f"Wallet {wallet_id} not found")
        return wallet

    def _require_category(self, category_id: str) -> Category:
        category = self.categories.get_category(category_id)
        if category is None:
            raise CategoryNotFound(f"Category {category_id} not found")
        return category

    def _require_transaction(self, transaction_id: str) -> Transaction:
        tx = self.transactions.get_transaction(transaction_id)
        if tx is None:
            raise TransactionNotFound(f"Transaction {transaction_id} not found")
        return tx


def _document_fields(changes: Dict, field_names: Dict[str, str]) -> Dict:
    fields = {}
    for key, value in changes.items():
        if isinstance(value, (WalletType, CategoryType)):
            value = value.value
        elif isinstance(value, str):
            value = value.strip() or None
        fields[field_names[key]] = value
    return fields
