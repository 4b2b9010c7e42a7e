"""Budget use cases"""

import logging
from typing import List, Optional

from pocket_ledger.domain.budgets import summarize_budgets, usage_by_category, validate_budget_limit
from pocket_ledger.domain.exceptions import (
    BudgetAlreadyExists,
    BudgetNotFound,
    CategoryNotFound,
    InvalidCategory,
)
from pocket_ledger.domain.models import Budget, BudgetOverview, Category, CategoryType
from pocket_ledger.infrastructure.database.documents import DocumentStore
from pocket_ledger.infrastructure.database.repositories import (
    BudgetRepository,
    CategoryRepository,
    TransactionRepository,
)
from pocket_ledger.infrastructure.observability.metrics import record_budget_statuses
from pocket_ledger.utils.clock import Clock
from pocket_ledger.utils.date_utils import month_key, parse_month


class BudgetService:
    """One budget per expense category; usage is computed per month"""

    def __init__(self, store: DocumentStore, clock: Clock):
        self.store = store
        self.clock = clock
        self.budgets = BudgetRepository(store)
        self.categories = CategoryRepository(store)
        self.transactions = TransactionRepository(store)

    def list_budgets(self) -> List[Budget]:
        return self.budgets.list_budgets()

    def get_budget(self, budget_id: str) -> Budget:
        budget = self.budgets.get_budget(budget_id)
        if budget is None:
            raise BudgetNotFound(f"Budget {budget_id} not found")
        return budget

    def create_budget(self, category_id: str, limit: int) -> Budget:
        """
        Raises:
            InvalidBudgetLimit: limit is not positive
            CategoryNotFound: category does not exist
            InvalidCategory: category is not an expense category
            BudgetAlreadyExists: category already has a budget
        """
        validate_budget_limit(limit)
        self._require_expense_category(category_id)
        self._ensure_unique(category_id)

        now = self.clock.now()
        budget = self.budgets.create_budget(
            Budget(id=None, category_id=category_id, limit=limit, created_at=now, updated_at=now)
        )
        logging.info(
            "Budget created",
            extra={"user_id": self.store.user_id, "budget_id": budget.id, "category_id": category_id, "limit": limit},
        )
        return budget

    def update_budget(self, budget_id: str, limit: Optional[int] = None, category_id: Optional[str] = None) -> Budget:
        budget = self.get_budget(budget_id)

        if limit is not None:
            validate_budget_limit(limit)
            budget.limit = limit
        if category_id is not None and category_id != budget.category_id:
            self._require_expense_category(category_id)
            self._ensure_unique(category_id)
            budget.category_id = category_id

        budget.updated_at = self.clock.now()
        self.budgets.save_budget(budget)
        return budget

    def delete_budget(self, budget_id: str) -> None:
        self.get_budget(budget_id)
        self.budgets.delete_budget(budget_id)

    def overview(self, month: Optional[str] = None) -> BudgetOverview:
        """Usage of every budget in month (YYYY-MM), defaulting to the current month"""
        month = month or month_key(self.clock.today())
        parse_month(month)

        usage = usage_by_category(self.transactions.list_transactions(), month)
        overview = summarize_budgets(self.budgets.list_budgets(), usage, self.categories.names(), month)

        record_budget_statuses(overview.status_counts)
        return overview

    def _require_expense_category(self, category_id: str) -> Category:
        category = self.categories.get_category(category_id)
        if category is None:
            raise CategoryNotFound(f"Category {category_id} not found")
        if category.type != CategoryType.EXPENSE:
            raise InvalidCategory("Budgets can only be set on expense categories")
        return category

    def _ensure_unique(self, category_id: str) -> None:
        if any(b.category_id == category_id for b in self.budgets.list_budgets()):
            raise BudgetAlreadyExists(f"A budget for category {category_id} already exists")
