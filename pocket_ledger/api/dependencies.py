"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from pocket_ledger.infrastructure.database.documents import ChangeFeed, DocumentStore
from pocket_ledger.infrastructure.database.session import get_db
from pocket_ledger.services.budgets import BudgetService
from pocket_ledger.services.health import HealthService
from pocket_ledger.services.ledger import LedgerService
from pocket_ledger.services.loans import LoanService
from pocket_ledger.utils.clock import Clock, SystemClock

# Shared by every request so subscribers see writes from any endpoint
change_feed = ChangeFeed()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_user_id(x_user_id: str = Header(..., alias="X-User-ID", min_length=1)) -> str:
    """Caller identity; every document read or written is scoped to it"""
    return x_user_id


def get_clock() -> Clock:
    return SystemClock()


def get_change_feed() -> ChangeFeed:
    return change_feed


def get_store(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
    feed: ChangeFeed = Depends(get_change_feed),
) -> DocumentStore:
    return DocumentStore(db, user_id, feed)


def get_loan_service(store: DocumentStore = Depends(get_store), clock: Clock = Depends(get_clock)) -> LoanService:
    return LoanService(store, clock)


def get_budget_service(store: DocumentStore = Depends(get_store), clock: Clock = Depends(get_clock)) -> BudgetService:
    return BudgetService(store, clock)


def get_ledger_service(store: DocumentStore = Depends(get_store), clock: Clock = Depends(get_clock)) -> LedgerService:
    return LedgerService(store, clock)


def get_health_service(store: DocumentStore = Depends(get_store), clock: Clock = Depends(get_clock)) -> HealthService:
    return HealthService(store, clock)
