"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timezone
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from pocket_ledger.api.dependencies import get_clock
from pocket_ledger.api.main import create_app
from pocket_ledger.infrastructure.database.documents import DocumentStore
from pocket_ledger.infrastructure.database.models import Base
from pocket_ledger.infrastructure.database.session import get_db
from pocket_ledger.services.loans import LoanService, LoanTerms
from pocket_ledger.utils.clock import FixedClock


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 2024-03-10: January and February installments due on the 25th are overdue
TODAY = datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def store(db: Session) -> DocumentStore:
    return DocumentStore(db, "user_1")


@pytest.fixture
def loan_service(store: DocumentStore, clock: FixedClock) -> LoanService:
    return LoanService(store, clock)


@pytest.fixture
def yearly_loan_terms() -> LoanTerms:
    """12_000_000 at 0% over 12 months from 2024-01-01, due on the 25th"""
    return LoanTerms(
        name="Motorbike",
        principal=12_000_000,
        term_months=12,
        start_date=date(2024, 1, 1),
        due_day=25,
        lender="Bank Mandiri",
        account_number="1234567890",
    )


@pytest.fixture
def client(db: Session, clock: FixedClock) -> TestClient:
    """Create FastAPI test client with test database and a pinned clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    return TestClient(app)
