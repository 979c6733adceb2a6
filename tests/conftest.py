"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from office_ledger.api.main import create_app
from office_ledger.domain.engine import LedgerEngine
from office_ledger.infrastructure.database.models import Base
from office_ledger.infrastructure.database.repositories import ChargeRepository, LedgerRepository, PayableRepository
from office_ledger.infrastructure.database.session import get_db
from office_ledger.infrastructure.database.unit_of_work import SqlAlchemyTransaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
def ledger_engine(db: Session) -> LedgerEngine:
    """Ledger engine over the test session"""
    return LedgerEngine(
        charges=ChargeRepository(db),
        ledger=LedgerRepository(db),
        payables=PayableRepository(db),
        transaction=SqlAlchemyTransaction(db),
    )


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def sale_day() -> date:
    """Fixed creation date so schedules are deterministic"""
    return date(2024, 1, 31)
