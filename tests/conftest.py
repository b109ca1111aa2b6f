"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from discount_gateway.api.main import create_app
from discount_gateway.api.dependencies import get_today
from discount_gateway.infrastructure.database.models import Base
from discount_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed business date for every API test
TODAY = date(2025, 3, 1)


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
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a pinned today"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    return TestClient(app)


@pytest.fixture
def sample_csv() -> bytes:
    """
    Invoices dated relative to TODAY (2025-03-01):
    - INV-1: 2/10 net 30, deadline 2025-03-06, 5% investment rate → TAKE
    - INV-2: 2/10 net 30, deadline 2025-03-06, 20% borrowing rate → BORROW
    - INV-3: 1/10 net 45, deadline 2025-02-20 (passed) → HOLD
    - INV-4: n/30, no rate → HOLD
    - INV-5: malformed terms → skipped
    - INV-6: inconsistent discount terms → skipped
    - INV-7: negative rate → skipped
    """
    return (
        "vendor,invoice_number,amount,invoice_date,due_date,terms,currency,user_rate,rate_type\n"
        "Acme,INV-1,10000,2025-02-24,2025-03-26,2/10 net 30,USD,5,INVESTMENT\n"
        "Acme,INV-2,10000,2025-02-24,2025-03-26,2/10 net 30,USD,20,BORROWING\n"
        "Globex,INV-3,5000,2025-02-10,2025-03-27,1/10 net 45,,,\n"
        "Initech,INV-4,2500.50,2025-02-20,2025-03-22,n/30,,,\n"
        "Initech,INV-5,100,2025-02-20,2025-03-22,due on receipt,,,\n"
        "Umbrella,INV-6,100,2025-02-20,2025-03-22,5/30 net 10,,,\n"
        "Umbrella,INV-7,100,2025-02-20,2025-03-22,2/10 net 30,,-1,INVESTMENT\n"
    ).encode()
