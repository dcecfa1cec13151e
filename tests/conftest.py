"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from finance_gateway.api.main import create_app
from finance_gateway.infrastructure.database.models import Base
from finance_gateway.infrastructure.database.session import get_db
from finance_gateway.domain.models import Card, PaymentMethod, Transaction, TransactionType


# Test database: one shared in-memory connection per test
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
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
def nubank() -> Card:
    """Card whose invoice is due in the month after it closes"""
    return Card(id="c1", name="Nubank", closing_day=25, due_day=3, color="bg-purple-600")


@pytest.fixture
def bradesco() -> Card:
    """Card whose invoice is due in the same month it closes"""
    return Card(id="c2", name="Bradesco", closing_day=15, due_day=25, color="bg-red-600")


def _credit_purchase(
    id: str,
    card_id: str,
    purchase_date: date,
    due_date: date | None,
    amount: str,
    is_paid: bool = False,
    **kwargs,
) -> Transaction:
    return Transaction(
        id=id,
        description=f"Purchase {id}",
        amount=Decimal(amount),
        date=purchase_date,
        due_date=due_date,
        type=TransactionType.EXPENSE,
        payment_method=PaymentMethod.CREDIT,
        credit_card_id=card_id,
        is_paid=is_paid,
        **kwargs,
    )


def _settled(
    id: str,
    purchase_date: date,
    amount: str,
    type: TransactionType = TransactionType.EXPENSE,
    payment_method: PaymentMethod = PaymentMethod.DEBIT,
    category: str | None = None,
) -> Transaction:
    return Transaction(
        id=id,
        description=f"Transaction {id}",
        amount=Decimal(amount),
        date=purchase_date,
        type=type,
        payment_method=payment_method,
        category=category,
        is_paid=True,
    )


@pytest.fixture
def credit_purchase():
    """Factory for credit card expense transactions"""
    return _credit_purchase


@pytest.fixture
def settled():
    """Factory for immediately settled (non-credit) transactions"""
    return _settled


@pytest.fixture
def april_ledger() -> list[Transaction]:
    """
    Mixed ledger around April 2024.

    In April (by due date for credit, purchase date otherwise): t1, t2, t3, t4, t5.
    """
    return [
        _credit_purchase("t1", "c1", date(2024, 3, 10), date(2024, 4, 3), "50.00"),
        _credit_purchase("t2", "c1", date(2024, 3, 15), date(2024, 4, 3), "25.50", is_paid=True),
        _credit_purchase("t3", "c2", date(2024, 3, 20), date(2024, 4, 25), "100.00", is_paid=True),
        _settled("t4", date(2024, 4, 5), "5000.00", type=TransactionType.INCOME, payment_method=PaymentMethod.PIX),
        _settled("t5", date(2024, 4, 10), "30.00", payment_method=PaymentMethod.CASH),
        _credit_purchase("t6", "c1", date(2024, 4, 1), date(2024, 5, 3), "80.00"),
        _settled("t7", date(2024, 3, 31), "12.00"),
    ]
