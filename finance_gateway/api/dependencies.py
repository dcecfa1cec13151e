"""Dependency injection for FastAPI endpoints"""

from typing import List, Tuple
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from finance_gateway.domain.models import Card, Transaction
from finance_gateway.infrastructure.database.session import get_db
from finance_gateway.infrastructure.database.repositories import (
    BudgetRepository,
    CardRepository,
    CategoryRepository,
    TransactionRepository,
)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_card_repository(db: Session = Depends(get_db)) -> CardRepository:
    return CardRepository(db)


def get_transaction_repository(db: Session = Depends(get_db)) -> TransactionRepository:
    return TransactionRepository(db)


def get_budget_repository(db: Session = Depends(get_db)) -> BudgetRepository:
    return BudgetRepository(db)


def get_category_repository(db: Session = Depends(get_db)) -> CategoryRepository:
    return CategoryRepository(db)


def load_ledger(
    user_id: str,
    card_repo: CardRepository,
    transaction_repo: TransactionRepository,
) -> Tuple[List[Transaction], List[Card]]:
    """Fetch everything the billing engine needs for one user"""
    return transaction_repo.get_transactions_by_user(user_id), card_repo.get_cards_by_user(user_id)
