"""SQLAlchemy ORM models for cards, transactions, budgets and categories"""

import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Date, Integer, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def _new_id() -> str:
    return uuid.uuid4().hex


class CreditCardRecord(Base):
    """Credit card with its billing cycle parameters"""

    __tablename__ = "credit_card"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    closing_day = Column(Integer, nullable=False)
    due_day = Column(Integer, nullable=False)
    color = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class TransactionRecord(Base):
    """
    Income/expense record; one row per installment for credit purchases.

    No foreign key to credit_card: installments outlive a deleted card.
    """

    __tablename__ = "finance_transaction"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    amount_cents = Column(BigInteger, nullable=False)
    date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True, index=True)
    type = Column(String(16), nullable=False)
    payment_method = Column(String(16), nullable=False)
    credit_card_id = Column(String(32), nullable=True, index=True)
    installment_total = Column(Integer, nullable=True)
    installment_current = Column(Integer, nullable=True)
    parent_id = Column(String(32), nullable=True, index=True)
    category = Column(Text, nullable=True)
    expense_type = Column(String(16), nullable=True)
    is_paid = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class BudgetRecord(Base):
    """Monthly spending limit per category"""

    __tablename__ = "budget"
    __table_args__ = (UniqueConstraint("user_id", "category_id", "month", name="uq_budget_user_category_month"),)

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    category_id = Column(Text, nullable=False)
    month = Column(String(7), nullable=False)  # YYYY-MM
    amount_cents = Column(BigInteger, nullable=False)


class CategoryRecord(Base):
    """User-defined category, listed after the built-in ones"""

    __tablename__ = "category"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    type = Column(String(16), nullable=False)
    icon = Column(Text, nullable=False, default="")
    color = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
