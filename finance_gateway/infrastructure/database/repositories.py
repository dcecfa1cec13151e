"""Data access layer for cards, transactions, budgets and categories"""

from decimal import Decimal
from typing import Iterable, List, Optional, Sequence
from sqlalchemy.orm import Session
from finance_gateway.infrastructure.database.models import BudgetRecord, CategoryRecord, CreditCardRecord, TransactionRecord
from finance_gateway.domain.models import (
    BatchResult,
    Budget,
    Card,
    Category,
    ExpenseType,
    PaymentMethod,
    Transaction,
    TransactionType,
)
from finance_gateway.domain.exceptions import CardNotFoundError, CategoryNotFoundError, TransactionNotFoundError
from finance_gateway.utils.date_utils import to_calendar_date

CENT = Decimal("0.01")


def to_cents(amount: Decimal) -> int:
    return int(amount.quantize(CENT) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def card_from_record(record: CreditCardRecord) -> Card:
    return Card(
        id=record.id,
        name=record.name,
        closing_day=record.closing_day,
        due_day=record.due_day,
        color=record.color or "",
    )


def transaction_from_record(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=record.id,
        description=record.description,
        amount=from_cents(record.amount_cents),
        date=to_calendar_date(record.date),
        due_date=to_calendar_date(record.due_date) if record.due_date else None,
        type=TransactionType(record.type),
        payment_method=PaymentMethod(record.payment_method),
        credit_card_id=record.credit_card_id,
        installment_total=record.installment_total,
        installment_current=record.installment_current,
        parent_id=record.parent_id,
        category=record.category,
        expense_type=ExpenseType(record.expense_type) if record.expense_type else None,
        is_paid=record.is_paid,
    )


class CardRepository:
    """Repository for credit cards"""

    def __init__(self, db: Session):
        self.db = db

    def create_card(self, user_id: str, card: Card) -> Card:
        db_card = CreditCardRecord(
            user_id=user_id,
            name=card.name,
            closing_day=card.closing_day,
            due_day=card.due_day,
            color=card.color,
        )
        self.db.add(db_card)
        self.db.flush()  # Get ID without committing
        return card_from_record(db_card)

    def get_cards_by_user(self, user_id: str) -> List[Card]:
        records = (
            self.db.query(CreditCardRecord)
            .filter(CreditCardRecord.user_id == user_id)
            .order_by(CreditCardRecord.created_at, CreditCardRecord.id)
            .all()
        )
        return [card_from_record(r) for r in records]

    def get_card(self, user_id: str, card_id: str) -> Optional[Card]:
        record = self._get_record(user_id, card_id)
        return card_from_record(record) if record else None

    def update_card(self, user_id: str, card: Card) -> Card:
        """
        Raises:
            CardNotFoundError: card does not belong to the user
        """
        record = self._get_record(user_id, card.id)
        if record is None:
            raise CardNotFoundError(f"Card {card.id} not found")

        record.name = card.name
        record.closing_day = card.closing_day
        record.due_day = card.due_day
        record.color = card.color
        self.db.flush()
        return card_from_record(record)

    def delete_card(self, user_id: str, card_id: str) -> bool:
        """Delete a card; its transactions stay and show under a placeholder"""
        record = self._get_record(user_id, card_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.flush()
        return True

    def _get_record(self, user_id: str, card_id: str) -> Optional[CreditCardRecord]:
        return (
            self.db.query(CreditCardRecord)
            .filter(CreditCardRecord.user_id == user_id, CreditCardRecord.id == card_id)
            .first()
        )


class TransactionRepository:
    """Repository for transactions and installments"""

    def __init__(self, db: Session):
        self.db = db

    def create_transactions(self, user_id: str, transactions: Iterable[Transaction]) -> List[Transaction]:
        """Persist newly built transactions (all installments of a purchase at once)"""
        records = []
        for t in transactions:
            record = TransactionRecord(
                id=t.id,
                user_id=user_id,
                description=t.description,
                amount_cents=to_cents(t.amount),
                date=t.date,
                due_date=t.due_date,
                type=t.type.value,
                payment_method=t.payment_method.value,
                credit_card_id=t.credit_card_id,
                installment_total=t.installment_total,
                installment_current=t.installment_current,
                parent_id=t.parent_id,
                category=t.category,
                expense_type=t.expense_type.value if t.expense_type else None,
                is_paid=t.is_paid,
            )
            self.db.add(record)
            records.append(record)

        self.db.flush()
        return [transaction_from_record(r) for r in records]

    def get_transactions_by_user(self, user_id: str) -> List[Transaction]:
        records = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id)
            .order_by(TransactionRecord.date, TransactionRecord.installment_current, TransactionRecord.id)
            .all()
        )
        return [transaction_from_record(r) for r in records]

    def get_transaction(self, user_id: str, transaction_id: str) -> Transaction:
        """
        Raises:
            TransactionNotFoundError: no such transaction for the user
        """
        record = self._get_record(user_id, transaction_id)
        if record is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        return transaction_from_record(record)

    def set_paid(self, user_id: str, transaction_id: str, is_paid: bool) -> Transaction:
        record = self._get_record(user_id, transaction_id)
        if record is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        record.is_paid = is_paid
        self.db.flush()
        return transaction_from_record(record)

    def apply_updates(
        self,
        user_id: str,
        updates: Iterable[Transaction],
        fields: Sequence[str],
    ) -> BatchResult:
        """
        Write the given fields of each updated transaction back to its row.

        Rows that disappeared since the transactions were read are reported
        in failed_ids instead of aborting the batch. Re-running the same
        computation converges because the domain operations are idempotent.
        """
        result = BatchResult()
        for t in updates:
            record = self._get_record(user_id, t.id)
            if record is None:
                result.failed_ids.append(t.id)
                continue
            for name in fields:
                setattr(record, name, getattr(t, name))
            result.updated_ids.append(t.id)

        self.db.flush()
        return result

    def update_transaction(self, user_id: str, transaction: Transaction) -> Transaction:
        """
        Write back the user-editable fields of an edited transaction.

        Raises:
            TransactionNotFoundError: no such transaction for the user
        """
        record = self._get_record(user_id, transaction.id)
        if record is None:
            raise TransactionNotFoundError(f"Transaction {transaction.id} not found")

        record.description = transaction.description
        record.amount_cents = to_cents(transaction.amount)
        record.date = transaction.date
        record.due_date = transaction.due_date
        record.credit_card_id = transaction.credit_card_id
        record.category = transaction.category
        self.db.flush()
        return transaction_from_record(record)

    def delete_transaction(self, user_id: str, transaction_id: str) -> bool:
        record = self._get_record(user_id, transaction_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.flush()
        return True

    def _get_record(self, user_id: str, transaction_id: str) -> Optional[TransactionRecord]:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id, TransactionRecord.id == transaction_id)
            .first()
        )


class BudgetRepository:
    """Repository for monthly category budgets"""

    def __init__(self, db: Session):
        self.db = db

    def upsert_budget(self, user_id: str, budget: Budget) -> Budget:
        record = (
            self.db.query(BudgetRecord)
            .filter(
                BudgetRecord.user_id == user_id,
                BudgetRecord.category_id == budget.category_id,
                BudgetRecord.month == budget.month,
            )
            .first()
        )
        if record is None:
            record = BudgetRecord(user_id=user_id, category_id=budget.category_id, month=budget.month)
            self.db.add(record)
        record.amount_cents = to_cents(budget.amount)
        self.db.flush()
        return Budget(category_id=record.category_id, amount=from_cents(record.amount_cents), month=record.month)

    def get_budgets_by_user(self, user_id: str, month: Optional[str] = None) -> List[Budget]:
        query = self.db.query(BudgetRecord).filter(BudgetRecord.user_id == user_id)
        if month is not None:
            query = query.filter(BudgetRecord.month == month)
        return [
            Budget(category_id=r.category_id, amount=from_cents(r.amount_cents), month=r.month)
            for r in query.order_by(BudgetRecord.month, BudgetRecord.category_id).all()
        ]


def category_from_record(record: CategoryRecord) -> Category:
    return Category(
        id=record.id,
        name=record.name,
        type=record.type,
        icon=record.icon or "",
        color=record.color or "",
    )


class CategoryRepository:
    """Repository for user-defined categories"""

    def __init__(self, db: Session):
        self.db = db

    def create_category(self, user_id: str, category: Category) -> Category:
        record = CategoryRecord(
            user_id=user_id,
            name=category.name,
            type=category.type,
            icon=category.icon,
            color=category.color,
        )
        self.db.add(record)
        self.db.flush()
        return category_from_record(record)

    def get_categories_by_user(self, user_id: str) -> List[Category]:
        records = (
            self.db.query(CategoryRecord)
            .filter(CategoryRecord.user_id == user_id)
            .order_by(CategoryRecord.created_at, CategoryRecord.id)
            .all()
        )
        return [category_from_record(r) for r in records]

    def update_category(self, user_id: str, category: Category) -> Category:
        """
        Raises:
            CategoryNotFoundError: category does not belong to the user
        """
        record = self._get_record(user_id, category.id)
        if record is None:
            raise CategoryNotFoundError(f"Category {category.id} not found")

        record.name = category.name
        record.type = category.type
        record.icon = category.icon
        record.color = category.color
        self.db.flush()
        return category_from_record(record)

    def delete_category(self, user_id: str, category_id: str) -> bool:
        """Delete a category; transactions and budgets keep its id"""
        record = self._get_record(user_id, category_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.flush()
        return True

    def _get_record(self, user_id: str, category_id: str) -> Optional[CategoryRecord]:
        return (
            self.db.query(CategoryRecord)
            .filter(CategoryRecord.user_id == user_id, CategoryRecord.id == category_id)
            .first()
        )
