"""Installment plan generation for credit card purchases"""

import uuid
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Callable, List, Optional
from finance_gateway.domain.models import (
    Card,
    ExpenseType,
    PaymentMethod,
    Transaction,
    TransactionType,
)
from finance_gateway.domain.billing import resolve_due_date
from finance_gateway.domain.exceptions import ValidationError

CENT = Decimal("0.01")


def new_id() -> str:
    return uuid.uuid4().hex


def to_amount(value: Decimal | int | float | str) -> Decimal:
    """
    Convert a monetary value to a Decimal with cent precision.

    Floats go through str() so 0.1 stays 0.10 rather than 0.1000000000000000055.

    Raises:
        ValidationError: value is not numeric or carries fractions of a cent
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Invalid amount: {value!r}") from e

    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    if amount != amount.quantize(CENT):
        raise ValidationError(f"Amount must have at most 2 decimal places, got {value!r}")
    return amount.quantize(CENT)


def split_installments(
    total_amount: Decimal | int | float | str,
    installment_count: int,
    purchase_date: date,
    card: Card,
    description: str = "",
    category: Optional[str] = None,
    expense_type: Optional[ExpenseType] = None,
    id_factory: Callable[[], str] = new_id,
) -> List[Transaction]:
    """
    Split a credit purchase into monthly installment transactions.

    Requirements:
    - Base amount is total / count rounded to cents
    - First installment absorbs the rounding remainder (sum is exact)
    - Installment i is due on the invoice i months after the first one
    - A single installment carries no installment markers or parent_id

    Example:
        100.00 in 3 -> [33.34, 33.33, 33.33]
        200.00 in 3 -> [66.66, 66.67, 66.67]

    Raises:
        ValidationError: non-positive total, bad count, or a total too small
            for every installment to be positive
    """
    total = to_amount(total_amount)
    if total <= 0:
        raise ValidationError(f"Purchase amount must be positive, got {total}")
    if isinstance(installment_count, bool) or not isinstance(installment_count, int) or installment_count < 1:
        raise ValidationError(f"Installment count must be at least 1, got {installment_count!r}")

    if total < CENT * installment_count:
        raise ValidationError(f"{total} cannot be split into {installment_count} installments of at least {CENT}")

    base_amount = (total / installment_count).quantize(CENT, rounding=ROUND_HALF_UP)
    remainder = total - base_amount * installment_count
    if base_amount + remainder <= 0:
        # e.g. 0.18 in 12: base rounds up to 0.02 and overshoots the total
        raise ValidationError(f"{total} is too small to split into {installment_count} installments")

    is_plan = installment_count > 1
    parent_id = id_factory() if is_plan else None

    installments = []
    for i in range(installment_count):
        amount = base_amount + (remainder if i == 0 else Decimal("0"))

        installments.append(
            Transaction(
                id=id_factory(),
                description=description,
                amount=amount,
                date=purchase_date,
                due_date=resolve_due_date(purchase_date, card, i),
                type=TransactionType.EXPENSE,
                payment_method=PaymentMethod.CREDIT,
                credit_card_id=card.id,
                installment_total=installment_count if is_plan else None,
                installment_current=i + 1 if is_plan else None,
                parent_id=parent_id,
                category=category,
                expense_type=expense_type,
                is_paid=False,
            )
        )

    return installments


def build_purchase(
    description: str,
    amount: Decimal | int | float | str,
    purchase_date: date,
    transaction_type: TransactionType,
    payment_method: PaymentMethod,
    card: Optional[Card] = None,
    installments: int = 1,
    category: Optional[str] = None,
    expense_type: Optional[ExpenseType] = None,
    id_factory: Callable[[], str] = new_id,
) -> List[Transaction]:
    """
    Build the records for a newly submitted transaction.

    Credit card expenses are split into installments and start unpaid.
    Everything else (income, cash, debit, PIX) is a single record settled
    immediately; the installment count is ignored.

    Raises:
        ValidationError: non-positive amount, or a credit expense without a card
    """
    if transaction_type == TransactionType.INCOME:
        expense_type = None

    if payment_method == PaymentMethod.CREDIT and transaction_type == TransactionType.EXPENSE:
        if card is None:
            raise ValidationError("Credit card expenses require a card")
        return split_installments(
            amount,
            installments,
            purchase_date,
            card,
            description=description,
            category=category,
            expense_type=expense_type,
            id_factory=id_factory,
        )

    total = to_amount(amount)
    if total <= 0:
        raise ValidationError(f"Transaction amount must be positive, got {total}")

    return [
        Transaction(
            id=id_factory(),
            description=description,
            amount=total,
            date=purchase_date,
            type=transaction_type,
            payment_method=payment_method,
            category=category,
            expense_type=expense_type,
            is_paid=True,
        )
    ]


def edit_transaction(
    transaction: Transaction,
    card: Optional[Card] = None,
    description: Optional[str] = None,
    amount: Decimal | int | float | str | None = None,
    purchase_date: Optional[date] = None,
    category: Optional[str] = None,
) -> Transaction:
    """
    Return a copy of the transaction with the given fields changed.

    Fields left as None keep their value. When a credit expense moves to
    another date or card, its due date is resolved again with offset
    installment_current - 1, so an installment stays on its own invoice
    relative to the purchase.

    Raises:
        ValidationError: non-positive amount, a card on a non-credit
            record, or a due date to resolve without a card
    """
    changes = {}
    if description is not None:
        changes["description"] = description
    if category is not None:
        changes["category"] = category
    if amount is not None:
        total = to_amount(amount)
        if total <= 0:
            raise ValidationError(f"Transaction amount must be positive, got {total}")
        changes["amount"] = total
    if purchase_date is not None:
        changes["date"] = purchase_date

    if not transaction.is_credit_expense:
        if card is not None:
            raise ValidationError("Only credit card expenses can be assigned to a card")
        return replace(transaction, **changes)

    card_changed = card is not None and card.id != transaction.credit_card_id
    date_changed = purchase_date is not None and purchase_date != transaction.date
    if card_changed or date_changed:
        if card is None:
            raise ValidationError("A card is required to resolve the new due date")
        offset = (transaction.installment_current or 1) - 1
        changes["credit_card_id"] = card.id
        changes["due_date"] = resolve_due_date(changes.get("date", transaction.date), card, offset)

    return replace(transaction, **changes)
