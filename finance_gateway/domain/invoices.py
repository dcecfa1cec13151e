"""Invoice aggregation engine - folds credit card transactions into derived invoices"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from finance_gateway.domain.models import (
    Card,
    DisplayItem,
    Invoice,
    InvoiceKey,
    Period,
    Transaction,
)
from finance_gateway.domain.billing import resolve_due_date
from finance_gateway.domain.exceptions import InvoiceNotFoundError

logger = logging.getLogger(__name__)

REMOVED_CARD_LABEL = "Removed card"


def is_invoice_member(transaction: Transaction) -> bool:
    """Credit expense with both a card and a due date - eligible for aggregation"""
    return (
        transaction.is_credit_expense
        and bool(transaction.credit_card_id)
        and transaction.due_date is not None
    )


def find_missing_due_dates(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Credit expenses tied to a card but lacking a due date (data-integrity signal)"""
    return [
        t for t in transactions
        if t.is_credit_expense and t.credit_card_id and t.due_date is None
    ]


def period_date(transaction: Transaction) -> date:
    """Date that decides period membership: due date for credit expenses, purchase date otherwise"""
    if transaction.is_credit_expense and transaction.due_date is not None:
        return transaction.due_date
    return transaction.date


def effective_date(item: DisplayItem) -> date:
    """Sort date of a display item: due date for invoices, purchase date for transactions"""
    if isinstance(item, Invoice):
        return item.due_date
    return item.date


def filter_period(transactions: Iterable[Transaction], period: Period) -> List[Transaction]:
    return [t for t in transactions if period.contains(period_date(t))]


def partition(transactions: Iterable[Transaction]) -> Tuple[List[Transaction], List[Transaction]]:
    """Split into (credit group, passthrough group)"""
    credit_group: List[Transaction] = []
    passthrough_group: List[Transaction] = []
    for t in transactions:
        if is_invoice_member(t):
            credit_group.append(t)
        else:
            if t.is_credit_expense and t.credit_card_id:
                logger.warning(
                    "Credit transaction without due date listed raw",
                    extra={"transaction_id": t.id, "card_id": t.credit_card_id},
                )
            passthrough_group.append(t)
    return credit_group, passthrough_group


def build_invoices(
    credit_group: Iterable[Transaction],
    cards: Iterable[Card],
    removed_card_label: str = REMOVED_CARD_LABEL,
) -> List[Invoice]:
    """
    Group credit transactions by (card, due date).

    Invoices come back in order of first appearance. A card that no longer
    exists is shown under removed_card_label.
    """
    cards_by_id: Dict[str, Card] = {c.id: c for c in cards}
    invoices: Dict[InvoiceKey, Invoice] = {}

    for t in credit_group:
        key = InvoiceKey(t.credit_card_id, t.due_date)
        invoice = invoices.get(key)
        if invoice is None:
            card = cards_by_id.get(t.credit_card_id)
            invoice = Invoice(
                card_id=key.card_id,
                due_date=key.due_date,
                card_name=card.name if card else removed_card_label,
                card_color=card.color if card else "",
            )
            invoices[key] = invoice

        invoice.amount += t.amount
        invoice.count += 1
        invoice.transaction_ids.append(t.id)
        # Paid only while every member is paid
        if invoice.is_paid and not t.is_paid:
            invoice.is_paid = False

    return list(invoices.values())


def aggregate(
    transactions: Iterable[Transaction],
    cards: Iterable[Card],
    period: Period,
    removed_card_label: str = REMOVED_CARD_LABEL,
) -> List[DisplayItem]:
    """
    Build the display list for a period.

    Flow:
    1. Keep transactions in the period (credit expenses by due date, others by purchase date)
    2. Fold credit expenses with a card and due date into invoices
    3. Merge invoices with the remaining transactions
    4. Sort by effective date, most recent first (stable for ties)

    Returns:
        Invoices and plain transactions; every in-period transaction appears
        exactly once, either directly or inside one invoice.
    """
    in_period = filter_period(transactions, period)
    credit_group, passthrough_group = partition(in_period)

    items: List[DisplayItem] = [
        *build_invoices(credit_group, cards, removed_card_label),
        *passthrough_group,
    ]
    return sorted(items, key=effective_date, reverse=True)


def invoice_members(transactions: Iterable[Transaction], key: InvoiceKey) -> List[Transaction]:
    return [
        t for t in transactions
        if is_invoice_member(t) and t.credit_card_id == key.card_id and t.due_date == key.due_date
    ]


def set_invoice_paid(
    transactions: Iterable[Transaction],
    key: InvoiceKey,
    is_paid: bool,
) -> List[Transaction]:
    """
    Return copies of every member of an invoice with is_paid overwritten.

    The input is not modified; the caller persists the returned records.
    """
    return [replace(t, is_paid=is_paid) for t in invoice_members(transactions, key)]


def toggle_invoice_paid(
    transactions: Iterable[Transaction],
    key: InvoiceKey,
) -> Tuple[bool, List[Transaction]]:
    """
    Normalize an invoice to fully paid or fully unpaid.

    A fully paid invoice becomes unpaid; a partially paid or unpaid one
    becomes fully paid.

    Returns: (new_paid_state, updated member copies)

    Raises:
        InvoiceNotFoundError: no transactions match the key
    """
    members = invoice_members(transactions, key)
    if not members:
        raise InvoiceNotFoundError(
            f"No invoice for card {key.card_id} due {key.due_date.isoformat()}"
        )

    new_state = not all(t.is_paid for t in members)
    return new_state, [replace(t, is_paid=new_state) for t in members]


def recalculate_due_dates(
    transactions: Iterable[Transaction],
    cards: Iterable[Card],
) -> List[Transaction]:
    """
    Recompute due dates of credit expenses after card parameters change.

    Each installment keeps its offset (installment_current - 1). Only
    transactions whose due date actually changes are returned, so running
    this twice with the same cards yields nothing the second time.
    Transactions whose card no longer exists are left untouched.
    """
    cards_by_id: Dict[str, Card] = {c.id: c for c in cards}
    changed: List[Transaction] = []

    for t in transactions:
        if not (t.is_credit_expense and t.credit_card_id):
            continue

        card: Optional[Card] = cards_by_id.get(t.credit_card_id)
        if card is None:
            logger.warning(
                "Skipping due date recalculation for removed card",
                extra={"transaction_id": t.id, "card_id": t.credit_card_id},
            )
            continue

        offset = (t.installment_current or 1) - 1
        due_date = resolve_due_date(t.date, card, offset)
        if due_date != t.due_date:
            changed.append(replace(t, due_date=due_date))

    return changed


def invoice_total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), Decimal("0.00"))
