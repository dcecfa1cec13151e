"""Credit card billing cycle rules - maps purchase dates to invoice due dates"""

from datetime import date
from finance_gateway.domain.models import Card
from finance_gateway.domain.exceptions import ValidationError
from finance_gateway.utils.date_utils import clamp_day, shift_month


def validate_card(card: Card) -> Card:
    """
    Check card billing parameters before the card is saved.

    Raises:
        ValidationError: closing_day or due_day outside 1..31, or empty name
    """
    if not card.name or not card.name.strip():
        raise ValidationError("Card name is required")
    for label, day in (("closing_day", card.closing_day), ("due_day", card.due_day)):
        if isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= 31:
            raise ValidationError(f"{label} must be an integer between 1 and 31, got {day!r}")
    return card


def billing_cycle_month(purchase_date: date, closing_day: int) -> tuple[int, int]:
    """
    Return the (year, month) in which the purchase's billing cycle closes.

    A purchase on the closing day or later belongs to the next cycle.
    """
    if purchase_date.day >= closing_day:
        return shift_month(purchase_date.year, purchase_date.month, 1)
    return purchase_date.year, purchase_date.month


def resolve_due_date(purchase_date: date, card: Card, installment_offset: int = 0) -> date:
    """
    Compute the invoice due date for a purchase (or one of its installments).

    The invoice is due on the first due_day after its cycle closes: when
    due_day <= closing_day the payment falls in the month after closing.
    Each installment is due exactly one calendar month after the previous one.

    Args:
        purchase_date: Calendar date of the purchase
        card: Card providing closing_day and due_day
        installment_offset: 0 for the first/only installment, i for the (i+1)th

    Returns:
        Due date in the target month, with due_day clamped to the month
        length (due_day 31 resolves to Feb 29 in 2024).

    Example:
        closing 25, due 3: 2024-03-20 -> 2024-04-03, 2024-03-25 -> 2024-05-03
        closing 15, due 25: 2024-03-10 -> 2024-03-25, 2024-03-15 -> 2024-04-25
    """
    if installment_offset < 0:
        raise ValidationError(f"installment_offset must be non-negative, got {installment_offset}")

    year, month = billing_cycle_month(purchase_date, card.closing_day)
    if card.due_day <= card.closing_day:
        installment_offset += 1
    year, month = shift_month(year, month, installment_offset)
    return clamp_day(year, month, card.due_day)
