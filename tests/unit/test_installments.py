"""Unit tests for installment plan generation"""

import pytest
from datetime import date
from decimal import Decimal
from finance_gateway.domain.installments import build_purchase, edit_transaction, split_installments, to_amount
from finance_gateway.domain.models import Card, ExpenseType, PaymentMethod, TransactionType
from finance_gateway.domain.exceptions import ValidationError


def test_split_installments_equal_split(nubank: Card):
    """Example: 300.00 in 3 -> 100.00 each, due Apr 3, May 3, Jun 3"""
    installments = split_installments(Decimal("300.00"), 3, date(2024, 3, 20), nubank)

    assert len(installments) == 3
    assert [inst.amount for inst in installments] == [Decimal("100.00")] * 3
    assert [inst.due_date for inst in installments] == [
        date(2024, 4, 3),
        date(2024, 5, 3),
        date(2024, 6, 3),
    ]


def test_split_installments_rounding_up_goes_to_first(nubank: Card):
    """First installment absorbs the remainder"""
    installments = split_installments(Decimal("100.00"), 3, date(2024, 3, 20), nubank)

    assert [inst.amount for inst in installments] == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sum(inst.amount for inst in installments) == Decimal("100.00")


def test_split_installments_negative_remainder(nubank: Card):
    """Base rounds up (66.67), so the first installment gives back the extra cent"""
    installments = split_installments(Decimal("200.00"), 3, date(2024, 3, 20), nubank)

    assert [inst.amount for inst in installments] == [Decimal("66.66"), Decimal("66.67"), Decimal("66.67")]
    assert sum(inst.amount for inst in installments) == Decimal("200.00")


@pytest.mark.parametrize("amount", ["0.01", "0.07", "1.00", "10.00", "99.99", "100.00", "333.33", "1234.56", "9999.99"])
def test_split_installments_sum_is_exact(nubank: Card, amount: str):
    total = Decimal(amount)
    for count in range(1, 13):
        if total < count * Decimal("0.01"):
            continue
        installments = split_installments(total, count, date(2024, 3, 20), nubank)
        assert len(installments) == count
        assert sum(inst.amount for inst in installments) == total
        assert all(inst.amount > 0 for inst in installments)


@pytest.mark.parametrize(
    "amount,count",
    [
        ("0.07", 10),  # fewer cents than installments
        ("0.01", 2),
        ("0.18", 12),  # base rounds up to 0.02, first installment would be -0.04
    ],
)
def test_split_installments_rejects_totals_too_small_to_split(nubank: Card, amount: str, count: int):
    with pytest.raises(ValidationError):
        split_installments(Decimal(amount), count, date(2024, 3, 20), nubank)


def test_split_installments_markers_and_shared_parent(nubank: Card):
    installments = split_installments(Decimal("120.00"), 4, date(2024, 3, 20), nubank, description="Phone")

    assert [inst.installment_current for inst in installments] == [1, 2, 3, 4]
    assert all(inst.installment_total == 4 for inst in installments)
    assert len({inst.parent_id for inst in installments}) == 1
    assert installments[0].parent_id is not None
    assert len({inst.id for inst in installments}) == 4
    assert all(inst.date == date(2024, 3, 20) for inst in installments)
    assert all(inst.is_paid is False for inst in installments)
    assert all(inst.credit_card_id == "c1" for inst in installments)
    assert all(inst.description == "Phone" for inst in installments)


def test_split_installments_dates_progress_monthly(nubank: Card):
    """Installment i is due exactly i months after the first"""
    installments = split_installments(Decimal("1200.00"), 12, date(2024, 5, 28), nubank)
    first = installments[0].due_date

    for i, inst in enumerate(installments):
        months = (inst.due_date.year - first.year) * 12 + inst.due_date.month - first.month
        assert months == i
        assert inst.due_date.day == first.day


def test_single_installment_has_no_markers(nubank: Card):
    """A one-shot purchase is not a '1 of 1' plan"""
    [purchase] = split_installments(Decimal("49.90"), 1, date(2024, 3, 20), nubank)

    assert purchase.installment_total is None
    assert purchase.installment_current is None
    assert purchase.parent_id is None
    assert purchase.due_date == date(2024, 4, 3)
    assert purchase.amount == Decimal("49.90")


def test_split_installments_uses_id_factory(nubank: Card):
    ids = iter(["parent", "a", "b"])
    installments = split_installments(Decimal("10.00"), 2, date(2024, 3, 20), nubank, id_factory=lambda: next(ids))

    assert [inst.id for inst in installments] == ["a", "b"]
    assert all(inst.parent_id == "parent" for inst in installments)


@pytest.mark.parametrize("amount,count", [("0", 2), ("-10.00", 2), ("10.00", 0), ("10.00", -1)])
def test_split_installments_rejects_invalid_input(nubank: Card, amount: str, count: int):
    with pytest.raises(ValidationError):
        split_installments(Decimal(amount), count, date(2024, 3, 20), nubank)


def test_to_amount_accepts_floats_and_strings():
    assert to_amount(0.1) == Decimal("0.10")
    assert to_amount("19.9") == Decimal("19.90")
    assert to_amount(5) == Decimal("5.00")


@pytest.mark.parametrize("value", ["10.005", "abc", "NaN"])
def test_to_amount_rejects_invalid_values(value: str):
    with pytest.raises(ValidationError):
        to_amount(value)


def test_build_purchase_credit_expense_is_split(nubank: Card):
    records = build_purchase(
        description="TV",
        amount="1000.00",
        purchase_date=date(2024, 3, 27),
        transaction_type=TransactionType.EXPENSE,
        payment_method=PaymentMethod.CREDIT,
        card=nubank,
        installments=10,
        category="10",
        expense_type=ExpenseType.VARIABLE,
    )

    assert len(records) == 10
    assert records[0].due_date == date(2024, 5, 3)
    assert all(r.category == "10" and r.expense_type == ExpenseType.VARIABLE for r in records)
    assert all(r.is_paid is False for r in records)


def test_build_purchase_credit_expense_requires_card():
    with pytest.raises(ValidationError):
        build_purchase(
            description="TV",
            amount="100.00",
            purchase_date=date(2024, 3, 27),
            transaction_type=TransactionType.EXPENSE,
            payment_method=PaymentMethod.CREDIT,
        )


@pytest.mark.parametrize("payment_method", [PaymentMethod.CASH, PaymentMethod.DEBIT, PaymentMethod.PIX])
def test_build_purchase_non_credit_is_settled(payment_method: PaymentMethod, nubank: Card):
    """Cash, debit and PIX are paid on the spot and never split"""
    [record] = build_purchase(
        description="Lunch",
        amount="35.00",
        purchase_date=date(2024, 3, 20),
        transaction_type=TransactionType.EXPENSE,
        payment_method=payment_method,
        card=nubank,
        installments=3,
    )

    assert record.is_paid is True
    assert record.due_date is None
    assert record.credit_card_id is None
    assert record.installment_total is None
    assert record.amount == Decimal("35.00")


def test_build_purchase_income_is_settled():
    [record] = build_purchase(
        description="Salary",
        amount="5000.00",
        purchase_date=date(2024, 4, 5),
        transaction_type=TransactionType.INCOME,
        payment_method=PaymentMethod.CREDIT,
        expense_type=ExpenseType.FIXED,
    )

    assert record.is_paid is True
    assert record.type == TransactionType.INCOME
    assert record.due_date is None
    assert record.expense_type is None


def test_build_purchase_rejects_non_positive_amount():
    with pytest.raises(ValidationError):
        build_purchase(
            description="Nothing",
            amount="0.00",
            purchase_date=date(2024, 3, 20),
            transaction_type=TransactionType.EXPENSE,
            payment_method=PaymentMethod.CASH,
        )


def test_edit_transaction_moving_card_resolves_due_date_with_offset(nubank: Card, bradesco: Card):
    """Second installment moved to a card closing on the 15th, due on the 25th"""
    second = split_installments(Decimal("300.00"), 3, date(2024, 3, 20), nubank)[1]
    assert second.due_date == date(2024, 5, 3)

    edited = edit_transaction(second, card=bradesco)

    assert edited.credit_card_id == "c2"
    assert edited.due_date == date(2024, 5, 25)
    assert edited.installment_current == 2
    assert second.credit_card_id == "c1"


def test_edit_transaction_moving_date_past_closing(nubank: Card):
    [single] = split_installments(Decimal("50.00"), 1, date(2024, 3, 20), nubank)

    edited = edit_transaction(single, card=nubank, purchase_date=date(2024, 3, 27))

    assert edited.date == date(2024, 3, 27)
    assert edited.due_date == date(2024, 5, 3)


def test_edit_transaction_keeps_due_date_when_billing_fields_unchanged(nubank: Card):
    first = split_installments(Decimal("300.00"), 3, date(2024, 3, 20), nubank)[0]

    edited = edit_transaction(first, description="Headphones", amount="120.00", category="10")

    assert edited.description == "Headphones"
    assert edited.amount == Decimal("120.00")
    assert edited.category == "10"
    assert edited.due_date == first.due_date


def test_edit_transaction_date_change_needs_card(nubank: Card):
    first = split_installments(Decimal("300.00"), 3, date(2024, 3, 20), nubank)[0]

    with pytest.raises(ValidationError):
        edit_transaction(first, purchase_date=date(2024, 3, 27))


def test_edit_settled_transaction(nubank: Card):
    [record] = build_purchase(
        description="Lunch",
        amount="35.00",
        purchase_date=date(2024, 3, 20),
        transaction_type=TransactionType.EXPENSE,
        payment_method=PaymentMethod.DEBIT,
    )

    edited = edit_transaction(record, purchase_date=date(2024, 4, 2))
    assert edited.date == date(2024, 4, 2)
    assert edited.due_date is None

    with pytest.raises(ValidationError):
        edit_transaction(record, card=nubank)
    with pytest.raises(ValidationError):
        edit_transaction(record, amount="0.00")
