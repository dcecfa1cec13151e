"""Unit tests for budget analysis and period reports"""

import pytest
from datetime import date
from decimal import Decimal
from finance_gateway.domain.budgets import DEFAULT_CATEGORIES, analyze_budgets, merge_categories, validate_budget, validate_category
from finance_gateway.domain.reports import summarize_display, summarize_period
from finance_gateway.domain.invoices import aggregate
from finance_gateway.domain.models import Budget, Category, Period, PaymentMethod, TransactionType
from finance_gateway.domain.exceptions import ValidationError


def test_analyze_budgets_spent_vs_budget(settled):
    transactions = [
        settled("a", date(2024, 4, 2), "120.00", category="7"),
        settled("b", date(2024, 4, 20), "30.00", category="7"),
        settled("c", date(2024, 3, 30), "500.00", category="7"),  # previous month
        settled("d", date(2024, 4, 5), "80.00", category="2"),
        settled("e", date(2024, 4, 5), "5000.00", type=TransactionType.INCOME, payment_method=PaymentMethod.PIX, category="15"),
    ]
    budgets = [
        Budget(category_id="7", amount=Decimal("400.00"), month="2024-04"),
        Budget(category_id="6", amount=Decimal("1500.00"), month="2024-04"),
        Budget(category_id="7", amount=Decimal("999.00"), month="2024-05"),
    ]

    lines = {line.category_id: line for line in analyze_budgets(transactions, budgets, 2024, 4)}

    assert set(lines) == {"2", "6", "7"}
    assert lines["7"].spent == Decimal("150.00")
    assert lines["7"].budget == Decimal("400.00")
    assert lines["7"].remaining == Decimal("250.00")
    assert lines["6"].spent == Decimal("0.00")
    assert lines["6"].remaining == Decimal("1500.00")
    assert lines["2"].budget == Decimal("0.00")
    assert lines["2"].remaining == Decimal("-80.00")
    assert lines["7"].name == "Food"


def test_analyze_budgets_skips_income_categories(settled):
    categories = [Category(id="x", name="Bonus", type="INCOME"), Category(id="y", name="Misc", type="BOTH")]
    transactions = [settled("a", date(2024, 4, 2), "10.00", category="y")]
    budgets = [Budget(category_id="x", amount=Decimal("100.00"), month="2024-04")]

    lines = analyze_budgets(transactions, budgets, 2024, 4, categories=categories)

    assert [line.category_id for line in lines] == ["y"]


def test_analyze_budgets_includes_custom_categories(settled):
    gym = Category(id="custom-1", name="Gym", type="EXPENSE")
    transactions = [settled("a", date(2024, 4, 2), "90.00", category="custom-1")]
    budgets = [Budget(category_id="custom-1", amount=Decimal("100.00"), month="2024-04")]

    lines = analyze_budgets(transactions, budgets, 2024, 4, categories=merge_categories([gym]))

    [line] = lines
    assert line.name == "Gym"
    assert line.remaining == Decimal("10.00")
    assert analyze_budgets(transactions, budgets, 2024, 4) == []


def test_merge_categories_keeps_defaults_first():
    gym = Category(id="custom-1", name="Gym", type="EXPENSE")
    merged = merge_categories([gym])

    assert merged[: len(DEFAULT_CATEGORIES)] == DEFAULT_CATEGORIES
    assert merged[-1] == gym


def test_validate_category_strips_name():
    category = validate_category(Category(id="", name="  Gym ", type="BOTH"))
    assert category.name == "Gym"


@pytest.mark.parametrize("name,type", [("   ", "EXPENSE"), ("Gym", "SAVINGS")])
def test_validate_category_rejects_bad_input(name: str, type: str):
    with pytest.raises(ValidationError):
        validate_category(Category(id="", name=name, type=type))


def test_validate_budget_normalizes_month():
    budget = validate_budget(Budget(category_id="7", amount=Decimal("10.00"), month="2024-4"))
    assert budget.month == "2024-04"


@pytest.mark.parametrize("month,amount", [("2024", "10.00"), ("2024-13", "10.00"), ("april", "10.00"), ("2024-04", "-1.00")])
def test_validate_budget_rejects_bad_input(month: str, amount: str):
    with pytest.raises(ValidationError):
        validate_budget(Budget(category_id="7", amount=Decimal(amount), month=month))


def test_summarize_period_by_purchase_date(april_ledger):
    summary = summarize_period(april_ledger, Period(start=date(2024, 3, 15), end=date(2024, 4, 5)))

    assert [t.id for t in summary.transactions] == ["t4", "t6", "t7", "t3", "t2"]
    assert summary.total_income == Decimal("5000.00")
    assert summary.total_expense == Decimal("217.50")
    assert summary.balance == Decimal("4782.50")


def test_summarize_period_empty():
    summary = summarize_period([], Period.for_month(2024, 4))
    assert summary.transactions == []
    assert summary.balance == Decimal("0.00")


def test_summarize_display_counts_invoices_as_expenses(april_ledger, nubank, bradesco):
    items = aggregate(april_ledger, [nubank, bradesco], Period.for_month(2024, 4))
    income, expense, balance = summarize_display(items)

    assert income == Decimal("5000.00")
    assert expense == Decimal("205.50")  # 75.50 + 100.00 + 30.00
    assert balance == Decimal("4794.50")
