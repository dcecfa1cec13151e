"""Categories and monthly budget analysis - spending per category against its budget"""

from decimal import Decimal
from typing import Iterable, List, Optional
from finance_gateway.domain.models import Budget, BudgetLine, Category, Period, Transaction, TransactionType
from finance_gateway.domain.exceptions import ValidationError
from finance_gateway.utils.date_utils import format_month, parse_month

DEFAULT_CATEGORIES: List[Category] = [
    Category(id="1", name="Fees and Taxes", type="EXPENSE"),
    Category(id="2", name="Transport", type="EXPENSE"),
    Category(id="3", name="Internet", type="EXPENSE"),
    Category(id="4", name="Water", type="EXPENSE"),
    Category(id="5", name="Electricity", type="EXPENSE"),
    Category(id="6", name="Rent", type="EXPENSE"),
    Category(id="7", name="Food", type="EXPENSE"),
    Category(id="8", name="Health", type="EXPENSE"),
    Category(id="9", name="Education", type="EXPENSE"),
    Category(id="10", name="Leisure", type="EXPENSE"),
    Category(id="11", name="Clothing", type="EXPENSE"),
    Category(id="12", name="Groceries", type="EXPENSE"),
    Category(id="13", name="Office Supplies", type="EXPENSE"),
    Category(id="14", name="Other", type="BOTH"),
    Category(id="15", name="Salary", type="INCOME"),
]

CATEGORY_TYPES = ("INCOME", "EXPENSE", "BOTH")


def validate_category(category: Category) -> Category:
    """
    Raises:
        ValidationError: blank name or unknown type
    """
    name = category.name.strip()
    if not name:
        raise ValidationError("Category name must not be blank")
    if category.type not in CATEGORY_TYPES:
        raise ValidationError(f"Category type must be one of {', '.join(CATEGORY_TYPES)}, got {category.type!r}")
    category.name = name
    return category


def merge_categories(custom: Iterable[Category]) -> List[Category]:
    """Built-in categories followed by the user's own"""
    return [*DEFAULT_CATEGORIES, *custom]


def validate_budget(budget: Budget) -> Budget:
    """
    Raises:
        ValidationError: month is not "YYYY-MM" or amount is negative
    """
    try:
        year, month = parse_month(budget.month)
    except ValueError as e:
        raise ValidationError(f"Budget month must be YYYY-MM, got {budget.month!r}") from e
    if budget.amount < 0:
        raise ValidationError(f"Budget amount must not be negative, got {budget.amount}")
    budget.month = format_month(year, month)
    return budget


def analyze_budgets(
    transactions: Iterable[Transaction],
    budgets: Iterable[Budget],
    year: int,
    month: int,
    categories: Optional[Iterable[Category]] = None,
) -> List[BudgetLine]:
    """
    Compare a month's spending per expense category with its budget.

    Spending counts EXPENSE transactions by purchase date. Categories with
    neither spending nor a budget are left out.
    """
    period = Period.for_month(year, month)
    month_key = format_month(year, month)
    expenses = [
        t for t in transactions
        if t.type == TransactionType.EXPENSE and period.contains(t.date)
    ]
    budget_by_category = {b.category_id: b.amount for b in budgets if b.month == month_key}

    lines = []
    for category in categories if categories is not None else DEFAULT_CATEGORIES:
        if category.type not in ("EXPENSE", "BOTH"):
            continue

        spent = sum((t.amount for t in expenses if t.category == category.id), Decimal("0.00"))
        budget = budget_by_category.get(category.id, Decimal("0.00"))
        if spent == 0 and budget == 0:
            continue

        lines.append(
            BudgetLine(
                category_id=category.id,
                name=category.name,
                spent=spent,
                budget=budget,
                remaining=budget - spent,
            )
        )

    return lines
