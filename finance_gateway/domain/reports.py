"""Period statements and totals for reports and the dashboard header"""

from decimal import Decimal
from typing import Iterable, Tuple
from finance_gateway.domain.models import DisplayItem, Invoice, Period, PeriodSummary, Transaction, TransactionType


def summarize_period(transactions: Iterable[Transaction], period: Period) -> PeriodSummary:
    """Statement of transactions purchased within the period, newest first"""
    selected = sorted(
        (t for t in transactions if period.contains(t.date)),
        key=lambda t: t.date,
        reverse=True,
    )
    total_income = sum((t.amount for t in selected if t.type == TransactionType.INCOME), Decimal("0.00"))
    total_expense = sum((t.amount for t in selected if t.type == TransactionType.EXPENSE), Decimal("0.00"))

    return PeriodSummary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        transactions=selected,
    )


def summarize_display(items: Iterable[DisplayItem]) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Totals of an aggregated month view: (income, expense, balance).

    Invoices count as expenses.
    """
    income = Decimal("0.00")
    expense = Decimal("0.00")
    for item in items:
        if isinstance(item, Invoice) or item.type == TransactionType.EXPENSE:
            expense += item.amount
        else:
            income += item.amount
    return income, expense, income - expense
