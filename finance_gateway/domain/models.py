"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, NamedTuple, Optional, Union

from finance_gateway.utils.date_utils import month_bounds


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    PIX = "PIX"


class ExpenseType(str, Enum):
    FIXED = "FIXED"
    VARIABLE = "VARIABLE"


@dataclass
class Card:
    """Credit card billing parameters"""

    id: str
    name: str
    closing_day: int  # 1..31, purchases on or after this day roll to the next cycle
    due_day: int  # 1..31, clamped to the month length when resolving
    color: str = ""


@dataclass
class Transaction:
    """
    One income/expense record.

    Multi-installment credit purchases are stored as one Transaction per
    installment, linked by parent_id. due_date is set only for credit purchases.
    """

    id: str
    description: str
    amount: Decimal
    date: date  # purchase date
    type: TransactionType
    payment_method: PaymentMethod
    is_paid: bool = False
    due_date: Optional[date] = None
    credit_card_id: Optional[str] = None
    installment_total: Optional[int] = None
    installment_current: Optional[int] = None  # 1-based
    parent_id: Optional[str] = None
    category: Optional[str] = None
    expense_type: Optional[ExpenseType] = None

    @property
    def is_credit_expense(self) -> bool:
        return self.payment_method == PaymentMethod.CREDIT and self.type == TransactionType.EXPENSE


class InvoiceKey(NamedTuple):
    """Identity of a derived invoice"""

    card_id: str
    due_date: date


@dataclass
class Invoice:
    """Derived, non-persisted aggregation of one card's transactions due on one date"""

    card_id: str
    due_date: date
    card_name: str
    card_color: str
    amount: Decimal = Decimal("0.00")
    count: int = 0
    is_paid: bool = True
    transaction_ids: List[str] = field(default_factory=list)

    @property
    def key(self) -> InvoiceKey:
        return InvoiceKey(self.card_id, self.due_date)


DisplayItem = Union[Invoice, Transaction]


@dataclass(frozen=True)
class Period:
    """Inclusive calendar date range"""

    start: date
    end: date

    @classmethod
    def for_month(cls, year: int, month: int) -> "Period":
        start, end = month_bounds(year, month)
        return cls(start=start, end=end)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass
class BatchResult:
    """Outcome of applying a batch of record updates"""

    updated_ids: List[str] = field(default_factory=list)
    failed_ids: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed_ids


@dataclass
class Category:
    id: str
    name: str
    type: str  # "INCOME" | "EXPENSE" | "BOTH"
    icon: str = ""
    color: str = ""


@dataclass
class Budget:
    category_id: str
    amount: Decimal
    month: str  # YYYY-MM


@dataclass
class BudgetLine:
    """Spending vs budget for one category in one month"""

    category_id: str
    name: str
    spent: Decimal
    budget: Decimal
    remaining: Decimal


@dataclass
class PeriodSummary:
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    transactions: List[Transaction]
