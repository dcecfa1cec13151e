"""Pydantic schemas for API request/response validation"""

import datetime
from datetime import date
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from finance_gateway.domain.models import ExpenseType, PaymentMethod, TransactionType


class CardRequest(BaseModel):
    """Request body for POST /v1/cards and PUT /v1/cards/{card_id}"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    name: str = Field(..., min_length=1, max_length=100)
    closing_day: int = Field(..., ge=1, le=31, description="Day the billing cycle closes")
    due_day: int = Field(..., ge=1, le=31, description="Day the invoice is due")
    color: str = ""


class CardSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    closing_day: int
    due_day: int
    color: str


class CardListResponse(BaseModel):
    user_id: str
    cards: List[CardSchema]


class PurchaseRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    description: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Total amount of the purchase")
    date: date
    type: TransactionType
    payment_method: PaymentMethod
    credit_card_id: Optional[str] = None
    installments: int = Field(1, ge=1, description="Number of monthly installments (credit only)")
    category: Optional[str] = None
    expense_type: Optional[ExpenseType] = None


class TransactionSchema(BaseModel):
    """Single transaction or installment"""

    model_config = ConfigDict(from_attributes=True)

    kind: Literal["transaction"] = "transaction"
    id: str
    description: str
    amount: Decimal
    date: date
    due_date: Optional[date] = None
    type: TransactionType
    payment_method: PaymentMethod
    credit_card_id: Optional[str] = None
    installment_total: Optional[int] = None
    installment_current: Optional[int] = None
    parent_id: Optional[str] = None
    category: Optional[str] = None
    expense_type: Optional[ExpenseType] = None
    is_paid: bool


class PurchaseResponse(BaseModel):
    """Response for POST /v1/transactions"""

    transactions: List[TransactionSchema]


class InvoiceSchema(BaseModel):
    """Credit card invoice folded from its transactions"""

    model_config = ConfigDict(from_attributes=True)

    kind: Literal["invoice"] = "invoice"
    card_id: str
    card_name: str
    card_color: str
    due_date: date
    amount: Decimal
    count: int
    is_paid: bool
    transaction_ids: List[str]


DisplayItemSchema = Annotated[Union[InvoiceSchema, TransactionSchema], Field(discriminator="kind")]


class MonthViewResponse(BaseModel):
    """Response for GET /v1/transactions"""

    user_id: str
    year: int
    month: int
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    items: List[DisplayItemSchema]


class TransactionUpdateRequest(BaseModel):
    """Request body for PUT /v1/transactions/{transaction_id} - omitted fields keep their value"""

    user_id: str = Field(..., min_length=1)
    description: Optional[str] = Field(None, min_length=1, max_length=200)
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    date: Optional[datetime.date] = None
    category: Optional[str] = None
    credit_card_id: Optional[str] = None


class PaidRequest(BaseModel):
    """Request body for PUT /v1/transactions/{transaction_id}/paid"""

    user_id: str = Field(..., min_length=1)
    is_paid: bool


class InvoicePaidRequest(BaseModel):
    """Request body for POST /v1/invoices/paid - omit is_paid to toggle"""

    user_id: str = Field(..., min_length=1)
    card_id: str = Field(..., min_length=1)
    due_date: date
    is_paid: Optional[bool] = None


class BatchUpdateResponse(BaseModel):
    updated_ids: List[str]
    failed_ids: List[str]
    complete: bool


class InvoicePaidResponse(BatchUpdateResponse):
    card_id: str
    due_date: date
    is_paid: bool


class RecalculateRequest(BaseModel):
    """Request body for POST /v1/transactions/recalculate-due-dates"""

    user_id: str = Field(..., min_length=1)


class CardInvoiceResponse(BaseModel):
    """Response for GET /v1/cards/{card_id}/invoice"""

    card_id: str
    card_name: str
    year: int
    month: int
    total: Decimal
    is_paid: bool
    due_dates: List[date]
    transactions: List[TransactionSchema]


class BudgetRequest(BaseModel):
    """Request body for PUT /v1/budgets"""

    user_id: str = Field(..., min_length=1)
    category_id: str = Field(..., min_length=1)
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")
    amount: Decimal = Field(..., ge=0, decimal_places=2)


class BudgetSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category_id: str
    month: str
    amount: Decimal


class BudgetLineSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category_id: str
    name: str
    spent: Decimal
    budget: Decimal
    remaining: Decimal


class BudgetAnalysisResponse(BaseModel):
    """Response for GET /v1/budgets/analysis"""

    user_id: str
    month: str
    lines: List[BudgetLineSchema]


class ReportSummaryResponse(BaseModel):
    """Response for GET /v1/reports/summary"""

    user_id: str
    start: date
    end: date
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    transactions: List[TransactionSchema]


class CategoryRequest(BaseModel):
    """Request body for POST /v1/categories and PUT /v1/categories/{category_id}"""

    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    type: Literal["INCOME", "EXPENSE", "BOTH"]
    icon: str = ""
    color: str = ""


class CategorySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    icon: str
    color: str
    is_default: bool = False


class CategoryListResponse(BaseModel):
    """Response for GET /v1/categories: built-in categories first"""

    user_id: str
    categories: List[CategorySchema]
