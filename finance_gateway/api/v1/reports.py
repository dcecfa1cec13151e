"""GET /v1/reports/summary - statement of a date range"""

from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query

from finance_gateway.api.v1.schemas import ReportSummaryResponse, TransactionSchema
from finance_gateway.api.dependencies import get_transaction_repository
from finance_gateway.infrastructure.database.repositories import TransactionRepository
from finance_gateway.domain.reports import summarize_period
from finance_gateway.domain.models import Period

router = APIRouter()


@router.get("/reports/summary", response_model=ReportSummaryResponse)
def get_report_summary(
    user_id: str = Query(..., description="User identifier"),
    start: date = Query(..., description="First purchase date included"),
    end: date = Query(..., description="Last purchase date included"),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
):
    """Income, expense and balance of transactions purchased between start and end"""
    if end < start:
        raise HTTPException(status_code=422, detail="end must not be before start")

    summary = summarize_period(transaction_repo.get_transactions_by_user(user_id), Period(start=start, end=end))

    return ReportSummaryResponse(
        user_id=user_id,
        start=start,
        end=end,
        total_income=summary.total_income,
        total_expense=summary.total_expense,
        balance=summary.balance,
        transactions=[TransactionSchema.model_validate(t) for t in summary.transactions],
    )
