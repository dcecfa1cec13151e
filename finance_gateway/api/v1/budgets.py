"""/v1/budgets - monthly category budgets and spending analysis"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from finance_gateway.api.v1.schemas import BudgetAnalysisResponse, BudgetLineSchema, BudgetRequest, BudgetSchema
from finance_gateway.api.dependencies import get_budget_repository, get_category_repository, get_transaction_repository
from finance_gateway.infrastructure.database.session import get_db
from finance_gateway.infrastructure.database.repositories import BudgetRepository, CategoryRepository, TransactionRepository
from finance_gateway.domain.budgets import analyze_budgets, merge_categories, validate_budget
from finance_gateway.domain.models import Budget
from finance_gateway.domain.exceptions import ValidationError
from finance_gateway.utils.date_utils import format_month

router = APIRouter()


@router.put("/budgets", response_model=BudgetSchema)
def upsert_budget(
    request_body: BudgetRequest,
    db: Session = Depends(get_db),
    budget_repo: BudgetRepository = Depends(get_budget_repository),
):
    """Create or replace the budget of a category for one month"""
    try:
        budget = validate_budget(
            Budget(category_id=request_body.category_id, amount=request_body.amount, month=request_body.month)
        )
        saved = budget_repo.upsert_budget(request_body.user_id, budget)
        db.commit()
        return BudgetSchema.model_validate(saved)

    except ValidationError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/budgets/analysis", response_model=BudgetAnalysisResponse)
def get_budget_analysis(
    user_id: str = Query(..., description="User identifier"),
    year: int = Query(..., ge=1900, le=9999),
    month: int = Query(..., ge=1, le=12),
    budget_repo: BudgetRepository = Depends(get_budget_repository),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
):
    """
    Spending vs budget per expense category, built-in and user-defined.

    Returns:
        One line per category with spending or a budget in the month
    """
    month_key = format_month(year, month)
    lines = analyze_budgets(
        transaction_repo.get_transactions_by_user(user_id),
        budget_repo.get_budgets_by_user(user_id, month=month_key),
        year,
        month,
        categories=merge_categories(category_repo.get_categories_by_user(user_id)),
    )
    return BudgetAnalysisResponse(
        user_id=user_id,
        month=month_key,
        lines=[BudgetLineSchema.model_validate(line) for line in lines],
    )
