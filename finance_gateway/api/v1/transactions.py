"""/v1/transactions - purchases, edits, month view and due date maintenance"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_gateway.api.v1.schemas import (
    BatchUpdateResponse,
    InvoiceSchema,
    MonthViewResponse,
    PaidRequest,
    PurchaseRequest,
    PurchaseResponse,
    RecalculateRequest,
    TransactionUpdateRequest,
    TransactionSchema,
)
from finance_gateway.api.dependencies import (
    get_card_repository,
    get_request_id,
    get_transaction_repository,
    load_ledger,
)
from finance_gateway.config import settings
from finance_gateway.infrastructure.database.session import get_db
from finance_gateway.infrastructure.database.repositories import CardRepository, TransactionRepository
from finance_gateway.domain.installments import build_purchase, edit_transaction
from finance_gateway.domain.invoices import aggregate, filter_period, find_missing_due_dates, recalculate_due_dates
from finance_gateway.domain.reports import summarize_display
from finance_gateway.domain.models import Invoice, PaymentMethod, Period, TransactionType
from finance_gateway.domain.exceptions import CardNotFoundError, TransactionNotFoundError, ValidationError
from finance_gateway.infrastructure.observability.metrics import (
    missing_due_date_counter,
    record_purchase,
    record_recalculation,
)
from finance_gateway.infrastructure.observability.logging import log_batch_update

router = APIRouter()


@router.post("/transactions", response_model=PurchaseResponse, status_code=201)
def create_transaction(
    request_body: PurchaseRequest,
    request: Request,
    db: Session = Depends(get_db),
    card_repo: CardRepository = Depends(get_card_repository),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
):
    """
    Record a purchase or income.

    Flow:
    1. Resolve the card for credit expenses
    2. Build the record(s): installments for credit, one settled record otherwise
    3. Persist all records in one commit
    """
    request_id = get_request_id(request)

    try:
        card = None
        is_credit_expense = (
            request_body.payment_method == PaymentMethod.CREDIT
            and request_body.type == TransactionType.EXPENSE
        )
        if is_credit_expense:
            if request_body.installments > settings.max_installments:
                raise ValidationError(f"At most {settings.max_installments} installments are allowed")
            if not request_body.credit_card_id:
                raise ValidationError("Credit card expenses require credit_card_id")
            card = card_repo.get_card(request_body.user_id, request_body.credit_card_id)
            if card is None:
                raise CardNotFoundError(f"Card {request_body.credit_card_id} not found")

        records = build_purchase(
            description=request_body.description,
            amount=request_body.amount,
            purchase_date=request_body.date,
            transaction_type=request_body.type,
            payment_method=request_body.payment_method,
            card=card,
            installments=request_body.installments,
            category=request_body.category,
            expense_type=request_body.expense_type,
        )
        saved = transaction_repo.create_transactions(request_body.user_id, records)
        db.commit()

        record_purchase(request_body.payment_method.value, len(saved))
        logging.info(
            "Transaction recorded",
            extra={
                "request_id": request_id,
                "user_id": request_body.user_id,
                "payment_method": request_body.payment_method.value,
                "record_count": len(saved),
            },
        )
        return PurchaseResponse(transactions=[TransactionSchema.model_validate(t) for t in saved])

    except ValidationError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    except CardNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Failed to record transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/transactions", response_model=MonthViewResponse)
def get_month_view(
    user_id: str = Query(..., description="User identifier"),
    year: int = Query(..., ge=1900, le=9999),
    month: int = Query(..., ge=1, le=12),
    card_repo: CardRepository = Depends(get_card_repository),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
):
    """
    Month view with credit card purchases folded into invoices.

    Credit expenses are placed by due date, everything else by purchase date.
    """
    transactions, cards = load_ledger(user_id, card_repo, transaction_repo)
    period = Period.for_month(year, month)

    missing = find_missing_due_dates(filter_period(transactions, period))
    if missing:
        missing_due_date_counter.inc(len(missing))

    items = aggregate(transactions, cards, period, settings.removed_card_label)
    total_income, total_expense, balance = summarize_display(items)

    return MonthViewResponse(
        user_id=user_id,
        year=year,
        month=month,
        total_income=total_income,
        total_expense=total_expense,
        balance=balance,
        items=[
            InvoiceSchema.model_validate(item) if isinstance(item, Invoice) else TransactionSchema.model_validate(item)
            for item in items
        ],
    )


@router.put("/transactions/{transaction_id}", response_model=TransactionSchema)
def update_transaction(
    transaction_id: str,
    request_body: TransactionUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
    card_repo: CardRepository = Depends(get_card_repository),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
):
    """
    Edit one record (a single installment for credit purchases).

    A credit expense moved to another date or card gets a new due date;
    sibling installments are left as they are.
    """
    request_id = get_request_id(request)

    try:
        original = transaction_repo.get_transaction(request_body.user_id, transaction_id)

        card = None
        card_id = request_body.credit_card_id
        if card_id is None and original.is_credit_expense and request_body.date not in (None, original.date):
            card_id = original.credit_card_id
        if card_id is not None:
            card = card_repo.get_card(request_body.user_id, card_id)
            if card is None:
                raise CardNotFoundError(f"Card {card_id} not found")

        edited = edit_transaction(
            original,
            card=card,
            description=request_body.description,
            amount=request_body.amount,
            purchase_date=request_body.date,
            category=request_body.category,
        )
        saved = transaction_repo.update_transaction(request_body.user_id, edited)
        db.commit()

        logging.info(
            "Transaction updated",
            extra={
                "request_id": request_id,
                "user_id": request_body.user_id,
                "transaction_id": transaction_id,
                "due_date_changed": saved.due_date != original.due_date,
            },
        )
        return TransactionSchema.model_validate(saved)

    except ValidationError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    except (TransactionNotFoundError, CardNotFoundError) as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Failed to update transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/transactions/{transaction_id}/paid", response_model=TransactionSchema)
def set_transaction_paid(
    transaction_id: str,
    request_body: PaidRequest,
    db: Session = Depends(get_db),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
):
    try:
        updated = transaction_repo.set_paid(request_body.user_id, transaction_id, request_body.is_paid)
        db.commit()
        return TransactionSchema.model_validate(updated)

    except TransactionNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: str,
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
):
    """Delete one record; sibling installments are kept"""
    if not transaction_repo.delete_transaction(user_id, transaction_id):
        raise HTTPException(status_code=404, detail="Transaction not found")
    db.commit()


@router.post("/transactions/recalculate-due-dates", response_model=BatchUpdateResponse)
def recalculate(
    request_body: RecalculateRequest,
    request: Request,
    db: Session = Depends(get_db),
    card_repo: CardRepository = Depends(get_card_repository),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
):
    """
    Re-resolve due dates of every credit purchase against current card settings.

    Only records whose due date changes are written. Safe to retry after a
    partial failure: a second run only touches what is still out of date.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        transactions, cards = load_ledger(request_body.user_id, card_repo, transaction_repo)
        changed = recalculate_due_dates(transactions, cards)
        result = transaction_repo.apply_updates(request_body.user_id, changed, fields=("due_date",))
        db.commit()

    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Due date recalculation failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_recalculation(len(result.updated_ids), len(result.failed_ids))
    log_batch_update(
        request_id,
        request_body.user_id,
        "recalculate_due_dates",
        len(result.updated_ids),
        result.failed_ids,
        duration_ms,
    )

    return BatchUpdateResponse(
        updated_ids=result.updated_ids,
        failed_ids=result.failed_ids,
        complete=result.complete,
    )
