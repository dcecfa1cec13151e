"""POST /v1/invoices/paid - bulk payment status of a credit card invoice"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_gateway.api.v1.schemas import InvoicePaidRequest, InvoicePaidResponse
from finance_gateway.api.dependencies import get_request_id, get_transaction_repository
from finance_gateway.infrastructure.database.session import get_db
from finance_gateway.infrastructure.database.repositories import TransactionRepository
from finance_gateway.domain.invoices import set_invoice_paid, toggle_invoice_paid
from finance_gateway.domain.models import InvoiceKey
from finance_gateway.domain.exceptions import InvoiceNotFoundError
from finance_gateway.infrastructure.observability.metrics import record_invoice_toggle
from finance_gateway.infrastructure.observability.logging import log_batch_update

router = APIRouter()


@router.post("/invoices/paid", response_model=InvoicePaidResponse)
def mark_invoice_paid(
    request_body: InvoicePaidRequest,
    request: Request,
    db: Session = Depends(get_db),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
):
    """
    Write one payment status to every transaction of an invoice.

    With is_paid omitted the invoice is toggled: fully paid becomes unpaid,
    anything else becomes fully paid.

    Returns:
        New status plus updated/failed transaction ids; retry on failures
    """
    start_time = time.time()
    request_id = get_request_id(request)
    key = InvoiceKey(request_body.card_id, request_body.due_date)

    try:
        transactions = transaction_repo.get_transactions_by_user(request_body.user_id)

        if request_body.is_paid is None:
            is_paid, updates = toggle_invoice_paid(transactions, key)
        else:
            is_paid = request_body.is_paid
            updates = set_invoice_paid(transactions, key, is_paid)
            if not updates:
                raise InvoiceNotFoundError(
                    f"No invoice for card {key.card_id} due {key.due_date.isoformat()}"
                )

        result = transaction_repo.apply_updates(request_body.user_id, updates, fields=("is_paid",))
        db.commit()

    except InvoiceNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Invoice payment update failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_invoice_toggle(is_paid)
    log_batch_update(
        request_id,
        request_body.user_id,
        "invoice_paid",
        len(result.updated_ids),
        result.failed_ids,
        duration_ms,
    )

    return InvoicePaidResponse(
        card_id=key.card_id,
        due_date=key.due_date,
        is_paid=is_paid,
        updated_ids=result.updated_ids,
        failed_ids=result.failed_ids,
        complete=result.complete,
    )
