"""/v1/cards - credit card registry and per-card invoice view"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from finance_gateway.api.v1.schemas import CardInvoiceResponse, CardListResponse, CardRequest, CardSchema, TransactionSchema
from finance_gateway.api.dependencies import (
    get_card_repository,
    get_request_id,
    get_transaction_repository,
    load_ledger,
)
from finance_gateway.config import settings
from finance_gateway.infrastructure.database.session import get_db
from finance_gateway.infrastructure.database.repositories import CardRepository, TransactionRepository
from finance_gateway.domain.billing import validate_card
from finance_gateway.domain.invoices import aggregate, invoice_members, invoice_total
from finance_gateway.domain.models import Card, Invoice, Period
from finance_gateway.domain.exceptions import CardNotFoundError, ValidationError

router = APIRouter()


@router.post("/cards", response_model=CardSchema, status_code=201)
def create_card(
    request_body: CardRequest,
    db: Session = Depends(get_db),
    card_repo: CardRepository = Depends(get_card_repository),
):
    """Register a credit card after validating its billing days"""
    try:
        card = validate_card(
            Card(
                id="",
                name=request_body.name,
                closing_day=request_body.closing_day,
                due_day=request_body.due_day,
                color=request_body.color,
            )
        )
        saved = card_repo.create_card(request_body.user_id, card)
        db.commit()
        return CardSchema.model_validate(saved)

    except ValidationError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/cards", response_model=CardListResponse)
def list_cards(
    user_id: str = Query(..., description="User identifier"),
    card_repo: CardRepository = Depends(get_card_repository),
):
    cards = card_repo.get_cards_by_user(user_id)
    return CardListResponse(user_id=user_id, cards=[CardSchema.model_validate(c) for c in cards])


@router.put("/cards/{card_id}", response_model=CardSchema)
def update_card(
    card_id: str,
    request_body: CardRequest,
    request: Request,
    db: Session = Depends(get_db),
    card_repo: CardRepository = Depends(get_card_repository),
):
    """
    Change card parameters.

    Existing due dates are not touched; call
    POST /v1/transactions/recalculate-due-dates to move them.
    """
    request_id = get_request_id(request)
    try:
        card = validate_card(
            Card(
                id=card_id,
                name=request_body.name,
                closing_day=request_body.closing_day,
                due_day=request_body.due_day,
                color=request_body.color,
            )
        )
        saved = card_repo.update_card(request_body.user_id, card)
        db.commit()
        logging.info("Card updated", extra={"request_id": request_id, "card_id": card_id})
        return CardSchema.model_validate(saved)

    except ValidationError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    except CardNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/cards/{card_id}", status_code=204)
def delete_card(
    card_id: str,
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
    card_repo: CardRepository = Depends(get_card_repository),
):
    """Delete a card; its transactions remain and aggregate under a placeholder name"""
    if not card_repo.delete_card(user_id, card_id):
        raise HTTPException(status_code=404, detail="Card not found")
    db.commit()


@router.get("/cards/{card_id}/invoice", response_model=CardInvoiceResponse)
def get_card_invoice(
    card_id: str,
    user_id: str = Query(..., description="User identifier"),
    year: int = Query(..., ge=1900, le=9999),
    month: int = Query(..., ge=1, le=12),
    card_repo: CardRepository = Depends(get_card_repository),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
):
    """
    Invoice of one card for the month its payment is due.

    Returns:
        Member transactions ordered by purchase date, total and paid flag
    """
    card = card_repo.get_card(user_id, card_id)
    if card is None:
        raise HTTPException(status_code=404, detail="Card not found")

    transactions, cards = load_ledger(user_id, card_repo, transaction_repo)
    invoices = [
        item for item in aggregate(transactions, cards, Period.for_month(year, month), settings.removed_card_label)
        if isinstance(item, Invoice) and item.card_id == card_id
    ]

    members = [t for invoice in invoices for t in invoice_members(transactions, invoice.key)]
    members.sort(key=lambda t: t.date)

    return CardInvoiceResponse(
        card_id=card.id,
        card_name=card.name,
        year=year,
        month=month,
        total=invoice_total(members),
        is_paid=bool(invoices) and all(invoice.is_paid for invoice in invoices),
        due_dates=sorted(invoice.due_date for invoice in invoices),
        transactions=[TransactionSchema.model_validate(t) for t in members],
    )
