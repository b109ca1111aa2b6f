"""POST /v1/decisions and GET /v1/decisions/audit - user decisions and their audit log"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from discount_gateway.api.dependencies import get_request_id
from discount_gateway.api.v1.schemas import (
    AuditItem,
    AuditResponse,
    DecisionAction,
    DecisionRequest,
    DecisionResponse,
    InvoiceStatus,
)
from discount_gateway.domain.models import RateType
from discount_gateway.domain.scenarios import calculate_discount_savings
from discount_gateway.domain.terms import parse_terms
from discount_gateway.infrastructure.database.models import Invoice
from discount_gateway.infrastructure.database.repositories import DecisionRepository, InvoiceRepository
from discount_gateway.infrastructure.database.session import get_db
from discount_gateway.infrastructure.observability.metrics import decision_counter

router = APIRouter()

STATUS_BY_ACTION = {
    DecisionAction.APPROVE_TAKE: InvoiceStatus.APPROVED_TAKE,
    DecisionAction.APPROVE_HOLD: InvoiceStatus.APPROVED_HOLD,
    DecisionAction.APPROVE_BORROW: InvoiceStatus.APPROVED_BORROW,
    DecisionAction.DISMISS: InvoiceStatus.DISMISSED,
}


def estimate_savings(invoice: Invoice, action: DecisionAction) -> Decimal:
    """
    Savings the decision locks in for one invoice.

    - APPROVE_TAKE:   full discount
    - APPROVE_BORROW: discount net of the stored borrowing cost
      (only allowed on invoices with a BORROWING rate)
    - otherwise:      nothing
    """
    if action not in (DecisionAction.APPROVE_TAKE, DecisionAction.APPROVE_BORROW):
        return Decimal(0)

    schedule = parse_terms(invoice.terms)
    if schedule is None or not schedule.has_discount:
        return Decimal(0)

    savings = calculate_discount_savings(invoice.amount, schedule.discount_pct)
    if action is DecisionAction.APPROVE_BORROW:
        savings -= invoice.borrowing_cost or Decimal(0)
    return savings


@router.post("/decisions", response_model=DecisionResponse)
def create_decision(
    request_body: DecisionRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Record a decision over a set of invoices.

    Flow:
    1. Load the user's invoices (unknown IDs → 404)
    2. APPROVE_BORROW only on invoices with a BORROWING rate (else 422)
    3. Estimate savings locked in by the action
    4. Persist the audit entry and move invoices to the matching status
    """
    request_id = get_request_id(request)
    invoice_repo = InvoiceRepository(db)

    invoices = invoice_repo.get_invoices(request_body.user_id, request_body.invoice_ids)
    if len(invoices) != len(set(request_body.invoice_ids)):
        raise HTTPException(status_code=404, detail="One or more invoices not found")

    # Net savings need a stored borrowing cost
    if request_body.action is DecisionAction.APPROVE_BORROW and any(
        inv.rate_type != RateType.BORROWING.value for inv in invoices
    ):
        raise HTTPException(status_code=422, detail="APPROVE_BORROW requires a BORROWING rate on every invoice")

    try:
        total_savings = sum(
            (estimate_savings(inv, request_body.action) for inv in invoices),
            Decimal(0),
        )

        decision_repo = DecisionRepository(db)
        db_decision = decision_repo.create_decision(
            user_id=request_body.user_id,
            invoice_ids=[inv.id for inv in invoices],
            action=request_body.action.value,
            estimated_savings=total_savings,
            note=request_body.note,
        )

        new_status = STATUS_BY_ACTION[request_body.action].value
        for inv in invoices:
            inv.status = new_status

        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Decision failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    decision_counter.labels(action=request_body.action.value).inc()
    logging.info(
        "Decision recorded",
        extra={
            "request_id": request_id,
            "user_id": request_body.user_id,
            "step": "decision_complete",
            "action": request_body.action.value,
            "invoice_count": len(invoices),
        },
    )

    return DecisionResponse(
        decision_id=str(db_decision.id),
        saved=len(invoices),
        estimated_savings=db_decision.estimated_savings,
    )


@router.get("/decisions/audit", response_model=AuditResponse)
def get_decision_audit(
    user_id: str = Query(..., description="User identifier"),
    date_from: Optional[date] = Query(None, description="First day (inclusive)"),
    date_to: Optional[date] = Query(None, description="Last day (inclusive)"),
    db: Session = Depends(get_db),
):
    """Retrieve a user's decisions, newest first"""
    decisions = DecisionRepository(db).get_audit(user_id, date_from=date_from, date_to=date_to)

    items = [
        AuditItem(
            decision_id=str(d.id),
            invoice_ids=d.invoice_ids,
            action=d.action,
            estimated_savings=d.estimated_savings,
            note=d.note,
            created_at=d.created_at.isoformat(),
        )
        for d in decisions
    ]

    return AuditResponse(user_id=user_id, items=items)
