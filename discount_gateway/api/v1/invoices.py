"""Invoice endpoints: CSV import, listing, per-invoice rates and batch refresh"""

import time
import uuid
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from sqlalchemy.orm import Session

from discount_gateway.api.dependencies import get_request_id, get_today
from discount_gateway.api.v1.schemas import (
    ImportResponse,
    InvoiceListResponse,
    InvoiceSchema,
    InvoiceStatus,
    RateUpdateRequest,
    RefreshResponse,
)
from discount_gateway.config import settings
from discount_gateway.domain.apr import implied_apr_pct
from discount_gateway.domain.deadlines import days_until_deadline, discount_deadline, urgency_status
from discount_gateway.domain.exceptions import (
    DomainException,
    ImportFileError,
    InvalidRateError,
    MalformedTermsError,
)
from discount_gateway.domain.models import RecommendationResult
from discount_gateway.domain.refresh import refresh_recommendation
from discount_gateway.domain.terms import parse_terms
from discount_gateway.infrastructure.csv_import import parse_invoice_row, read_invoice_csv
from discount_gateway.infrastructure.database.models import Invoice
from discount_gateway.infrastructure.database.repositories import InvoiceRepository
from discount_gateway.infrastructure.database.session import get_db
from discount_gateway.infrastructure.observability.logging import log_import, log_recommendation, log_refresh
from discount_gateway.infrastructure.observability.metrics import (
    malformed_terms_counter,
    record_import,
    record_recommendation,
)
from discount_gateway.utils.money import round_rate

router = APIRouter()


def evaluate_invoice(invoice: Invoice, today: date) -> RecommendationResult:
    """
    Re-derive the schedule from the stored terms and apply the refresh policy.

    Raises:
        MalformedTermsError: stored terms no longer parse
        InvalidRateError: stored rate is invalid
    """
    schedule = parse_terms(invoice.terms)
    if schedule is None:
        raise MalformedTermsError(invoice.terms)

    return refresh_recommendation(
        invoice.amount,
        schedule,
        invoice.discount_deadline,
        today,
        user_rate=invoice.user_rate,
        rate_type=invoice.rate_type,
    )


def to_invoice_schema(invoice: Invoice, today: date) -> InvoiceSchema:
    days_until = days_until_deadline(invoice.discount_deadline, today)
    return InvoiceSchema(
        id=str(invoice.id),
        vendor=invoice.vendor,
        invoice_number=invoice.invoice_number,
        amount=invoice.amount,
        currency=invoice.currency,
        invoice_date=invoice.invoice_date,
        due_date=invoice.due_date,
        terms=invoice.terms,
        discount_deadline=invoice.discount_deadline,
        days_until_deadline=days_until,
        urgency=urgency_status(days_until),
        implied_apr_pct=invoice.implied_apr_pct,
        recommendation=invoice.recommendation,
        reason=invoice.reason,
        discount_savings=invoice.discount_savings,
        investment_return=invoice.investment_return,
        borrowing_cost=invoice.borrowing_cost,
        user_rate=invoice.user_rate,
        rate_type=invoice.rate_type,
        status=invoice.status,
    )


def _parse_invoice_id(invoice_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(invoice_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid invoice ID format")


@router.post("/invoices/import", response_model=ImportResponse)
async def import_invoices(
    request: Request,
    user_id: str = Form(..., min_length=1, description="User identifier"),
    file: UploadFile = File(..., description="CSV file of vendor invoices"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Import invoices from CSV and compute their initial recommendations.

    Rows with malformed terms, bad amounts/dates or an invalid rate are
    counted as skipped; the rest of the batch still imports.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    content = await file.read()
    try:
        rows = read_invoice_csv(content, settings.import_max_rows)
    except ImportFileError as e:
        raise HTTPException(status_code=400, detail=str(e))

    invoice_repo = InvoiceRepository(db)
    imported = skipped = 0

    try:
        for line_number, raw_row in enumerate(rows, start=2):
            try:
                row = parse_invoice_row(raw_row, settings.default_currency)
            except MalformedTermsError as e:
                malformed_terms_counter.inc()
                logging.warning(f"Skipping row {line_number}: {e}", extra={"request_id": request_id})
                skipped += 1
                continue
            except DomainException as e:
                logging.warning(f"Skipping row {line_number}: {e}", extra={"request_id": request_id})
                skipped += 1
                continue

            deadline = discount_deadline(row.invoice_date, row.schedule.discount_days)
            result = refresh_recommendation(
                row.amount,
                row.schedule,
                deadline,
                today,
                user_rate=row.user_rate,
                rate_type=row.rate_type,
            )
            invoice_repo.create_invoice(
                user_id=user_id,
                result=result,
                vendor=row.vendor,
                invoice_number=row.invoice_number,
                amount=row.amount,
                currency=row.currency,
                invoice_date=row.invoice_date,
                due_date=row.due_date,
                terms=row.terms,
                discount_deadline=deadline,
                implied_apr_pct=implied_apr_pct(row.schedule),
                user_rate=row.user_rate,
                rate_type=row.rate_type.value if row.rate_type else None,
            )
            record_recommendation(result.action.value)
            imported += 1

        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Import failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_import(imported, skipped)
    log_import(request_id, user_id, imported, skipped, duration_ms)

    return ImportResponse(imported=imported, skipped=skipped)


@router.get("/invoices", response_model=InvoiceListResponse)
def list_invoices(
    user_id: str = Query(..., description="User identifier"),
    status: Optional[InvoiceStatus] = Query(None),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """List a user's invoices, newest first, with urgency as of today"""
    invoice_repo = InvoiceRepository(db)
    invoices = invoice_repo.list_invoices(
        user_id,
        status=status.value if status else None,
        limit=limit,
        offset=offset,
    )
    return InvoiceListResponse(
        items=[to_invoice_schema(inv, today) for inv in invoices],
        limit=limit,
        offset=offset,
    )


@router.get("/invoices/{invoice_id}", response_model=InvoiceSchema)
def get_invoice(
    invoice_id: str,
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    invoice = InvoiceRepository(db).get_invoice(user_id, _parse_invoice_id(invoice_id))
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return to_invoice_schema(invoice, today)


@router.patch("/invoices/{invoice_id}/rate", response_model=InvoiceSchema)
def update_invoice_rate(
    invoice_id: str,
    request_body: RateUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Set the invoice's capital rate and recompute its recommendation.

    A passed discount deadline still forces HOLD.
    """
    request_id = get_request_id(request)
    invoice_repo = InvoiceRepository(db)
    invoice = invoice_repo.get_invoice(request_body.user_id, _parse_invoice_id(invoice_id))
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")

    try:
        # Evaluate on the stored precision so a later refresh reproduces the result
        invoice.user_rate = round_rate(request_body.user_rate)
        invoice.rate_type = request_body.rate_type.value
        result = evaluate_invoice(invoice, today)
        invoice_repo.apply_recommendation(invoice, result)
        db.commit()

    except (MalformedTermsError, InvalidRateError) as e:
        db.rollback()
        logging.warning(f"Cannot recompute invoice {invoice_id}: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    db.refresh(invoice)
    record_recommendation(result.action.value)
    log_recommendation(request_id, str(invoice.id), result.action.value, result.reason)

    return to_invoice_schema(invoice, today)


@router.post("/invoices/refresh", response_model=RefreshResponse)
def refresh_invoices(
    request: Request,
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Re-evaluate every PENDING invoice against today's date.

    Each invoice is independent; invoices whose stored terms or rate no
    longer validate are skipped. All updates commit together.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    invoice_repo = InvoiceRepository(db)
    updated = skipped = 0

    try:
        for invoice in invoice_repo.get_pending(user_id):
            try:
                result = evaluate_invoice(invoice, today)
            except DomainException as e:
                logging.warning(f"Skipping invoice {invoice.id}: {e}", extra={"request_id": request_id})
                skipped += 1
                continue

            invoice_repo.apply_recommendation(invoice, result)
            record_recommendation(result.action.value)
            updated += 1

        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Refresh failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    log_refresh(request_id, user_id, updated, skipped, duration_ms)

    return RefreshResponse(updated=updated, skipped=skipped)
