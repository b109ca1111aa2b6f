"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, UUID4

from discount_gateway.domain.models import Action, RateType, UrgencyStatus
from discount_gateway.utils.money import MAX_RATE_PCT


class InvoiceStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED_TAKE = "APPROVED_TAKE"
    APPROVED_HOLD = "APPROVED_HOLD"
    APPROVED_BORROW = "APPROVED_BORROW"
    DISMISSED = "DISMISSED"


class DecisionAction(str, Enum):
    APPROVE_TAKE = "APPROVE_TAKE"
    APPROVE_HOLD = "APPROVE_HOLD"
    APPROVE_BORROW = "APPROVE_BORROW"
    DISMISS = "DISMISS"


class InvoiceSchema(BaseModel):
    """Invoice with its current recommendation"""

    id: str
    vendor: str
    invoice_number: str
    amount: Decimal
    currency: str
    invoice_date: date
    due_date: date
    terms: str
    discount_deadline: Optional[date] = None
    days_until_deadline: int
    urgency: UrgencyStatus
    implied_apr_pct: Decimal
    recommendation: Action
    reason: str
    discount_savings: Decimal
    investment_return: Decimal
    borrowing_cost: Optional[Decimal] = None
    user_rate: Optional[Decimal] = None
    rate_type: Optional[RateType] = None
    status: InvoiceStatus


class InvoiceListResponse(BaseModel):
    """Response for GET /v1/invoices"""

    items: List[InvoiceSchema]
    limit: int
    offset: int


class ImportResponse(BaseModel):
    """Response for POST /v1/invoices/import"""

    imported: int
    skipped: int


class RateUpdateRequest(BaseModel):
    """Request body for PATCH /v1/invoices/{invoice_id}/rate"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    user_rate: Decimal = Field(..., ge=0, le=MAX_RATE_PCT, description="Annual rate in percent")
    rate_type: RateType


class RefreshResponse(BaseModel):
    """Response for POST /v1/invoices/refresh"""

    updated: int
    skipped: int


class DecisionRequest(BaseModel):
    """Request body for POST /v1/decisions"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    invoice_ids: List[UUID4] = Field(..., min_length=1)
    action: DecisionAction
    note: Optional[str] = Field(None, max_length=1000)


class DecisionResponse(BaseModel):
    """Response for POST /v1/decisions"""

    decision_id: str
    saved: int
    estimated_savings: Decimal


class AuditItem(BaseModel):
    """Single decision in the audit log"""

    decision_id: str
    invoice_ids: List[str]
    action: DecisionAction
    estimated_savings: Decimal
    note: Optional[str] = None
    created_at: str


class AuditResponse(BaseModel):
    """Response for GET /v1/decisions/audit"""

    user_id: str
    items: List[AuditItem]
