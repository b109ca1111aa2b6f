"""Data access layer for invoices and decisions"""

import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
from discount_gateway.infrastructure.database.models import Decision, Invoice
from discount_gateway.domain.models import RecommendationResult
from discount_gateway.utils.money import round_money


class InvoiceRepository:
    """Repository for invoices"""

    def __init__(self, db: Session):
        self.db = db

    def create_invoice(self, user_id: str, result: RecommendationResult, **fields) -> Invoice:
        """Persist an imported invoice with its initial recommendation"""
        db_invoice = Invoice(user_id=user_id, status="PENDING", **fields)
        self.apply_recommendation(db_invoice, result)
        self.db.add(db_invoice)
        self.db.flush()  # Get ID without committing
        return db_invoice

    def apply_recommendation(self, invoice: Invoice, result: RecommendationResult) -> None:
        """Replace the stored recommendation and scenario values"""
        scenarios = result.scenarios
        invoice.recommendation = result.action.value
        invoice.reason = result.reason
        invoice.discount_savings = round_money(scenarios.pay_early)
        invoice.investment_return = round_money(scenarios.hold)
        invoice.borrowing_cost = round_money(scenarios.borrow) if scenarios.borrow is not None else None

    def get_invoice(self, user_id: str, invoice_id: uuid.UUID) -> Optional[Invoice]:
        return (
            self.db.query(Invoice)
            .filter(Invoice.user_id == user_id, Invoice.id == invoice_id)
            .first()
        )

    def get_invoices(self, user_id: str, invoice_ids: List[uuid.UUID]) -> List[Invoice]:
        """Fetch invoices by ID, restricted to the user's own"""
        return (
            self.db.query(Invoice)
            .filter(Invoice.user_id == user_id, Invoice.id.in_(invoice_ids))
            .all()
        )

    def list_invoices(
        self,
        user_id: str,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Invoice]:
        """Fetch a page of invoices, newest first"""
        query = self.db.query(Invoice).filter(Invoice.user_id == user_id)
        if status:
            query = query.filter(Invoice.status == status)
        return (
            query.order_by(Invoice.created_at.desc(), Invoice.invoice_number)
            .offset(offset)
            .limit(limit)
            .all()
        )

    def get_pending(self, user_id: str) -> List[Invoice]:
        return (
            self.db.query(Invoice)
            .filter(Invoice.user_id == user_id, Invoice.status == "PENDING")
            .all()
        )


class DecisionRepository:
    """Repository for the decision audit log"""

    def __init__(self, db: Session):
        self.db = db

    def create_decision(
        self,
        user_id: str,
        invoice_ids: List[uuid.UUID],
        action: str,
        estimated_savings: Decimal,
        note: Optional[str] = None,
    ) -> Decision:
        db_decision = Decision(
            user_id=user_id,
            invoice_ids=[str(i) for i in invoice_ids],
            action=action,
            invoice_count=len(invoice_ids),
            estimated_savings=round_money(estimated_savings),
            note=note,
        )
        self.db.add(db_decision)
        self.db.flush()
        return db_decision

    def get_audit(
        self,
        user_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Decision]:
        """Fetch decisions for a user, newest first, optionally within [date_from, date_to]"""
        query = self.db.query(Decision).filter(Decision.user_id == user_id)
        if date_from:
            query = query.filter(
                Decision.created_at >= datetime.combine(date_from, time.min, tzinfo=timezone.utc)
            )
        if date_to:
            # Inclusive of the whole end day
            query = query.filter(
                Decision.created_at < datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=timezone.utc)
            )
        return query.order_by(Decision.created_at.desc()).all()
