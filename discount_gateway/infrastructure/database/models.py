"""SQLAlchemy ORM models for invoices and the decision audit log"""

import uuid
from sqlalchemy import Column, Date, DateTime, Integer, JSON, Numeric, Text, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Invoice(Base):
    """Imported vendor invoice with its latest recommendation"""

    __tablename__ = "invoice"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    vendor = Column(Text, nullable=False)
    invoice_number = Column(Text, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(Text, nullable=False, default="USD")
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    # Raw terms string is the source of truth; the schedule is re-parsed on demand
    terms = Column(Text, nullable=False)
    discount_deadline = Column(Date, nullable=True)
    implied_apr_pct = Column(Numeric(12, 4), nullable=False, default=0)

    # Optional per-invoice rate (both set or both null)
    user_rate = Column(Numeric(8, 4), nullable=True)
    rate_type = Column(Text, nullable=True)

    recommendation = Column(Text, nullable=False)  # TAKE | HOLD | BORROW
    reason = Column(Text, nullable=False)
    discount_savings = Column(Numeric(14, 2), nullable=False, default=0)
    investment_return = Column(Numeric(14, 2), nullable=False, default=0)
    borrowing_cost = Column(Numeric(14, 2), nullable=True)

    status = Column(Text, nullable=False, default="PENDING", index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())


class Decision(Base):
    """User decision over one or more invoices (audit log)"""

    __tablename__ = "decision"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    invoice_ids = Column(JSON, nullable=False)
    action = Column(Text, nullable=False)
    invoice_count = Column(Integer, nullable=False)
    estimated_savings = Column(Numeric(14, 2), nullable=False, default=0)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
