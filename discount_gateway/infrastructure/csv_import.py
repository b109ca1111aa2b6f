"""CSV ingestion of vendor invoices"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from io import BytesIO
from typing import Dict, List, Optional

import pandas as pd

from discount_gateway.domain.exceptions import (
    ImportFileError,
    InvalidInvoiceRowError,
    InvalidRateError,
    MalformedTermsError,
)
from discount_gateway.domain.models import DiscountSchedule, RateType
from discount_gateway.domain.scenarios import validate_rate
from discount_gateway.domain.terms import parse_terms
from discount_gateway.utils.money import MAX_AMOUNT, MAX_RATE_PCT, round_money, round_rate

REQUIRED_COLUMNS = {"vendor", "invoice_number", "amount", "invoice_date", "due_date", "terms"}


@dataclass
class InvoiceRow:
    """Validated CSV row ready for evaluation"""

    vendor: str
    invoice_number: str
    amount: Decimal
    currency: str
    invoice_date: date
    due_date: date
    terms: str
    schedule: DiscountSchedule
    user_rate: Optional[Decimal] = None
    rate_type: Optional[RateType] = None


def read_invoice_csv(content: bytes, max_rows: int) -> List[Dict[str, str]]:
    """
    Read an uploaded CSV into raw string rows.

    Headers are matched case-insensitively; cells are trimmed and blank
    cells become empty strings.

    Raises:
        ImportFileError: empty/unparseable file, missing required columns,
            or more than max_rows rows
    """
    try:
        df = pd.read_csv(BytesIO(content), dtype=str, keep_default_na=False, skip_blank_lines=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise ImportFileError(f"Unreadable CSV file: {e}") from e

    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ImportFileError(f"Missing required columns: {', '.join(sorted(missing))}")

    if len(df) > max_rows:
        raise ImportFileError(f"File has {len(df)} rows; at most {max_rows} allowed")

    return [
        {column: value.strip() for column, value in record.items()}
        for record in df.to_dict(orient="records")
    ]


def _required(row: Dict[str, str], column: str) -> str:
    value = row.get(column) or ""
    if not value:
        raise InvalidInvoiceRowError(f"Missing {column}")
    return value


def _parse_date(row: Dict[str, str], column: str) -> date:
    try:
        return date.fromisoformat(_required(row, column))
    except ValueError as e:
        raise InvalidInvoiceRowError(f"Invalid {column}: {row.get(column)!r}") from e


def parse_invoice_row(row: Dict[str, str], default_currency: str) -> InvoiceRow:
    """
    Validate one raw CSV row.

    Raises:
        MalformedTermsError: terms match neither supported grammar
        InvalidRateError: user_rate/rate_type present but invalid
        InvalidInvoiceRowError: any other missing or malformed field
    """
    terms = _required(row, "terms")
    schedule = parse_terms(terms)
    if schedule is None:
        raise MalformedTermsError(terms)

    try:
        amount = Decimal(_required(row, "amount"))
    except InvalidOperation as e:
        raise InvalidInvoiceRowError(f"Invalid amount: {row.get('amount')!r}") from e
    if not amount.is_finite() or amount < 0:
        raise InvalidInvoiceRowError(f"Amount must be non-negative, got {amount}")
    if amount > MAX_AMOUNT:
        raise InvalidInvoiceRowError(f"Amount exceeds {MAX_AMOUNT}, got {amount}")
    # Evaluate on the stored precision so a later refresh reproduces the result
    amount = round_money(amount)

    user_rate = None
    rate_type = None
    raw_rate = row.get("user_rate") or ""
    raw_type = (row.get("rate_type") or "").upper()
    if raw_rate or raw_type:
        # validate_rate rejects a rate without a type and vice versa
        rate_input = validate_rate(raw_rate or None, raw_type or None)
        if rate_input.annual_rate_pct > MAX_RATE_PCT:
            raise InvalidRateError(f"Rate exceeds {MAX_RATE_PCT}, got {raw_rate}")
        user_rate = round_rate(rate_input.annual_rate_pct)
        rate_type = rate_input.rate_type

    return InvoiceRow(
        vendor=_required(row, "vendor"),
        invoice_number=_required(row, "invoice_number"),
        amount=amount,
        currency=(row.get("currency") or default_currency).upper(),
        invoice_date=_parse_date(row, "invoice_date"),
        due_date=_parse_date(row, "due_date"),
        terms=terms,
        schedule=schedule,
        user_rate=user_rate,
        rate_type=rate_type,
    )
