"""Decimal helpers for monetary and rate arithmetic"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
RATE_STEP = Decimal("0.0001")

# Largest values the Numeric(14,2) amount and Numeric(8,4) rate columns hold
MAX_AMOUNT = Decimal("999999999999.99")
MAX_RATE_PCT = Decimal("9999.9999")


def to_decimal(value) -> Decimal:
    """Convert int/float/str/Decimal to Decimal (floats via their repr, not binary value)"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_rate(value: Decimal) -> Decimal:
    """Round an annual rate to the precision it is stored with"""
    return value.quantize(RATE_STEP, rounding=ROUND_HALF_UP)


def two_places(value: Decimal) -> str:
    """Render with exactly two decimals, half-up (no currency symbol)"""
    return str(round_money(value))
