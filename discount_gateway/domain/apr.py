"""Implied annual rate of early-payment discount terms"""

from decimal import Decimal
from typing import Optional

from discount_gateway.domain.models import DiscountSchedule

DAYS_PER_YEAR = Decimal(365)


def implied_apr_pct(schedule: Optional[DiscountSchedule]) -> Decimal:
    """
    Simple-interest annualization of skipping the discount.

    Formula: (d / (1 - d)) * (365 / (net_days - discount_days)) * 100
    where d = discount_pct / 100.

    Example:
        2/10 net 30 → (0.02 / 0.98) * (365 / 20) * 100 ≈ 37.24%
    """
    if schedule is None or not schedule.has_discount:
        return Decimal(0)

    d = schedule.discount_pct / 100
    # Positive for any schedule the parser accepts; pct is at most 99
    days = schedule.net_days - schedule.discount_days

    return (d / (1 - d)) * (DAYS_PER_YEAR / days) * 100
