"""Payment terms parser for the fixed discount-term grammar"""

import re
from decimal import Decimal
from typing import Optional

from discount_gateway.domain.models import DiscountSchedule

# "2/10net30" after normalization
DISCOUNT_TERMS = re.compile(r"^(\d{1,2})/(\d{1,2})net(\d{1,3})$")
# "n/30": no discount
NET_ONLY_TERMS = re.compile(r"^n/(\d{1,3})$")


def normalize_terms(raw: str) -> str:
    """Lower-case and strip all whitespace"""
    return re.sub(r"\s+", "", raw.lower())


def parse_terms(raw: str) -> Optional[DiscountSchedule]:
    """
    Parse strings like "2/10 net 30", "1/10 NET45" or "n/30".

    Returns None for anything else, including discount terms whose
    numbers are inconsistent ("5/30 net 10"). Never raises.
    """
    if not isinstance(raw, str):
        return None

    normalized = normalize_terms(raw)

    match = DISCOUNT_TERMS.match(normalized)
    if match:
        discount_pct, discount_days, net_days = (int(g) for g in match.groups())
        if discount_pct > 0 and discount_days > 0 and net_days > discount_days:
            return DiscountSchedule(
                discount_pct=Decimal(discount_pct),
                discount_days=discount_days,
                net_days=net_days,
            )

    match = NET_ONLY_TERMS.match(normalized)
    if match and int(match.group(1)) > 0:
        return DiscountSchedule(
            discount_pct=Decimal(0),
            discount_days=0,
            net_days=int(match.group(1)),
        )

    return None
