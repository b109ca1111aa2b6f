"""Discount deadlines and urgency classification"""

from datetime import date
from typing import Optional

from discount_gateway.domain.models import UrgencyStatus
from discount_gateway.utils.date_utils import add_calendar_days, days_between

URGENT_MAX_DAYS = 3
WARNING_MAX_DAYS = 7


def discount_deadline(invoice_date: date, discount_days: int) -> Optional[date]:
    """Last day to pay and still get the discount (None when terms carry no discount)"""
    if not discount_days or discount_days <= 0:
        return None
    return add_calendar_days(invoice_date, discount_days)


def days_until_deadline(deadline: Optional[date], today: date) -> int:
    """
    Calendar days left until the discount deadline.

    Datetimes are truncated to their day before subtracting, so a deadline
    later today yields 0. A missing deadline yields 0.
    """
    if deadline is None:
        return 0
    return days_between(today, deadline)


def is_deadline_passed(deadline: Optional[date], today: date) -> bool:
    """True only when the deadline day is strictly before today"""
    if deadline is None:
        return False
    return days_between(today, deadline) < 0


def urgency_status(days_until: int) -> UrgencyStatus:
    """
    Map days until deadline to an urgency band.

    Bands (inclusive):
    - < 0:  expired
    - 0-3:  urgent
    - 4-7:  warning
    - 8+:   normal
    """
    if days_until < 0:
        return UrgencyStatus.EXPIRED
    elif days_until <= URGENT_MAX_DAYS:
        return UrgencyStatus.URGENT
    elif days_until <= WARNING_MAX_DAYS:
        return UrgencyStatus.WARNING
    else:
        return UrgencyStatus.NORMAL
