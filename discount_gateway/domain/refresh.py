"""Re-evaluation rule for stored recommendations when today or the rate changes"""

from datetime import date
from decimal import Decimal
from typing import Optional

from discount_gateway.domain.deadlines import is_deadline_passed
from discount_gateway.domain.models import (
    Action,
    DiscountSchedule,
    RecommendationResult,
    ScenarioBreakdown,
)
from discount_gateway.domain.scenarios import calculate_discount_savings, recommend
from discount_gateway.utils.money import to_decimal

DEADLINE_PASSED_REASON = "Discount deadline passed; no discount available"
NO_RATE_REASON = "No rate provided; holding by default"


def refresh_recommendation(
    amount,
    schedule: DiscountSchedule,
    stored_deadline: Optional[date],
    today: date,
    user_rate=None,
    rate_type=None,
) -> RecommendationResult:
    """
    Recompute an invoice's recommendation for the given day.

    Order of precedence:
    1. Deadline passed → HOLD, the discount is gone whatever the rate
    2. Rate configured → scenario engine
    3. No rate → HOLD by default (no benchmark is ever assumed)

    Raises:
        InvalidRateError: a configured rate is negative or of unknown type
    """
    if is_deadline_passed(stored_deadline, today):
        return RecommendationResult(
            action=Action.HOLD,
            reason=DEADLINE_PASSED_REASON,
            scenarios=ScenarioBreakdown(pay_early=Decimal(0), hold=Decimal(0), borrow=None),
        )

    if user_rate is not None and rate_type is not None:
        return recommend(
            amount,
            schedule.discount_pct,
            schedule.discount_days,
            schedule.net_days,
            user_rate,
            rate_type,
        )

    return RecommendationResult(
        action=Action.HOLD,
        reason=NO_RATE_REASON,
        scenarios=ScenarioBreakdown(
            pay_early=calculate_discount_savings(to_decimal(amount), schedule.discount_pct),
            hold=Decimal(0),
            borrow=None,
        ),
    )
