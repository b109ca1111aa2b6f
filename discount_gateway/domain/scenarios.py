"""Scenario engine - core business logic for early-payment decisions"""

from decimal import Decimal, InvalidOperation

from discount_gateway.domain.apr import DAYS_PER_YEAR
from discount_gateway.domain.exceptions import InvalidRateError
from discount_gateway.domain.models import (
    Action,
    RateInput,
    RateType,
    RecommendationResult,
    ScenarioBreakdown,
)
from discount_gateway.utils.money import to_decimal, two_places


def validate_rate(user_rate, rate_type) -> RateInput:
    """
    Check a user-supplied rate before it reaches the engine.

    Raises:
        InvalidRateError: rate is not a finite non-negative number, or the
            rate type is neither INVESTMENT nor BORROWING
    """
    try:
        rate = to_decimal(user_rate)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidRateError(f"Rate must be a number, got {user_rate!r}") from e

    if not rate.is_finite() or rate < 0:
        raise InvalidRateError(f"Rate must be a non-negative number, got {user_rate!r}")

    try:
        parsed_type = RateType(rate_type)
    except ValueError as e:
        raise InvalidRateError(
            f"Rate type must be INVESTMENT or BORROWING, got {rate_type!r}"
        ) from e

    return RateInput(annual_rate_pct=rate, rate_type=parsed_type)


def daily_rate(annual_rate_pct: Decimal) -> Decimal:
    """Annual percentage → simple daily rate as a fraction"""
    return annual_rate_pct / DAYS_PER_YEAR / 100


def calculate_discount_savings(amount: Decimal, discount_pct: Decimal) -> Decimal:
    return amount * discount_pct / 100


def calculate_investment_return(amount: Decimal, annual_rate_pct: Decimal, days_to_hold: int) -> Decimal:
    """Simple interest earned by keeping the cash invested for days_to_hold"""
    return amount * daily_rate(annual_rate_pct) * days_to_hold


def calculate_borrowing_cost(
    amount: Decimal,
    annual_rate_pct: Decimal,
    discount_days: int,
    net_days: int,
) -> Decimal:
    """Simple interest on funds borrowed from the discount deadline to the net due date"""
    days_of_borrowing = net_days - discount_days
    return amount * daily_rate(annual_rate_pct) * days_of_borrowing


def _investment_scenario(amount: Decimal, discount_pct: Decimal, discount_days: int, rate: Decimal) -> RecommendationResult:
    discount_savings = calculate_discount_savings(amount, discount_pct)
    # Cash stays invested for the discount window when the discount is skipped
    investment_return = calculate_investment_return(amount, rate, discount_days)

    scenarios = ScenarioBreakdown(
        pay_early=discount_savings,
        hold=investment_return,
        borrow=None,
    )

    # Strict: a tie keeps the cash position
    if discount_savings > investment_return:
        return RecommendationResult(
            action=Action.TAKE,
            reason=(
                f"Take discount: save {two_places(discount_savings)} "
                f"vs earning {two_places(investment_return)} from investment"
            ),
            scenarios=scenarios,
        )

    return RecommendationResult(
        action=Action.HOLD,
        reason=(
            f"Hold cash: earn {two_places(investment_return)} from investment "
            f"vs {two_places(discount_savings)} discount"
        ),
        scenarios=scenarios,
    )


def _borrowing_scenario(
    amount: Decimal,
    discount_pct: Decimal,
    discount_days: int,
    net_days: int,
    rate: Decimal,
) -> RecommendationResult:
    discount_savings = calculate_discount_savings(amount, discount_pct)
    borrowing_cost = calculate_borrowing_cost(amount, rate, discount_days, net_days)
    net_benefit = discount_savings - borrowing_cost

    scenarios = ScenarioBreakdown(
        pay_early=discount_savings,
        hold=Decimal(0),
        borrow=borrowing_cost,
    )

    if net_benefit > 0:
        return RecommendationResult(
            action=Action.BORROW,
            reason=(
                f"Borrow to pay early: net benefit {two_places(net_benefit)} "
                f"(save {two_places(discount_savings)} - borrow cost {two_places(borrowing_cost)})"
            ),
            scenarios=scenarios,
        )

    return RecommendationResult(
        action=Action.HOLD,
        reason=(
            f"Don't borrow: borrow cost {two_places(borrowing_cost)} "
            f"leaves no benefit over discount {two_places(discount_savings)}"
        ),
        scenarios=scenarios,
    )


def recommend(
    amount,
    discount_pct,
    discount_days: int,
    net_days: int,
    user_rate,
    rate_type,
) -> RecommendationResult:
    """
    Main entry point: compare paying early, holding cash and borrowing.

    Scenarios:
    - INVESTMENT rate: discount savings vs investment return over the
      discount window → TAKE or HOLD
    - BORROWING rate: discount savings vs borrowing cost over the
      post-discount window → BORROW or HOLD

    Ties always resolve to HOLD. Identical inputs produce identical
    results, reason string included.

    Raises:
        InvalidRateError: negative rate or unknown rate type
    """
    rate_input = validate_rate(user_rate, rate_type)
    amount = to_decimal(amount)
    discount_pct = to_decimal(discount_pct)

    if rate_input.rate_type is RateType.INVESTMENT:
        return _investment_scenario(amount, discount_pct, discount_days, rate_input.annual_rate_pct)

    return _borrowing_scenario(amount, discount_pct, discount_days, net_days, rate_input.annual_rate_pct)
