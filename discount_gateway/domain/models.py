"""Domain models - pure Python dataclasses representing trade-credit entities"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class Action(str, Enum):
    """Recommended treatment of an invoice"""

    TAKE = "TAKE"  # pay early from own cash
    HOLD = "HOLD"  # pay at net due date
    BORROW = "BORROW"  # borrow to pay early


class RateType(str, Enum):
    """What the user-supplied annual rate represents"""

    INVESTMENT = "INVESTMENT"  # return idle cash would otherwise earn
    BORROWING = "BORROWING"  # cost of raising cash


class UrgencyStatus(str, Enum):
    URGENT = "urgent"
    WARNING = "warning"
    NORMAL = "normal"
    EXPIRED = "expired"


@dataclass(frozen=True)
class DiscountSchedule:
    """Parsed payment terms, e.g. 2/10 net 30"""

    discount_pct: Decimal
    discount_days: int
    net_days: int

    @property
    def has_discount(self) -> bool:
        return self.discount_pct > 0


@dataclass(frozen=True)
class RateInput:
    """User-configured capital rate"""

    annual_rate_pct: Decimal
    rate_type: RateType


@dataclass(frozen=True)
class ScenarioBreakdown:
    """
    Raw scenario values behind a recommendation.

    pay_early: amount saved by taking the discount
    hold: investment return from holding cash (0 when not evaluated)
    borrow: cost of borrowing to capture the discount (None for INVESTMENT rates)
    """

    pay_early: Decimal
    hold: Decimal
    borrow: Optional[Decimal]


@dataclass(frozen=True)
class RecommendationResult:
    """Output of a single evaluation"""

    action: Action
    reason: str
    scenarios: ScenarioBreakdown
