"""
Revenue Share Engine - Buy-to-Earn Simulator

Two-phase investment model:

- Prepayment phase: the first ``ceil(initial_investment / unit_price)``
  sales fund the creator's upfront costs. The creator receives the whole
  initial investment; nothing is split.
- Distribution phase: every later sale splits its price into creator,
  platform, promotion and buyer shares. The buyer share is divided into
  two pools each round:

  * the shared pool, paid evenly to every token sold so far
  * the non-payback pool, paid evenly only to tokens whose cumulative
    earnings are still below the payback goal

A token is the buyer at one sale position. The simulator tracks every
token's cumulative earnings and records a snapshot for one tracked token
the first time it reaches the payback goal.
"""

import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from math_utils import DEFAULT_ROUNDING_DIGITS, is_numeric, round_numeric_leaves
from monitoring.logging import get_logger
from monitoring.metrics import metrics, timed
from payout_exceptions import ConfigurationError
from sales_ledger import Sale, coerce_sales, sort_sales

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_CREATOR_SHARE = 10.0
DEFAULT_PLATFORM_SHARE = 10.0
DEFAULT_PROMOTION_SHARE = 10.0
DEFAULT_PAYBACK_RATIO = 2.0
DEFAULT_NON_PAYBACK_POOL_SHARE_PERCENT = 60.0

# Accepted spellings of each parameter in mappings (snake_case first)
_PARAM_ALIASES = {
    "initial_investment": ("initial_investment", "initialInvestment"),
    "unit_price": ("unit_price", "unitPrice"),
    "creator_share": ("creator_share", "creatorShare"),
    "platform_share": ("platform_share", "platformShare"),
    "promotion_share": ("promotion_share", "promotionShare"),
    "payback_ratio": ("payback_ratio", "paybackRatio"),
    "non_payback_pool_share_percent": ("non_payback_pool_share_percent", "nonPaybackPoolSharePercent"),
}


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class BuyToEarnParams:
    """
    Parameters of a buy-to-earn campaign.

    Shares are percentages of the unit price. Range checks on shares and
    the payback ratio belong to the preset factory; the simulator accepts
    any numeric values so exploratory ratios below 1 stay usable.
    """

    initial_investment: float
    unit_price: float
    creator_share: float = DEFAULT_CREATOR_SHARE
    platform_share: float = DEFAULT_PLATFORM_SHARE
    promotion_share: float = DEFAULT_PROMOTION_SHARE
    payback_ratio: float = DEFAULT_PAYBACK_RATIO
    non_payback_pool_share_percent: float = DEFAULT_NON_PAYBACK_POOL_SHARE_PERCENT

    def __post_init__(self):
        for name in _PARAM_ALIASES:
            if not is_numeric(getattr(self, name)):
                raise ConfigurationError(f"{name} must be a number", parameter=name)
        if self.initial_investment <= 0:
            raise ConfigurationError(
                "Initial investment must be a positive number", parameter="initial_investment"
            )
        if self.unit_price <= 0:
            raise ConfigurationError("Unit price must be a positive number", parameter="unit_price")
        if not math.isfinite(self.initial_investment / self.unit_price):
            raise ConfigurationError(
                "Initial investment is too large for the unit price", parameter="initial_investment"
            )

    @property
    def buyers_share(self) -> float:
        return 100 - self.creator_share - self.platform_share - self.promotion_share

    @property
    def payback_pool_share_percent(self) -> float:
        return 100 - self.non_payback_pool_share_percent

    @property
    def payback_goal(self) -> float:
        return self.unit_price * self.payback_ratio

    @property
    def num_prepayers(self) -> int:
        return math.ceil(self.initial_investment / self.unit_price)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "initial_investment": self.initial_investment,
            "unit_price": self.unit_price,
            "creator_share": self.creator_share,
            "platform_share": self.platform_share,
            "promotion_share": self.promotion_share,
            "payback_ratio": self.payback_ratio,
            "non_payback_pool_share_percent": self.non_payback_pool_share_percent,
            "buyers_share": self.buyers_share,
            "payback_goal": self.payback_goal,
            "num_prepayers": self.num_prepayers,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], unit_price: float | None = None) -> "BuyToEarnParams":
        """
        Build parameters from a mapping using snake_case or camelCase keys.

        Args:
            data: Parameter mapping (preset or user supplied)
            unit_price: Unit price to use when the mapping carries none

        Raises:
            ConfigurationError: If a required parameter is missing or invalid
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Buy-to-earn parameters must be an object", parameter="buy_to_earn")

        kwargs = {}
        for name, aliases in _PARAM_ALIASES.items():
            for alias in aliases:
                if alias in data:
                    kwargs[name] = data[alias]
                    break

        if "unit_price" not in kwargs and unit_price is not None:
            kwargs["unit_price"] = unit_price

        for required in ("initial_investment", "unit_price"):
            if required not in kwargs:
                raise ConfigurationError(f"{required} is required for buy-to-earn", parameter=required)

        return cls(**kwargs)


@dataclass
class PayoutResult:
    """Outcome of a buy-to-earn simulation, seen from one tracked token."""

    creator: float
    platform: float
    promotion: float
    buyer: float
    prepayers_count: int
    paid_back_count: int
    payback_point: int | None
    total_revenue_at_payback: float
    creator_revenue_at_payback: float
    platform_revenue_at_payback: float
    payback_goal: float
    actual_initial_investment: float

    @property
    def has_paid_back(self) -> bool:
        return self.payback_point is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "creator": self.creator,
            "platform": self.platform,
            "promotion": self.promotion,
            "buyer": self.buyer,
            "prepayers_count": self.prepayers_count,
            "paid_back_count": self.paid_back_count,
            "payback_point": self.payback_point,
            "total_revenue_at_payback": self.total_revenue_at_payback,
            "creator_revenue_at_payback": self.creator_revenue_at_payback,
            "platform_revenue_at_payback": self.platform_revenue_at_payback,
            "payback_goal": self.payback_goal,
            "actual_initial_investment": self.actual_initial_investment,
        }

    def rounded(self, digits: int = DEFAULT_ROUNDING_DIGITS) -> "PayoutResult":
        """Copy with every float field rounded; counts and positions untouched."""
        return PayoutResult(**round_numeric_leaves(self.to_dict(), digits))


# =============================================================================
# Simulation
# =============================================================================


def _validate_tracked_position(position: Any) -> int:
    if isinstance(position, bool) or not isinstance(position, int) or position < 1:
        raise ConfigurationError(
            "Tracked token position must be a positive integer",
            parameter="tracked_token_position",
            details={"value": repr(position)},
        )
    return position


def _short_circuit(params: BuyToEarnParams) -> PayoutResult:
    return PayoutResult(
        creator=float(params.initial_investment),
        platform=0.0,
        promotion=0.0,
        buyer=0.0,
        prepayers_count=params.num_prepayers,
        paid_back_count=0,
        payback_point=None,
        total_revenue_at_payback=0.0,
        creator_revenue_at_payback=0.0,
        platform_revenue_at_payback=0.0,
        payback_goal=float(params.payback_goal),
        actual_initial_investment=float(params.initial_investment),
    )


@timed("buy_to_earn_simulation_ms")
def simulate_buy_to_earn(
    params: BuyToEarnParams,
    sales: list[Sale] | list[dict[str, Any]],
    tracked_token_position: int = 1,
    round_results: bool = False,
    digits: int = DEFAULT_ROUNDING_DIGITS,
) -> PayoutResult:
    """
    Replay sales under the dual-pool buy-to-earn model.

    Each round rescans every token sold so far; the rescan is vectorized
    with numpy but adds the same float amounts per token in the same
    order as a scalar loop would.

    Args:
        params: Campaign parameters
        sales: Ledger snapshot (Sale objects or dicts); never mutated
        tracked_token_position: 1-based sale position to report on
        round_results: Round float fields of the result
        digits: Fractional digits used when rounding

    Returns:
        PayoutResult for the tracked token

    Raises:
        ConfigurationError: If the tracked position is not a positive integer
        InvalidSaleError: If a sale is malformed
    """
    if isinstance(params, dict):
        params = BuyToEarnParams.from_dict(params)
    tracked = _validate_tracked_position(tracked_token_position)
    sales = coerce_sales(sales)

    total_sales = len(sales)
    num_prepayers = params.num_prepayers

    logger.debug(
        "Simulating buy-to-earn",
        extra={"total_sales": total_sales, "prepayers": num_prepayers, "tracked_token": tracked},
    )

    if total_sales < num_prepayers:
        metrics.increment("buy_to_earn_simulations_total", labels={"outcome": "underfunded"})
        logger.info(
            "Campaign below funding floor, creator keeps initial investment",
            extra={"total_sales": total_sales, "prepayers": num_prepayers},
        )
        result = _short_circuit(params)
        return result.rounded(digits) if round_results else result

    # Tokens are identified by position in timestamp order
    sales = sort_sales(sales)

    unit_price = params.unit_price
    payback_goal = params.payback_goal
    creator_amount = unit_price * (params.creator_share / 100)
    platform_amount = unit_price * (params.platform_share / 100)
    promotion_amount = unit_price * (params.promotion_share / 100)
    buyers_amount = unit_price * (params.buyers_share / 100)
    non_payback_pool_amount = buyers_amount * (params.non_payback_pool_share_percent / 100)
    shared_pool_amount = buyers_amount * (params.payback_pool_share_percent / 100)

    creator_revenue = params.initial_investment
    platform_revenue = 0
    promotion_revenue = 0
    total_revenue = params.initial_investment

    # Index 0 unused so that index == sale position
    earnings = np.zeros(total_sales + 1, dtype=np.float64)
    paid_back_count = 0

    payback_point = None
    total_revenue_at_payback = 0
    creator_revenue_at_payback = 0
    platform_revenue_at_payback = 0

    for current_sale in range(num_prepayers + 1, total_sales + 1):
        total_revenue += unit_price
        creator_revenue += creator_amount
        platform_revenue += platform_amount
        promotion_revenue += promotion_amount

        num_tokens = current_sale - 1
        if num_tokens <= 0:
            continue

        tokens = earnings[1:num_tokens + 1]
        not_paid_back = tokens < payback_goal
        not_paid_back_count = int(np.count_nonzero(not_paid_back))

        non_payback_per_token = (
            non_payback_pool_amount / not_paid_back_count if not_paid_back_count > 0 else 0.0
        )
        shared_per_token = shared_pool_amount / num_tokens

        tokens += shared_per_token + np.where(not_paid_back, non_payback_per_token, 0.0)
        paid_back_count = int(np.count_nonzero(tokens >= payback_goal))

        if payback_point is None and tracked <= num_tokens and earnings[tracked] >= payback_goal:
            payback_point = current_sale
            total_revenue_at_payback = total_revenue
            creator_revenue_at_payback = creator_revenue
            platform_revenue_at_payback = platform_revenue
            logger.info(
                "Tracked token reached payback",
                extra={"token": tracked, "payback_point": current_sale},
            )

    buyer_revenue = float(earnings[tracked]) if tracked <= total_sales else 0.0

    metrics.increment("buy_to_earn_simulations_total", labels={"outcome": "simulated"})

    result = PayoutResult(
        creator=float(creator_revenue),
        platform=float(platform_revenue),
        promotion=float(promotion_revenue),
        buyer=buyer_revenue,
        prepayers_count=num_prepayers,
        paid_back_count=paid_back_count,
        payback_point=payback_point,
        total_revenue_at_payback=float(total_revenue_at_payback),
        creator_revenue_at_payback=float(creator_revenue_at_payback),
        platform_revenue_at_payback=float(platform_revenue_at_payback),
        payback_goal=float(payback_goal),
        actual_initial_investment=float(params.initial_investment),
    )
    return result.rounded(digits) if round_results else result
