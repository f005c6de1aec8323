"""
Revenue Share Engine - Payback Estimator

Closed-form forecast of when a buy-to-earn token reaches its payback goal.
This is a curve fit, not a solution of the simulator's recurrence; its
answers are advisory and are not expected to match a simulated payback
point.
"""

import math
from dataclasses import dataclass
from typing import Any

from math_utils import is_numeric, round_to_digits
from monitoring.logging import get_logger
from monitoring.metrics import counted
from payout_exceptions import ConfigurationError

logger = get_logger(__name__)

BASE_MULTIPLIER = 1000

# Token position bands
EARLY_TOKEN_LIMIT = 100
MID_TOKEN_LIMIT = 500

# Priority (non-payback pool fraction) thresholds
HIGH_PRIORITY = 0.9
MEDIUM_PRIORITY = 0.7
LOW_PRIORITY = 0.4

# Never forecast payback sooner than this many sales after the token itself
MIN_SALES_AFTER_TOKEN = 100


@dataclass
class PaybackEstimate:
    """Forecast for one token."""

    payback_sale: int
    accumulated_earnings: float
    roi: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "payback_sale": self.payback_sale,
            "accumulated_earnings": self.accumulated_earnings,
            "roi": self.roi,
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def token_position_factor(token_number: int, priority: float) -> float:
    """
    Relative payback speed of a token by its sale position.

    Early tokens grow linearly, mid tokens logarithmically; late tokens
    depend on how strongly the non-payback pool favors unpaid tokens.
    """
    if token_number <= EARLY_TOKEN_LIMIT:
        return 0.8 + token_number / 500

    if token_number <= MID_TOKEN_LIMIT:
        return 1.0 + math.log10(token_number / 100) * 0.5

    late_base = 1.2 + math.log10(token_number / 500) * 0.3
    if priority >= HIGH_PRIORITY:
        return late_base * 0.8
    if priority >= MEDIUM_PRIORITY:
        return late_base * 0.9
    return late_base * 1.1


@counted("payback_estimates_total")
def estimate_token_payback(
    token_number: int,
    token_price: float,
    payback_ratio: float,
    non_payback_pool_percent: float,
    buyers_share: float,
) -> PaybackEstimate:
    """
    Estimate the sale at which a token reaches payback.

    Args:
        token_number: 1-based sale position of the token
        token_price: Price paid for the token
        payback_ratio: Payback goal as a multiple of the price
        non_payback_pool_percent: Non-payback pool share as a fraction (0-1].
            Zero is rejected rather than forecasting an infinite payback sale.
        buyers_share: Buyers' share of each sale as a fraction (0-1]

    Returns:
        PaybackEstimate with the forecast sale, earnings at payback and ROI

    Raises:
        ConfigurationError: If an input is missing or would divide by zero
    """
    if isinstance(token_number, bool) or not isinstance(token_number, int) or token_number < 1:
        raise ConfigurationError("Token number must be a positive integer", parameter="token_number")
    for name, value in (
        ("token_price", token_price),
        ("payback_ratio", payback_ratio),
        ("non_payback_pool_percent", non_payback_pool_percent),
        ("buyers_share", buyers_share),
    ):
        if not is_numeric(value):
            raise ConfigurationError(f"{name} must be a number", parameter=name)
    if token_price <= 0:
        raise ConfigurationError("Token price must be positive", parameter="token_price")
    if non_payback_pool_percent <= 0:
        raise ConfigurationError(
            "Non-payback pool percent must be positive", parameter="non_payback_pool_percent"
        )
    if buyers_share <= 0:
        raise ConfigurationError("Buyers share must be positive", parameter="buyers_share")

    priority = non_payback_pool_percent
    factor = token_position_factor(token_number, priority)

    payback_sale: float = _round_half_up(
        BASE_MULTIPLIER * payback_ratio * (1 / buyers_share) * (1 / priority) * factor
    )

    if priority >= MEDIUM_PRIORITY and EARLY_TOKEN_LIMIT < token_number <= MID_TOKEN_LIMIT:
        payback_sale *= 1.1

    if priority <= LOW_PRIORITY and token_number > MID_TOKEN_LIMIT:
        payback_sale *= 1.15

    payback_sale = max(_round_half_up(payback_sale), token_number + MIN_SALES_AFTER_TOKEN)

    accumulated_earnings = token_price * payback_ratio
    roi = round_to_digits((accumulated_earnings / token_price) * 100 - 100, 2)

    logger.debug(
        "Estimated token payback",
        extra={"token": token_number, "payback_sale": payback_sale, "factor": round(factor, 4)},
    )

    return PaybackEstimate(
        payback_sale=payback_sale,
        accumulated_earnings=accumulated_earnings,
        roi=roi,
    )
