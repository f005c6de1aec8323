"""
Buy-to-earn parameter presets.

Presets carry everything except the unit price, which belongs to the
product. Combine one with a price through ``BuyToEarnParams.from_dict``.
"""

from typing import Any

from math_utils import is_numeric
from payout_exceptions import ConfigurationError


def _preset(
    initial_investment: float = 300000,
    creator_share: float = 10,
    platform_share: float = 10,
    promotion_share: float = 10,
    payback_ratio: float = 2,
    non_payback_pool_share_percent: float = 60,
) -> dict[str, Any]:
    return {
        "initial_investment": initial_investment,
        "creator_share": creator_share,
        "platform_share": platform_share,
        "promotion_share": promotion_share,
        "payback_ratio": payback_ratio,
        "non_payback_pool_share_percent": non_payback_pool_share_percent,
    }


STANDARD = _preset()
CREATOR_FOCUSED = _preset(creator_share=20, promotion_share=5)
PLATFORM_FOCUSED = _preset(platform_share=20, promotion_share=5)
# Unpaid tokens get almost all of the buyers' share
EARLY_PAYBACK = _preset(promotion_share=5, non_payback_pool_share_percent=95)
EQUAL_DISTRIBUTION = _preset(promotion_share=5, non_payback_pool_share_percent=25)
HIGH_PAYBACK = _preset(promotion_share=5, payback_ratio=3, non_payback_pool_share_percent=80)
PROMOTION_FOCUSED = _preset(promotion_share=25, non_payback_pool_share_percent=75)
SMALL_INVESTMENT = _preset(initial_investment=100000, non_payback_pool_share_percent=70)
LARGE_INVESTMENT = _preset(
    initial_investment=500000, creator_share=15, promotion_share=15, payback_ratio=2.5
)
QUICK_PAYBACK = _preset(promotion_share=5, payback_ratio=1.5, non_payback_pool_share_percent=90)
BUYER_FOCUSED = _preset(
    creator_share=8, platform_share=8, promotion_share=8, non_payback_pool_share_percent=75
)

SCHEMES = {
    "STANDARD": STANDARD,
    "CREATOR_FOCUSED": CREATOR_FOCUSED,
    "PLATFORM_FOCUSED": PLATFORM_FOCUSED,
    "EARLY_PAYBACK": EARLY_PAYBACK,
    "EQUAL_DISTRIBUTION": EQUAL_DISTRIBUTION,
    "HIGH_PAYBACK": HIGH_PAYBACK,
    "PROMOTION_FOCUSED": PROMOTION_FOCUSED,
    "SMALL_INVESTMENT": SMALL_INVESTMENT,
    "LARGE_INVESTMENT": LARGE_INVESTMENT,
    "QUICK_PAYBACK": QUICK_PAYBACK,
    "BUYER_FOCUSED": BUYER_FOCUSED,
}


def derived_shares(preset: dict[str, Any]) -> dict[str, float]:
    """Buyers' share and payback pool share implied by a preset."""
    return {
        "buyers_share": 100
        - preset["creator_share"]
        - preset["platform_share"]
        - preset["promotion_share"],
        "payback_pool_share_percent": 100 - preset["non_payback_pool_share_percent"],
    }


def create_custom_scheme(
    initial_investment: float = 300000,
    creator_share: float = 10,
    platform_share: float = 10,
    promotion_share: float = 10,
    payback_ratio: float = 2,
    non_payback_pool_share_percent: float = 60,
) -> dict[str, Any]:
    """
    Build a buy-to-earn preset from custom values.

    Raises:
        ConfigurationError: If a value is out of range
    """
    values = {
        "initial_investment": initial_investment,
        "creator_share": creator_share,
        "platform_share": platform_share,
        "promotion_share": promotion_share,
        "payback_ratio": payback_ratio,
        "non_payback_pool_share_percent": non_payback_pool_share_percent,
    }
    for name, value in values.items():
        if not is_numeric(value):
            raise ConfigurationError(f"{name} must be a number", parameter=name)

    if initial_investment <= 0:
        raise ConfigurationError(
            "Initial investment must be a positive number", parameter="initial_investment"
        )

    if creator_share < 0 or platform_share < 0 or promotion_share < 0:
        raise ConfigurationError("Share percentages cannot be negative", parameter="shares")

    if creator_share + platform_share + promotion_share > 100:
        raise ConfigurationError("Total share percentages cannot exceed 100%", parameter="shares")

    if payback_ratio < 1:
        raise ConfigurationError("Payback ratio must be at least 1.0", parameter="payback_ratio")

    if not 0 <= non_payback_pool_share_percent <= 100:
        raise ConfigurationError(
            "Non-payback pool share must be between 0 and 100",
            parameter="non_payback_pool_share_percent",
        )

    return _preset(**values)
