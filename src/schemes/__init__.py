"""
Preset scheme catalogs.

Three categories are available: ``basic`` and ``advanced`` allocation
schemes for the standard model, and ``buy_to_earn`` parameter presets.
Every accessor hands out deep copies so callers can modify what they get.
"""

import copy
from typing import Any

from payout_exceptions import ConfigurationError
from schemes import advanced, basic, buy_to_earn

CATEGORIES = {
    "basic": basic.SCHEMES,
    "advanced": advanced.SCHEMES,
    "buy_to_earn": buy_to_earn.SCHEMES,
}

SCHEMES_CATALOG: dict[str, dict[str, Any]] = {
    "basic": {
        "name": "Basic Schemes",
        "description": "Simple revenue sharing schemes for common use cases",
        "schemes": {
            "AUTHOR_CENTRIC": {"title": "Author Centric", "description": "Author gets 80%, platform gets 20%"},
            "EQUAL_SPLIT": {"title": "Equal Split", "description": "Equal 50-50 split between author and platform"},
            "PLATFORM_FRIENDLY": {
                "title": "Platform Friendly",
                "description": "Platform gets a larger share (60%) than the author (40%)",
            },
            "COMMUNITY_EQUAL": {
                "title": "Community Equal",
                "description": "Community-focused with buyers getting 50% of revenue",
            },
            "EARLY_SUPPORTERS": {
                "title": "Early Supporters",
                "description": "Rewards the first 1000 buyers with 30% of revenue",
            },
            "LATE_SUPPORTERS": {
                "title": "Late Supporters",
                "description": "Rewards the last 1000 buyers with 30% of revenue",
            },
            "MINIMAL_AUTHOR": {"title": "Minimal Author", "description": "Minimal share for the author (5%)"},
            "COMMUNITY_GROWTH": {
                "title": "Community Growth",
                "description": "Rewards early buyers (20%) with remaining revenue going to all buyers",
            },
        },
    },
    "advanced": {
        "name": "Advanced Schemes",
        "description": "More complex revenue sharing schemes for specific use cases",
        "schemes": {
            "SLIDING_WINDOW": {
                "title": "Sliding Window",
                "description": "Different allocations for different buyer groups with emphasis on late buyers",
            },
            "EARLY_ADOPTER_TIERS": {
                "title": "Early Adopter Tiers",
                "description": "Multi-tier scheme that heavily rewards early buyers",
            },
            "CREATOR_ECONOMY": {
                "title": "Creator Economy",
                "description": "Creator-focused scheme with 60% going to the author",
            },
            "COMMUNITY_DRIVEN": {
                "title": "Community Driven",
                "description": "Most revenue goes back to the community of buyers (60%)",
            },
            "ICO_MODEL": {
                "title": "ICO Model",
                "description": "Similar to token sales with tiered early adopter rewards",
            },
            "CROWDFUNDING_MODEL": {
                "title": "Crowdfunding Model",
                "description": "Author gets 75% of revenue, similar to crowdfunding platforms",
            },
            "DYNAMIC_TIERED": {
                "title": "Dynamic Tiered",
                "description": "Last buyers get a larger share (40%) than early buyers (10%)",
            },
            "PLATFORM_GROWTH": {
                "title": "Platform Growth",
                "description": "Platform-focused scheme with 45% of revenue going to the platform",
            },
        },
    },
    "buy_to_earn": {
        "name": "Buy-to-Earn Schemes",
        "description": (
            "Schemes for the Buy-to-Earn model with initial investment phase "
            "and dual-pool distribution"
        ),
        "schemes": {
            "STANDARD": {
                "title": "Standard Buy-to-Earn",
                "description": "Balanced distribution with equal shares between creator, platform and promotion",
            },
            "CREATOR_FOCUSED": {
                "title": "Creator Focused",
                "description": "Prioritizes creator income with 20% share for the creator",
            },
            "PLATFORM_FOCUSED": {
                "title": "Platform Focused",
                "description": "Prioritizes platform income with 20% share for the platform",
            },
            "EARLY_PAYBACK": {
                "title": "Early Payback Priority",
                "description": "Optimized for faster early investor payback with 95% priority",
            },
            "EQUAL_DISTRIBUTION": {
                "title": "Equal Distribution",
                "description": "More equal revenue distribution among all investors (25% priority)",
            },
            "HIGH_PAYBACK": {
                "title": "High Payback Goal",
                "description": "Larger payback goal (3x) for investors with higher total returns",
            },
            "PROMOTION_FOCUSED": {
                "title": "Promotion Focused",
                "description": "Higher allocation for marketing and promotional activities (25%)",
            },
            "SMALL_INVESTMENT": {
                "title": "Small Initial Investment",
                "description": "Lower initial investment (100,000) for smaller projects",
            },
            "LARGE_INVESTMENT": {
                "title": "Large Initial Investment",
                "description": "Higher initial investment (500,000) for larger projects",
            },
            "QUICK_PAYBACK": {
                "title": "Quick Payback",
                "description": "Faster ROI for investors with 1.5x payback ratio",
            },
            "BUYER_FOCUSED": {
                "title": "Buyer Focused",
                "description": "Maximizes buyer returns with lower platform/creator shares",
            },
        },
    },
}


def get_scheme_by_name(name: str) -> dict[str, Any] | None:
    """
    Look up a preset by name across all categories.

    Returns:
        A copy of the preset, or None when no category has it
    """
    for presets in CATEGORIES.values():
        if name in presets:
            return copy.deepcopy(presets[name])
    return None


def get_scheme_category(name: str) -> str | None:
    """Category a preset belongs to, or None."""
    for category, presets in CATEGORIES.items():
        if name in presets:
            return category
    return None


def _entry(category: str, name: str, scheme: dict[str, Any]) -> dict[str, Any]:
    entry = {"id": name, "scheme": copy.deepcopy(scheme), "category": category}
    entry.update(SCHEMES_CATALOG[category]["schemes"].get(name, {}))
    return entry


def get_all_schemes(category: str | None = None) -> list[dict[str, Any]]:
    """
    List presets with their catalog metadata.

    Args:
        category: Restrict to one category (basic, advanced, buy_to_earn)

    Returns:
        List of {"id", "scheme", "category", "title", "description"}
    """
    categories = [category] if category else list(CATEGORIES)
    entries = []
    for name in categories:
        if name not in CATEGORIES:
            return []
        entries.extend(_entry(name, key, scheme) for key, scheme in CATEGORIES[name].items())
    return entries


def get_buy_to_earn_schemes() -> list[dict[str, Any]]:
    """Buy-to-earn presets with metadata and derived shares."""
    entries = get_all_schemes("buy_to_earn")
    for entry in entries:
        entry.update(buy_to_earn.derived_shares(entry["scheme"]))
    return entries


def create_custom_buy_to_earn_scheme(**params: Any) -> dict[str, Any]:
    """Validated custom buy-to-earn preset; see buy_to_earn.create_custom_scheme."""
    unknown = sorted(set(params) - set(buy_to_earn.STANDARD))
    if unknown:
        raise ConfigurationError(f"Unknown buy-to-earn parameters: {', '.join(unknown)}")
    return buy_to_earn.create_custom_scheme(**params)


__all__ = [
    "SCHEMES_CATALOG",
    "CATEGORIES",
    "advanced",
    "basic",
    "buy_to_earn",
    "create_custom_buy_to_earn_scheme",
    "get_all_schemes",
    "get_buy_to_earn_schemes",
    "get_scheme_by_name",
    "get_scheme_category",
]
