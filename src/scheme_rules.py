"""
Revenue Share Engine - Scheme Rules

A scheme is a mapping from a stakeholder or buyer-group key to a rule
mapping such as ``{"percentage": 30, "count": 1000}``. Schemes are parsed
once into a closed set of rule variants so the allocator routes money by
variant instead of inspecting key names on every pass.

Routing (first match wins):
    1. key ``author``, ``platform`` or ``promotion`` -> FixedStakeholderRule
    2. truthy ``count``                              -> GroupRule
    3. key ``allBuyers`` or key starting ``buyers``  -> AllBuyersRule
    4. anything else                                 -> UnroutedRule
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from math_utils import is_numeric

# Keys routed to a single named stakeholder payout
FIXED_STAKEHOLDER_KEYS = ("author", "platform", "promotion")

# Stakeholder that absorbs an unclaimed remainder when no rule asks for it
PRIMARY_STAKEHOLDER = "author"

ALL_BUYERS_KEY = "allBuyers"
BUYERS_KEY_PREFIX = "buyers"


class RuleKind(Enum):
    """Routing variant of a parsed rule."""

    FIXED_STAKEHOLDER = "fixed_stakeholder"
    GROUP = "group"
    ALL_BUYERS = "all_buyers"
    UNROUTED = "unrouted"


@dataclass(frozen=True)
class Rule:
    """Common fields of every rule variant."""

    key: str
    percentage: float | None = None
    remainder: bool = False

    kind = RuleKind.UNROUTED

    @property
    def has_percentage(self) -> bool:
        return self.percentage is not None


@dataclass(frozen=True)
class FixedStakeholderRule(Rule):
    """Pays a single named stakeholder (author, platform or promotion)."""

    stakeholder: str = PRIMARY_STAKEHOLDER

    kind = RuleKind.FIXED_STAKEHOLDER


@dataclass(frozen=True)
class GroupRule(Rule):
    """Pays the first (or last, with ``from_end``) ``count`` sales evenly."""

    count: int = 0
    from_end: bool = False

    kind = RuleKind.GROUP


@dataclass(frozen=True)
class AllBuyersRule(Rule):
    """Pays every sale evenly."""

    kind = RuleKind.ALL_BUYERS


@dataclass(frozen=True)
class UnroutedRule(Rule):
    """Key the allocator does not recognize; its share is counted but not paid."""

    kind = RuleKind.UNROUTED


def parse_rule(key: str, raw: dict[str, Any]) -> Rule:
    """
    Turn one raw scheme entry into a rule variant.

    Missing or malformed fields mean "does not apply": a non-numeric
    percentage is ignored, a non-truthy count never makes a group.

    Args:
        key: Scheme key (stakeholder name or group label)
        raw: Rule mapping

    Returns:
        The matching rule variant
    """
    if not isinstance(raw, dict):
        raw = {}

    percentage = raw.get("percentage")
    percentage = float(percentage) if is_numeric(percentage) else None
    remainder = bool(raw.get("remainder", False))

    if key in FIXED_STAKEHOLDER_KEYS:
        return FixedStakeholderRule(key=key, percentage=percentage, remainder=remainder, stakeholder=key)

    count = raw.get("count")
    if is_numeric(count) and count:
        return GroupRule(
            key=key,
            percentage=percentage,
            remainder=remainder,
            count=int(count),
            from_end=bool(raw.get("fromEnd", False)),
        )

    if key == ALL_BUYERS_KEY or key.startswith(BUYERS_KEY_PREFIX):
        return AllBuyersRule(key=key, percentage=percentage, remainder=remainder)

    return UnroutedRule(key=key, percentage=percentage, remainder=remainder)


def parse_scheme(scheme: dict[str, Any]) -> list[Rule]:
    """Parse every entry of a scheme, preserving its key order."""
    return [parse_rule(key, raw) for key, raw in scheme.items()]


def allocated_percentage(rules: list[Rule]) -> float:
    """Sum of every explicit percentage in the scheme."""
    return sum(rule.percentage for rule in rules if rule.has_percentage)


def remainder_rules(rules: list[Rule]) -> list[Rule]:
    """Rules that claim a share of the unallocated remainder."""
    return [rule for rule in rules if rule.remainder]


def has_primary_stakeholder(rules: list[Rule]) -> bool:
    """Check whether the scheme names the primary stakeholder."""
    return any(rule.key == PRIMARY_STAKEHOLDER for rule in rules)
