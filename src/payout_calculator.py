"""
Revenue Share Engine - Payout Calculator

Standard allocation model: a scheme of percentage, group and remainder
rules is applied to the total revenue of a sales ledger.

Allocation runs in two passes over the parsed rules:

1. Every rule with a percentage takes ``total * percentage / 100`` and
   routes it to its stakeholder, buyer group or all buyers.
2. Whatever the percentages leave unallocated goes to the remainder
   rules in equal parts, or to the author when no rule claims it.

``PayoutCalculator`` fronts both payout models and the payback estimator
so callers can dispatch on the shape of their input.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from buy_to_earn import BuyToEarnParams, PayoutResult, simulate_buy_to_earn
from math_utils import DEFAULT_ROUNDING_DIGITS, distribute_evenly, is_numeric, round_numeric_leaves
from monitoring.logging import get_logger
from monitoring.metrics import metrics, timed
from payback_estimator import PaybackEstimate, estimate_token_payback
from payout_exceptions import ConfigurationError
from sales_ledger import Sale, coerce_sales, sort_sales
from scheme_rules import (
    AllBuyersRule,
    FixedStakeholderRule,
    GroupRule,
    PRIMARY_STAKEHOLDER,
    Rule,
    allocated_percentage,
    has_primary_stakeholder,
    parse_scheme,
    remainder_rules,
)

logger = get_logger(__name__)


# =============================================================================
# Result
# =============================================================================


@dataclass
class AllocationResult:
    """
    Payouts of the standard model.

    ``extras`` holds fixed stakeholders other than author and platform
    (currently ``promotion``); ``buyers`` maps every buyer of the ledger to
    the sum of its allocations.
    """

    author: float = 0.0
    platform: float = 0.0
    extras: dict[str, float] = field(default_factory=dict)
    buyers: dict[str, float] = field(default_factory=dict)

    @property
    def promotion(self) -> float:
        return self.extras.get("promotion", 0.0)

    @property
    def total(self) -> float:
        """Sum of every payout."""
        return self.author + self.platform + sum(self.extras.values()) + sum(self.buyers.values())

    def add_to_stakeholder(self, stakeholder: str, amount: float) -> None:
        if stakeholder == "author":
            self.author += amount
        elif stakeholder == "platform":
            self.platform += amount
        else:
            self.extras[stakeholder] = self.extras.get(stakeholder, 0.0) + amount

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, flattening extra stakeholders."""
        result: dict[str, Any] = {"author": self.author, "platform": self.platform}
        result.update(self.extras)
        result["buyers"] = dict(self.buyers)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AllocationResult":
        extras = {k: v for k, v in data.items() if k not in ("author", "platform", "buyers")}
        return cls(
            author=data.get("author", 0.0),
            platform=data.get("platform", 0.0),
            extras=extras,
            buyers=dict(data.get("buyers", {})),
        )

    def rounded(self, digits: int = DEFAULT_ROUNDING_DIGITS) -> "AllocationResult":
        """Copy with every amount rounded half-up."""
        return AllocationResult.from_dict(round_numeric_leaves(self.to_dict(), digits))


# =============================================================================
# Standard Allocation
# =============================================================================


def _allocate_to_group(rule: GroupRule, sorted_sales: list[Sale], result: AllocationResult, share: float) -> None:
    group = sorted_sales[-rule.count:] if rule.from_end else sorted_sales[:rule.count]
    group_size = min(len(group), rule.count)
    if group_size <= 0:
        return

    individual_share = share / group_size
    for sale in group:
        result.buyers[sale.buyer] += individual_share


def _allocate_to_all_buyers(sorted_sales: list[Sale], result: AllocationResult, share: float) -> None:
    individual_share = distribute_evenly(share, len(sorted_sales))
    if individual_share == 0.0:
        return
    for sale in sorted_sales:
        result.buyers[sale.buyer] += individual_share


def _route(rule: Rule, share: float, sorted_sales: list[Sale], result: AllocationResult) -> None:
    """Pay a share according to the rule's variant; unrouted keys are dropped."""
    if isinstance(rule, FixedStakeholderRule):
        result.add_to_stakeholder(rule.stakeholder, share)
    elif isinstance(rule, GroupRule):
        _allocate_to_group(rule, sorted_sales, result, share)
    elif isinstance(rule, AllBuyersRule):
        _allocate_to_all_buyers(sorted_sales, result, share)
    else:
        logger.debug("Share for unrouted key dropped", extra={"key": rule.key, "share": share})


def _validate_unit_price(unit_price: Any) -> None:
    if not is_numeric(unit_price) or unit_price <= 0:
        raise ConfigurationError("Unit price must be a positive number", parameter="unit_price")


@timed("allocation_duration_ms")
def allocate(
    scheme: dict[str, Any],
    sales: list[Sale] | list[dict[str, Any]],
    unit_price: float,
    round_results: bool = False,
    digits: int = DEFAULT_ROUNDING_DIGITS,
) -> AllocationResult:
    """
    Allocate the revenue of a ledger according to a scheme.

    Args:
        scheme: Mapping of stakeholder/group keys to rule mappings
        sales: Ledger snapshot (Sale objects or dicts); never mutated
        unit_price: Price per unit sold
        round_results: Round every amount in the result
        digits: Fractional digits used when rounding

    Returns:
        AllocationResult with stakeholder totals and per-buyer payouts

    Raises:
        ConfigurationError: If the scheme or unit price is missing or invalid
        InvalidSaleError: If a sale is malformed
    """
    if not isinstance(scheme, dict):
        raise ConfigurationError("Revenue sharing scheme is required", parameter="scheme")
    _validate_unit_price(unit_price)

    sorted_sales = sort_sales(coerce_sales(sales))
    total_revenue = len(sorted_sales) * unit_price
    rules = parse_scheme(scheme)

    result = AllocationResult(buyers={sale.buyer: 0.0 for sale in sorted_sales})
    for rule in rules:
        if isinstance(rule, FixedStakeholderRule) and rule.stakeholder not in ("author", "platform"):
            result.extras.setdefault(rule.stakeholder, 0.0)

    # Pass 1: fixed percentages
    for rule in rules:
        if rule.has_percentage:
            _route(rule, (total_revenue * rule.percentage) / 100, sorted_sales, result)

    # Pass 2: remainder
    remainder = total_revenue * (1 - allocated_percentage(rules) / 100)
    if remainder > 0:
        claimants = remainder_rules(rules)
        if not claimants and has_primary_stakeholder(rules):
            result.add_to_stakeholder(PRIMARY_STAKEHOLDER, remainder)
        elif claimants:
            share_per_rule = remainder / len(claimants)
            for rule in claimants:
                _route(rule, share_per_rule, sorted_sales, result)
        else:
            logger.debug("Unclaimed remainder dropped", extra={"remainder": remainder})

    metrics.increment("allocations_total")
    logger.debug(
        "Allocated payouts",
        extra={"total_sales": len(sorted_sales), "total_revenue": total_revenue, "rules": len(rules)},
    )

    return result.rounded(digits) if round_results else result


# =============================================================================
# Calculator
# =============================================================================


class PayoutCalculator:
    """
    Front for both payout models.

    ``calculate`` takes a mapping with ``sales``, ``unit_price`` and either
    ``scheme`` or ``buy_to_earn_params``; the latter selects the buy-to-earn
    simulator.
    """

    def __init__(self, round_results: bool = False, digits: int = DEFAULT_ROUNDING_DIGITS):
        self.round_results = round_results
        self.digits = digits

    def calculate(self, data: dict[str, Any]) -> AllocationResult | PayoutResult:
        """
        Calculate payouts for one ledger.

        Args:
            data: {"sales", "unit_price", "scheme"} or
                {"sales", "unit_price", "buy_to_earn_params", "tracked_token_position"}

        Returns:
            AllocationResult or PayoutResult depending on the model
        """
        if data.get("buy_to_earn_params"):
            return self.calculate_buy_to_earn_payouts(data)

        return allocate(
            data.get("scheme"),
            data.get("sales", []),
            data.get("unit_price"),
            round_results=self.round_results,
            digits=self.digits,
        )

    def calculate_buy_to_earn_payouts(self, data: dict[str, Any]) -> PayoutResult:
        """
        Run the buy-to-earn simulation for the mapping's parameters.

        The tracked token may also be given inside a parameter mapping as
        ``specific_token_number`` (or ``specificTokenNumber``).
        """
        params = data.get("buy_to_earn_params")
        tracked = data.get("tracked_token_position")
        if not isinstance(params, BuyToEarnParams):
            if isinstance(params, dict) and tracked is None:
                tracked = params.get("specific_token_number", params.get("specificTokenNumber"))
            params = BuyToEarnParams.from_dict(params, unit_price=data.get("unit_price"))

        return simulate_buy_to_earn(
            params,
            data.get("sales", []),
            tracked_token_position=1 if tracked is None else tracked,
            round_results=self.round_results,
            digits=self.digits,
        )

    def estimate_token_payback(
        self,
        token_number: int,
        token_price: float,
        payback_ratio: float,
        non_payback_pool_percent: float,
        buyers_share: float,
    ) -> PaybackEstimate:
        """Closed-form payback forecast; see payback_estimator."""
        return estimate_token_payback(
            token_number, token_price, payback_ratio, non_payback_pool_percent, buyers_share
        )

    def create_custom_calculator(
        self, calculation_fn: Callable[[dict[str, Any], Any], Any]
    ) -> Callable[[dict[str, Any]], Any]:
        """
        Wrap a post-processing function around the base calculation.

        The function receives the input mapping and the base payouts and
        returns whatever the caller needs.

        Raises:
            ConfigurationError: If calculation_fn is not callable
        """
        if not callable(calculation_fn):
            raise ConfigurationError("Custom calculator must be a function", parameter="calculation_fn")

        def calculator(data: dict[str, Any]) -> Any:
            return calculation_fn(data, self.calculate(data))

        return calculator
