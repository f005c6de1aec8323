"""
Tests for the standard allocation engine (src/payout_calculator.py)

Tests cover:
- Fixed percentage allocation to author, platform and promotion
- First/last buyer groups and all-buyer splits
- Remainder routing and defaulting to the author
- Conservation of revenue and idempotence
- PayoutCalculator dispatch and custom calculators
"""

import sys

import pytest

sys.path.insert(0, "src")

from buy_to_earn import PayoutResult
from monitoring import metrics
from payout_calculator import AllocationResult, PayoutCalculator, allocate
from payout_exceptions import ConfigurationError, InvalidSaleError
from schemes import get_scheme_by_name


def _two_sales():
    return [
        {"buyer": "buyer1", "timestamp": 1000},
        {"buyer": "buyer2", "timestamp": 2000},
    ]


def _four_sales():
    return [{"buyer": f"buyer{i}", "timestamp": i * 1000} for i in range(1, 5)]


# ============================================================
# Fixed Percentage Tests
# ============================================================

class TestFixedPercentages:
    """Tests for percentage rules routed to fixed stakeholders."""

    def test_single_primary_stakeholder(self):
        """A scheme giving the author 100% pays everything to the author."""
        result = allocate({"author": {"percentage": 100}}, _two_sales(), 100)

        assert result.author == 200
        assert result.platform == 0
        assert result.buyers == {"buyer1": 0, "buyer2": 0}

    def test_author_and_platform_split(self):
        """Author and platform receive their percentages of total revenue."""
        scheme = {"author": {"percentage": 70}, "platform": {"percentage": 30}}

        result = allocate(scheme, _two_sales(), 100)

        assert result.author == 140
        assert result.platform == 60
        assert len(result.buyers) == 2
        assert all(value == 0 for value in result.buyers.values())

    def test_promotion_is_an_extra_stakeholder(self):
        """Promotion shares land in extras and are exposed as a property."""
        scheme = {
            "author": {"percentage": 40},
            "platform": {"percentage": 30},
            "promotion": {"percentage": 20},
            "allBuyers": {"percentage": 10},
        }

        result = allocate(scheme, _two_sales(), 100)

        assert result.author == 80
        assert result.platform == 60
        assert result.promotion == 40
        assert result.extras == {"promotion": 40}
        assert result.buyers == {"buyer1": 10, "buyer2": 10}

    def test_missing_author_gets_nothing(self):
        """A scheme without an author rule leaves the author at zero."""
        scheme = {"platform": {"percentage": 30}, "allBuyers": {"percentage": 70}}

        result = allocate(scheme, _two_sales(), 100)

        assert result.author == 0
        assert result.platform == 60
        assert result.buyers == {"buyer1": 70, "buyer2": 70}

    def test_no_sales(self):
        """An empty ledger allocates zero to everyone."""
        scheme = {"author": {"percentage": 70}, "platform": {"percentage": 30}}

        result = allocate(scheme, [], 100)

        assert result.author == 0
        assert result.platform == 0
        assert result.buyers == {}

    def test_unrouted_key_is_dropped(self):
        """An unrecognized key counts towards the allocated total but pays no one."""
        scheme = {"author": {"percentage": 50}, "charity": {"percentage": 50}}

        result = allocate(scheme, _two_sales(), 100)

        assert result.author == 100
        assert result.platform == 0
        assert result.extras == {}
        assert result.total == 100


# ============================================================
# Buyer Group Tests
# ============================================================

class TestBuyerGroups:
    """Tests for first/last N buyer groups and all-buyer splits."""

    def test_all_buyers_split(self):
        """All-buyer shares are split evenly across every sale."""
        scheme = {
            "author": {"percentage": 40},
            "platform": {"percentage": 30},
            "allBuyers": {"percentage": 30},
        }

        result = allocate(scheme, _two_sales(), 100)

        assert result.author == 80
        assert result.platform == 60
        assert result.buyers == {"buyer1": 30, "buyer2": 30}

    def test_buyers_prefix_routes_to_all_buyers(self):
        """Keys starting with 'buyers' route to all buyers."""
        result = allocate({"buyersPool": {"percentage": 100}}, _two_sales(), 100)

        assert result.buyers == {"buyer1": 100, "buyer2": 100}

    def test_early_buyers_group(self):
        """Only the first N buyers share a group rule."""
        scheme = {
            "author": {"percentage": 40},
            "platform": {"percentage": 30},
            "earlyBuyers": {"count": 2, "percentage": 30},
        }

        result = allocate(scheme, _four_sales(), 100)

        assert result.author == 160
        assert result.platform == 120
        assert result.buyers == {"buyer1": 60, "buyer2": 60, "buyer3": 0, "buyer4": 0}

    def test_late_buyers_group(self):
        """fromEnd selects the last N buyers."""
        scheme = {
            "author": {"percentage": 40},
            "platform": {"percentage": 30},
            "lateBuyers": {"count": 2, "percentage": 30, "fromEnd": True},
        }

        result = allocate(scheme, _four_sales(), 100)

        assert result.buyers == {"buyer1": 0, "buyer2": 0, "buyer3": 60, "buyer4": 60}

    def test_combined_rules_accumulate(self):
        """A buyer in several groups receives the sum of every share."""
        scheme = {
            "author": {"percentage": 30},
            "platform": {"percentage": 20},
            "earlyBuyers": {"count": 1, "percentage": 10},
            "lateBuyers": {"count": 1, "percentage": 20, "fromEnd": True},
            "allBuyers": {"percentage": 20},
        }

        result = allocate(scheme, _four_sales(), 100)

        assert result.author == 120
        assert result.platform == 80
        assert result.buyers["buyer1"] == 40 + 20
        assert result.buyers["buyer2"] == 20
        assert result.buyers["buyer3"] == 20
        assert result.buyers["buyer4"] == 80 + 20

    def test_unsorted_timestamps_are_ordered(self):
        """Group membership follows timestamp order, not ledger order."""
        sales = [
            {"buyer": "buyer2", "timestamp": 2000},
            {"buyer": "buyer1", "timestamp": 1000},
            {"buyer": "buyer4", "timestamp": 4000},
            {"buyer": "buyer3", "timestamp": 3000},
        ]
        scheme = {
            "author": {"percentage": 40},
            "platform": {"percentage": 30},
            "earlyBuyers": {"count": 2, "percentage": 30},
        }

        result = allocate(scheme, sales, 100)

        assert result.buyers == {"buyer1": 60, "buyer2": 60, "buyer3": 0, "buyer4": 0}

    def test_sales_without_timestamps_keep_insertion_order(self):
        """Sales missing a timestamp stay in the order they were recorded."""
        sales = [{"buyer": "first"}, {"buyer": "second"}, {"buyer": "third"}]

        result = allocate({"early": {"count": 1, "percentage": 100}}, sales, 30)

        assert result.buyers == {"first": 90, "second": 0, "third": 0}

    def test_zero_timestamp_is_ordered(self):
        """A timestamp of 0 is a real timestamp and sorts first."""
        sales = [{"buyer": "late", "timestamp": 5}, {"buyer": "epoch", "timestamp": 0}]

        result = allocate({"early": {"count": 1, "percentage": 100}}, sales, 10)

        assert result.buyers == {"late": 0, "epoch": 20}

    @pytest.mark.parametrize("from_end", [False, True])
    def test_group_larger_than_ledger(self, from_end):
        """A group asking for more buyers than exist splits among those available."""
        scheme = {
            "author": {"percentage": 40},
            "platform": {"percentage": 30},
            "group": {"count": 5, "percentage": 30, "fromEnd": from_end},
        }

        result = allocate(scheme, _two_sales(), 100)

        assert result.buyers == {"buyer1": 30, "buyer2": 30}

    def test_group_on_empty_ledger_discards_share(self):
        """An empty group pays nothing and does not divide by zero."""
        result = allocate({"early": {"count": 3, "percentage": 50}}, [], 100)

        assert result.buyers == {}
        assert result.total == 0

    def test_repeat_buyer_allocations_are_summed(self):
        """Two sales to the same buyer collapse into one summed entry."""
        sales = [
            {"buyer": "alice", "timestamp": 1},
            {"buyer": "alice", "timestamp": 2},
            {"buyer": "bob", "timestamp": 3},
        ]

        result = allocate({"allBuyers": {"percentage": 100}}, sales, 10)

        assert result.buyers == {"alice": 20, "bob": 10}

    def test_buyers_outside_window_get_nothing(self, make_sales):
        """Buyers outside a first-N window receive exactly zero from it."""
        result = allocate({"first10": {"count": 10, "percentage": 50}}, make_sales(50), 2)

        inside = [result.buyers[f"buyer{i}"] for i in range(1, 11)]
        outside = [result.buyers[f"buyer{i}"] for i in range(11, 51)]
        assert inside == [5.0] * 10
        assert outside == [0.0] * 40


# ============================================================
# Remainder Tests
# ============================================================

class TestRemainder:
    """Tests for the remainder pass."""

    def test_remainder_to_all_buyers(self):
        """The unallocated share is split across all buyers."""
        scheme = {
            "author": {"percentage": 30},
            "platform": {"percentage": 20},
            "allBuyers": {"remainder": True},
        }

        result = allocate(scheme, _two_sales(), 100)

        assert result.author == 60
        assert result.platform == 40
        assert result.buyers == {"buyer1": 50, "buyer2": 50}

    def test_remainder_scenario_ten_sales(self, make_sales):
        """10% author, 10% platform, remainder to buyers: each buyer gets 80."""
        scheme = {
            "author": {"percentage": 10},
            "platform": {"percentage": 10},
            "allBuyers": {"remainder": True},
        }

        result = allocate(scheme, make_sales(10), 100)

        assert result.author == 100
        assert result.platform == 100
        assert all(value == 80 for value in result.buyers.values())

    def test_remainder_defaults_to_author(self):
        """Without remainder rules the gap goes to the author."""
        scheme = {"author": {"percentage": 50}, "platform": {"percentage": 20}}

        result = allocate(scheme, _two_sales(), 100)

        assert result.author == pytest.approx(160)
        assert result.platform == 40

    def test_remainder_dropped_without_author(self):
        """Without remainder rules or an author the gap is not paid out."""
        result = allocate({"platform": {"percentage": 20}}, _two_sales(), 100)

        assert result.author == 0
        assert result.platform == 40
        assert result.total == 40

    def test_promotion_as_remainder(self):
        """Promotion can claim the remainder."""
        scheme = {
            "author": {"percentage": 40},
            "platform": {"percentage": 30},
            "promotion": {"remainder": True},
        }

        result = allocate(scheme, _two_sales(), 100)

        assert result.author == 80
        assert result.platform == 60
        assert result.promotion == pytest.approx(60, abs=1e-10)
        assert len(result.buyers) == 2

    def test_multiple_remainder_rules_split_evenly(self):
        """Several remainder rules share the remainder equally."""
        scheme = {
            "author": {"percentage": 40, "remainder": True},
            "platform": {"percentage": 30},
            "allBuyers": {"remainder": True},
        }

        result = allocate(scheme, _two_sales(), 100)

        assert result.author == pytest.approx(110, abs=1e-10)
        assert result.platform == 60
        assert result.buyers["buyer1"] == pytest.approx(15, abs=1e-10)
        assert result.buyers["buyer2"] == pytest.approx(15, abs=1e-10)
        assert result.total == pytest.approx(200, abs=1e-10)

    def test_group_remainder(self, make_sales):
        """A group rule may claim the remainder."""
        scheme = {"author": {"percentage": 50}, "first2": {"count": 2, "remainder": True}}

        result = allocate(scheme, make_sales(4), 10)

        assert result.author == 20
        assert result.buyers == {"buyer1": 10, "buyer2": 10, "buyer3": 0, "buyer4": 0}

    def test_no_remainder_when_fully_allocated(self):
        """A fully allocated scheme leaves nothing for remainder rules."""
        scheme = {"author": {"percentage": 100}, "platform": {"remainder": True}}

        result = allocate(scheme, _two_sales(), 100)

        assert result.author == 200
        assert result.platform == 0
        assert result.buyers == {"buyer1": 0, "buyer2": 0}


# ============================================================
# Property Tests
# ============================================================

class TestAllocationProperties:
    """Conservation, idempotence and rounding."""

    @pytest.mark.parametrize("name", [
        "AUTHOR_CENTRIC",
        "COMMUNITY_EQUAL",
        "EARLY_SUPPORTERS",
        "LATE_SUPPORTERS",
        "COMMUNITY_GROWTH",
        "SLIDING_WINDOW",
        "EARLY_ADOPTER_TIERS",
        "DYNAMIC_TIERED",
    ])
    def test_conservation(self, name, make_sales):
        """Every preset pays out exactly the total revenue."""
        sales = make_sales(1500)

        result = allocate(get_scheme_by_name(name), sales, 9.99)

        assert result.total == pytest.approx(1500 * 9.99, rel=1e-9)

    def test_idempotent(self, make_sales):
        """Identical inputs give identical outputs."""
        scheme = get_scheme_by_name("ICO_MODEL")
        sales = make_sales(300)

        assert allocate(scheme, sales, 3).to_dict() == allocate(scheme, sales, 3).to_dict()

    def test_inputs_not_mutated(self):
        """The scheme and sales passed in are left untouched."""
        scheme = {"author": {"percentage": 60}, "late": {"count": 1, "percentage": 40, "fromEnd": True}}
        sales = [{"buyer": "b", "timestamp": 2}, {"buyer": "a", "timestamp": 1}]

        allocate(scheme, sales, 10)

        assert scheme == {"author": {"percentage": 60}, "late": {"count": 1, "percentage": 40, "fromEnd": True}}
        assert sales == [{"buyer": "b", "timestamp": 2}, {"buyer": "a", "timestamp": 1}]

    def test_rounding_applies_to_amounts(self, make_sales):
        """Rounded results keep two decimals."""
        result = allocate({"allBuyers": {"percentage": 100}}, make_sales(3), 10, round_results=True)

        assert result.buyers == {"buyer1": 10.0, "buyer2": 10.0, "buyer3": 10.0}

        thirds = allocate({"platform": {"percentage": 100 / 3}}, make_sales(1), 1, round_results=True)
        assert thirds.platform == 0.33

    def test_to_dict_flattens_extras(self):
        """to_dict places extra stakeholders next to author and platform."""
        result = AllocationResult(author=1.0, platform=2.0, extras={"promotion": 3.0}, buyers={"a": 4.0})

        assert result.to_dict() == {"author": 1.0, "platform": 2.0, "promotion": 3.0, "buyers": {"a": 4.0}}
        assert AllocationResult.from_dict(result.to_dict()) == result

    def test_records_metrics(self, make_sales):
        """Each allocation increments the counter and records a timing."""
        allocate({"author": {"percentage": 100}}, make_sales(2), 1)

        assert metrics.get_counter("allocations_total") == 1
        assert metrics.get_histogram("allocation_duration_ms").count == 1


# ============================================================
# Error Tests
# ============================================================

class TestAllocationErrors:
    """Configuration and input errors."""

    def test_missing_scheme(self):
        """A missing scheme is a configuration error."""
        with pytest.raises(ConfigurationError):
            allocate(None, _two_sales(), 100)

    @pytest.mark.parametrize("price", [0, -5, "10", None])
    def test_invalid_unit_price(self, price):
        """Unit price must be a positive number."""
        with pytest.raises(ConfigurationError):
            allocate({"author": {"percentage": 100}}, _two_sales(), price)

    def test_sale_without_buyer(self):
        """A sale without a buyer is rejected at ingestion."""
        with pytest.raises(InvalidSaleError) as exc_info:
            allocate({"author": {"percentage": 100}}, [{"buyer": "ok"}, {"timestamp": 1}], 10)

        assert exc_info.value.index == 1

    def test_malformed_rule_fields_do_not_apply(self):
        """Non-numeric percentages are ignored rather than rejected."""
        result = allocate({"author": {"percentage": "lots"}, "platform": {"percentage": 10}}, _two_sales(), 100)

        # author key still absorbs the unclaimed remainder
        assert result.platform == 20
        assert result.author == pytest.approx(180)


# ============================================================
# PayoutCalculator Tests
# ============================================================

class TestPayoutCalculator:
    """Tests for the calculator front."""

    def test_calculate_standard(self):
        """Without buy-to-earn params the standard engine runs."""
        calculator = PayoutCalculator()
        data = {
            "sales": _two_sales(),
            "scheme": {"author": {"percentage": 70}, "platform": {"percentage": 30}},
            "unit_price": 100,
        }

        result = calculator.calculate(data)

        assert isinstance(result, AllocationResult)
        assert result.author == 140

    def test_calculate_dispatches_to_buy_to_earn(self, make_sales):
        """buy_to_earn_params selects the simulator."""
        calculator = PayoutCalculator()
        data = {
            "sales": make_sales(500),
            "unit_price": 500,
            "buy_to_earn_params": {
                "initialInvestment": 300000,
                "creatorShare": 10,
                "platformShare": 10,
                "promotionShare": 10,
                "paybackRatio": 2,
                "nonPaybackPoolSharePercent": 60,
                "specificTokenNumber": 100,
            },
        }

        result = calculator.calculate(data)

        assert isinstance(result, PayoutResult)
        assert result.creator == 300000
        assert result.prepayers_count == 600

    def test_custom_calculator(self):
        """A custom function post-processes the base payouts."""
        calculator = PayoutCalculator()

        def double_author(data, base):
            extra = min(base.platform, base.author)
            return {"author": base.author + extra, "platform": base.platform - extra}

        custom = calculator.create_custom_calculator(double_author)
        payouts = custom({
            "sales": _two_sales(),
            "scheme": {"author": {"percentage": 40}, "platform": {"percentage": 60}},
            "unit_price": 100,
        })

        assert payouts == {"author": 160, "platform": 40}

    def test_custom_calculator_requires_callable(self):
        """Non-callables are rejected."""
        with pytest.raises(ConfigurationError):
            PayoutCalculator().create_custom_calculator("not a function")

    def test_rounding_calculator(self, make_sales):
        """A rounding calculator rounds every amount."""
        calculator = PayoutCalculator(round_results=True)

        result = calculator.calculate({
            "sales": make_sales(3),
            "scheme": {"allBuyers": {"percentage": 100}},
            "unit_price": 1 / 3,
        })

        assert result.buyers == {"buyer1": 0.33, "buyer2": 0.33, "buyer3": 0.33}

    def test_estimate_token_payback(self):
        """The calculator exposes the payback estimator."""
        estimate = PayoutCalculator().estimate_token_payback(100, 500, 2, 0.6, 0.7)

        assert estimate.payback_sale > 100
        assert estimate.accumulated_earnings == 1000
        assert estimate.roi == 100
