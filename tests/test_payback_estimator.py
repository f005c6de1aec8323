"""
Tests for the closed-form payback estimator (src/payback_estimator.py)
"""

import sys

import pytest

sys.path.insert(0, "src")

from monitoring import metrics
from payback_estimator import (
    MIN_SALES_AFTER_TOKEN,
    PaybackEstimate,
    estimate_token_payback,
    token_position_factor,
)
from payout_exceptions import ConfigurationError


class TestTokenPositionFactor:
    """Tests for the position bands."""

    def test_early_band_is_linear(self):
        """Tokens up to 100 grow linearly from 0.8."""
        assert token_position_factor(1, 0.6) == pytest.approx(0.802)
        assert token_position_factor(100, 0.6) == pytest.approx(1.0)

    def test_mid_band_is_logarithmic(self):
        """Tokens 101-500 follow 1 + log10(n / 100) / 2."""
        assert token_position_factor(500, 0.6) == pytest.approx(1.349485, rel=1e-6)

    def test_early_and_mid_ignore_priority(self):
        """Priority only matters for late tokens."""
        assert token_position_factor(250, 0.3) == token_position_factor(250, 0.95)

    def test_late_band_depends_on_priority(self):
        """Stronger non-payback priority shortens late payback."""
        high = token_position_factor(1000, 0.95)
        medium = token_position_factor(1000, 0.8)
        low = token_position_factor(1000, 0.5)

        assert high < medium < low
        assert low / high == pytest.approx(1.1 / 0.8)

    def test_late_band_thresholds_inclusive(self):
        """0.9 counts as high and 0.7 as medium priority."""
        base = 1.2 + 0.3 * 0.30102999566  # log10(1000 / 500) * 0.3

        assert token_position_factor(1000, 0.9) == pytest.approx(base * 0.8)
        assert token_position_factor(1000, 0.7) == pytest.approx(base * 0.9)


class TestEstimateTokenPayback:
    """Tests for the forecast itself."""

    def test_first_token(self):
        """Token 1 of the standard campaign."""
        estimate = estimate_token_payback(1, 500, 2, 0.6, 0.7)

        assert isinstance(estimate, PaybackEstimate)
        assert estimate.payback_sale == 3819
        assert estimate.accumulated_earnings == 1000
        assert estimate.roi == 100.0

    def test_mid_token_high_priority_is_stretched(self):
        """Mid tokens with priority >= 0.7 are stretched by 10% after rounding."""
        estimate = estimate_token_payback(200, 500, 2, 0.9, 0.7)

        assert estimate.payback_sale == 4017

    def test_result_is_integer(self):
        """The forecast sale is always a whole sale number."""
        estimate = estimate_token_payback(750, 100, 1.5, 0.3, 0.6)

        assert isinstance(estimate.payback_sale, int)

    def test_floor_after_token(self):
        """Payback is never forecast sooner than 100 sales after the token."""
        estimate = estimate_token_payback(5000, 10, 0.1, 1.0, 1.0)

        assert estimate.payback_sale == 5000 + MIN_SALES_AFTER_TOKEN

    @pytest.mark.parametrize("ratio,roi", [(1, 0.0), (1.5, 50.0), (2, 100.0), (3, 200.0)])
    def test_roi(self, ratio, roi):
        """ROI is the payback ratio expressed as percent gain."""
        estimate = estimate_token_payback(10, 250, ratio, 0.6, 0.7)

        assert estimate.roi == roi
        assert estimate.accumulated_earnings == pytest.approx(250 * ratio)

    def test_later_tokens_wait_longer(self):
        """Within one campaign, later tokens are forecast to pay back later."""
        sales = [estimate_token_payback(n, 500, 2, 0.6, 0.7).payback_sale for n in (1, 50, 100, 300, 500)]

        assert sales == sorted(sales)

    def test_to_dict(self):
        """Dictionary form carries the three fields."""
        data = estimate_token_payback(1, 500, 2, 0.6, 0.7).to_dict()

        assert data == {"payback_sale": 3819, "accumulated_earnings": 1000, "roi": 100.0}

    def test_counts_estimates(self):
        """Every call is counted."""
        estimate_token_payback(1, 500, 2, 0.6, 0.7)
        estimate_token_payback(2, 500, 2, 0.6, 0.7)

        assert metrics.get_counter("payback_estimates_total") == 2


class TestEstimateErrors:
    """Inputs that would divide by zero or make no sense."""

    @pytest.mark.parametrize("token_number", [0, -1, True, 2.5])
    def test_invalid_token_number(self, token_number):
        """The token number must be a positive integer."""
        with pytest.raises(ConfigurationError) as exc_info:
            estimate_token_payback(token_number, 500, 2, 0.6, 0.7)

        assert exc_info.value.parameter == "token_number"

    @pytest.mark.parametrize("args,parameter", [
        ((1, 0, 2, 0.6, 0.7), "token_price"),
        ((1, 500, 2, 0, 0.7), "non_payback_pool_percent"),
        ((1, 500, 2, 0.6, 0), "buyers_share"),
        ((1, 500, "2", 0.6, 0.7), "payback_ratio"),
    ])
    def test_invalid_inputs(self, args, parameter):
        """Zero divisors and non-numbers raise ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            estimate_token_payback(*args)

        assert exc_info.value.parameter == parameter
