"""
Pytest configuration and shared fixtures for revenue share engine tests.

This module provides shared fixtures and test configuration including:
- Sales ledger factories
- Flask app setup with a fixed engine configuration
- Metrics reset between tests
"""

import os
import sys

import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset global metrics between tests."""
    from monitoring import metrics

    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def make_sales():
    """
    Factory for ordered sales.

    make_sales(3) -> buyer1..buyer3 with timestamps 1..3
    """

    def _make(count: int, prefix: str = "buyer", with_timestamps: bool = True):
        sales = []
        for i in range(1, count + 1):
            sale = {"buyer": f"{prefix}{i}"}
            if with_timestamps:
                sale["timestamp"] = i
            sales.append(sale)
        return sales

    return _make


@pytest.fixture
def standard_params():
    """Buy-to-earn parameters of the standard campaign (600 prepayers, goal 1000)."""
    from buy_to_earn import BuyToEarnParams

    return BuyToEarnParams(
        initial_investment=300000,
        unit_price=500,
        creator_share=10,
        platform_share=10,
        promotion_share=10,
        payback_ratio=2,
        non_payback_pool_share_percent=60,
    )


@pytest.fixture
def engine_config():
    """Deterministic engine configuration (independent of the environment)."""
    from engine_config import EngineConfig

    return EngineConfig()


@pytest.fixture
def flask_app(engine_config):
    """Create Flask test app."""
    from api import create_app

    app = create_app(engine_config)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def flask_client(flask_app):
    """Create Flask test client."""
    return flask_app.test_client()
