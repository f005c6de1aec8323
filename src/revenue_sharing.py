"""
Revenue Share Engine - Revenue Sharing Facade

Ties one product to its sales ledger and payout model.

Key Concepts:
- A product is sold at a fixed unit price and follows exactly one payout
  model: a standard allocation scheme or buy-to-earn parameters
- Sales are recorded in an append-only ledger, validated at ingestion
- Payouts are recomputed from the whole ledger on every request; the
  engines are pure functions and keep no state between calls
- State-changing operations are recorded in an audit trail

Use Cases:
- Authors splitting e-book revenue with a platform and early buyers
- Crowdfunded products repaying prepaying buyers from later sales
- Forecasting when a given token pays back before launching a campaign
"""

import copy
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import schemes
from buy_to_earn import BuyToEarnParams, PayoutResult, simulate_buy_to_earn
from engine_config import EngineConfig
from math_utils import is_numeric
from monitoring.logging import LoggingContext, get_logger
from payback_estimator import PaybackEstimate, estimate_token_payback
from payout_calculator import AllocationResult, allocate
from payout_exceptions import ConfigurationError, ImportDataError, InvalidSaleError, InvalidSchemeError
from sales_ledger import SalesLedger, coerce_sales, is_valid_buyer_name
from scheme_validator import SchemeValidator, ValidationResult

logger = get_logger(__name__)


# =============================================================================
# Enums
# =============================================================================


class PayoutModel(Enum):
    """Payout model a product follows."""

    STANDARD = "standard"  # Scheme of percentage/group/remainder rules
    BUY_TO_EARN = "buy_to_earn"  # Prepayment phase plus dual-pool payback


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class RevenueShareEvent:
    """Internal event for audit trail."""

    event_id: str
    event_type: str
    timestamp: str
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "timestamp": self.timestamp,
            "data": self.data,
        }


# =============================================================================
# Revenue Sharing
# =============================================================================


class RevenueSharing:
    """
    Revenue sharing for a single product.

    Exactly one of ``scheme`` (standard model) or ``buy_to_earn``
    (buy-to-earn model) must be given. Either may be a preset name from
    the ``schemes`` catalog.
    """

    def __init__(
        self,
        product_name: str,
        unit_price: float,
        scheme: dict[str, Any] | str | None = None,
        buy_to_earn: BuyToEarnParams | dict[str, Any] | str | None = None,
        config: EngineConfig | None = None,
    ):
        """
        Initialize revenue sharing for a product.

        Args:
            product_name: Non-blank product name
            unit_price: Positive price per unit
            scheme: Allocation scheme or basic/advanced preset name
            buy_to_earn: Buy-to-earn parameters, mapping or preset name
            config: Engine configuration (defaults to EngineConfig())

        Raises:
            ConfigurationError: If a required parameter is missing or invalid
            InvalidSchemeError: If scheme validation is enabled and fails
        """
        self.config = config or EngineConfig()
        self.validator = SchemeValidator()

        self._check_product(product_name, unit_price)
        self.product_name = product_name
        self.unit_price = unit_price

        if (scheme is None) == (buy_to_earn is None):
            raise ConfigurationError(
                "Exactly one of a revenue sharing scheme or buy-to-earn parameters is required",
                parameter="scheme",
            )

        self.scheme: dict[str, Any] | None = None
        self.buy_to_earn: BuyToEarnParams | None = None

        if scheme is not None:
            self.model = PayoutModel.STANDARD
            self.scheme = self._resolve_scheme(scheme)
            if self.config.validate_scheme:
                self._require_valid(self.scheme)
        else:
            self.model = PayoutModel.BUY_TO_EARN
            self.buy_to_earn = self._resolve_buy_to_earn(buy_to_earn, unit_price)

        self.ledger = SalesLedger(track_timestamps=self.config.track_sale_timestamp)

        # Audit trail
        self.events: list[RevenueShareEvent] = []

        self._emit_event("product_configured", {
            "product_name": product_name,
            "unit_price": unit_price,
            "model": self.model.value,
        })

    # =========================================================================
    # Configuration
    # =========================================================================

    @staticmethod
    def _check_product(product_name: Any, unit_price: Any) -> None:
        if not is_valid_buyer_name(product_name):
            raise ConfigurationError("Must provide a valid product name", parameter="product_name")
        if not is_numeric(unit_price) or unit_price <= 0:
            raise ConfigurationError("Unit price must be a positive number", parameter="unit_price")

    @staticmethod
    def _resolve_scheme(scheme: dict[str, Any] | str) -> dict[str, Any]:
        if isinstance(scheme, str):
            category = schemes.get_scheme_category(scheme)
            if category not in ("basic", "advanced"):
                raise ConfigurationError(f"Unknown allocation scheme preset: {scheme}", parameter="scheme")
            return schemes.get_scheme_by_name(scheme)
        if not isinstance(scheme, dict):
            raise ConfigurationError("Scheme must be an object", parameter="scheme")
        return copy.deepcopy(scheme)

    @staticmethod
    def _resolve_buy_to_earn(
        params: BuyToEarnParams | dict[str, Any] | str, unit_price: float
    ) -> BuyToEarnParams:
        if isinstance(params, BuyToEarnParams):
            return params
        if isinstance(params, str):
            if schemes.get_scheme_category(params) != "buy_to_earn":
                raise ConfigurationError(f"Unknown buy-to-earn preset: {params}", parameter="buy_to_earn")
            params = schemes.get_scheme_by_name(params)
        return BuyToEarnParams.from_dict(params, unit_price=unit_price)

    def _require_valid(self, scheme: dict[str, Any]) -> None:
        result = self.validator.validate(
            scheme, strict_percentage_total=self.config.strict_percentage_total
        )
        if not result.is_valid:
            raise InvalidSchemeError(result.errors)
        for warning in result.warnings:
            logger.warning("Scheme warning: %s", warning, extra={"product": self.product_name})

    # =========================================================================
    # Sales
    # =========================================================================

    def add_sale(
        self,
        buyer: str,
        timestamp: float | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        """
        Record a sale.

        Returns:
            Index of the sale in the ledger

        Raises:
            InvalidSaleError: If the buyer or timestamp is invalid
        """
        index = self.ledger.add_sale(buyer, timestamp=timestamp, metadata=metadata)
        self._emit_event("sale_added", {"index": index, "buyer": buyer})
        return index

    def add_sales(self, sales: list[dict[str, Any]]) -> int:
        """
        Record a batch of sales; nothing is recorded if any sale is invalid.

        Returns:
            Number of sales added
        """
        added = self.ledger.add_sales(sales)
        self._emit_event("sales_added", {"count": added, "total_sales": len(self.ledger)})
        return added

    @property
    def sales(self) -> list[dict[str, Any]]:
        """Recorded sales as dictionaries."""
        return self.ledger.to_list()

    # =========================================================================
    # Payouts
    # =========================================================================

    def calculate_payouts(
        self,
        round_results: bool | None = None,
        tracked_token_position: int = 1,
    ) -> AllocationResult | PayoutResult:
        """
        Calculate payouts for the whole ledger under the product's model.

        Args:
            round_results: Round amounts (defaults to config.round_results)
            tracked_token_position: Token to report on (buy-to-earn only)

        Returns:
            AllocationResult (standard) or PayoutResult (buy-to-earn)
        """
        if self.model == PayoutModel.BUY_TO_EARN:
            return self.simulate_buy_to_earn(tracked_token_position, round_results=round_results)

        if round_results is None:
            round_results = self.config.round_results

        with LoggingContext(product=self.product_name, model=self.model.value):
            return allocate(
                self.scheme,
                self.ledger.sales,
                self.unit_price,
                round_results=round_results,
                digits=self.config.rounding_digits,
            )

    def simulate_buy_to_earn(
        self,
        tracked_token_position: int = 1,
        round_results: bool | None = None,
    ) -> PayoutResult:
        """
        Run the buy-to-earn simulation for one tracked token.

        Raises:
            ConfigurationError: If the product does not use the buy-to-earn model
        """
        params = self._require_buy_to_earn()
        if round_results is None:
            round_results = self.config.round_results

        with LoggingContext(product=self.product_name, model=self.model.value):
            return simulate_buy_to_earn(
                params,
                self.ledger.sales,
                tracked_token_position=tracked_token_position,
                round_results=round_results,
                digits=self.config.rounding_digits,
            )

    def estimate_token_payback(self, token_number: int) -> PaybackEstimate:
        """
        Forecast the payback sale of a token from the product's parameters.

        Shares are converted from percentages to the fractions the
        estimator expects.
        """
        params = self._require_buy_to_earn()
        return estimate_token_payback(
            token_number=token_number,
            token_price=params.unit_price,
            payback_ratio=params.payback_ratio,
            non_payback_pool_percent=params.non_payback_pool_share_percent / 100,
            buyers_share=params.buyers_share / 100,
        )

    def _require_buy_to_earn(self) -> BuyToEarnParams:
        if self.buy_to_earn is None:
            raise ConfigurationError(
                "Product does not use the buy-to-earn model", parameter="buy_to_earn"
            )
        return self.buy_to_earn

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_sales_stats(self) -> dict[str, Any]:
        """Get sales statistics for the product."""
        stats = {"product_name": self.product_name, "unit_price": self.unit_price}
        stats.update(self.ledger.get_statistics(self.unit_price))
        return stats

    # =========================================================================
    # Import / Export
    # =========================================================================

    def export_data(self) -> dict[str, Any]:
        """Export product, model, sales and options as plain data."""
        data = {
            "product_name": self.product_name,
            "unit_price": self.unit_price,
            "model": self.model.value,
            "sales": self.ledger.to_list(),
            "options": {
                "validate_scheme": self.config.validate_scheme,
                "track_sale_timestamp": self.config.track_sale_timestamp,
            },
        }
        if self.scheme is not None:
            data["scheme"] = copy.deepcopy(self.scheme)
        if self.buy_to_earn is not None:
            data["buy_to_earn"] = self.buy_to_earn.to_dict()
        return data

    def import_data(self, data: dict[str, Any], validate: bool = True) -> bool:
        """
        Replace the product's state with exported data.

        Args:
            data: Output of export_data()
            validate: Check the payload shape and the scheme first

        Raises:
            ImportDataError: If the payload is malformed
            InvalidSchemeError: If the imported scheme fails validation
        """
        if not isinstance(data, dict):
            raise ImportDataError("Invalid import data format")

        scheme = data.get("scheme")
        buy_to_earn = data.get("buy_to_earn")

        if validate:
            if (
                not is_valid_buyer_name(data.get("product_name"))
                or not is_numeric(data.get("unit_price"))
                or not isinstance(data.get("sales"), list)
                or not isinstance(scheme or buy_to_earn, dict)
            ):
                raise ImportDataError("Invalid import data format")
            if scheme is not None:
                result = self.validator.validate(scheme)
                if not result.is_valid:
                    raise InvalidSchemeError(result.errors, details={"source": "import"})

        try:
            sales = coerce_sales(data.get("sales", []))
            params = (
                BuyToEarnParams.from_dict(buy_to_earn, unit_price=data.get("unit_price"))
                if buy_to_earn is not None
                else None
            )
        except (ConfigurationError, InvalidSaleError) as e:
            raise ImportDataError(f"Invalid import data: {e}", cause=e) from e

        options = data.get("options") or {}
        self.config = self.config.with_overrides(
            validate_scheme=options.get("validate_scheme"),
            track_sale_timestamp=options.get("track_sale_timestamp"),
        )

        self.product_name = data.get("product_name")
        self.unit_price = data.get("unit_price")
        if params is not None:
            self.model = PayoutModel.BUY_TO_EARN
            self.buy_to_earn = params
            self.scheme = None
        else:
            self.model = PayoutModel.STANDARD
            self.scheme = copy.deepcopy(scheme)
            self.buy_to_earn = None
        self.ledger = SalesLedger(track_timestamps=self.config.track_sale_timestamp, sales=sales)

        self._emit_event("data_imported", {
            "product_name": self.product_name,
            "model": self.model.value,
            "sales": len(self.ledger),
        })
        return True

    def validate_scheme(self) -> ValidationResult:
        """Validate the product's scheme."""
        if self.scheme is None:
            return ValidationResult(is_valid=False, errors=["Product does not use an allocation scheme"])
        return self.validator.validate(
            self.scheme, strict_percentage_total=self.config.strict_percentage_total
        )

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _emit_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Emit an internal event for audit trail."""
        event = RevenueShareEvent(
            event_id=f"evt_{secrets.token_hex(8)}",
            event_type=event_type,
            timestamp=datetime.now(UTC).isoformat(),
            data=data,
        )
        self.events.append(event)
