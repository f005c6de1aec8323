"""
Revenue Share Engine - Sales Ledger

Append-only, ordered record of unit sales. The ledger validates every sale
at ingestion and hands immutable snapshots to the payout engines, which
never mutate it.

Sale position (1-based) is defined by the stable timestamp ordering in
`sort_sales`: two sales compare by timestamp only when both carry one,
otherwise they are treated as equal and keep their insertion order.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from functools import cmp_to_key
from typing import Any

from math_utils import is_numeric
from monitoring.logging import get_logger
from payout_exceptions import InvalidSaleError

logger = get_logger(__name__)


def is_valid_buyer_name(value: Any) -> bool:
    """Check that a buyer identifier is a non-blank string."""
    return isinstance(value, str) and len(value.strip()) > 0


def is_valid_timestamp(value: Any) -> bool:
    """Check that a timestamp is a non-negative number."""
    return is_numeric(value) and value >= 0


@dataclass(frozen=True)
class Sale:
    """A single recorded sale."""

    buyer: str
    timestamp: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not is_valid_buyer_name(self.buyer):
            raise InvalidSaleError("Buyer identifier is required for each sale")
        if self.timestamp is not None and not is_valid_timestamp(self.timestamp):
            raise InvalidSaleError(
                "If timestamp is provided, it must be a non-negative number",
                details={"timestamp": repr(self.timestamp)},
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {"buyer": self.buyer, "metadata": dict(self.metadata)}
        if self.timestamp is not None:
            result["timestamp"] = self.timestamp
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "Sale":
        """Build a sale from a mapping (or pass a Sale through)."""
        if isinstance(data, Sale):
            return data
        if not isinstance(data, dict):
            raise InvalidSaleError("Sale must be an object")
        return cls(
            buyer=data.get("buyer"),
            timestamp=data.get("timestamp"),
            metadata=dict(data.get("metadata") or {}),
        )


def _compare_sales(a: Sale, b: Sale) -> int:
    if a.timestamp is None or b.timestamp is None:
        return 0
    if a.timestamp < b.timestamp:
        return -1
    if a.timestamp > b.timestamp:
        return 1
    return 0


def sort_sales(sales: list[Sale]) -> list[Sale]:
    """
    Return sales in position order without touching the input list.

    Args:
        sales: Sales in insertion order

    Returns:
        New list sorted by timestamp where both sides carry one
    """
    return sorted(sales, key=cmp_to_key(_compare_sales))


def coerce_sales(sales: Any) -> list[Sale]:
    """
    Normalize caller-supplied sales (Sale objects or dicts) into Sales.

    Raises:
        InvalidSaleError: If the batch is not a list or any sale is invalid
    """
    if not isinstance(sales, (list, tuple)):
        raise InvalidSaleError("Expected a list of sales")

    result = []
    for index, sale in enumerate(sales):
        try:
            result.append(Sale.from_dict(sale))
        except InvalidSaleError as e:
            raise InvalidSaleError(f"Sale at index {index}: {e.message}", index=index) from e
    return result


class SalesLedger:
    """
    Ordered, append-only ledger of sales for one product.

    Timestamps default to the current time (milliseconds) when tracking is
    enabled and are dropped entirely when it is disabled.
    """

    def __init__(self, track_timestamps: bool = True, sales: list[Sale] | None = None):
        self.track_timestamps = track_timestamps
        self._sales: list[Sale] = list(sales or [])

    def __len__(self) -> int:
        return len(self._sales)

    def __iter__(self):
        return iter(self._sales)

    @property
    def sales(self) -> list[Sale]:
        """Snapshot of the recorded sales, in insertion order."""
        return list(self._sales)

    def add_sale(
        self,
        buyer: str,
        timestamp: float | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        """
        Record a sale.

        Args:
            buyer: Buyer identifier (non-blank)
            timestamp: Optional timestamp; defaults to now when tracking
            metadata: Optional metadata about the sale

        Returns:
            Index of the added sale
        """
        if self.track_timestamps:
            if timestamp is None:
                timestamp = time.time() * 1000
        else:
            timestamp = None

        sale = Sale(buyer=buyer, timestamp=timestamp, metadata=dict(metadata or {}))
        self._sales.append(sale)

        logger.debug("Sale recorded", extra={"sale_index": len(self._sales) - 1, "buyer": buyer})
        return len(self._sales) - 1

    def add_sales(self, sales: Any) -> int:
        """
        Record a batch of sales (dicts or Sale objects).

        The whole batch is validated before anything is appended.

        Returns:
            Number of sales added
        """
        if not isinstance(sales, (list, tuple)):
            raise InvalidSaleError("Expected a list of sales")

        batch = []
        for index, sale in enumerate(sales):
            if isinstance(sale, Sale):
                data = sale.to_dict()
            elif isinstance(sale, dict):
                data = sale
            else:
                raise InvalidSaleError(f"Sale at index {index}: Sale must be an object", index=index)

            timestamp = data.get("timestamp")
            if self.track_timestamps:
                if timestamp is None:
                    timestamp = time.time() * 1000
            else:
                timestamp = None

            try:
                batch.append(Sale(
                    buyer=data.get("buyer"),
                    timestamp=timestamp,
                    metadata=dict(data.get("metadata") or {}),
                ))
            except InvalidSaleError as e:
                raise InvalidSaleError(f"Sale at index {index}: {e.message}", index=index) from e

        self._sales.extend(batch)
        return len(batch)

    def sorted_sales(self) -> list[Sale]:
        """Sales in position order."""
        return sort_sales(self._sales)

    def unique_buyers(self) -> int:
        """Number of distinct buyer identifiers."""
        return len({sale.buyer for sale in self._sales})

    def get_statistics(self, unit_price: float) -> dict[str, Any]:
        """
        Summarize the ledger.

        Args:
            unit_price: Price per unit, used for the revenue total

        Returns:
            Totals plus first/last sale dates when timestamps are tracked
        """
        total_sales = len(self._sales)
        stats: dict[str, Any] = {
            "total_sales": total_sales,
            "total_revenue": total_sales * unit_price,
            "unique_buyers": self.unique_buyers(),
        }

        timestamps = [s.timestamp for s in self._sales if s.timestamp is not None]
        if self.track_timestamps and timestamps:
            first, last = min(timestamps), max(timestamps)
            stats["first_sale_date"] = datetime.fromtimestamp(first / 1000).isoformat()
            stats["last_sale_date"] = datetime.fromtimestamp(last / 1000).isoformat()
            stats["sales_duration"] = last - first

        return stats

    def to_list(self) -> list[dict[str, Any]]:
        """Export sales as plain dictionaries."""
        return [sale.to_dict() for sale in self._sales]

    @classmethod
    def from_list(cls, data: Any, track_timestamps: bool = True) -> "SalesLedger":
        """Rebuild a ledger from exported sales, keeping their timestamps as-is."""
        return cls(track_timestamps=track_timestamps, sales=coerce_sales(data))
