"""
Shared utilities for the revenue share API.

This module contains request validation helpers and bounds used across
the API blueprints.
"""

import os
from typing import Any

from flask import jsonify

from payout_exceptions import RevenueShareError

# ============================================================
# Bounds
# ============================================================

# Simulation is quadratic in the number of sales; keep requests bounded
MAX_SALES = int(os.getenv("REVSHARE_MAX_SALES", "20000"))


# ============================================================
# Validation Utilities
# ============================================================

def validate_json_schema(
    data: dict[str, Any],
    required_fields: dict[str, type | tuple[type, ...]],
    optional_fields: dict[str, type | tuple[type, ...]] | None = None,
) -> tuple:
    """
    Validate JSON payload against a simple schema.

    Args:
        data: The JSON data to validate
        required_fields: Dict mapping field names to expected types
        optional_fields: Dict mapping optional field names to expected types

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(data, dict):
        return False, "Request body must be a JSON object"

    for field_name, expected_type in required_fields.items():
        if field_name not in data:
            return False, f"Missing required field: {field_name}"
        if not _is_instance(data[field_name], expected_type):
            return False, f"Field '{field_name}' must be of type {_type_name(expected_type)}"

    if optional_fields:
        for field_name, expected_type in optional_fields.items():
            if field_name in data and data[field_name] is not None:
                if not _is_instance(data[field_name], expected_type):
                    return False, f"Field '{field_name}' must be of type {_type_name(expected_type)}"

    return True, None


def _is_instance(value: Any, expected_type: type | tuple[type, ...]) -> bool:
    # JSON true/false must not pass as numbers
    if isinstance(value, bool) and bool not in _as_tuple(expected_type):
        return False
    return isinstance(value, expected_type)


def _as_tuple(expected_type: type | tuple[type, ...]) -> tuple[type, ...]:
    return expected_type if isinstance(expected_type, tuple) else (expected_type,)


def _type_name(expected_type: type | tuple[type, ...]) -> str:
    return " or ".join(t.__name__ for t in _as_tuple(expected_type))


def resolve_sales(data: dict[str, Any]) -> tuple[list[dict[str, Any]] | None, str | None]:
    """
    Read sales from a payload: an explicit ``sales`` list or a ``sales_count``
    for a synthetic ledger of distinct buyers.

    Returns:
        Tuple of (sales, error_message)
    """
    if "sales" in data:
        sales = data["sales"]
        if not isinstance(sales, list):
            return None, "Field 'sales' must be a list"
    elif "sales_count" in data:
        count = data["sales_count"]
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            return None, "Field 'sales_count' must be a non-negative integer"
        sales = [{"buyer": f"buyer{i}", "timestamp": i} for i in range(1, count + 1)]
    else:
        return None, "Missing required field: sales or sales_count"

    if len(sales) > MAX_SALES:
        return None, f"Too many sales (maximum {MAX_SALES})"
    return sales, None


def error_response(error: RevenueShareError):
    """JSON 400 response for an engine error."""
    body = {"error": error.message}
    errors = getattr(error, "errors", None)
    if errors:
        body["errors"] = list(errors)
    return jsonify(body), 400
