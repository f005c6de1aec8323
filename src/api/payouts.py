"""
Revenue Share Engine - Payouts API Blueprint

REST API endpoints for payout calculation and preset schemes.

Provides access to:
- Standard scheme allocation
- Buy-to-earn simulation and payback estimation
- Scheme validation with suggested fixes
- The preset scheme catalog
"""

from flask import Blueprint, current_app, jsonify, request

import schemes
from buy_to_earn import BuyToEarnParams, simulate_buy_to_earn
from payback_estimator import estimate_token_payback
from payout_calculator import allocate
from payout_exceptions import RevenueShareError
from scheme_validator import SchemeValidator

from .utils import error_response, resolve_sales, validate_json_schema

payouts_bp = Blueprint("payouts", __name__)

NUMBER = (int, float)


def _config():
    return current_app.config["ENGINE_CONFIG"]


@payouts_bp.errorhandler(RevenueShareError)
def handle_engine_error(error: RevenueShareError):
    """Engine errors are client errors: bad scheme, parameters or sales."""
    return error_response(error)


# =============================================================================
# Standard Allocation Endpoints
# =============================================================================


@payouts_bp.route("/payouts/allocate", methods=["POST"])
def allocate_payouts():
    """
    Allocate revenue with a scheme.

    Request body:
        {
            "scheme": {"author": {"percentage": 80}, ...},   // or
            "scheme_name": "AUTHOR_CENTRIC",
            "unit_price": 10,
            "sales": [{"buyer": "alice", "timestamp": 1}],  // or
            "sales_count": 100,
            "round": true                                   // Optional
        }

    Returns:
        Author, platform, extra stakeholder and per-buyer payouts
    """
    data = request.get_json(silent=True)
    is_valid, error = validate_json_schema(
        data,
        required_fields={"unit_price": NUMBER},
        optional_fields={"scheme": dict, "scheme_name": str, "round": bool},
    )
    if not is_valid:
        return jsonify({"error": error}), 400

    scheme = data.get("scheme")
    if scheme is None:
        name = data.get("scheme_name")
        if not name or schemes.get_scheme_category(name) not in ("basic", "advanced"):
            return jsonify({"error": "Provide a scheme or a known scheme_name"}), 400
        scheme = schemes.get_scheme_by_name(name)

    sales, error = resolve_sales(data)
    if error:
        return jsonify({"error": error}), 400

    config = _config()
    result = allocate(
        scheme,
        sales,
        data["unit_price"],
        round_results=data.get("round", config.round_results),
        digits=config.rounding_digits,
    )
    return jsonify(result.to_dict())


# =============================================================================
# Buy-to-Earn Endpoints
# =============================================================================


@payouts_bp.route("/payouts/buy-to-earn/simulate", methods=["POST"])
def simulate_payouts():
    """
    Run a buy-to-earn simulation.

    Request body:
        {
            "params": {"initial_investment": 300000, ...},  // or
            "preset": "STANDARD",
            "unit_price": 500,
            "sales_count": 3000,                            // or "sales": [...]
            "tracked_token": 100,                           // Optional, default 1
            "round": true                                   // Optional
        }

    Returns:
        Creator/platform/promotion totals and the tracked token's payback
    """
    data = request.get_json(silent=True)
    is_valid, error = validate_json_schema(
        data,
        required_fields={"unit_price": NUMBER},
        optional_fields={"params": dict, "preset": str, "tracked_token": int, "round": bool},
    )
    if not is_valid:
        return jsonify({"error": error}), 400

    raw_params = data.get("params")
    if raw_params is None:
        preset = data.get("preset")
        if not preset or schemes.get_scheme_category(preset) != "buy_to_earn":
            return jsonify({"error": "Provide params or a known buy-to-earn preset"}), 400
        raw_params = schemes.get_scheme_by_name(preset)

    sales, error = resolve_sales(data)
    if error:
        return jsonify({"error": error}), 400

    config = _config()
    params = BuyToEarnParams.from_dict(raw_params, unit_price=data["unit_price"])
    result = simulate_buy_to_earn(
        params,
        sales,
        tracked_token_position=data.get("tracked_token", 1),
        round_results=data.get("round", config.round_results),
        digits=config.rounding_digits,
    )
    return jsonify(result.to_dict())


@payouts_bp.route("/payouts/buy-to-earn/estimate", methods=["POST"])
def estimate_payback():
    """
    Forecast the payback sale of one token.

    Request body:
        {
            "token_number": 100,
            "token_price": 500,
            "payback_ratio": 2,
            "non_payback_pool_percent": 0.6,   // Fraction (0-1]
            "buyers_share": 0.7                // Fraction (0-1]
        }
    """
    data = request.get_json(silent=True)
    is_valid, error = validate_json_schema(
        data,
        required_fields={
            "token_number": int,
            "token_price": NUMBER,
            "payback_ratio": NUMBER,
            "non_payback_pool_percent": NUMBER,
            "buyers_share": NUMBER,
        },
    )
    if not is_valid:
        return jsonify({"error": error}), 400

    estimate = estimate_token_payback(
        token_number=data["token_number"],
        token_price=data["token_price"],
        payback_ratio=data["payback_ratio"],
        non_payback_pool_percent=data["non_payback_pool_percent"],
        buyers_share=data["buyers_share"],
    )
    return jsonify(estimate.to_dict())


# =============================================================================
# Scheme Endpoints
# =============================================================================


@payouts_bp.route("/schemes/validate", methods=["POST"])
def validate_scheme():
    """
    Validate a scheme.

    Request body:
        {"scheme": {...}, "strict": false}

    Returns:
        Validation result, plus a suggested fix when invalid
    """
    data = request.get_json(silent=True)
    is_valid, error = validate_json_schema(
        data, required_fields={"scheme": dict}, optional_fields={"strict": bool}
    )
    if not is_valid:
        return jsonify({"error": error}), 400

    validator = SchemeValidator()
    strict = data.get("strict", _config().strict_percentage_total)
    result = validator.validate(data["scheme"], strict_percentage_total=strict)

    response = result.to_dict()
    if not result.is_valid:
        response["suggested_fix"] = validator.suggest_fixes(data["scheme"], result.errors)
    return jsonify(response)


@payouts_bp.route("/schemes", methods=["GET"])
def list_schemes():
    """
    List preset schemes.

    Query params:
        category: basic, advanced or buy_to_earn (optional)
    """
    category = request.args.get("category")
    if category and category not in schemes.CATEGORIES:
        return jsonify({"error": f"Unknown category: {category}"}), 400

    entries = schemes.get_all_schemes(category)
    return jsonify({"count": len(entries), "schemes": entries})


@payouts_bp.route("/schemes/<name>", methods=["GET"])
def get_scheme(name: str):
    """Get one preset scheme with its catalog metadata."""
    category = schemes.get_scheme_category(name)
    if category is None:
        return jsonify({"error": f"Scheme not found: {name}"}), 404

    entry = {"id": name, "category": category, "scheme": schemes.get_scheme_by_name(name)}
    entry.update(schemes.SCHEMES_CATALOG[category]["schemes"].get(name, {}))
    return jsonify(entry)
