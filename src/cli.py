#!/usr/bin/env python3
"""
Revenue Share Engine Command Line Interface.

Provides commands for computing and exploring payouts:
    - allocate: Allocate revenue with a scheme (preset name or file)
    - simulate: Run a buy-to-earn simulation
    - estimate: Forecast the payback sale of one token
    - schemes: List preset schemes
    - validate: Validate a scheme file
    - serve: Start the API server

Usage:
    revshare allocate --scheme EQUAL_SPLIT --unit-price 10 --sales 100
    revshare simulate --preset STANDARD --unit-price 500 --sales 3000 --token 100
    revshare estimate --token 100 --unit-price 500 --payback-ratio 2 --priority 0.6 --buyers-share 0.7
    revshare schemes [--category basic]
    revshare validate scheme.yaml
    revshare serve [--host HOST] [--port PORT] [--debug]

Scheme, parameter and ledger files may be JSON or YAML. Results are
printed to stdout as JSON; errors go to stderr with exit status 1.
"""

import argparse
import json
import os
import sys
from typing import Any

import yaml

# Ensure src is in path when running from source
if os.path.exists(os.path.join(os.path.dirname(__file__), "payout_calculator.py")):
    sys.path.insert(0, os.path.dirname(__file__))

import schemes  # noqa: E402
from buy_to_earn import BuyToEarnParams, simulate_buy_to_earn  # noqa: E402
from engine_config import EngineConfig  # noqa: E402
from monitoring.logging import configure_from_config, get_logger  # noqa: E402
from payback_estimator import estimate_token_payback  # noqa: E402
from payout_calculator import allocate  # noqa: E402
from payout_exceptions import RevenueShareError  # noqa: E402
from scheme_validator import SchemeValidator  # noqa: E402

logger = get_logger("revshare.cli")

__version__ = "1.0.0"


class CLIError(Exception):
    """Bad command-line input (missing file, unknown preset, ...)."""


# =============================================================================
# Helpers
# =============================================================================


def _load_file(path: str) -> Any:
    """Load a JSON or YAML document."""
    if not os.path.exists(path):
        raise CLIError(f"File not found: {path}")
    with open(path, encoding="utf-8") as f:
        if path.endswith(".json"):
            return json.load(f)
        # YAML is a superset of JSON, so anything else goes through safe_load
        return yaml.safe_load(f)


def _load_scheme(value: str) -> dict[str, Any]:
    scheme = schemes.get_scheme_by_name(value)
    if scheme is not None and schemes.get_scheme_category(value) != "buy_to_earn":
        return scheme
    if os.path.exists(value):
        return _load_file(value)
    raise CLIError(f"Unknown scheme preset or file: {value}")


def _load_params(args) -> dict[str, Any]:
    if args.params:
        return _load_file(args.params)
    preset = schemes.get_scheme_by_name(args.preset)
    if preset is None or schemes.get_scheme_category(args.preset) != "buy_to_earn":
        raise CLIError(f"Unknown buy-to-earn preset: {args.preset}")
    return preset


def _generate_sales(count: int) -> list[dict[str, Any]]:
    """Synthetic ledger: one distinct buyer per sale, in order."""
    return [{"buyer": f"buyer{i}", "timestamp": i} for i in range(1, count + 1)]


def _load_sales(args) -> list[dict[str, Any]]:
    if getattr(args, "ledger", None):
        data = _load_file(args.ledger)
        if isinstance(data, dict):
            data = data.get("sales")
        return data
    return _generate_sales(args.sales)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def _config(args) -> EngineConfig:
    config = EngineConfig.from_env()
    if getattr(args, "no_round", False):
        config = config.with_overrides(round_results=False)
    return config


# =============================================================================
# Commands
# =============================================================================


def cmd_allocate(args) -> int:
    """Allocate revenue with a standard scheme."""
    config = _config(args)
    scheme = _load_scheme(args.scheme)
    sales = _load_sales(args)

    result = allocate(
        scheme,
        sales,
        args.unit_price,
        round_results=config.round_results,
        digits=config.rounding_digits,
    )
    _print_json(result.to_dict())
    return 0


def cmd_simulate(args) -> int:
    """Run a buy-to-earn simulation."""
    config = _config(args)
    params = BuyToEarnParams.from_dict(_load_params(args), unit_price=args.unit_price)
    sales = _load_sales(args)

    result = simulate_buy_to_earn(
        params,
        sales,
        tracked_token_position=args.token,
        round_results=config.round_results,
        digits=config.rounding_digits,
    )
    _print_json(result.to_dict())
    return 0


def cmd_estimate(args) -> int:
    """Estimate the payback sale of a token."""
    estimate = estimate_token_payback(
        token_number=args.token,
        token_price=args.unit_price,
        payback_ratio=args.payback_ratio,
        non_payback_pool_percent=args.priority,
        buyers_share=args.buyers_share,
    )
    _print_json(estimate.to_dict())
    return 0


def cmd_schemes(args) -> int:
    """List preset schemes."""
    if args.category and args.category not in schemes.CATEGORIES:
        raise CLIError(f"Unknown category: {args.category}")
    _print_json(schemes.get_all_schemes(args.category))
    return 0


def cmd_validate(args) -> int:
    """Validate a scheme file."""
    config = EngineConfig.from_env()
    scheme = _load_file(args.file)
    validator = SchemeValidator()
    strict = args.strict or config.strict_percentage_total

    result = validator.validate(scheme, strict_percentage_total=strict)
    output = result.to_dict()
    if not result.is_valid and isinstance(scheme, dict):
        output["suggested_fix"] = validator.suggest_fixes(scheme, result.errors)
    _print_json(output)
    return 0 if result.is_valid else 1


def cmd_serve(args) -> int:
    """Start the revenue share API server."""
    host = args.host or os.getenv("HOST", "127.0.0.1")
    port = args.port or int(os.getenv("PORT", 5000))
    debug = args.debug or os.getenv("FLASK_DEBUG", "").lower() == "true"

    from api import create_app

    app = create_app()
    logger.info(f"Starting revenue share API server on {host}:{port}")
    app.run(host=host, port=port, debug=debug)
    return 0


COMMANDS = {
    "allocate": cmd_allocate,
    "simulate": cmd_simulate,
    "estimate": cmd_estimate,
    "schemes": cmd_schemes,
    "validate": cmd_validate,
    "serve": cmd_serve,
}


# =============================================================================
# Entry Point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="revshare",
        description="Revenue Share Engine - allocate and simulate product revenue payouts",
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # allocate command
    allocate_parser = subparsers.add_parser("allocate", help="Allocate revenue with a scheme")
    allocate_parser.add_argument("--scheme", required=True, help="Preset name or scheme file")
    allocate_parser.add_argument("--unit-price", type=float, required=True, help="Price per unit")
    source = allocate_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--sales", type=int, help="Number of synthetic sales")
    source.add_argument("--ledger", help="Sales ledger file (list of sales)")
    allocate_parser.add_argument("--no-round", action="store_true", help="Keep full precision")

    # simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Run a buy-to-earn simulation")
    params = simulate_parser.add_mutually_exclusive_group(required=True)
    params.add_argument("--preset", help="Buy-to-earn preset name")
    params.add_argument("--params", help="Buy-to-earn parameter file")
    simulate_parser.add_argument("--unit-price", type=float, required=True, help="Price per unit")
    simulate_parser.add_argument("--sales", type=int, required=True, help="Number of synthetic sales")
    simulate_parser.add_argument("--token", type=int, default=1, help="Tracked token position (default: 1)")
    simulate_parser.add_argument("--no-round", action="store_true", help="Keep full precision")

    # estimate command
    estimate_parser = subparsers.add_parser("estimate", help="Estimate a token's payback sale")
    estimate_parser.add_argument("--token", type=int, required=True, help="Token position")
    estimate_parser.add_argument("--unit-price", type=float, required=True, help="Token price")
    estimate_parser.add_argument("--payback-ratio", type=float, required=True, help="Payback multiple")
    estimate_parser.add_argument(
        "--priority", type=float, required=True, help="Non-payback pool share as a fraction (0-1]"
    )
    estimate_parser.add_argument(
        "--buyers-share", type=float, required=True, help="Buyers' share as a fraction (0-1]"
    )

    # schemes command
    schemes_parser = subparsers.add_parser("schemes", help="List preset schemes")
    schemes_parser.add_argument("--category", help="basic, advanced or buy_to_earn")

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a scheme file")
    validate_parser.add_argument("file", help="Scheme file (JSON or YAML)")
    validate_parser.add_argument("--strict", action="store_true", help="Require percentages to total 100")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", help="Host to bind to (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, help="Port to bind to (default: 5000)")
    serve_parser.add_argument("--debug", action="store_true", help="Enable debug mode")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    from dotenv import load_dotenv

    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    configure_from_config(EngineConfig.from_env())

    try:
        return command(args)
    except RevenueShareError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except (CLIError, OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
