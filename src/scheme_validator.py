"""
Revenue Share Engine - Scheme Validator

Advisory structural checks on allocation schemes. The allocator never
calls this itself; the RevenueSharing facade runs it on construction and
import when validation is enabled.
"""

import copy
from dataclasses import dataclass, field
from typing import Any

from math_utils import is_numeric, round_to_digits
from monitoring.logging import get_logger
from monitoring.metrics import metrics
from sales_ledger import is_valid_buyer_name

logger = get_logger(__name__)

PERCENTAGE_TOLERANCE = 0.01

__all__ = [
    "SchemeValidator",
    "ValidationResult",
    "is_percentage",
    "is_positive_integer",
    "is_valid_buyer_name",
    "is_valid_scheme_rule",
]


# =============================================================================
# Predicates
# =============================================================================


def is_percentage(value: Any) -> bool:
    """Check that a value is a number in [0, 100]."""
    return is_numeric(value) and 0 <= value <= 100


def is_positive_integer(value: Any) -> bool:
    """Check that a value is an integer greater than zero (bools excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return value.is_integer() and value > 0
    return isinstance(value, int) and value > 0


def is_valid_scheme_rule(rule: Any) -> bool:
    """
    Check a single rule in isolation.

    A rule is either a percentage rule (optionally scoped by a positive
    ``count``; ``fromEnd`` only with ``count``) or ``{"remainder": True}``.
    """
    if not isinstance(rule, dict):
        return False

    if "percentage" in rule:
        if not is_percentage(rule["percentage"]):
            return False
        if "count" in rule and not is_positive_integer(rule["count"]):
            return False
        if rule.get("fromEnd") is True and "count" not in rule:
            return False
        return "remainder" not in rule

    if "remainder" in rule:
        return rule["remainder"] is True

    return False


def _percentage_total(scheme: dict[str, Any]) -> float:
    return sum(
        rule["percentage"]
        for rule in scheme.values()
        if isinstance(rule, dict) and is_numeric(rule.get("percentage"))
    )


def _remainder_keys(scheme: dict[str, Any]) -> list[str]:
    return [key for key, rule in scheme.items() if isinstance(rule, dict) and rule.get("remainder") is True]


# =============================================================================
# Validator
# =============================================================================


@dataclass
class ValidationResult:
    """Outcome of validating a scheme."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"is_valid": self.is_valid, "errors": list(self.errors), "warnings": list(self.warnings)}


class SchemeValidator:
    """Validates scheme structure and produces warnings and fix suggestions."""

    def validate(self, scheme: Any, strict_percentage_total: bool = False) -> ValidationResult:
        """
        Validate a scheme.

        Args:
            scheme: Mapping of keys to rule mappings
            strict_percentage_total: Require explicit percentages to sum to 100

        Returns:
            ValidationResult with errors and warnings
        """
        if not isinstance(scheme, dict):
            return ValidationResult(is_valid=False, errors=["Scheme must be a non-null object"])
        if not scheme:
            return ValidationResult(is_valid=False, errors=["Scheme cannot be empty"])

        errors: list[str] = []
        for key, rule in scheme.items():
            errors.extend(self._validate_rule(key, rule))

        if strict_percentage_total:
            total = _percentage_total(scheme)
            if abs(total - 100) > PERCENTAGE_TOLERANCE:
                errors.append(f"Total percentage allocation ({total:g}%) must equal 100%")

        remainder_keys = _remainder_keys(scheme)
        if len(remainder_keys) > 1:
            errors.append(
                f"Only one rule can have remainder flag, found {len(remainder_keys)}: "
                f"{', '.join(remainder_keys)}"
            )

        result = ValidationResult(is_valid=not errors, errors=errors, warnings=self._warnings(scheme))
        if not result.is_valid:
            metrics.increment("scheme_validation_failures_total")
            logger.debug("Scheme failed validation", extra={"errors": len(errors)})
        return result

    def _validate_rule(self, key: str, rule: Any) -> list[str]:
        if not isinstance(rule, dict):
            return [f"Rule for '{key}' must be a non-null object"]

        errors = []
        if "percentage" in rule and not is_percentage(rule["percentage"]):
            errors.append(f"Percentage for '{key}' must be a number between 0 and 100")

        if "count" in rule and not is_positive_integer(rule["count"]):
            errors.append(f"Count for '{key}' must be a positive integer")

        if "fromEnd" in rule and not isinstance(rule["fromEnd"], bool):
            errors.append(f"FromEnd for '{key}' must be a boolean")

        if "remainder" in rule and not isinstance(rule["remainder"], bool):
            errors.append(f"Remainder for '{key}' must be a boolean")

        if "count" in rule and "percentage" not in rule and "remainder" not in rule:
            errors.append(f"Rule for '{key}' with count must specify either percentage or remainder")

        if "percentage" in rule and "remainder" in rule:
            errors.append(f"Rule for '{key}' cannot have both percentage and remainder")

        return errors

    def _warnings(self, scheme: dict[str, Any]) -> list[str]:
        warnings = []

        total = _percentage_total(scheme)
        if abs(total - 100) > PERCENTAGE_TOLERANCE and not _remainder_keys(scheme):
            warnings.append(
                f"Total percentage allocation ({total:g}%) doesn't equal 100% "
                "and no remainder rule is defined"
            )

        count_rules = [key for key, rule in scheme.items() if isinstance(rule, dict) and "count" in rule]
        if len(count_rules) > 1:
            warnings.append(
                f"Multiple count rules ({len(count_rules)}) might overlap "
                "or apply to more buyers than exist"
            )

        return warnings

    def suggest_fixes(self, scheme: dict[str, Any], errors: list[str] | None) -> dict[str, Any]:
        """
        Propose a corrected copy of a scheme.

        Percentages summing above 100 are scaled down proportionally; an
        under-allocated scheme without a remainder rule gets
        ``author.remainder``. The input scheme is never modified.

        Args:
            scheme: Scheme to fix
            errors: Errors from validate(); nothing changes when empty

        Returns:
            A new scheme mapping
        """
        fixed = copy.deepcopy(scheme)
        if not errors:
            return fixed

        total = _percentage_total(fixed)

        if total > 100:
            scale = 100 / total
            for rule in fixed.values():
                if isinstance(rule, dict) and is_numeric(rule.get("percentage")):
                    rule["percentage"] = round_to_digits(rule["percentage"] * scale, 2)

        if total < 100 and not _remainder_keys(fixed):
            author = fixed.get("author")
            if isinstance(author, dict):
                author["remainder"] = True
            else:
                fixed["author"] = {"remainder": True}

        return fixed
