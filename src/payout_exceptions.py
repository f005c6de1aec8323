"""
Revenue Share Engine - Exception Hierarchy

Every error raised by the engine carries a structured context (component,
action, details) so callers can log or serialize it consistently.

Taxonomy:
- ConfigurationError: missing or invalid parameters, raised at construction
- InvalidSchemeError: a scheme failed validation
- InvalidSaleError: bad per-call input, raised at ingestion
- ImportDataError: malformed export payload
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class ErrorContext:
    """Structured context for error tracking and debugging."""

    component: str
    action: str
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat() + "Z")
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "component": self.component,
            "action": self.action,
            "timestamp": self.timestamp,
            "details": self.details,
        }


class RevenueShareError(Exception):
    """
    Base exception for all revenue share engine errors.

    Includes structured error context for logging and API responses.
    """

    def __init__(
        self,
        message: str,
        component: str = "engine",
        action: str = "unknown",
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = ErrorContext(component=component, action=action, details=details or {})
        self.cause = cause

        if cause:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        result = {
            "error_type": type(self).__name__,
            "message": self.message,
            **self.context.to_dict(),
        }
        if self.cause:
            result["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause),
            }
        return result

    def __str__(self) -> str:
        base = f"[{self.context.component}:{self.context.action}] {self.message}"
        if self.cause:
            base += f" (caused by: {self.cause})"
        return base


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RevenueShareError):
    """
    Raised when a required parameter is missing or invalid.

    Examples:
    - No scheme supplied for the standard model
    - Non-positive initial investment for buy-to-earn
    - Unknown preset name
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        component: str = "configuration",
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            message=message,
            component=component,
            action="configure",
            details={"parameter": parameter, **(details or {})},
            cause=cause,
        )
        self.parameter = parameter


class InvalidSchemeError(ConfigurationError):
    """Raised when a scheme fails structural validation."""

    def __init__(self, errors: list[str], details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Invalid scheme: {', '.join(errors)}",
            parameter="scheme",
            component="scheme_validator",
            details={"errors": list(errors), **(details or {})},
        )
        self.errors = list(errors)


# =============================================================================
# Input Errors
# =============================================================================


class InvalidSaleError(RevenueShareError):
    """Raised when a sale record is rejected at ingestion."""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            component="sales_ledger",
            action="add_sale",
            details={"index": index, **(details or {})},
        )
        self.index = index


class ImportDataError(RevenueShareError):
    """Raised when exported data cannot be imported."""

    def __init__(self, message: str, details: dict[str, Any] | None = None, cause: Exception | None = None):
        super().__init__(
            message=message,
            component="revenue_sharing",
            action="import_data",
            details=details,
            cause=cause,
        )
