"""Core error types with rich context.

Every failure in tsanalytics maps onto one of six error types. Numerical
diagnostics (rank, condition number, RSS history, ...) travel in the
``context`` dict rather than being swallowed.
"""

# ruff: noqa: N818

from __future__ import annotations

from typing import Any


class TSAnalyticsError(Exception):
    """Base exception with rich context.

    Attributes:
        error_code: Unique error code string for programmatic handling
        message: Human-readable error message
        context: Additional context data for debugging
        fix_hint: Actionable hint for resolving the error
    """

    error_code: str = "E_UNKNOWN"
    fix_hint: str = ""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        fix_hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        if fix_hint is not None:
            self.fix_hint = fix_hint

    def __str__(self) -> str:
        parts = [f"[{self.error_code}] {self.message}"]
        if self.context:
            parts.append(f"(context: {self.context})")
        if self.fix_hint:
            parts.append(f"[hint: {self.fix_hint}]")
        return " ".join(parts)

    def to_agent_dict(self) -> dict[str, Any]:
        """Return a structured dict with error_code, message, fix_hint and context."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "fix_hint": self.fix_hint,
            "context": self.context,
        }


class EMalformedInput(TSAnalyticsError):
    """Input violates a construction-time invariant."""

    error_code = "E_MALFORMED_INPUT"
    fix_hint = (
        "Timestamps must be finite and strictly increasing and values finite; "
        "use coalesce() for unordered or duplicated input"
    )


class EInvalidWindow(TSAnalyticsError):
    """Window size or grid step is out of range for the series."""

    error_code = "E_INVALID_WINDOW"
    fix_hint = "Use a positive window size no larger than the series length"


class EInvalidOrder(TSAnalyticsError):
    """Model order or horizon parameter is out of range."""

    error_code = "E_INVALID_ORDER"
    fix_hint = "Orders p, d, q must be non-negative integers with p + q >= 1"


class EInsufficientData(TSAnalyticsError):
    """Series too short for the requested statistic or model order."""

    error_code = "E_INSUFFICIENT_DATA"
    fix_hint = "Provide a longer series or lower the requested order/lags"


class EDegenerateInput(TSAnalyticsError):
    """Input is well formed but numerically degenerate."""

    error_code = "E_DEGENERATE_INPUT"
    fix_hint = "Check for constant series or collinear regressors"


class ENonConvergent(TSAnalyticsError):
    """Iterative procedure did not reach a stable result within its bound."""

    error_code = "E_NON_CONVERGENT"
    fix_hint = "Raise max_d / max_iter, loosen tol, or choose different orders"


ERROR_REGISTRY: dict[str, type[TSAnalyticsError]] = {
    "E_MALFORMED_INPUT": EMalformedInput,
    "E_INVALID_WINDOW": EInvalidWindow,
    "E_INVALID_ORDER": EInvalidOrder,
    "E_INSUFFICIENT_DATA": EInsufficientData,
    "E_DEGENERATE_INPUT": EDegenerateInput,
    "E_NON_CONVERGENT": ENonConvergent,
}


def get_error_class(error_code: str) -> type[TSAnalyticsError]:
    """Get error class by code."""
    return ERROR_REGISTRY.get(error_code, TSAnalyticsError)


__all__ = [
    "TSAnalyticsError",
    "EMalformedInput",
    "EInvalidWindow",
    "EInvalidOrder",
    "EInsufficientData",
    "EDegenerateInput",
    "ENonConvergent",
    "ERROR_REGISTRY",
    "get_error_class",
]
