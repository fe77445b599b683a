"""Tests for core error types.

Tests the error hierarchy, registry and rich context functionality.
"""

from __future__ import annotations

import pytest

from tsanalytics.core.errors import (
    ERROR_REGISTRY,
    EDegenerateInput,
    EInsufficientData,
    EInvalidOrder,
    EInvalidWindow,
    EMalformedInput,
    ENonConvergent,
    TSAnalyticsError,
    get_error_class,
)


class TestTSAnalyticsError:
    """Test base error class."""

    def test_basic_error(self) -> None:
        """Basic error creation."""
        err = TSAnalyticsError("Something went wrong")
        assert err.message == "Something went wrong"
        assert err.error_code == "E_UNKNOWN"
        assert err.context == {}

    def test_error_with_context(self) -> None:
        """Context is kept and rendered."""
        err = TSAnalyticsError("Test error", context={"rank": 2, "condition_number": 1e18})
        assert err.context["rank"] == 2
        assert "condition_number" in str(err)

    def test_fix_hint_override(self) -> None:
        """An explicit fix hint replaces the class default."""
        err = EInsufficientData("too short", fix_hint="Collect more data")
        assert err.fix_hint == "Collect more data"
        assert "Collect more data" in str(err)
        assert EInsufficientData.fix_hint != "Collect more data"

    def test_str_format(self) -> None:
        """Error string carries code, message and hint."""
        err = EMalformedInput("timestamps must be strictly increasing", context={"position": 3})
        text = str(err)
        assert text.startswith("[E_MALFORMED_INPUT]")
        assert "position" in text
        assert "[hint:" in text

    def test_to_agent_dict(self) -> None:
        """Structured dict has all fields."""
        err = ENonConvergent("no convergence", context={"rss_history": [3.0, 2.0]})
        payload = err.to_agent_dict()
        assert payload["error_code"] == "E_NON_CONVERGENT"
        assert payload["message"] == "no convergence"
        assert payload["context"]["rss_history"] == [3.0, 2.0]
        assert payload["fix_hint"]


class TestTaxonomy:
    """Test the six error types."""

    @pytest.mark.parametrize(
        ("cls", "code"),
        [
            (EMalformedInput, "E_MALFORMED_INPUT"),
            (EInvalidWindow, "E_INVALID_WINDOW"),
            (EInvalidOrder, "E_INVALID_ORDER"),
            (EInsufficientData, "E_INSUFFICIENT_DATA"),
            (EDegenerateInput, "E_DEGENERATE_INPUT"),
            (ENonConvergent, "E_NON_CONVERGENT"),
        ],
    )
    def test_codes_and_hierarchy(self, cls: type[TSAnalyticsError], code: str) -> None:
        """Each error has its code and derives from the base."""
        err = cls("boom")
        assert err.error_code == code
        assert isinstance(err, TSAnalyticsError)
        assert cls.fix_hint

    def test_catch_with_base(self) -> None:
        """Base class catches every library error."""
        with pytest.raises(TSAnalyticsError):
            raise EDegenerateInput("constant series")


class TestRegistry:
    """Test error registry lookups."""

    def test_registry_complete(self) -> None:
        """Registry holds every taxonomy code."""
        assert set(ERROR_REGISTRY) == {
            "E_MALFORMED_INPUT",
            "E_INVALID_WINDOW",
            "E_INVALID_ORDER",
            "E_INSUFFICIENT_DATA",
            "E_DEGENERATE_INPUT",
            "E_NON_CONVERGENT",
        }

    def test_get_error_class(self) -> None:
        """Lookup by code."""
        assert get_error_class("E_INVALID_WINDOW") is EInvalidWindow

    def test_unknown_code_falls_back(self) -> None:
        """Unknown codes give the base class."""
        assert get_error_class("E_NOPE") is TSAnalyticsError
