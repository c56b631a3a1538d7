"""
Tests for the error history and the input correction helpers.
"""

import math

import pytest

from autobattler.core.constants import Side
from autobattler.core.error_handling import (
    ERROR_HANDLER,
    ErrorHandler,
    ErrorSeverity,
    ensure_int_in_range,
    ensure_non_negative_number,
    require_enum_type,
    require_non_empty_string,
)


@pytest.fixture(autouse=True)
def clean_history():
    ERROR_HANDLER.clear()
    yield
    ERROR_HANDLER.clear()


@pytest.mark.parametrize("value", [-5, math.nan, math.inf, "ten", None, True])
def test_malformed_amounts_become_zero(value):
    assert ensure_non_negative_number(value, "damage") == 0.0
    assert len(ERROR_HANDLER.errors_of(ErrorSeverity.MEDIUM)) == 1


def test_valid_amount_passes_silently():
    assert ensure_non_negative_number(12, "damage") == 12.0
    assert len(ERROR_HANDLER.error_history) == 0


@pytest.mark.parametrize(
    "value, expected",
    [(2, 2), (-1, 0), (9, 5), (3.7, 3), ("x", 0)],
)
def test_int_in_range_is_clamped(value, expected):
    assert ensure_int_in_range(value, "count", 0, 5) == expected


def test_strict_helpers_raise_and_record():
    with pytest.raises(ValueError):
        require_non_empty_string("", "unit_id")
    with pytest.raises(ValueError):
        require_enum_type("ally", Side, "side")
    assert len(ERROR_HANDLER.errors_of(ErrorSeverity.HIGH)) == 2
    assert require_enum_type(Side.ALLY, Side, "side") is Side.ALLY


def test_context_is_kept():
    ensure_non_negative_number(-1, "heal amount", context={"healer": "cleric"})
    error = ERROR_HANDLER.error_history[-1]
    assert error.context["healer"] == "cleric"
    assert error.context["corrected_to"] == 0


def test_history_is_bounded():
    handler = ErrorHandler(history_limit=3)
    for index in range(5):
        handler.handle(f"clamped {index}", ErrorSeverity.MEDIUM)
    assert [error.message for error in handler.error_history] == [
        "clamped 2",
        "clamped 3",
        "clamped 4",
    ]
