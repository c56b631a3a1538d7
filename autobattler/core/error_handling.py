"""
Centralized error handling and input correction for the combat core.
"""

import logging
import math
import traceback
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


# Recorded errors kept in the history, oldest dropped first.
ERROR_HISTORY_LIMIT = 1000


class ErrorSeverity(Enum):
    """Enumeration of error severity levels for the combat error handling system."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class GameError:
    """Represents an error with severity, context, and optional exception information."""

    message: str
    severity: ErrorSeverity
    context: dict[str, Any]
    exception: Optional[Exception] = None


class ErrorHandler:
    """Centralized error handling for the simulation."""

    def __init__(self, history_limit: int = ERROR_HISTORY_LIMIT) -> None:
        """Initialize the ErrorHandler with a logger and a bounded error history."""
        self.logger = logging.getLogger("autobattler.errors")
        self.error_history: deque[GameError] = deque(maxlen=history_limit)

    def handle(
        self,
        message: str,
        severity: ErrorSeverity,
        context: Optional[dict[str, Any]] = None,
        exception: Optional[Exception] = None,
    ) -> None:
        """Record an error and forward it to the logger matching its severity."""
        error = GameError(
            message=message,
            severity=severity,
            context=context or {},
            exception=exception,
        )
        self.error_history.append(error)

        # Prefix context keys to avoid conflicts with logging system reserved keys.
        safe_context = {f"ctx_{key}": value for key, value in error.context.items()}

        if error.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(f"CRITICAL: {error.message}", extra=safe_context)
            if error.exception:
                self.logger.critical(traceback.format_exc())
        elif error.severity == ErrorSeverity.HIGH:
            self.logger.error(f"ERROR: {error.message}", extra=safe_context)
        elif error.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(f"WARNING: {error.message}", extra=safe_context)
        else:
            self.logger.info(f"INFO: {error.message}", extra=safe_context)

    def errors_of(self, severity: ErrorSeverity) -> list[GameError]:
        """Return the recorded errors with the given severity."""
        return [error for error in self.error_history if error.severity == severity]

    def clear(self) -> None:
        """Forget every recorded error."""
        self.error_history.clear()


# Global error handler instance
ERROR_HANDLER = ErrorHandler()


def log_info(
    message: str,
    context: Optional[dict[str, Any]] = None,
    exception: Optional[Exception] = None,
) -> None:
    """Log an info-level message."""
    ERROR_HANDLER.handle(message, ErrorSeverity.LOW, context, exception)


def log_warning(
    message: str,
    context: Optional[dict[str, Any]] = None,
    exception: Optional[Exception] = None,
) -> None:
    """Log a warning-level message."""
    ERROR_HANDLER.handle(message, ErrorSeverity.MEDIUM, context, exception)


def log_error(
    message: str,
    context: Optional[dict[str, Any]] = None,
    exception: Optional[Exception] = None,
) -> None:
    """Log an error-level message."""
    ERROR_HANDLER.handle(message, ErrorSeverity.HIGH, context, exception)


def log_critical(
    message: str,
    context: Optional[dict[str, Any]] = None,
    exception: Optional[Exception] = None,
) -> None:
    """Log a critical-level message."""
    ERROR_HANDLER.handle(message, ErrorSeverity.CRITICAL, context, exception)


# ==============================================================================
# VALIDATION HELPERS
# ==============================================================================
# Strict helpers raise, ensure_* helpers log a warning and correct the value.


def require_non_empty_string(
    value: Any, param_name: str, context: Optional[dict[str, Any]] = None
) -> str:
    """
    Validates that a value is a non-empty string.

    Args:
        value: The value to validate
        param_name: Human-readable parameter name for error messages
        context: Additional context for logging

    Returns:
        str: The validated string value

    Raises:
        ValueError: If validation fails
    """
    if not value or not isinstance(value, str):
        log_error(
            f"{param_name} must be a non-empty string, got: {value}",
            {
                **(context or {}),
                "param_name": param_name,
                "value": value,
                "type": type(value).__name__,
            },
        )
        raise ValueError(f"Invalid {param_name}: {value}")
    return value


def require_enum_type(
    value: Any,
    enum_class: type,
    param_name: str,
    context: Optional[dict[str, Any]] = None,
) -> Any:
    """
    Validates that a value is of the specified enum type.

    Args:
        value: The value to validate
        enum_class: The expected enum class
        param_name: Human-readable parameter name for error messages
        context: Additional context for logging

    Returns:
        The validated enum value

    Raises:
        ValueError: If validation fails
    """
    if not isinstance(value, enum_class):
        log_error(
            f"{param_name} must be {enum_class.__name__} enum, got: {type(value).__name__}",
            {
                **(context or {}),
                "param_name": param_name,
                "expected_type": enum_class.__name__,
                "actual_type": type(value).__name__,
                "value": value,
            },
        )
        raise ValueError(
            f"Invalid {param_name}: expected {enum_class.__name__}, got {type(value).__name__}"
        )
    return value


def ensure_non_negative_number(
    value: Any,
    param_name: str,
    default: float = 0.0,
    context: Optional[dict[str, Any]] = None,
) -> float:
    """
    Ensures a value is a finite, non-negative number, correcting if needed.
    Logs a warning for invalid values but continues execution.

    Args:
        value: The value to ensure is a non-negative number
        param_name: Human-readable parameter name for error messages
        default: Value used when the input is not a number at all
        context: Additional context for logging

    Returns:
        float: The corrected value
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        log_warning(
            f"{param_name} must be a number, got: {value}, correcting to {default}",
            {
                **(context or {}),
                "param_name": param_name,
                "value": value,
                "corrected_to": default,
            },
        )
        return default
    if not math.isfinite(value) or value < 0:
        log_warning(
            f"{param_name} must be non-negative and finite, got: {value}, correcting to 0",
            {
                **(context or {}),
                "param_name": param_name,
                "value": value,
                "corrected_to": 0,
            },
        )
        return 0.0
    return float(value)


def ensure_int_in_range(
    value: Any,
    param_name: str,
    min_val: int,
    max_val: Optional[int] = None,
    default: Optional[int] = None,
    context: Optional[dict[str, Any]] = None,
) -> int:
    """
    Ensures a value is an integer within the specified range, correcting if needed.
    Logs a warning for out-of-range values but continues execution.

    Args:
        value: The value to validate
        param_name: Human-readable parameter name for error messages
        min_val: Minimum allowed value (inclusive)
        max_val: Maximum allowed value (inclusive), None for no maximum
        default: Default value if correction is needed, uses min_val if None
        context: Additional context for logging

    Returns:
        int: The corrected integer value
    """
    if default is None:
        default = min_val

    if (
        not isinstance(value, int)
        or value < min_val
        or (max_val is not None and value > max_val)
    ):
        range_desc = (
            f">= {min_val}" if max_val is None else f"between {min_val} and {max_val}"
        )
        log_warning(
            f"{param_name} must be integer {range_desc}, got: {value}",
            {
                **(context or {}),
                "param_name": param_name,
                "value": value,
                "min_val": min_val,
                "max_val": max_val,
            },
        )
        if isinstance(value, (int, float)) and math.isfinite(value):
            converted = int(value)
        else:
            converted = default
        if converted < min_val:
            return min_val
        if max_val is not None and converted > max_val:
            return max_val
        return converted
    return value
