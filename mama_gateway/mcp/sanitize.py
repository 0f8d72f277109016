"""Shared sanitization utilities for the tool layer.

Validation failures raise ValueError; the server turns them into
``Error: ...`` replies.
"""

import math
import re
from typing import Any, List, Optional


def sanitize_string(
    value: Any, field_name: str, max_length: int = 1000, required: bool = True
) -> str:
    """Sanitize and validate string inputs.

    Args:
        value: The value to sanitize
        field_name: Name of the field for error messages
        max_length: Maximum allowed string length
        required: If True, missing or blank strings are rejected

    Returns:
        Sanitized string, stripped of surrounding whitespace

    Raises:
        ValueError: If validation fails
    """
    if value is None:
        if required:
            raise ValueError(f"{field_name} required")
        return ""

    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string, got {type(value).__name__}")

    value = value.strip()
    if required and not value:
        raise ValueError(f"{field_name} required")

    if len(value) > max_length:
        raise ValueError(f"{field_name} too long (max {max_length} characters, got {len(value)})")

    # Remove null bytes and control characters except newlines and tabs
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", value)


def validate_enum(
    value: Any,
    field_name: str,
    valid_values: List[str],
    default: Optional[str] = None,
    case_insensitive: bool = False,
) -> str:
    """Validate enum values.

    Raises:
        ValueError: If the value is missing (with no default) or not allowed
    """
    if value is None or value == "":
        if default is not None:
            return default
        raise ValueError(f"{field_name} required")

    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")

    if case_insensitive:
        value = value.strip().lower()

    if value not in valid_values:
        raise ValueError(f"{field_name} must be one of {valid_values}, got '{value}'")

    return value


def validate_number(
    value: Any,
    field_name: str,
    min_val: Optional[float] = None,
    max_val: Optional[float] = None,
    default: Optional[float] = None,
) -> float:
    """Validate numeric values.

    Raises:
        ValueError: If validation fails
    """
    if value is None:
        if default is not None:
            return default
        raise ValueError(f"{field_name} required")

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be a number, got {type(value).__name__}")

    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        raise ValueError(f"{field_name} must be a finite number, got {value}")

    if min_val is not None and value < min_val:
        raise ValueError(f"{field_name} must be >= {min_val}, got {value}")

    if max_val is not None and value > max_val:
        raise ValueError(f"{field_name} must be <= {max_val}, got {value}")

    return float(value)


def clamp_limit(value: Any, default: int, maximum: int) -> int:
    """Coerce a result limit: fall back to ``default`` when unusable, cap at ``maximum``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    limit = int(value)
    if limit < 1:
        return default
    return min(limit, maximum)
