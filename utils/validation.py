"""Input validation and sanitization utilities."""
from __future__ import annotations

import math
import re
from typing import Any, Optional


class ValidationError(Exception):
    """Raised when input validation fails."""
    pass


def sanitize_string(value: Any, max_length: int = 255, allow_empty: bool = True) -> Optional[str]:
    """
    Sanitize a string value.

    Args:
        value: Input value to sanitize
        max_length: Maximum allowed length
        allow_empty: Whether empty strings are allowed

    Returns:
        Sanitized string or None if input was None

    Raises:
        ValidationError: If validation fails
    """
    if value is None:
        return None

    result = str(value).strip()

    if not allow_empty and not result:
        raise ValidationError("Value cannot be empty")

    if len(result) > max_length:
        raise ValidationError(f"Value exceeds maximum length of {max_length} characters")

    # Strip markup characters before the value reaches a label or the settings table
    result = re.sub(r'[<>\"\'&]', '', result)

    return result


def parse_number(value: Any, default: Optional[float] = None) -> float:
    """
    Convert user input to a finite float.

    Blank input returns `default` when one is given.

    Raises:
        ValidationError: If the value is not a finite number
    """
    if isinstance(value, str):
        value = value.strip()
    if value is None or value == "":
        if default is None:
            raise ValidationError("A number is required")
        return default

    try:
        result = float(value)
    except (ValueError, TypeError):
        raise ValidationError("Invalid numeric value")

    if not math.isfinite(result):
        raise ValidationError("Value must be a finite number")
    return result


def validate_numeric(value: Any, min_value: Optional[float] = None,
                    max_value: Optional[float] = None, allow_zero: bool = True) -> float:
    """
    Validate and convert to a finite numeric value.

    Args:
        value: Input value to validate
        min_value: Minimum allowed value
        max_value: Maximum allowed value
        allow_zero: Whether zero is allowed

    Returns:
        Validated numeric value

    Raises:
        ValidationError: If validation fails
    """
    result = parse_number(value)

    if not allow_zero and result == 0:
        raise ValidationError("Value cannot be zero")

    if min_value is not None and result < min_value:
        raise ValidationError(f"Value must be at least {min_value}")

    if max_value is not None and result > max_value:
        raise ValidationError(f"Value cannot exceed {max_value}")

    return result


def validate_integer(value: Any, min_value: Optional[int] = None,
                    max_value: Optional[int] = None) -> int:
    """
    Validate and convert to a whole number.

    Fractional input such as "2.5" is rejected rather than truncated.

    Raises:
        ValidationError: If validation fails
    """
    number = parse_number(value)
    if not number.is_integer():
        raise ValidationError("Value must be a whole number")
    result = int(number)

    if min_value is not None and result < min_value:
        raise ValidationError(f"Value must be at least {min_value}")

    if max_value is not None and result > max_value:
        raise ValidationError(f"Value cannot exceed {max_value}")

    return result
