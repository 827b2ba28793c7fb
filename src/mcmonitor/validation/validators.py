"""
Scalar checks applied to raw TOML values.

Each validator returns the normalized value or raises ValidationError
carrying the dotted key of the setting.
"""

from typing import Any, Callable, List, Optional, TypeVar

from .exceptions import ValidationError

N = TypeVar("N", int, float)


def _validate_number(
    value: Any,
    convert: Callable[[Any], N],
    kind: str,
    min_value: N,
    max_value: Optional[N],
    field_name: str,
) -> N:
    # TOML booleans are ints in Python and are never a valid number here.
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be {kind}, got {value!r}",
                              field_name=field_name, value=value)
    try:
        number = convert(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be {kind}, got {value!r}",
                              field_name=field_name, value=value) from None

    if number < min_value or (max_value is not None and number > max_value):
        bounds = f">= {min_value}" if max_value is None else f"between {min_value} and {max_value}"
        raise ValidationError(f"{field_name} must be {bounds}, got {number}",
                              field_name=field_name, value=value)
    return number


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Check that a value is an integer within inclusive bounds.

    Examples:
        >>> validate_positive_integer(9200, max_value=65535, field_name="exporter.port")
        9200

    Raises:
        ValidationError: If the value is not an integer or is out of bounds
    """
    return _validate_number(value, int, "an integer", min_value, max_value, field_name)


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Check that a value is a number within inclusive bounds; ints are widened.

    Raises:
        ValidationError: If the value is not numeric or is out of bounds
    """
    return _validate_number(value, float, "a number", min_value, max_value, field_name)


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    """Return the stripped string, rejecting non-strings and blank strings."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string",
                              field_name=field_name, value=value)
    return value.strip()


def validate_enum_choice(
    value: Any,
    valid_choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Check that a value names one of the allowed choices.

    Args:
        value: Raw value from the file
        valid_choices: Accepted spellings
        field_name: Dotted key of the setting
        case_sensitive: If False, "info" matches "INFO"

    Returns:
        The entry of valid_choices that matched, in its listed spelling

    Raises:
        ValidationError: If nothing matches
    """
    text = str(value)
    for choice in valid_choices:
        if choice == text or (not case_sensitive and choice.lower() == text.lower()):
            return choice

    raise ValidationError(f"{field_name} must be one of {valid_choices}, got {value!r}",
                          field_name=field_name, value=value)
