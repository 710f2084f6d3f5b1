"""Configuration validation against a template's field schema.

All functions here are pure: they read the field definitions and the
submitted values and return a report. Nothing raises for well-typed input;
a failed check is an entry in the result, not an exception.
"""

import math
import re
from collections.abc import Mapping, Sequence
from typing import Any, NamedTuple

from schemas.app import ConfigField

# Plain decimal literal, optionally signed, with an optional exponent
_DECIMAL_NUMBER = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class ValidationError(NamedTuple):
    """A single field that failed validation."""

    field: str
    message: str


class ValidationResult(NamedTuple):
    """Result of validating a whole configuration."""

    valid: bool
    errors: list[ValidationError]

    @classmethod
    def from_errors(cls, errors: list[ValidationError]) -> "ValidationResult":
        return cls(valid=not errors, errors=errors)


def is_empty(value: Any) -> bool:
    """Absent, None and the empty string all count as no value."""
    return value is None or value == ""


def validate_field(field: ConfigField, value: Any) -> ValidationError | None:
    """Validate one submitted value against its field definition.

    Args:
        field: Field definition from the template schema
        value: Submitted value (None when the key was not supplied)

    Returns:
        The first failed check for this field, or None if the value is valid
    """
    if is_empty(value):
        if field.required:
            return ValidationError(field.key, f"{field.label} is required")
        return None

    validate = _TYPE_VALIDATORS.get(field.type)
    if validate is None:
        # Unrecognized field types carry no value checks
        return None
    return validate(field, value)


def validate_configuration(
    fields: Sequence[ConfigField], config: Mapping[str, Any]
) -> ValidationResult:
    """Validate a flat key/value configuration against an ordered schema.

    Args:
        fields: Schema fields, in declaration order
        config: Submitted values keyed by field key

    Returns:
        ValidationResult with errors in field declaration order
    """
    errors: list[ValidationError] = []

    for field in fields:
        error = validate_field(field, config.get(field.key))
        if error is not None:
            errors.append(error)

    return ValidationResult.from_errors(errors)


def validate_string(field: ConfigField, value: Any) -> ValidationError | None:
    """Check length bounds, then pattern. Used for string and password fields."""
    if not isinstance(value, str):
        return ValidationError(field.key, f"{field.label} must be a string")

    rules = field.validation
    if rules is None:
        return None

    if rules.min_length is not None and len(value) < rules.min_length:
        return ValidationError(
            field.key,
            rules.pattern_message
            or f"{field.label} must be at least {rules.min_length} characters",
        )

    if rules.max_length is not None and len(value) > rules.max_length:
        return ValidationError(
            field.key,
            f"{field.label} must be at most {rules.max_length} characters",
        )

    if rules.pattern and not _full_match(rules.pattern, value):
        return ValidationError(
            field.key,
            rules.pattern_message or f"{field.label} has an invalid format",
        )

    return None


def validate_number(field: ConfigField, value: Any) -> ValidationError | None:
    """Coerce to a number and check the inclusive min/max bounds."""
    number = to_number(value)
    if number is None:
        return ValidationError(field.key, f"{field.label} must be a valid number")

    rules = field.validation
    if rules is None:
        return None

    if rules.min is not None and number < rules.min:
        return ValidationError(
            field.key, f"{field.label} must be at least {format_number(rules.min)}"
        )

    if rules.max is not None and number > rules.max:
        return ValidationError(
            field.key, f"{field.label} must be at most {format_number(rules.max)}"
        )

    return None


def validate_boolean(field: ConfigField, value: Any) -> ValidationError | None:
    if isinstance(value, bool) or value in ("true", "false"):
        return None
    return ValidationError(field.key, f"{field.label} must be a boolean")


def validate_select(field: ConfigField, value: Any) -> ValidationError | None:
    """Check the value against the declared option values (case-sensitive)."""
    if not field.options:
        return None

    valid_values = [stringify_value(option.value) for option in field.options]
    if stringify_value(value) not in valid_values:
        return ValidationError(
            field.key,
            f"{field.label} must be one of: {', '.join(valid_values)}",
        )

    return None


_TYPE_VALIDATORS = {
    "string": validate_string,
    "password": validate_string,
    "number": validate_number,
    "boolean": validate_boolean,
    "select": validate_select,
}


def to_number(value: Any) -> float | int | None:
    """Convert a numeric literal or numeric string, or return None.

    Strings must be plain decimals (``"42"``, ``"-1.5"``, ``"1e3"``) with
    optional surrounding whitespace; a whitespace-only string reads as 0.
    NaN and infinities are not numbers here.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        if not _DECIMAL_NUMBER.fullmatch(text):
            return None
        number = float(text)
    else:
        return None

    if isinstance(number, float) and not math.isfinite(number):
        return None
    return number


def format_number(value: float | int) -> str:
    """Render a number without a trailing '.0' for integral floats."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def stringify_value(value: Any) -> str:
    """Convert a configuration value to its canonical string form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


def _full_match(pattern: str, value: str) -> bool:
    # An uncompilable pattern can never be satisfied
    try:
        return re.fullmatch(pattern, value) is not None
    except re.error:
        return False
