"""
Chain Configuration Schema.

Field definitions for the per-chain settings table and validation of values
read from or written to the TOML file.
"""

from dataclasses import dataclass
from typing import Any


class SchemaError(Exception):
    """Base exception for schema-related errors."""

    pass


class ValidationError(SchemaError):
    """Raised when value validation fails."""

    pass


def _matches(value: Any, type_: type) -> bool:
    # bool is an int subclass; keep True/False out of int fields and vice versa
    if type_ is not bool and isinstance(value, bool):
        return False
    return isinstance(value, type_)


@dataclass
class ConfigField:
    """
    A typed configuration field.

    Attributes:
        type_: The expected type of the field value
        default: Default value for the field
        description: Human-readable description, rendered as a TOML comment
    """

    type_: type
    default: Any
    description: str = ""

    def __post_init__(self):
        if not _matches(self.default, self.type_):
            raise SchemaError(
                f"Default value {self.default!r} does not match type {self.type_.__name__}"
            )

    def validate(self, value: Any) -> None:
        """
        Validate a value against this field.

        Raises:
            ValidationError: If validation fails
        """
        if not _matches(value, self.type_):
            raise ValidationError(
                f"Expected type {self.type_.__name__}, got {type(value).__name__}"
            )


def validate_config(config: dict[str, Any], schema: dict[str, ConfigField]) -> None:
    """
    Validate a chain table against a schema.

    Unknown keys are rejected, missing keys are allowed (they take defaults).

    Raises:
        ValidationError: If validation fails
    """
    for key in config:
        if key not in schema:
            raise ValidationError(f"Unknown configuration field: {key}")

    for field_name, value in config.items():
        try:
            schema[field_name].validate(value)
        except ValidationError as e:
            raise ValidationError(f"Field '{field_name}': {e}") from e


def generate_default_config(schema: dict[str, ConfigField]) -> dict[str, Any]:
    """Default value for every field of the schema."""
    return {field_name: field.default for field_name, field in schema.items()}


CHAIN_SCHEMA: dict[str, ConfigField] = {
    "thread_guard": ConfigField(
        bool,
        False,
        "Reject use of the chain from a second thread while one thread traverses it",
    ),
    "warn_on_idle_disregard": ConfigField(
        bool,
        False,
        "Emit a RuntimeWarning when disregard() is called on an idle chain",
    ),
    "box_events": ConfigField(
        bool,
        True,
        "Wrap raw events in a Box before the registry starts a traversal",
    ),
}
