"""Errors raised by explicit metadata accessors and schema validation."""

from __future__ import annotations

from dataclasses import dataclass

from qmeta.values import DataType, Value


class MetadataError(Exception):
    """Base class of all metadata errors."""

    def __post_init__(self) -> None:
        super().__init__(str(self))


@dataclass(eq=True)
class MissingKeyError(MetadataError):
    """The requested key does not exist."""

    key: str

    def __str__(self) -> str:
        return f"Metadata key not found: {self.key}"


@dataclass(eq=True)
class TypeMismatchError(MetadataError):
    """A stored value does not have, or cannot be converted to, the expected type."""

    key: str
    expected: DataType
    actual: DataType
    message: str

    def __str__(self) -> str:
        return (
            f"Metadata key '{self.key}' expected {self.expected} "
            f"but actual {self.actual}: {self.message}"
        )

    @classmethod
    def conversion(
        cls, key: str, expected: DataType, value: Value, error: Exception
    ) -> TypeMismatchError:
        """Build the error for a failed conversion of a stored value."""
        return cls(key, expected, value.data_type, str(error))

    @classmethod
    def schema_mismatch(
        cls, key: str, expected: DataType, actual: DataType
    ) -> TypeMismatchError:
        """Build the error for a value whose type differs from the schema."""
        return cls(key, expected, actual, f"expected {expected}, got {actual}")


@dataclass(eq=True)
class MissingRequiredFieldError(MetadataError):
    """A required schema field is missing from a metadata object."""

    key: str
    expected: DataType

    def __str__(self) -> str:
        return f"Required metadata key '{self.key}' is missing (expected {self.expected})"


@dataclass(eq=True)
class UnknownFieldError(MetadataError):
    """A metadata object contains a key the schema does not accept."""

    key: str

    def __str__(self) -> str:
        return f"Metadata key '{self.key}' is not defined in schema"


@dataclass(eq=True)
class UnknownFilterFieldError(MetadataError):
    """A filter references a key the schema does not define."""

    key: str

    def __str__(self) -> str:
        return f"Metadata filter references key '{self.key}' not defined in schema"


@dataclass(eq=True)
class InvalidFilterOperatorError(MetadataError):
    """A filter operator is not compatible with the field type."""

    key: str
    operator: str
    data_type: DataType
    message: str

    def __str__(self) -> str:
        return (
            f"Metadata filter operator '{self.operator}' is invalid for key "
            f"'{self.key}' with type {self.data_type}: {self.message}"
        )


@dataclass(eq=True)
class InvalidFilterExpressionError(MetadataError):
    """A filter expression is structurally invalid."""

    message: str

    def __str__(self) -> str:
        return f"Metadata filter expression is invalid: {self.message}"