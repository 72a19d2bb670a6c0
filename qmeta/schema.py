"""Schemas that declare metadata fields, their types and whether they are required."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from qmeta.errors import MissingRequiredFieldError, TypeMismatchError, UnknownFieldError
from qmeta.values import DataType, Value


class UnknownFieldPolicy(Enum):
    """How fields not declared by a schema are treated."""

    REJECT = "reject"
    ALLOW = "allow"


@dataclass(frozen=True)
class MetadataField:
    """Definition of one field in a schema."""

    data_type: DataType
    required: bool = False


class MetadataSchema:
    """Declared metadata keys with their data types and requiredness."""

    def __init__(
        self,
        fields: Mapping[str, MetadataField] | None = None,
        unknown_field_policy: UnknownFieldPolicy = UnknownFieldPolicy.REJECT,
    ) -> None:
        self._fields = dict(sorted((fields or {}).items()))
        self.unknown_field_policy = unknown_field_policy

    @staticmethod
    def builder() -> MetadataSchemaBuilder:
        """Return a new schema builder."""
        return MetadataSchemaBuilder()

    def field(self, key: str) -> MetadataField | None:
        """Return the definition of ``key``, or None."""
        return self._fields.get(key)

    def field_type(self, key: str) -> DataType | None:
        """Return the declared data type of ``key``, or None."""
        found = self._fields.get(key)
        return None if found is None else found.data_type

    def fields(self) -> Iterator[tuple[str, MetadataField]]:
        """Iterate over the field definitions in key order."""
        return iter(self._fields.items())

    def validate(self, meta: Any) -> None:
        """Check a metadata mapping against this schema.

        Raises MissingRequiredFieldError, TypeMismatchError or UnknownFieldError.
        """
        for key, definition in self._fields.items():
            if definition.required and key not in meta:
                raise MissingRequiredFieldError(key, definition.data_type)
        for key, value in sorted(meta.items(), key=lambda item: item[0]):
            self.validate_entry(key, value)

    def validate_entry(self, key: str, value: Value) -> None:
        """Check one key and value against this schema."""
        definition = self._fields.get(key)
        if definition is None:
            if self.unknown_field_policy is UnknownFieldPolicy.REJECT:
                raise UnknownFieldError(key)
            return
        if definition.data_type is not value.data_type:
            raise TypeMismatchError.schema_mismatch(key, definition.data_type, value.data_type)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MetadataSchema):
            return NotImplemented
        return (
            self._fields == other._fields
            and self.unknown_field_policy is other.unknown_field_policy
        )

    def __repr__(self) -> str:
        return (
            f"MetadataSchema(fields={self._fields!r}, "
            f"unknown_field_policy={self.unknown_field_policy})"
        )


class MetadataSchemaBuilder:
    """Fluent construction of a :class:`MetadataSchema`."""

    def __init__(self) -> None:
        self._fields: dict[str, MetadataField] = {}
        self._policy = UnknownFieldPolicy.REJECT

    def required(self, key: str, data_type: DataType) -> MetadataSchemaBuilder:
        """Declare a field that must be present."""
        self._fields[key] = MetadataField(data_type, True)
        return self

    def optional(self, key: str, data_type: DataType) -> MetadataSchemaBuilder:
        """Declare a field that may be absent."""
        self._fields[key] = MetadataField(data_type, False)
        return self

    def unknown_field_policy(self, policy: UnknownFieldPolicy) -> MetadataSchemaBuilder:
        """Set how undeclared keys are treated."""
        self._policy = policy
        return self

    def build(self) -> MetadataSchema:
        """Return the schema built so far."""
        return MetadataSchema(self._fields, self._policy)