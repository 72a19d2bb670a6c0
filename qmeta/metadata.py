"""An ordered, typed key-value store for metadata fields."""

from __future__ import annotations

import copy
import json
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, Union

from qmeta.errors import MissingKeyError, TypeMismatchError
from qmeta.schema import MetadataSchema
from qmeta.values import DataType, Value, ValueConversionError, to_value

_Entries = Union[Mapping[str, Any], Iterable[tuple[str, Any]], None]


class Metadata:
    """Typed metadata entries, iterated in key-sorted order.

    Values are stored as :class:`Value`, so the concrete data type of each
    entry is preserved. Plain Python objects are wrapped with their inferred
    type; existing :class:`Value` instances are stored as they are.
    """

    def __init__(self, entries: _Entries = None) -> None:
        self._entries: dict[str, Value] = {}
        if entries is not None:
            self.extend(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return self.keys()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Metadata):
            return NotImplemented
        return self._entries == other._entries

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Metadata({dict(self.items())!r})"

    def __copy__(self) -> Metadata:
        result = Metadata()
        result._entries = dict(self._entries)
        return result

    def __deepcopy__(self, memo: dict[int, Any]) -> Metadata:
        result = Metadata()
        result._entries = copy.deepcopy(self._entries, memo)
        return result

    def get(self, key: str, data_type: DataType) -> Any:
        """Return the value of ``key`` converted to ``data_type``.

        Returns None when the key is absent or the conversion fails.
        """
        try:
            return self.try_get(key, data_type)
        except (MissingKeyError, TypeMismatchError):
            return None

    def try_get(self, key: str, data_type: DataType) -> Any:
        """Return the value of ``key`` converted to ``data_type``.

        Raises MissingKeyError when the key is absent, or TypeMismatchError
        when the stored value cannot be converted.
        """
        value = self._entries.get(key)
        if value is None:
            raise MissingKeyError(key)
        try:
            return value.to(data_type)
        except ValueConversionError as error:
            raise TypeMismatchError.conversion(key, data_type, value, error) from error

    def get_or(self, key: str, data_type: DataType, default: Any) -> Any:
        """Return the converted value of ``key``, or ``default`` on any failure."""
        try:
            return self.try_get(key, data_type)
        except (MissingKeyError, TypeMismatchError):
            return default

    def get_raw(self, key: str) -> Value | None:
        """Return the stored :class:`Value` of ``key``, or None."""
        return self._entries.get(key)

    def data_type(self, key: str) -> DataType | None:
        """Return the concrete data type stored under ``key``, or None."""
        value = self._entries.get(key)
        return None if value is None else value.data_type

    def set(self, key: str, value: Any) -> Value | None:
        """Store ``value`` under ``key`` and return the previous value, if any."""
        return self.set_raw(key, to_value(value))

    def set_checked(self, schema: MetadataSchema, key: str, value: Any) -> Value | None:
        """Store ``value`` after validating it against ``schema``.

        Raises UnknownFieldError or TypeMismatchError; the metadata is left
        unchanged when validation fails.
        """
        wrapped = to_value(value)
        schema.validate_entry(key, wrapped)
        return self.set_raw(key, wrapped)

    def with_checked(self, schema: MetadataSchema, key: str, value: Any) -> Metadata:
        """Return a copy with ``value`` validated and stored under ``key``."""
        result = copy.copy(self)
        result.set_checked(schema, key, value)
        return result

    def with_value(self, key: str, value: Any) -> Metadata:
        """Return a copy with ``value`` stored under ``key``."""
        result = copy.copy(self)
        result.set(key, value)
        return result

    def set_raw(self, key: str, value: Value) -> Value | None:
        """Store a :class:`Value` as it is and return the previous value, if any."""
        if not isinstance(value, Value):
            raise TypeError(f"expected a Value, got {type(value).__name__}")
        previous = self._entries.get(key)
        self._entries[key] = value
        return previous

    def with_raw(self, key: str, value: Value) -> Metadata:
        """Return a copy with a :class:`Value` stored under ``key``."""
        result = copy.copy(self)
        result.set_raw(key, value)
        return result

    def remove(self, key: str) -> Value | None:
        """Remove ``key`` and return its value, or None if it was absent."""
        return self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def items(self) -> Iterator[tuple[str, Value]]:
        """Iterate over ``(key, value)`` pairs in key-sorted order."""
        return ((key, self._entries[key]) for key in sorted(self._entries))

    def keys(self) -> Iterator[str]:
        """Iterate over the keys in sorted order."""
        return iter(sorted(self._entries))

    def values(self) -> Iterator[Value]:
        """Iterate over the values in key-sorted order."""
        return (value for _, value in self.items())

    def merge(self, other: Metadata) -> None:
        """Copy every entry of ``other`` into this object, overwriting on conflict."""
        self._entries.update(other.items())

    def merged(self, other: Metadata) -> Metadata:
        """Return a new object with the entries of both; ``other`` wins conflicts."""
        result = copy.copy(self)
        result.merge(other)
        return result

    def retain(self, predicate: Callable[[str, Value], bool]) -> None:
        """Keep only the entries for which ``predicate(key, value)`` is true."""
        self._entries = {
            key: value for key, value in self._entries.items() if predicate(key, value)
        }

    def extend(self, pairs: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> None:
        """Store every ``(key, value)`` pair, overwriting existing keys."""
        source = pairs.items() if isinstance(pairs, Mapping) else pairs
        for key, value in source:
            if not isinstance(key, str):
                raise TypeError(f"metadata keys must be strings, got {type(key).__name__}")
            self.set(key, value)

    def to_dict(self) -> dict[str, Value]:
        """Return the entries as a new key-sorted dictionary."""
        return dict(self.items())

    def to_json(self) -> str:
        """Serialize the entries, with their data types, as JSON text."""
        return json.dumps({key: value.encode() for key, value in self.items()}, sort_keys=True)

    @staticmethod
    def from_json(text: str) -> Metadata:
        """Rebuild metadata from text produced by :meth:`to_json`.

        Raises ValueError when the text is not a JSON object of encoded values.
        """
        raw = json.loads(text)
        if not isinstance(raw, dict):
            raise ValueError("metadata JSON must be an object")
        result = Metadata()
        for key, encoded in raw.items():
            result.set_raw(key, Value.decode(encoded))
        return result