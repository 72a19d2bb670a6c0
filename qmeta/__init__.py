"""Typed, ordered metadata store with typed values, JSON encoding and schema validation."""

__version__ = "0.4.2"

__all__ = ["errors", "metadata", "schema", "values"]