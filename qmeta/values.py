"""Typed values stored in metadata, and conversions to and from Python objects."""

from __future__ import annotations

import copy
import datetime as dt
import json
import math
import re
import struct
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any


class DataType(Enum):
    """Concrete data type of a stored value."""

    BOOL = "bool"
    CHAR = "char"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    INT128 = "int128"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    UINT128 = "uint128"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    INSTANT = "instant"
    BIG_INTEGER = "biginteger"
    BIG_DECIMAL = "bigdecimal"
    INT_SIZE = "intsize"
    UINT_SIZE = "uintsize"
    DURATION = "duration"
    URL = "url"
    STRING_MAP = "stringmap"
    JSON = "json"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        """Short type name used in conversion messages."""
        return _LABELS[self]

    @property
    def is_integer(self) -> bool:
        """True for every integral type, including arbitrary precision."""
        return self in _INT_RANGES or self is DataType.BIG_INTEGER

    @property
    def is_numeric(self) -> bool:
        """True for integral, floating point and decimal types."""
        return self.is_integer or self in _FLOATS or self is DataType.BIG_DECIMAL


_I64 = (-(2**63), 2**63 - 1)
_U64 = (0, 2**64 - 1)

_INT_RANGES: dict[DataType, tuple[int, int]] = {
    DataType.INT8: (-(2**7), 2**7 - 1),
    DataType.INT16: (-(2**15), 2**15 - 1),
    DataType.INT32: (-(2**31), 2**31 - 1),
    DataType.INT64: _I64,
    DataType.INT128: (-(2**127), 2**127 - 1),
    DataType.UINT8: (0, 2**8 - 1),
    DataType.UINT16: (0, 2**16 - 1),
    DataType.UINT32: (0, 2**32 - 1),
    DataType.UINT64: _U64,
    DataType.UINT128: (0, 2**128 - 1),
    DataType.INT_SIZE: _I64,
    DataType.UINT_SIZE: _U64,
}

_FLOATS = frozenset({DataType.FLOAT32, DataType.FLOAT64})
_TEMPORAL = frozenset({DataType.DATE, DataType.TIME, DataType.DATETIME, DataType.INSTANT})

_LABELS: dict[DataType, str] = {
    DataType.BOOL: "bool",
    DataType.CHAR: "char",
    DataType.INT8: "i8",
    DataType.INT16: "i16",
    DataType.INT32: "i32",
    DataType.INT64: "i64",
    DataType.INT128: "i128",
    DataType.UINT8: "u8",
    DataType.UINT16: "u16",
    DataType.UINT32: "u32",
    DataType.UINT64: "u64",
    DataType.UINT128: "u128",
    DataType.FLOAT32: "f32",
    DataType.FLOAT64: "f64",
    DataType.STRING: "string",
    DataType.DATE: "date",
    DataType.TIME: "time",
    DataType.DATETIME: "datetime",
    DataType.INSTANT: "instant",
    DataType.BIG_INTEGER: "BigInt",
    DataType.BIG_DECIMAL: "BigDecimal",
    DataType.INT_SIZE: "isize",
    DataType.UINT_SIZE: "usize",
    DataType.DURATION: "duration",
    DataType.URL: "url",
    DataType.STRING_MAP: "string map",
    DataType.JSON: "json",
}

_URL_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:\S+$")


class ValueConversionError(ValueError):
    """Raised when an object cannot be stored as, or read back as, a data type."""

    def __init__(self, message: str, *, target: DataType | None = None) -> None:
        super().__init__(message)
        self.target = target


class _Fail:
    """Marker for a conversion that did not apply."""


_FAIL = _Fail()


@dataclass(frozen=True)
class Value:
    """A payload tagged with its concrete data type."""

    data_type: DataType
    payload: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", _coerce(self.payload, self.data_type))

    def to(self, data_type: DataType) -> Any:
        """Return the payload converted to ``data_type``.

        Raises ValueConversionError when the conversion is not supported or
        the payload does not fit the target type.
        """
        result = _convert(self.data_type, self.payload, data_type)
        if result is _FAIL:
            shown = _display(self.data_type, self.payload)
            raise ValueConversionError(
                f"Cannot convert '{shown}' to {data_type.label}", target=data_type
            )
        return result

    def encode(self) -> dict[str, Any]:
        """Return a JSON-compatible representation of this value."""
        return {"type": self.data_type.value, "value": _encode_payload(self.data_type, self.payload)}

    @classmethod
    def decode(cls, obj: Any) -> Value:
        """Rebuild a value from the representation produced by :meth:`encode`."""
        try:
            data_type = DataType(obj["type"])
            payload = _decode_payload(data_type, obj["value"])
        except (KeyError, TypeError, ValueError, InvalidOperation) as error:
            if isinstance(error, ValueConversionError):
                raise
            raise ValueConversionError(f"Invalid encoded value: {error}") from error
        return cls(data_type, payload)


def to_value(obj: Any, data_type: DataType | None = None) -> Value:
    """Wrap ``obj`` as a :class:`Value`, inferring the data type when none is given."""
    if isinstance(obj, Value):
        if data_type is None or data_type is obj.data_type:
            return obj
        return Value(data_type, obj.to(data_type))
    if data_type is None:
        data_type = _infer(obj)
    return Value(data_type, obj)


def from_value(value: Value, data_type: DataType) -> Any:
    """Convert a stored value to a Python object of ``data_type``."""
    return value.to(data_type)


def _infer(obj: Any) -> DataType:
    if isinstance(obj, bool):
        return DataType.BOOL
    if isinstance(obj, int):
        low, high = _I64
        return DataType.INT64 if low <= obj <= high else DataType.BIG_INTEGER
    if isinstance(obj, float):
        return DataType.FLOAT64
    if isinstance(obj, Decimal):
        return DataType.BIG_DECIMAL
    if isinstance(obj, str):
        return DataType.STRING
    if isinstance(obj, dt.datetime):
        return DataType.DATETIME if obj.utcoffset() is None else DataType.INSTANT
    if isinstance(obj, dt.date):
        return DataType.DATE
    if isinstance(obj, dt.time):
        return DataType.TIME
    if isinstance(obj, dt.timedelta):
        return DataType.DURATION
    if obj is None or isinstance(obj, (dict, list, tuple)):
        return DataType.JSON
    raise TypeError(f"unsupported metadata value type: {type(obj).__name__}")


def _is_int(obj: Any) -> bool:
    return isinstance(obj, int) and not isinstance(obj, bool)


def _int_fits(number: int, data_type: DataType) -> bool:
    if data_type is DataType.BIG_INTEGER:
        return True
    low, high = _INT_RANGES[data_type]
    return low <= number <= high


def _to_f32(number: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)


def _float_for(data_type: DataType, number: float) -> float:
    return _to_f32(number) if data_type is DataType.FLOAT32 else float(number)


def _json_copy(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, (list, tuple)):
        items = [_json_copy(item) for item in obj]
        return _FAIL if any(item is _FAIL for item in items) else items
    if isinstance(obj, Mapping):
        if not all(isinstance(key, str) for key in obj):
            return _FAIL
        result = {key: _json_copy(item) for key, item in obj.items()}
        return _FAIL if any(item is _FAIL for item in result.values()) else result
    return _FAIL


def _coerce(obj: Any, data_type: DataType) -> Any:
    if not isinstance(data_type, DataType):
        raise TypeError(f"expected a DataType, got {data_type!r}")
    if data_type is DataType.BOOL:
        if isinstance(obj, bool):
            return obj
    elif data_type is DataType.CHAR:
        if isinstance(obj, str) and len(obj) == 1:
            return obj
    elif data_type.is_integer:
        if _is_int(obj) and _int_fits(obj, data_type):
            return int(obj)
    elif data_type in _FLOATS:
        if _is_int(obj) or isinstance(obj, float):
            try:
                return _float_for(data_type, float(obj))
            except OverflowError:
                pass
    elif data_type is DataType.STRING:
        if isinstance(obj, str):
            return obj
    elif data_type is DataType.BIG_DECIMAL:
        if isinstance(obj, Decimal):
            return obj
        if _is_int(obj):
            return Decimal(obj)
        if isinstance(obj, float) and math.isfinite(obj):
            return Decimal(repr(obj))
    elif data_type is DataType.DATE:
        if isinstance(obj, dt.date) and not isinstance(obj, dt.datetime):
            return obj
    elif data_type is DataType.TIME:
        if isinstance(obj, dt.time):
            return obj
    elif data_type is DataType.DATETIME:
        if isinstance(obj, dt.datetime) and obj.utcoffset() is None:
            return obj
    elif data_type is DataType.INSTANT:
        if isinstance(obj, dt.datetime) and obj.utcoffset() is not None:
            return obj.astimezone(dt.timezone.utc)
    elif data_type is DataType.DURATION:
        if isinstance(obj, dt.timedelta) and obj >= dt.timedelta(0):
            return obj
    elif data_type is DataType.URL:
        if isinstance(obj, str) and _URL_PATTERN.match(obj):
            return obj
    elif data_type is DataType.STRING_MAP:
        if isinstance(obj, Mapping) and all(
            isinstance(key, str) and isinstance(item, str) for key, item in obj.items()
        ):
            return dict(obj)
    elif data_type is DataType.JSON:
        result = _json_copy(obj)
        if result is not _FAIL:
            return result
    raise ValueConversionError(
        f"Cannot convert {obj!r} to {data_type.label}", target=data_type
    )


def _display(data_type: DataType, payload: Any) -> str:
    if data_type is DataType.BOOL:
        return "true" if payload else "false"
    if data_type in _TEMPORAL:
        return payload.isoformat()
    if data_type in (DataType.JSON, DataType.STRING_MAP):
        return json.dumps(payload, sort_keys=True)
    return str(payload)


def _as_integer(data_type: DataType, payload: Any) -> int | None:
    if data_type.is_integer:
        return payload
    if data_type is DataType.BIG_DECIMAL:
        if payload.is_finite() and payload == payload.to_integral_value():
            return int(payload)
        return None
    if data_type is DataType.STRING:
        try:
            return int(payload.strip())
        except ValueError:
            return None
    return None


def _as_float(data_type: DataType, payload: Any) -> float | None:
    try:
        if data_type.is_integer or data_type in _FLOATS or data_type is DataType.BIG_DECIMAL:
            return float(payload)
        if data_type is DataType.STRING:
            return float(payload.strip())
    except (ValueError, OverflowError):
        return None
    return None


def _as_decimal(data_type: DataType, payload: Any) -> Decimal | None:
    if data_type.is_integer:
        return Decimal(payload)
    if data_type in _FLOATS:
        return Decimal(repr(payload)) if math.isfinite(payload) else None
    if data_type is DataType.STRING:
        try:
            result = Decimal(payload.strip())
        except InvalidOperation:
            return None
        return result if result.is_finite() else None
    return None


def _parse_instant(text: str) -> dt.datetime:
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    moment = dt.datetime.fromisoformat(text)
    if moment.utcoffset() is None:
        raise ValueError(f"instant without offset: {text}")
    return moment.astimezone(dt.timezone.utc)


def _as_temporal(source: DataType, payload: Any, target: DataType) -> Any:
    if source is DataType.DATETIME and target is DataType.INSTANT:
        return payload.replace(tzinfo=dt.timezone.utc)
    if source is DataType.INSTANT and target is DataType.DATETIME:
        return payload.astimezone(dt.timezone.utc).replace(tzinfo=None)
    if source is not DataType.STRING:
        return _FAIL
    text = payload.strip()
    try:
        if target is DataType.DATE:
            return dt.date.fromisoformat(text)
        if target is DataType.TIME:
            return dt.time.fromisoformat(text)
        if target is DataType.DATETIME:
            moment = dt.datetime.fromisoformat(text)
            return moment if moment.utcoffset() is None else _FAIL
        return _parse_instant(text)
    except ValueError:
        return _FAIL


def _as_json(data_type: DataType, payload: Any) -> Any:
    if data_type in (DataType.BOOL, DataType.CHAR, DataType.STRING, DataType.URL):
        return payload
    if data_type.is_integer:
        return payload
    if data_type in _FLOATS:
        return payload if math.isfinite(payload) else _FAIL
    if data_type is DataType.STRING_MAP:
        return dict(payload)
    if data_type in _TEMPORAL:
        return payload.isoformat()
    return _FAIL


def _convert(source: DataType, payload: Any, target: DataType) -> Any:
    if source is target:
        return copy.deepcopy(payload)
    if target.is_integer:
        number = _as_integer(source, payload)
        if number is None or not _int_fits(number, target):
            return _FAIL
        return number
    if target in _FLOATS:
        number = _as_float(source, payload)
        return _FAIL if number is None else _float_for(target, number)
    if target is DataType.BIG_DECIMAL:
        decimal = _as_decimal(source, payload)
        return _FAIL if decimal is None else decimal
    if target is DataType.BOOL:
        if source is DataType.STRING and payload.strip().lower() in ("true", "false"):
            return payload.strip().lower() == "true"
        return _FAIL
    if target is DataType.CHAR:
        if source is DataType.STRING and len(payload) == 1:
            return payload
        return _FAIL
    if target is DataType.STRING:
        return _display(source, payload)
    if target in _TEMPORAL:
        return _as_temporal(source, payload, target)
    if target is DataType.URL:
        if source is DataType.STRING and _URL_PATTERN.match(payload):
            return payload
        return _FAIL
    if target is DataType.STRING_MAP:
        if (
            source is DataType.JSON
            and isinstance(payload, dict)
            and all(isinstance(item, str) for item in payload.values())
        ):
            return dict(payload)
        return _FAIL
    if target is DataType.JSON:
        return _as_json(source, payload)
    return _FAIL


def _encode_payload(data_type: DataType, payload: Any) -> Any:
    if data_type is DataType.BIG_DECIMAL:
        return str(payload)
    if data_type in _TEMPORAL:
        return payload.isoformat()
    if data_type is DataType.DURATION:
        seconds = payload.days * 86400 + payload.seconds
        return {"secs": seconds, "nanos": payload.microseconds * 1000}
    if data_type in (DataType.JSON, DataType.STRING_MAP):
        return copy.deepcopy(payload)
    return payload


def _decode_payload(data_type: DataType, raw: Any) -> Any:
    if data_type is DataType.BIG_DECIMAL:
        return Decimal(raw)
    if data_type is DataType.DATE:
        return dt.date.fromisoformat(raw)
    if data_type is DataType.TIME:
        return dt.time.fromisoformat(raw)
    if data_type is DataType.DATETIME:
        return dt.datetime.fromisoformat(raw)
    if data_type is DataType.INSTANT:
        return _parse_instant(raw)
    if data_type is DataType.DURATION:
        return dt.timedelta(seconds=raw["secs"], microseconds=raw["nanos"] // 1000)
    if data_type in _FLOATS and _is_int(raw):
        return float(raw)
    return raw