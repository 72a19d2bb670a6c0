import datetime as dt
from decimal import Decimal

import pytest

from qmeta.values import DataType, Value, ValueConversionError, from_value, to_value


def test_into_value_preserves_string_type():
    assert to_value("active") == Value(DataType.STRING, "active")


def test_into_value_preserves_built_string_type():
    assert to_value(str("active")) == Value(DataType.STRING, "active")


def test_into_value_preserves_integer_type():
    assert to_value(42) == Value(DataType.INT64, 42)


def test_from_value_converts_matching_scalar_type():
    assert from_value(Value(DataType.INT64, 42), DataType.INT64) == 42


def test_from_value_reports_type_mismatch():
    with pytest.raises(ValueConversionError) as info:
        from_value(Value(DataType.STRING, "active"), DataType.INT64)
    assert "Cannot convert 'active' to i64" in str(info.value)
    assert info.value.target is DataType.INT64


@pytest.mark.parametrize(
    "obj, expected",
    [
        (True, DataType.BOOL),
        (1.5, DataType.FLOAT64),
        (Decimal("1.25"), DataType.BIG_DECIMAL),
        (dt.date(2024, 1, 2), DataType.DATE),
        (dt.datetime(2024, 1, 2, 3, 4), DataType.DATETIME),
        (dt.time(3, 4), DataType.TIME),
        (dt.timedelta(seconds=5), DataType.DURATION),
        ({"a": [1, 2]}, DataType.JSON),
        (2**70, DataType.BIG_INTEGER),
    ],
)
def test_inference_keeps_payload(obj, expected):
    value = to_value(obj)
    assert value.data_type is expected
    assert value.payload == obj


def test_aware_datetime_becomes_utc_instant():
    moment = dt.datetime(2024, 1, 2, 3, 4, tzinfo=dt.timezone(dt.timedelta(hours=2)))
    value = to_value(moment)
    assert value.data_type is DataType.INSTANT
    assert value.payload == moment
    assert value.payload.utcoffset() == dt.timedelta(0)


def test_explicit_unsigned_type_accepts_in_range():
    assert to_value(5, DataType.UINT8) == Value(DataType.UINT8, 5)


@pytest.mark.parametrize(
    "obj, data_type",
    [(256, DataType.UINT8), (-1, DataType.UINT64), (2**127, DataType.INT128), ("x", DataType.INT64)],
)
def test_explicit_type_rejects_out_of_range(obj, data_type):
    with pytest.raises(ValueConversionError):
        to_value(obj, data_type)


def test_narrowing_conversion_checks_range():
    assert Value(DataType.INT64, 100).to(DataType.INT8) == 100
    with pytest.raises(ValueConversionError):
        Value(DataType.INT64, 300).to(DataType.INT8)


def test_string_parses_to_integer():
    assert Value(DataType.STRING, "12").to(DataType.INT32) == 12


def test_integer_converts_to_float():
    assert Value(DataType.INT64, 3).to(DataType.FLOAT64) == 3.0


def test_float_does_not_convert_to_integer():
    with pytest.raises(ValueConversionError):
        Value(DataType.FLOAT64, 1.5).to(DataType.INT64)


def test_bool_displays_as_string():
    assert Value(DataType.BOOL, True).to(DataType.STRING) == "true"


def test_float32_is_rounded_to_single_precision():
    payload = to_value(0.1, DataType.FLOAT32).payload
    assert payload == pytest.approx(0.1, rel=1e-6)
    assert payload != 0.1


def test_json_object_converts_to_string_map():
    assert Value(DataType.JSON, {"a": "b"}).to(DataType.STRING_MAP) == {"a": "b"}
    with pytest.raises(ValueConversionError):
        Value(DataType.JSON, {"a": 1}).to(DataType.STRING_MAP)


def test_json_payload_is_copied():
    source = {"nested": [1]}
    value = to_value(source)
    source["nested"].append(2)
    assert value.payload == {"nested": [1]}
    extracted = value.to(DataType.JSON)
    extracted["nested"].append(3)
    assert value.payload == {"nested": [1]}


def test_negative_duration_is_rejected():
    with pytest.raises(ValueConversionError):
        to_value(dt.timedelta(seconds=-1))


def test_url_validation():
    assert to_value("https://example.com", DataType.URL).payload == "https://example.com"
    with pytest.raises(ValueConversionError):
        to_value("not a url", DataType.URL)


def test_existing_value_passes_through():
    value = Value(DataType.INT16, 7)
    assert to_value(value) is value
    assert to_value(value, DataType.INT64) == Value(DataType.INT64, 7)


def test_unsupported_object_raises_type_error():
    with pytest.raises(TypeError):
        to_value(object())


def test_encode_shape():
    assert Value(DataType.INT64, 42).encode() == {"type": "int64", "value": 42}


@pytest.mark.parametrize(
    "value",
    [
        Value(DataType.BOOL, False),
        Value(DataType.CHAR, "x"),
        Value(DataType.UINT128, 2**128 - 1),
        Value(DataType.FLOAT64, 3.0),
        Value(DataType.FLOAT32, 2.5),
        Value(DataType.BIG_DECIMAL, Decimal("10.50")),
        Value(DataType.DATE, dt.date(2024, 5, 6)),
        Value(DataType.TIME, dt.time(7, 8, 9)),
        Value(DataType.DATETIME, dt.datetime(2024, 5, 6, 7, 8)),
        Value(DataType.INSTANT, dt.datetime(2024, 5, 6, 7, 8, tzinfo=dt.timezone.utc)),
        Value(DataType.DURATION, dt.timedelta(days=1, seconds=2, microseconds=3)),
        Value(DataType.URL, "https://example.com/a"),
        Value(DataType.STRING_MAP, {"k": "v"}),
        Value(DataType.JSON, {"nested": True}),
    ],
)
def test_encode_decode_round_trip(value):
    assert Value.decode(value.encode()) == value


def test_decode_rejects_unknown_type():
    with pytest.raises(ValueConversionError):
        Value.decode({"type": "nope", "value": 1})