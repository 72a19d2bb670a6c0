import pytest

from qmeta.errors import MissingRequiredFieldError, TypeMismatchError, UnknownFieldError
from qmeta.schema import MetadataField, MetadataSchema, UnknownFieldPolicy
from qmeta.values import DataType, to_value


def _schema(policy=UnknownFieldPolicy.REJECT):
    return (
        MetadataSchema.builder()
        .required("status", DataType.STRING)
        .optional("score", DataType.INT64)
        .unknown_field_policy(policy)
        .build()
    )


def test_default_policy_rejects_unknown_fields():
    schema = MetadataSchema.builder().build()
    assert schema.unknown_field_policy is UnknownFieldPolicy.REJECT
    assert MetadataSchema() == schema


def test_fields_are_sorted_and_typed():
    schema = MetadataSchema.builder().optional("z", DataType.BOOL).required("a", DataType.STRING).build()
    assert [key for key, _ in schema.fields()] == ["a", "z"]
    assert schema.field("a") == MetadataField(DataType.STRING, True)
    assert schema.field("z") == MetadataField(DataType.BOOL, False)
    assert schema.field_type("z") is DataType.BOOL
    assert schema.field_type("missing") is None
    assert schema.field("missing") is None


def test_redeclaring_a_key_replaces_it():
    schema = MetadataSchema.builder().required("k", DataType.STRING).optional("k", DataType.INT64).build()
    assert schema.field("k") == MetadataField(DataType.INT64, False)


def test_missing_required_field_is_reported():
    with pytest.raises(MissingRequiredFieldError) as info:
        _schema().validate({"score": to_value(1)})
    assert info.value == MissingRequiredFieldError("status", DataType.STRING)


def test_optional_field_may_be_absent_but_must_match_type():
    schema = _schema()
    assert schema.validate({"status": to_value("active")}) is None
    with pytest.raises(TypeMismatchError) as info:
        schema.validate({"status": to_value("active"), "score": to_value("high")})
    assert info.value.key == "score"
    assert info.value.expected is DataType.INT64
    assert info.value.actual is DataType.STRING


def test_unknown_field_is_rejected_by_default():
    with pytest.raises(UnknownFieldError) as info:
        _schema().validate({"status": to_value("active"), "extra": to_value(True)})
    assert info.value.key == "extra"


def test_unknown_field_is_allowed_by_policy():
    schema = _schema(UnknownFieldPolicy.ALLOW)
    schema.validate({"status": to_value("active"), "extra": to_value(True)})
    with pytest.raises(TypeMismatchError):
        schema.validate({"status": to_value(3), "extra": to_value(True)})


def test_validate_entry_checks_exact_type():
    schema = _schema()
    schema.validate_entry("score", to_value(5))
    with pytest.raises(TypeMismatchError) as info:
        schema.validate_entry("score", to_value(5, DataType.INT32))
    assert info.value == TypeMismatchError.schema_mismatch("score", DataType.INT64, DataType.INT32)


def test_schemas_compare_by_fields_and_policy():
    assert _schema() == _schema()
    assert _schema() != _schema(UnknownFieldPolicy.ALLOW)