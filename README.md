# qmeta

`qmeta` is a small library with no dependencies. It attaches typed metadata to
your own data models.

A `Metadata` object is a key-value store whose keys are always iterated in
sorted order. Each value is kept as a `Value`, which pairs a payload with its
concrete `DataType`. The type can be `int64`, `uint32`, `float64`, `string`,
`bool`, `date`, `json` and so on, so numbers are not reduced to one generic
number type.

An optional `MetadataSchema` declares which keys are allowed, what type each
one holds and whether it is required.

## Installation

```
pip install qmeta
```

## Values and data types

`qmeta.values` defines these:

- `DataType`, an enum of every supported type.
- `Value`, a frozen pair of `data_type` and `payload`.
- `to_value(obj, data_type=None)` wraps an object. With no type given, the type
  is inferred from the object:

  | Object | Inferred type |
  |---|---|
  | `bool` | `BOOL` |
  | `int` in the signed 64-bit range | `INT64` |
  | any other `int` | `BIG_INTEGER` |
  | `float` | `FLOAT64` |
  | `Decimal` | `BIG_DECIMAL` |
  | `str` | `STRING` |
  | naive `datetime` | `DATETIME` |
  | aware `datetime` | `INSTANT`, stored in UTC |
  | `date` | `DATE` |
  | `time` | `TIME` |
  | `timedelta` | `DURATION` |
  | `None`, `dict`, `list`, `tuple` | `JSON` |

  Other objects raise `TypeError`.
- `from_value(value, data_type)` and `Value.to(data_type)` convert a stored
  value.

A payload that does not fit its type raises `ValueConversionError`, a
subclass of `ValueError`. Examples are `300` as `UINT8`, or a string that is
not a single character as `CHAR`. An unsupported conversion raises the same
error:

```python
from qmeta.values import DataType, to_value

to_value(42).to(DataType.INT64)         # 42
to_value("42").to(DataType.UINT8)       # 42, parsed from the string
to_value("active").to(DataType.INT64)   # ValueConversionError: Cannot convert 'active' to i64
```

Conversions include these:

- Integer types accept any integral value that fits their range.
- Floats, decimals and numeric strings convert between each other.
- Every value can be shown as a `STRING`.
- ISO 8601 strings parse to the date and time types.
- `"true"` and `"false"` parse to `BOOL`.

## Storing and reading values

```python
from qmeta.metadata import Metadata
from qmeta.values import DataType

meta = (
    Metadata()
    .with_value("author", "alice")
    .with_value("priority", 3)
    .with_value("reviewed", True)
)

meta.get("author", DataType.STRING)        # "alice"
meta.get("missing", DataType.STRING)       # None
meta.get_or("author", DataType.INT64, 0)   # 0, because "alice" is not an integer
meta.try_get("priority", DataType.INT64)   # 3
meta.data_type("priority")                 # DataType.INT64
```

- `get` returns `None` when the key is missing or the value cannot be converted.
- `get_or` returns the given default in both of those cases.
- `try_get` raises instead:
  - `MissingKeyError` when the key is absent;
  - `TypeMismatchError` when the conversion fails. The error carries `key`,
    `expected`, `actual` and `message`.

All errors are in `qmeta.errors` and derive from `MetadataError`.

Plain objects are wrapped with their inferred type. A `Value` is stored as it
is, so an explicit type is kept:

```python
from qmeta.values import DataType, to_value

meta.set_raw("count", to_value(10, DataType.UINT64))
meta.get_raw("count")      # Value(data_type=DataType.UINT64, payload=10)
meta.data_type("count")    # DataType.UINT64
```

## Working with the store

- `Metadata(entries)` accepts a mapping or an iterable of `(key, value)` pairs.
- `len(meta)`, `key in meta` and `for key in meta` work as expected. Two stores
  are equal when their entries are equal.
- `set` and `set_raw` return the `Value` they replaced, or `None`.
  - `with_value` and `with_raw` return a changed copy and leave the original
    as it is.
  - `set_raw` only accepts a `Value`.
- `remove` returns the removed `Value`, or `None`. `clear` deletes every entry.
- `items`, `keys` and `values` iterate in sorted key order.
- `merge(other)` updates the store in place; `merged(other)` returns a new
  store. In both, entries from `other` win on conflicts.
- `retain(predicate)` keeps only the entries for which `predicate(key, value)`
  is true.
- `extend(pairs)` stores every pair from a mapping or an iterable of pairs,
  overwriting existing keys. Keys must be strings.
- `to_dict()` returns a new key-sorted `dict` of the `Value` objects.
- `copy.copy` and `copy.deepcopy` give independent stores.

### JSON

`to_json()` writes each entry together with its type:

```python
Metadata().with_value("priority", 3).to_json()
# '{"priority": {"type": "int64", "value": 3}}'
```

- `Metadata.from_json(text)` rebuilds an equal store from that text.
- `Value.encode()` and `Value.decode(obj)` do the same for a single value.
- Durations are written as `{"secs": ..., "nanos": ...}`.
- Decimals, dates and times are written as strings.
- Text that is not an object of encoded values raises `ValueError`.

## Schemas

```python
from qmeta.schema import MetadataSchema, UnknownFieldPolicy
from qmeta.values import DataType

schema = (
    MetadataSchema.builder()
    .required("author", DataType.STRING)
    .optional("priority", DataType.INT64)
    .optional("reviewed", DataType.BOOL)
    .unknown_field_policy(UnknownFieldPolicy.REJECT)
    .build()
)

schema.validate(meta)                    # returns None, or raises
meta.set_checked(schema, "priority", 5)  # validated before it is stored
```

`validate` raises one of these errors:

- `MissingRequiredFieldError` when a required key is absent;
- `TypeMismatchError` when a declared key holds a value of a different
  concrete type;
- `UnknownFieldError` when an undeclared key is present and the policy is
  `UnknownFieldPolicy.REJECT`, which is the default. With
  `UnknownFieldPolicy.ALLOW`, undeclared keys are accepted.

Other parts of the schema API:

- `set_checked` and `with_checked` check a single entry with `validate_entry`.
  They raise the same errors and leave the store unchanged on failure.
- `field(key)` returns a `MetadataField` with `data_type` and `required`.
- `field_type(key)` returns the declared `DataType`.
- `fields()` iterates over the definitions in key order.

## What it does not do

`qmeta` stores, converts and validates metadata. It has no filter or query
expressions for selecting metadata objects.

`qmeta.errors` defines `UnknownFilterFieldError`, `InvalidFilterOperatorError`
and `InvalidFilterExpressionError` for such use, but nothing in the package
raises them.

There is no command-line tool and no storage beyond the JSON text shown above.

## Running the tests

```
pip install -e ".[test]"
pytest
```