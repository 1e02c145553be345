from typing import Optional

import pytest

from sqlite_tiny import types
from sqlite_tiny.errors import ConversionError
from sqlite_tiny.types import (
    Blob,
    Integer,
    Null,
    Real,
    SqliteType,
    Text,
    from_sqlite,
    into_sqlite,
    resolve,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, Null()),
        (True, Integer(1)),
        (False, Integer(0)),
        (-12, Integer(-12)),
        (2**63 - 1, Integer(2**63 - 1)),
        (-(2**63), Integer(-(2**63))),
        (1.5, Real(1.5)),
        ("text ✓", Text("text ✓")),
        (b"\x00\x01", Blob(b"\x00\x01")),
        (bytearray(b"ab"), Blob(b"ab")),
        (memoryview(b"cd"), Blob(b"cd")),
        (b"", Blob(b"")),
        (Text("raw"), Text("raw")),
    ],
)
def test_into_sqlite(value, expected):
    assert into_sqlite(value) == expected


@pytest.mark.parametrize("value", [2**63, -(2**63) - 1, 2**64])
def test_into_sqlite_integer_overflow(value):
    with pytest.raises(ConversionError):
        into_sqlite(value)


def test_into_sqlite_unsupported_type():
    with pytest.raises(ConversionError, match="unsupported type object"):
        into_sqlite(object())


@pytest.mark.parametrize(
    "converter,minimum,maximum",
    [
        (types.Int8, -128, 127),
        (types.UInt8, 0, 255),
        (types.Int16, -(2**15), 2**15 - 1),
        (types.UInt16, 0, 2**16 - 1),
        (types.Int32, -(2**31), 2**31 - 1),
        (types.UInt32, 0, 2**32 - 1),
        (types.Int64, -(2**63), 2**63 - 1),
        (types.ISize, -(2**63), 2**63 - 1),
    ],
)
def test_integer_converter_limits(converter, minimum, maximum):
    for value in (minimum, 0, maximum):
        assert converter.from_sqlite(converter.to_sqlite(value)) == value

    with pytest.raises(ConversionError):
        converter.to_sqlite(minimum - 1)

    with pytest.raises(ConversionError):
        converter.to_sqlite(maximum + 1)


@pytest.mark.parametrize(
    "converter", [types.UInt64, types.USize, types.Int128, types.UInt128]
)
def test_wide_integer_converter_rejects_values_beyond_64_bits(converter):
    assert converter.from_sqlite(converter.to_sqlite(2**63 - 1)) == 2**63 - 1

    with pytest.raises(ConversionError):
        converter.to_sqlite(2**63)


def test_integer_converter_range_on_read():
    with pytest.raises(ConversionError):
        types.UInt8.from_sqlite(Integer(256))

    with pytest.raises(ConversionError):
        types.UInt32.from_sqlite(Integer(-1))


@pytest.mark.parametrize(
    "value,target",
    [
        (Text("1"), int),
        (Integer(1), str),
        (Integer(1), float),
        (Real(1.0), int),
        (Blob(b"1"), str),
        (Text("1"), bytes),
        (Null(), int),
        (Null(), str),
        (Null(), bytes),
    ],
)
def test_storage_class_mismatch(value, target):
    with pytest.raises(ConversionError, match="Failed to convert from SQLite type"):
        from_sqlite(value, target)


@pytest.mark.parametrize("target", [int, float, str, bytes, bytearray, bool])
def test_optional_null(target):
    assert from_sqlite(Null(), Optional[target]) is None


def test_optional_keeps_type_check():
    with pytest.raises(ConversionError):
        from_sqlite(Text("1"), Optional[int])

    assert from_sqlite(Integer(3), Optional[int]) == 3


def test_native_values():
    assert from_sqlite(Null()) is None
    assert from_sqlite(Integer(3)) == 3
    assert from_sqlite(Real(0.25)) == 0.25
    assert from_sqlite(Text("a")) == "a"
    assert from_sqlite(Blob(b"a")) == b"a"


def test_raw_values():
    assert from_sqlite(Integer(3), SqliteType) == Integer(3)


def test_bool():
    assert from_sqlite(Integer(1), bool) is True
    assert from_sqlite(Integer(0), bool) is False

    with pytest.raises(ConversionError):
        from_sqlite(Integer(2), bool)

    with pytest.raises(ConversionError):
        from_sqlite(Text("true"), bool)

    assert from_sqlite(Null(), Optional[bool]) is None
    assert from_sqlite(Integer(1), Optional[bool]) is True


def test_nan_is_rejected():
    with pytest.raises(ConversionError, match="NaN"):
        into_sqlite(float("nan"))

    assert into_sqlite(float("inf")) == Real(float("inf"))


def test_bytearray():
    value = from_sqlite(Blob(b"ab"), bytearray)

    assert isinstance(value, bytearray)
    assert value == bytearray(b"ab")


def test_empty_blob_is_not_null():
    assert from_sqlite(Blob(b""), bytes) == b""
    assert from_sqlite(Blob(b""), Optional[bytes]) == b""


def test_fixed_bytes():
    converter = types.fixed_bytes(4)

    assert converter.from_sqlite(Blob(b"\x01\x02\x03\x04")) == b"\x01\x02\x03\x04"

    with pytest.raises(ConversionError):
        types.fixed_bytes(5).from_sqlite(Blob(b"\x01\x02\x03\x04"))

    with pytest.raises(ConversionError):
        converter.to_sqlite(b"\x01")


def test_resolve_unknown_target():
    with pytest.raises(ConversionError, match="No conversion"):
        resolve(complex)


def test_register_custom_type():
    class Celsius(float):
        pass

    class CelsiusConverter(types.RealConverter):
        name = "Celsius"

        def from_sqlite(self, value):
            return Celsius(super().from_sqlite(value))

    types.register(Celsius, CelsiusConverter())

    try:
        assert into_sqlite(Celsius(21.5)) == Real(21.5)
        result = from_sqlite(Real(21.5), Celsius)
        assert isinstance(result, Celsius)
        assert result == 21.5
    finally:
        types._registry.pop(Celsius)


def test_subclass_uses_parent_converter():
    class Name(str):
        pass

    assert into_sqlite(Name("x")) == Text("x")


def test_optional_converter():
    converter = types.OptionalConverter(types.UInt8)

    assert converter.from_sqlite(Null()) is None
    assert converter.from_sqlite(Integer(255)) == 255
    assert converter.to_sqlite(None) == Null()

    with pytest.raises(ConversionError):
        converter.from_sqlite(Integer(256))
