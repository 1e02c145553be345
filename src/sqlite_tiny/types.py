"""
Bridging types between SQLite's dynamic storage classes and Python types, including
conversion rules from / to Python values.

Every value exchanged with the engine passes through one of the :class:`SqliteType`
variants. Converting a Python value into a variant is total for all supported Python
types. Converting a variant back into a requested Python type is fallible and raises
:class:`sqlite_tiny.errors.ConversionError` when the storage class does not fit.
"""

from __future__ import annotations

import math
import types
import typing
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

from .errors import ConversionError
from .ffi import SQLITE_BLOB, SQLITE_FLOAT, SQLITE_INTEGER, SQLITE_NULL, SQLITE_TEXT


__all__ = [
    "SqliteType",
    "Null",
    "Integer",
    "Real",
    "Text",
    "Blob",
    "Converter",
    "IntegerConverter",
    "BoolConverter",
    "RealConverter",
    "TextConverter",
    "BlobConverter",
    "FixedBlobConverter",
    "OptionalConverter",
    "NativeConverter",
    "Int8",
    "UInt8",
    "Int16",
    "UInt16",
    "Int32",
    "UInt32",
    "Int64",
    "UInt64",
    "ISize",
    "USize",
    "Int128",
    "UInt128",
    "fixed_bytes",
    "register",
    "resolve",
    "into_sqlite",
    "from_sqlite",
]

T = TypeVar("T")

_UNION_TYPES = (Union, getattr(types, "UnionType", Union))

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


# ==== storage class variants ==========================================================


class SqliteType:
    """Base class of the five storage classes. Never instantiated directly."""

    storage_class: int = 0
    value: Any

    def describe(self) -> str:
        return type(self).__name__.upper()


@dataclass(frozen=True)
class Null(SqliteType):
    """NULL"""

    storage_class = SQLITE_NULL

    @property
    def value(self) -> None:  # type: ignore[override]
        return None


@dataclass(frozen=True)
class Integer(SqliteType):
    """INTEGER: a signed 64-bit integer"""

    value: int
    storage_class = SQLITE_INTEGER

    def __post_init__(self) -> None:
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise ConversionError(f"Integer {self.value} does not fit into 64 bits")


@dataclass(frozen=True)
class Real(SqliteType):
    """REAL: a 64-bit IEEE floating point number. The engine stores NaN as NULL."""

    value: float
    storage_class = SQLITE_FLOAT


@dataclass(frozen=True)
class Text(SqliteType):
    """TEXT: a unicode string, stored as UTF-8"""

    value: str
    storage_class = SQLITE_TEXT


@dataclass(frozen=True)
class Blob(SqliteType):
    """BLOB: an opaque byte sequence"""

    value: bytes
    storage_class = SQLITE_BLOB


NULL = Null()


def _mismatch(value: SqliteType, target: str) -> ConversionError:
    return ConversionError(
        f"Failed to convert from SQLite type: cannot read {value.describe()} "
        f"as {target}"
    )


# ==== converters ======================================================================


class Converter(Generic[T]):
    """Base class for conversions between one category of Python values and the
    SQLite storage classes"""

    name = "value"

    def to_sqlite(self, value: T) -> SqliteType:
        """Converts a Python value into a storage class variant."""
        raise NotImplementedError()

    def from_sqlite(self, value: SqliteType) -> T:
        """Converts a storage class variant into the target Python type."""
        raise NotImplementedError()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.name})>"


class IntegerConverter(Converter[int]):
    """
    Integers with a fixed range. Values are stored as INTEGER and must fit both the
    target range and the engine's signed 64-bit range.

    :param name: Type name for error messages.
    :param minimum: Smallest representable value.
    :param maximum: Largest representable value.
    """

    def __init__(self, name: str, minimum: int, maximum: int) -> None:
        self.name = name
        self.minimum = minimum
        self.maximum = maximum

    def _check_range(self, value: int) -> int:
        if not self.minimum <= value <= self.maximum:
            raise ConversionError(f"Integer {value} is out of range for {self.name}")
        return value

    def to_sqlite(self, value: int) -> SqliteType:
        try:
            return Integer(self._check_range(int(value)))
        except ConversionError as exc:
            raise ConversionError("Failed to convert into SQLite type") from exc

    def from_sqlite(self, value: SqliteType) -> int:
        if not isinstance(value, Integer):
            raise _mismatch(value, self.name)

        try:
            return self._check_range(value.value)
        except ConversionError as exc:
            raise ConversionError("Failed to convert from SQLite type") from exc


class BoolConverter(IntegerConverter):
    """Booleans, stored as the INTEGER 0 or 1. Other integers fail to read."""

    def __init__(self) -> None:
        super().__init__("bool", 0, 1)

    def from_sqlite(self, value: SqliteType) -> bool:
        return bool(super().from_sqlite(value))


class RealConverter(Converter[float]):
    """Floating point numbers, stored as REAL. NaN is rejected since it would be
    stored as NULL."""

    name = "float"

    def to_sqlite(self, value: float) -> SqliteType:
        value = float(value)
        if math.isnan(value):
            raise ConversionError("Failed to convert into SQLite type: NaN")
        return Real(value)

    def from_sqlite(self, value: SqliteType) -> float:
        if not isinstance(value, Real):
            raise _mismatch(value, self.name)
        return value.value


class TextConverter(Converter[str]):
    """Strings, stored as TEXT."""

    name = "str"

    def to_sqlite(self, value: str) -> SqliteType:
        return Text(str(value))

    def from_sqlite(self, value: SqliteType) -> str:
        if not isinstance(value, Text):
            raise _mismatch(value, self.name)
        return value.value


class BlobConverter(Converter[Any]):
    """
    Byte sequences, stored as BLOB.

    :param container: The Python type to return on read, e.g. ``bytes`` or
        ``bytearray``.
    """

    def __init__(self, container: type = bytes) -> None:
        self.container = container
        self.name = container.__name__

    def to_sqlite(self, value: Any) -> SqliteType:
        return Blob(bytes(value))

    def from_sqlite(self, value: SqliteType) -> Any:
        if not isinstance(value, Blob):
            raise _mismatch(value, self.name)
        return self.container(value.value)


class FixedBlobConverter(BlobConverter):
    """
    Byte arrays of a fixed length, stored as BLOB. Values of any other length are
    rejected in both directions.

    :param length: The required number of bytes.
    """

    def __init__(self, length: int) -> None:
        super().__init__(bytes)
        self.length = length
        self.name = f"bytes[{length}]"

    def _check_length(self, data: bytes) -> bytes:
        if len(data) != self.length:
            raise ConversionError(
                f"Expected {self.length} bytes for {self.name} but got {len(data)}"
            )
        return data

    def to_sqlite(self, value: Any) -> SqliteType:
        return Blob(self._check_length(bytes(value)))

    def from_sqlite(self, value: SqliteType) -> bytes:
        data = super().from_sqlite(value)
        return self._check_length(data)


class OptionalConverter(Converter[Optional[T]]):
    """
    Nullable values: NULL maps to ``None``, any other storage class is handled by
    the inner converter. Reading a wrong storage class therefore still fails, which
    keeps "column is NULL" apart from "column has the wrong type".

    :param inner: Converter for non-NULL values.
    """

    def __init__(self, inner: Converter[T]) -> None:
        self.inner = inner
        self.name = f"Optional[{inner.name}]"

    def to_sqlite(self, value: T | None) -> SqliteType:
        if value is None:
            return NULL
        return self.inner.to_sqlite(value)

    def from_sqlite(self, value: SqliteType) -> T | None:
        if isinstance(value, Null):
            return None
        return self.inner.from_sqlite(value)


class NativeConverter(Converter[Any]):
    """Reads the natural Python value of any storage class: None, int, float, str or
    bytes."""

    name = "native"

    def to_sqlite(self, value: Any) -> SqliteType:
        return into_sqlite(value)

    def from_sqlite(self, value: SqliteType) -> Any:
        return value.value


Int8 = IntegerConverter("i8", -(2**7), 2**7 - 1)
UInt8 = IntegerConverter("u8", 0, 2**8 - 1)
Int16 = IntegerConverter("i16", -(2**15), 2**15 - 1)
UInt16 = IntegerConverter("u16", 0, 2**16 - 1)
Int32 = IntegerConverter("i32", -(2**31), 2**31 - 1)
UInt32 = IntegerConverter("u32", 0, 2**32 - 1)
Int64 = IntegerConverter("i64", INT64_MIN, INT64_MAX)
UInt64 = IntegerConverter("u64", 0, 2**64 - 1)
ISize = IntegerConverter("isize", INT64_MIN, INT64_MAX)
USize = IntegerConverter("usize", 0, 2**64 - 1)
Int128 = IntegerConverter("i128", -(2**127), 2**127 - 1)
UInt128 = IntegerConverter("u128", 0, 2**128 - 1)

NATIVE = NativeConverter()


def fixed_bytes(length: int) -> FixedBlobConverter:
    """
    :param length: The required number of bytes.
    :returns: A converter for byte arrays of exactly ``length`` bytes.
    """
    return FixedBlobConverter(length)


# ==== registry ========================================================================

_registry: dict[type, Converter[Any]] = {
    bool: BoolConverter(),
    int: IntegerConverter("int", INT64_MIN, INT64_MAX),
    float: RealConverter(),
    str: TextConverter(),
    bytes: BlobConverter(bytes),
    bytearray: BlobConverter(bytearray),
    memoryview: BlobConverter(bytes),
}


def register(py_type: type, converter: Converter[Any]) -> None:
    """
    Registers the converter to use for a Python type, both for binding values of
    that type and for reads which request that type.

    :param py_type: The Python type.
    :param converter: Its converter.
    """
    _registry[py_type] = converter


def _lookup(py_type: type) -> Converter[Any] | None:
    for cls in py_type.__mro__:
        try:
            return _registry[cls]
        except KeyError:
            pass
    return None


def resolve(target: Any) -> Converter[Any]:
    """
    Returns the converter for a read target.

    :param target: A :class:`Converter`, a registered Python type, a
        ``typing.Optional`` of either, :class:`SqliteType` to get the raw variant, or
        ``object`` / ``None`` for the natural Python value.
    :raises ConversionError: if no conversion to ``target`` exists.
    """
    if isinstance(target, Converter):
        return target

    if target is None or target is object or target is Any:
        return NATIVE

    if target is SqliteType:
        return _RAW

    if typing.get_origin(target) in _UNION_TYPES:
        args = [arg for arg in typing.get_args(target) if arg is not type(None)]
        if len(args) == 1 and len(typing.get_args(target)) == 2:
            return OptionalConverter(resolve(args[0]))

    if isinstance(target, type):
        converter = _lookup(target)
        if converter is not None:
            return converter

    raise ConversionError(f"No conversion from SQLite types to {target!r}")


class _RawConverter(Converter[SqliteType]):
    name = "SqliteType"

    def to_sqlite(self, value: SqliteType) -> SqliteType:
        return value

    def from_sqlite(self, value: SqliteType) -> SqliteType:
        return value


_RAW = _RawConverter()


def into_sqlite(value: Any) -> SqliteType:
    """
    Converts a Python value into a storage class variant.

    :param value: ``None``, a :class:`SqliteType` or a value of a registered type.
    :returns: The storage class variant.
    :raises ConversionError: if the type is not supported or the value does not fit.
    """
    if value is None:
        return NULL
    if isinstance(value, SqliteType):
        return value

    converter = _lookup(type(value))

    if converter is None:
        raise ConversionError(
            f"Failed to convert into SQLite type: unsupported type "
            f"{type(value).__name__}"
        )

    return converter.to_sqlite(value)


def from_sqlite(value: SqliteType, target: Any = object) -> Any:
    """
    Converts a storage class variant into the requested Python type.

    :param value: The storage class variant.
    :param target: The requested type, see :func:`resolve`.
    :returns: The converted value.
    :raises ConversionError: if the storage class does not fit the requested type.
    """
    return resolve(target).from_sqlite(value)
