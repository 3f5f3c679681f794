"""
Argtree value codec: data types and typed values.

Overview
- Kind: the five scalar kinds a token can decode into
  (int32, float32, string, bool, path).
- DataType: a Kind plus the array flag (does the argument collect many values?).
- Value: a decoded token, tagged with its Kind. Arrays are plain lists of
  Value, never a Value variant of their own.
- decode(raw, data_type): the single conversion entry point, used both when a
  grammar registers defaults and when the resolver consumes live tokens.

Decoding rules
- int32:   optional sign followed by decimal digits, within [-2**31, 2**31 - 1].
- float32: decimal or exponent literal, or inf/infinity/nan (any case, optional
  sign); literals beyond the single-precision range are rejected (only the
  inf spellings decode to infinity) and the payload is rounded to single precision.
- bool:    exactly "true" or "false".
- string:  any input, unmodified.
- path:    any non-empty string without NUL characters (no existence check).

Quick example:
    >>> decode("42", DataType(Kind.INT32))
    Value(kind=<Kind.INT32: 'int32'>, payload=42)
    >>> decode("yes", DataType(Kind.BOOL))
    Traceback (most recent call last):
    ...
    argtree.values.DecodeError: 'yes' is not a boolean
"""
import math
import re
import struct
from enum import StrEnum
from pathlib import PurePath
from typing import NamedTuple, Any

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1
FLOAT32_MAX = struct.unpack("<f", b"\xff\xff\x7f\x7f")[0]

_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)", re.IGNORECASE)


def _isnan(payload):
    return isinstance(payload, float) and math.isnan(payload)


class Kind(StrEnum):
    """
    scalar kinds understood by the codec.
    """
    INT32 = "int32"
    FLOAT32 = "float32"
    STRING = "string"
    BOOL = "bool"
    PATH = "path"


class DataType(NamedTuple):
    """
    declared type of an argument: a kind and whether it collects many values.
    """
    kind: Kind
    array: bool = False

    @classmethod
    def of(cls, object, /):
        """
        normalize a Kind or DataType into a DataType (a bare Kind is a scalar).
        """
        if isinstance(object, Kind):
            return cls(object)
        if not isinstance(object, DataType):
            raise TypeError("data type must be a Kind or a DataType")
        if not isinstance(object.kind, Kind):
            raise TypeError(f"data type kind must be a Kind, not {object.kind!r}")
        if not isinstance(object.array, bool):
            raise TypeError("data type 'array' must be a boolean")
        return object

    def __repr__(self):
        return f"{self.kind.value}{'[]' * self.array}"


class Value(NamedTuple):
    """
    a decoded token tagged with its kind.

    nan payloads compare equal to each other, so decoding the same token
    twice always yields equal values.
    """
    kind: Kind
    payload: Any

    def compatible(self, other, /):
        """
        two values are type-compatible when their kinds match.
        """
        return isinstance(other, Value) and self.kind is other.kind

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self.kind == other.kind and (
            self.payload == other.payload or
            _isnan(self.payload) and _isnan(other.payload)
        )

    def __ne__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return not self == other

    def __hash__(self):
        return hash((self.kind, "nan" if _isnan(self.payload) else self.payload))


class DecodeError(ValueError):
    """
    raised when a raw token cannot be decoded into the requested kind.
    """


def _int32(raw):
    if not _INTEGER.fullmatch(raw):
        raise DecodeError(f"{raw!r} is not a 32-bit integer")
    if not INT32_MIN <= (value := int(raw)) <= INT32_MAX:
        raise DecodeError(f"{raw!r} is out of range for a 32-bit integer")
    return value


def _float32(raw):
    if not _FLOAT.fullmatch(raw):
        raise DecodeError(f"{raw!r} is not a 32-bit float")
    value = float(raw)
    if math.isinf(value):
        # only the inf/infinity spellings may decode to infinity
        if not raw.lstrip("+-").lower().startswith("inf"):
            raise DecodeError(f"{raw!r} is out of range for a 32-bit float")
    elif abs(value) > FLOAT32_MAX:
        raise DecodeError(f"{raw!r} is out of range for a 32-bit float")
    # round to single precision
    return struct.unpack("f", struct.pack("f", value))[0]


def _bool(raw):
    match raw:
        case "true":
            return True
        case "false":
            return False
    raise DecodeError(f"{raw!r} is not a boolean")


def _path(raw):
    if not raw or "\0" in raw:
        raise DecodeError(f"{raw!r} is not a path")
    return PurePath(raw)


_DECODERS = {
    Kind.INT32: _int32,
    Kind.FLOAT32: _float32,
    Kind.STRING: str,
    Kind.BOOL: _bool,
    Kind.PATH: _path,
}


def decode(raw, data_type, /):
    """
    decode one raw token into a Value of the data type's kind.

    the array flag is irrelevant here: arrays are decoded one token at a time.

    raises
    - TypeError: raw is not a string or data_type is not a Kind/DataType.
    - DecodeError: raw does not spell a valid value of that kind.
    """
    if not isinstance(raw, str):
        raise TypeError("decode() first argument must be a string")
    kind = DataType.of(data_type).kind
    return Value(kind, _DECODERS[kind](raw))


__all__ = (
    "Kind",
    "DataType",
    "Value",
    "DecodeError",
    "decode",
)
