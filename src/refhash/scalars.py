"""Canonical byte encodings for scalar values.

Every scalar is written as a type tag followed by a locale-independent
representation, so values of different types never share an encoding
(``1``, ``True``, ``1.0`` and ``"1"`` all differ). Text-like payloads are
length-prefixed::

    N;                  None
    b:1;                bool
    i:2a;               int (hexadecimal)
    d:0.5;              float
    s:3:"abc";          str
    y:2:"\\x00\\x01";     bytes-like
    x:11:"mod.Cls:txt";  registered custom scalar

Additional value types can be declared with :func:`register_scalar_type`.
"""

from __future__ import annotations

import datetime as dt
import enum
import uuid
from collections.abc import Callable
from decimal import Decimal
from fractions import Fraction
from functools import lru_cache
from pathlib import PurePath
from typing import Any

__all__ = [
    "NONE_ENCODING",
    "encode_scalar",
    "frame",
    "is_scalar",
    "register_scalar_type",
]

NONE_ENCODING = b"N;"

_ScalarEncoder = Callable[[Any], bytes]


def frame(tag: bytes, payload: bytes) -> bytes:
    """Return ``payload`` wrapped with ``tag`` and a length prefix."""

    return tag + b":" + str(len(payload)).encode("ascii") + b':"' + payload + b'";'


def _text(tag: bytes, text: str) -> bytes:
    return frame(tag, text.encode("utf-8"))


def _encode_none(value: None) -> bytes:
    return NONE_ENCODING


def _encode_bool(value: bool) -> bytes:
    return b"b:1;" if value else b"b:0;"


def _encode_int(value: int) -> bytes:
    # hex is exempt from the decimal digit limit on int/str conversion
    return b"i:" + format(value, "x").encode("ascii") + b";"


def _encode_float(value: float) -> bytes:
    # repr is the shortest round-tripping form and ignores the locale
    return b"d:" + float.__repr__(value).encode("ascii") + b";"


def _encode_complex(value: complex) -> bytes:
    return b"c:" + complex.__repr__(value).encode("ascii") + b";"


def _encode_str(value: str) -> bytes:
    return frame(b"s", value.encode("utf-8", "surrogatepass"))


def _encode_bytes(value: bytes | bytearray | memoryview) -> bytes:
    return frame(b"y", bytes(value))


def _encode_fraction(value: Fraction) -> bytes:
    return _text(b"F", f"{value.numerator:x}/{value.denominator:x}")


def _encode_timedelta(value: dt.timedelta) -> bytes:
    return _text(b"td", f"{value.days}:{value.seconds}:{value.microseconds}")


def _encode_enum(value: enum.Enum) -> bytes:
    cls = type(value)
    return _text(b"E", f"{cls.__module__}.{cls.__qualname__}.{value.name}")


def _encode_path(value: PurePath) -> bytes:
    return _text(b"p", f"{type(value).__name__}:{value}")


_BUILTIN_ENCODERS: dict[type, _ScalarEncoder] = {
    type(None): _encode_none,
    bool: _encode_bool,
    int: _encode_int,
    float: _encode_float,
    complex: _encode_complex,
    str: _encode_str,
    bytes: _encode_bytes,
    bytearray: _encode_bytes,
    memoryview: _encode_bytes,
    Decimal: lambda value: _text(b"D", str(value)),
    Fraction: _encode_fraction,
    dt.datetime: lambda value: _text(b"dt", value.isoformat()),
    dt.date: lambda value: _text(b"da", value.isoformat()),
    dt.time: lambda value: _text(b"tm", value.isoformat()),
    dt.timedelta: _encode_timedelta,
    uuid.UUID: lambda value: _text(b"u", value.hex),
    PurePath: _encode_path,
}

_custom_encoders: dict[type, _ScalarEncoder] = {}


def register_scalar_type(cls: type, to_text: Callable[[Any], str]) -> None:
    """Declare ``cls`` (and its subclasses) as a scalar type.

    Instances are encoded by content using ``to_text``, which must return
    the same text for values the caller considers equal. The qualified
    class name is part of the encoding.

    Args:
        cls: The value type to treat as scalar.
        to_text: Function returning the canonical text of an instance.
    """

    qualified = f"{cls.__module__}.{cls.__qualname__}"

    def _encode_custom(value: Any) -> bytes:
        return _text(b"x", f"{qualified}:{to_text(value)}")

    _custom_encoders[cls] = _encode_custom
    _lookup.cache_clear()


@lru_cache(maxsize=512)
def _lookup(cls: type) -> _ScalarEncoder | None:
    """Return the encoder for ``cls`` by walking its MRO."""

    if issubclass(cls, enum.Enum):
        return _encode_enum
    for base in cls.__mro__:
        encoder = _custom_encoders.get(base) or _BUILTIN_ENCODERS.get(base)
        if encoder is not None:
            return encoder
    return None


def is_scalar(value: object) -> bool:
    """Return ``True`` when ``value`` has a canonical scalar encoding."""

    return _lookup(type(value)) is not None


def encode_scalar(value: object) -> bytes:
    """Return the canonical encoding of a scalar value.

    Raises:
        TypeError: If ``value`` is not a scalar.
    """

    encoder = _lookup(type(value))
    if encoder is None:
        raise TypeError(f"{type(value).__qualname__} is not a scalar type")
    return encoder(value)
