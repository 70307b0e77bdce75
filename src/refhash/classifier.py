"""Classification of runtime values into the kinds the encoder handles."""

from __future__ import annotations

import enum
import io
import mmap
import select
import socket
import threading
from collections.abc import Iterator, Mapping, Sequence, Set

from refhash.errors import NestingTooDeepError
from refhash.scalars import is_scalar
from refhash.settings import DEFAULT_MAX_DEPTH

__all__ = [
    "ValueClassifier",
    "ValueKind",
    "iter_items",
    "register_opaque_type",
]


class ValueKind(enum.Enum):
    """The value shapes distinguished while fingerprinting."""

    SCALAR = "scalar"
    OPAQUE_HANDLE = "opaque_handle"
    SEQUENCE = "sequence"
    COMPOSITE = "composite"


_opaque_types: set[type] = {
    io.IOBase,
    socket.socket,
    mmap.mmap,
    type(threading.Lock()),
    type(threading.RLock()),
}
for _name in ("poll", "epoll", "devpoll", "kqueue"):
    _poller = getattr(select, _name, None)
    if isinstance(_poller, type):
        _opaque_types.add(_poller)

_TEXT_TYPES = (str, bytes, bytearray, memoryview)


def register_opaque_type(cls: type) -> None:
    """Declare instances of ``cls`` as live handles that cannot be hashed."""

    _opaque_types.add(cls)


def iter_items(value: object) -> Iterator[tuple[object, object]]:
    """Yield the ``(key, element)`` pairs of a sequence-kind value.

    Mappings yield their items, positional sequences yield
    ``(index, element)`` and sets yield ``(None, element)``.
    """

    if isinstance(value, Mapping):
        yield from value.items()
    elif isinstance(value, Set):
        for element in value:
            yield None, element
    else:
        yield from enumerate(value)  # type: ignore[call-overload]


class ValueClassifier:
    """Decide which :class:`ValueKind` a value belongs to.

    Args:
        max_depth: Nesting limit applied by :meth:`contains_composite`.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.max_depth = max_depth

    def classify(self, value: object) -> ValueKind:
        """Return the kind of ``value``.

        Opaque handles are checked first, then scalars, then mappings, sets
        and non-text sequences. Everything else is a composite object.

        Args:
            value: Any runtime value.

        Returns:
            The :class:`ValueKind` the encoder dispatches on.
        """

        if isinstance(value, tuple(_opaque_types)):
            return ValueKind.OPAQUE_HANDLE
        if is_scalar(value):
            return ValueKind.SCALAR
        if isinstance(value, (Mapping, Set)):
            return ValueKind.SEQUENCE
        if isinstance(value, Sequence) and not isinstance(value, _TEXT_TYPES):
            return ValueKind.SEQUENCE
        return ValueKind.COMPOSITE

    def contains_composite(self, value: object, depth: int = 0) -> bool:
        """Return ``True`` if a composite is reachable through ``value``.

        Keys and elements of nested sequences are inspected at any depth.
        Opaque handles do not count; the encoder reports them.

        Args:
            value: The value to inspect.
            depth: Nesting level of ``value`` within the fingerprinted value.

        Raises:
            NestingTooDeepError: If sequences nest deeper than
                :attr:`max_depth`, which includes self-containing
                collections.
        """

        stack: list[tuple[object, int]] = [(value, depth)]
        while stack:
            current, depth = stack.pop()
            kind = self.classify(current)
            if kind is ValueKind.COMPOSITE:
                return True
            if kind is not ValueKind.SEQUENCE:
                continue
            if depth >= self.max_depth:
                raise NestingTooDeepError(self.max_depth)
            for key, element in iter_items(current):
                stack.append((key, depth + 1))
                stack.append((element, depth + 1))
        return False
