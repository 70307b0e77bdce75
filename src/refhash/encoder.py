"""Structural encoding of values into byte strings.

Scalars and sequences are encoded by content, composite objects by their
identity token only. Because a composite never leads the encoder into its
fields, traversal terminates on any object graph, cyclic ones included.

Sequences use one of two equivalent paths. When no composite is reachable,
:meth:`StructuralEncoder.serialize_plain` walks the structure with an
explicit stack, encoding set elements separately so they can be sorted.
Otherwise :meth:`StructuralEncoder.encode_elementwise` recurses per element
so composites can be replaced by their tokens. Both
write the same layout: a header ``<tag>:<count>:{``, each key encoding
followed by its value encoding, and a closing ``}``. Sets carry no keys
and list their element encodings in sorted order.
"""

from __future__ import annotations

from collections.abc import Mapping, Set

from refhash.classifier import ValueClassifier, ValueKind, iter_items
from refhash.errors import NestingTooDeepError, UnsupportedValueKindError
from refhash.introspection import IntrospectionProvider, ReflectionIntrospector
from refhash.scalars import encode_scalar, frame
from refhash.settings import DEFAULT_MAX_DEPTH

__all__ = ["StructuralEncoder"]


def _header(value: object, count: int) -> bytes:
    if isinstance(value, Mapping):
        tag = b"m"
    elif isinstance(value, Set):
        tag = b"e"
    elif isinstance(value, tuple):
        tag = b"t"
    else:
        tag = b"l"
    return tag + b":" + str(count).encode("ascii") + b":{"


class StructuralEncoder:
    """Encode values, stopping at composite objects.

    Args:
        introspector: Provider of identity tokens for composites. Defaults to
            a :class:`~refhash.introspection.ReflectionIntrospector`.
        max_depth: Nesting limit for sequences.
    """

    def __init__(
        self,
        introspector: IntrospectionProvider | None = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        if max_depth <= 0:
            raise ValueError("max_depth must be a positive integer")
        self.introspector = introspector or ReflectionIntrospector()
        self.classifier = ValueClassifier(max_depth)
        self.max_depth = max_depth

    def encode(self, value: object) -> bytes:
        """Return the structural encoding of ``value``.

        Raises:
            UnsupportedValueKindError: If an opaque handle is reachable.
            NestingTooDeepError: If sequences nest deeper than the limit.
        """

        return self._encode(value, 0)

    def encode_identity(self, value: object) -> bytes:
        """Return the identity marker of a composite object."""

        return frame(b"r", self.introspector.identity(value).encode("utf-8"))

    def serialize_plain(self, value: object) -> bytes:
        """Encode a sequence without composite checks.

        Mappings and positional sequences are walked with an explicit stack.
        Set elements are encoded separately so they can be sorted before
        being written.
        """

        return self._serialize_plain(value, 0)

    def encode_elementwise(self, value: object) -> bytes:
        """Encode a sequence by recursing into each element."""

        return self._encode_elementwise(value, 0)

    def _encode(self, value: object, depth: int) -> bytes:
        kind = self.classifier.classify(value)
        if kind is ValueKind.SCALAR:
            return encode_scalar(value)
        if kind is ValueKind.OPAQUE_HANDLE:
            raise UnsupportedValueKindError(type(value))
        if kind is ValueKind.COMPOSITE:
            return self.encode_identity(value)
        if self.classifier.contains_composite(value, depth):
            return self._encode_elementwise(value, depth)
        return self._serialize_plain(value, depth)

    def _encode_elementwise(self, value: object, depth: int) -> bytes:
        if depth >= self.max_depth:
            raise NestingTooDeepError(self.max_depth)
        items = list(iter_items(value))
        parts = [_header(value, len(items))]
        if isinstance(value, Set):
            parts.extend(sorted(self._encode(element, depth + 1) for _, element in items))
        else:
            for key, element in items:
                parts.append(self._encode(key, depth + 1))
                parts.append(self._encode(element, depth + 1))
        parts.append(b"}")
        return b"".join(parts)

    def _serialize_plain(self, value: object, depth: int) -> bytes:
        out = bytearray()
        # entries are either literal bytes or (value, depth) pairs
        stack: list[bytes | tuple[object, int]] = [(value, depth)]
        while stack:
            entry = stack.pop()
            if isinstance(entry, bytes):
                out += entry
                continue
            current, level = entry
            kind = self.classifier.classify(current)
            if kind is ValueKind.SCALAR:
                out += encode_scalar(current)
                continue
            if kind is ValueKind.OPAQUE_HANDLE:
                raise UnsupportedValueKindError(type(current))
            if kind is ValueKind.COMPOSITE:
                out += self.encode_identity(current)
                continue
            if level >= self.max_depth:
                raise NestingTooDeepError(self.max_depth)
            items = list(iter_items(current))
            out += _header(current, len(items))
            if isinstance(current, Set):
                out += b"".join(
                    sorted(self._serialize_plain(element, level + 1) for _, element in items)
                )
                out += b"}"
                continue
            stack.append(b"}")
            for key, element in reversed(items):
                stack.append((element, level + 1))
                stack.append((key, level + 1))
        return bytes(out)
