"""Field enumeration and identity lookup for composite objects."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Protocol

from refhash.identity import IDENTITY_ATTRIBUTE, IdentityRegistry, default_registry

__all__ = ["FIELDS_METHOD", "IntrospectionProvider", "ReflectionIntrospector"]

FIELDS_METHOD = "__fingerprint_fields__"

_SKIPPED_SLOTS = frozenset({"__dict__", "__weakref__"})


class IntrospectionProvider(Protocol):
    """Capabilities the digester needs from a composite object."""

    def fields(self, obj: object) -> list[tuple[str, object]]:
        """Return the ordered ``(name, value)`` pairs of ``obj``."""

    def identity(self, obj: object) -> str:
        """Return the per-instance identity token of ``obj``."""


class ReflectionIntrospector:
    """Enumerate fields through the instance namespace and ``__slots__``.

    A type may take over enumeration by defining
    ``__fingerprint_fields__(self)`` returning ``(name, value)`` pairs.
    Otherwise the instance ``__dict__`` is reported in insertion order,
    followed by the slots declared along the MRO. Private and name-mangled
    attributes are included; unset slots are skipped.

    Args:
        registry: Source of identity tokens for objects without their own.
    """

    def __init__(self, registry: IdentityRegistry | None = None) -> None:
        self._registry = registry or default_registry

    def identity(self, obj: object) -> str:
        """Return the identity token of ``obj`` from the registry."""

        return self._registry.token_for(obj)

    def fields(self, obj: object) -> list[tuple[str, object]]:
        """Return the ordered ``(name, value)`` pairs of ``obj``.

        Args:
            obj: The composite object being fingerprinted.

        Returns:
            Pairs from ``__fingerprint_fields__`` when the type defines it,
            otherwise the instance namespace followed by set slots. The
            identity attribute is never included.
        """

        custom = getattr(type(obj), FIELDS_METHOD, None)
        if callable(custom):
            return [(str(name), value) for name, value in custom(obj)]

        pairs: list[tuple[str, object]] = []
        seen: set[str] = set()
        for name, value in _namespace_items(obj):
            if name == IDENTITY_ATTRIBUTE:
                continue
            seen.add(name)
            pairs.append((name, value))
        for name, value in _slot_items(obj):
            if name in seen:
                continue
            seen.add(name)
            pairs.append((name, value))
        return pairs


def _namespace_items(obj: object) -> Iterable[tuple[str, object]]:
    try:
        namespace = object.__getattribute__(obj, "__dict__")
    except AttributeError:
        return ()
    # class and module namespaces are read through their mapping interface
    return [(str(name), value) for name, value in dict(namespace).items()]


def _slot_items(obj: object) -> Iterator[tuple[str, object]]:
    for cls in type(obj).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in _SKIPPED_SLOTS:
                continue
            attribute = _mangle(cls, slot)
            descriptor = cls.__dict__.get(attribute)
            if descriptor is None or not hasattr(descriptor, "__get__"):
                continue
            try:
                value = descriptor.__get__(obj, cls)
            except AttributeError:
                continue
            yield attribute, value


def _mangle(cls: type, name: str) -> str:
    if name.startswith("__") and not name.endswith("__"):
        return f"_{cls.__name__.lstrip('_')}{name}"
    return name
