"""Per-instance identity tokens for composite objects.

A token is unique for the lifetime of its instance and is never handed to
another instance afterwards, even when the interpreter recycles the
instance's ``id()``. Types can own their token from construction by
inheriting :class:`Identified`; any other object receives one from the
process-wide :class:`IdentityRegistry` on first observation.
"""

from __future__ import annotations

import itertools
import logging
import threading
import weakref
from collections.abc import Callable
from typing import Any

__all__ = [
    "IDENTITY_ATTRIBUTE",
    "Identified",
    "IdentityRegistry",
    "default_registry",
    "next_token",
]

LOGGER = logging.getLogger(__name__)

IDENTITY_ATTRIBUTE = "__fingerprint_identity__"

_counter = itertools.count(1)
_counter_lock = threading.Lock()


def next_token(cls: type) -> str:
    """Return a fresh token for an instance of ``cls``."""

    with _counter_lock:
        serial = next(_counter)
    return f"{cls.__module__}.{cls.__qualname__}#{serial}"


class Identified:
    """Mixin assigning an identity token when an instance is created.

    The token lives in the instance ``__dict__`` under
    :data:`IDENTITY_ATTRIBUTE` and is excluded from field enumeration, so
    subclasses must keep an instance ``__dict__``.
    """

    def __new__(cls, *args: Any, **kwargs: Any) -> Any:
        instance = super().__new__(cls)
        object.__setattr__(instance, IDENTITY_ATTRIBUTE, next_token(cls))
        return instance

    def __getstate__(self) -> Any:
        # copies and unpickled instances get their own token from __new__
        state = super().__getstate__()
        if isinstance(state, tuple):
            namespace, slots = state
            return _without_token(namespace), slots
        return _without_token(state)


def _without_token(namespace: Any) -> Any:
    if isinstance(namespace, dict) and IDENTITY_ATTRIBUTE in namespace:
        return {k: v for k, v in namespace.items() if k != IDENTITY_ATTRIBUTE}
    return namespace


class _Pinned:
    """Strong stand-in for a weak reference to a non-weakrefable object."""

    __slots__ = ("_target",)

    def __init__(self, target: object) -> None:
        self._target = target

    def __call__(self) -> object:
        return self._target


class IdentityRegistry:
    """Assign tokens to objects that do not carry their own.

    Entries are keyed by ``id()`` and hold a weak reference to the object;
    a lookup only reuses a token while that reference still resolves to
    the same object. Objects that reject weak references are kept alive by
    the registry so their ``id()`` cannot be recycled.

    Pinned entries are never released: every non-weakrefable instance that
    is fingerprinted stays in memory for the lifetime of the registry. Types
    that are fingerprinted in bulk should either inherit :class:`Identified`
    or support weak references, e.g. ``@dataclass(slots=True,
    weakref_slot=True)`` or a ``"__weakref__"`` entry in ``__slots__``.
    """

    def __init__(self) -> None:
        # re-entrant: weakref callbacks may fire during a locked section
        self._lock = threading.RLock()
        self._entries: dict[int, tuple[Callable[[], object], str]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def token_for(self, obj: object) -> str:
        """Return the identity token of ``obj``.

        Args:
            obj: Any object.

        Returns:
            The token stored on the instance by :class:`Identified`, or a
            registry-assigned token.
        """

        own = _own_token(obj)
        if own is not None:
            return own

        key = id(obj)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[0]() is obj:
                return entry[1]

            token = next_token(type(obj))
            try:
                ref: Callable[[], object] = weakref.ref(
                    obj, lambda dead, key=key: self._forget(key, dead)
                )
            except TypeError:
                LOGGER.debug(
                    "Pinning non-weakrefable %s for identity token %s",
                    type(obj).__qualname__,
                    token,
                )
                ref = _Pinned(obj)
            self._entries[key] = (ref, token)
            return token

    def _forget(self, key: int, dead: weakref.ref[Any]) -> None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[0] is dead:
                del self._entries[key]


def _own_token(obj: object) -> str | None:
    try:
        namespace = object.__getattribute__(obj, "__dict__")
    except AttributeError:
        return None
    if not isinstance(namespace, dict):
        return None
    token = namespace.get(IDENTITY_ATTRIBUTE)
    return token if isinstance(token, str) else None


default_registry = IdentityRegistry()
