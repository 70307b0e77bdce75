"""Fingerprint entry points.

:func:`fingerprint` hashes any value so that it changes when the value's
own content changes, but not when an object merely referenced from it is
mutated::

    parent.child = child
    before = fingerprint(parent)
    child.name = "renamed"
    assert fingerprint(parent) == before

Replacing ``parent.child`` with another instance, or with ``None``, does
change the fingerprint.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from refhash.classifier import ValueKind
from refhash.config import FingerprintConfig, load_config
from refhash.digest import DigestPrimitive, HashlibPrimitive
from refhash.encoder import StructuralEncoder
from refhash.introspection import IntrospectionProvider, ReflectionIntrospector
from refhash.scalars import encode_scalar

__all__ = [
    "Digester",
    "default_digester",
    "fingerprint",
    "reset_default_digester",
]

LOGGER = logging.getLogger(__name__)


class Digester:
    """Reduce encoded values to fixed-length fingerprints.

    Args:
        primitive: Digest function applied to the encoded bytes. Defaults to
            SHA-1, which yields 40 hex characters.
        introspector: Field and identity provider for composite objects.
        max_depth: Nesting limit passed to the encoder.
    """

    def __init__(
        self,
        primitive: DigestPrimitive | None = None,
        introspector: IntrospectionProvider | None = None,
        *,
        max_depth: int | None = None,
    ) -> None:
        defaults = FingerprintConfig()
        self.primitive: DigestPrimitive = primitive or HashlibPrimitive(
            defaults.algorithm
        )
        self.introspector = introspector or ReflectionIntrospector()
        self.encoder = StructuralEncoder(
            self.introspector,
            max_depth=defaults.max_depth if max_depth is None else max_depth,
        )

    @classmethod
    def from_config(
        cls,
        config: FingerprintConfig,
        introspector: IntrospectionProvider | None = None,
    ) -> Digester:
        """Build a digester from a :class:`~refhash.config.FingerprintConfig`."""

        return cls(
            HashlibPrimitive(config.algorithm),
            introspector,
            max_depth=config.max_depth,
        )

    def encode_subject(self, value: object) -> bytes:
        """Return the bytes that :meth:`digest` reduces for ``value``.

        A composite subject contributes its field names and encoded field
        values; any other value contributes its structural encoding.
        """

        if self.encoder.classifier.classify(value) is not ValueKind.COMPOSITE:
            return self.encoder.encode(value)
        parts: list[bytes] = []
        for name, field_value in self.introspector.fields(value):
            parts.append(encode_scalar(name))
            parts.append(self.encoder.encode(field_value))
        return b"".join(parts)

    def digest(self, value: object) -> str:
        """Return the fingerprint of ``value``.

        Raises:
            UnsupportedValueKindError: If an opaque handle is reachable from
                ``value``.
            NestingTooDeepError: If collections nest deeper than the limit.
        """

        result = self.primitive(self.encode_subject(value))
        LOGGER.debug("Fingerprinted %s as %s", type(value).__qualname__, result)
        return result


@lru_cache(maxsize=1)
def default_digester() -> Digester:
    """Return the process-wide digester configured from the environment."""

    config = load_config()
    LOGGER.debug(
        "Building default digester (algorithm=%s, max_depth=%d)",
        config.algorithm,
        config.max_depth,
    )
    return Digester.from_config(config)


def reset_default_digester() -> None:
    """Discard the cached default digester so settings are read again."""

    default_digester.cache_clear()


def fingerprint(value: object) -> str:
    """Return the fingerprint of ``value`` using :func:`default_digester`."""

    return default_digester().digest(value)
