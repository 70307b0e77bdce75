"""Digest primitives reducing encoded bytes to fixed-length strings."""

from __future__ import annotations

import hashlib
from typing import Protocol

from refhash.settings import DEFAULT_ALGORITHM

__all__ = ["DigestPrimitive", "HashlibPrimitive"]


class DigestPrimitive(Protocol):
    """Deterministic reduction of a byte string to a fixed-length digest."""

    def __call__(self, data: bytes) -> str:
        """Return the digest of ``data``."""


class HashlibPrimitive:
    """Reduce bytes through a fixed-length :mod:`hashlib` algorithm.

    Args:
        algorithm: Name accepted by :func:`hashlib.new`.

    Raises:
        ValueError: If the algorithm is unknown or produces variable-length
            output.
    """

    __slots__ = ("algorithm", "digest_size")

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM) -> None:
        name = algorithm.strip().lower()
        try:
            probe = hashlib.new(name)
        except ValueError as exc:
            raise ValueError(f"Unknown hash algorithm: {algorithm!r}") from exc
        if probe.digest_size == 0 or name.startswith("shake_"):
            raise ValueError(f"Hash algorithm {algorithm!r} has no fixed digest size")
        self.algorithm = name
        self.digest_size = probe.digest_size

    @property
    def hex_length(self) -> int:
        """Number of characters in every digest produced."""

        return self.digest_size * 2

    def __call__(self, data: bytes) -> str:
        return hashlib.new(self.algorithm, data).hexdigest()

    def __repr__(self) -> str:
        return f"HashlibPrimitive({self.algorithm!r})"
