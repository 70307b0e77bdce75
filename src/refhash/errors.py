"""Exception hierarchy for :mod:`refhash`."""

from __future__ import annotations

__all__ = ["FingerprintError", "NestingTooDeepError", "UnsupportedValueKindError"]


class FingerprintError(Exception):
    """Base class for errors raised while computing a fingerprint."""


class UnsupportedValueKindError(FingerprintError, TypeError):
    """Raised when an opaque system handle is reachable from the value."""

    def __init__(self, value_type: type) -> None:
        self.value_type = value_type
        super().__init__(
            f"Cannot fingerprint opaque handle of type {value_type.__qualname__}"
        )


class NestingTooDeepError(FingerprintError, RecursionError):
    """Raised when a value nests deeper than the configured limit."""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(f"Value nests deeper than max_depth={max_depth}")
