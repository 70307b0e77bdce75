"""Typed configuration for building digesters."""

from __future__ import annotations

from dataclasses import dataclass

from refhash.settings import (
    DEFAULT_ALGORITHM,
    DEFAULT_MAX_DEPTH,
    RefHashSettings,
    get_settings,
)

__all__ = ["FingerprintConfig", "load_config"]


@dataclass(frozen=True, slots=True)
class FingerprintConfig:
    """Settings controlling how fingerprints are computed.

    Attributes:
        algorithm: :mod:`hashlib` algorithm name for the digest primitive.
        max_depth: Nesting limit applied while traversing collections.
    """

    algorithm: str = DEFAULT_ALGORITHM
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if self.max_depth <= 0:
            raise ValueError("max_depth must be a positive integer")


def load_config(*, settings: RefHashSettings | None = None) -> FingerprintConfig:
    """Load configuration from the environment.

    Args:
        settings: Optional pre-instantiated environment settings. When omitted
            :func:`refhash.settings.get_settings` is used.

    Returns:
        Fully populated :class:`FingerprintConfig` instance.
    """

    env_settings = settings or get_settings()
    return FingerprintConfig(
        algorithm=env_settings.algorithm, max_depth=env_settings.max_depth
    )
