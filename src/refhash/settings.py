"""Environment-backed settings primitives for :mod:`refhash`."""

from __future__ import annotations

import hashlib

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["DEFAULT_ALGORITHM", "DEFAULT_MAX_DEPTH", "RefHashSettings", "get_settings"]

DEFAULT_ALGORITHM = "sha1"
DEFAULT_MAX_DEPTH = 256


class RefHashSettings(BaseSettings):
    """Expose environment-derived configuration knobs for refhash.

    All environment lookups go through this class. Malformed values are
    replaced by the documented defaults rather than rejected, so a bad
    variable never prevents fingerprinting.

    Attributes:
        algorithm: Name of the :mod:`hashlib` algorithm used to reduce
            encoded values. Variable-length algorithms are not accepted.
        max_depth: Maximum nesting depth of collections before
            :class:`~refhash.errors.NestingTooDeepError` is raised.
    """

    algorithm: str = Field(default=DEFAULT_ALGORITHM, alias="REFHASH_ALGORITHM")
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, alias="REFHASH_MAX_DEPTH")

    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    @field_validator("algorithm", mode="before")
    @classmethod
    def _parse_algorithm(cls, value: object) -> str:
        """Normalise the algorithm name, falling back to the default.

        Args:
            value: Raw environment value.

        Returns:
            Lower-cased algorithm name known to :mod:`hashlib`, otherwise
            :data:`DEFAULT_ALGORITHM`.
        """

        if not isinstance(value, str):
            return DEFAULT_ALGORITHM
        candidate = value.strip().lower()
        if candidate not in hashlib.algorithms_available:
            return DEFAULT_ALGORITHM
        if candidate.startswith("shake_"):
            return DEFAULT_ALGORITHM
        return candidate

    @field_validator("max_depth", mode="before")
    @classmethod
    def _parse_max_depth(cls, value: object) -> int:
        """Parse the nesting limit while tolerating malformed input.

        Args:
            value: Raw environment value.

        Returns:
            Positive integer limit, otherwise :data:`DEFAULT_MAX_DEPTH`.
        """

        parsed: int | None = None
        if isinstance(value, bool):
            parsed = None
        elif isinstance(value, int):
            parsed = value
        elif isinstance(value, str):
            try:
                parsed = int(value.strip())
            except ValueError:
                parsed = None
        if parsed is None or parsed <= 0:
            return DEFAULT_MAX_DEPTH
        return parsed


def get_settings() -> RefHashSettings:
    """Return a :class:`RefHashSettings` instance.

    Returns:
        Settings parsed from environment variables.
    """

    return RefHashSettings()
