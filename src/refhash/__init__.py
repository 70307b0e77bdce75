"""refhash - fingerprints that track a value's own shape, not its neighbours'."""

from __future__ import annotations

from importlib import import_module
from typing import Any, TYPE_CHECKING

__all__ = [
    "Digester",
    "FingerprintError",
    "Identified",
    "NestingTooDeepError",
    "UnsupportedValueKindError",
    "fingerprint",
    "register_opaque_type",
    "register_scalar_type",
]

if TYPE_CHECKING:
    from .classifier import register_opaque_type
    from .digester import Digester, fingerprint
    from .errors import (
        FingerprintError,
        NestingTooDeepError,
        UnsupportedValueKindError,
    )
    from .identity import Identified
    from .scalars import register_scalar_type


def __getattr__(name: str) -> Any:
    """Lazily import submodules on first attribute access."""

    module_map = {
        "Digester": "digester",
        "fingerprint": "digester",
        "FingerprintError": "errors",
        "NestingTooDeepError": "errors",
        "UnsupportedValueKindError": "errors",
        "Identified": "identity",
        "register_opaque_type": "classifier",
        "register_scalar_type": "scalars",
    }

    if name not in module_map:
        raise AttributeError(name)

    module = import_module(f".{module_map[name]}", __name__)
    return getattr(module, name)
