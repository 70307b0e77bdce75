"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator

import pytest

# Ensure src/ is on sys.path for tests so the src layout is used during test runs
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from refhash.digester import Digester, reset_default_digester  # noqa: E402


class Dummy:
    """Plain object with one public and one private attribute."""

    def __init__(self) -> None:
        self.a = None
        self._b = "private"


@pytest.fixture(autouse=True)
def _fresh_default_digester() -> Iterator[None]:
    """Rebuild the module-level digester around every test."""

    reset_default_digester()
    yield
    reset_default_digester()


@pytest.fixture
def digester() -> Digester:
    return Digester()


@pytest.fixture
def dummy() -> Dummy:
    return Dummy()


@pytest.fixture
def dummy_factory() -> type[Dummy]:
    return Dummy
