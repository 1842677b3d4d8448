from __future__ import annotations

from typing import Callable

import pytest

from tests._fixtures.archives import FakeFetcher, build_tarball


@pytest.fixture
def make_tarball() -> Callable[..., bytes]:
    """Provide the in-memory tarball builder."""
    return build_tarball


@pytest.fixture
def fake_fetch() -> FakeFetcher:
    """Provide a fetcher that 404s on every URL until responses are added."""
    return FakeFetcher()
