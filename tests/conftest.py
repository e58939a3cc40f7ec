"""Pytest fixtures for all tests."""

import pytest
from httpx import AsyncClient, ASGITransport

from config import Config
from flake.codec import IdCodec, get_codec
from flake.layout import DEFAULT_EPOCH_MS
from ui.app import create_app

# 12345 ms after the default epoch, plus sub-millisecond noise that must truncate
FIXED_NANOS = (DEFAULT_EPOCH_MS + 12345) * 1_000_000 + 999_999


class FixedEntropy:
    """Entropy stub returning a fixed value and recording the bounds asked for."""

    def __init__(self, value=7):
        self.value = value
        self.bounds = []

    def __call__(self, bound):
        self.bounds.append(bound)
        return self.value


@pytest.fixture
def entropy():
    return FixedEntropy()


@pytest.fixture
def codec(entropy):
    """Codec with a frozen clock and predictable random field."""
    return IdCodec(clock=lambda: FIXED_NANOS, entropy=entropy)


@pytest.fixture
def default_codec():
    """Process-wide codec, restored after the test."""
    codec = get_codec()
    saved = codec.layout
    yield codec
    codec._layout = saved


@pytest.fixture
async def app():
    """Create test FastAPI app with its own codec."""
    return create_app(config=Config(), codec=IdCodec())


@pytest.fixture
async def client(app):
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
