"""
Shared fixtures for resilient_fetch tests.
"""
import pytest
from unittest.mock import MagicMock

import httpx
import respx

BASE_URL = "https://api.test"


@pytest.fixture
def router():
    """respx router mounted through httpx.MockTransport."""
    return respx.MockRouter(assert_all_called=False)


@pytest.fixture
def mock_httpx_client(router):
    """AsyncClient whose requests are served by ``router``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(router.async_handler))


@pytest.fixture
def log_sink():
    """Recording log sink."""
    return MagicMock()


def make_httpx_client(handler):
    """AsyncClient served by a plain (possibly async) handler function."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
