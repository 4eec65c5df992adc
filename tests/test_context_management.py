"""Tests for context management behavior of the HTTP webhook clients."""

# pyright: reportPrivateUsage=false

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from assethook import AssetHookConfig, MutationEngine, ValidationEngine
from assethook.clients import HttpMutationClient, HttpValidationClient
from tests.utils import FakeWebhookClient

# =============================================================================
# Fixtures
# =============================================================================

ALL_CLIENTS: list[type] = [HttpValidationClient, HttpMutationClient]


@pytest.fixture(params=ALL_CLIENTS, ids=["HttpValidationClient", "HttpMutationClient"])
def client_factory(request: pytest.FixtureRequest) -> Callable[..., Any]:
    return request.param


# =============================================================================
# Tests
# =============================================================================


@pytest.mark.asyncio
async def test_context_manager_closes_own_httpx_client(
    client_factory: Callable[..., Any],
):
    """Context manager should close httpx client it created."""
    async with client_factory() as client:
        assert client._own_httpx_client is True
        assert client._closed is False
    assert client._closed is True
    assert client.httpx_client.is_closed


@pytest.mark.asyncio
async def test_context_manager_does_not_close_external_httpx_client(
    client_factory: Callable[..., Any],
):
    """Context manager should not close externally provided httpx client."""
    external_httpx = httpx.AsyncClient()
    try:
        async with client_factory(httpx_client=external_httpx) as client:
            assert client._own_httpx_client is False
            assert client._closed is False

        assert client._closed is True
        assert not external_httpx.is_closed
    finally:
        await external_httpx.aclose()


@pytest.mark.asyncio
async def test_close_is_idempotent(client_factory: Callable[..., Any]):
    """Calling close() multiple times should not cause errors."""
    client = client_factory()
    await client.close()
    assert client._closed is True
    await client.close()
    assert client._closed is True


@pytest.mark.asyncio
async def test_context_manager_returns_self(client_factory: Callable[..., Any]):
    """Context manager __aenter__ should return the client instance."""
    client = client_factory()
    async with client as ctx:
        assert ctx is client


@pytest.mark.asyncio
@pytest.mark.parametrize("engine_cls", [ValidationEngine, MutationEngine])
async def test_engine_closes_client_it_created(engine_cls: Any):
    async with engine_cls.from_config(AssetHookConfig()) as engine:
        assert engine.client._closed is False
    assert engine.client._closed is True


@pytest.mark.asyncio
@pytest.mark.parametrize("engine_cls", [ValidationEngine, MutationEngine])
async def test_engine_leaves_given_client_open(engine_cls: Any):
    async with HttpValidationClient() as client:
        async with engine_cls.from_config(AssetHookConfig(), client=client):
            pass
        assert client._closed is False


@pytest.mark.asyncio
async def test_engine_close_with_fake_client():
    async with ValidationEngine(client=FakeWebhookClient({})) as engine:
        assert engine.client is not None
