"""Tests for the HTTP collaborator clients."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from ticket_bridge.errors import ConfigUnavailableError, TransportError
from ticket_bridge.integrations import HubCollaborator
from ticket_bridge.integrations.hub_http import ConfigHttpClient, HubHttpClient


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHubHttpClient:
    """Test cases for pushing to the hub over HTTP."""

    @pytest.mark.asyncio
    async def test_push_posts_ticket(self, make_ticket):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"status": "ok"})

        client = HubHttpClient("https://hub.example.com/", api_key="secret")
        await client.close()
        client.client = mock_client(handler)

        await client.push_update(make_ticket())
        await client.close()

        [request] = requests
        assert request.method == "POST"
        assert str(request.url) == "https://hub.example.com/api/tickets/sync"
        assert json.loads(request.content)["hub_id"] == "hub-1001"

    @pytest.mark.asyncio
    async def test_push_failure_is_transport_error(self, make_ticket):
        client = HubHttpClient("https://hub.example.com")
        await client.close()
        client.client = mock_client(lambda request: httpx.Response(500))

        with pytest.raises(TransportError):
            await client.push_update(make_ticket())
        await client.close()

    @pytest.mark.asyncio
    async def test_get_sync_type(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/tenants/T1/sync-type"
            assert request.url.params["source"] == "adapter-1"
            return httpx.Response(200, json={"sync_type": "bidirectional"})

        client = HubHttpClient("https://hub.example.com")
        await client.close()
        client.client = mock_client(handler)

        assert await client.get_sync_type("T1", "adapter-1") == "bidirectional"
        await client.close()

    def test_subscribe_registers_nothing(self):
        client = HubHttpClient("https://hub.example.com")

        client.subscribe_updates("adapter-1", AsyncMock())

        assert isinstance(client, HubCollaborator)
        assert not hasattr(client, "handlers")

    def test_auth_header(self):
        client = HubHttpClient("https://hub.example.com", api_key="secret")
        assert client.client.headers["Authorization"] == "Bearer secret"


class TestConfigHttpClient:
    """Test cases for retrieving configs over HTTP."""

    @pytest.mark.asyncio
    async def test_retrieve_parses_config(self):
        payload = {
            "status_hub_to_external": {"Open": "New"},
            "user_hub_to_external": {"john.doe@acme.com": {"external_id": "jdoe"}},
        }

        client = ConfigHttpClient("https://config.example.com")
        await client.close()
        client.client = mock_client(lambda request: httpx.Response(200, json=payload))

        config = await client.retrieve_config("T1")
        await client.close()

        assert config.status_hub_to_external == {"Open": "New"}
        assert config.user_hub_to_external["john.doe@acme.com"].external_id == "jdoe"
        assert config.user_hub_to_external["john.doe@acme.com"].id_kind == "username"

    @pytest.mark.asyncio
    async def test_retrieve_failure_is_config_unavailable(self):
        client = ConfigHttpClient("https://config.example.com")
        await client.close()
        client.client = mock_client(lambda request: httpx.Response(404))

        with pytest.raises(ConfigUnavailableError) as exc_info:
            await client.retrieve_config("T9")
        await client.close()

        assert exc_info.value.tenant_id == "T9"
