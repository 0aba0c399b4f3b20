"""
Tests for submitter logo lookup. The Supabase client is mocked and
downloads go through httpx.MockTransport instead of the network.
"""

import asyncio
from unittest.mock import MagicMock, patch

import httpx
import pytest

import logo_store
from errors import LogoFetchError, LogoNotFoundError, MissingInputError
from logo_store import fetch_logo, get_supabase, public_logo_url

LOGO_URL = "https://project.supabase.co/storage/v1/object/public/wholesale_logos/jane@broker.com.png"


@pytest.fixture
def supabase_client():
    client = MagicMock()
    client.storage.from_.return_value.get_public_url.return_value = LOGO_URL
    return client


def _fetch(identity, handler, supabase_client):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            return await fetch_logo(identity, http_client=http_client, supabase_client=supabase_client)
    return asyncio.run(run())


class TestGetSupabase:
    """Shared client construction."""

    @pytest.fixture(autouse=True)
    def reset_client(self, monkeypatch):
        monkeypatch.setattr(logo_store, "_client", None)
        monkeypatch.setattr(logo_store, "SUPABASE_URL", "https://test.supabase.co")
        monkeypatch.setattr(logo_store, "SUPABASE_SERVICE_KEY", "test_key")

    @patch('logo_store.create_client')
    def test_created_once(self, mock_create_client):
        mock_create_client.return_value = MagicMock()

        first = get_supabase()
        second = get_supabase()

        assert first is second
        mock_create_client.assert_called_once_with("https://test.supabase.co", "test_key")

    @pytest.mark.parametrize("setting", ["SUPABASE_URL", "SUPABASE_SERVICE_KEY"])
    def test_missing_credentials(self, monkeypatch, setting):
        monkeypatch.setattr(logo_store, setting, "")
        with pytest.raises(LogoFetchError, match="SUPABASE_URL and SUPABASE_SERVICE_KEY"):
            get_supabase()


class TestPublicLogoUrl:

    def test_uses_bucket_and_png_key(self, supabase_client):
        url = public_logo_url(" jane@broker.com ", client=supabase_client)

        assert url == LOGO_URL
        supabase_client.storage.from_.assert_called_once_with("wholesale_logos")
        supabase_client.storage.from_.return_value.get_public_url.assert_called_once_with(
            "jane@broker.com.png"
        )

    @pytest.mark.parametrize("identity", ["", "   ", None])
    def test_blank_identity(self, identity, supabase_client):
        with pytest.raises(MissingInputError):
            public_logo_url(identity, client=supabase_client)
        supabase_client.storage.from_.assert_not_called()


class TestFetchLogo:

    def test_returns_bytes(self, logo_png, supabase_client):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, content=logo_png)

        assert _fetch("jane@broker.com", handler, supabase_client) == logo_png
        assert seen == [LOGO_URL]

    @pytest.mark.parametrize("status", [400, 404])
    def test_missing_logo(self, status, supabase_client):
        with pytest.raises(LogoNotFoundError):
            _fetch("nobody@broker.com", lambda request: httpx.Response(status), supabase_client)

    def test_empty_body(self, supabase_client):
        with pytest.raises(LogoNotFoundError):
            _fetch("jane@broker.com", lambda request: httpx.Response(200, content=b""), supabase_client)

    def test_server_error(self, supabase_client):
        with pytest.raises(LogoFetchError, match="503"):
            _fetch("jane@broker.com", lambda request: httpx.Response(503), supabase_client)

    def test_transport_error(self, supabase_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(LogoFetchError):
            _fetch("jane@broker.com", handler, supabase_client)
