"""
Tests for the session store and access-token refresh.
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from bulkops.auth import CredentialProvider, StaticTokenProvider, is_token_expired
from bulkops.db import SessionDatabase, ShopSession, offline_session_id
from bulkops.errors import ConfigError
from bulkops.shopify import ShopifyAuthError, ShopifyClient


SHOP = "ertis-playground.myshopify.com"
NOW = datetime(2025, 7, 1, 12, 0, tzinfo=timezone.utc)


def make_session(expires=None, refresh_token="refresh-1"):
    return ShopSession(
        id=offline_session_id(SHOP),
        shop=SHOP,
        access_token="shpat_old",
        scope="write_products,write_translations",
        expires=expires,
        refresh_token=refresh_token,
    )


@pytest.fixture
async def db(tmp_path):
    database = SessionDatabase(str(tmp_path / "prisma" / "dev.sqlite"))
    await database.initialize()
    yield database
    await database.close()


class RefreshEndpoint:
    """MockTransport handler for the OAuth token endpoint."""

    def __init__(self, status=200):
        self.status = status
        self.requests = []

    def __call__(self, request):
        self.requests.append(json.loads(request.content))
        if self.status != 200:
            return httpx.Response(self.status, text="invalid_grant")
        return httpx.Response(200, json={
            "access_token": "shpat_new",
            "expires_in": 86400,
            "refresh_token": "refresh-2",
            "refresh_token_expires_in": 7776000,
        })


def provider_for(db, endpoint):
    return CredentialProvider(
        db,
        api_key="client-id",
        api_secret="client-secret",
        transport=httpx.MockTransport(endpoint),
        clock=lambda: NOW,
    )


class TestIsTokenExpired:
    def test_no_expiry_never_expires(self):
        """Tokens without expiry never need a refresh."""
        assert is_token_expired(make_session(expires=None), NOW) is False

    def test_expiry_within_buffer_counts_as_expired(self):
        """Tokens expiring within five minutes count as expired."""
        assert is_token_expired(make_session(expires=NOW + timedelta(minutes=4)), NOW) is True

    def test_expiry_beyond_buffer_is_valid(self):
        """Tokens expiring later than five minutes are valid."""
        assert is_token_expired(make_session(expires=NOW + timedelta(minutes=6)), NOW) is False


class TestSessionDatabase:
    """Tests for the SQLite session store."""

    @pytest.mark.asyncio
    async def test_round_trip_keeps_timezone_aware_expiry(self, db):
        """Saved sessions read back with an aware expiry."""
        await db.save_session(make_session(expires=NOW))

        session = await db.get_session(SHOP)

        assert session.access_token == "shpat_old"
        assert session.expires == NOW
        assert session.is_online is False

    @pytest.mark.asyncio
    async def test_missing_session_raises_auth_error(self, db):
        """A shop without an offline session is an auth error."""
        with pytest.raises(ShopifyAuthError, match="offline_other.myshopify.com"):
            await db.get_session("other.myshopify.com")

    @pytest.mark.asyncio
    async def test_lists_installed_shops(self, db):
        """Offline sessions list the installed shops, sorted."""
        await db.save_session(make_session())
        await db.save_session(ShopSession(
            id="offline_b.myshopify.com", shop="b.myshopify.com", access_token="x",
        ))

        assert await db.list_offline_shops() == ["b.myshopify.com", SHOP]


class TestCredentialProvider:
    """Tests for token lookup and refresh."""

    def test_missing_secret_is_a_config_error(self, tmp_path):
        """The client secret is required."""
        with pytest.raises(ConfigError):
            CredentialProvider(SessionDatabase(str(tmp_path / "db.sqlite")), "client-id", None)

    @pytest.mark.asyncio
    async def test_valid_token_is_returned_without_refresh(self, db):
        """A valid token is handed out as stored."""
        await db.save_session(make_session(expires=NOW + timedelta(hours=1)))
        endpoint = RefreshEndpoint()

        token = await provider_for(db, endpoint).get_valid_access_token(SHOP)

        assert token == "shpat_old"
        assert endpoint.requests == []

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed_and_stored(self, db):
        """An expired token is exchanged and the new pair stored."""
        await db.save_session(make_session(expires=NOW - timedelta(minutes=1)))
        endpoint = RefreshEndpoint()

        token = await provider_for(db, endpoint).get_valid_access_token(f"https://{SHOP}")

        assert token == "shpat_new"
        assert endpoint.requests == [{
            "client_id": "client-id",
            "client_secret": "client-secret",
            "grant_type": "refresh_token",
            "refresh_token": "refresh-1",
        }]
        stored = await db.get_session(SHOP)
        assert stored.access_token == "shpat_new"
        assert stored.refresh_token == "refresh-2"
        assert stored.expires == NOW + timedelta(days=1)

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_refresh(self, db):
        """Concurrent callers on an expired token refresh once."""
        await db.save_session(make_session(expires=NOW - timedelta(minutes=1)))
        endpoint = RefreshEndpoint()
        provider = provider_for(db, endpoint)

        tokens = await asyncio.gather(
            *(provider.get_valid_access_token(SHOP) for _ in range(5))
        )

        assert tokens == ["shpat_new"] * 5
        assert len(endpoint.requests) == 1

    @pytest.mark.asyncio
    async def test_forced_refresh_ignores_expiry(self, db):
        """refresh() exchanges the token even when it looks valid."""
        await db.save_session(make_session(expires=NOW + timedelta(hours=1)))
        endpoint = RefreshEndpoint()

        token = await provider_for(db, endpoint).refresh(SHOP)

        assert token == "shpat_new"
        assert len(endpoint.requests) == 1

    @pytest.mark.asyncio
    async def test_refresh_is_skipped_when_token_already_rotated(self, db):
        """A stale rejected token gets the stored, newer token back."""
        await db.save_session(make_session(expires=NOW + timedelta(hours=1)))
        endpoint = RefreshEndpoint()

        token = await provider_for(db, endpoint).refresh(SHOP, rejected_token="shpat_older")

        assert token == "shpat_old"
        assert endpoint.requests == []

    @pytest.mark.asyncio
    async def test_concurrent_401s_share_one_refresh(self, db):
        """Requests rejected together trigger a single token exchange."""
        await db.save_session(make_session(expires=NOW + timedelta(hours=1)))
        endpoint = RefreshEndpoint()
        provider = provider_for(db, endpoint)

        def graphql(request):
            if request.headers["X-Shopify-Access-Token"] == "shpat_old":
                return httpx.Response(401, text="Invalid API key or access token")
            return httpx.Response(200, json={"data": {"shop": {"name": "Playground"}}})

        async with ShopifyClient(SHOP, provider, transport=httpx.MockTransport(graphql)) as client:
            responses = await asyncio.gather(
                *(client.execute("{ shop { name } }") for _ in range(5))
            )

        assert [r.data["shop"]["name"] for r in responses] == ["Playground"] * 5
        assert len(endpoint.requests) == 1
        assert (await db.get_session(SHOP)).access_token == "shpat_new"

    @pytest.mark.asyncio
    async def test_expired_without_refresh_token_raises(self, db):
        """Without a refresh token an expired session is an auth error."""
        await db.save_session(make_session(expires=NOW - timedelta(minutes=1), refresh_token=None))

        with pytest.raises(ShopifyAuthError, match="no refresh token"):
            await provider_for(db, RefreshEndpoint()).get_valid_access_token(SHOP)

    @pytest.mark.asyncio
    async def test_rejected_refresh_raises(self, db):
        """A failed token exchange is an auth error."""
        await db.save_session(make_session(expires=NOW - timedelta(minutes=1)))

        with pytest.raises(ShopifyAuthError, match="400"):
            await provider_for(db, RefreshEndpoint(status=400)).get_valid_access_token(SHOP)


class TestStaticTokenProvider:
    @pytest.mark.asyncio
    async def test_returns_fixed_token_and_cannot_refresh(self):
        """A fixed token is served as-is and cannot be refreshed."""
        provider = StaticTokenProvider("shpat_fixed")

        assert await provider.get_valid_access_token(SHOP) == "shpat_fixed"
        with pytest.raises(ShopifyAuthError):
            await provider.refresh(SHOP)
