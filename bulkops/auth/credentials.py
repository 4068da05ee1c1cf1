"""
Access-token lookup and refresh for offline shop sessions.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import httpx

from ..db import SessionDatabase, ShopSession
from ..errors import ConfigError
from ..shopify.client import ShopifyAuthError, normalize_shop_domain

logger = logging.getLogger(__name__)


# Refresh this long before the stored expiry
EXPIRY_BUFFER = timedelta(minutes=5)


def is_token_expired(session: ShopSession, now: Optional[datetime] = None) -> bool:
    """True if the session's access token expires within EXPIRY_BUFFER."""
    if session.expires is None:
        return False
    now = now or datetime.now(timezone.utc)
    return session.expires - EXPIRY_BUFFER < now


class StaticTokenProvider:
    """Token provider for a fixed Admin API token (custom apps)."""

    def __init__(self, access_token: str):
        self.access_token = access_token

    async def get_valid_access_token(self, shop: str) -> str:
        return self.access_token

    async def refresh(self, shop: str, rejected_token: Optional[str] = None) -> str:
        raise ShopifyAuthError(
            f"Static access token for {shop} was rejected and cannot be refreshed"
        )


class CredentialProvider:
    """
    Hands out valid access tokens from the session store, refreshing on expiry.

    Refreshes are serialised through one lock per provider instance, so
    concurrent callers that all see an expired token trigger a single refresh.
    """

    def __init__(
        self,
        db: SessionDatabase,
        api_key: str,
        api_secret: Optional[str],
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Initialize credential provider.

        Args:
            db: Session store
            api_key: App client id
            api_secret: App client secret
            transport: Optional httpx transport (used by tests)
            clock: Current time source

        Raises:
            ConfigError: If the client secret is missing
        """
        if not api_secret:
            raise ConfigError(
                "SHOPIFY_API_SECRET env var is required. "
                "Create a .env file or export it before running scripts."
            )
        self.db = db
        self.api_key = api_key
        self.api_secret = api_secret
        self._transport = transport
        self._clock = clock
        self._refresh_lock = asyncio.Lock()

    async def get_valid_access_token(self, shop: str) -> str:
        """Return the stored token, refreshing it first if it is about to expire."""
        shop = normalize_shop_domain(shop)
        session = await self.db.get_session(shop)

        if is_token_expired(session, self._clock()):
            session = await self._refresh_session(shop)

        return session.access_token

    async def refresh(self, shop: str, rejected_token: Optional[str] = None) -> str:
        """
        Refresh after a 401 and return the new token.

        Args:
            shop: Store domain
            rejected_token: Token the API just rejected. If the stored token
                already differs from it, another caller has refreshed and the
                stored token is returned as-is.
        """
        session = await self._refresh_session(
            normalize_shop_domain(shop), rejected_token=rejected_token, force=True
        )
        return session.access_token

    async def _refresh_session(
        self,
        shop: str,
        rejected_token: Optional[str] = None,
        force: bool = False,
    ) -> ShopSession:
        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            session = await self.db.get_session(shop)
            if rejected_token is not None and session.access_token != rejected_token:
                return session
            if not force and not is_token_expired(session, self._clock()):
                return session
            return await self._exchange_refresh_token(shop, session)

    async def _exchange_refresh_token(self, shop: str, session: ShopSession) -> ShopSession:
        if not session.refresh_token:
            raise ShopifyAuthError(
                "Access token is expired but no refresh token is available. "
                "Reinstall the app on the store to get fresh tokens."
            )

        logger.warning(f"Token expired for {shop}, refreshing...")

        async with httpx.AsyncClient(transport=self._transport, timeout=30.0) as client:
            response = await client.post(
                f"https://{shop}/admin/oauth/access_token",
                json={
                    "client_id": self.api_key,
                    "client_secret": self.api_secret,
                    "grant_type": "refresh_token",
                    "refresh_token": session.refresh_token,
                },
            )

        if response.is_error:
            raise ShopifyAuthError(
                f"Token refresh failed ({response.status_code}): {response.text}"
            )

        data = response.json()
        now = self._clock()
        expires = now + timedelta(seconds=data["expires_in"])
        refresh_expires = None
        if data.get("refresh_token_expires_in") is not None:
            refresh_expires = now + timedelta(seconds=data["refresh_token_expires_in"])

        updated = session.model_copy(update={
            "access_token": data["access_token"],
            "refresh_token": data.get("refresh_token", session.refresh_token),
            "expires": expires,
            "refresh_token_expires": refresh_expires,
        })
        await self.db.update_tokens(
            updated.id,
            updated.access_token,
            updated.refresh_token,
            updated.expires,
            updated.refresh_token_expires,
        )

        logger.info(f"Token refreshed. New expiry: {expires.isoformat()}")
        return updated
