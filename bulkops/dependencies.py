"""
Wiring shared by the entry scripts: settings -> token provider -> client.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Tuple

from .auth import CredentialProvider, StaticTokenProvider
from .config import Settings, settings
from .db import SessionDatabase
from .shopify import RateLimitedExecutor, ShopifyClient


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging the same way for every script."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@asynccontextmanager
async def open_shop(
    shop: Optional[str] = None,
    config: Settings = settings,
) -> AsyncIterator[Tuple[ShopifyClient, RateLimitedExecutor]]:
    """
    Open a client for a shop and close everything on exit.

    Uses SHOPIFY_ACCESS_TOKEN when set, otherwise the offline session in the
    session store (refreshing it as needed).
    """
    shop = shop or config.shopify_shop
    db: Optional[SessionDatabase] = None

    if config.shopify_access_token:
        provider = StaticTokenProvider(config.shopify_access_token)
    else:
        db = SessionDatabase(config.database_path)
        provider = CredentialProvider(db, config.shopify_api_key, config.shopify_api_secret)
        await db.initialize()

    client = ShopifyClient(shop, provider, api_version=config.shopify_api_version)
    try:
        yield client, RateLimitedExecutor()
    finally:
        await client.close()
        if db is not None:
            await db.close()
