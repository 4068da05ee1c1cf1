"""
SQLite session store.
Reads and updates the `Session` table the Shopify app writes on install.
"""

import aiosqlite
from datetime import datetime, timezone
from typing import List, Optional, Union
import os

from ..shopify.client import ShopifyAuthError
from .models import ShopSession, offline_session_id


def _parse_datetime(value: Union[str, int, float, None]) -> Optional[datetime]:
    """Parse an ISO string or epoch milliseconds into an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class SessionDatabase:
    """SQLite access to stored shop sessions."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def initialize(self) -> None:
        """Create the session table if the app has not created it yet."""
        conn = await self._get_connection()

        await conn.executescript("""
            CREATE TABLE IF NOT EXISTS Session (
                id TEXT PRIMARY KEY,
                shop TEXT NOT NULL,
                state TEXT NOT NULL DEFAULT '',
                isOnline INTEGER NOT NULL DEFAULT 0,
                scope TEXT,
                expires TEXT,
                accessToken TEXT NOT NULL,
                refreshToken TEXT,
                refreshTokenExpires TEXT
            );
        """)
        await conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _row_to_session(self, row: aiosqlite.Row) -> ShopSession:
        """Convert a database row to a ShopSession model."""
        return ShopSession(
            id=row["id"],
            shop=row["shop"],
            access_token=row["accessToken"],
            is_online=bool(row["isOnline"]),
            scope=row["scope"],
            expires=_parse_datetime(row["expires"]),
            refresh_token=row["refreshToken"],
            refresh_token_expires=_parse_datetime(row["refreshTokenExpires"]),
        )

    async def get_session(self, shop: str) -> ShopSession:
        """
        Get the offline session for a shop.

        Raises:
            ShopifyAuthError: If the app was never installed on the shop
        """
        session_id = offline_session_id(shop)
        conn = await self._get_connection()
        async with conn.execute(
            "SELECT * FROM Session WHERE id = ?", (session_id,)
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            raise ShopifyAuthError(
                f"No offline session found for {shop}. "
                f"Expected session ID: {session_id}. "
                f"Has the app been installed on this store?"
            )
        return self._row_to_session(row)

    async def save_session(self, session: ShopSession) -> None:
        """
        Insert or replace a session row.

        The app's OAuth flow writes sessions in production; this is used to seed
        custom installs and test databases.
        """
        conn = await self._get_connection()
        await conn.execute(
            """
            INSERT OR REPLACE INTO Session
                (id, shop, isOnline, scope, expires, accessToken, refreshToken, refreshTokenExpires)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                session.id,
                session.shop,
                int(session.is_online),
                session.scope,
                _format_datetime(session.expires),
                session.access_token,
                session.refresh_token,
                _format_datetime(session.refresh_token_expires),
            ),
        )
        await conn.commit()

    async def update_tokens(
        self,
        session_id: str,
        access_token: str,
        refresh_token: Optional[str],
        expires: Optional[datetime],
        refresh_token_expires: Optional[datetime],
    ) -> None:
        """Store a refreshed token pair."""
        conn = await self._get_connection()
        await conn.execute(
            """
            UPDATE Session
            SET accessToken = ?, refreshToken = ?, expires = ?, refreshTokenExpires = ?
            WHERE id = ?
            """,
            (
                access_token,
                refresh_token,
                _format_datetime(expires),
                _format_datetime(refresh_token_expires),
                session_id,
            ),
        )
        await conn.commit()

    async def list_offline_shops(self) -> List[str]:
        """Shops with an offline session, i.e. stores the app is installed on."""
        conn = await self._get_connection()
        async with conn.execute(
            "SELECT shop FROM Session WHERE isOnline = 0 ORDER BY shop"
        ) as cursor:
            rows = await cursor.fetchall()
        return [row["shop"] for row in rows]
