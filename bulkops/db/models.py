"""
Pydantic models for the app's session store.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


def offline_session_id(shop: str) -> str:
    """Session id under which the app stores a shop's offline token."""
    return f"offline_{shop}"


class ShopSession(BaseModel):
    """Offline OAuth session for one shop."""
    id: str
    shop: str
    access_token: str
    is_online: bool = False
    scope: Optional[str] = None
    expires: Optional[datetime] = None
    refresh_token: Optional[str] = None
    refresh_token_expires: Optional[datetime] = None
