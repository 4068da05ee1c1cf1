"""
Database package - SQLite session store.
"""

from .models import ShopSession, offline_session_id
from .sqlite import SessionDatabase

__all__ = [
    "SessionDatabase",
    "ShopSession",
    "offline_session_id",
]
