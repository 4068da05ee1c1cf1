"""
Authentication module.
"""

from .credentials import CredentialProvider, StaticTokenProvider, is_token_expired

__all__ = [
    "CredentialProvider",
    "StaticTokenProvider",
    "is_token_expired",
]
