"""
Shopify API module.
"""

from .client import (
    ShopifyClient,
    ShopifyClientError,
    ShopifyAuthError,
    ShopifyTransientError,
    TokenProvider,
)
from .executor import ErrorClassifier, Outcome, RateLimitedExecutor
from .models import GraphQLResponse, ThrottleReading
from .pagination import PaginationError, fetch_all_nodes, fetch_translatable_resources

__all__ = [
    "ShopifyClient",
    "ShopifyClientError",
    "ShopifyAuthError",
    "ShopifyTransientError",
    "TokenProvider",
    "ErrorClassifier",
    "Outcome",
    "RateLimitedExecutor",
    "GraphQLResponse",
    "ThrottleReading",
    "PaginationError",
    "fetch_all_nodes",
    "fetch_translatable_resources",
]
