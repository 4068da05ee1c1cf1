"""
Shopify GraphQL Admin API client.
"""

import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from ..errors import FatalError
from .models import GraphQLResponse

logger = logging.getLogger(__name__)


class ShopifyClientError(Exception):
    """Base exception for Shopify client errors."""
    pass


class ShopifyAuthError(ShopifyClientError, FatalError):
    """Authentication error."""
    pass


class ShopifyTransientError(ShopifyClientError):
    """Retryable transport-level failure (429 or 5xx)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TokenProvider(Protocol):
    """Source of Admin API access tokens for a shop."""

    async def get_valid_access_token(self, shop: str) -> str:
        ...

    async def refresh(self, shop: str, rejected_token: Optional[str] = None) -> str:
        ...


def normalize_shop_domain(shop_domain: str) -> str:
    """Strip scheme and trailing slash from a store domain."""
    domain = shop_domain
    if domain.startswith("https://"):
        domain = domain[8:]
    elif domain.startswith("http://"):
        domain = domain[7:]
    return domain.rstrip("/")


class ShopifyClient:
    """
    Async HTTP client for Shopify GraphQL Admin API.

    Performs exactly one request per `execute` call (plus one re-send after a
    token refresh on 401). Retry and throttle handling live in the executor.
    """

    API_VERSION = "2025-07"

    def __init__(
        self,
        shop_domain: str,
        token_provider: TokenProvider,
        api_version: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Shopify client.

        Args:
            shop_domain: Store domain (e.g., "mystore.myshopify.com")
            token_provider: Credential lookup used for every request
            api_version: Admin API version, defaults to API_VERSION
            transport: Optional httpx transport (used by tests)
        """
        self.shop_domain = normalize_shop_domain(shop_domain)
        self.token_provider = token_provider
        self.api_version = api_version or self.API_VERSION
        self.graphql_url = (
            f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"
        )

        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(60.0, connect=10.0),
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _post(self, payload: Dict[str, Any], access_token: str) -> httpx.Response:
        client = await self._get_client()
        return await client.post(
            self.graphql_url,
            json=payload,
            headers={"X-Shopify-Access-Token": access_token},
        )

    async def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> GraphQLResponse:
        """
        Execute a GraphQL query/mutation once.

        Args:
            query: GraphQL query or mutation string
            variables: Optional variables for the query

        Returns:
            The parsed response, including any GraphQL errors and cost extensions

        Raises:
            ShopifyAuthError: If authentication still fails after one token refresh
            ShopifyTransientError: On 429 or 5xx responses
            ShopifyClientError: For other HTTP errors
            httpx.TransportError: On network failures
        """
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        access_token = await self.token_provider.get_valid_access_token(self.shop_domain)
        response = await self._post(payload, access_token)

        # Token may have expired mid-run: refresh once and re-send
        if response.status_code == 401:
            logger.warning(f"Got 401 from {self.shop_domain}, attempting token refresh...")
            access_token = await self.token_provider.refresh(self.shop_domain, access_token)
            response = await self._post(payload, access_token)

            if response.status_code == 401:
                raise ShopifyAuthError(
                    f"Authentication failed for {self.shop_domain} after token refresh"
                )

        if response.status_code == 429 or response.status_code >= 500:
            raise ShopifyTransientError(
                f"GraphQL request failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        if response.is_error:
            raise ShopifyClientError(
                f"GraphQL request failed ({response.status_code}): {response.text}"
            )

        return GraphQLResponse.model_validate(response.json())

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
