import logging
from typing import Any, Callable, Dict, Optional

import aiohttp

from ai_copywriter.config import settings
from ai_copywriter.models.schemas import ShopSession
from ai_copywriter.utils.helpers import normalize_shop_domain

logger = logging.getLogger(__name__)


class ShopifyAPIError(Exception):
    """Raised when the Admin GraphQL API returns an HTTP or GraphQL error"""

    def __init__(self, message: str, status: Optional[int] = None, errors: Any = None):
        super().__init__(message)
        self.status = status
        self.errors = errors


class ShopifyAdminClient:
    """Thin async client for the Shopify Admin GraphQL endpoint"""

    def __init__(self, shop: str, access_token: str, api_version: Optional[str] = None,
                 timeout: Optional[int] = None):
        self.shop = normalize_shop_domain(shop)
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.REQUEST_TIMEOUT)
        self.graphql_url = f"https://{self.shop}/admin/api/{self.api_version}/graphql.json"
        self.headers = {
            'Content-Type': 'application/json',
            'X-Shopify-Access-Token': access_token
        }

    async def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute a GraphQL query or mutation

        Args:
            query: GraphQL document
            variables: Optional variables

        Returns:
            dict: The ``data`` object of the response

        Raises:
            ShopifyAPIError: On non-2xx responses or top-level GraphQL errors
        """
        payload: Dict[str, Any] = {'query': query}
        if variables:
            payload['variables'] = variables

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(self.graphql_url, json=payload, headers=self.headers) as response:
                if response.status >= 400:
                    body = await response.text()
                    logger.error(f"Shopify API returned {response.status} for {self.shop}")
                    raise ShopifyAPIError(
                        f"Shopify API request failed with status {response.status}: {body[:200]}",
                        status=response.status
                    )
                result = await response.json()

        if result.get('errors'):
            logger.warning(f"GraphQL errors from {self.shop}: {result['errors']}")
            raise ShopifyAPIError("Shopify GraphQL query failed", errors=result['errors'])

        return result.get('data') or {}


AdminClientFactory = Callable[[ShopSession], ShopifyAdminClient]


def admin_client_for(session: ShopSession) -> ShopifyAdminClient:
    """Default factory building a client from the request's shop session"""
    return ShopifyAdminClient(session.shop, session.access_token)
