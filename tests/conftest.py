import asyncio
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest

from ai_copywriter.models.schemas import (
    ContentGenerationResult, ProductContent, ProductData, ProductImage, ShopSession, StoreContext
)
from ai_copywriter.services.encryption import EncryptionService
from ai_copywriter.services.providers.base import ContentProvider

SAMPLE_REPLY = """# TITLE
Handmade Oak Cutting Board

# DESCRIPTION
A sturdy board cut from solid oak.

Finished with food-safe oil.

# SEO_TITLE
Oak Cutting Board | Handmade

# SEO_DESCRIPTION
Solid oak cutting board, handmade and oiled.

# KEYWORDS
oak, cutting board, kitchen
"""


def run(coro):
    return asyncio.run(coro)


class FakeGraphQLClient:
    """Records queries and answers them from a list of (marker, response) pairs"""

    def __init__(self, responses=None, error: Optional[Exception] = None):
        self.responses = list(responses or [])
        self.error = error
        self.calls: List[tuple] = []

    async def graphql(self, query, variables=None):
        self.calls.append((query, variables))
        if self.error:
            raise self.error
        for marker, response in self.responses:
            if marker in query:
                return response
        return {}


class InMemoryMetafieldStore:
    """Dict-backed stand-in for MetafieldStore"""

    def __init__(self, namespace: str = "apiservice"):
        self.namespace = namespace
        self.values: Dict[tuple, str] = {}
        self.set_calls: List[Dict[str, str]] = []
        self.delete_calls: List[List[str]] = []
        self.definitions_ensured = 0
        self.fail_writes = False

    async def get(self, session, namespace, key):
        return self.values.get((session.shop, namespace, key))

    async def set(self, session, namespace, key, value):
        return await self.set_many(session, namespace, {key: value})

    async def set_many(self, session, namespace, values):
        self.set_calls.append(dict(values))
        if self.fail_writes:
            return False
        for key, value in values.items():
            self.values[(session.shop, namespace, key)] = value
        return True

    async def delete(self, session, namespace, keys):
        keys = list(keys)
        self.delete_calls.append(keys)
        for key in keys:
            self.values.pop((session.shop, namespace, key), None)
        return True

    async def ensure_definitions(self, session):
        self.definitions_ensured += 1
        return True


class FakeProvider(ContentProvider):
    """Provider that never touches the network"""

    name = "fakeApiKey"
    display_name = "Fake"

    def __init__(self, reply: str = SAMPLE_REPLY, error: Optional[Exception] = None):
        super().__init__("fake-model")
        self.reply = reply
        self.error = error
        self.calls: List[dict] = []

    async def _complete(self, api_key, messages, model):
        self.calls.append({"api_key": api_key, "messages": messages, "model": model})
        if self.error:
            raise self.error
        return self.reply, {"prompt_tokens": 11, "completion_tokens": 22, "total_tokens": 33}


class RaisingProvider(FakeProvider):
    """Provider whose public method itself blows up"""

    async def generate_product_content(self, api_key, product_data, custom_prompt, options):
        raise RuntimeError("provider exploded")


class FakeStatusError(Exception):
    """Mimics an SDK error that carries an HTTP status"""

    def __init__(self, status_code: int, message: str = "request failed"):
        super().__init__(message)
        self.status_code = status_code


def openai_response(content: str, usage=None):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=usage or SimpleNamespace(prompt_tokens=5, completion_tokens=7, total_tokens=12)
    )


class FakeOpenAIClient:
    def __init__(self, response=None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.requests: List[dict] = []
        self.closed = False
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    async def _create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


@pytest.fixture
def session():
    return ShopSession(shop="demo-store.myshopify.com", access_token="shpat_test_token")


@pytest.fixture
def encryption():
    return EncryptionService("unit-test-secret")


@pytest.fixture
def store():
    return InMemoryMetafieldStore()


@pytest.fixture
def product():
    return ProductData(
        id="gid://shopify/Product/123",
        title="Oak board",
        description="A board.",
        images=[ProductImage(id="gid://shopify/ProductImage/1", url="https://cdn.shopify.com/board.jpg")]
    )


@pytest.fixture
def store_context():
    return StoreContext(
        id="gid://shopify/Shop/1",
        name="Demo Store",
        description="Kitchenware made by hand",
        domain="https://demo-store.com",
        email="owner@demo-store.com"
    )


@pytest.fixture
def previous_result():
    return ContentGenerationResult.ok(ProductContent(
        title="Oak Board",
        description="A board made of oak.",
        keywords=["oak", "board"]
    ))
