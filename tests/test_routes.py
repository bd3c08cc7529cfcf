import pytest
from fastapi.testclient import TestClient

from ai_copywriter.main import app
from ai_copywriter.services.api_keys import ApiKeyManager
from ai_copywriter.services.app_settings import AppSettingsService
from ai_copywriter.services.container import Services
from ai_copywriter.services.content_generator import ContentGenerationService
from ai_copywriter.services.product_data import ProductDataError
from ai_copywriter.services.providers import ProviderRegistry

from conftest import FakeProvider, InMemoryMetafieldStore

HEADERS = {
    "X-Shopify-Shop-Domain": "demo-store.myshopify.com",
    "X-Shopify-Access-Token": "shpat_test_token",
}
OPENAI_KEY = "sk-test-1234567890abcdefghij"


class FakeProductService:
    def __init__(self, product, store_context):
        self.product = product
        self.store_context = store_context
        self.store_context_error = None
        self.updates = []

    async def get_product_by_id(self, session, product_id):
        if product_id == "missing":
            raise ProductDataError(f"Product not found: {product_id}")
        if product_id == "broken":
            raise RuntimeError("catalog offline")
        return self.product

    async def get_store_context(self, session):
        if self.store_context_error:
            raise self.store_context_error
        return self.store_context

    async def update_product_content(self, session, product_id, content):
        self.updates.append((product_id, content))
        return True


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def services(encryption, product, store_context, provider):
    store = InMemoryMetafieldStore()
    api_keys = ApiKeyManager(encryption, store)
    registry = ProviderRegistry()
    # Route the stored OpenAI id to the offline provider
    registry.register("openaiApiKey", lambda: provider)

    return Services(
        encryption=encryption,
        metafields=store,
        api_keys=api_keys,
        app_settings=AppSettingsService(store, api_keys),
        products=FakeProductService(product, store_context),
        providers=registry,
        content_generator=ContentGenerationService(api_keys, registry)
    )


@pytest.fixture
def client(services, monkeypatch):
    monkeypatch.setattr(app.state, "services", services, raising=False)
    return TestClient(app)


def save_key(client):
    response = client.post("/api/settings", headers=HEADERS, json={
        "apiProvider": "openaiApiKey",
        "apiKey": OPENAI_KEY,
        "customPrompt": "Mention free shipping.",
        "defaultLength": 300,
    })
    assert response.status_code == 200


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "active"

    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["providers"] == ["openaiApiKey"]


def test_test_endpoint(client):
    body = client.get("/api/test").json()

    assert body["success"] is True
    assert body["message"] == "API is working"


def test_missing_session_headers(client):
    response = client.post("/api/generate-content", json={"productId": "123", "length": 200})

    assert response.status_code == 401
    assert response.json()["message"] == "Missing Shopify session headers"


def test_length_out_of_range(client):
    response = client.post("/api/generate-content", headers=HEADERS, json={"productId": "123", "length": 50})

    assert response.status_code == 422


def test_generate_without_key(client, provider):
    response = client.post("/api/generate-content", headers=HEADERS, json={"productId": "123", "length": 200})

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "No API key configured. Please configure an API key in the settings.",
        "errorCode": "NO_API_KEY",
    }
    assert provider.calls == []


def test_generate_content(client, provider):
    save_key(client)

    response = client.post("/api/generate-content", headers=HEADERS, json={
        "productId": "123", "length": 200, "tone": "enthusiastic"
    })

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["content"]["title"] == "Handmade Oak Cutting Board"
    assert body["content"]["seoTitle"] == "Oak Cutting Board | Handmade"
    assert body["content"]["keywords"] == ["oak", "cutting board", "kitchen"]

    call = provider.calls[0]
    assert call["api_key"] == OPENAI_KEY
    assert "enthusiastic tone" in call["messages"][1]["content"]
    assert "Custom Instructions: Mention free shipping." in call["messages"][1]["content"]


def test_generate_missing_product(client):
    save_key(client)

    response = client.post("/api/generate-content", headers=HEADERS, json={"productId": "missing", "length": 200})

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Product not found: missing"}


def test_generate_unexpected_error_keeps_message(client):
    save_key(client)

    response = client.post("/api/generate-content", headers=HEADERS, json={"productId": "broken", "length": 200})

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "catalog offline"


def test_generate_from_image_store_context_failure(client, services):
    save_key(client)
    services.products.store_context_error = ProductDataError("Failed to fetch store context: timeout")

    response = client.post("/api/generate-from-image", headers=HEADERS, json={
        "imageUrl": "https://cdn.shopify.com/board.jpg", "length": 200
    })

    assert response.status_code == 502
    assert response.json() == {"success": False, "error": "Failed to fetch store context: timeout"}


def test_regenerate_content(client, provider):
    save_key(client)

    response = client.post("/api/regenerate-content", headers=HEADERS, json={
        "productId": "123",
        "previousContent": {"title": "Oak Board", "description": "A board."},
        "feedback": "Make it sound warmer",
        "length": 200,
    })

    assert response.status_code == 200
    assert "Make it sound warmer" in provider.calls[0]["messages"][1]["content"]


def test_regenerate_short_feedback(client):
    response = client.post("/api/regenerate-content", headers=HEADERS, json={
        "productId": "123",
        "previousContent": {"title": "Oak Board", "description": "A board."},
        "feedback": "shorter",
        "length": 200,
    })

    assert response.status_code == 422


def test_generate_from_image_unsupported(client):
    save_key(client)

    response = client.post("/api/generate-from-image", headers=HEADERS, json={
        "imageUrl": "https://cdn.shopify.com/board.jpg", "length": 200
    })

    assert response.status_code == 400
    assert response.json()["errorCode"] == "UNSUPPORTED_FEATURE"


def test_apply_content(client, services):
    response = client.post("/api/apply-content", headers=HEADERS, json={
        "productId": "123",
        "content": {"title": "Oak Board", "description": "A board.", "seoTitle": "Oak | Shop"},
    })

    assert response.status_code == 200
    assert response.json() == {"success": True, "productId": "123"}
    product_id, content = services.products.updates[0]
    assert content.seo_title == "Oak | Shop"


def test_apply_content_requires_title_and_description(client, services):
    response = client.post("/api/apply-content", headers=HEADERS, json={
        "productId": "123",
        "content": {"title": "", "description": "A board."},
    })

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Content must include a title and a description"}
    assert services.products.updates == []


def test_settings_load_failure_returns_defaults(client, services, monkeypatch):
    async def failing_load(session):
        raise RuntimeError("shop unreachable")

    monkeypatch.setattr(services.app_settings, "load", failing_load)

    body = client.get("/api/settings", headers=HEADERS).json()

    assert body["error"] == "Error loading settings. Please try again."
    assert body["settings"] == {
        "apiProvider": "openaiApiKey",
        "hasApiKey": False,
        "customPrompt": "",
        "defaultLength": 250,
    }


def test_settings_round_trip(client, services):
    assert client.get("/api/settings", headers=HEADERS).json() == {"settings": {
        "apiProvider": "openaiApiKey",
        "hasApiKey": False,
        "customPrompt": "",
        "defaultLength": 250,
    }}

    save_key(client)

    loaded = client.get("/api/settings", headers=HEADERS).json()["settings"]
    assert loaded["hasApiKey"] is True
    assert loaded["customPrompt"] == "Mention free shipping."
    assert loaded["defaultLength"] == 300
    assert "apiKey" not in loaded


def test_settings_validation(client):
    response = client.post("/api/settings", headers=HEADERS, json={
        "apiProvider": "openaiApiKey",
        "apiKey": "too-short",
        "customPrompt": "Mention free shipping.",
        "defaultLength": 300,
    })

    assert response.status_code == 422


def test_settings_save_failure(client, services):
    services.metafields.fail_writes = True

    response = client.post("/api/settings", headers=HEADERS, json={
        "apiProvider": "openaiApiKey",
        "customPrompt": "Mention free shipping.",
        "defaultLength": 300,
    })

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_delete_api_key(client):
    save_key(client)

    assert client.delete("/api/api-key/deepseekApiKey", headers=HEADERS).json() == {"success": False}
    assert client.delete("/api/api-key/openaiApiKey", headers=HEADERS).json() == {"success": True}
    assert client.get("/api/settings", headers=HEADERS).json()["settings"]["hasApiKey"] is False


def test_delete_unknown_provider(client):
    response = client.delete("/api/api-key/mistralApiKey", headers=HEADERS)

    assert response.status_code == 422
