import pytest

from ai_copywriter.models.schemas import ContentGenerationResult, GenerationOptions
from ai_copywriter.services.api_keys import ApiKeyManager
from ai_copywriter.services.content_generator import ContentGenerationService
from ai_copywriter.services.providers import ProviderRegistry

from conftest import FakeProvider, FakeStatusError, RaisingProvider, run

OPTIONS = GenerationOptions(length=200)
IMAGE_URL = "https://cdn.shopify.com/board.jpg"


class ImageFakeProvider(FakeProvider):
    name = "imageApiKey"

    async def generate_from_image(self, api_key, image_url, store_context, custom_prompt, options):
        self.calls.append({"api_key": api_key, "image_url": image_url})
        return ContentGenerationResult.failure("no vision today", "FAKE_IMAGE_ERROR")


@pytest.fixture
def api_keys(encryption, store):
    return ApiKeyManager(encryption, store)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def generator(api_keys, provider):
    registry = ProviderRegistry()
    registry.register("fakeApiKey", lambda: provider)
    registry.register("raisingApiKey", RaisingProvider)
    registry.register("imageApiKey", ImageFakeProvider)
    return ContentGenerationService(api_keys, registry)


def store_key(api_keys, session, provider_id):
    # ApiKeyManager.save only accepts real provider ids
    store = api_keys.store
    store.values[(session.shop, store.namespace, "encrypted_key")] = api_keys.encryption.encrypt("sk-fake-0123456789abcdef")
    store.values[(session.shop, store.namespace, "provider")] = provider_id


def test_generate_without_key(generator, provider, session, product):
    result = run(generator.generate(session, product, "", OPTIONS))

    assert result.error_code == "NO_API_KEY"
    assert provider.calls == []


def test_generate_uses_stored_provider_and_key(generator, api_keys, provider, session, product):
    store_key(api_keys, session, "fakeApiKey")

    result = run(generator.generate(session, product, "Be brief.", OPTIONS))

    assert result.success is True
    assert result.content.title == "Handmade Oak Cutting Board"
    assert provider.calls[0]["api_key"] == "sk-fake-0123456789abcdef"
    assert "Custom Instructions: Be brief." in provider.calls[0]["messages"][1]["content"]


def test_generate_passes_provider_failures_through(generator, api_keys, provider, session, product):
    store_key(api_keys, session, "fakeApiKey")
    provider.error = FakeStatusError(401)

    result = run(generator.generate(session, product, "", OPTIONS))

    assert result.error_code == "INVALID_API_KEY"


def test_generate_unknown_provider(generator, api_keys, session, product):
    store_key(api_keys, session, "unknown")

    result = run(generator.generate(session, product, "", OPTIONS))

    assert result.success is False
    assert result.error_code == "GENERATION_FAILED"
    assert "Unsupported AI provider" in result.error


def test_generate_catches_provider_exceptions(generator, api_keys, session, product):
    store_key(api_keys, session, "raisingApiKey")

    result = run(generator.generate(session, product, "", OPTIONS))

    assert result.error_code == "GENERATION_FAILED"
    assert result.error == "provider exploded"


def test_regenerate_requires_previous_content(generator, provider, session):
    previous = ContentGenerationResult.failure("earlier failure", "GENERATION_FAILED")

    result = run(generator.regenerate(session, previous, "Make it punchier", OPTIONS))

    assert result.error_code == "NO_PREVIOUS_CONTENT"
    assert provider.calls == []


def test_regenerate_without_key(generator, session, previous_result):
    result = run(generator.regenerate(session, previous_result, "Make it punchier", OPTIONS))

    assert result.error_code == "NO_API_KEY"


def test_regenerate(generator, api_keys, provider, session, previous_result):
    store_key(api_keys, session, "fakeApiKey")

    result = run(generator.regenerate(session, previous_result, "Make it punchier", OPTIONS))

    assert result.success is True
    assert "Make it punchier" in provider.calls[0]["messages"][1]["content"]


def test_regenerate_unknown_provider(generator, api_keys, session, previous_result):
    store_key(api_keys, session, "unknown")

    result = run(generator.regenerate(session, previous_result, "Make it punchier", OPTIONS))

    assert result.error_code == "REGENERATION_FAILED"


def test_image_generation_unsupported_by_provider(generator, api_keys, session, store_context):
    store_key(api_keys, session, "fakeApiKey")

    result = run(generator.generate_from_image(session, IMAGE_URL, store_context, "", OPTIONS))

    assert result.error_code == "UNSUPPORTED_FEATURE"


def test_image_generation_delegates(generator, api_keys, session, store_context):
    store_key(api_keys, session, "imageApiKey")

    result = run(generator.generate_from_image(session, IMAGE_URL, store_context, "", OPTIONS))

    assert result.error_code == "FAKE_IMAGE_ERROR"
    assert generator.registry.resolve("imageApiKey").calls[0]["image_url"] == IMAGE_URL


def test_image_generation_without_key(generator, session, store_context):
    result = run(generator.generate_from_image(session, IMAGE_URL, store_context, "", OPTIONS))

    assert result.error_code == "NO_API_KEY"


def test_image_generation_unknown_provider(generator, api_keys, session, store_context):
    store_key(api_keys, session, "unknown")

    result = run(generator.generate_from_image(session, IMAGE_URL, store_context, "", OPTIONS))

    assert result.error_code == "IMAGE_GENERATION_FAILED"


def test_regenerate_without_previous_result(generator, provider, session):
    result = run(generator.regenerate(session, None, "Make it punchier", OPTIONS))

    assert result.success is False
    assert result.error_code == "NO_PREVIOUS_CONTENT"
    assert provider.calls == []


def test_provider_regenerate_without_previous_result(provider):
    result = run(provider.regenerate_content("sk-fake", None, "Make it punchier", OPTIONS))

    assert result.error_code == "NO_PREVIOUS_CONTENT"
    assert provider.calls == []
