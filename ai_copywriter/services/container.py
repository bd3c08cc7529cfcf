from dataclasses import dataclass
from typing import Optional

from ai_copywriter.config import Settings, settings as default_settings
from ai_copywriter.services.api_keys import ApiKeyManager
from ai_copywriter.services.app_settings import AppSettingsService
from ai_copywriter.services.content_generator import ContentGenerationService
from ai_copywriter.services.encryption import EncryptionService
from ai_copywriter.services.metafield_store import MetafieldStore
from ai_copywriter.services.product_data import ProductDataService
from ai_copywriter.services.providers.registry import ProviderRegistry, default_registry
from ai_copywriter.services.shopify_client import AdminClientFactory, admin_client_for


@dataclass
class Services:
    """Everything a request handler needs, built once at start-up"""
    encryption: EncryptionService
    metafields: MetafieldStore
    api_keys: ApiKeyManager
    app_settings: AppSettingsService
    products: ProductDataService
    providers: ProviderRegistry
    content_generator: ContentGenerationService


def build_services(config: Optional[Settings] = None,
                   client_factory: AdminClientFactory = admin_client_for,
                   registry: Optional[ProviderRegistry] = None) -> Services:
    config = config or default_settings

    encryption = EncryptionService(config.ENCRYPTION_KEY)
    metafields = MetafieldStore(client_factory, config.METAFIELD_NAMESPACE)
    api_keys = ApiKeyManager(encryption, metafields)
    registry = registry or default_registry()

    return Services(
        encryption=encryption,
        metafields=metafields,
        api_keys=api_keys,
        app_settings=AppSettingsService(metafields, api_keys),
        products=ProductDataService(client_factory),
        providers=registry,
        content_generator=ContentGenerationService(api_keys, registry)
    )
