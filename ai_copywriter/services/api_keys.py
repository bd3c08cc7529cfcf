import logging
from typing import Optional

from pydantic import ValidationError

from ai_copywriter.models.schemas import ApiCredential, ApiKeyRecord, ShopSession
from ai_copywriter.services.encryption import EncryptionService
from ai_copywriter.services.metafield_store import (
    MetafieldStore, ENCRYPTED_KEY_FIELD, PROVIDER_FIELD
)
from ai_copywriter.utils.helpers import mask_secret

logger = logging.getLogger(__name__)

UNKNOWN_PROVIDER = "unknown"


class ApiKeyManager:
    """Stores one encrypted provider API key per shop"""

    def __init__(self, encryption: EncryptionService, store: MetafieldStore):
        self.encryption = encryption
        self.store = store

    @property
    def namespace(self) -> str:
        return self.store.namespace

    async def save(self, session: ShopSession, provider: str, api_key: str) -> bool:
        """
        Encrypt and store an API key together with its provider id

        Both fields go out in one metafieldsSet call.

        Returns:
            bool: True if the credential was stored
        """
        try:
            record = ApiKeyRecord(provider=provider, encrypted_key=self.encryption.encrypt(api_key))
        except ValidationError:
            logger.error(f"Refusing to save API key for unsupported provider: {provider}")
            return False
        except Exception as e:
            logger.error(f"Error encrypting API key for {session.shop}: {e}")
            return False

        logger.info(f"Saving {record.provider.value} API key {mask_secret(api_key)} for {session.shop}")
        return await self.store.set_many(session, self.namespace, {
            ENCRYPTED_KEY_FIELD: record.encrypted_key,
            PROVIDER_FIELD: record.provider.value,
        })

    async def get(self, session: ShopSession, provider: Optional[str] = None) -> Optional[ApiCredential]:
        """
        Load and decrypt the stored API key

        Args:
            session: Shop session
            provider: When given, only return the key if it belongs to this provider

        Returns:
            ApiCredential or None when nothing usable is stored
        """
        try:
            encrypted_key = await self.store.get(session, self.namespace, ENCRYPTED_KEY_FIELD)
            if not encrypted_key:
                return None

            stored_provider = await self.store.get(session, self.namespace, PROVIDER_FIELD)

            if provider and stored_provider != provider:
                return None

            return ApiCredential(
                provider=stored_provider or UNKNOWN_PROVIDER,
                api_key=self.encryption.decrypt(encrypted_key)
            )
        except Exception as e:
            logger.error(f"Error getting API key for {session.shop}: {e}")
            return None

    async def delete(self, session: ShopSession, provider: str) -> bool:
        """Remove the stored key, but only if it belongs to ``provider``"""
        try:
            stored_provider = await self.store.get(session, self.namespace, PROVIDER_FIELD)
            if stored_provider != provider:
                logger.info(f"Not deleting API key for {session.shop}: stored provider is {stored_provider}")
                return False

            return await self.store.delete(session, self.namespace, [ENCRYPTED_KEY_FIELD, PROVIDER_FIELD])
        except Exception as e:
            logger.error(f"Error deleting API key for {session.shop}: {e}")
            return False
