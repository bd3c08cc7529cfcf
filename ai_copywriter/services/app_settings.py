import logging

from ai_copywriter.config import settings
from ai_copywriter.models.schemas import AppSettings, ProviderId, SettingsResponse, ShopSession
from ai_copywriter.services.api_keys import ApiKeyManager
from ai_copywriter.services.metafield_store import (
    MetafieldStore, CUSTOM_PROMPT_FIELD, DEFAULT_LENGTH_FIELD
)

logger = logging.getLogger(__name__)


class AppSettingsService:
    """Merchant-level settings: provider key, custom prompt and default length"""

    def __init__(self, store: MetafieldStore, api_keys: ApiKeyManager):
        self.store = store
        self.api_keys = api_keys

    async def get_custom_prompt(self, session: ShopSession) -> str:
        return await self.store.get(session, self.store.namespace, CUSTOM_PROMPT_FIELD) or ""

    async def get_default_length(self, session: ShopSession) -> int:
        raw = await self.store.get(session, self.store.namespace, DEFAULT_LENGTH_FIELD)
        try:
            return int(raw) if raw else settings.DEFAULT_CONTENT_LENGTH
        except ValueError:
            logger.warning(f"Ignoring invalid default length {raw!r} for {session.shop}")
            return settings.DEFAULT_CONTENT_LENGTH

    async def load(self, session: ShopSession) -> SettingsResponse:
        await self.store.ensure_definitions(session)

        credential = await self.api_keys.get(session)

        return SettingsResponse(
            api_provider=credential.provider if credential else ProviderId.OPENAI.value,
            has_api_key=credential is not None,
            custom_prompt=await self.get_custom_prompt(session),
            default_length=await self.get_default_length(session)
        )

    async def save(self, session: ShopSession, app_settings: AppSettings) -> bool:
        """
        Persist the settings form

        The API key is only rewritten when a new one was entered.
        """
        ok = True

        if app_settings.api_key:
            logger.info(f"Saving API key for provider: {app_settings.api_provider.value}")
            ok = await self.api_keys.save(session, app_settings.api_provider.value, app_settings.api_key)
            logger.info(f"API key save result: {'success' if ok else 'failed'}")

        saved = await self.store.set_many(session, self.store.namespace, {
            CUSTOM_PROMPT_FIELD: app_settings.custom_prompt,
            DEFAULT_LENGTH_FIELD: str(app_settings.default_length),
        })

        return ok and saved
