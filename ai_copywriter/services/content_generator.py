import logging
from typing import Optional

from ai_copywriter.models.schemas import (
    ContentGenerationResult, ErrorCode, GenerationOptions, ProductData, ShopSession, StoreContext
)
from ai_copywriter.services.api_keys import ApiKeyManager
from ai_copywriter.services.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)

NO_API_KEY_MESSAGE = "No API key configured. Please configure an API key in the settings."


def _no_api_key() -> ContentGenerationResult:
    return ContentGenerationResult.failure(NO_API_KEY_MESSAGE, ErrorCode.NO_API_KEY)


def _unexpected(error: Exception, code: ErrorCode) -> ContentGenerationResult:
    return ContentGenerationResult.failure(str(error) or "Unknown error", code)


class ContentGenerationService:
    """
    Entry point for every generation request.

    Looks up the shop's credential, picks the matching provider and hands the
    work over. Always returns a ContentGenerationResult; exceptions from
    anything underneath are turned into a failed result.
    """

    def __init__(self, api_keys: ApiKeyManager, registry: ProviderRegistry):
        self.api_keys = api_keys
        self.registry = registry

    async def generate(self, session: ShopSession, product_data: ProductData, custom_prompt: str,
                       options: GenerationOptions) -> ContentGenerationResult:
        try:
            credential = await self.api_keys.get(session)
            if not credential:
                return _no_api_key()

            provider = self.registry.resolve(credential.provider)

            logger.info(f"Generating content for {product_data.id} with {provider.display_name}")
            return await provider.generate_product_content(
                credential.api_key.get_secret_value(), product_data, custom_prompt, options
            )
        except Exception as e:
            logger.error(f"Error generating product content: {e}")
            return _unexpected(e, ErrorCode.GENERATION_FAILED)

    async def regenerate(self, session: ShopSession, previous_result: Optional[ContentGenerationResult],
                         feedback: str, options: GenerationOptions) -> ContentGenerationResult:
        if previous_result is None or not previous_result.success or not previous_result.content:
            return ContentGenerationResult.failure(
                "No previous content to regenerate", ErrorCode.NO_PREVIOUS_CONTENT
            )

        try:
            credential = await self.api_keys.get(session)
            if not credential:
                return _no_api_key()

            provider = self.registry.resolve(credential.provider)

            logger.info(f"Regenerating content with {provider.display_name}")
            return await provider.regenerate_content(
                credential.api_key.get_secret_value(), previous_result, feedback, options
            )
        except Exception as e:
            logger.error(f"Error regenerating content: {e}")
            return _unexpected(e, ErrorCode.REGENERATION_FAILED)

    async def generate_from_image(self, session: ShopSession, image_url: str, store_context: StoreContext,
                                  custom_prompt: str, options: GenerationOptions) -> ContentGenerationResult:
        try:
            credential = await self.api_keys.get(session)
            if not credential:
                return _no_api_key()

            provider = self.registry.resolve(credential.provider)

            generate_from_image = getattr(provider, "generate_from_image", None)
            if generate_from_image is None:
                return ContentGenerationResult.failure(
                    f"The {credential.provider} provider does not support image-based generation.",
                    ErrorCode.UNSUPPORTED_FEATURE
                )

            logger.info(f"Generating content from image with {provider.display_name}")
            return await generate_from_image(
                credential.api_key.get_secret_value(), image_url, store_context, custom_prompt, options
            )
        except Exception as e:
            logger.error(f"Error generating content from image: {e}")
            return _unexpected(e, ErrorCode.IMAGE_GENERATION_FAILED)
