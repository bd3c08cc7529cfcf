import logging
from typing import Any, List, Optional, Tuple

import aiohttp

from ai_copywriter.config import settings
from ai_copywriter.models.schemas import (
    ContentGenerationResult, ErrorCode, GenerationOptions, ProviderId, StoreContext
)
from ai_copywriter.services.providers.base import (
    COMPLETION_PARAMS, ContentProvider, Message, ProviderHTTPError
)

logger = logging.getLogger(__name__)


class DeepSeekProvider(ContentProvider):
    """
    DeepSeek's OpenAI-compatible chat completion endpoint over plain HTTP.

    DeepSeek has no vision model, so image generation always reports
    FEATURE_NOT_SUPPORTED.
    """

    name = ProviderId.DEEPSEEK.value
    display_name = "DeepSeek"
    generic_error = ErrorCode.DEEPSEEK_ERROR
    regeneration_error = ErrorCode.DEEPSEEK_REGENERATION_ERROR

    def __init__(self, model: Optional[str] = None, api_base: Optional[str] = None,
                 timeout: Optional[int] = None):
        super().__init__(model or settings.DEEPSEEK_MODEL)
        self.api_base = (api_base or settings.DEEPSEEK_API_BASE).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.REQUEST_TIMEOUT)

    def _headers(self, api_key: str) -> dict:
        return {
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
        }

    async def _complete(self, api_key: str, messages: List[Message], model: str) -> Tuple[str, Any]:
        payload = {"model": model, "messages": messages, **COMPLETION_PARAMS}

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(f"{self.api_base}/chat/completions", json=payload,
                                    headers=self._headers(api_key)) as response:
                if response.status >= 400:
                    body = await response.text()
                    logger.error(f"DeepSeek API returned {response.status}")
                    raise ProviderHTTPError(
                        response.status,
                        f"DeepSeek API request failed with status {response.status}: {body[:200]}"
                    )
                data = await response.json()

        choices = data.get("choices") or []
        raw = ((choices[0].get("message") or {}).get("content") or "") if choices else ""
        return raw, data.get("usage")

    async def generate_from_image(self, api_key: str, image_url: str, store_context: StoreContext,
                                  custom_prompt: str, options: GenerationOptions) -> ContentGenerationResult:
        return ContentGenerationResult.failure(
            "Image-based generation is not currently supported by DeepSeek. Please use OpenAI for this feature.",
            ErrorCode.FEATURE_NOT_SUPPORTED
        )
