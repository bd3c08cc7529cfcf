import logging
from typing import Any, Callable, List, Optional, Tuple

from openai import AsyncOpenAI

from ai_copywriter.config import settings
from ai_copywriter.models.schemas import (
    ContentGenerationResult, ErrorCode, GenerationOptions, ProviderId, StoreContext
)
from ai_copywriter.services.providers.base import COMPLETION_PARAMS, ContentProvider, Message, status_of
from ai_copywriter.services.providers.prompts import IMAGE_SYSTEM_PROMPT, build_image_prompt

logger = logging.getLogger(__name__)


class OpenAIProvider(ContentProvider):
    """Chat completions through the official OpenAI SDK, including vision input"""

    name = ProviderId.OPENAI.value
    display_name = "OpenAI"
    generic_error = ErrorCode.OPENAI_ERROR
    regeneration_error = ErrorCode.OPENAI_REGENERATION_ERROR

    def __init__(self, model: Optional[str] = None, vision_model: Optional[str] = None,
                 client_factory: Optional[Callable[[str], Any]] = None):
        super().__init__(model or settings.OPENAI_MODEL)
        self.vision_model = vision_model or settings.OPENAI_VISION_MODEL
        self.client_factory = client_factory or (lambda api_key: AsyncOpenAI(api_key=api_key))

    async def _complete(self, api_key: str, messages: List[Message], model: str) -> Tuple[str, Any]:
        client = self.client_factory(api_key)
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                **COMPLETION_PARAMS
            )
        finally:
            await client.close()

        raw = (response.choices[0].message.content or "") if response.choices else ""
        return raw, response.usage

    async def generate_from_image(self, api_key: str, image_url: str, store_context: StoreContext,
                                  custom_prompt: str, options: GenerationOptions) -> ContentGenerationResult:
        try:
            prompt = build_image_prompt(store_context, custom_prompt, options)
            messages = self._chat(IMAGE_SYSTEM_PROMPT, [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image_url}},
            ])
            return await self._run(api_key, messages, self.vision_model)
        except Exception as e:
            if status_of(e) == 400:
                logger.error(f"OpenAI rejected image {image_url}: {e}")
                return ContentGenerationResult.failure(
                    "Invalid image format or URL. Please provide a valid image.",
                    ErrorCode.INVALID_IMAGE
                )
            return self._failure(e, ErrorCode.OPENAI_IMAGE_ERROR, "generating image")
