import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from ai_copywriter.models.schemas import (
    ContentGenerationResult, ErrorCode, GenerationMetadata, GenerationOptions, ProductData
)
from ai_copywriter.services.providers.prompts import (
    SYSTEM_PROMPT, build_product_prompt, build_regeneration_prompt
)
from ai_copywriter.utils.parsing import parse_generated_content

logger = logging.getLogger(__name__)

# Shared request parameters for every chat completion
COMPLETION_PARAMS = {
    "temperature": 0.7,
    "max_tokens": 1500,
    "top_p": 1,
    "frequency_penalty": 0,
    "presence_penalty": 0,
}

Message = Dict[str, Any]


class ProviderHTTPError(Exception):
    """Non-2xx response from a provider's HTTP API"""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


def status_of(error: Exception) -> Optional[int]:
    """HTTP status carried by an SDK or transport error, if any"""
    status = getattr(error, "status_code", None)
    if status is None:
        status = getattr(error, "status", None)
    return status if isinstance(status, int) else None


def usage_metadata(model: str, usage: Any) -> GenerationMetadata:
    """Build token metadata from an SDK usage object or a raw usage dict"""
    if usage is None:
        return GenerationMetadata(model=model)

    def read(field: str) -> Optional[int]:
        if isinstance(usage, dict):
            return usage.get(field)
        return getattr(usage, field, None)

    return GenerationMetadata(
        model=model,
        prompt_tokens=read("prompt_tokens"),
        completion_tokens=read("completion_tokens"),
        total_tokens=read("total_tokens")
    )


class ContentProvider(ABC):
    """
    A remote LLM that turns product data into structured copy.

    Subclasses implement ``_complete`` for their transport. Image generation
    is optional: providers that offer it define ``generate_from_image``.
    Every public method returns a ContentGenerationResult and never raises.
    """

    name: str = ""
    display_name: str = ""
    generic_error: ErrorCode = ErrorCode.GENERATION_FAILED
    regeneration_error: ErrorCode = ErrorCode.REGENERATION_FAILED

    def __init__(self, model: str):
        self.model = model

    @abstractmethod
    async def _complete(self, api_key: str, messages: List[Message], model: str) -> Tuple[str, Any]:
        """Run one chat completion and return (reply text, usage)"""

    async def _run(self, api_key: str, messages: List[Message], model: str) -> ContentGenerationResult:
        raw, usage = await self._complete(api_key, messages, model)
        content = parse_generated_content(raw)
        return ContentGenerationResult.ok(content, usage_metadata(model, usage))

    def _failure(self, error: Exception, fallback: ErrorCode, action: str) -> ContentGenerationResult:
        status = status_of(error)
        logger.error(f"{self.display_name} {action} error (status={status}): {error}")

        if status == 401:
            return ContentGenerationResult.failure(
                f"Invalid API key. Please check your {self.display_name} API key in the settings.",
                ErrorCode.INVALID_API_KEY
            )
        if status == 429:
            return ContentGenerationResult.failure(
                f"{self.display_name} rate limit exceeded. Please try again later.",
                ErrorCode.RATE_LIMIT_EXCEEDED
            )

        return ContentGenerationResult.failure(
            str(error) or f"An error occurred while {action} content with {self.display_name}.",
            fallback
        )

    @staticmethod
    def _chat(system_prompt: str, user_content: Any) -> List[Message]:
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ]

    async def generate_product_content(self, api_key: str, product_data: ProductData,
                                       custom_prompt: str, options: GenerationOptions) -> ContentGenerationResult:
        try:
            prompt = build_product_prompt(product_data, custom_prompt, options)
            return await self._run(api_key, self._chat(SYSTEM_PROMPT, prompt), self.model)
        except Exception as e:
            return self._failure(e, self.generic_error, "generating")

    async def regenerate_content(self, api_key: str, previous_result: ContentGenerationResult,
                                 feedback: str, options: GenerationOptions) -> ContentGenerationResult:
        if previous_result is None or not previous_result.success or not previous_result.content:
            return ContentGenerationResult.failure(
                "No previous content to regenerate", ErrorCode.NO_PREVIOUS_CONTENT
            )

        try:
            prompt = build_regeneration_prompt(previous_result.content, feedback, options)
            return await self._run(api_key, self._chat(SYSTEM_PROMPT, prompt), self.model)
        except Exception as e:
            return self._failure(e, self.regeneration_error, "regenerating")
