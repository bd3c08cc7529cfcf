"""
LLM providers that turn product data into structured copy
"""

from .base import ContentProvider, ProviderHTTPError
from .openai_provider import OpenAIProvider
from .deepseek_provider import DeepSeekProvider
from .registry import ProviderRegistry, UnsupportedProviderError, default_registry

__all__ = [
    "ContentProvider",
    "ProviderHTTPError",
    "OpenAIProvider",
    "DeepSeekProvider",
    "ProviderRegistry",
    "UnsupportedProviderError",
    "default_registry"
]
