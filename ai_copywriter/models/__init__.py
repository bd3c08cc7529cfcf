"""
Data models and schemas for the product copywriter
"""

from .schemas import (
    ProviderId,
    Tone,
    ErrorCode,
    ShopSession,
    ProductImage,
    ProductMetafield,
    ProductData,
    StoreContext,
    GenerationOptions,
    ProductContent,
    GenerationMetadata,
    ContentGenerationResult,
    ApiKeyRecord,
    ApiCredential,
    AppSettings,
    ErrorResponse
)

__all__ = [
    "ProviderId",
    "Tone",
    "ErrorCode",
    "ShopSession",
    "ProductImage",
    "ProductMetafield",
    "ProductData",
    "StoreContext",
    "GenerationOptions",
    "ProductContent",
    "GenerationMetadata",
    "ContentGenerationResult",
    "ApiKeyRecord",
    "ApiCredential",
    "AppSettings",
    "ErrorResponse"
]
