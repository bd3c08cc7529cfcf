from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Dict, Any
from datetime import datetime
from enum import Enum

from ai_copywriter.config import settings


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON for the admin UI"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProviderId(str, Enum):
    OPENAI = "openaiApiKey"
    DEEPSEEK = "deepseekApiKey"


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    ENTHUSIASTIC = "enthusiastic"


class ErrorCode(str, Enum):
    NO_API_KEY = "NO_API_KEY"
    INVALID_API_KEY = "INVALID_API_KEY"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INVALID_IMAGE = "INVALID_IMAGE"
    UNSUPPORTED_FEATURE = "UNSUPPORTED_FEATURE"
    FEATURE_NOT_SUPPORTED = "FEATURE_NOT_SUPPORTED"
    NO_PREVIOUS_CONTENT = "NO_PREVIOUS_CONTENT"
    GENERATION_FAILED = "GENERATION_FAILED"
    REGENERATION_FAILED = "REGENERATION_FAILED"
    IMAGE_GENERATION_FAILED = "IMAGE_GENERATION_FAILED"

    # Provider-generic fallbacks
    OPENAI_ERROR = "OPENAI_ERROR"
    OPENAI_REGENERATION_ERROR = "OPENAI_REGENERATION_ERROR"
    OPENAI_IMAGE_ERROR = "OPENAI_IMAGE_ERROR"
    DEEPSEEK_ERROR = "DEEPSEEK_ERROR"
    DEEPSEEK_REGENERATION_ERROR = "DEEPSEEK_REGENERATION_ERROR"


class ShopSession(BaseModel):
    """Authenticated shop context a request runs under"""
    model_config = ConfigDict(frozen=True)

    shop: str
    access_token: str = Field(repr=False)


class ProductImage(CamelModel):
    id: Optional[str] = None
    url: str
    alt_text: Optional[str] = None


class ProductMetafield(CamelModel):
    namespace: str
    key: str
    value: str


class ProductData(CamelModel):
    id: str
    title: str
    description: str = ""
    images: List[ProductImage] = []
    metafields: List[ProductMetafield] = []


class StoreContext(CamelModel):
    id: str
    name: str
    description: str = ""
    domain: str
    email: Optional[str] = None


class GenerationOptions(CamelModel):
    length: int = Field(
        ..., ge=settings.MIN_CONTENT_LENGTH, le=settings.MAX_CONTENT_LENGTH, description="Target word count"
    )
    tone: Optional[Tone] = None
    include_keywords: Optional[List[str]] = None


class ProductContent(CamelModel):
    title: str = ""
    description: str = ""
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    keywords: Optional[List[str]] = None


class GenerationMetadata(CamelModel):
    model: str
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class ContentGenerationResult(CamelModel):
    success: bool
    content: Optional[ProductContent] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[GenerationMetadata] = None

    @field_validator("error_code", mode="before")
    @classmethod
    def unwrap_error_code(cls, v):
        if isinstance(v, Enum):
            return v.value
        return v

    @model_validator(mode="after")
    def check_envelope(self):
        if self.success and self.content is None:
            raise ValueError("successful result must carry content")
        if not self.success:
            if self.content is not None:
                raise ValueError("failed result must not carry content")
            if not self.error:
                raise ValueError("failed result must carry an error message")
        return self

    @classmethod
    def ok(cls, content: ProductContent, metadata: Optional[GenerationMetadata] = None) -> "ContentGenerationResult":
        return cls(success=True, content=content, metadata=metadata)

    @classmethod
    def failure(cls, error: str, error_code) -> "ContentGenerationResult":
        return cls(success=False, error=error, error_code=error_code)


class ApiKeyRecord(BaseModel):
    """Credential as it sits in shop metafields"""
    provider: ProviderId
    encrypted_key: str


class ApiCredential(BaseModel):
    """Decrypted credential, only held for the duration of a request"""
    provider: str
    api_key: SecretStr


class AppSettings(CamelModel):
    api_provider: ProviderId
    api_key: Optional[str] = Field(None, min_length=20, max_length=100)
    custom_prompt: str = Field(..., min_length=10, max_length=1000)
    default_length: int = Field(..., ge=settings.MIN_CONTENT_LENGTH, le=settings.MAX_CONTENT_LENGTH)

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_key_is_none(cls, v):
        # The settings form posts an empty field when the key is left unchanged
        if isinstance(v, str) and not v.strip():
            return None
        return v


# Request bodies

class GenerateContentRequest(CamelModel):
    product_id: str = Field(..., min_length=1)
    length: int = Field(..., ge=settings.MIN_CONTENT_LENGTH, le=settings.MAX_CONTENT_LENGTH)
    tone: Tone = Tone.PROFESSIONAL


class RegenerateContentRequest(CamelModel):
    product_id: str = Field(..., min_length=1)
    previous_content: ProductContent
    feedback: str = Field(..., min_length=10, max_length=500)
    length: int = Field(..., ge=settings.MIN_CONTENT_LENGTH, le=settings.MAX_CONTENT_LENGTH)
    tone: Tone = Tone.PROFESSIONAL


class ImageGenerationRequest(CamelModel):
    image_url: str = Field(..., min_length=1)
    length: int = Field(..., ge=settings.MIN_CONTENT_LENGTH, le=settings.MAX_CONTENT_LENGTH)
    tone: Tone = Tone.PROFESSIONAL
    include_keywords: Optional[List[str]] = None


class ApplyContentRequest(CamelModel):
    product_id: str = Field(..., min_length=1)
    content: ProductContent


class ErrorResponse(BaseModel):
    error: str
    message: str
    status_code: int
    timestamp: datetime = Field(default_factory=datetime.now)


class SettingsResponse(CamelModel):
    api_provider: str
    has_api_key: bool
    custom_prompt: str
    default_length: int

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
