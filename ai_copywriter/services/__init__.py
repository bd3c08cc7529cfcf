"""
Business logic services for credential storage and content generation
"""

from .encryption import EncryptionService, DecryptionError
from .metafield_store import MetafieldStore
from .api_keys import ApiKeyManager
from .content_generator import ContentGenerationService
from .container import Services, build_services

__all__ = [
    "EncryptionService",
    "DecryptionError",
    "MetafieldStore",
    "ApiKeyManager",
    "ContentGenerationService",
    "Services",
    "build_services"
]
