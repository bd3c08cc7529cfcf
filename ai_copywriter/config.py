import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEV_ENCRYPTION_KEY = "default_encryption_key_for_development_only"


class Settings:
    # API Configuration
    API_TITLE = "AI Product Copywriter"
    API_VERSION = "1.0.0"
    API_DESCRIPTION = "Generate product titles, descriptions and SEO copy for Shopify stores with OpenAI or DeepSeek"

    # Server Configuration
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 8000))
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    # Request Configuration
    REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", 60))

    # Shopify Admin API
    SHOPIFY_API_VERSION = os.getenv("SHOPIFY_API_VERSION", "2024-10")
    METAFIELD_NAMESPACE = os.getenv("METAFIELD_NAMESPACE", "apiservice")

    # Security Configuration
    # "hex:<64 hex chars>" is used as the raw AES-256 key, anything else is hashed
    ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY", DEV_ENCRYPTION_KEY)
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

    # LLM Configuration
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
    OPENAI_VISION_MODEL = os.getenv("OPENAI_VISION_MODEL", "gpt-4o")
    DEEPSEEK_API_BASE = os.getenv("DEEPSEEK_API_BASE", "https://api.deepseek.com/v1")
    DEEPSEEK_MODEL = os.getenv("DEEPSEEK_MODEL", "deepseek-chat")

    # Content Defaults
    DEFAULT_CONTENT_LENGTH = int(os.getenv("DEFAULT_CONTENT_LENGTH", 250))
    MIN_CONTENT_LENGTH = 100
    MAX_CONTENT_LENGTH = 500

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


# Create settings instance
settings = Settings()


# Environment check
def get_environment():
    """Get current environment"""
    return os.getenv("ENVIRONMENT", "development")


def is_production():
    """Check if running in production"""
    return get_environment().lower() == "production"
