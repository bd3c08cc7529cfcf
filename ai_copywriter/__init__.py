"""
AI Product Copywriter

Backend for a Shopify embedded app that writes product copy with LLMs:
- Generate titles, descriptions and SEO fields with OpenAI or DeepSeek
- Regenerate copy from merchant feedback, or from a product image
- Store the merchant's provider API key encrypted in shop metafields
- Apply generated copy back to the product
"""

__version__ = "1.0.0"
