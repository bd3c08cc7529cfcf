"""
Utility functions and helpers
"""

from .helpers import (
    normalize_shop_domain,
    to_product_gid,
    text_to_html,
    mask_secret
)
from .parsing import parse_generated_content, format_sections

__all__ = [
    "normalize_shop_domain",
    "to_product_gid",
    "text_to_html",
    "mask_secret",
    "parse_generated_content",
    "format_sections"
]
