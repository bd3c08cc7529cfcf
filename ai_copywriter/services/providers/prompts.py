from __future__ import annotations

from ai_copywriter.models.schemas import (
    GenerationOptions, ProductContent, ProductData, StoreContext, Tone
)
from ai_copywriter.utils.parsing import format_sections

SYSTEM_PROMPT = (
    "You are a professional e-commerce content writer that specializes in "
    "creating compelling product descriptions."
)

IMAGE_SYSTEM_PROMPT = (
    "You are a professional e-commerce content writer that specializes in "
    "creating compelling product descriptions based on images."
)

RESPONSE_FORMAT = """# TITLE
[Generate a compelling product title]

# DESCRIPTION
[Generate a detailed product description]

# SEO_TITLE
[Generate an SEO-optimized title tag]

# SEO_DESCRIPTION
[Generate an SEO-optimized meta description]

# KEYWORDS
[Generate a comma-separated list of relevant keywords]"""

REVISED_RESPONSE_FORMAT = """# TITLE
[Revised title]

# DESCRIPTION
[Revised description]

# SEO_TITLE
[Revised SEO title]

# SEO_DESCRIPTION
[Revised SEO description]

# KEYWORDS
[Revised keywords]"""


def tone_of(options: GenerationOptions) -> str:
    return (options.tone or Tone.PROFESSIONAL).value


def keyword_line(options: GenerationOptions) -> str:
    if not options.include_keywords:
        return ""
    return f"Keywords to include: {', '.join(options.include_keywords)}"


def _join(*blocks: str) -> str:
    return "\n\n".join(block for block in blocks if block)


def build_product_prompt(product: ProductData, custom_prompt: str, options: GenerationOptions) -> str:
    return _join(
        "Generate SEO-optimized product content for an e-commerce store. "
        f"The content should be {options.length} words long and have a {tone_of(options)} tone.",
        "Product Information:\n"
        f"- Current Title: {product.title}\n"
        f"- Current Description: {product.description or 'None provided'}\n"
        f"- Number of Images: {len(product.images)}",
        keyword_line(options),
        f"Custom Instructions: {custom_prompt}" if custom_prompt else "",
        "Please provide the following in your response:",
        RESPONSE_FORMAT,
    )


def build_regeneration_prompt(previous: ProductContent, feedback: str, options: GenerationOptions) -> str:
    return _join(
        "I previously generated the following product content:",
        format_sections(previous),
        f"Please revise this content based on the following feedback:\n{feedback}",
        f"The revised content should be approximately {options.length} words long "
        f"and have a {tone_of(options)} tone.",
        keyword_line(options),
        "Please provide the revised content in the same format:",
        REVISED_RESPONSE_FORMAT,
    )


def build_image_prompt(store: StoreContext, custom_prompt: str, options: GenerationOptions) -> str:
    return _join(
        f'I\'m sharing an image of a product from our store "{store.name}" '
        f"({store.description or 'No store description available'}).",
        "Please analyze this image and generate SEO-optimized product content. "
        f"The content should be {options.length} words long and have a {tone_of(options)} tone.",
        keyword_line(options),
        f"Custom Instructions: {custom_prompt}" if custom_prompt else "",
        "Based solely on what you can see in this image, please provide the following:",
        RESPONSE_FORMAT,
    )
