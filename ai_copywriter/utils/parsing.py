from __future__ import annotations
import re

from ai_copywriter.models.schemas import ProductContent

SECTION_HEADINGS = ("TITLE", "DESCRIPTION", "SEO_TITLE", "SEO_DESCRIPTION", "KEYWORDS")

# Body runs from the heading line to the next "# " heading or the end of text
SECTION_PATTERNS = {
    heading: re.compile(rf"^[ \t]*# {heading}[ \t]*\r?\n(.*?)(?=^[ \t]*# |\Z)", re.M | re.S)
    for heading in SECTION_HEADINGS
}


def extract_section(raw: str, heading: str) -> str | None:
    match = SECTION_PATTERNS[heading].search(raw)
    if not match:
        return None
    return match.group(1).strip()


def split_keywords(text: str) -> list[str]:
    return [kw.strip() for kw in text.split(",") if kw.strip()]


def parse_generated_content(raw: str) -> ProductContent:
    """
    Pull the labelled sections out of a model reply.

    Missing TITLE/DESCRIPTION sections come back as empty strings, the
    optional SEO and keyword fields stay None when their section is missing
    or empty. Nothing is validated.
    """
    raw = raw or ""
    content = ProductContent(title="", description="")

    title = extract_section(raw, "TITLE")
    if title is not None:
        content.title = title

    description = extract_section(raw, "DESCRIPTION")
    if description is not None:
        content.description = description

    seo_title = extract_section(raw, "SEO_TITLE")
    if seo_title:
        content.seo_title = seo_title

    seo_description = extract_section(raw, "SEO_DESCRIPTION")
    if seo_description:
        content.seo_description = seo_description

    keywords = extract_section(raw, "KEYWORDS")
    if keywords:
        content.keywords = split_keywords(keywords)

    return content


def format_sections(content: ProductContent, placeholder: str = "None generated") -> str:
    """Render content back into the heading layout the models are asked for"""
    keywords = ", ".join(content.keywords) if content.keywords else ""
    return "\n\n".join([
        f"# TITLE\n{content.title}",
        f"# DESCRIPTION\n{content.description}",
        f"# SEO_TITLE\n{content.seo_title or placeholder}",
        f"# SEO_DESCRIPTION\n{content.seo_description or placeholder}",
        f"# KEYWORDS\n{keywords or placeholder}",
    ])
