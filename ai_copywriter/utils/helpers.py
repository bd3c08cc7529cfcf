import re
from html import escape
from urllib.parse import urlparse

PRODUCT_GID_PREFIX = "gid://shopify/Product/"


def normalize_shop_domain(shop: str) -> str:
    """
    Normalize a shop identifier to its bare myshopify domain

    Args:
        shop: Domain, with or without protocol and trailing slash

    Returns:
        str: Lowercase host name, e.g. "demo.myshopify.com"
    """
    if not shop:
        return ""

    shop = shop.strip()
    if not shop.startswith(('http://', 'https://')):
        shop = 'https://' + shop

    return urlparse(shop).netloc.lower()


def to_product_gid(product_id: str) -> str:
    """
    Convert a numeric product id to a Shopify GID, leaving GIDs untouched

    Args:
        product_id: "123" or "gid://shopify/Product/123"

    Returns:
        str: Product GID
    """
    product_id = str(product_id).strip()
    if product_id.startswith("gid://"):
        return product_id
    return f"{PRODUCT_GID_PREFIX}{product_id}"


def text_to_html(text: str) -> str:
    """
    Turn generated plain text into simple paragraph HTML for descriptionHtml

    Blank lines separate paragraphs, single newlines become <br>.
    """
    if not text:
        return ""

    paragraphs = [p.strip() for p in re.split(r'\n\s*\n', text.strip()) if p.strip()]
    return "".join(
        "<p>" + "<br>".join(escape(line.strip()) for line in p.splitlines()) + "</p>"
        for p in paragraphs
    )


def mask_secret(secret: str, visible: int = 4) -> str:
    """Mask a secret for log output, keeping the last few characters"""
    if not secret:
        return ""
    if len(secret) <= visible:
        return "*" * len(secret)
    return "*" * (len(secret) - visible) + secret[-visible:]
