import logging

from ai_copywriter.models.schemas import (
    ProductContent, ProductData, ProductImage, ProductMetafield, ShopSession, StoreContext
)
from ai_copywriter.services.shopify_client import AdminClientFactory, admin_client_for
from ai_copywriter.utils.helpers import text_to_html, to_product_gid

logger = logging.getLogger(__name__)

GET_PRODUCT_QUERY = """
query GetProduct($id: ID!) {
  product(id: $id) {
    id
    title
    description
    images(first: 10) {
      edges {
        node {
          id
          url
          altText
        }
      }
    }
    metafields(first: 20) {
      edges {
        node {
          namespace
          key
          value
        }
      }
    }
  }
}
"""

GET_SHOP_QUERY = """
query GetShopInfo {
  shop {
    id
    name
    description
    email
    primaryDomain {
      url
    }
  }
}
"""

UPDATE_PRODUCT_MUTATION = """
mutation UpdateProduct($product: ProductUpdateInput!) {
  productUpdate(product: $product) {
    product {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""


class ProductDataError(Exception):
    """Raised when product or shop data cannot be loaded"""


def _edges(connection) -> list:
    return [edge["node"] for edge in (connection or {}).get("edges", [])]


class ProductDataService:
    """Reads products and shop details from the Admin API and writes generated copy back"""

    def __init__(self, client_factory: AdminClientFactory = admin_client_for):
        self.client_factory = client_factory

    async def get_product_by_id(self, session: ShopSession, product_id: str) -> ProductData:
        """
        Fetch a product snapshot for prompt building

        Raises:
            ProductDataError: If the product cannot be fetched or does not exist
        """
        gid = to_product_gid(product_id)
        try:
            client = self.client_factory(session)
            data = await client.graphql(GET_PRODUCT_QUERY, {"id": gid})
        except Exception as e:
            logger.error(f"Error fetching product data for {gid}: {e}")
            raise ProductDataError(f"Failed to fetch product data: {e}") from e

        product = data.get("product")
        if not product:
            raise ProductDataError(f"Product not found: {gid}")

        return ProductData(
            id=product["id"],
            title=product.get("title") or "",
            description=product.get("description") or "",
            images=[
                ProductImage(id=node.get("id"), url=node["url"], alt_text=node.get("altText"))
                for node in _edges(product.get("images"))
            ],
            metafields=[
                ProductMetafield(namespace=node["namespace"], key=node["key"], value=node.get("value") or "")
                for node in _edges(product.get("metafields"))
            ]
        )

    async def get_store_context(self, session: ShopSession) -> StoreContext:
        try:
            client = self.client_factory(session)
            data = await client.graphql(GET_SHOP_QUERY)
            shop = data["shop"]
        except Exception as e:
            logger.error(f"Error fetching store context for {session.shop}: {e}")
            raise ProductDataError(f"Failed to fetch store context: {e}") from e

        return StoreContext(
            id=shop["id"],
            name=shop["name"],
            description=shop.get("description") or "",
            domain=(shop.get("primaryDomain") or {}).get("url") or session.shop,
            email=shop.get("email")
        )

    async def update_product_content(self, session: ShopSession, product_id: str,
                                     content: ProductContent) -> bool:
        """Write title, description and SEO fields to the product"""
        product = {
            "id": to_product_gid(product_id),
            "title": content.title,
            "descriptionHtml": text_to_html(content.description),
        }

        seo = {}
        if content.seo_title:
            seo["title"] = content.seo_title
        if content.seo_description:
            seo["description"] = content.seo_description
        if seo:
            product["seo"] = seo

        try:
            client = self.client_factory(session)
            data = await client.graphql(UPDATE_PRODUCT_MUTATION, {"product": product})

            user_errors = (data.get("productUpdate") or {}).get("userErrors") or []
            if user_errors:
                logger.error(f"Error updating product {product['id']}: {user_errors}")
                return False

            logger.info(f"Updated product {product['id']} with generated content")
            return True
        except Exception as e:
            logger.error(f"Error updating product content for {product['id']}: {e}")
            return False
