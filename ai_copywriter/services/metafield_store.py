import logging
from typing import Dict, Iterable, List, Optional

from ai_copywriter.config import settings
from ai_copywriter.models.schemas import ShopSession
from ai_copywriter.services.shopify_client import AdminClientFactory, admin_client_for

logger = logging.getLogger(__name__)

ENCRYPTED_KEY_FIELD = "encrypted_key"
PROVIDER_FIELD = "provider"
CUSTOM_PROMPT_FIELD = "custom_prompt"
DEFAULT_LENGTH_FIELD = "default_length"

METAFIELD_DEFINITIONS = [
    {
        "name": "Encrypted API Key",
        "key": ENCRYPTED_KEY_FIELD,
        "description": "Encrypted API key for AI services",
        "type": "single_line_text_field",
    },
    {
        "name": "API Provider",
        "key": PROVIDER_FIELD,
        "description": "The AI service provider",
        "type": "single_line_text_field",
    },
    {
        "name": "Custom Prompt",
        "key": CUSTOM_PROMPT_FIELD,
        "description": "Custom prompt for AI content generation",
        "type": "multi_line_text_field",
    },
    {
        "name": "Default Length",
        "key": DEFAULT_LENGTH_FIELD,
        "description": "Default content length (words)",
        "type": "number_integer",
    },
]

FIELD_TYPES = {definition["key"]: definition["type"] for definition in METAFIELD_DEFINITIONS}

SHOP_ID_QUERY = """
query GetShopId {
  shop {
    id
  }
}
"""

GET_METAFIELD_QUERY = """
query GetMetafield($namespace: String!, $key: String!) {
  shop {
    metafield(namespace: $namespace, key: $key) {
      value
      type
    }
  }
}
"""

SET_METAFIELDS_MUTATION = """
mutation SetMetafields($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields {
      id
      namespace
      key
    }
    userErrors {
      field
      message
    }
  }
}
"""

DELETE_METAFIELDS_MUTATION = """
mutation DeleteMetafields($metafields: [MetafieldIdentifierInput!]!) {
  metafieldsDelete(metafields: $metafields) {
    deletedMetafields {
      key
      namespace
    }
    userErrors {
      field
      message
    }
  }
}
"""

CREATE_DEFINITION_MUTATION = """
mutation CreateMetafieldDefinition($definition: MetafieldDefinitionInput!) {
  metafieldDefinitionCreate(definition: $definition) {
    createdDefinition {
      id
      name
    }
    userErrors {
      field
      message
      code
    }
  }
}
"""


class MetafieldStore:
    """
    Namespaced string key/value storage on the shop owner, backed by
    Shopify metafields.

    Reads return None and writes return False on failure; nothing here
    raises to the caller.
    """

    def __init__(self, client_factory: AdminClientFactory = admin_client_for,
                 namespace: Optional[str] = None):
        self.client_factory = client_factory
        self.namespace = namespace or settings.METAFIELD_NAMESPACE

    async def _shop_gid(self, client) -> str:
        data = await client.graphql(SHOP_ID_QUERY)
        return data["shop"]["id"]

    async def get(self, session: ShopSession, namespace: str, key: str) -> Optional[str]:
        try:
            client = self.client_factory(session)
            data = await client.graphql(GET_METAFIELD_QUERY, {"namespace": namespace, "key": key})

            metafield = (data.get("shop") or {}).get("metafield")
            if not metafield:
                return None

            return metafield.get("value")
        except Exception as e:
            logger.error(f"Error getting metafield {namespace}.{key} for {session.shop}: {e}")
            return None

    async def set(self, session: ShopSession, namespace: str, key: str, value: str) -> bool:
        return await self.set_many(session, namespace, {key: value})

    async def set_many(self, session: ShopSession, namespace: str, values: Dict[str, str]) -> bool:
        """
        Write several fields in a single metafieldsSet call

        Shopify applies the whole batch or none of it, so related fields
        cannot end up half written.
        """
        if not values:
            return True

        try:
            client = self.client_factory(session)
            owner_id = await self._shop_gid(client)

            metafields = [
                {
                    "ownerId": owner_id,
                    "namespace": namespace,
                    "key": key,
                    "value": str(value),
                    "type": FIELD_TYPES.get(key, "single_line_text_field"),
                }
                for key, value in values.items()
            ]

            logger.info(f"Setting metafields {namespace}: {', '.join(values)} for {session.shop}")
            data = await client.graphql(SET_METAFIELDS_MUTATION, {"metafields": metafields})

            user_errors = (data.get("metafieldsSet") or {}).get("userErrors") or []
            if user_errors:
                logger.error(f"Errors setting metafields: {user_errors}")
                return False

            return True
        except Exception as e:
            logger.error(f"Error setting metafields {namespace} for {session.shop}: {e}")
            return False

    async def delete(self, session: ShopSession, namespace: str, keys: Iterable[str]) -> bool:
        keys = list(keys)
        if not keys:
            return True

        try:
            client = self.client_factory(session)
            owner_id = await self._shop_gid(client)

            identifiers = [{"ownerId": owner_id, "namespace": namespace, "key": key} for key in keys]
            data = await client.graphql(DELETE_METAFIELDS_MUTATION, {"metafields": identifiers})

            user_errors = (data.get("metafieldsDelete") or {}).get("userErrors") or []
            if user_errors:
                logger.error(f"Errors deleting metafields: {user_errors}")
                return False

            return True
        except Exception as e:
            logger.error(f"Error deleting metafields {namespace} for {session.shop}: {e}")
            return False

    async def ensure_definitions(self, session: ShopSession) -> bool:
        """
        Create the shop metafield definitions the app relies on

        Safe to call on every settings load; definitions that already exist
        come back as TAKEN and are treated as present.
        """
        try:
            client = self.client_factory(session)
            ok = True

            for definition in METAFIELD_DEFINITIONS:
                payload = dict(definition, namespace=self.namespace, ownerType="SHOP")
                data = await client.graphql(CREATE_DEFINITION_MUTATION, {"definition": payload})

                user_errors: List[dict] = (data.get("metafieldDefinitionCreate") or {}).get("userErrors") or []
                unexpected = [err for err in user_errors if err.get("code") != "TAKEN"]
                if unexpected:
                    logger.error(f"Could not create metafield definition {self.namespace}.{definition['key']}: {unexpected}")
                    ok = False

            return ok
        except Exception as e:
            logger.error(f"Error setting up metafield definitions for {session.shop}: {e}")
            return False
