from typing import Callable, Dict, List

from ai_copywriter.models.schemas import ProviderId
from ai_copywriter.services.providers.base import ContentProvider
from ai_copywriter.services.providers.deepseek_provider import DeepSeekProvider
from ai_copywriter.services.providers.openai_provider import OpenAIProvider

ProviderFactory = Callable[[], ContentProvider]


class UnsupportedProviderError(Exception):
    """Raised when a stored provider id has no registered implementation"""

    def __init__(self, provider: str):
        super().__init__(f"Unsupported AI provider: {provider}")
        self.provider = provider


class ProviderRegistry:
    """Maps stored provider ids to provider instances"""

    def __init__(self):
        self._factories: Dict[str, ProviderFactory] = {}
        self._instances: Dict[str, ContentProvider] = {}

    def register(self, provider_id: str, factory: ProviderFactory) -> None:
        self._factories[provider_id] = factory
        self._instances.pop(provider_id, None)

    def resolve(self, provider_id: str) -> ContentProvider:
        """
        Return the provider for ``provider_id``

        Raises:
            UnsupportedProviderError: For ids nobody registered
        """
        if provider_id not in self._factories:
            raise UnsupportedProviderError(provider_id)

        if provider_id not in self._instances:
            self._instances[provider_id] = self._factories[provider_id]()
        return self._instances[provider_id]

    def available(self) -> List[str]:
        return list(self._factories)


def default_registry() -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register(ProviderId.OPENAI.value, OpenAIProvider)
    registry.register(ProviderId.DEEPSEEK.value, DeepSeekProvider)
    return registry
