"""
Provider Registry

Maps provider ids (openai, anthropic, gemini) to configured model handles.
A provider is only resolvable when its credential is present in Settings;
nothing is retried.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import structlog

from ..config.settings import Settings
from ..exceptions import ProviderUnavailable
from .base import ModelHandle

logger = structlog.get_logger(__name__)

ModelFactory = Callable[[str, "ProviderBinding", Settings], ModelHandle]


@dataclass(frozen=True)
class ProviderBinding:
    provider_id: str
    has_credential: bool
    model_identifier: str


def _default_factories() -> Dict[str, ModelFactory]:
    from .clients import AnthropicModel, GeminiModel, OpenAIModel

    def build(cls):
        def factory(api_key: str, binding: ProviderBinding, settings: Settings) -> ModelHandle:
            return cls(
                api_key=api_key,
                model=binding.model_identifier,
                temperature=settings.LLM_TEMPERATURE,
                max_tokens=settings.LLM_MAX_TOKENS,
            )
        return factory

    return {
        "openai": build(OpenAIModel),
        "anthropic": build(AnthropicModel),
        "gemini": build(GeminiModel),
    }


class ProviderRegistry:
    """
    Usage:
        registry = ProviderRegistry(settings)
        model = registry.resolve("openai")   # raises ProviderUnavailable without OPENAI_API_KEY
        text = await model.generate_text(system, prompt)
    """

    PROVIDERS = ("openai", "anthropic", "gemini")

    def __init__(self, settings: Settings, factories: Optional[Dict[str, ModelFactory]] = None):
        self.settings = settings
        self.factories = factories if factories is not None else _default_factories()
        self._handles: Dict[str, ModelHandle] = {}

    def _model_identifier(self, provider_id: str) -> str:
        return {
            "openai": self.settings.OPENAI_MODEL,
            "anthropic": self.settings.ANTHROPIC_MODEL,
            "gemini": self.settings.GEMINI_MODEL,
        }.get(provider_id, "")

    def binding(self, provider_id: str) -> ProviderBinding:
        return ProviderBinding(
            provider_id=provider_id,
            has_credential=self.settings.api_key_for(provider_id) is not None,
            model_identifier=self._model_identifier(provider_id),
        )

    def bindings(self) -> List[ProviderBinding]:
        return [self.binding(provider_id) for provider_id in self.PROVIDERS]

    @property
    def has_any_provider(self) -> bool:
        return any(binding.has_credential for binding in self.bindings())

    def resolve(self, provider_id: str) -> ModelHandle:
        """
        Raises:
            ProviderUnavailable: unknown provider or missing credential
        """
        if provider_id not in self.PROVIDERS or provider_id not in self.factories:
            raise ProviderUnavailable(provider_id, "is not a supported provider")

        api_key = self.settings.api_key_for(provider_id)
        if not api_key:
            raise ProviderUnavailable(provider_id)

        handle = self._handles.get(provider_id)
        if handle is None:
            handle = self.factories[provider_id](api_key, self.binding(provider_id), self.settings)
            self._handles[provider_id] = handle
            logger.info("provider_initialized", provider=provider_id, model=self._model_identifier(provider_id))
        return handle
