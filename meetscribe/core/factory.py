from typing import Any, Dict, Optional, Type

from .logger import APILogger
from .providers import ModelClient


class ProviderFactory:
    _registry: Dict[str, Type[ModelClient]] = {}

    @classmethod
    def register(cls, name: str, client_cls: Type[ModelClient]):
        cls._registry[name] = client_cls

    @classmethod
    def get_client_class(cls, name: str) -> Type[ModelClient]:
        if name not in cls._registry:
            # Lazy load standard plugins
            if name == "gemini":
                from ..providers.gemini.provider import GeminiClient
                cls.register("gemini", GeminiClient)
            else:
                raise ValueError(f"Unknown provider: {name}")

        return cls._registry[name]

    @classmethod
    def create(cls, name: str, provider_config: Any, model: str,
               api_logger: Optional[APILogger] = None) -> ModelClient:
        client_cls = cls.get_client_class(name)
        return client_cls(provider_config, model=model, api_logger=api_logger)
