"""Gemini provider configuration."""
import os
from typing import Optional
from pydantic import Field, SecretStr, model_validator
from meetscribe.providers.base import ProviderConfig


class GeminiConfig(ProviderConfig):
    """Configuration for the Gemini provider."""
    api_key: Optional[SecretStr] = Field(default=None, description="Gemini API key")
    timeout: int = Field(default=600, description="Request timeout in seconds")
    temperature: Optional[float] = Field(default=None, description="Sampling temperature (model default if unset)")
    relax_safety_filters: bool = Field(default=False, description="Lower the harm-category block thresholds to BLOCK_NONE")

    @model_validator(mode='after')
    def load_api_key_from_env(self):
        """Load GEMINI_API_KEY from environment if not provided."""
        if self.api_key is None:
            from dotenv import load_dotenv
            load_dotenv()
            env_key = os.environ.get("GEMINI_API_KEY")
            if env_key:
                self.api_key = SecretStr(env_key)
        return self


# Alias for dynamic loading
Config = GeminiConfig
