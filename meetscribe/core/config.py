import logging
import importlib
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from .models import ConfigContext, JobConfiguration, PathsConfig, StageConfig
from meetscribe.providers.base import ProviderConfig

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger("MeetScribe.Config")

DEFAULT_CONFIG_FILENAME = "config.yaml"


def load_yaml(path: Path) -> Dict[str, Any]:
    if path.exists():
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


def _merge_dicts(base: Dict, update: Dict):
    """Recursively merge update dict into base dict."""
    for k, v in update.items():
        if isinstance(v, dict) and k in base and isinstance(base[k], dict):
            _merge_dicts(base[k], v)
        else:
            base[k] = v


def load_provider_config(provider_name: str, user_provider_config: Dict[str, Any]) -> Any:
    """
    Dynamically load a provider's configuration.

    Args:
        provider_name: The name of the provider (e.g., 'gemini').
        user_provider_config: The provider configuration from the user's config.yaml.

    Returns:
        Validated Pydantic model for the provider configuration, or the raw
        dict when the provider ships no config model.

    Raises:
        ValueError: If the provider is unknown or its configuration is invalid.
    """
    try:
        module = importlib.import_module(f"meetscribe.providers.{provider_name}")
    except ImportError as e:
        raise ValueError(f"Unknown provider: {provider_name}") from e

    config_model = getattr(module, "Config", None)
    if not (isinstance(config_model, type) and issubclass(config_model, ProviderConfig)):
        return user_provider_config

    # Load default config shipped next to the provider, then apply user overrides
    provider_dir = Path(module.__file__).parent
    provider_config = load_yaml(provider_dir / "defaults.yaml")
    _merge_dicts(provider_config, user_provider_config)

    try:
        return config_model(**provider_config)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration for provider '{provider_name}': {e}") from e


def find_config_file(config_path: Optional[str] = None) -> Optional[Path]:
    """Search order: explicit path -> current dir -> user config dir."""
    if config_path:
        return Path(config_path)

    cwd_config = Path(DEFAULT_CONFIG_FILENAME)
    home_config = Path.home() / ".config" / "meetscribe" / DEFAULT_CONFIG_FILENAME
    for candidate in (cwd_config, home_config):
        if candidate.exists():
            return candidate
    return None


def load_config(config_path: Optional[str] = None) -> ConfigContext:
    """Load configuration from file and env vars."""
    user_config_path = find_config_file(config_path)
    if config_path and not user_config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    user_config = load_yaml(user_config_path) if user_config_path else {}
    if user_config_path:
        logger.debug(f"Loaded configuration from {user_config_path}")

    paths = PathsConfig(**user_config.get("paths", {}))

    processing_conf = user_config.get("processing", {})
    defaults = JobConfiguration(
        segment_seconds=processing_conf.get("segment_seconds", JobConfiguration.model_fields["segment_seconds"].default),
        debug=user_config.get("debug", False),
        output_mode=processing_conf.get("output_mode", "standard"),
        log_api_calls=processing_conf.get("log_api_calls", False),
        transcribe=StageConfig(**user_config.get("transcribe", {})),
        summarize=StageConfig(**user_config.get("summarize", {})),
    )

    # Active providers: those used by a stage plus any configured explicitly
    user_providers_section = user_config.get("providers", {})
    active_providers = set(user_providers_section.keys())
    active_providers.add(defaults.transcribe.provider)
    active_providers.add(defaults.summarize.provider)

    providers_config = {}
    for provider_name in active_providers:
        if not provider_name:
            continue
        providers_config[provider_name] = load_provider_config(
            provider_name, user_providers_section.get(provider_name) or {}
        )

    return ConfigContext(
        defaults=defaults,
        providers=providers_config,
        paths=paths,
    )
