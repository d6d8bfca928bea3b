from pydantic import BaseModel


class ProviderConfig(BaseModel):
    """Base configuration for all providers."""
    pass
