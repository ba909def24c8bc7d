from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process-wide settings, read from the environment (or a local .env file).

    Env vars: MONGODB (required), PORT, DEFAULT_LIMIT.
    """

    mongodb: str
    port: int = Field(default=3000)
    default_limit: int = Field(default=20, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    # Raises pydantic.ValidationError when MONGODB is missing
    return Settings()
