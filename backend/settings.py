"""Application settings using Pydantic Settings.

Policy values (thresholds, dates, rates) live beside the code that uses
them; only deployment concerns are configurable here.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HICBC_",
        extra="ignore",
    )

    app_title: str = Field(default="Child Benefit tax calculator", description="OpenAPI title")
    cors_allow_origins: list[str] = Field(default=["*"], description="Origins allowed to call the API")
    log_level: str = Field(default="INFO", description="Root logging level")


@lru_cache
def get_settings() -> Settings:
    return Settings()
