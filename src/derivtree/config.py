"""
Settings for derivtree, read from environment variables.
All variables use the DERIVTREE_ prefix.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Recursion guard for deeply nested input
    max_depth: int = 200

    # Marker pair wrapped around a mismatched derivation step
    error_color: str = "\\color{#ff0000}"
    reset_color: str = "\\color{#000000}"

    model_config = SettingsConfigDict(env_prefix="DERIVTREE_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
