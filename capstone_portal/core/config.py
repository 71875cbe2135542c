"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB (must be a replica set: accept cascade runs in a transaction)
    mongodb_uri: str = "mongodb://localhost:27017/?replicaSet=rs0"
    mongodb_db: str = "capstone_portal"

    # Identity provider session tokens (HS256 shared secret)
    identity_jwt_secret: str = "change-this-secret"
    identity_jwt_algorithm: str = "HS256"
    identity_jwt_audience: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # App
    debug: bool = True

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
