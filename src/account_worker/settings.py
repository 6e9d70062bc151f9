"""
account_worker.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for the composition root.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Worker configuration:
    - Strict env-driven configuration (prefix `ACCOUNT_WORKER_`)
    - Defaults safe for local dev
    - Single settings object injected into broker, store and handlers
    """

    model_config = SettingsConfigDict(env_prefix="ACCOUNT_WORKER_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "account-worker"
    log_level: str = "INFO"

    # Liveness endpoint
    api_host: str = "0.0.0.0"
    api_port: int = 8081

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./accounts.db"
    database_pool_size: int = 10
    auto_create_schema: bool = True

    # Broker
    redis_url: str = "redis://localhost:6379/0"
    request_queue: str = "user-service:request-queue"
    response_channel: str = "api-gateway:response-channel"
    dequeue_timeout_seconds: float = 5.0

    # Worker loop
    worker_enabled: bool = True
    message_timeout_seconds: float = 30.0
    restart_initial_backoff_seconds: float = 1.0
    restart_max_backoff_seconds: float = 30.0
    restart_healthy_after_seconds: float = 60.0

    # Tokens
    jwt_alg: str = "HS256"
    jwt_issuer: str = "account-worker"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    token_ttl_hours: int = 24

    # Passwords
    bcrypt_rounds: int = 12


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# In prod the JWT secret must come from the environment; the default is only
# meant for local development and tests.
