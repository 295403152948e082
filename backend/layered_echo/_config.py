"""Service Configuration — immutable run parameters and environment-driven settings.

Invariants:
    - ServiceConfiguration is frozen: created once per run, never mutated after construction
    - listener (caller-supplied socket) is only accepted in embedded mode
    - Settings read environment variables with the ECHO_ prefix (or a .env file)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - Explicit ServiceConfiguration passed to start() instead of process-wide
      flag state: a test harness builds one per service it starts
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for every setting: works out-of-the-box
"""

import socket
from functools import lru_cache
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from layered_echo._internal.core.capability_protocols import EchoCapability, KeyValueStore
from layered_echo._internal.core.domain_types import HostingMode, StoreBackend

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"


class ServiceConfiguration(BaseModel):
    """Everything one run of the service needs, fixed at construction."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    host: str = DEFAULT_HOST
    port: int = Field(DEFAULT_PORT, ge=0, le=65535)
    mode: HostingMode = HostingMode.STANDALONE

    # Data access selection
    store_backend: StoreBackend = StoreBackend.MEMORY
    database_url: str = DEFAULT_DATABASE_URL

    # Business logic
    max_message_length: int = Field(1024, gt=0)

    # Lifecycle
    drain_timeout_seconds: float = Field(5.0, gt=0)
    startup_timeout_seconds: float = Field(5.0, gt=0)

    # Test assembly: caller-owned listener and substitute capabilities
    listener: socket.socket | None = None
    store_factory: Callable[[], KeyValueStore] | None = None
    echo_factory: Callable[[KeyValueStore], EchoCapability] | None = None

    @model_validator(mode="after")
    def listener_requires_embedded_mode(self) -> "ServiceConfiguration":
        if self.listener is not None and self.mode is not HostingMode.EMBEDDED:
            raise ValueError("a caller-supplied listener requires embedded mode")
        return self


class Settings(BaseSettings):
    """Startup settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ECHO_", env_file=".env", case_sensitive=False, extra="ignore",
    )

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    mode: HostingMode = HostingMode.STANDALONE

    store_backend: StoreBackend = StoreBackend.MEMORY
    database_url: str = DEFAULT_DATABASE_URL

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgres:// but SQLAlchemy needs postgresql://."""
        if isinstance(v, str) and v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    max_message_length: int = 1024
    drain_timeout_seconds: float = 5.0
    startup_timeout_seconds: float = 5.0

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def to_configuration(self) -> ServiceConfiguration:
        """Freeze these settings into the configuration for one run."""
        return ServiceConfiguration(
            host=self.host,
            port=self.port,
            mode=self.mode,
            store_backend=self.store_backend,
            database_url=self.database_url,
            max_message_length=self.max_message_length,
            drain_timeout_seconds=self.drain_timeout_seconds,
            startup_timeout_seconds=self.startup_timeout_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
