"""Server configuration loaded from the environment.

Settings are read once at import time into the module-level ``settings``
object. Tests build their own ``Settings(...)`` instances instead of
mutating the global one.
"""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.enums import StoreBackend, TransportKind


class Settings(BaseSettings):
    """Environment-driven configuration for both transports and the store."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ============ TRANSPORT ============

    transport: TransportKind = Field(
        default=TransportKind.STDIO,
        validation_alias=AliasChoices("MCP_TRANSPORT", "transport"),
    )
    host: str = Field(
        default="127.0.0.1",
        validation_alias=AliasChoices("MCPSERVER_HOST", "host"),
    )
    port: int = Field(
        default=8080,
        ge=0,
        le=65535,
        validation_alias=AliasChoices("MCPSERVER_PORT", "port"),
    )
    auth_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AUTH_TOKEN", "auth_token"),
        description="Bearer token required on HTTP POST endpoints when set",
    )
    heartbeat_interval_seconds: float = Field(default=15.0, gt=0)
    max_json_payload_size: int = Field(default=10 * 1024 * 1024, gt=0)
    cors_allowed_origins: str = "*"
    debug: bool = False
    log_level: str = "INFO"

    # ============ STORE BACKEND ============

    store_backend: StoreBackend | None = Field(
        default=None,
        validation_alias=AliasChoices("STORE_BACKEND", "store_backend"),
        description="Explicit backend; unset means remote whenever a developer token exists",
    )
    use_mock: bool = Field(
        default=False,
        validation_alias=AliasChoices("BOX_USE_MOCK", "use_mock"),
    )
    developer_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("BOX_DEVELOPER_TOKEN", "developer_token"),
    )
    api_base_url: str = "https://api.box.com/2.0"
    upload_base_url: str = "https://upload.box.com/api/2.0"
    shared_link_base_url: str = "https://box.mock/shared"
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    # Retry policy for the remote backend
    max_retries: int = Field(default=4, ge=1, le=10)
    retry_base_delay_seconds: float = Field(default=0.5, ge=0)
    retry_max_delay_seconds: float = Field(default=8.0, ge=0)

    # Worker pool size for batch tool handlers
    batch_concurrency: int = Field(default=4, ge=1, le=32)

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS origins as a list (comma separated in the environment)."""
        if self.cors_allowed_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    @property
    def use_remote_backend(self) -> bool:
        """Whether the remote API backend should be used instead of memory."""
        if self.use_mock or not self.developer_token:
            return False
        return self.store_backend in (None, StoreBackend.REMOTE)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
