"""Configuration management using pydantic-settings."""

from pathlib import Path
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Backend selection: hosted Supabase project or a local JSON file
    backend: Literal["supabase", "local"] = Field(
        default="supabase", description="Backing store implementation"
    )

    # Supabase settings (optional when backend=local)
    supabase_url: str = Field(default="", description="Supabase project URL")
    supabase_anon_key: str = Field(default="", description="Supabase anon (public) API key")
    # Access token of the signed-in admin; admin writes are refused without it
    supabase_access_token: str = Field(
        default="", description="JWT of the signed-in user for admin operations"
    )
    storage_bucket: str = Field(
        default="blog-images", description="Storage bucket for uploaded images"
    )
    request_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    # Editor
    scroll_sync_debounce_ms: int = Field(
        default=50, description="Delay before scroll sync returns to idle"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Console log level")

    # Paths
    data_dir: Path = Field(default=Path("./data"), description="Data directory path")

    @property
    def local_store_file(self) -> Path:
        """Path to the JSON file used by the local backend."""
        return self.data_dir / "folio.json"

    @property
    def exports_dir(self) -> Path:
        """Path to exported markdown posts."""
        return self.data_dir / "exports"

    @property
    def logs_dir(self) -> Path:
        """Path to log files."""
        return self.data_dir / "logs"

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.exports_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    @property
    def has_supabase_credentials(self) -> bool:
        """Check if the Supabase project URL and key are configured."""
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def is_signed_in(self) -> bool:
        """Check if an access token for the admin user is configured."""
        return bool(self.supabase_access_token)

    @property
    def scroll_sync_debounce(self) -> float:
        """Debounce delay in seconds."""
        return self.scroll_sync_debounce_ms / 1000

    def validate_backend(self) -> None:
        """Validate that the selected backend is configured. Raises ValueError if not."""
        if self.backend == "local":
            return

        missing = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_anon_key:
            missing.append("SUPABASE_ANON_KEY")

        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                "Please set these in your .env file or environment variables, "
                "or use BACKEND=local."
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
