"""Application settings and configuration management.

This module provides Pydantic-based settings management that loads
configuration from environment variables or a .env file. Settings include
the blob storage directory, CORS origins, the request body cap, logging
level and the address the server binds to.

Example:
    Settings can be accessed via the cached get_settings() function:
        >>> from smap_registry.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.storage_dir)

    Environment variables can override defaults:
        >>> STORAGE_DIR=/custom/path/uploads
        >>> MAX_UPLOAD_SIZE_BYTES=10485760
        >>> LOG_LEVEL=DEBUG
"""

import functools
import pathlib

import pydantic_settings


class Settings(pydantic_settings.BaseSettings):
    """Runtime configuration pulled from environment variables or defaults.

    All settings can be overridden via environment variables or .env file.
    The storage directory is created on demand via ensure_directories().

    Attributes:
        storage_dir: Directory where uploaded static maps are written.
        allow_origins: List of allowed CORS origins (["*"] allows all).
        max_upload_size_bytes: Maximum request body size (default 1MB).
        upload_chunk_size_bytes: Read size used when streaming uploads
            to storage.
        log_level: Root logging level name.
        host: Interface the HTTP server binds to.
        port: Port the HTTP server listens on.

    Example:
        Create settings with custom values:
            >>> settings = Settings(
            ...     storage_dir=Path("/custom/uploads"),
            ...     max_upload_size_bytes=10 * 1024 * 1024  # 10MB
            ... )
            >>> settings.ensure_directories()
    """

    storage_dir: pathlib.Path = pathlib.Path("/tmp/smap/uploads")
    allow_origins: list[str] = ["*"]
    max_upload_size_bytes: int = 1024 * 1024
    upload_chunk_size_bytes: int = 64 * 1024
    log_level: str = "INFO"
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080

    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def ensure_directories(self) -> None:
        """Create the local directory for uploaded static maps."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)


@functools.lru_cache
def get_settings() -> Settings:
    """Get cached settings instance with directories initialized.

    Settings are loaded from environment variables or .env file and cached
    for the lifetime of the application. Directories are created on first
    call. Subsequent calls return the same cached instance.

    Returns:
        Settings instance with all configuration values populated and
        directories ensured to exist.
    """
    settings = Settings()
    settings.ensure_directories()
    return settings
