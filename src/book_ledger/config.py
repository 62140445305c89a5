"""Configuration management for the Book Ledger.

Settings are read from the environment (``BOOK_LEDGER_`` prefix) or a local
``.env`` file and validated with Pydantic v2:

1. Service metadata - name and version announced by the MCP surface
2. Storage - which backend to use and where the durable store lives
3. Concurrency - how many optimistic retries a transition may take
4. Hardening switches - opt-in checks beyond the default lending rules
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """Book Ledger configuration.

    Every field can be overridden with an environment variable, e.g.
    ``BOOK_LEDGER_STORAGE_BACKEND=memory`` or
    ``BOOK_LEDGER_MAX_TRANSITION_RETRIES=25``.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOK_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Service Metadata ===

    server_name: str = Field(
        default="book-ledger",
        description="Service name announced by the MCP server",
        pattern=r"^[a-z0-9-]+$",
    )

    server_version: str = Field(
        default="0.1.0",
        description="Service version",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    # === Storage Configuration ===

    storage_backend: str = Field(
        default="sqlalchemy",
        description="Storage backend used by the ledger",
        pattern=r"^(sqlalchemy|memory)$",
    )

    database_path: Path = Field(
        default=Path("data/book_ledger.db"),
        description="SQLite database file path",
    )

    database_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL; takes precedence over database_path",
    )

    sqlite_busy_timeout: float = Field(
        default=30.0,
        description="Seconds a SQLite connection waits on a locked database",
        gt=0,
    )

    # === Concurrency Configuration ===

    max_transition_retries: int = Field(
        default=10,
        description=(
            "Optimistic attempts before lend/return take a per-record lock"
            " and update reports a conflict"
        ),
        ge=1,
        le=1000,
    )

    # === Hardening Switches ===

    enforce_return_bound: bool = Field(
        default=False,
        description="Reject returns that would push available copies above total copies",
    )

    # === Development Configuration ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, v: Path) -> Path:
        """Store the database path as an absolute path."""
        return v.absolute()

    @field_validator("server_name")
    @classmethod
    def validate_server_name(cls, v: str) -> str:
        if len(v) < 3:
            raise ValueError("Server name must be at least 3 characters")
        if len(v) > 50:
            raise ValueError("Server name must not exceed 50 characters")
        return v

    def get_database_url(self) -> str:
        """Get SQLAlchemy database URL."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.database_path}"


class _ConfigStore:
    """Internal storage for configuration singleton."""

    _instance: LedgerConfig | None = None


def get_config() -> LedgerConfig:
    """Get or create the global configuration instance."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = LedgerConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]
