import logging
import re
import threading
from typing import Any, Optional

from pydantic import Field, field_validator

from .base import FlowBaseSettings

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class _Settings(FlowBaseSettings):

    database_url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy URL of the target database (e.g. mssql+pyodbc:///?odbc_connect=...)"
    )
    dialect: str = Field(
        default="mssql",
        description="SQL dialect used to compile operations when it cannot be derived from the connection"
    )
    ledger_table: str = Field(
        default="schema_info",
        description="Table that records applied migration versions"
    )
    strict_compilation: bool = Field(
        default=False,
        description="Raise instead of skipping operations the dialect cannot express"
    )
    log_level: str = Field(
        default="INFO",
        description="Base log level for the ddlflow logger"
    )
    echo_sql: bool = Field(
        default=False,
        description="Echo SQL emitted by the SQLAlchemy engine"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the log level name."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{v}'. Expected one of: {', '.join(sorted(_LOG_LEVELS))}"
            )
        return level

    @field_validator("ledger_table")
    @classmethod
    def validate_ledger_table(cls, v: str) -> str:
        """Ledger table must be a plain identifier."""
        if not re.match(r'^[A-Za-z_][A-Za-z0-9_]*$', v):
            raise ValueError(
                f"Invalid ledger table name: '{v}'. "
                f"Must start with letter or underscore, and contain only alphanumeric or underscore."
            )
        return v

    def model_post_init(self, __context: Any) -> None:
        super().model_post_init(__context)
        logging.getLogger(__name__).debug(
            "Settings loaded",
            extra={"dialect": self.dialect, "ledger_table": self.ledger_table},
        )


_settings: Optional[_Settings] = None
_settings_lock = threading.Lock()


def get_settings(force_reload: bool = False) -> _Settings:
    """Get the singleton settings instance for the application.

    Settings are loaded from environment variables and the ``.env`` file
    on first access; later calls return the same instance.

    Args:
        force_reload: If True, creates a new Settings instance even if
                     one already exists. Useful for testing or when
                     environment variables have changed.

    Returns:
        Settings: The singleton Settings instance

    Example:
        ```python
        settings = get_settings()
        settings2 = get_settings()
        assert settings is settings2
        ```
    """
    global _settings
    if _settings is None or force_reload:
        with _settings_lock:
            if _settings is None or force_reload:
                _settings = _Settings()
    return _settings


def _reload_settings() -> _Settings:
    """Force reload of settings.

    This is primarily for testing purposes where you need to reset
    the singleton instance.

    Returns:
        A fresh _Settings instance
    """
    global _settings
    _settings = None
    return get_settings(force_reload=True)
