from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class FlowBaseSettings(BaseSettings):
    """Base class for ddlflow settings.

    Values are read from ``DDLFLOW_``-prefixed environment variables and an
    optional ``.env`` file. Nested models use ``__`` as delimiter.
    """

    model_config = SettingsConfigDict(
        env_prefix="DDLFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    @classmethod
    def get_env_prefix(cls) -> str:
        """Get the environment variable prefix for this settings class.

        Returns:
            str: Environment variable prefix
        """
        return cls.model_config.get("env_prefix", "")

    def model_post_init(self, __context: Any) -> None:
        """Post initialization hook for additional setup.

        Subclasses should override this method and call super()
        to add custom initialization logic.
        """
        super().model_post_init(__context)
