"""Settings module for ddlflow.

Configuration is built on Pydantic Settings.

Configuration Sources (precedence order):
    1. Environment Variables (highest priority)
    2. ``.env`` file in the working directory
    3. Default Values in code (lowest priority)

Environment Variable Naming:
    - Format: DDLFLOW_SETTING_NAME
    - Case: UPPER_SNAKE_CASE

Quick Start:
    >>> from ddlflow.settings import get_settings
    >>>
    >>> settings = get_settings()
    >>> settings.dialect
    'mssql'
"""

from .main import _Settings, get_settings, _reload_settings
from .base import FlowBaseSettings

__all__ = [
    "get_settings",
    "FlowBaseSettings",
]
