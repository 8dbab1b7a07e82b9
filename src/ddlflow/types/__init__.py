"""Shared model types for ddlflow."""

from ddlflow.types.base import FlowBaseModel

__all__ = [
    "FlowBaseModel",
]
