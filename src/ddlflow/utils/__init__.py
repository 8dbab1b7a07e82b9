"""Utility functions and helpers for ddlflow."""

from ddlflow.utils.decorators import traced

__all__ = [
    "traced",
]
