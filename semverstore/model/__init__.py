"""Configuration records."""

from .source import Source

__all__ = ["Source"]
