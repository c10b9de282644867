"""Core module for the link shortener application."""

from shortlinks.core.config import settings

__all__ = ["settings"]
