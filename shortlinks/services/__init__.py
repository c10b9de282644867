"""Service layer for the link shortener application.

This package contains service classes implementing the business logic of the application.
Services orchestrate interactions between repositories and provide domain-specific operations.
"""

from shortlinks.services.actions import ActionResult, LinkActions
from shortlinks.services.codes import generate_short_code
from shortlinks.services.links import LinkService

__all__ = ["ActionResult", "LinkActions", "LinkService", "generate_short_code"]
