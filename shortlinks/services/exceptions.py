"""Exceptions for the link service layer.

This module contains the exception hierarchy for the service layer,
providing domain-specific exceptions that abstract underlying implementation details.
Each exception carries a machine-readable ``code`` and a user-facing message.
"""


class ServiceError(Exception):
    """Base exception for all service-level errors."""
    code = "service_error"
    default_message = "Something went wrong"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class UnauthorizedError(ServiceError):
    """No caller identity was supplied."""
    code = "unauthorized"
    default_message = "Unauthorized"


class LinkError(ServiceError):
    """Base exception for link-related errors."""
    pass


class InvalidInputError(LinkError):
    """Input failed validation; the message names the first broken rule."""
    code = "invalid_input"
    default_message = "Invalid input"


class ShortCodeTakenError(LinkError):
    """The short code is already used by another link."""
    code = "code_taken"
    default_message = "This short code is already taken. Please choose another one."


class LinkNotFoundOrUnauthorizedError(LinkError):
    """The link does not exist or belongs to someone else."""
    code = "not_found_or_unauthorized"
    default_message = "Link not found or unauthorized"


class LinkNotFoundError(LinkError):
    """No link matches the short code being resolved."""
    code = "not_found"
    default_message = "Link not found"


class StorageError(ServiceError):
    """Any other persistence failure. Never retried."""
    code = "storage_failure"
    default_message = "Storage failure"
