"""
Domain exceptions - Semantic error types for accounts.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The API layer maps each family onto an HTTP status.
"""


class AccountError(Exception):
    """Base class for account domain errors."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class EmailAlreadyRegistered(AccountError):
    """Email belongs to an existing user."""

    def __init__(self, email: str) -> None:
        super().__init__(f"User with email {email} already exists")
        self.email = email


class InvalidCredentials(AccountError):
    """Login rejected."""

    pass


class UserNotFound(InvalidCredentials):
    """No user is registered with the given email."""

    def __init__(self) -> None:
        super().__init__("The user with such email was not found")


class InvalidPassword(InvalidCredentials):
    """Password does not match the stored hash."""

    def __init__(self) -> None:
        super().__init__("Invalid password")


class InvalidActivationLink(AccountError):
    """Activation link does not belong to any user."""

    def __init__(self) -> None:
        super().__init__("Wrong activation link")


class InvalidAddress(AccountError):
    """Address fields are inconsistent with the country reference data."""

    pass


class NotAuthenticated(AccountError):
    """Missing, malformed, expired or revoked token."""

    def __init__(self) -> None:
        super().__init__("User is not authorized")


class AccessForbidden(AccountError):
    """Authenticated identity does not own the requested resource."""

    def __init__(self) -> None:
        super().__init__("Access forbidden")


class ResourceNotFound(AccountError):
    """Requested user, address or country does not exist."""

    pass
