"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from typing import Protocol
from uuid import UUID

from .models import Address, AddressFields, AddressType, Country, User


class UserRepository(Protocol):
    """Port interface for user, refresh token and address persistence."""

    def create_user(self, email: str, password_hash: str, activation_link: str) -> User | None:
        """
        Atomically insert a new, unactivated user.

        Args:
            email: Normalized email address
            password_hash: bcrypt hashed password
            activation_link: Random link token emailed to the user

        Returns:
            The created user, or None if the email is already registered
        """
        ...

    def get_by_id(self, user_id: UUID) -> User | None:
        """Fetch a user with its addresses, or None."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by normalized email, or None."""
        ...

    def email_exists(self, email: str) -> bool:
        """Return True if the normalized email belongs to a user."""
        ...

    def activate(self, activation_link: str) -> bool:
        """
        Mark the user owning the link as activated.

        Activation is forward-only: an already activated user stays
        activated and the call still returns True.

        Returns:
            True if the link belongs to a user, False otherwise
        """
        ...

    def update_user(
        self,
        user_id: UUID,
        email: str | None = None,
        password_hash: str | None = None,
    ) -> User | None:
        """
        Apply a partial update; None fields are left unchanged.

        Raises:
            EmailAlreadyRegistered: If the new email belongs to another user

        Returns:
            The updated user, or None if the user does not exist
        """
        ...

    def save_refresh_token(self, user_id: UUID, session_id: UUID, token: str) -> None:
        """Store the refresh token opening a new session for the user."""
        ...

    def replace_refresh_token(self, old_token: str, new_token: str) -> bool:
        """
        Swap a stored refresh token for a newly issued one.

        The row keeps its session id, so the session outlives the rotation.

        Returns:
            True if old_token was stored and has been replaced
        """
        ...

    def remove_refresh_token(self, token: str) -> int:
        """Delete a refresh token. Returns the number of rows removed (0 or 1)."""
        ...

    def has_refresh_token(self, token: str) -> bool:
        """Return True if the refresh token is stored (not revoked)."""
        ...

    def has_session(self, session_id: UUID) -> bool:
        """Return True while the session's refresh token is stored (not logged out)."""
        ...

    def add_address(self, user_id: UUID, address_type: AddressType, fields: AddressFields) -> Address:
        """Append an address to the end of the user's bucket for address_type."""
        ...

    def update_address(
        self,
        user_id: UUID,
        address_type: AddressType,
        address_id: UUID,
        fields: AddressFields,
    ) -> Address | None:
        """Replace an address' fields. Returns None if it is not in the bucket."""
        ...

    def delete_address(self, user_id: UUID, address_type: AddressType, address_id: UUID) -> bool:
        """Delete an address. Returns False if it is not in the bucket."""
        ...


class CountryRepository(Protocol):
    """Port interface for country reference data."""

    def list_countries(self) -> list[Country]:
        """Return every country ordered by name."""
        ...

    def get_by_abbrev(self, abbrev: str) -> Country | None:
        """Return the country with the given code (case-insensitive), or None."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_activation_link(self, email: str, link: str) -> None:
        """
        Send the account activation URL to an email address.

        Args:
            email: Recipient email address
            link: Absolute activation URL
        """
        ...
