"""
User domain service - accounts, sessions and addresses.

This module contains the business logic behind the /users endpoints:

- registration / activation via an emailed link
- login / logout / refresh with a rotating refresh token set
- partial profile updates
- address CRUD, partitioned by AddressType and validated against
  country postal code rules

Ownership rule: every operation taking a user_id path parameter also
takes the authenticated Identity and raises AccessForbidden unless the
two refer to the same user.
"""

import dataclasses
import logging
import re
import uuid
from dataclasses import dataclass
from uuid import UUID

import bcrypt

from .exceptions import (
    AccessForbidden,
    EmailAlreadyRegistered,
    InvalidActivationLink,
    InvalidAddress,
    InvalidPassword,
    NotAuthenticated,
    ResourceNotFound,
    UserNotFound,
)
from .models import Address, AddressFields, AddressType, Identity, Session, User
from .ports import CountryRepository, EmailSender, UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


@dataclass
class UserService:
    """Domain service for user accounts."""

    repository: UserRepository
    countries: CountryRepository
    email_sender: EmailSender
    tokens: TokenService
    api_url: str
    bcrypt_cost: int = 10

    # ------------------------------------------------------------------
    # Accounts and sessions
    # ------------------------------------------------------------------

    def registration(self, email: str, password: str) -> Session:
        """
        Register a new, unactivated user and email the activation link.

        Raises:
            EmailAlreadyRegistered: If the email is already taken
        """
        normalized_email = normalize_email(email)
        activation_link = str(uuid.uuid4())

        user = self.repository.create_user(
            normalized_email, self._hash_password(password), activation_link
        )
        if user is None:
            raise EmailAlreadyRegistered(normalized_email)

        logger.info("Registered user %s", user.id)
        self.email_sender.send_activation_link(
            normalized_email, f"{self.api_url.rstrip('/')}/users/activation/{activation_link}"
        )
        return self._start_session(user)

    def activation(self, activation_link: str) -> None:
        """
        Activate the account owning the link.

        Re-visiting a link of an already active account succeeds without
        further changes.

        Raises:
            InvalidActivationLink: If no user owns the link
        """
        if not self.repository.activate(activation_link):
            raise InvalidActivationLink()
        logger.info("Activation link accepted")

    def login(self, email: str, password: str) -> Session:
        """
        Authenticate with email and password.

        Raises:
            UserNotFound: If no user has this email
            InvalidPassword: If the password does not match
        """
        user = self.repository.get_by_email(normalize_email(email))
        if user is None:
            raise UserNotFound()
        if not bcrypt.checkpw(password.encode(), user.password_hash.encode()):
            raise InvalidPassword()

        logger.info("User %s logged in", user.id)
        return self._start_session(user)

    def logout(self, refresh_token: str | None) -> int:
        """
        End the session owning a refresh token.

        Deleting the stored token also invalidates every access token
        carrying the same session id. Returns how many tokens were deleted.
        """
        if not refresh_token:
            return 0
        deleted = self.repository.remove_refresh_token(refresh_token)
        if deleted:
            logger.info("Refresh token revoked")
        return deleted

    def refresh(self, refresh_token: str | None) -> Session:
        """
        Exchange a stored, valid refresh token for a new pair.

        The presented token is replaced by the new refresh token, so it
        cannot be used twice.

        Raises:
            NotAuthenticated: If the token is missing, invalid, expired or revoked
        """
        if not refresh_token:
            raise NotAuthenticated()

        identity = self.tokens.validate_refresh_token(refresh_token)
        if identity is None or identity.session_id is None:
            raise NotAuthenticated()
        if not self.repository.has_refresh_token(refresh_token):
            raise NotAuthenticated()

        user = self.repository.get_by_id(identity.id)
        if user is None:
            raise NotAuthenticated()

        tokens = self.tokens.generate_tokens(self._identity(user, identity.session_id))
        if not self.repository.replace_refresh_token(refresh_token, tokens.refresh_token):
            raise NotAuthenticated()
        return Session(tokens=tokens, user=user)

    def authenticate(self, access_token: str) -> Identity:
        """
        Resolve the identity behind an access token.

        The token must be validly signed, unexpired and belong to a
        session that has not been logged out.

        Raises:
            NotAuthenticated: If any of those checks fails
        """
        identity = self.tokens.validate_access_token(access_token)
        if identity is None or identity.session_id is None:
            raise NotAuthenticated()
        if not self.repository.has_session(identity.session_id):
            raise NotAuthenticated()
        return identity

    def check_email(self, email: str) -> bool:
        """Return True if the email is already registered."""
        return self.repository.email_exists(normalize_email(email))

    def update(
        self,
        identity: Identity,
        user_id: UUID,
        email: str | None = None,
        password: str | None = None,
    ) -> User:
        """
        Partially update the authenticated user's email and/or password.

        Raises:
            AccessForbidden: If user_id is not the authenticated user
            EmailAlreadyRegistered: If the new email belongs to another user
            ResourceNotFound: If the user no longer exists
        """
        self._ensure_owner(identity, user_id)

        user = self.repository.update_user(
            user_id,
            email=normalize_email(email) if email is not None else None,
            password_hash=self._hash_password(password) if password is not None else None,
        )
        if user is None:
            raise ResourceNotFound("User not found")
        return user

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def add_address(
        self,
        identity: Identity,
        user_id: UUID,
        address_type: AddressType,
        fields: AddressFields,
    ) -> Address:
        """Validate and append an address to the user's bucket."""
        self._ensure_owner(identity, user_id)
        fields = self._validate_address(fields)

        if self.repository.get_by_id(user_id) is None:
            raise ResourceNotFound("User not found")
        return self.repository.add_address(user_id, address_type, fields)

    def update_address(
        self,
        identity: Identity,
        user_id: UUID,
        address_type: AddressType,
        address_id: UUID,
        fields: AddressFields,
    ) -> Address:
        """Validate and replace an existing address' fields."""
        self._ensure_owner(identity, user_id)
        fields = self._validate_address(fields)

        address = self.repository.update_address(user_id, address_type, address_id, fields)
        if address is None:
            raise ResourceNotFound("Address not found")
        return address

    def delete_address(
        self,
        identity: Identity,
        user_id: UUID,
        address_type: AddressType,
        address_id: UUID,
    ) -> None:
        """Remove an address from the user's bucket."""
        self._ensure_owner(identity, user_id)

        if not self.repository.delete_address(user_id, address_type, address_id):
            raise ResourceNotFound("Address not found")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _start_session(self, user: User) -> Session:
        session_id = uuid.uuid4()
        tokens = self.tokens.generate_tokens(self._identity(user, session_id))
        self.repository.save_refresh_token(user.id, session_id, tokens.refresh_token)
        return Session(tokens=tokens, user=user)

    def _identity(self, user: User, session_id: UUID) -> Identity:
        return Identity(
            id=user.id,
            email=user.email,
            is_activated=user.is_activated,
            session_id=session_id,
        )

    def _ensure_owner(self, identity: Identity, user_id: UUID) -> None:
        if identity.id != user_id:
            raise AccessForbidden()

    def _validate_address(self, fields: AddressFields) -> AddressFields:
        """
        Check the postal code against the country's postal regex.

        Returns the fields with the country code normalized to upper case.

        Raises:
            InvalidAddress: Unknown country or non-matching postal code
        """
        country = self.countries.get_by_abbrev(fields.country)
        if country is None:
            raise InvalidAddress("Unknown country", [f"country: {fields.country} is not supported"])

        if re.fullmatch(country.postal_regex, fields.postal_code) is None:
            raise InvalidAddress(
                "Invalid postal code",
                [f"postalCode: expected format {country.postal_code_pattern} for {country.name}"],
            )
        return dataclasses.replace(fields, country=country.abbrev)

    def _hash_password(self, password: str) -> str:
        """Hash password using bcrypt with the configured cost factor."""
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()
