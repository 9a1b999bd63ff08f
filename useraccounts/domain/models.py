"""
Domain records - Plain dataclasses shared by services and adapters.

Records are immutable snapshots of persisted rows. Services never
mutate them in place; repositories return fresh instances after writes.
"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID


class AddressType(str, Enum):
    """Buckets partitioning a user's saved addresses."""

    SHIPPING = "shipping"
    BILLING = "billing"


@dataclass(frozen=True)
class Country:
    """Country reference row used for postal code validation."""

    id: UUID
    abbrev: str
    name: str
    postal_code_pattern: str
    postal_regex: str


@dataclass(frozen=True)
class AddressFields:
    """Client-supplied address contents, shared by create and update."""

    first_name: str
    last_name: str
    street: str
    city: str
    postal_code: str
    country: str
    phone: str | None = None


@dataclass(frozen=True)
class Address:
    id: UUID
    type: AddressType
    first_name: str
    last_name: str
    street: str
    city: str
    postal_code: str
    country: str
    phone: str | None = None


@dataclass(frozen=True)
class User:
    """
    Persisted user.

    password_hash and activation_link never leave the domain layer;
    the API layer serializes only id, email, is_activated and addresses.
    """

    id: UUID
    email: str
    password_hash: str
    is_activated: bool
    activation_link: str
    addresses: dict[AddressType, list[Address]] = field(
        default_factory=lambda: {address_type: [] for address_type in AddressType}
    )


@dataclass(frozen=True)
class Identity:
    """
    Claims carried by both access and refresh tokens.

    session_id ties the pair to one stored refresh token row; logout
    deletes the row and with it the validity of both tokens.
    """

    id: UUID
    email: str
    is_activated: bool
    session_id: UUID | None = None


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class Session:
    """Result of registration, login and refresh: a token pair plus the user."""

    tokens: TokenPair
    user: User
