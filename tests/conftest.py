"""
Shared test fixtures and configuration.

This module provides:
- In-memory implementations of the repository ports
- A recording email sender
- A FastAPI test application wired to those fakes, so every HTTP
  flow can run without a database
"""

import uuid
from collections.abc import Generator
from dataclasses import replace
from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from useraccounts.api.dependencies import (
    get_country_service,
    get_user_service,
)
from useraccounts.api.errors import register_exception_handlers
from useraccounts.api.routers import countries_router, users_router
from useraccounts.domain.countries import CountryService
from useraccounts.domain.exceptions import EmailAlreadyRegistered
from useraccounts.domain.models import Address, AddressFields, AddressType, Country, User
from useraccounts.domain.tokens import TokenService
from useraccounts.domain.users import UserService

TEST_API_URL = "http://api.test"


class InMemoryUserRepository:
    """UserRepository fake with the same observable semantics as the Postgres adapter."""

    def __init__(self) -> None:
        self.users: dict[UUID, User] = {}
        # token -> (user_id, session_id)
        self.refresh_tokens: dict[str, tuple[UUID, UUID]] = {}

    def create_user(self, email: str, password_hash: str, activation_link: str) -> User | None:
        if self.email_exists(email):
            return None
        user = User(
            id=uuid.uuid4(),
            email=email,
            password_hash=password_hash,
            is_activated=False,
            activation_link=activation_link,
        )
        self.users[user.id] = user
        return user

    def get_by_id(self, user_id: UUID) -> User | None:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> User | None:
        return next((u for u in self.users.values() if u.email == email), None)

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def activate(self, activation_link: str) -> bool:
        for user in self.users.values():
            if user.activation_link == activation_link:
                self.users[user.id] = replace(user, is_activated=True)
                return True
        return False

    def update_user(self, user_id: UUID, email: str | None = None, password_hash: str | None = None) -> User | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        if email is not None:
            owner = self.get_by_email(email)
            if owner is not None and owner.id != user_id:
                raise EmailAlreadyRegistered(email)
        user = replace(
            user,
            email=email if email is not None else user.email,
            password_hash=password_hash if password_hash is not None else user.password_hash,
        )
        self.users[user_id] = user
        return user

    def save_refresh_token(self, user_id: UUID, session_id: UUID, token: str) -> None:
        self.refresh_tokens[token] = (user_id, session_id)

    def replace_refresh_token(self, old_token: str, new_token: str) -> bool:
        owner = self.refresh_tokens.pop(old_token, None)
        if owner is None:
            return False
        self.refresh_tokens[new_token] = owner
        return True

    def remove_refresh_token(self, token: str) -> int:
        return 1 if self.refresh_tokens.pop(token, None) is not None else 0

    def has_refresh_token(self, token: str) -> bool:
        return token in self.refresh_tokens

    def has_session(self, session_id: UUID) -> bool:
        return any(sid == session_id for _, sid in self.refresh_tokens.values())

    def add_address(self, user_id: UUID, address_type: AddressType, fields: AddressFields) -> Address:
        address = Address(id=uuid.uuid4(), type=address_type, **vars(fields))
        self.users[user_id].addresses[address_type].append(address)
        return address

    def update_address(
        self, user_id: UUID, address_type: AddressType, address_id: UUID, fields: AddressFields
    ) -> Address | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        bucket = user.addresses[address_type]
        for index, address in enumerate(bucket):
            if address.id == address_id:
                bucket[index] = Address(id=address_id, type=address_type, **vars(fields))
                return bucket[index]
        return None

    def delete_address(self, user_id: UUID, address_type: AddressType, address_id: UUID) -> bool:
        user = self.users.get(user_id)
        if user is None:
            return False
        bucket = user.addresses[address_type]
        for address in bucket:
            if address.id == address_id:
                bucket.remove(address)
                return True
        return False


class InMemoryCountryRepository:
    def __init__(self, countries: list[Country]) -> None:
        self.countries = {country.abbrev: country for country in countries}

    def list_countries(self) -> list[Country]:
        return sorted(self.countries.values(), key=lambda c: c.name)

    def get_by_abbrev(self, abbrev: str) -> Country | None:
        return self.countries.get(abbrev.upper())


class RecordingEmailSender:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send_activation_link(self, email: str, link: str) -> None:
        self.sent.append((email, link))


def make_country(abbrev: str, name: str, pattern: str, regex: str) -> Country:
    return Country(id=uuid.uuid4(), abbrev=abbrev, name=name, postal_code_pattern=pattern, postal_regex=regex)


@pytest.fixture
def countries() -> InMemoryCountryRepository:
    return InMemoryCountryRepository(
        [
            make_country("FI", "Finland", "99999", "^[0-9]{5}$"),
            make_country("SE", "Sweden", "999 99", "^[0-9]{3} ?[0-9]{2}$"),
            make_country("PL", "Poland", "99-999", "^[0-9]{2}-[0-9]{3}$"),
        ]
    )


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(
        access_secret="test-access-secret",
        refresh_secret="test-refresh-secret",
        access_ttl_seconds=900,
        refresh_ttl_seconds=3600,
    )


@pytest.fixture
def user_service(
    repository: InMemoryUserRepository,
    countries: InMemoryCountryRepository,
    email_sender: RecordingEmailSender,
    token_service: TokenService,
) -> UserService:
    # Lowest bcrypt cost keeps the suite fast
    return UserService(
        repository=repository,
        countries=countries,
        email_sender=email_sender,
        tokens=token_service,
        api_url=TEST_API_URL,
        bcrypt_cost=4,
    )


@pytest.fixture
def app(user_service: UserService, countries: InMemoryCountryRepository) -> FastAPI:
    """Create test FastAPI application backed by the in-memory fakes."""
    test_app = FastAPI()
    register_exception_handlers(test_app)
    test_app.include_router(users_router)
    test_app.include_router(countries_router)

    test_app.dependency_overrides[get_user_service] = lambda: user_service
    test_app.dependency_overrides[get_country_service] = lambda: CountryService(repository=countries)
    return test_app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
