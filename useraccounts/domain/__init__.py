"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for user accounts,
sessions, addresses and country reference data. It defines its own
port interfaces for infrastructure abstraction.
"""

from .countries import CountryService
from .exceptions import (
    AccessForbidden,
    AccountError,
    EmailAlreadyRegistered,
    InvalidActivationLink,
    InvalidAddress,
    InvalidCredentials,
    InvalidPassword,
    NotAuthenticated,
    ResourceNotFound,
    UserNotFound,
)
from .models import Address, AddressFields, AddressType, Country, Identity, Session, TokenPair, User
from .ports import CountryRepository, EmailSender, UserRepository
from .tokens import TokenService
from .users import UserService

__all__ = [
    "AccessForbidden",
    "AccountError",
    "Address",
    "AddressFields",
    "AddressType",
    "Country",
    "CountryRepository",
    "CountryService",
    "EmailAlreadyRegistered",
    "EmailSender",
    "Identity",
    "InvalidActivationLink",
    "InvalidAddress",
    "InvalidCredentials",
    "InvalidPassword",
    "NotAuthenticated",
    "ResourceNotFound",
    "Session",
    "TokenPair",
    "TokenService",
    "User",
    "UserNotFound",
    "UserRepository",
    "UserService",
]
