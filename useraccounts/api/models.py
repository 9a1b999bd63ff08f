"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON field names are camelCase; request bodies also accept snake_case.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from useraccounts.domain.models import Address, AddressFields, AddressType, Country, Session, User


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# bcrypt only looks at the first 72 bytes and rejects anything longer
PASSWORD_MAX_BYTES = 72


def check_password_bytes(password: str | None) -> str | None:
    if password is not None and len(password.encode()) > PASSWORD_MAX_BYTES:
        raise ValueError(f"password cannot be longer than {PASSWORD_MAX_BYTES} bytes")
    return password


# ----------------------------------------------------------------------
# Requests
# ----------------------------------------------------------------------


class RegistrationRequest(CamelModel):
    """Request model for user registration."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=64, description="User password (8-64 characters)")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return check_password_bytes(value)


class LoginRequest(CamelModel):
    """Request model for login."""

    email: EmailStr = Field(..., examples=["test@test.com"])
    password: str = Field(..., min_length=1, max_length=64, examples=["Smith@123"])

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return check_password_bytes(value)


class CheckEmailRequest(CamelModel):
    email: EmailStr


class UserUpdateRequest(CamelModel):
    """Partial user update; omitted fields are left unchanged."""

    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8, max_length=64)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return check_password_bytes(value)


class AddressRequest(CamelModel):
    """Address body shared by create (POST) and replace (PUT)."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20, examples=["00100"])
    country: str = Field(..., min_length=2, max_length=2, description="Country code", examples=["FI"])
    phone: str | None = Field(None, max_length=32)

    def to_fields(self) -> AddressFields:
        return AddressFields(
            first_name=self.first_name,
            last_name=self.last_name,
            street=self.street,
            city=self.city,
            postal_code=self.postal_code.strip(),
            country=self.country,
            phone=self.phone,
        )


# ----------------------------------------------------------------------
# Responses
# ----------------------------------------------------------------------


class AddressResponse(CamelModel):
    id: UUID
    type: AddressType
    first_name: str
    last_name: str
    street: str
    city: str
    postal_code: str
    country: str
    phone: str | None = None

    @classmethod
    def from_domain(cls, address: Address) -> "AddressResponse":
        return cls(
            id=address.id,
            type=address.type,
            first_name=address.first_name,
            last_name=address.last_name,
            street=address.street,
            city=address.city,
            postal_code=address.postal_code,
            country=address.country,
            phone=address.phone,
        )


class AddressBook(CamelModel):
    """A user's addresses, one ordered list per address type."""

    shipping: list[AddressResponse] = []
    billing: list[AddressResponse] = []


class UserResponse(CamelModel):
    """Public view of a user; credentials and tokens are never included."""

    id: UUID
    email: str = Field(..., examples=["test@test.com"])
    is_activated: bool = Field(..., description="Current activation status of the user")
    addresses: AddressBook = AddressBook()

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        addresses = {
            address_type.value: [AddressResponse.from_domain(a) for a in user.addresses.get(address_type, [])]
            for address_type in AddressType
        }
        return cls(
            id=user.id,
            email=user.email,
            is_activated=user.is_activated,
            addresses=AddressBook(**addresses),
        )


class AuthResponse(CamelModel):
    """Token pair plus the authenticated user."""

    access_token: str = Field(..., description="Access token received from the server")
    refresh_token: str = Field(..., description="Refresh token received from the server")
    user: UserResponse

    @classmethod
    def from_domain(cls, session: Session) -> "AuthResponse":
        return cls(
            access_token=session.tokens.access_token,
            refresh_token=session.tokens.refresh_token,
            user=UserResponse.from_domain(session.user),
        )


class LogoutResponse(CamelModel):
    acknowledged: bool = Field(..., description="Whether the server acknowledged the logout")
    deleted_count: int = Field(..., description="Number of refresh tokens deleted (0 or 1)")


class CheckEmailResponse(CamelModel):
    exists: bool


class CountryResponse(CamelModel):
    id: UUID
    abbrev: str = Field(..., description="Country code", examples=["FI"])
    name: str = Field(..., examples=["Finland"])
    postal_code_pattern: str = Field(..., description="Postal code pattern", examples=["99999"])
    postal_regex: str = Field(..., description="Postal code regexp", examples=["^[0-9]{5}$"])

    @classmethod
    def from_domain(cls, country: Country) -> "CountryResponse":
        return cls(
            id=country.id,
            abbrev=country.abbrev,
            name=country.name,
            postal_code_pattern=country.postal_code_pattern,
            postal_regex=country.postal_regex,
        )


class ErrorResponse(BaseModel):
    """Standard error response model."""

    message: str
    errors: list[str] = []
