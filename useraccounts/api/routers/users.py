"""
Users routes.

Registration, activation, session and profile endpoints, plus
address CRUD under /users/{userID}/addresses/{type}.

Handlers are plain functions: bcrypt, psycopg and SMTP all block, so
FastAPI runs them in its threadpool instead of on the event loop.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Response, status
from fastapi.responses import RedirectResponse

from useraccounts.api.dependencies import (
    REFRESH_TOKEN_COOKIE,
    get_current_identity,
    get_refresh_token,
    get_user_service,
)
from useraccounts.api.models import (
    AddressRequest,
    AddressResponse,
    AuthResponse,
    CheckEmailRequest,
    CheckEmailResponse,
    ErrorResponse,
    LoginRequest,
    LogoutResponse,
    RegistrationRequest,
    UserResponse,
    UserUpdateRequest,
)
from useraccounts.config.settings import get_settings
from useraccounts.domain.models import AddressType, Identity, Session
from useraccounts.domain.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])

_BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Bad Request"}}
_PROTECTED = {
    400: {"model": ErrorResponse, "description": "Bad Request"},
    401: {"model": ErrorResponse, "description": "Unauthorized"},
    403: {"model": ErrorResponse, "description": "Forbidden"},
}
_PROTECTED_ITEM = {
    **_PROTECTED,
    404: {"model": ErrorResponse, "description": "Not found"},
}


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        refresh_token,
        max_age=settings.refresh_token_ttl_seconds,
        httponly=True,
        samesite="lax",
    )


def _session_response(response: Response, session: Session) -> AuthResponse:
    _set_refresh_cookie(response, session.tokens.refresh_token)
    return AuthResponse.from_domain(session)


@router.post(
    "/registration",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Bad Request. User already exists"}},
    summary="User registration",
    description="Register a new user. An activation link is emailed to the given address.",
)
def registration(
    request_data: RegistrationRequest,
    response: Response,
    service: UserService = Depends(get_user_service),
) -> AuthResponse:
    session = service.registration(request_data.email, request_data.password)
    return _session_response(response, session)


@router.get(
    "/activation/{link}",
    status_code=status.HTTP_302_FOUND,
    response_class=RedirectResponse,
    responses={400: {"model": ErrorResponse, "description": "Bad Request. Wrong activation link"}},
    summary="User activation",
    description="Activate a user account using the provided activation link, "
    "then redirect to the client application.",
)
def activation(
    link: str = Path(..., description="The activation link for the user."),
    service: UserService = Depends(get_user_service),
) -> RedirectResponse:
    service.activation(link)
    return RedirectResponse(get_settings().client_url, status_code=status.HTTP_302_FOUND)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {
            "model": ErrorResponse,
            "description": "The user with such email was not found OR Invalid password",
        }
    },
    summary="User login",
    description="Authenticate a user using email and password.",
)
def login(
    request_data: LoginRequest,
    response: Response,
    service: UserService = Depends(get_user_service),
) -> AuthResponse:
    session = service.login(request_data.email, request_data.password)
    return _session_response(response, session)


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="User logout",
    description="Log out the current user by revoking the presented refresh token.",
)
def logout(
    response: Response,
    refresh_token: str | None = Depends(get_refresh_token),
    service: UserService = Depends(get_user_service),
) -> LogoutResponse:
    deleted = service.logout(refresh_token)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)
    return LogoutResponse(acknowledged=True, deleted_count=deleted)


@router.get(
    "/refresh",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse, "description": "Unauthorized"}},
    summary="Refresh access token",
    description="Exchange the refresh token for a new access/refresh token pair.",
)
def refresh(
    response: Response,
    refresh_token: str | None = Depends(get_refresh_token),
    service: UserService = Depends(get_user_service),
) -> AuthResponse:
    session = service.refresh(refresh_token)
    return _session_response(response, session)


@router.post(
    "/check-email",
    response_model=CheckEmailResponse,
    responses=_BAD_REQUEST,
    summary="Check if email already exists in the system.",
)
def check_email(
    request_data: CheckEmailRequest,
    service: UserService = Depends(get_user_service),
) -> CheckEmailResponse:
    return CheckEmailResponse(exists=service.check_email(request_data.email))


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    responses=_PROTECTED_ITEM,
    summary="Partial user data update.",
)
def update(
    request_data: UserUpdateRequest,
    user_id: UUID = Path(..., description="User ID."),
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = service.update(identity, user_id, email=request_data.email, password=request_data.password)
    return UserResponse.from_domain(user)


@router.post(
    "/{user_id}/addresses/{address_type}",
    response_model=AddressResponse,
    responses=_PROTECTED,
    summary="Add address.",
)
def add_address(
    request_data: AddressRequest,
    user_id: UUID = Path(..., description="User ID."),
    address_type: AddressType = Path(..., description="Address type (eg. shipping, billing)."),
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> AddressResponse:
    address = service.add_address(identity, user_id, address_type, request_data.to_fields())
    return AddressResponse.from_domain(address)


@router.put(
    "/{user_id}/addresses/{address_type}/{address_id}",
    response_model=AddressResponse,
    responses=_PROTECTED_ITEM,
    summary="Update address.",
)
def update_address(
    request_data: AddressRequest,
    user_id: UUID = Path(..., description="User ID."),
    address_type: AddressType = Path(..., description="Address type (eg. shipping, billing)."),
    address_id: UUID = Path(..., description="Address ID."),
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> AddressResponse:
    address = service.update_address(identity, user_id, address_type, address_id, request_data.to_fields())
    return AddressResponse.from_domain(address)


@router.delete(
    "/{user_id}/addresses/{address_type}/{address_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_PROTECTED_ITEM,
    summary="Delete address.",
)
def delete_address(
    user_id: UUID = Path(..., description="User ID."),
    address_type: AddressType = Path(..., description="Address type (eg. shipping, billing)."),
    address_id: UUID = Path(..., description="Address ID."),
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> Response:
    service.delete_address(identity, user_id, address_type, address_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
