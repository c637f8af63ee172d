"""
API routes.

Defines REST endpoints for registration, verification, sessions and habits.
Handlers are plain functions: FastAPI runs them in its threadpool, so the
blocking bcrypt and database calls never stall the event loop.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from habitsphere.api.dependencies import (
    enforce_registration_rate_limit,
    get_account_service,
    get_bearer_token,
    get_current_claims,
    get_habit_service,
    get_registration_service,
)
from habitsphere.api.models import (
    ErrorResponse,
    HabitResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    SaveHabitsRequest,
    TokenResponse,
    UpdateUsernameRequest,
    UserHabitsResponse,
    UserProfile,
    VerifyEmailRequest,
)
from habitsphere.domain.accounts import AccountService
from habitsphere.domain.exceptions import (
    EmailAlreadyRegistered,
    InvalidCredentials,
    NoPendingRegistration,
    NotificationFailed,
    TokenExpired,
    TokenInvalid,
    UsernameTaken,
    UserNotFound,
    ValidationError,
)
from habitsphere.domain.habits import HabitService
from habitsphere.domain.models import RegistrationForm, SessionClaims
from habitsphere.domain.registration import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["api"])


@router.get(
    "/habits",
    response_model=list[HabitResponse],
    summary="List all habits",
)
def list_habits(service: HabitService = Depends(get_habit_service)) -> list[HabitResponse]:
    return [HabitResponse(name=h.name, description=h.description) for h in service.list_habits()]


@router.post(
    "/register",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
    dependencies=[Depends(enforce_registration_rate_limit)],
    summary="Register a new user",
    description="Submit profile and credentials to begin registration. "
    "A 6-digit verification code will be sent to the provided email.",
)
def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    form = RegistrationForm(
        first_name=request_data.first_name,
        last_name=request_data.last_name,
        email=request_data.email,
        password=request_data.password,
        confirm_email=request_data.confirm_email,
        confirm_password=request_data.confirm_password,
    )
    try:
        service.register(form)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered",
        ) from None
    except NotificationFailed:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification email",
        ) from None
    return MessageResponse(message="Verification code sent to email")


@router.post(
    "/verify-email",
    response_model=TokenResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing, invalid or unknown code"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
    dependencies=[Depends(enforce_registration_rate_limit)],
    summary="Verify email with code",
)
def verify_email(
    request_data: VerifyEmailRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> TokenResponse:
    try:
        result = service.verify_email(request_data.email, request_data.code)
    except (ValidationError, NoPendingRegistration) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered",
        ) from None
    return TokenResponse(message="Email verified and user created successfully", token=result.token)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid email or password"}},
    summary="Sign in",
)
def login(
    request_data: LoginRequest,
    service: AccountService = Depends(get_account_service),
) -> LoginResponse:
    try:
        result = service.login(request_data.email, request_data.password)
    except InvalidCredentials as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    user = result.user
    return LoginResponse(
        message="Login successful",
        token=result.token,
        user=UserProfile(first_name=user.first_name, last_name=user.last_name, email=user.email),
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or expired token"},
        401: {"model": ErrorResponse, "description": "Invalid token"},
    },
    summary="Sign out",
)
def logout(
    token: str | None = Depends(get_bearer_token),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Token is required for logout",
        )
    try:
        service.logout(token)
    except TokenExpired:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Token has already expired",
        ) from None
    except TokenInvalid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from None
    return MessageResponse(message="Logout successful")


@router.put(
    "/update-username",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or taken username"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Set username",
)
def update_username(
    request_data: UpdateUsernameRequest,
    claims: SessionClaims = Depends(get_current_claims),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    try:
        service.update_username(claims.user_id, request_data.username)
    except (ValidationError, UsernameTaken) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None
    return MessageResponse(message="Username updated successfully.")


@router.post(
    "/save-habits",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid or empty habit list"}},
    summary="Link habits to the current user",
)
def save_habits(
    request_data: SaveHabitsRequest,
    claims: SessionClaims = Depends(get_current_claims),
    service: HabitService = Depends(get_habit_service),
) -> MessageResponse:
    try:
        service.save_habits(claims.user_id, request_data.habits)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    return MessageResponse(message="Habits saved successfully!")


@router.get(
    "/user-habits",
    response_model=UserHabitsResponse,
    summary="List the current user's habits",
)
def user_habits(
    claims: SessionClaims = Depends(get_current_claims),
    service: HabitService = Depends(get_habit_service),
) -> UserHabitsResponse:
    return UserHabitsResponse(habits=service.list_user_habits(claims.user_id))
