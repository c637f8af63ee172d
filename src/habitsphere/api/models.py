"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field names use the camelCase keys clients send; semantic checks (email
syntax, password policy, matching confirmations) live in the domain layer.
"""

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)
    email: str
    password: str
    confirm_email: str = Field(..., alias="confirmEmail")
    confirm_password: str = Field(..., alias="confirmPassword")


class MessageResponse(BaseModel):
    """Response carrying a human-readable message."""

    message: str


class VerifyEmailRequest(BaseModel):
    """Request model for email verification."""

    email: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, description="6-digit verification code")


class TokenResponse(BaseModel):
    """Response model for a successful verification."""

    message: str
    token: str


class LoginRequest(BaseModel):
    """Request model for sign-in."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserProfile(BaseModel):
    """Public user fields returned on login."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str


class LoginResponse(BaseModel):
    """Response model for a successful sign-in."""

    message: str
    token: str
    user: UserProfile


class UpdateUsernameRequest(BaseModel):
    """Request model for setting a username."""

    username: str


class SaveHabitsRequest(BaseModel):
    """Request model for linking habits to the current user."""

    habits: list[str] = Field(..., min_length=1, description="Habit names")


class UserHabitsResponse(BaseModel):
    """Habit names the current user has."""

    habits: list[str]


class HabitResponse(BaseModel):
    """A habit from the catalogue."""

    name: str
    description: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
