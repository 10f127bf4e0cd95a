"""User-related schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from backend.app.schemas.entry import EntryResponse

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserRegister(BaseModel):
    """Schema for account registration."""

    username: str = Field(
        ...,
        min_length=3,
        description="Username (at least 3 characters)"
    )
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Organisational email address")
    password: str = Field(
        ...,
        min_length=6,
        description="Password (at least 6 characters)"
    )


class UserLogin(BaseModel):
    """Schema for login."""

    email: str = Field(..., pattern=EMAIL_PATTERN, description="Registered email address")
    password: str = Field(..., min_length=1, description="Password")


class UserPublic(BaseModel):
    """Public view of a user."""

    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    email: str = Field(..., description="Email address")

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    """Response for registration and login."""

    message: str = Field(..., description="Human-readable outcome")
    token: str = Field(..., description="Bearer access token")
    user: UserPublic = Field(..., description="Authenticated user")


class UserProfileResponse(UserPublic):
    """Current user with their entry summary."""

    has_entry: bool = Field(..., description="Whether the user has submitted an entry")
    entry: EntryResponse | None = Field(None, description="The user's entry, if any")
    created_at: datetime = Field(..., description="Registration timestamp")


class AccountDeleteResponse(BaseModel):
    """Response for account deletion."""

    message: str
    removed_entry_ids: list[int] = Field(default_factory=list)
    removed_vote_ids: list[int] = Field(default_factory=list)
