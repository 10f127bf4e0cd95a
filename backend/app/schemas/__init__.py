"""Pydantic schemas for API request/response validation."""

from backend.app.schemas.entry import EntryResponse, EntryCreatedResponse, EntryDeleteResponse
from backend.app.schemas.user import (
    UserRegister,
    UserLogin,
    UserPublic,
    AuthResponse,
    UserProfileResponse,
    AccountDeleteResponse,
)
from backend.app.schemas.vote import VoteResponse, VoteResultResponse
from backend.app.schemas.admin import ClearResponse, OriginResponse

__all__ = [
    "EntryResponse",
    "EntryCreatedResponse",
    "EntryDeleteResponse",
    "UserRegister",
    "UserLogin",
    "UserPublic",
    "AuthResponse",
    "UserProfileResponse",
    "AccountDeleteResponse",
    "VoteResponse",
    "VoteResultResponse",
    "ClearResponse",
    "OriginResponse",
]
