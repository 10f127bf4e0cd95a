"""Authentication endpoints: registration, login and the bearer-token dependency."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.app.core.exceptions import ReasonCode, UnauthorizedError
from backend.app.models.user import User
from backend.app.schemas.user import AuthResponse, UserLogin, UserPublic, UserRegister
from backend.app.services.contest import ContestService, get_contest_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

bearer_scheme = HTTPBearer(auto_error=False)


def client_address(request: Request) -> str | None:
    """Network address of the caller, recorded for audit."""
    return request.client.host if request.client else None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    service: ContestService = Depends(get_contest_service),
) -> User:
    """
    Extract the bearer token from the Authorization header and return the User.

    Raises:
        UnauthorizedError: If no token is present or it does not resolve to a live user
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(message="Access token required", reason=ReasonCode.TOKEN_REQUIRED)
    return service.authenticate(credentials.credentials)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    request: Request,
    service: ContestService = Depends(get_contest_service),
) -> AuthResponse:
    """Register a new account and log it in."""
    user = await service.register(
        username=user_data.username,
        email=user_data.email,
        password=user_data.password,
        origin_address=client_address(request),
    )

    return AuthResponse(
        message="User registered successfully",
        token=service.issue_token(user),
        user=UserPublic.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    service: ContestService = Depends(get_contest_service),
) -> AuthResponse:
    """Log in with email and password."""
    user, token = await service.login(credentials.email, credentials.password)

    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserPublic.model_validate(user),
    )
