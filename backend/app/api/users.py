"""Current-user API endpoints."""

from fastapi import APIRouter, Depends, Request

from backend.app.api.auth import get_current_user
from backend.app.api.entries import to_entry_response
from backend.app.models.user import User
from backend.app.schemas.user import AccountDeleteResponse, UserProfileResponse
from backend.app.schemas.vote import VoteResponse
from backend.app.services.contest import ContestService, get_contest_service

router = APIRouter(prefix="/user", tags=["users"])


@router.get("/me", response_model=UserProfileResponse)
async def get_me(
    request: Request,
    current_user: User = Depends(get_current_user),
    service: ContestService = Depends(get_contest_service),
) -> UserProfileResponse:
    """Get the current user with their entry, if any."""
    user, entry = service.get_user(current_user.id)

    return UserProfileResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        created_at=user.created_at,
        has_entry=entry is not None,
        entry=to_entry_response(entry, request, service, user.username) if entry else None,
    )


@router.get("/votes", response_model=list[VoteResponse])
async def get_my_votes(
    current_user: User = Depends(get_current_user),
    service: ContestService = Depends(get_contest_service),
) -> list[VoteResponse]:
    """Get the current user's voting history."""
    return [VoteResponse.model_validate(vote) for vote in service.list_votes_by_user(current_user.id)]


@router.delete("/me", response_model=AccountDeleteResponse)
async def delete_me(
    current_user: User = Depends(get_current_user),
    service: ContestService = Depends(get_contest_service),
) -> AccountDeleteResponse:
    """Delete the current user's account, entry and votes."""
    report = await service.delete_account(current_user.id, current_user.id)

    return AccountDeleteResponse(
        message="Account deleted successfully",
        removed_entry_ids=report.removed_entry_ids,
        removed_vote_ids=report.removed_vote_ids,
    )
