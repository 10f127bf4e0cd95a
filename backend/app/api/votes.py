"""Vote API endpoints."""

from fastapi import APIRouter, Depends, Request

from backend.app.api.auth import client_address, get_current_user
from backend.app.models.user import User
from backend.app.schemas.vote import VoteResultResponse
from backend.app.services.contest import ContestService, get_contest_service

router = APIRouter(prefix="/entries", tags=["votes"])


@router.post("/{entry_id}/vote", response_model=VoteResultResponse)
async def vote_entry(
    entry_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: ContestService = Depends(get_contest_service),
) -> VoteResultResponse:
    """
    Vote for an entry.

    Voting twice for the same entry, or for one's own entry, is rejected.
    """
    new_count = await service.cast_vote(current_user.id, entry_id, client_address(request))
    entry = service.db.entries.find_by_id(entry_id)

    return VoteResultResponse(
        message=f"Vote recorded for {entry.name}" if entry else "Vote recorded",
        entry_id=entry_id,
        new_vote_count=new_count,
    )


@router.delete("/{entry_id}/vote", response_model=VoteResultResponse)
async def unvote_entry(
    entry_id: int,
    current_user: User = Depends(get_current_user),
    service: ContestService = Depends(get_contest_service),
) -> VoteResultResponse:
    """Withdraw the current user's vote from an entry."""
    new_count = await service.withdraw_vote(current_user.id, entry_id)

    return VoteResultResponse(
        message="Vote removed",
        entry_id=entry_id,
        new_vote_count=new_count,
    )
