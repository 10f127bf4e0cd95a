"""Admin endpoints for clearing contest data and auditing origin addresses.

All routes require the ``X-Admin-Password`` header. They are disabled when no
admin password is configured.
"""

import secrets

from fastapi import APIRouter, Depends, Header

from backend.app.core.config import settings
from backend.app.core.exceptions import ForbiddenError, ReasonCode
from backend.app.schemas.admin import ClearResponse, OriginResponse
from backend.app.services.contest import ContestService, get_contest_service


async def require_admin(x_admin_password: str | None = Header(None)) -> None:
    """Reject the request unless it carries the configured admin password."""
    expected = settings.admin_password
    if not expected or not x_admin_password or not secrets.compare_digest(
        x_admin_password.encode("utf-8"), expected.encode("utf-8")
    ):
        raise ForbiddenError(message="Admin access required", reason=ReasonCode.ADMIN_REQUIRED)


router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.delete("/clear/entries", response_model=ClearResponse)
async def clear_entries(service: ContestService = Depends(get_contest_service)) -> ClearResponse:
    """Delete all entries (with their images and votes)."""
    report = await service.clear_entries()
    return ClearResponse(
        message="All entries cleared successfully",
        removed_entries=len(report.removed_entry_ids),
        removed_votes=len(report.removed_vote_ids),
    )


@router.delete("/clear/votes", response_model=ClearResponse)
async def clear_votes(service: ContestService = Depends(get_contest_service)) -> ClearResponse:
    """Delete all votes and reset every entry's vote count."""
    report = await service.clear_votes()
    return ClearResponse(
        message="All votes cleared successfully",
        removed_votes=len(report.removed_vote_ids),
    )


@router.delete("/clear/all", response_model=ClearResponse)
async def clear_all(service: ContestService = Depends(get_contest_service)) -> ClearResponse:
    """Delete all entries and votes."""
    report = await service.clear_all()
    return ClearResponse(
        message="All entries and votes cleared successfully",
        removed_entries=len(report.removed_entry_ids),
        removed_votes=len(report.removed_vote_ids),
    )


@router.get("/origins", response_model=list[OriginResponse])
async def list_origins(service: ContestService = Depends(get_contest_service)) -> list[OriginResponse]:
    """Origin addresses recorded for every user, entry and vote."""
    return [OriginResponse.model_validate(record) for record in service.list_origins()]
