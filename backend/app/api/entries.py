"""Entry API endpoints."""

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status

from backend.app.api.auth import client_address, get_current_user
from backend.app.models.entry import Entry
from backend.app.models.user import User
from backend.app.schemas.entry import EntryCreatedResponse, EntryDeleteResponse, EntryResponse
from backend.app.services.contest import ContestService, get_contest_service

router = APIRouter(prefix="/entries", tags=["entries"])


def to_entry_response(
    entry: Entry,
    request: Request,
    service: ContestService,
    creator: str | None = None,
) -> EntryResponse:
    """
    Convert an Entry record to EntryResponse.

    Args:
        entry: Entry record
        request: Current request, used to build the absolute image URL
        service: Contest service (for the media store)
        creator: Owner's username

    Returns:
        EntryResponse object
    """
    image_url = None
    if entry.image_ref:
        image_url = str(request.base_url).rstrip("/") + service.media.url_path(entry.image_ref)

    return EntryResponse(
        id=entry.id,
        name=entry.name,
        description=entry.description,
        image_url=image_url,
        votes=entry.votes,
        user_id=entry.user_id,
        creator=creator,
        created_at=entry.created_at,
    )


@router.get("", response_model=list[EntryResponse])
async def list_entries(
    request: Request,
    service: ContestService = Depends(get_contest_service),
) -> list[EntryResponse]:
    """List all entries with their creator's name."""
    return [
        to_entry_response(entry, request, service, creator)
        for entry, creator in service.list_entries()
    ]


@router.post("", response_model=EntryCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    request: Request,
    name: str = Form(..., min_length=1),
    description: str = Form(..., min_length=1),
    image: UploadFile | None = File(None),
    current_user: User = Depends(get_current_user),
    service: ContestService = Depends(get_contest_service),
) -> EntryCreatedResponse:
    """
    Submit the current user's entry.

    The optional image is stored before the one-entry-per-user check; a
    rejected submission removes it again.
    """
    image_ref = None
    if image is not None and image.filename:
        # Read one byte past the limit so oversized uploads are detected without reading them whole
        data = await image.read(service.media.max_size + 1)
        image_ref = service.media.save(image.filename, image.content_type, data)

    entry = await service.create_entry(
        user_id=current_user.id,
        name=name,
        description=description,
        image_ref=image_ref,
        origin_address=client_address(request),
    )

    return EntryCreatedResponse(
        message="Entry created successfully",
        entry=to_entry_response(entry, request, service, current_user.username),
    )


@router.delete("/{entry_id}", response_model=EntryDeleteResponse)
async def delete_entry(
    entry_id: int,
    current_user: User = Depends(get_current_user),
    service: ContestService = Depends(get_contest_service),
) -> EntryDeleteResponse:
    """Delete the current user's entry along with its image and votes."""
    report = await service.delete_entry(current_user.id, entry_id)

    return EntryDeleteResponse(
        message="Entry deleted successfully",
        entry_id=entry_id,
        removed_vote_ids=report.removed_vote_ids,
        media_failures=report.media_failures,
    )
