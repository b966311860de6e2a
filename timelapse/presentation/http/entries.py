"""Time entries API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from timelapse.application.services import EntryDraft, EntryService
from timelapse.domain.errors import ValidationError
from timelapse.infrastructure.auth import AuthContext, get_auth
from timelapse.presentation.http.dependencies import (
    entry_id_param,
    get_entry_service,
    json_body,
    project_name_param,
)
from timelapse.presentation.http.schemas import TimeEntryRequest, TimeEntryResponse

router = APIRouter()


def _draft(request: TimeEntryRequest) -> EntryDraft:
    return EntryDraft(
        type=request.entry_type,
        start=request.start,
        end=request.end,
        breaks=request.breaks_delta,
        comment=request.comment,
    )


@router.get("/projects/{project_name}/entries", response_model=list[TimeEntryResponse])
async def list_project_entries(
    auth: AuthContext = Depends(get_auth),
    project_name: str = Depends(project_name_param),
    entries: EntryService = Depends(get_entry_service),
) -> list[TimeEntryResponse]:
    """Entries of one project, ordered by start."""
    result = await entries.list_project_entries(auth.user_id, project_name)
    return [TimeEntryResponse.from_entity(entry, project_name) for entry in result]


@router.post(
    "/projects/{project_name}/entries",
    response_model=TimeEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_entry(
    auth: AuthContext = Depends(get_auth),
    project_name: str = Depends(project_name_param),
    request: TimeEntryRequest = Depends(json_body(TimeEntryRequest)),
    entries: EntryService = Depends(get_entry_service),
) -> TimeEntryResponse:
    """Create an entry. Leaving ``end`` empty creates an open entry."""
    entry = await entries.create_entry(auth.user_id, project_name, _draft(request))
    return TimeEntryResponse.from_entity(entry, project_name)


@router.get("/projects/{project_name}/entries/{entry_id}", response_model=TimeEntryResponse)
async def get_entry(
    auth: AuthContext = Depends(get_auth),
    project_name: str = Depends(project_name_param),
    entry_id: UUID = Depends(entry_id_param),
    entries: EntryService = Depends(get_entry_service),
) -> TimeEntryResponse:
    entry = await entries.get_entry(auth.user_id, project_name, entry_id)
    return TimeEntryResponse.from_entity(entry, project_name)


@router.put("/projects/{project_name}/entries/{entry_id}", response_model=TimeEntryResponse)
async def update_entry(
    auth: AuthContext = Depends(get_auth),
    project_name: str = Depends(project_name_param),
    entry_id: UUID = Depends(entry_id_param),
    request: TimeEntryRequest = Depends(json_body(TimeEntryRequest)),
    entries: EntryService = Depends(get_entry_service),
) -> TimeEntryResponse:
    """Replace an entry. An empty body id means the id from the URL."""
    if request.id and request.id.lower() != str(entry_id):
        raise ValidationError(
            message="entry ID in URL does not match entry ID in body",
            details={"url_id": str(entry_id), "body_id": request.id},
        )
    entry = await entries.update_entry(auth.user_id, project_name, entry_id, _draft(request))
    return TimeEntryResponse.from_entity(entry, project_name)


@router.get("/entries", response_model=list[TimeEntryResponse])
async def list_user_entries(
    auth: AuthContext = Depends(get_auth),
    entries: EntryService = Depends(get_entry_service),
) -> list[TimeEntryResponse]:
    """Entries across all of the user's projects, ordered by start."""
    result = await entries.list_user_entries(auth.user_id)
    return [TimeEntryResponse.from_entity(item.entry, item.project.name) for item in result]
