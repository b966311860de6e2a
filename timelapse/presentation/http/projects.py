"""Projects API endpoints."""

from fastapi import APIRouter, Depends, status

from timelapse.application.services import ProjectService
from timelapse.infrastructure.auth import AuthContext, get_auth
from timelapse.presentation.http.dependencies import (
    get_project_service,
    json_body,
    project_name_param,
)
from timelapse.presentation.http.schemas import ProjectRequest, ProjectResponse

router = APIRouter(prefix="/projects")


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    auth: AuthContext = Depends(get_auth),
    request: ProjectRequest = Depends(json_body(ProjectRequest)),
    projects: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Create a new project. Names are unique per user."""
    project = await projects.create_project(
        auth.user_id,
        name=request.name,
        description=request.description,
        billable=request.billable,
    )
    return ProjectResponse.from_entity(project)


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    auth: AuthContext = Depends(get_auth),
    projects: ProjectService = Depends(get_project_service),
) -> list[ProjectResponse]:
    return [ProjectResponse.from_entity(p) for p in await projects.list_projects(auth.user_id)]


@router.get("/{project_name}", response_model=ProjectResponse)
async def get_project(
    auth: AuthContext = Depends(get_auth),
    project_name: str = Depends(project_name_param),
    projects: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    project = await projects.get_project(auth.user_id, project_name)
    return ProjectResponse.from_entity(project)


@router.put("/{project_name}", response_model=ProjectResponse)
async def update_project(
    auth: AuthContext = Depends(get_auth),
    project_name: str = Depends(project_name_param),
    request: ProjectRequest = Depends(json_body(ProjectRequest)),
    projects: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Replace a project record; the body name may rename it."""
    project = await projects.update_project(
        auth.user_id,
        project_name,
        new_name=request.name,
        description=request.description,
        billable=request.billable,
    )
    return ProjectResponse.from_entity(project)
