"""Request parsing dependencies: JSON bodies and path segments."""

from collections.abc import Awaitable, Callable
from typing import TypeVar
from uuid import UUID

from fastapi import Depends, Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from timelapse.application.services import EntryService, ProjectService
from timelapse.domain.errors import (
    TimeEntryNotFoundError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from timelapse.domain.protocols import TimelapseRepository
from timelapse.infrastructure.repositories.provider import get_repository

ModelT = TypeVar("ModelT", bound=BaseModel)

JSON_MEDIA_TYPE = "application/json"


def require_json_content_type(content_type: str | None) -> None:
    """Accept ``application/json`` in UTF-8, or no content type at all.

    Raises:
        UnsupportedMediaTypeError: For any other media type or charset
    """
    if not content_type:
        return

    media_type, _, parameters = content_type.partition(";")
    media_type = media_type.strip().lower()
    if media_type and media_type != JSON_MEDIA_TYPE:
        raise UnsupportedMediaTypeError(details={"content_type": content_type})

    for parameter in parameters.split(";"):
        key, _, value = parameter.partition("=")
        if key.strip().lower() != "charset":
            continue
        if value.strip().strip('"').lower() != "utf-8":
            raise UnsupportedMediaTypeError(details={"content_type": content_type})


def json_body(model: type[ModelT]) -> Callable[[Request], Awaitable[ModelT]]:
    """Dependency factory parsing the request body into ``model``."""

    async def dependency(request: Request) -> ModelT:
        require_json_content_type(request.headers.get("content-type"))
        body = await request.body()
        try:
            return model.model_validate_json(body)
        except PydanticValidationError as exc:
            raise ValidationError(
                message=_describe(exc),
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    return dependency


def _describe(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    if error["type"] == "json_invalid":
        return "Bad Request: request body is not valid JSON"
    location = ".".join(str(part) for part in error["loc"])
    if not location:
        return f"Bad Request: {error['msg']}"
    return f"invalid attribute {location}: {error['msg']}"


def project_name_param(project_name: str) -> str:
    if not project_name.strip():
        raise ValidationError(message="project name in URL cannot be blank")
    return project_name


def entry_id_param(project_name: str, entry_id: str) -> UUID:
    """Parse the entry id path segment; an id that cannot exist is a 404."""
    if not entry_id.strip():
        raise ValidationError(message="entry ID in URL cannot be blank")
    try:
        return UUID(entry_id)
    except ValueError as exc:
        raise TimeEntryNotFoundError(
            message=f"Time entry not found: {project_name}/{entry_id}",
            details={"project": project_name, "entry_id": entry_id},
        ) from exc


def get_project_service(
    repository: TimelapseRepository = Depends(get_repository),
) -> ProjectService:
    return ProjectService(repository)


def get_entry_service(
    repository: TimelapseRepository = Depends(get_repository),
) -> EntryService:
    return EntryService(repository)
