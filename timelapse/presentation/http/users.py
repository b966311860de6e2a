"""Current user endpoint."""

from fastapi import APIRouter, Depends

from timelapse.infrastructure.auth import AuthContext, get_auth
from timelapse.presentation.http.schemas import UserResponse

router = APIRouter()


@router.get("/self", response_model=UserResponse)
async def get_self(auth: AuthContext = Depends(get_auth)) -> UserResponse:
    """Return the user the bearer token resolves to."""
    return UserResponse.from_entity(auth.user)
