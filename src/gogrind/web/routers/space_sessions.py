from datetime import datetime
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from gogrind.core.modules.space.models import Space, SpaceSession, SpaceSessionStatus
from gogrind.web.deps import AppDep, AuthTokenDep
from gogrind.web.openapi import ErrorResponse

router = APIRouter(tags=["space-sessions"])


class CreateSpaceSessionRequest(BaseModel):
    title: str = Field(..., description="Session title")
    description: str = Field("", description="Session description")
    scheduled_at: datetime = Field(..., description="Planned start")
    duration: int = Field(60, description="Planned length in minutes")


class UpdateSpaceSessionRequest(BaseModel):
    """Status change and/or stream URL; omitted fields are left unchanged."""

    status: SpaceSessionStatus | None = Field(None, description="New status")
    stream_url: str | None = Field(None, description="Link to the hosted stream")


@router.post(
    "/spaces/{space_id}/sessions",
    summary="Schedule space session",
    operation_id="createSpaceSession",
    status_code=201,
    responses={
        201: {"description": "Session scheduled"},
        400: {"model": ErrorResponse, "description": "Invalid title or duration"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the creator"},
        404: {"model": ErrorResponse, "description": "Space not found"},
    },
)
async def create_space_session(
    space_id: UUID, req: CreateSpaceSessionRequest, app: AppDep, auth_token: AuthTokenDep
) -> SpaceSession:
    return await app.create_space_session(auth_token, space_id, req.title, req.description, req.scheduled_at, req.duration)


@router.patch(
    "/spaces/{space_id}/sessions/{session_id}",
    summary="Update space session",
    description=(
        "Change the status of a space session. Going live notifies the members; "
        "completing or cancelling a live session closes every participant and clears its streams."
    ),
    operation_id="updateSpaceSession",
    responses={
        200: {"description": "Session updated"},
        400: {"model": ErrorResponse, "description": "Invalid transition or another session is live"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the creator"},
        404: {"model": ErrorResponse, "description": "Space or session not found"},
        409: {"model": ErrorResponse, "description": "Concurrent update, retry"},
    },
)
async def update_space_session(
    space_id: UUID, session_id: UUID, req: UpdateSpaceSessionRequest, app: AppDep, auth_token: AuthTokenDep
) -> Space:
    return await app.update_space_session(auth_token, space_id, session_id, req.status, req.stream_url)
