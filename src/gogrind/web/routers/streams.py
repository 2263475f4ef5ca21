from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from gogrind.core.modules.focus.models import FocusSession
from gogrind.core.modules.space.models import Space
from gogrind.web.deps import AppDep, AuthTokenDep
from gogrind.web.openapi import ErrorResponse

router = APIRouter(tags=["streams"])


class JoinStreamRequest(BaseModel):
    """Join the stream room and open a focus session."""

    grinding_topic: str = Field(..., description="What the user works on")
    target_duration: int = Field(..., description="Planned focus time in minutes, at least 5")
    tasks: list[str] = Field(default_factory=list, description="Initial task titles")
    is_video_enabled: bool = Field(False, description="Camera on")
    is_audio_enabled: bool = Field(False, description="Microphone on")

    model_config = {
        "json_schema_extra": {"examples": [{"grinding_topic": "algebra", "target_duration": 30, "tasks": ["Chapter 3"]}]}
    }


class JoinStreamResponse(BaseModel):
    space: Space = Field(..., description="Space after joining")
    session: FocusSession = Field(..., description="Focus session opened by the join")


class UpdateTopicRequest(BaseModel):
    grinding_topic: str = Field(..., description="New topic")


class ToggleMediaRequest(BaseModel):
    """Media flags; anything that is not a boolean leaves the flag unchanged."""

    is_video_enabled: Any = Field(None, description="New camera state")
    is_audio_enabled: Any = Field(None, description="New microphone state")


@router.post(
    "/spaces/{space_id}/streams/join",
    summary="Join stream",
    description="Enter the stream room. Only the creator can open it the first time.",
    operation_id="joinStream",
    responses={
        200: {"description": "Joined, focus session started"},
        400: {"model": ErrorResponse, "description": "Invalid topic or duration, or already in the stream"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not a member, or stream not started by the creator"},
        404: {"model": ErrorResponse, "description": "Space not found"},
        409: {"model": ErrorResponse, "description": "Concurrent update, retry"},
    },
)
async def join_stream(space_id: UUID, req: JoinStreamRequest, app: AppDep, auth_token: AuthTokenDep) -> JoinStreamResponse:
    space, session = await app.join_stream(
        auth_token,
        space_id,
        req.grinding_topic,
        req.target_duration,
        req.tasks,
        req.is_video_enabled,
        req.is_audio_enabled,
    )
    return JoinStreamResponse(space=space, session=session)


@router.delete(
    "/spaces/{space_id}/streams/leave",
    summary="Leave stream",
    description="Leave the stream room and complete the focus session.",
    operation_id="leaveStream",
    responses={
        200: {"description": "Left the stream"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Space not found"},
    },
)
async def leave_stream(space_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> Space:
    return await app.leave_stream(auth_token, space_id)


@router.delete(
    "/spaces/{space_id}/streams/{user_id}",
    summary="Remove user from stream",
    description="Creator removes a user from the stream room. The user is notified.",
    operation_id="removeFromStream",
    responses={
        200: {"description": "User removed"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the creator"},
        404: {"model": ErrorResponse, "description": "Space not found"},
    },
)
async def remove_from_stream(
    space_id: UUID,
    user_id: UUID,
    app: AppDep,
    auth_token: AuthTokenDep,
    reason: str | None = Query(None, description="Optional reason shown to the removed user"),
) -> Space:
    return await app.remove_from_stream(auth_token, space_id, user_id, reason)


@router.patch(
    "/spaces/{space_id}/streams/topic",
    summary="Update grinding topic",
    operation_id="updateGrindingTopic",
    responses={
        200: {"description": "Topic updated"},
        400: {"model": ErrorResponse, "description": "Empty topic"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Space not found or not in the stream"},
    },
)
async def update_topic(space_id: UUID, req: UpdateTopicRequest, app: AppDep, auth_token: AuthTokenDep) -> Space:
    return await app.update_grinding_topic(auth_token, space_id, req.grinding_topic)


@router.patch(
    "/spaces/{space_id}/streams/media",
    summary="Toggle media",
    operation_id="toggleStreamMedia",
    responses={
        200: {"description": "Media state updated"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Space not found or not in the stream"},
    },
)
async def toggle_media(space_id: UUID, req: ToggleMediaRequest, app: AppDep, auth_token: AuthTokenDep) -> Space:
    return await app.toggle_stream_media(auth_token, space_id, req.is_video_enabled, req.is_audio_enabled)
