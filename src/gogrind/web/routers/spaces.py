from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from gogrind.core.modules.space.models import Announcement, Space
from gogrind.web.deps import AppDep, AuthTokenDep
from gogrind.web.openapi import ErrorResponse

router = APIRouter(tags=["spaces"])


class CreateSpaceRequest(BaseModel):
    """Request to create a new space."""

    name: str = Field(..., description="Space name")
    description: str = Field(..., description="What the space is about")
    skill: str = Field(..., description="Skill the members practice")
    max_members: int | None = Field(None, description="Member limit, defaults to 10", ge=1)

    model_config = {
        "json_schema_extra": {
            "examples": [{"name": "Calculus crew", "description": "Daily problem sets", "skill": "Math", "max_members": 8}]
        }
    }


class CreateAnnouncementRequest(BaseModel):
    title: str = Field(..., description="Announcement title")
    content: str = Field(..., description="Announcement body")


@router.get(
    "/spaces",
    summary="List active spaces",
    description="Get all active spaces, newest first.",
    operation_id="listSpaces",
    responses={
        200: {"description": "List of spaces"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_spaces(app: AppDep, auth_token: AuthTokenDep) -> list[Space]:
    return await app.get_active_spaces(auth_token)


@router.get(
    "/spaces/my-spaces",
    summary="List my spaces",
    description="Get all spaces where the authenticated user is a member.",
    operation_id="listMySpaces",
    responses={
        200: {"description": "List of spaces"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_my_spaces(app: AppDep, auth_token: AuthTokenDep) -> list[Space]:
    return await app.get_my_spaces(auth_token)


@router.post(
    "/spaces",
    summary="Create new space",
    description="Create a new space. The authenticated user becomes its creator and first member.",
    operation_id="createSpace",
    status_code=201,
    responses={
        201: {"description": "Space created successfully"},
        400: {"model": ErrorResponse, "description": "Invalid request data"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def create_space(req: CreateSpaceRequest, app: AppDep, auth_token: AuthTokenDep) -> Space:
    return await app.create_space(auth_token, req.name, req.description, req.skill, req.max_members)


@router.get(
    "/spaces/{space_id}",
    summary="Get space",
    operation_id="getSpace",
    responses={
        200: {"description": "Space details"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Space not found"},
    },
)
async def get_space(space_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> Space:
    return await app.get_space(auth_token, space_id)


@router.delete(
    "/spaces/{space_id}",
    summary="Delete space",
    description="Delete a space. Only the creator can delete it; recorded focus sessions are kept.",
    operation_id="deleteSpace",
    status_code=204,
    responses={
        204: {"description": "Space deleted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the creator"},
        404: {"model": ErrorResponse, "description": "Space not found"},
    },
)
async def delete_space(space_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.delete_space(auth_token, space_id)


@router.post(
    "/spaces/{space_id}/request-join",
    summary="Request to join",
    description="Ask to become a member. The creator is notified.",
    operation_id="requestToJoinSpace",
    responses={
        200: {"description": "Request recorded"},
        400: {"model": ErrorResponse, "description": "Already a member, already requested or space full"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Space not found"},
    },
)
async def request_to_join(space_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> Space:
    return await app.request_to_join_space(auth_token, space_id)


@router.post(
    "/spaces/{space_id}/approve/{user_id}",
    summary="Approve join request",
    operation_id="approveJoinRequest",
    responses={
        200: {"description": "User added to members"},
        400: {"model": ErrorResponse, "description": "No pending request or space full"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the creator"},
        404: {"model": ErrorResponse, "description": "Space or user not found"},
    },
)
async def approve_join_request(space_id: UUID, user_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> Space:
    return await app.approve_join_request(auth_token, space_id, user_id)


@router.post(
    "/spaces/{space_id}/reject/{user_id}",
    summary="Reject join request",
    operation_id="rejectJoinRequest",
    responses={
        200: {"description": "Request removed"},
        400: {"model": ErrorResponse, "description": "No pending request"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the creator"},
        404: {"model": ErrorResponse, "description": "Space not found"},
    },
)
async def reject_join_request(space_id: UUID, user_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> Space:
    return await app.reject_join_request(auth_token, space_id, user_id)


@router.delete(
    "/spaces/{space_id}/leave",
    summary="Leave space",
    description="Leave a space. Any stream presence in it ends first. The creator cannot leave.",
    operation_id="leaveSpace",
    status_code=204,
    responses={
        204: {"description": "Left the space"},
        400: {"model": ErrorResponse, "description": "Creator or not a member"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Space not found"},
    },
)
async def leave_space(space_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.leave_space(auth_token, space_id)


@router.post(
    "/spaces/{space_id}/announcements",
    summary="Post announcement",
    operation_id="createAnnouncement",
    status_code=201,
    responses={
        201: {"description": "Announcement created"},
        400: {"model": ErrorResponse, "description": "Missing title or content"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the creator"},
        404: {"model": ErrorResponse, "description": "Space not found"},
    },
)
async def create_announcement(
    space_id: UUID, req: CreateAnnouncementRequest, app: AppDep, auth_token: AuthTokenDep
) -> Announcement:
    return await app.create_announcement(auth_token, space_id, req.title, req.content)


@router.delete(
    "/spaces/{space_id}/announcements/{announcement_id}",
    summary="Delete announcement",
    operation_id="deleteAnnouncement",
    status_code=204,
    responses={
        204: {"description": "Announcement deleted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Neither creator nor author"},
        404: {"model": ErrorResponse, "description": "Space or announcement not found"},
    },
)
async def delete_announcement(space_id: UUID, announcement_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.delete_announcement(auth_token, space_id, announcement_id)
