from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from gogrind.core.modules.focus.models import FocusSession
from gogrind.core.modules.focus.stats import SpaceStats
from gogrind.web.deps import AppDep, AuthTokenDep
from gogrind.web.openapi import ErrorResponse

router = APIRouter(tags=["sessions"])


class AddTaskRequest(BaseModel):
    title: str = Field(..., description="Task title")


class UpdateTaskRequest(BaseModel):
    is_completed: bool = Field(..., description="Completion state")


@router.get(
    "/sessions/current/{space_id}",
    summary="Get current focus session",
    description="Running focus session of the caller in a space, or of another member when user_id is given.",
    operation_id="getCurrentSession",
    responses={
        200: {"description": "Running session"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not a member of the space"},
        404: {"model": ErrorResponse, "description": "No active session"},
    },
)
async def get_current_session(
    space_id: UUID,
    app: AppDep,
    auth_token: AuthTokenDep,
    user_id: UUID | None = Query(None, description="Member to inspect, defaults to the caller"),
) -> FocusSession:
    return await app.get_current_session(auth_token, space_id, user_id)


@router.post(
    "/sessions/{session_id}/tasks",
    summary="Add task",
    operation_id="addSessionTask",
    status_code=201,
    responses={
        201: {"description": "Task added"},
        400: {"model": ErrorResponse, "description": "Empty title"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Active session not found"},
    },
)
async def add_task(session_id: UUID, req: AddTaskRequest, app: AppDep, auth_token: AuthTokenDep) -> FocusSession:
    return await app.add_session_task(auth_token, session_id, req.title)


@router.patch(
    "/sessions/{session_id}/tasks/{task_id}",
    summary="Update task",
    operation_id="updateSessionTask",
    responses={
        200: {"description": "Task updated"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Session or task not found"},
    },
)
async def update_task(
    session_id: UUID, task_id: UUID, req: UpdateTaskRequest, app: AppDep, auth_token: AuthTokenDep
) -> FocusSession:
    return await app.update_session_task(auth_token, session_id, task_id, req.is_completed)


@router.post(
    "/sessions/{session_id}/encourage",
    summary="Encourage participant",
    operation_id="encourageParticipant",
    responses={
        200: {"description": "Encouragement added"},
        400: {"model": ErrorResponse, "description": "Already encouraged"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def encourage(session_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> FocusSession:
    return await app.encourage_participant(auth_token, session_id)


@router.delete(
    "/sessions/{session_id}/encourage",
    summary="Remove encouragement",
    operation_id="removeEncouragement",
    responses={
        200: {"description": "Encouragement removed"},
        400: {"model": ErrorResponse, "description": "Not encouraged"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def remove_encouragement(session_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> FocusSession:
    return await app.remove_encouragement(auth_token, session_id)


@router.get(
    "/sessions/user/{user_id}",
    summary="List user sessions",
    description="Recent focus sessions of the caller or one of their friends.",
    operation_id="getUserSessions",
    responses={
        200: {"description": "Sessions, newest first"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not friends with this user"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def get_user_sessions(user_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> list[FocusSession]:
    return await app.get_user_sessions(auth_token, user_id)


@router.get(
    "/sessions/space/{space_id}/stats",
    summary="Space statistics",
    description="Aggregates over all completed focus sessions of the space.",
    operation_id="getSpaceSessionStats",
    responses={
        200: {"description": "Statistics"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not a member of the space"},
        404: {"model": ErrorResponse, "description": "Space not found"},
    },
)
async def get_space_stats(space_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> SpaceStats:
    return await app.get_space_session_stats(auth_token, space_id)
