from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from gogrind.core.modules.notification.models import Notification
from gogrind.core.pagination import PaginationResult
from gogrind.web.deps import AppDep, AuthTokenDep
from gogrind.web.openapi import ErrorResponse

router = APIRouter(tags=["notifications"])


class UnreadCountResponse(BaseModel):
    count: int = Field(..., description="Number of unread notifications", ge=0)


@router.get(
    "/notifications",
    summary="List notifications",
    description="Get notifications of the current user, newest first.",
    operation_id="listNotifications",
    responses={
        200: {"description": "Paginated notifications"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_notifications(
    app: AppDep,
    auth_token: AuthTokenDep,
    limit: int = Query(20, ge=1, le=100, description="Page size"),
    offset: int = Query(0, ge=0, description="Items to skip"),
) -> PaginationResult[Notification]:
    return await app.get_notifications(auth_token, limit, offset)


@router.get(
    "/notifications/unread-count",
    summary="Count unread notifications",
    operation_id="getUnreadNotificationCount",
    responses={
        200: {"description": "Unread count"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_unread_count(app: AppDep, auth_token: AuthTokenDep) -> UnreadCountResponse:
    return UnreadCountResponse(count=await app.get_unread_notification_count(auth_token))


@router.patch(
    "/notifications/read-all",
    summary="Mark all notifications read",
    operation_id="markAllNotificationsRead",
    status_code=204,
    responses={
        204: {"description": "All notifications marked as read"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def mark_all_read(app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.mark_all_notifications_read(auth_token)


@router.patch(
    "/notifications/{notification_id}/read",
    summary="Mark notification read",
    operation_id="markNotificationRead",
    responses={
        200: {"description": "Notification marked as read"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Notification not found"},
    },
)
async def mark_read(notification_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> Notification:
    return await app.mark_notification_read(auth_token, notification_id)


@router.delete(
    "/notifications/{notification_id}",
    summary="Delete notification",
    operation_id="deleteNotification",
    status_code=204,
    responses={
        204: {"description": "Notification deleted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Notification not found"},
    },
)
async def delete_notification(notification_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.delete_notification(auth_token, notification_id)
