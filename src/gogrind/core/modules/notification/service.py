from typing import Any
from uuid import UUID

import structlog
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from gogrind.core.core import Service
from gogrind.core.modules.notification.models import Notification, NotificationType, metadata_filter
from gogrind.core.pagination import PaginationResult
from gogrind.errors import NotFoundError

logger = structlog.get_logger(__name__)


class NotificationService(Service):
    """Creates, lists and resolves user notifications."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("notifications")

    async def on_start(self) -> None:
        await self._collection.create_index([("recipient_id", 1), ("created_at", -1)])
        await self._collection.create_index([("recipient_id", 1), ("read", 1)])

    async def create_notification(
        self,
        recipient_id: UUID,
        sender_id: UUID,
        type: NotificationType,
        message: str,
        related_space_id: UUID | None = None,
        related_session_id: UUID | None = None,
        metadata: BaseModel | None = None,
    ) -> Notification:
        notification = self._build(recipient_id, sender_id, type, message, related_space_id, related_session_id, metadata)
        await self._collection.insert_one(notification.to_mongo())
        logger.debug("notification_created", recipient_id=recipient_id, type=type)
        return notification

    async def notify_many(
        self,
        recipient_ids: list[UUID],
        sender_id: UUID,
        type: NotificationType,
        message: str,
        related_space_id: UUID | None = None,
        related_session_id: UUID | None = None,
        metadata: BaseModel | None = None,
    ) -> int:
        """Send the same notification to several recipients, returns how many were sent."""
        if not recipient_ids:
            return 0
        notifications = [
            self._build(recipient_id, sender_id, type, message, related_space_id, related_session_id, metadata)
            for recipient_id in recipient_ids
        ]
        await self._collection.insert_many([notification.to_mongo() for notification in notifications])
        logger.debug("notifications_created", recipients=len(notifications), type=type)
        return len(notifications)

    @staticmethod
    def _build(
        recipient_id: UUID,
        sender_id: UUID,
        type: NotificationType,
        message: str,
        related_space_id: UUID | None,
        related_session_id: UUID | None,
        metadata: BaseModel | None,
    ) -> Notification:
        return Notification.model_validate(
            {
                "recipient_id": recipient_id,
                "sender_id": sender_id,
                "type": type,
                "message": message,
                "related_space_id": related_space_id,
                "related_session_id": related_session_id,
                "metadata": metadata.model_dump() if metadata is not None else None,
            }
        )

    async def delete_matching(
        self, recipient_id: UUID, sender_id: UUID, type: NotificationType, metadata: BaseModel
    ) -> bool:
        """Delete the notification correlated with the given metadata, if it still exists."""
        query: dict[str, Any] = {"recipient_id": recipient_id, "sender_id": sender_id, "type": type}
        query.update(metadata_filter(metadata))
        result = await self._collection.delete_one(query)
        return result.deleted_count > 0

    async def get_notifications(self, recipient_id: UUID, limit: int = 20, offset: int = 0) -> PaginationResult[Notification]:
        """Get paginated notifications for recipient, newest first."""
        query = {"recipient_id": recipient_id}
        total = await self._collection.count_documents(query)
        cursor = self._collection.find(query).sort("created_at", -1).skip(offset).limit(limit)
        items = await Notification.list_cursor(cursor)
        return PaginationResult(items=items, total=total, limit=limit, offset=offset)

    async def get_unread_count(self, recipient_id: UUID) -> int:
        return await self._collection.count_documents({"recipient_id": recipient_id, "read": False})

    async def mark_as_read(self, notification_id: UUID, recipient_id: UUID) -> Notification:
        doc = await self._collection.find_one_and_update(
            {"_id": notification_id, "recipient_id": recipient_id},
            {"$set": {"read": True}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("Notification not found")
        return Notification.model_validate(doc)

    async def mark_all_as_read(self, recipient_id: UUID) -> int:
        result = await self._collection.update_many({"recipient_id": recipient_id, "read": False}, {"$set": {"read": True}})
        return result.modified_count

    async def delete_notification(self, notification_id: UUID, recipient_id: UUID) -> None:
        result = await self._collection.delete_one({"_id": notification_id, "recipient_id": recipient_id})
        if result.deleted_count == 0:
            raise NotFoundError("Notification not found")
