from collections.abc import Callable
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from gogrind.core.core import Service
from gogrind.core.modules.notification.models import JoinRequestRef, NotificationType
from gogrind.core.modules.space import membership
from gogrind.core.modules.space.models import DEFAULT_MAX_MEMBERS, Announcement, Space
from gogrind.core.modules.user.models import User
from gogrind.errors import AccessDeniedError, ConflictError, NotFoundError, ValidationError
from gogrind.utils import now

logger = structlog.get_logger(__name__)


class SpaceService(Service):
    """Service for managing spaces.

    Spaces are read from the database on every request; every write goes
    through `mutate_space`, which replaces the document only if its version
    has not moved since it was read.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("spaces")

    async def on_start(self) -> None:
        await self._collection.create_index([("members", 1)])
        await self._collection.create_index([("is_active", 1), ("created_at", -1)])
        logger.debug("space_service_started")

    async def get_space(self, space_id: UUID) -> Space:
        doc = await self._collection.find_one({"_id": space_id})
        if doc is None:
            raise NotFoundError("Space not found")
        return Space.model_validate(doc)

    async def get_active_spaces(self) -> list[Space]:
        """Get all active spaces, newest first."""
        cursor = self._collection.find({"is_active": True}).sort("created_at", -1)
        return await Space.list_cursor(cursor)

    async def get_spaces_by_member(self, user_id: UUID) -> list[Space]:
        """Get active spaces the user created or belongs to."""
        query = {"$or": [{"creator_id": user_id}, {"members": user_id}], "is_active": True}
        cursor = self._collection.find(query).sort("created_at", -1)
        return await Space.list_cursor(cursor)

    async def mutate_space[T](self, space_id: UUID, mutation: Callable[[Space], T]) -> tuple[Space, T]:
        """Apply a mutation to a freshly loaded space and write it back atomically.

        The mutation may run several times and must not perform I/O. Errors it
        raises abort the write.
        """
        attempts = self.core.config.space_write_attempts
        for attempt in range(1, attempts + 1):
            space = await self.get_space(space_id)
            expected_version = space.version
            result = mutation(space)
            space.version = expected_version + 1

            res = await self._collection.replace_one({"_id": space_id, "version": expected_version}, space.to_mongo())
            if res.matched_count == 1:
                return space, result
            logger.debug("space_write_conflict", space_id=space_id, attempt=attempt)

        logger.warning("space_write_gave_up", space_id=space_id, attempts=attempts)
        raise ConflictError

    async def create_space(
        self, creator: User, name: str, description: str, skill: str, max_members: int | None = None
    ) -> Space:
        """Create a new space with the creator as its first member."""
        name, description, skill = name.strip(), description.strip(), skill.strip()
        if not name or not description or not skill:
            raise ValidationError("All fields are required")
        if max_members is not None and max_members < 1:
            raise ValidationError("A space needs room for at least one member")

        space = Space(
            name=name,
            description=description,
            skill=skill,
            creator_id=creator.id,
            members=[creator.id],
            max_members=max_members or DEFAULT_MAX_MEMBERS,
        )
        await self._collection.insert_one(space.to_mongo())
        logger.info("space_created", space_id=space.id, creator_id=creator.id)
        return space

    async def request_join(self, space_id: UUID, user: User) -> Space:
        space, _ = await self.mutate_space(space_id, lambda s: membership.request_join(s, user.id))
        await self.core.services.notification.create_notification(
            recipient_id=space.creator_id,
            sender_id=user.id,
            type=NotificationType.SPACE_JOIN_REQUEST,
            message=f"{user.full_name} wants to join {space.name}",
            related_space_id=space.id,
            metadata=JoinRequestRef(space_id=space.id),
        )
        return space

    async def approve_request(self, space_id: UUID, requester: User, user_id: UUID) -> Space:
        self.core.services.user.get_user(user_id)
        space, _ = await self.mutate_space(space_id, lambda s: membership.approve_request(s, requester.id, user_id))
        await self._resolve_join_request(space, requester, user_id, approved=True)
        return space

    async def reject_request(self, space_id: UUID, requester: User, user_id: UUID) -> Space:
        space, _ = await self.mutate_space(space_id, lambda s: membership.reject_request(s, requester.id, user_id))
        await self._resolve_join_request(space, requester, user_id, approved=False)
        return space

    async def _resolve_join_request(self, space: Space, requester: User, user_id: UUID, approved: bool) -> None:
        notifications = self.core.services.notification
        await notifications.delete_matching(
            recipient_id=space.creator_id,
            sender_id=user_id,
            type=NotificationType.SPACE_JOIN_REQUEST,
            metadata=JoinRequestRef(space_id=space.id),
        )
        if approved:
            notification_type = NotificationType.SPACE_JOIN_APPROVED
            message = f"Your request to join {space.name} was approved"
        else:
            notification_type = NotificationType.SPACE_JOIN_REJECTED
            message = f"Your request to join {space.name} was declined"
        await notifications.create_notification(
            recipient_id=user_id,
            sender_id=requester.id,
            type=notification_type,
            message=message,
            related_space_id=space.id,
        )

    async def leave_space(self, space_id: UUID, user_id: UUID) -> Space:
        space, _ = await self.mutate_space(space_id, lambda s: membership.leave(s, user_id))
        logger.info("space_left", space_id=space_id, user_id=user_id)
        return space

    async def create_announcement(self, space_id: UUID, author_id: UUID, title: str, content: str) -> Announcement:
        title, content = title.strip(), content.strip()
        if not title or not content:
            raise ValidationError("Title and content are required")

        def add(space: Space) -> Announcement:
            if space.creator_id != author_id:
                raise AccessDeniedError("Only the creator can post announcements")
            announcement = Announcement(title=title, content=content, created_by=author_id)
            space.announcements.insert(0, announcement)
            return announcement

        _, announcement = await self.mutate_space(space_id, add)
        return announcement

    async def delete_announcement(self, space_id: UUID, requester_id: UUID, announcement_id: UUID) -> None:
        def remove(space: Space) -> None:
            announcement = space.get_announcement(announcement_id)
            if announcement is None:
                raise NotFoundError("Announcement not found")
            if requester_id not in (space.creator_id, announcement.created_by):
                raise AccessDeniedError("Only the creator or the author can delete this announcement")
            space.announcements = [a for a in space.announcements if a.id != announcement_id]

        await self.mutate_space(space_id, remove)

    async def delete_space(self, space_id: UUID, requester_id: UUID) -> None:
        """Delete a space. Focus sessions recorded in it are kept as user history.

        Sessions of users still in the stream room are completed first.
        """
        space = await self.get_space(space_id)
        if space.creator_id != requester_id:
            raise AccessDeniedError("Only the creator can delete the space")

        at = now()
        for stream in space.active_streams:
            await self.core.services.focus.complete_session(stream.session_id, at)

        result = await self._collection.delete_one({"_id": space_id})
        if result.deleted_count == 0:
            raise NotFoundError("Space not found")
        logger.info("space_deleted", space_id=space_id, closed_streams=len(space.active_streams))
