from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from gogrind.core.core import Service
from gogrind.core.modules.focus.models import FocusSession, MediaUsage, Task
from gogrind.core.modules.focus.stats import SpaceStats, compute_space_stats
from gogrind.core.modules.notification.models import FocusSessionRef, NotificationType
from gogrind.core.modules.user.models import User
from gogrind.errors import NotFoundError, ValidationError
from gogrind.utils import now

logger = structlog.get_logger(__name__)

USER_SESSIONS_LIMIT = 50


class FocusService(Service):
    """Personal focus sessions: timers, tasks and encouragements."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("sessions")

    async def on_start(self) -> None:
        await self._collection.create_index([("user_id", 1), ("space_id", 1)])
        await self._collection.create_index([("space_id", 1), ("end_time", -1)])
        await self._collection.create_index([("user_id", 1), ("end_time", -1)])

    async def get_session(self, session_id: UUID) -> FocusSession:
        doc = await self._collection.find_one({"_id": session_id})
        if doc is None:
            raise NotFoundError("Session not found")
        return FocusSession.model_validate(doc)

    async def start_session(
        self,
        session_id: UUID,
        user_id: UUID,
        space_id: UUID,
        grinding_topic: str,
        target_duration: int,
        task_titles: list[str],
        video_enabled: bool,
        audio_enabled: bool,
        at: datetime,
    ) -> FocusSession:
        """Insert the focus session opened by a stream join."""
        session = FocusSession(
            id=session_id,
            user_id=user_id,
            space_id=space_id,
            grinding_topic=grinding_topic,
            target_duration=target_duration,
            start_time=at,
            tasks=[Task(title=title.strip()) for title in task_titles if title.strip()],
            media_usage=MediaUsage(video_enabled=video_enabled, audio_enabled=audio_enabled),
        )
        await self._collection.insert_one(session.to_mongo())
        logger.debug("focus_session_started", session_id=session_id, user_id=user_id, space_id=space_id)
        return session

    async def complete_session(self, session_id: UUID, at: datetime) -> FocusSession | None:
        """Stop the timer of a session; already completed or missing sessions are left alone."""
        doc = await self._collection.find_one({"_id": session_id})
        if doc is None:
            logger.warning("focus_session_missing", session_id=session_id)
            return None

        session = FocusSession.model_validate(doc)
        if session.is_completed:
            return session

        session.complete(at)
        await self._collection.update_one(
            {"_id": session_id, "is_completed": False},
            {
                "$set": {
                    "is_completed": True,
                    "end_time": session.end_time,
                    "actual_duration": session.actual_duration,
                }
            },
        )
        logger.info("focus_session_completed", session_id=session_id, actual_duration=session.actual_duration)
        return session

    async def record_media_usage(self, session_id: UUID, video_enabled: bool | None, audio_enabled: bool | None) -> None:
        """Remember that a medium was switched on at some point during the session."""
        update: dict[str, bool] = {}
        if video_enabled is True:
            update["media_usage.video_enabled"] = True
        if audio_enabled is True:
            update["media_usage.audio_enabled"] = True
        if update:
            await self._collection.update_one({"_id": session_id}, {"$set": update})

    async def get_current_session(self, user_id: UUID, space_id: UUID) -> FocusSession:
        doc = await self._collection.find_one(
            {"user_id": user_id, "space_id": space_id, "is_completed": False}, sort=[("start_time", -1)]
        )
        if doc is None:
            raise NotFoundError("No active session found")
        return FocusSession.model_validate(doc)

    async def get_user_sessions(self, user_id: UUID, limit: int = USER_SESSIONS_LIMIT) -> list[FocusSession]:
        cursor = self._collection.find({"user_id": user_id}).sort("start_time", -1).limit(limit)
        return await FocusSession.list_cursor(cursor)

    async def add_task(self, session_id: UUID, caller_id: UUID, title: str) -> FocusSession:
        if not title.strip():
            raise ValidationError("Task title is required")
        doc = await self._collection.find_one({"_id": session_id, "user_id": caller_id, "is_completed": False})
        if doc is None:
            raise NotFoundError("Active session not found")

        session = FocusSession.model_validate(doc)
        task = session.add_task(title)
        result = await self._collection.update_one(
            {"_id": session_id, "is_completed": False}, {"$push": {"tasks": task.model_dump()}}
        )
        if result.matched_count == 0:
            raise NotFoundError("Active session not found")
        return session

    async def update_task(self, session_id: UUID, task_id: UUID, caller_id: UUID, is_completed: bool) -> FocusSession:
        doc = await self._collection.find_one({"_id": session_id, "user_id": caller_id})
        if doc is None:
            raise NotFoundError("Session not found")

        session = FocusSession.model_validate(doc)
        task = session.set_task_completed(task_id, is_completed, now())
        await self._collection.update_one(
            {"_id": session_id, "tasks.id": task_id},
            {"$set": {"tasks.$.is_completed": task.is_completed, "tasks.$.completed_at": task.completed_at}},
        )
        return session

    async def encourage(self, session_id: UUID, caller: User) -> FocusSession:
        session = await self.get_session(session_id)
        encouragement = session.add_encouragement(caller.id, now())

        # At most one encouragement per user
        result = await self._collection.update_one(
            {"_id": session_id, "encouragements.user_id": {"$ne": caller.id}},
            {"$push": {"encouragements": encouragement.model_dump()}},
        )
        if result.modified_count == 0:
            raise ValidationError("You have already encouraged this participant")

        if session.user_id != caller.id:
            await self.core.services.notification.create_notification(
                recipient_id=session.user_id,
                sender_id=caller.id,
                type=NotificationType.ENCOURAGEMENT,
                message=f"{caller.full_name} encouraged you on {session.grinding_topic}",
                related_space_id=session.space_id,
                metadata=FocusSessionRef(session_id=session.id),
            )
        logger.debug("encouragement_added", session_id=session_id, user_id=caller.id)
        return session

    async def remove_encouragement(self, session_id: UUID, caller: User) -> FocusSession:
        session = await self.get_session(session_id)
        session.remove_encouragement(caller.id)

        result = await self._collection.update_one(
            {"_id": session_id, "encouragements.user_id": caller.id},
            {"$pull": {"encouragements": {"user_id": caller.id}}},
        )
        if result.modified_count == 0:
            raise ValidationError("You have not encouraged this participant")

        await self.core.services.notification.delete_matching(
            recipient_id=session.user_id,
            sender_id=caller.id,
            type=NotificationType.ENCOURAGEMENT,
            metadata=FocusSessionRef(session_id=session.id),
        )
        return session

    async def get_space_stats(self, space_id: UUID) -> SpaceStats:
        """Recompute statistics from all completed sessions of the space."""
        cursor = self._collection.find({"space_id": space_id, "is_completed": True}).sort("end_time", -1)
        sessions = await FocusSession.list_cursor(cursor)
        return compute_space_stats(sessions, self.core.services.user.get_user_cache())
