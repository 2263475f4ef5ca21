from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from gogrind.core.core import Service
from gogrind.core.modules.focus.models import FocusSession, validate_new_session
from gogrind.core.modules.notification.models import NotificationType, SpaceSessionRef, StreamRemovalRef
from gogrind.core.modules.space.models import ActiveStream, Space, SpaceSession, SpaceSessionStatus
from gogrind.core.modules.stream import lifecycle
from gogrind.core.modules.user.models import User
from gogrind.utils import now

logger = structlog.get_logger(__name__)


class StreamService(Service):
    """Stream room presence and scheduled space sessions.

    Space changes are applied through SpaceService.mutate_space; focus
    sessions and notifications are written after the space write succeeds.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)

    async def join_stream(
        self,
        space_id: UUID,
        user: User,
        grinding_topic: str,
        target_duration: int,
        task_titles: list[str],
        is_video_enabled: bool,
        is_audio_enabled: bool,
    ) -> tuple[Space, FocusSession]:
        grinding_topic = validate_new_session(grinding_topic, target_duration)
        session_id = uuid4()
        at = now()

        space, _ = await self.core.services.space.mutate_space(
            space_id,
            lambda s: lifecycle.join_stream(s, user.id, session_id, grinding_topic, is_video_enabled, is_audio_enabled, at),
        )
        session = await self.core.services.focus.start_session(
            session_id=session_id,
            user_id=user.id,
            space_id=space_id,
            grinding_topic=grinding_topic,
            target_duration=target_duration,
            task_titles=task_titles,
            video_enabled=is_video_enabled,
            audio_enabled=is_audio_enabled,
            at=at,
        )
        logger.info("stream_joined", space_id=space_id, user_id=user.id, session_id=session_id)
        return space, session

    async def leave_stream(self, space_id: UUID, user_id: UUID) -> Space:
        at = now()
        space, stream = await self.core.services.space.mutate_space(
            space_id, lambda s: lifecycle.leave_stream(s, user_id, at)
        )
        await self._finish_stream(stream, at)
        logger.info("stream_left", space_id=space_id, user_id=user_id, had_stream=stream is not None)
        return space

    async def remove_from_stream(self, space_id: UUID, target_user_id: UUID, requester: User, reason: str | None) -> Space:
        at = now()
        space, stream = await self.core.services.space.mutate_space(
            space_id, lambda s: lifecycle.remove_from_stream(s, target_user_id, requester.id, at)
        )
        await self._finish_stream(stream, at)

        if stream is not None:
            reason = reason.strip() if reason else None
            message = f"You were removed from the stream in {space.name}"
            if reason:
                message = f"{message}. Reason: {reason}"
            await self.core.services.notification.create_notification(
                recipient_id=target_user_id,
                sender_id=requester.id,
                type=NotificationType.REMOVED_FROM_STREAM,
                message=message,
                related_space_id=space.id,
                metadata=StreamRemovalRef(reason=reason),
            )
        logger.info("stream_user_removed", space_id=space_id, user_id=target_user_id, requester_id=requester.id)
        return space

    async def _finish_stream(self, stream: ActiveStream | None, at: datetime) -> None:
        if stream is not None:
            await self.core.services.focus.complete_session(stream.session_id, at)

    async def update_grinding_topic(self, space_id: UUID, user_id: UUID, grinding_topic: str) -> Space:
        space, _ = await self.core.services.space.mutate_space(
            space_id, lambda s: lifecycle.update_grinding_topic(s, user_id, grinding_topic)
        )
        return space

    async def toggle_media(self, space_id: UUID, user_id: UUID, is_video_enabled: object, is_audio_enabled: object) -> Space:
        space, stream = await self.core.services.space.mutate_space(
            space_id, lambda s: lifecycle.toggle_media(s, user_id, is_video_enabled, is_audio_enabled)
        )
        await self.core.services.focus.record_media_usage(
            stream.session_id,
            is_video_enabled if isinstance(is_video_enabled, bool) else None,
            is_audio_enabled if isinstance(is_audio_enabled, bool) else None,
        )
        return space

    async def create_space_session(
        self, space_id: UUID, requester: User, title: str, description: str, scheduled_at: datetime, duration: int
    ) -> SpaceSession:
        at = now()
        _, space_session = await self.core.services.space.mutate_space(
            space_id,
            lambda s: lifecycle.create_space_session(s, requester.id, title, description, scheduled_at, duration, at),
        )
        logger.info("space_session_scheduled", space_id=space_id, space_session_id=space_session.id)
        return space_session

    async def update_space_session(
        self,
        space_id: UUID,
        session_id: UUID,
        requester: User,
        status: SpaceSessionStatus | None,
        stream_url: str | None,
    ) -> Space:
        at = now()
        space, change = await self.core.services.space.mutate_space(
            space_id, lambda s: lifecycle.update_space_session(s, session_id, requester.id, status, stream_url, at)
        )

        if change.went_live:
            recipients = [member for member in space.members if member != requester.id]
            await self.core.services.notification.notify_many(
                recipients,
                sender_id=requester.id,
                type=NotificationType.SESSION_STARTED,
                message=f"{change.session.title} is now live in {space.name}",
                related_space_id=space.id,
                related_session_id=change.session.id,
                metadata=SpaceSessionRef(space_session_id=change.session.id),
            )
            logger.info("space_session_live", space_id=space_id, space_session_id=session_id, notified=len(recipients))

        if change.ended:
            for stream in change.closed_streams:
                await self._finish_stream(stream, at)
            logger.info(
                "space_session_ended",
                space_id=space_id,
                space_session_id=session_id,
                status=change.session.status,
                closed_streams=len(change.closed_streams),
            )
        return space
