from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID

from gogrind.config import Config
from gogrind.core.core import Core
from gogrind.core.modules.auth.models import AuthToken
from gogrind.core.modules.chat.models import ChatToken
from gogrind.core.modules.focus.models import FocusSession
from gogrind.core.modules.focus.stats import SpaceStats
from gogrind.core.modules.friend.models import FriendRequest, FriendRequestsOverview, FriendRequestView
from gogrind.core.modules.notification.models import Notification
from gogrind.core.modules.space.models import Announcement, Space, SpaceSession, SpaceSessionStatus
from gogrind.core.modules.user.models import ProfileUpdate, UserView
from gogrind.core.pagination import PaginationResult
from gogrind.errors import AuthenticationError


class App:
    """Facade for all application operations, validates permissions before delegating to Core."""

    def __init__(self, config: Config) -> None:
        self._core = Core(config)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Accounts ===
    async def is_auth_token_valid(self, auth_token: AuthToken) -> bool:
        return await self._core.services.auth.is_auth_token_valid(auth_token)

    async def signup(self, email: str, password: str, full_name: str) -> tuple[UserView, AuthToken]:
        """Create an account and log it in."""
        user = await self._core.services.user.create_user(email, password, full_name)
        return UserView.from_domain(user), self._core.services.auth.create_token(user)

    async def login(self, email: str, password: str) -> tuple[UserView, AuthToken]:
        user = self._core.services.user.verify_password(email, password)
        if user is None:
            raise AuthenticationError("Invalid email or password")
        return UserView.from_domain(user), self._core.services.auth.create_token(user)

    async def get_current_user(self, auth_token: AuthToken) -> UserView:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return UserView.from_domain(current_user)

    async def onboard(self, auth_token: AuthToken, profile: ProfileUpdate) -> UserView:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        user = await self._core.services.user.onboard(current_user.id, profile)
        return UserView.from_domain(user)

    async def get_chat_token(self, auth_token: AuthToken) -> ChatToken:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return self._core.services.chat.create_user_token(current_user.id)

    # === Friends ===
    async def get_recommended_users(self, auth_token: AuthToken) -> list[UserView]:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.friend.get_recommended_users(current_user)

    async def get_friends(self, auth_token: AuthToken) -> list[UserView]:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return self._core.services.friend.get_friends(current_user)

    async def send_friend_request(self, auth_token: AuthToken, recipient_id: UUID) -> FriendRequest:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.friend.send_request(current_user, recipient_id)

    async def accept_friend_request(self, auth_token: AuthToken, request_id: UUID) -> FriendRequest:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.friend.accept_request(request_id, current_user)

    async def decline_friend_request(self, auth_token: AuthToken, request_id: UUID) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.friend.decline_request(request_id, current_user)

    async def cancel_friend_request(self, auth_token: AuthToken, request_id: UUID) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.friend.cancel_request(request_id, current_user)

    async def get_friend_requests(self, auth_token: AuthToken) -> FriendRequestsOverview:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.friend.get_requests_overview(current_user)

    async def get_outgoing_friend_requests(self, auth_token: AuthToken) -> list[FriendRequestView]:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.friend.get_outgoing_requests(current_user)

    async def mark_friend_requests_seen(self, auth_token: AuthToken) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.friend.mark_accepted_seen(current_user)

    async def unfriend(self, auth_token: AuthToken, friend_id: UUID) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.friend.unfriend(current_user, friend_id)

    # === Notifications ===
    async def get_notifications(self, auth_token: AuthToken, limit: int, offset: int) -> PaginationResult[Notification]:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.notification.get_notifications(current_user.id, limit, offset)

    async def get_unread_notification_count(self, auth_token: AuthToken) -> int:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.notification.get_unread_count(current_user.id)

    async def mark_notification_read(self, auth_token: AuthToken, notification_id: UUID) -> Notification:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.notification.mark_as_read(notification_id, current_user.id)

    async def mark_all_notifications_read(self, auth_token: AuthToken) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.notification.mark_all_as_read(current_user.id)

    async def delete_notification(self, auth_token: AuthToken, notification_id: UUID) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.notification.delete_notification(notification_id, current_user.id)

    # === Spaces ===
    async def create_space(
        self, auth_token: AuthToken, name: str, description: str, skill: str, max_members: int | None
    ) -> Space:
        """Create new space with current user as creator."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.space.create_space(current_user, name, description, skill, max_members)

    async def get_active_spaces(self, auth_token: AuthToken) -> list[Space]:
        await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.space.get_active_spaces()

    async def get_my_spaces(self, auth_token: AuthToken) -> list[Space]:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.space.get_spaces_by_member(current_user.id)

    async def get_space(self, auth_token: AuthToken, space_id: UUID) -> Space:
        await self._core.services.access.ensure_authenticated(auth_token)
        return await self._resolve_space(space_id)

    async def request_to_join_space(self, auth_token: AuthToken, space_id: UUID) -> Space:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.space.request_join(space_id, current_user)

    async def approve_join_request(self, auth_token: AuthToken, space_id: UUID, user_id: UUID) -> Space:
        """Approve a pending request (creator only, checked on the loaded space)."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.space.approve_request(space_id, current_user, user_id)

    async def reject_join_request(self, auth_token: AuthToken, space_id: UUID, user_id: UUID) -> Space:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.space.reject_request(space_id, current_user, user_id)

    async def leave_space(self, auth_token: AuthToken, space_id: UUID) -> None:
        """Leave a space, ending the user's stream presence in it first."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        space = await self._resolve_space(space_id)
        if space.get_active_stream(current_user.id) is not None and space.creator_id != current_user.id:
            await self._core.services.stream.leave_stream(space_id, current_user.id)
        await self._core.services.space.leave_space(space_id, current_user.id)

    async def delete_space(self, auth_token: AuthToken, space_id: UUID) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.space.delete_space(space_id, current_user.id)

    async def create_announcement(self, auth_token: AuthToken, space_id: UUID, title: str, content: str) -> Announcement:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.space.create_announcement(space_id, current_user.id, title, content)

    async def delete_announcement(self, auth_token: AuthToken, space_id: UUID, announcement_id: UUID) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.space.delete_announcement(space_id, current_user.id, announcement_id)

    # === Space sessions ===
    async def create_space_session(
        self,
        auth_token: AuthToken,
        space_id: UUID,
        title: str,
        description: str,
        scheduled_at: datetime,
        duration: int,
    ) -> SpaceSession:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.stream.create_space_session(
            space_id, current_user, title, description, scheduled_at, duration
        )

    async def update_space_session(
        self,
        auth_token: AuthToken,
        space_id: UUID,
        session_id: UUID,
        status: SpaceSessionStatus | None,
        stream_url: str | None,
    ) -> Space:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.stream.update_space_session(space_id, session_id, current_user, status, stream_url)

    # === Streams ===
    async def join_stream(
        self,
        auth_token: AuthToken,
        space_id: UUID,
        grinding_topic: str,
        target_duration: int,
        task_titles: list[str],
        is_video_enabled: bool,
        is_audio_enabled: bool,
    ) -> tuple[Space, FocusSession]:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.stream.join_stream(
            space_id, current_user, grinding_topic, target_duration, task_titles, is_video_enabled, is_audio_enabled
        )

    async def leave_stream(self, auth_token: AuthToken, space_id: UUID) -> Space:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.stream.leave_stream(space_id, current_user.id)

    async def remove_from_stream(self, auth_token: AuthToken, space_id: UUID, user_id: UUID, reason: str | None) -> Space:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.stream.remove_from_stream(space_id, user_id, current_user, reason)

    async def update_grinding_topic(self, auth_token: AuthToken, space_id: UUID, grinding_topic: str) -> Space:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.stream.update_grinding_topic(space_id, current_user.id, grinding_topic)

    async def toggle_stream_media(
        self, auth_token: AuthToken, space_id: UUID, is_video_enabled: object, is_audio_enabled: object
    ) -> Space:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.stream.toggle_media(space_id, current_user.id, is_video_enabled, is_audio_enabled)

    # === Focus sessions ===
    async def get_current_session(self, auth_token: AuthToken, space_id: UUID, user_id: UUID | None = None) -> FocusSession:
        """Get the running focus session of the caller, or of another member when user_id is given."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        if user_id is not None and user_id != current_user.id:
            space = await self._resolve_space(space_id)
            await self._core.services.access.ensure_space_member(auth_token, space)
            return await self._core.services.focus.get_current_session(user_id, space_id)
        return await self._core.services.focus.get_current_session(current_user.id, space_id)

    async def add_session_task(self, auth_token: AuthToken, session_id: UUID, title: str) -> FocusSession:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.focus.add_task(session_id, current_user.id, title)

    async def update_session_task(
        self, auth_token: AuthToken, session_id: UUID, task_id: UUID, is_completed: bool
    ) -> FocusSession:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.focus.update_task(session_id, task_id, current_user.id, is_completed)

    async def encourage_participant(self, auth_token: AuthToken, session_id: UUID) -> FocusSession:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.focus.encourage(session_id, current_user)

    async def remove_encouragement(self, auth_token: AuthToken, session_id: UUID) -> FocusSession:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.focus.remove_encouragement(session_id, current_user)

    async def get_user_sessions(self, auth_token: AuthToken, user_id: UUID) -> list[FocusSession]:
        """Get recent focus sessions of the caller or one of their friends."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        self._core.services.access.ensure_friend_or_self(current_user, user_id)
        return await self._core.services.focus.get_user_sessions(user_id)

    async def get_space_session_stats(self, auth_token: AuthToken, space_id: UUID) -> SpaceStats:
        """Get statistics of a space (members only)."""
        space = await self._resolve_space(space_id)
        await self._core.services.access.ensure_space_member(auth_token, space)
        return await self._core.services.focus.get_space_stats(space.id)

    # === Private resolver methods ===
    async def _resolve_space(self, space_id: UUID) -> Space:
        """Load a space. Raises NotFoundError if not found."""
        return await self._core.services.space.get_space(space_id)
