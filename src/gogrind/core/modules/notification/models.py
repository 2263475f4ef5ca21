"""Notifications delivered to users, with typed correlation metadata."""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from gogrind.core.db import MongoModel
from gogrind.utils import now


class NotificationType(StrEnum):
    FRIEND_REQUEST = "friend_request"
    FRIEND_REQUEST_ACCEPTED = "friend_request_accepted"
    SPACE_JOIN_REQUEST = "space_join_request"
    SPACE_JOIN_APPROVED = "space_join_approved"
    SPACE_JOIN_REJECTED = "space_join_rejected"
    SESSION_STARTED = "session_started"
    SESSION_REMINDER = "session_reminder"
    REMOVED_FROM_STREAM = "removed_from_stream"
    ENCOURAGEMENT = "encouragement"


class FriendRequestRef(BaseModel):
    kind: Literal["friend_request"] = "friend_request"
    friend_request_id: UUID


class JoinRequestRef(BaseModel):
    kind: Literal["join_request"] = "join_request"
    space_id: UUID


class FocusSessionRef(BaseModel):
    kind: Literal["focus_session"] = "focus_session"
    session_id: UUID


class SpaceSessionRef(BaseModel):
    kind: Literal["space_session"] = "space_session"
    space_session_id: UUID


class StreamRemovalRef(BaseModel):
    kind: Literal["stream_removal"] = "stream_removal"
    reason: str | None = None


NotificationMetadata = Annotated[
    FriendRequestRef | JoinRequestRef | FocusSessionRef | SpaceSessionRef | StreamRemovalRef,
    Field(discriminator="kind"),
]


def metadata_filter(metadata: BaseModel) -> dict[str, object]:
    """Build a query matching stored metadata field by field."""
    return {f"metadata.{key}": value for key, value in metadata.model_dump().items()}


class Notification(MongoModel):
    """Message shown to a recipient about something another user did.

    Indexed on (recipient_id, created_at desc) and (recipient_id, read).
    """

    recipient_id: UUID
    sender_id: UUID
    type: NotificationType
    message: str
    related_space_id: UUID | None = None
    related_session_id: UUID | None = None  # Space session the notification is about
    read: bool = False
    metadata: NotificationMetadata | None = None
    created_at: datetime = Field(default_factory=now)
