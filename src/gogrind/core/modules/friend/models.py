from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from gogrind.core.db import MongoModel
from gogrind.core.modules.user.models import UserView
from gogrind.utils import now


class FriendRequestStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"


class FriendRequest(MongoModel):
    """Friendship request between two users.

    Deleted on decline or cancel; kept as accepted after acceptance so the
    sender can be shown an "accepted" badge until they have seen it.
    """

    sender_id: UUID
    recipient_id: UUID
    status: FriendRequestStatus = FriendRequestStatus.PENDING
    is_notification_seen: bool = False
    created_at: datetime = Field(default_factory=now)


class FriendRequestView(BaseModel):
    """Friend request with the other party resolved for display."""

    id: UUID
    status: FriendRequestStatus
    created_at: datetime
    user: UserView = Field(..., description="The other user in the request")


class FriendRequestsOverview(BaseModel):
    incoming_requests: list[FriendRequestView] = Field(..., description="Pending requests sent to the user")
    accepted_requests: list[FriendRequestView] = Field(..., description="User's requests accepted but not yet seen")
