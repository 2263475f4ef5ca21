from collections.abc import Callable
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from gogrind.core.core import Service
from gogrind.core.modules.friend.models import (
    FriendRequest,
    FriendRequestStatus,
    FriendRequestsOverview,
    FriendRequestView,
)
from gogrind.core.modules.friend.validators import validate_new_friend_request
from gogrind.core.modules.notification.models import FriendRequestRef, NotificationType
from gogrind.core.modules.user.models import User, UserView
from gogrind.errors import AccessDeniedError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class FriendService(Service):
    """Friend requests and friendship links between users."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("friend_requests")

    async def on_start(self) -> None:
        await self._collection.create_index([("sender_id", 1), ("recipient_id", 1)])
        await self._collection.create_index([("recipient_id", 1), ("status", 1)])

    async def get_request(self, request_id: UUID) -> FriendRequest:
        doc = await self._collection.find_one({"_id": request_id})
        if doc is None:
            raise NotFoundError("Friend request not found")
        return FriendRequest.model_validate(doc)

    async def find_between(self, first_id: UUID, second_id: UUID) -> FriendRequest | None:
        """Find a request linking the two users in either direction."""
        doc = await self._collection.find_one(
            {
                "$or": [
                    {"sender_id": first_id, "recipient_id": second_id},
                    {"sender_id": second_id, "recipient_id": first_id},
                ]
            }
        )
        return FriendRequest.model_validate(doc) if doc else None

    async def send_request(self, sender: User, recipient_id: UUID) -> FriendRequest:
        recipient = self.core.services.user.get_user(recipient_id)
        validate_new_friend_request(sender.id, recipient, await self.find_between(sender.id, recipient_id))

        request = FriendRequest(sender_id=sender.id, recipient_id=recipient_id)
        await self._collection.insert_one(request.to_mongo())
        await self.core.services.notification.create_notification(
            recipient_id=recipient_id,
            sender_id=sender.id,
            type=NotificationType.FRIEND_REQUEST,
            message=f"{sender.full_name} sent you a friend request",
            metadata=FriendRequestRef(friend_request_id=request.id),
        )
        logger.info("friend_request_sent", request_id=request.id, sender_id=sender.id, recipient_id=recipient_id)
        return request

    async def accept_request(self, request_id: UUID, user: User) -> FriendRequest:
        request = await self.get_request(request_id)
        if request.recipient_id != user.id:
            raise AccessDeniedError("You are not authorized to accept this request")
        if request.status == FriendRequestStatus.ACCEPTED:
            raise ValidationError("Friend request already accepted")

        await self._collection.update_one({"_id": request_id}, {"$set": {"status": FriendRequestStatus.ACCEPTED}})
        await self.core.services.user.add_friends(request.sender_id, request.recipient_id)

        notifications = self.core.services.notification
        await notifications.create_notification(
            recipient_id=request.sender_id,
            sender_id=request.recipient_id,
            type=NotificationType.FRIEND_REQUEST_ACCEPTED,
            message=f"{user.full_name} accepted your friend request",
        )
        await self._delete_request_notification(request)
        return request.model_copy(update={"status": FriendRequestStatus.ACCEPTED})

    async def decline_request(self, request_id: UUID, user: User) -> None:
        request = await self.get_request(request_id)
        if request.recipient_id != user.id:
            raise AccessDeniedError("You are not authorized to decline this request")
        await self._collection.delete_one({"_id": request_id})
        await self._delete_request_notification(request)

    async def cancel_request(self, request_id: UUID, user: User) -> None:
        request = await self.get_request(request_id)
        if request.sender_id != user.id:
            raise AccessDeniedError("You are not authorized to cancel this request")
        await self._collection.delete_one({"_id": request_id})
        await self._delete_request_notification(request)

    async def _delete_request_notification(self, request: FriendRequest) -> None:
        await self.core.services.notification.delete_matching(
            recipient_id=request.recipient_id,
            sender_id=request.sender_id,
            type=NotificationType.FRIEND_REQUEST,
            metadata=FriendRequestRef(friend_request_id=request.id),
        )

    async def unfriend(self, user: User, friend_id: UUID) -> None:
        if user.id == friend_id:
            raise ValidationError("You cannot unfriend yourself")
        self.core.services.user.get_user(friend_id)
        if friend_id not in user.friends:
            raise ValidationError("You are not friends with this user")

        await self.core.services.user.remove_friends(user.id, friend_id)
        await self._collection.delete_many(
            {
                "status": FriendRequestStatus.ACCEPTED,
                "$or": [
                    {"sender_id": user.id, "recipient_id": friend_id},
                    {"sender_id": friend_id, "recipient_id": user.id},
                ],
            }
        )
        logger.info("unfriended", user_id=user.id, friend_id=friend_id)

    def get_friends(self, user: User) -> list[UserView]:
        return [UserView.from_domain(friend) for friend in self.core.services.user.get_users(user.friends)]

    async def get_recommended_users(self, user: User) -> list[UserView]:
        """Onboarded users who are not friends and have not already sent a request."""
        cursor = self._collection.find({"recipient_id": user.id})
        senders = {request.sender_id for request in await FriendRequest.list_cursor(cursor)}
        excluded = {user.id, *user.friends, *senders}
        return [
            UserView.from_domain(candidate)
            for candidate in self.core.services.user.get_all_users()
            if candidate.is_onboarded and candidate.id not in excluded
        ]

    async def get_requests_overview(self, user: User) -> FriendRequestsOverview:
        incoming_cursor = self._collection.find({"recipient_id": user.id, "status": FriendRequestStatus.PENDING})
        accepted_cursor = self._collection.find(
            {"sender_id": user.id, "status": FriendRequestStatus.ACCEPTED, "is_notification_seen": {"$ne": True}}
        )
        incoming = await FriendRequest.list_cursor(incoming_cursor)
        accepted = await FriendRequest.list_cursor(accepted_cursor)
        return FriendRequestsOverview(
            incoming_requests=self._views(incoming, lambda r: r.sender_id),
            accepted_requests=self._views(accepted, lambda r: r.recipient_id),
        )

    async def get_outgoing_requests(self, user: User) -> list[FriendRequestView]:
        cursor = self._collection.find({"sender_id": user.id, "status": FriendRequestStatus.PENDING})
        return self._views(await FriendRequest.list_cursor(cursor), lambda r: r.recipient_id)

    async def mark_accepted_seen(self, user: User) -> int:
        result = await self._collection.update_many(
            {"sender_id": user.id, "status": FriendRequestStatus.ACCEPTED, "is_notification_seen": {"$ne": True}},
            {"$set": {"is_notification_seen": True}},
        )
        return result.modified_count

    def _views(self, requests: list[FriendRequest], other: Callable[[FriendRequest], UUID]) -> list[FriendRequestView]:
        users = self.core.services.user.get_user_cache()
        return [
            FriendRequestView(
                id=request.id,
                status=request.status,
                created_at=request.created_at,
                user=UserView.from_domain(users[other(request)]),
            )
            for request in requests
            if other(request) in users
        ]
