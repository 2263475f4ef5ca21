from uuid import UUID

from fastapi import APIRouter

from gogrind.core.modules.friend.models import FriendRequest, FriendRequestsOverview, FriendRequestView
from gogrind.core.modules.user.models import UserView
from gogrind.web.deps import AppDep, AuthTokenDep
from gogrind.web.openapi import ErrorResponse, MessageResponse

router = APIRouter(tags=["users"])


@router.get(
    "/users",
    summary="Recommended users",
    description="Onboarded users who are neither the caller nor already friends.",
    operation_id="getRecommendedUsers",
    responses={
        200: {"description": "Recommended users"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_recommended_users(app: AppDep, auth_token: AuthTokenDep) -> list[UserView]:
    return await app.get_recommended_users(auth_token)


@router.get(
    "/users/friends",
    summary="List friends",
    operation_id="getFriends",
    responses={
        200: {"description": "Friends of the current user"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_friends(app: AppDep, auth_token: AuthTokenDep) -> list[UserView]:
    return await app.get_friends(auth_token)


@router.post(
    "/users/friend-request/{user_id}",
    summary="Send friend request",
    description="Send a friend request to another user. The recipient gets a notification.",
    operation_id="sendFriendRequest",
    status_code=201,
    responses={
        201: {"description": "Friend request created"},
        400: {"model": ErrorResponse, "description": "Self request, already friends or request exists"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def send_friend_request(user_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> FriendRequest:
    return await app.send_friend_request(auth_token, user_id)


@router.put(
    "/users/friend-request/{request_id}/accept",
    summary="Accept friend request",
    operation_id="acceptFriendRequest",
    responses={
        200: {"description": "Friend request accepted"},
        400: {"model": ErrorResponse, "description": "Request already accepted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the recipient"},
        404: {"model": ErrorResponse, "description": "Friend request not found"},
    },
)
async def accept_friend_request(request_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> FriendRequest:
    return await app.accept_friend_request(auth_token, request_id)


@router.put(
    "/users/friend-request/{request_id}/decline",
    summary="Decline friend request",
    operation_id="declineFriendRequest",
    responses={
        200: {"description": "Friend request declined"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the recipient"},
        404: {"model": ErrorResponse, "description": "Friend request not found"},
    },
)
async def decline_friend_request(request_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> MessageResponse:
    await app.decline_friend_request(auth_token, request_id)
    return MessageResponse(message="Friend request declined")


@router.delete(
    "/users/friend-request/{request_id}",
    summary="Cancel friend request",
    operation_id="cancelFriendRequest",
    status_code=204,
    responses={
        204: {"description": "Friend request cancelled"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the sender"},
        404: {"model": ErrorResponse, "description": "Friend request not found"},
    },
)
async def cancel_friend_request(request_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.cancel_friend_request(auth_token, request_id)


@router.get(
    "/users/friend-requests",
    summary="Incoming friend requests",
    description="Pending requests sent to the caller and the caller's requests accepted but not yet seen.",
    operation_id="getFriendRequests",
    responses={
        200: {"description": "Friend request overview"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_friend_requests(app: AppDep, auth_token: AuthTokenDep) -> FriendRequestsOverview:
    return await app.get_friend_requests(auth_token)


@router.get(
    "/users/outgoing-friend-requests",
    summary="Outgoing friend requests",
    operation_id="getOutgoingFriendRequests",
    responses={
        200: {"description": "Pending requests sent by the caller"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_outgoing_friend_requests(app: AppDep, auth_token: AuthTokenDep) -> list[FriendRequestView]:
    return await app.get_outgoing_friend_requests(auth_token)


@router.put(
    "/users/friend-requests/seen",
    summary="Mark accepted requests seen",
    operation_id="markFriendRequestsSeen",
    status_code=204,
    responses={
        204: {"description": "Accepted requests marked as seen"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def mark_friend_requests_seen(app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.mark_friend_requests_seen(auth_token)


@router.delete(
    "/users/friends/{user_id}",
    summary="Unfriend",
    operation_id="unfriend",
    status_code=204,
    responses={
        204: {"description": "Friendship removed"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def unfriend(user_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.unfriend(auth_token, user_id)
