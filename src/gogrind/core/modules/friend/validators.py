from uuid import UUID

from gogrind.core.modules.friend.models import FriendRequest
from gogrind.core.modules.user.models import User
from gogrind.errors import ValidationError


def validate_new_friend_request(sender_id: UUID, recipient: User, existing: FriendRequest | None) -> None:
    """Check that a new friend request may be sent.

    Args:
        sender_id: The user sending the request
        recipient: The user receiving it
        existing: Any request already linking the two users, in either direction

    Raises:
        ValidationError: On self requests, existing friendship or an existing request
    """
    if sender_id == recipient.id:
        raise ValidationError("You can't send friend request to yourself")

    if sender_id in recipient.friends:
        raise ValidationError("You are already friends with this user")

    if existing is not None:
        raise ValidationError("A friend request already exists between you and this user")
