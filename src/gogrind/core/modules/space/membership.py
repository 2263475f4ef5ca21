"""Membership rules applied to a loaded Space before it is written back.

Each function mutates the given space in place and raises a UserError when
the change is not allowed. Members and pending requests never overlap.
"""

from uuid import UUID

from gogrind.core.modules.space.models import Space
from gogrind.errors import AccessDeniedError, ValidationError


def request_join(space: Space, user_id: UUID) -> None:
    if space.is_member(user_id):
        raise ValidationError("You are already a member of this space")
    if user_id in space.pending_requests:
        raise ValidationError("You have already requested to join")
    if space.is_full():
        raise ValidationError("This space is full")

    space.pending_requests.append(user_id)


def approve_request(space: Space, requester_id: UUID, user_id: UUID) -> None:
    if space.creator_id != requester_id:
        raise AccessDeniedError("Only the creator can approve requests")
    if user_id not in space.pending_requests:
        raise ValidationError("This user has not requested to join")
    if space.is_full():
        raise ValidationError("This space is full")

    space.pending_requests = [pending for pending in space.pending_requests if pending != user_id]
    if user_id not in space.members:
        space.members.append(user_id)


def reject_request(space: Space, requester_id: UUID, user_id: UUID) -> None:
    if space.creator_id != requester_id:
        raise AccessDeniedError("Only the creator can reject requests")
    if user_id not in space.pending_requests:
        raise ValidationError("This user has not requested to join")

    space.pending_requests = [pending for pending in space.pending_requests if pending != user_id]


def leave(space: Space, user_id: UUID) -> None:
    if space.creator_id == user_id:
        raise ValidationError("Creator cannot leave. Delete the space instead.")
    if user_id not in space.members:
        raise ValidationError("You are not a member of this space")

    space.members = [member for member in space.members if member != user_id]
