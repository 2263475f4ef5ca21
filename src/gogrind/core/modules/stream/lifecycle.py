"""Stream room and space session transitions on a loaded Space.

The functions here mutate the Space in place and never touch the database;
StreamService runs them inside an optimistic write and then applies the
returned side effects (focus sessions, notifications).
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from gogrind.core.modules.space.models import (
    SPACE_SESSION_TRANSITIONS,
    ActiveStream,
    Participant,
    Space,
    SpaceSession,
    SpaceSessionStatus,
)
from gogrind.errors import AccessDeniedError, InvalidTransitionError, NotFoundError, ValidationError
from gogrind.utils import minutes_between


@dataclass
class SpaceSessionChange:
    """Outcome of a space session update."""

    session: SpaceSession
    went_live: bool = False
    ended: bool = False
    closed_streams: list[ActiveStream] = field(default_factory=list)


def add_participant(space_session: SpaceSession, user_id: UUID, at: datetime) -> None:
    """Record attendance once per user and refresh the distinct participant count."""
    if space_session.get_participant(user_id) is None:
        space_session.participants.append(Participant(user_id=user_id, joined_at=at))
    space_session.stats.total_participants = len({p.user_id for p in space_session.participants})


def close_participant(space_session: SpaceSession, user_id: UUID, at: datetime) -> bool:
    """Mark an open participant as gone. Returns False if there was nothing to close."""
    participant = space_session.get_participant(user_id)
    if participant is None or participant.left_at is not None:
        return False

    left_at = max(at, participant.joined_at)
    participant.left_at = left_at
    participant.total_minutes = minutes_between(participant.joined_at, left_at)
    # Sum over closed participants
    closed_minutes = sum(p.total_minutes for p in space_session.participants if p.left_at is not None)
    space_session.stats.total_hours_grinded = closed_minutes / 60
    return True


def join_stream(
    space: Space,
    user_id: UUID,
    session_id: UUID,
    grinding_topic: str,
    is_video_enabled: bool,
    is_audio_enabled: bool,
    at: datetime,
) -> ActiveStream:
    """Put a member into the stream room with a freshly opened focus session.

    Only the creator can open the room the first time; after that any
    member may join, once.
    """
    grinding_topic = grinding_topic.strip()
    if not grinding_topic:
        raise ValidationError("Grinding topic is required")
    if not space.is_member(user_id):
        raise AccessDeniedError("Only members can join the stream")
    if not space.stream_initialized:
        if user_id != space.creator_id:
            raise AccessDeniedError("The stream has not been started by the creator yet")
        space.stream_initialized = True
    if space.get_active_stream(user_id) is not None:
        raise ValidationError("You are already in the stream")

    live_session = space.get_live_session()
    if live_session is not None:
        add_participant(live_session, user_id, at)

    stream = ActiveStream(
        user_id=user_id,
        grinding_topic=grinding_topic,
        session_id=session_id,
        space_session_id=live_session.id if live_session is not None else None,
        is_video_enabled=is_video_enabled,
        is_audio_enabled=is_audio_enabled,
        joined_at=at,
    )
    space.active_streams.append(stream)
    return stream


def leave_stream(space: Space, user_id: UUID, at: datetime) -> ActiveStream | None:
    """Take a user out of the stream room. Returns the removed entry, if there was one."""
    stream = space.get_active_stream(user_id)

    live_session = space.get_live_session()
    if live_session is not None:
        close_participant(live_session, user_id, at)

    space.active_streams = [s for s in space.active_streams if s.user_id != user_id]
    return stream


def remove_from_stream(space: Space, target_user_id: UUID, requester_id: UUID, at: datetime) -> ActiveStream | None:
    if space.creator_id != requester_id:
        raise AccessDeniedError("Only the creator can remove users from the stream")
    return leave_stream(space, target_user_id, at)


def update_grinding_topic(space: Space, user_id: UUID, grinding_topic: str) -> ActiveStream:
    grinding_topic = grinding_topic.strip()
    if not grinding_topic:
        raise ValidationError("Grinding topic is required")
    stream = space.get_active_stream(user_id)
    if stream is None:
        raise NotFoundError("You are not in the stream")

    stream.grinding_topic = grinding_topic
    return stream


def toggle_media(space: Space, user_id: UUID, is_video_enabled: object, is_audio_enabled: object) -> ActiveStream:
    """Update media flags; values that are not booleans leave the flag untouched."""
    stream = space.get_active_stream(user_id)
    if stream is None:
        raise NotFoundError("You are not in the stream")

    if isinstance(is_video_enabled, bool):
        stream.is_video_enabled = is_video_enabled
    if isinstance(is_audio_enabled, bool):
        stream.is_audio_enabled = is_audio_enabled
    return stream


def create_space_session(
    space: Space,
    requester_id: UUID,
    title: str,
    description: str,
    scheduled_at: datetime,
    duration: int,
    at: datetime,
) -> SpaceSession:
    if space.creator_id != requester_id:
        raise AccessDeniedError("Only the creator can schedule sessions")
    title = title.strip()
    if not title:
        raise ValidationError("Session title is required")
    if duration < 1:
        raise ValidationError("Duration must be at least 1 minute")

    space_session = SpaceSession(
        title=title,
        description=description.strip(),
        scheduled_at=scheduled_at,
        duration=duration,
        host_id=space.creator_id,
        created_at=at,
    )
    space.sessions.append(space_session)
    return space_session


def update_space_session(
    space: Space,
    session_id: UUID,
    requester_id: UUID,
    status: SpaceSessionStatus | None,
    stream_url: str | None,
    at: datetime,
) -> SpaceSessionChange:
    """Apply a status change and/or stream URL to a space session."""
    if space.creator_id != requester_id:
        raise AccessDeniedError("Only the creator can update sessions")
    space_session = space.get_session(session_id)
    if space_session is None:
        raise NotFoundError("Session not found")

    change = SpaceSessionChange(session=space_session)
    if stream_url is not None:
        space_session.stream_url = stream_url

    if status is None or status == space_session.status:
        return change

    if status not in SPACE_SESSION_TRANSITIONS[space_session.status]:
        raise InvalidTransitionError(space_session.status, status)

    if status == SpaceSessionStatus.LIVE:
        live_session = space.get_live_session()
        if live_session is not None and live_session.id != space_session.id:
            raise ValidationError(f"Session '{live_session.title}' is already live")
        space_session.started_at = at
        space.active_session_id = space_session.id
        change.went_live = True
    elif space_session.status == SpaceSessionStatus.LIVE:
        _end_live_session(space, space_session, at, change)

    space_session.status = status
    return change


def _end_live_session(space: Space, space_session: SpaceSession, at: datetime, change: SpaceSessionChange) -> None:
    space_session.ended_at = at
    if space_session.started_at is not None:
        space_session.stats.actual_duration = minutes_between(space_session.started_at, at)

    for participant in space_session.participants:
        if participant.left_at is None:
            close_participant(space_session, participant.user_id, at)

    change.closed_streams = [s for s in space.active_streams if s.space_session_id == space_session.id]
    space.active_streams = [s for s in space.active_streams if s.space_session_id != space_session.id]
    if space.active_session_id == space_session.id:
        space.active_session_id = None
    change.ended = True
