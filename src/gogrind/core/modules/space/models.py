"""Space aggregate: members, live streams, scheduled sessions and announcements."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from gogrind.core.db import EmbeddedModel, MongoModel
from gogrind.utils import now

DEFAULT_MAX_MEMBERS = 10


class SpaceSessionStatus(StrEnum):
    """Lifecycle of a scheduled space session."""

    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Allowed status changes; completed and cancelled are terminal
SPACE_SESSION_TRANSITIONS: dict[SpaceSessionStatus, frozenset[SpaceSessionStatus]] = {
    SpaceSessionStatus.SCHEDULED: frozenset({SpaceSessionStatus.LIVE, SpaceSessionStatus.CANCELLED}),
    SpaceSessionStatus.LIVE: frozenset({SpaceSessionStatus.COMPLETED, SpaceSessionStatus.CANCELLED}),
    SpaceSessionStatus.COMPLETED: frozenset(),
    SpaceSessionStatus.CANCELLED: frozenset(),
}


class Participant(BaseModel):
    """Attendance record of one user in a space session."""

    user_id: UUID
    joined_at: datetime
    left_at: datetime | None = None
    total_minutes: int = 0


class SpaceSessionStats(BaseModel):
    total_participants: int = 0
    total_hours_grinded: float = 0.0
    actual_duration: int | None = None  # Minutes between going live and ending


class SpaceSession(EmbeddedModel):
    """Scheduled, hosted group event inside a space."""

    title: str
    description: str = ""
    scheduled_at: datetime
    duration: int = 60  # Planned length in minutes
    host_id: UUID
    stream_url: str | None = None
    status: SpaceSessionStatus = SpaceSessionStatus.SCHEDULED
    started_at: datetime | None = None
    ended_at: datetime | None = None
    participants: list[Participant] = Field(default_factory=list)
    stats: SpaceSessionStats = Field(default_factory=SpaceSessionStats)
    created_at: datetime = Field(default_factory=now)

    def get_participant(self, user_id: UUID) -> Participant | None:
        for participant in self.participants:
            if participant.user_id == user_id:
                return participant
        return None


class ActiveStream(BaseModel):
    """Marker that a user is currently present in the space's video room."""

    user_id: UUID
    grinding_topic: str
    session_id: UUID  # Personal focus session opened on join
    space_session_id: UUID | None = None  # Space session that was live at join time
    is_video_enabled: bool = False
    is_audio_enabled: bool = False
    joined_at: datetime = Field(default_factory=now)


class Announcement(EmbeddedModel):
    title: str
    content: str
    created_by: UUID
    created_at: datetime = Field(default_factory=now)


class Space(MongoModel):
    """Study group with members, a live stream room and scheduled sessions."""

    name: str
    description: str
    skill: str
    creator_id: UUID
    members: list[UUID] = Field(default_factory=list)
    pending_requests: list[UUID] = Field(default_factory=list)
    max_members: int = DEFAULT_MAX_MEMBERS
    is_active: bool = True
    stream_initialized: bool = False  # Set once the creator first joins the stream
    active_streams: list[ActiveStream] = Field(default_factory=list)
    sessions: list[SpaceSession] = Field(default_factory=list)
    announcements: list[Announcement] = Field(default_factory=list)  # Newest first
    active_session_id: UUID | None = None
    version: int = 0  # Incremented on every write, used for compare-and-swap
    created_at: datetime = Field(default_factory=now)

    def is_member(self, user_id: UUID) -> bool:
        """Members include the creator even if missing from the members list."""
        return user_id == self.creator_id or user_id in self.members

    def is_full(self) -> bool:
        return len(self.members) >= self.max_members

    def get_active_stream(self, user_id: UUID) -> ActiveStream | None:
        for stream in self.active_streams:
            if stream.user_id == user_id:
                return stream
        return None

    def get_session(self, session_id: UUID) -> SpaceSession | None:
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None

    def get_live_session(self) -> SpaceSession | None:
        """The space session currently marked live, if any."""
        if self.active_session_id is None:
            return None
        session = self.get_session(self.active_session_id)
        if session is None or session.status != SpaceSessionStatus.LIVE:
            return None
        return session

    def get_announcement(self, announcement_id: UUID) -> Announcement | None:
        for announcement in self.announcements:
            if announcement.id == announcement_id:
                return announcement
        return None
