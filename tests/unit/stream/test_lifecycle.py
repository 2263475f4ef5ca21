"""Tests for stream room presence and space session transitions."""

from datetime import timedelta
from uuid import uuid4

import pytest

from gogrind.core.modules.space.models import SpaceSessionStatus
from gogrind.core.modules.stream import lifecycle
from gogrind.errors import AccessDeniedError, InvalidTransitionError, NotFoundError, ValidationError


def join(space, user, at, topic="algebra"):
    return lifecycle.join_stream(space, user.id, uuid4(), topic, False, False, at)


@pytest.fixture
def scheduled(space, creator, t0):
    return lifecycle.create_space_session(space, creator.id, "Exam prep", "", t0, 60, t0)


class TestJoinStream:
    """Tests for join_stream and the creator latch."""

    def test_non_creator_cannot_open_room(self, space, member, t0):
        """Test that only the creator can open the stream room for the first time."""
        with pytest.raises(AccessDeniedError):
            join(space, member, t0, "essay")
        assert space.stream_initialized is False
        assert space.active_streams == []

    def test_creator_opens_room_then_member_joins(self, space, creator, member, t0):
        """Test that members can join once the creator has opened the room."""
        join(space, creator, t0, "algebra")
        assert space.stream_initialized is True

        join(space, member, t0 + timedelta(minutes=1), "essay")
        assert [(s.user_id, s.grinding_topic) for s in space.active_streams] == [
            (creator.id, "algebra"),
            (member.id, "essay"),
        ]

    def test_latch_survives_creator_leaving(self, space, creator, member, t0):
        """Test that the room stays open after the creator leaves."""
        join(space, creator, t0)
        lifecycle.leave_stream(space, creator.id, t0)
        join(space, member, t0)
        assert space.stream_initialized is True

    def test_outsider_rejected(self, space, creator, outsider, t0):
        """Test that non-members cannot join the stream."""
        join(space, creator, t0)
        with pytest.raises(AccessDeniedError):
            join(space, outsider, t0)

    def test_one_entry_per_user(self, space, creator, t0):
        """Test that a user can only be in the stream once."""
        join(space, creator, t0)
        with pytest.raises(ValidationError, match="already in the stream"):
            join(space, creator, t0)
        assert len(space.active_streams) == 1

    def test_blank_topic(self, space, creator, t0):
        """Test that a blank grinding topic is rejected before the room opens."""
        with pytest.raises(ValidationError, match="Grinding topic is required"):
            join(space, creator, t0, "   ")
        assert space.stream_initialized is False

    def test_topic_is_trimmed(self, space, creator, t0):
        """Test that the grinding topic is stored trimmed."""
        stream = join(space, creator, t0, "  algebra ")
        assert stream.grinding_topic == "algebra"

    def test_joining_live_session_records_participant(self, space, creator, member, scheduled, t0):
        """Test that joining during a live session records a participant."""
        lifecycle.update_space_session(space, scheduled.id, creator.id, SpaceSessionStatus.LIVE, None, t0)
        join(space, creator, t0)
        stream = join(space, member, t0)

        assert stream.space_session_id == scheduled.id
        assert {p.user_id for p in scheduled.participants} == {creator.id, member.id}
        assert scheduled.stats.total_participants == 2

    def test_rejoin_does_not_duplicate_participant(self, space, creator, scheduled, t0):
        """Test that rejoining a live session keeps a single participant record."""
        lifecycle.update_space_session(space, scheduled.id, creator.id, SpaceSessionStatus.LIVE, None, t0)
        join(space, creator, t0)
        lifecycle.leave_stream(space, creator.id, t0 + timedelta(minutes=5))
        join(space, creator, t0 + timedelta(minutes=6))

        assert len(scheduled.participants) == 1
        assert scheduled.stats.total_participants == 1


class TestLeaveStream:
    """Tests for leave_stream and remove_from_stream."""

    def test_returns_removed_entry(self, space, creator, t0):
        """Test that leaving returns the removed stream entry."""
        stream = join(space, creator, t0)
        assert lifecycle.leave_stream(space, creator.id, t0) == stream
        assert space.active_streams == []

    def test_leaving_when_absent_is_noop(self, space, member, t0):
        """Test that leaving without a stream entry returns None."""
        assert lifecycle.leave_stream(space, member.id, t0) is None

    def test_closes_live_participant(self, space, creator, scheduled, t0):
        """Test that leaving closes the participant record of the live session."""
        lifecycle.update_space_session(space, scheduled.id, creator.id, SpaceSessionStatus.LIVE, None, t0)
        join(space, creator, t0)
        lifecycle.leave_stream(space, creator.id, t0 + timedelta(minutes=30))

        participant = scheduled.get_participant(creator.id)
        assert participant.left_at == t0 + timedelta(minutes=30)
        assert participant.total_minutes == 30
        assert scheduled.stats.total_hours_grinded == 0.5

    def test_only_creator_removes(self, space, creator, member, t0):
        """Test that only the creator can remove users from the stream."""
        join(space, creator, t0)
        join(space, member, t0)
        with pytest.raises(AccessDeniedError):
            lifecycle.remove_from_stream(space, creator.id, member.id, t0)

        removed = lifecycle.remove_from_stream(space, member.id, creator.id, t0)
        assert removed.user_id == member.id
        assert [s.user_id for s in space.active_streams] == [creator.id]


class TestStreamUpdates:
    """Tests for update_grinding_topic and toggle_media."""

    def test_update_topic(self, space, creator, t0):
        """Test that the grinding topic can be changed while in the stream."""
        join(space, creator, t0)
        stream = lifecycle.update_grinding_topic(space, creator.id, " geometry ")
        assert stream.grinding_topic == "geometry"

    def test_update_topic_requires_stream(self, space, member):
        """Test that changing the topic requires a stream entry."""
        with pytest.raises(NotFoundError, match="not in the stream"):
            lifecycle.update_grinding_topic(space, member.id, "geometry")

    def test_update_topic_rejects_blank(self, space, creator, t0):
        """Test that a blank topic update is rejected."""
        join(space, creator, t0)
        with pytest.raises(ValidationError):
            lifecycle.update_grinding_topic(space, creator.id, "")

    def test_toggle_media_applies_booleans_only(self, space, creator, t0):
        """Test that media flags change only for boolean values."""
        join(space, creator, t0)
        stream = lifecycle.toggle_media(space, creator.id, True, "yes")
        assert stream.is_video_enabled is True
        assert stream.is_audio_enabled is False

        stream = lifecycle.toggle_media(space, creator.id, None, True)
        assert stream.is_video_enabled is True
        assert stream.is_audio_enabled is True

    def test_toggle_media_requires_stream(self, space, member):
        """Test that toggling media requires a stream entry."""
        with pytest.raises(NotFoundError):
            lifecycle.toggle_media(space, member.id, True, True)


class TestCreateSpaceSession:
    """Tests for create_space_session."""

    def test_creates_scheduled_session(self, space, creator, scheduled):
        """Test that a new space session starts as scheduled and hosted by the creator."""
        assert scheduled.status == SpaceSessionStatus.SCHEDULED
        assert scheduled.host_id == creator.id
        assert space.sessions == [scheduled]

    def test_only_creator(self, space, member, t0):
        """Test that only the creator can schedule sessions."""
        with pytest.raises(AccessDeniedError):
            lifecycle.create_space_session(space, member.id, "Exam prep", "", t0, 60, t0)

    def test_title_required(self, space, creator, t0):
        """Test that a session title is required."""
        with pytest.raises(ValidationError):
            lifecycle.create_space_session(space, creator.id, " ", "", t0, 60, t0)

    def test_positive_duration(self, space, creator, t0):
        """Test that the planned duration must be positive."""
        with pytest.raises(ValidationError):
            lifecycle.create_space_session(space, creator.id, "Exam prep", "", t0, 0, t0)


class TestUpdateSpaceSession:
    """Tests for space session status transitions."""

    def test_go_live(self, space, creator, scheduled, t0):
        """Test that going live sets the start time and the active session."""
        change = lifecycle.update_space_session(space, scheduled.id, creator.id, SpaceSessionStatus.LIVE, None, t0)

        assert change.went_live is True
        assert change.ended is False
        assert scheduled.status == SpaceSessionStatus.LIVE
        assert scheduled.started_at == t0
        assert space.active_session_id == scheduled.id

    def test_only_creator_updates(self, space, member, scheduled, t0):
        """Test that only the creator can change a session status."""
        with pytest.raises(AccessDeniedError):
            lifecycle.update_space_session(space, scheduled.id, member.id, SpaceSessionStatus.LIVE, None, t0)

    def test_unknown_session(self, space, creator, t0):
        """Test that updating an unknown session raises NotFoundError."""
        with pytest.raises(NotFoundError, match="Session not found"):
            lifecycle.update_space_session(space, uuid4(), creator.id, SpaceSessionStatus.LIVE, None, t0)

    def test_stream_url_only(self, space, creator, scheduled, t0):
        """Test that the stream URL can change without a status change."""
        change = lifecycle.update_space_session(space, scheduled.id, creator.id, None, "https://meet.example/x", t0)
        assert scheduled.stream_url == "https://meet.example/x"
        assert scheduled.status == SpaceSessionStatus.SCHEDULED
        assert change.went_live is False

    def test_same_status_is_noop(self, space, creator, scheduled, t0):
        """Test that requesting the current status changes nothing."""
        change = lifecycle.update_space_session(space, scheduled.id, creator.id, SpaceSessionStatus.SCHEDULED, None, t0)
        assert change.went_live is False
        assert change.ended is False

    @pytest.mark.parametrize(
        ("path", "target"),
        [
            ([], SpaceSessionStatus.COMPLETED),
            ([SpaceSessionStatus.CANCELLED], SpaceSessionStatus.LIVE),
            ([SpaceSessionStatus.LIVE, SpaceSessionStatus.COMPLETED], SpaceSessionStatus.LIVE),
            ([SpaceSessionStatus.LIVE, SpaceSessionStatus.COMPLETED], SpaceSessionStatus.CANCELLED),
        ],
    )
    def test_illegal_transitions(self, space, creator, scheduled, t0, path, target):
        """Test that illegal status changes raise and leave the status untouched."""
        for status in path:
            lifecycle.update_space_session(space, scheduled.id, creator.id, status, None, t0)
        current = scheduled.status

        with pytest.raises(InvalidTransitionError) as exc_info:
            lifecycle.update_space_session(space, scheduled.id, creator.id, target, None, t0)
        assert exc_info.value.current == current
        assert exc_info.value.requested == target
        assert scheduled.status == current

    def test_cancel_scheduled(self, space, creator, scheduled, t0):
        """Test that a scheduled session can be cancelled without ending it."""
        change = lifecycle.update_space_session(space, scheduled.id, creator.id, SpaceSessionStatus.CANCELLED, None, t0)
        assert scheduled.status == SpaceSessionStatus.CANCELLED
        assert change.ended is False
        assert scheduled.ended_at is None

    def test_one_live_session_per_space(self, space, creator, scheduled, t0):
        """Test that a second session cannot go live while one is live."""
        other = lifecycle.create_space_session(space, creator.id, "Second", "", t0, 30, t0)
        lifecycle.update_space_session(space, scheduled.id, creator.id, SpaceSessionStatus.LIVE, None, t0)

        with pytest.raises(ValidationError, match="already live"):
            lifecycle.update_space_session(space, other.id, creator.id, SpaceSessionStatus.LIVE, None, t0)
        assert other.status == SpaceSessionStatus.SCHEDULED
        assert sum(1 for s in space.sessions if s.status == SpaceSessionStatus.LIVE) == 1

    def test_live_session_full_scenario(self, space, creator, member, scheduled, t0):
        """Go live, two users join, one leaves early, creator completes."""
        change = lifecycle.update_space_session(space, scheduled.id, creator.id, SpaceSessionStatus.LIVE, None, t0)
        assert change.went_live

        join(space, creator, t0)
        join(space, member, t0 + timedelta(minutes=5))
        lifecycle.leave_stream(space, member.id, t0 + timedelta(minutes=25))

        ended_at = t0 + timedelta(minutes=45)
        change = lifecycle.update_space_session(
            space, scheduled.id, creator.id, SpaceSessionStatus.COMPLETED, None, ended_at
        )

        assert change.ended is True
        assert [s.user_id for s in change.closed_streams] == [creator.id]
        assert space.active_streams == []
        assert space.active_session_id is None

        assert scheduled.status == SpaceSessionStatus.COMPLETED
        assert scheduled.ended_at == ended_at
        assert scheduled.stats.actual_duration == 45
        assert scheduled.stats.total_participants == 2

        host = scheduled.get_participant(creator.id)
        assert host.left_at == ended_at
        assert host.total_minutes == 45
        early = scheduled.get_participant(member.id)
        assert early.left_at == t0 + timedelta(minutes=25)
        assert early.total_minutes == 20
        assert scheduled.stats.total_hours_grinded == pytest.approx(65 / 60)

    def test_ending_keeps_streams_outside_the_session(self, space, creator, member, scheduled, t0):
        """Test that ending a session keeps streams joined before it went live."""
        join(space, creator, t0)
        lifecycle.update_space_session(space, scheduled.id, creator.id, SpaceSessionStatus.LIVE, None, t0)
        join(space, member, t0)

        change = lifecycle.update_space_session(space, scheduled.id, creator.id, SpaceSessionStatus.CANCELLED, None, t0)

        assert [s.user_id for s in change.closed_streams] == [member.id]
        assert [s.user_id for s in space.active_streams] == [creator.id]
