"""Tests for focus session operations."""

from datetime import timedelta
from uuid import uuid4

import pytest

from gogrind.core.modules.focus.models import FocusSession, validate_new_session
from gogrind.errors import NotFoundError, ValidationError


@pytest.fixture
def session(member, space, t0):
    return FocusSession(user_id=member.id, space_id=space.id, grinding_topic="essay", target_duration=30, start_time=t0)


class TestValidateNewSession:
    """Tests for validate_new_session."""

    def test_returns_trimmed_topic(self):
        """Test that the topic is returned trimmed."""
        assert validate_new_session("  essay ", 10) == "essay"

    def test_blank_topic(self):
        """Test that a blank topic is rejected."""
        with pytest.raises(ValidationError, match="Grinding topic is required"):
            validate_new_session("  ", 10)

    def test_minimum_duration(self):
        """Test that the target duration must be at least five minutes."""
        validate_new_session("essay", 5)
        with pytest.raises(ValidationError, match="at least 5 minutes"):
            validate_new_session("essay", 4)


class TestComplete:
    """Tests for FocusSession.complete."""

    def test_sets_duration(self, session, t0):
        """Test that completing sets the end time and the rounded duration."""
        session.complete(t0 + timedelta(minutes=25, seconds=10))

        assert session.is_completed is True
        assert session.end_time == t0 + timedelta(minutes=25, seconds=10)
        assert session.actual_duration == 25

    def test_half_minute_rounds_up(self, session, t0):
        """Test that half a minute rounds up."""
        session.complete(t0 + timedelta(minutes=2, seconds=30))
        assert session.actual_duration == 3

    def test_end_never_before_start(self, session, t0):
        """Test that the end time is clamped to the start time."""
        session.complete(t0 - timedelta(minutes=1))
        assert session.end_time == t0
        assert session.actual_duration == 0

    def test_second_completion_keeps_first_end(self, session, t0):
        """Test that completing twice keeps the first end time."""
        session.complete(t0 + timedelta(minutes=10))
        session.complete(t0 + timedelta(minutes=50))
        assert session.end_time == t0 + timedelta(minutes=10)
        assert session.actual_duration == 10


class TestTasks:
    """Tests for task operations."""

    def test_add_task(self, session):
        """Test that a task is added with a trimmed title."""
        task = session.add_task("  Outline ")
        assert task.title == "Outline"
        assert session.tasks == [task]

    def test_add_blank_task(self, session):
        """Test that a blank task title is rejected."""
        with pytest.raises(ValidationError, match="Task title is required"):
            session.add_task(" ")

    def test_add_task_to_completed_session(self, session, t0):
        """Test that tasks cannot be added to a completed session."""
        session.complete(t0)
        with pytest.raises(NotFoundError, match="Active session not found"):
            session.add_task("Outline")

    def test_toggle_task(self, session, t0):
        """Test that a task can be completed and reopened."""
        task = session.add_task("Outline")

        session.set_task_completed(task.id, True, t0)
        assert task.is_completed is True
        assert task.completed_at == t0

        session.set_task_completed(task.id, False, t0)
        assert task.is_completed is False
        assert task.completed_at is None

    def test_unknown_task(self, session, t0):
        """Test that toggling an unknown task raises NotFoundError."""
        with pytest.raises(NotFoundError, match="Task not found"):
            session.set_task_completed(uuid4(), True, t0)


class TestEncouragements:
    """Tests for encouragement add/remove."""

    def test_add_once_per_user(self, session, creator, t0):
        """Test that each user can encourage a session only once."""
        session.add_encouragement(creator.id, t0)
        with pytest.raises(ValidationError, match="already encouraged"):
            session.add_encouragement(creator.id, t0)
        assert len(session.encouragements) == 1

    def test_remove(self, session, creator, t0):
        """Test that an encouragement can be removed."""
        session.add_encouragement(creator.id, t0)
        session.remove_encouragement(creator.id)
        assert session.has_encouragement_from(creator.id) is False

    def test_remove_without_encouragement(self, session, creator):
        """Test that removing a missing encouragement is rejected."""
        with pytest.raises(ValidationError, match="have not encouraged"):
            session.remove_encouragement(creator.id)

    def test_users_are_independent(self, session, creator, member, t0):
        """Test that removing one user's encouragement keeps the others."""
        session.add_encouragement(creator.id, t0)
        session.add_encouragement(member.id, t0)
        session.remove_encouragement(creator.id)
        assert [e.user_id for e in session.encouragements] == [member.id]
