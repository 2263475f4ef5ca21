"""Aggregate statistics over the completed focus sessions of a space."""

from collections.abc import Mapping
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from gogrind.core.modules.focus.models import FocusSession
from gogrind.core.modules.user.models import User, UserSummary

RECENT_SESSIONS_LIMIT = 10


class RecentSessionSummary(BaseModel):
    id: UUID
    user: UserSummary | None = Field(None, description="Session owner, null if the account no longer exists")
    grinding_topic: str
    target_duration: int
    actual_duration: int
    start_time: datetime
    end_time: datetime | None
    tasks_completed: int
    total_tasks: int


class SpaceStats(BaseModel):
    total_sessions: int = Field(..., description="Number of completed sessions")
    total_minutes: int = Field(..., description="Sum of actual durations")
    total_hours: float = Field(..., description="Total minutes in hours, 2 decimals")
    avg_duration: float = Field(..., description="Average actual duration in minutes, 2 decimals")
    task_completion_rate: float = Field(..., description="Percent of tasks completed, 0-100")
    session_completion_rate: float = Field(..., description="Percent of sessions that reached their target, 0-100")
    unique_participants: int = Field(..., description="Distinct users with a completed session")
    recent_sessions: list[RecentSessionSummary] = Field(..., description="Most recently finished sessions")


def _percent(part: int, whole: int) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def compute_space_stats(sessions: list[FocusSession], users: Mapping[UUID, User]) -> SpaceStats:
    """Compute summary metrics; rounding happens only on the returned values."""
    completed = [session for session in sessions if session.is_completed]

    total_sessions = len(completed)
    total_minutes = sum(session.actual_duration for session in completed)
    avg_duration = total_minutes / total_sessions if total_sessions > 0 else 0.0

    total_tasks = sum(len(session.tasks) for session in completed)
    completed_tasks = sum(1 for session in completed for task in session.tasks if task.is_completed)
    target_met = sum(1 for session in completed if session.actual_duration >= session.target_duration)

    recent = sorted(completed, key=lambda s: s.end_time or s.start_time, reverse=True)[:RECENT_SESSIONS_LIMIT]

    return SpaceStats(
        total_sessions=total_sessions,
        total_minutes=total_minutes,
        total_hours=round(total_minutes / 60, 2),
        avg_duration=round(avg_duration, 2),
        task_completion_rate=round(_percent(completed_tasks, total_tasks), 2),
        session_completion_rate=round(_percent(target_met, total_sessions), 2),
        unique_participants=len({session.user_id for session in completed}),
        recent_sessions=[
            RecentSessionSummary(
                id=session.id,
                user=UserSummary.from_domain(users[session.user_id]) if session.user_id in users else None,
                grinding_topic=session.grinding_topic,
                target_duration=session.target_duration,
                actual_duration=session.actual_duration,
                start_time=session.start_time,
                end_time=session.end_time,
                tasks_completed=sum(1 for task in session.tasks if task.is_completed),
                total_tasks=len(session.tasks),
            )
            for session in recent
        ],
    )
