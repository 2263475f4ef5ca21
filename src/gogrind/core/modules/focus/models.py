"""Personal focus sessions opened when a user joins a space stream."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from gogrind.core.db import EmbeddedModel, MongoModel
from gogrind.errors import NotFoundError, ValidationError
from gogrind.utils import minutes_between, now

MIN_TARGET_DURATION = 5  # minutes


class Task(EmbeddedModel):
    title: str
    is_completed: bool = False
    completed_at: datetime | None = None


class Encouragement(BaseModel):
    user_id: UUID
    timestamp: datetime = Field(default_factory=now)


class MediaUsage(BaseModel):
    """Whether video/audio was ever enabled during the session."""

    video_enabled: bool = False
    audio_enabled: bool = False


class FocusSession(MongoModel):
    """One user's focus timer in a space.

    Indexed on (user_id, space_id), (space_id, end_time desc) and (user_id, end_time desc).
    """

    user_id: UUID
    space_id: UUID
    grinding_topic: str
    target_duration: int = 60  # minutes
    actual_duration: int = 0  # minutes, set on completion
    start_time: datetime = Field(default_factory=now)
    end_time: datetime | None = None
    tasks: list[Task] = Field(default_factory=list)
    is_completed: bool = False
    encouragements: list[Encouragement] = Field(default_factory=list)
    media_usage: MediaUsage = Field(default_factory=MediaUsage)

    def complete(self, at: datetime) -> None:
        """Stop the timer. Completing twice keeps the first end time."""
        if self.is_completed:
            return
        end_time = max(at, self.start_time)
        self.end_time = end_time
        self.actual_duration = minutes_between(self.start_time, end_time)
        self.is_completed = True

    def get_task(self, task_id: UUID) -> Task:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise NotFoundError("Task not found")

    def add_task(self, title: str) -> Task:
        title = title.strip()
        if not title:
            raise ValidationError("Task title is required")
        if self.is_completed:
            raise NotFoundError("Active session not found")
        task = Task(title=title)
        self.tasks.append(task)
        return task

    def set_task_completed(self, task_id: UUID, is_completed: bool, at: datetime) -> Task:
        task = self.get_task(task_id)
        task.is_completed = is_completed
        task.completed_at = at if is_completed else None
        return task

    def has_encouragement_from(self, user_id: UUID) -> bool:
        return any(encouragement.user_id == user_id for encouragement in self.encouragements)

    def add_encouragement(self, user_id: UUID, at: datetime) -> Encouragement:
        if self.has_encouragement_from(user_id):
            raise ValidationError("You have already encouraged this participant")
        encouragement = Encouragement(user_id=user_id, timestamp=at)
        self.encouragements.append(encouragement)
        return encouragement

    def remove_encouragement(self, user_id: UUID) -> None:
        if not self.has_encouragement_from(user_id):
            raise ValidationError("You have not encouraged this participant")
        self.encouragements = [e for e in self.encouragements if e.user_id != user_id]


def validate_new_session(grinding_topic: str, target_duration: int) -> str:
    """Validate join parameters and return the trimmed topic."""
    grinding_topic = grinding_topic.strip()
    if not grinding_topic:
        raise ValidationError("Grinding topic is required")
    if target_duration < MIN_TARGET_DURATION:
        raise ValidationError(f"Target duration must be at least {MIN_TARGET_DURATION} minutes")
    return grinding_topic
