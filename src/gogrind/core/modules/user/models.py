from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from gogrind.core.db import MongoModel
from gogrind.utils import now


class User(MongoModel):
    """User domain model with credentials."""

    email: str  # Stored lowercase, unique
    full_name: str
    password_hash: str  # bcrypt hash
    bio: str = ""
    profile_pic: str = ""
    native_language: str = ""
    learning_skill: str = ""
    location: str = ""
    is_onboarded: bool = False
    friends: list[UUID] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=now)


class UserView(BaseModel):
    """User profile (API representation, no credentials)."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    full_name: str = Field(..., description="Display name")
    bio: str = Field("", description="Short bio")
    profile_pic: str = Field("", description="Avatar URL")
    native_language: str = Field("", description="Native language")
    learning_skill: str = Field("", description="Skill the user is working on")
    location: str = Field("", description="Location")
    is_onboarded: bool = Field(False, description="Whether onboarding is finished")
    friends: list[UUID] = Field(default_factory=list, description="Friend user IDs")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls.model_validate(user.model_dump(exclude={"password_hash", "created_at"}))


class UserSummary(BaseModel):
    """Minimal user reference embedded in denormalized responses."""

    id: UUID
    full_name: str
    profile_pic: str = ""

    @classmethod
    def from_domain(cls, user: User) -> "UserSummary":
        return cls(id=user.id, full_name=user.full_name, profile_pic=user.profile_pic)


class ProfileUpdate(BaseModel):
    """Profile fields collected during onboarding."""

    full_name: str
    bio: str = ""
    native_language: str = ""
    learning_skill: str = ""
    location: str = ""
    profile_pic: str = ""
