from types import MappingProxyType
from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from gogrind.core.core import Service
from gogrind.core.modules.user.models import ProfileUpdate, User
from gogrind.core.modules.user.validators import normalize_email, validate_full_name, validate_password
from gogrind.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class UserService(Service):
    """Manages users with in-memory cache."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")
        self._users: dict[UUID, User] = {}

    def get_user(self, user_id: UUID) -> User:
        """Get user by ID from cache."""
        if user_id not in self._users:
            raise NotFoundError(f"User '{user_id}' not found")
        return self._users[user_id]

    def get_user_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        return next((u for u in self._users.values() if u.email == email), None)

    def has_user(self, user_id: UUID) -> bool:
        """Check if user exists by ID."""
        return user_id in self._users

    def get_users(self, user_ids: list[UUID]) -> list[User]:
        """Resolve a list of IDs, silently skipping unknown ones."""
        return [self._users[user_id] for user_id in user_ids if user_id in self._users]

    def get_all_users(self) -> list[User]:
        """Get all users from cache."""
        return list(self._users.values())

    def get_user_cache(self) -> MappingProxyType[UUID, User]:
        """Get read-only view of user cache for formatting purposes."""
        return MappingProxyType(self._users)

    async def create_user(self, email: str, password: str, full_name: str) -> User:
        """Create user with hashed password."""
        email = normalize_email(email)
        full_name = validate_full_name(full_name)
        if self.get_user_by_email(email) is not None:
            raise ValidationError("Email already exists, please use a different one")

        validate_password(password)
        password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
        try:
            res = await self._collection.insert_one(
                User(email=email, full_name=full_name, password_hash=password_hash).to_mongo()
            )
        except DuplicateKeyError as e:
            raise ValidationError("Email already exists, please use a different one") from e
        logger.info("user_created", user_id=res.inserted_id)
        return await self.update_user_cache(res.inserted_id)

    def verify_password(self, email: str, password: str) -> User | None:
        """Return the user if the password matches the stored hash."""
        user = self.get_user_by_email(email)
        if user is None:
            return None
        if not bcrypt.checkpw(password.encode("utf-8"), user.password_hash.encode("utf-8")):
            return None
        return user

    async def onboard(self, user_id: UUID, profile: ProfileUpdate) -> User:
        """Store profile fields and mark the user as onboarded."""
        self.get_user(user_id)
        update = profile.model_dump(exclude_unset=True)
        update["full_name"] = validate_full_name(profile.full_name)
        update["is_onboarded"] = True
        await self._collection.update_one({"_id": user_id}, {"$set": update})
        return await self.update_user_cache(user_id)

    async def add_friends(self, first_id: UUID, second_id: UUID) -> None:
        """Link two users as friends; repeated calls do not duplicate."""
        await self._collection.update_one({"_id": first_id}, {"$addToSet": {"friends": second_id}})
        await self._collection.update_one({"_id": second_id}, {"$addToSet": {"friends": first_id}})
        await self.update_user_cache(first_id)
        await self.update_user_cache(second_id)

    async def remove_friends(self, first_id: UUID, second_id: UUID) -> None:
        await self._collection.update_one({"_id": first_id}, {"$pull": {"friends": second_id}})
        await self._collection.update_one({"_id": second_id}, {"$pull": {"friends": first_id}})
        await self.update_user_cache(first_id)
        await self.update_user_cache(second_id)

    async def update_all_users_cache(self) -> None:
        """Reload all users cache from database."""
        users = await User.list_cursor(self._collection.find())
        self._users = {user.id: user for user in users}

    async def update_user_cache(self, user_id: UUID) -> User:
        """Reload a specific user cache from database."""
        user = await self._collection.find_one({"_id": user_id})
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        self._users[user_id] = User.model_validate(user)
        return self._users[user_id]

    async def on_start(self) -> None:
        """Initialize indexes and cache."""
        await self._collection.create_index([("email", 1)], unique=True)
        await self.update_all_users_cache()
        logger.debug("user_service_started", user_count=len(self._users))
