from uuid import UUID

from gogrind.core.core import Service
from gogrind.core.modules.auth.models import AuthToken
from gogrind.core.modules.space.models import Space
from gogrind.core.modules.user.models import User
from gogrind.errors import AccessDeniedError


class AccessService(Service):
    async def ensure_authenticated(self, auth_token: AuthToken) -> User:
        """Ensure the user is authenticated."""
        return await self.core.services.auth.get_authenticated_user(auth_token)

    async def ensure_space_member(self, auth_token: AuthToken, space: Space) -> User:
        """Ensure the authenticated user is a member (or the creator) of the space."""
        user = await self.ensure_authenticated(auth_token)
        if not space.is_member(user.id):
            raise AccessDeniedError("Only members can access this space")
        return user

    def ensure_friend_or_self(self, requester: User, user_id: UUID) -> None:
        """Ensure the requester is the user or one of their friends."""
        if requester.id == user_id:
            return
        target = self.core.services.user.get_user(user_id)
        if requester.id not in target.friends:
            raise AccessDeniedError("You must be friends with this user to view their sessions")
