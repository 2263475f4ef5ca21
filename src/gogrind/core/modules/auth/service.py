from datetime import timedelta
from typing import Any

from pymongo.asynchronous.database import AsyncDatabase

from gogrind.core.core import Service
from gogrind.core.modules.auth.models import AuthToken
from gogrind.core.modules.auth.tokens import decode_auth_token, encode_auth_token
from gogrind.core.modules.user.models import User
from gogrind.errors import AuthenticationError
from gogrind.utils import now


class AuthService(Service):
    """Issues and verifies stateless JWT auth tokens."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)

    def create_token(self, user: User) -> AuthToken:
        config = self.core.config
        return encode_auth_token(user.id, config.jwt_secret_key, timedelta(days=config.jwt_ttl_days), now())

    async def get_authenticated_user(self, auth_token: AuthToken) -> User:
        user_id = decode_auth_token(auth_token, self.core.config.jwt_secret_key)
        if not self.core.services.user.has_user(user_id):
            raise AuthenticationError("Unauthorized - User not found")
        return self.core.services.user.get_user(user_id)

    async def is_auth_token_valid(self, auth_token: AuthToken) -> bool:
        try:
            await self.get_authenticated_user(auth_token)
        except AuthenticationError:
            return False
        return True
