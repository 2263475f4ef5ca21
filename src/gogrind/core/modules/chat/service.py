from typing import Any
from uuid import UUID

import jwt
import structlog
from pymongo.asynchronous.database import AsyncDatabase

from gogrind.core.core import Service
from gogrind.core.modules.auth.models import JWT_ALGORITHM
from gogrind.core.modules.chat.models import ChatToken
from gogrind.errors import ValidationError

logger = structlog.get_logger(__name__)


class ChatService(Service):
    """Issues user tokens for the external chat/video provider."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)

    def create_user_token(self, user_id: UUID) -> ChatToken:
        api_key = self.core.config.stream_api_key
        api_secret = self.core.config.stream_api_secret
        if not api_key or not api_secret:
            raise ValidationError("Chat is not configured on this server")

        token = jwt.encode({"user_id": str(user_id)}, api_secret, algorithm=JWT_ALGORITHM)
        logger.debug("chat_token_issued", user_id=user_id)
        return ChatToken(api_key=api_key, user_id=user_id, token=token)

    async def on_start(self) -> None:
        if not self.core.config.stream_api_key or not self.core.config.stream_api_secret:
            logger.warning("chat_not_configured")
