from uuid import UUID

from pydantic import BaseModel, Field


class ChatToken(BaseModel):
    """Credentials the frontend hands to the chat/video SDK."""

    api_key: str = Field(..., description="Public API key of the chat/video provider")
    user_id: UUID = Field(..., description="User ID the token was issued for")
    token: str = Field(..., description="Signed user token")
