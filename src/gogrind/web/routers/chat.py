from fastapi import APIRouter

from gogrind.core.modules.chat.models import ChatToken
from gogrind.web.deps import AppDep, AuthTokenDep
from gogrind.web.openapi import ErrorResponse

router = APIRouter(tags=["chat"])


@router.get(
    "/chat/token",
    summary="Get chat token",
    description="Issue a user token for the external chat/video provider.",
    operation_id="getChatToken",
    responses={
        200: {"description": "Chat credentials"},
        400: {"model": ErrorResponse, "description": "Chat is not configured"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_chat_token(app: AppDep, auth_token: AuthTokenDep) -> ChatToken:
    return await app.get_chat_token(auth_token)
