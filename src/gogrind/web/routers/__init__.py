from gogrind.web.routers.auth import router as auth_router
from gogrind.web.routers.chat import router as chat_router
from gogrind.web.routers.friends import router as friends_router
from gogrind.web.routers.notifications import router as notifications_router
from gogrind.web.routers.sessions import router as sessions_router
from gogrind.web.routers.space_sessions import router as space_sessions_router
from gogrind.web.routers.spaces import router as spaces_router
from gogrind.web.routers.streams import router as streams_router

__all__ = [
    "auth_router",
    "chat_router",
    "friends_router",
    "notifications_router",
    "sessions_router",
    "space_sessions_router",
    "spaces_router",
    "streams_router",
]
