from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from gogrind.app import App
from gogrind.config import Config
from gogrind.errors import UserError
from gogrind.web.error_handlers import general_exception_handler, user_error_handler
from gogrind.web.openapi import set_custom_openapi
from gogrind.web.routers import (
    auth_router,
    chat_router,
    friends_router,
    notifications_router,
    sessions_router,
    space_sessions_router,
    spaces_router,
    streams_router,
)


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="GoGrind API",
        lifespan=lifespan,
        openapi_tags=[],
    )

    # Credentials needed for the jwt cookie
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
        return await call_next(request)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(auth_router, prefix="/api")
    app.include_router(friends_router, prefix="/api")
    app.include_router(spaces_router, prefix="/api")
    app.include_router(space_sessions_router, prefix="/api")
    app.include_router(streams_router, prefix="/api")
    app.include_router(sessions_router, prefix="/api")
    app.include_router(notifications_router, prefix="/api")
    app.include_router(chat_router, prefix="/api")

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
