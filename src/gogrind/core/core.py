from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import urlparse

import structlog
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from gogrind.config import Config

logger = structlog.get_logger(__name__)


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self.database = database
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Registry holding one instance of every service, in start order."""

    from gogrind.core.modules.access.service import AccessService  # noqa: PLC0415
    from gogrind.core.modules.auth.service import AuthService  # noqa: PLC0415
    from gogrind.core.modules.chat.service import ChatService  # noqa: PLC0415
    from gogrind.core.modules.focus.service import FocusService  # noqa: PLC0415
    from gogrind.core.modules.friend.service import FriendService  # noqa: PLC0415
    from gogrind.core.modules.notification.service import NotificationService  # noqa: PLC0415
    from gogrind.core.modules.space.service import SpaceService  # noqa: PLC0415
    from gogrind.core.modules.stream.service import StreamService  # noqa: PLC0415
    from gogrind.core.modules.user.service import UserService  # noqa: PLC0415

    user: UserService
    auth: AuthService
    space: SpaceService
    access: AccessService
    notification: NotificationService
    friend: FriendService
    focus: FocusService
    stream: StreamService
    chat: ChatService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        # Start order: user fills its cache before anything reads it
        registry: list[tuple[str, type[Service]]] = [
            ("user", self.UserService),
            ("auth", self.AuthService),
            ("space", self.SpaceService),
            ("access", self.AccessService),
            ("notification", self.NotificationService),
            ("friend", self.FriendService),
            ("focus", self.FocusService),
            ("stream", self.StreamService),
            ("chat", self.ChatService),
        ]
        self._services: list[Service] = []
        for attr_name, service_class in registry:
            service = service_class(database)
            setattr(self, attr_name, service)
            self._services.append(service)

    def set_core(self, core: Core) -> None:
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()
            logger.debug("service_started", service=type(service).__name__)

    async def stop_all(self) -> None:
        for service in reversed(self._services):
            await service.on_stop()


def database_name(database_url: str) -> str:
    """Database name taken from the path of a MongoDB URL."""
    name = urlparse(database_url).path.lstrip("/")
    if not name:
        raise ValueError(f"Database URL must include a database name: {database_url!r}")
    return name


class Core:
    """Container providing config, database, and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    services: Services

    def __init__(self, config: Config) -> None:
        self.config = config
        self.mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard", tz_aware=True)
        self.database = self.mongo_client.get_database(database_name(config.database_url))
        self.services = Services(self.database)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Start services for the duration of the block, then close the client."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.database.command("ping")
        logger.info("database_connected", database=self.database.name)
        await self.services.start_all()

    async def on_stop(self) -> None:
        await self.services.stop_all()
        await self.mongo_client.aclose()
        logger.info("database_closed")
