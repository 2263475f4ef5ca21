"""Shared pytest fixtures."""

import asyncio
import copy
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any
from uuid import UUID

import pytest

from gogrind.config import Config
from gogrind.core.core import Services
from gogrind.core.modules.space.models import Space
from gogrind.core.modules.user.models import User


def _values(value: Any, path: list[str]) -> list[Any]:
    """Values reachable at a dotted path, descending into arrays."""
    if not path:
        return [*value, value] if isinstance(value, list) else [value]
    if isinstance(value, list):
        return [found for item in value for found in _values(item, path)]
    if isinstance(value, dict) and path[0] in value:
        return _values(value[path[0]], path[1:])
    return []


def matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    for key, condition in query.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in condition):
                return False
            continue
        values = _values(doc, key.split("."))
        if isinstance(condition, dict) and "$ne" in condition:
            if condition["$ne"] in values:
                return False
        elif condition not in values:
            return False
    return True


def _pulled(item: Any, condition: Any) -> bool:
    if isinstance(condition, dict):
        return isinstance(item, dict) and matches(item, condition)
    return item == condition


def apply_update(doc: dict[str, Any], update: dict[str, Any]) -> None:
    for operator, fields in update.items():
        for key, value in fields.items():
            *parents, name = key.split(".")
            target = doc
            for part in parents:
                target = target.setdefault(part, {})
            value = copy.deepcopy(value)
            if operator == "$set":
                target[name] = value
            elif operator == "$push":
                target.setdefault(name, []).append(value)
            elif operator == "$addToSet":
                items = target.setdefault(name, [])
                if value not in items:
                    items.append(value)
            elif operator == "$pull":
                target[name] = [item for item in target.get(name, []) if not _pulled(item, value)]
            else:
                raise NotImplementedError(operator)


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._docs.sort(key=lambda doc: doc[key], reverse=direction < 0)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._docs = self._docs[count:]
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._docs = self._docs[:count]
        return self

    async def __aiter__(self):
        for doc in self._docs:
            yield doc


class FakeCollection:
    """In-memory collection covering the query and update operators the services use.

    `calls` records the name of every write method invoked.
    """

    def __init__(self) -> None:
        self.docs: list[dict[str, Any]] = []
        self.calls: list[str] = []

    def _matching(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        return [doc for doc in self.docs if matches(doc, query)]

    async def create_index(self, keys: Any, **kwargs: Any) -> None:
        pass

    async def find_one(self, query: dict[str, Any], sort: list[tuple[str, int]] | None = None) -> dict[str, Any] | None:
        found = self._matching(query)
        for key, direction in sort or []:
            found.sort(key=lambda doc: doc[key], reverse=direction < 0)
        return copy.deepcopy(found[0]) if found else None

    def find(self, query: dict[str, Any] | None = None) -> FakeCursor:
        return FakeCursor(copy.deepcopy(self._matching(query or {})))

    async def count_documents(self, query: dict[str, Any]) -> int:
        return len(self._matching(query))

    async def insert_one(self, doc: dict[str, Any]) -> SimpleNamespace:
        self.calls.append("insert_one")
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def insert_many(self, docs: list[dict[str, Any]]) -> SimpleNamespace:
        self.calls.append("insert_many")
        self.docs.extend(copy.deepcopy(docs))
        return SimpleNamespace(inserted_ids=[doc["_id"] for doc in docs])

    async def replace_one(self, query: dict[str, Any], replacement: dict[str, Any]) -> SimpleNamespace:
        self.calls.append("replace_one")
        for index, doc in enumerate(self.docs):
            if matches(doc, query):
                self.docs[index] = copy.deepcopy(replacement)
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> SimpleNamespace:
        self.calls.append("update_one")
        return self._update(self._matching(query)[:1], update)

    async def update_many(self, query: dict[str, Any], update: dict[str, Any]) -> SimpleNamespace:
        self.calls.append("update_many")
        return self._update(self._matching(query), update)

    def _update(self, docs: list[dict[str, Any]], update: dict[str, Any]) -> SimpleNamespace:
        modified = 0
        for doc in docs:
            before = copy.deepcopy(doc)
            apply_update(doc, update)
            modified += doc != before
        return SimpleNamespace(matched_count=len(docs), modified_count=modified)

    async def delete_one(self, query: dict[str, Any]) -> SimpleNamespace:
        self.calls.append("delete_one")
        found = self._matching(query)[:1]
        self.docs = [doc for doc in self.docs if doc not in found]
        return SimpleNamespace(deleted_count=len(found))

    async def delete_many(self, query: dict[str, Any]) -> SimpleNamespace:
        self.calls.append("delete_many")
        found = self._matching(query)
        self.docs = [doc for doc in self.docs if doc not in found]
        return SimpleNamespace(deleted_count=len(found))


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture
def t0():
    """Fixed reference time for lifecycle tests."""
    return datetime(2025, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def creator():
    return User(
        id=UUID("11111111-1111-1111-1111-111111111111"),
        email="creator@example.com",
        full_name="Space Creator",
        password_hash="$2b$12$hashed_password_here",
    )


@pytest.fixture
def member():
    return User(
        id=UUID("22222222-2222-2222-2222-222222222222"),
        email="member@example.com",
        full_name="Space Member",
        password_hash="$2b$12$hashed_password_here",
    )


@pytest.fixture
def outsider():
    return User(
        id=UUID("33333333-3333-3333-3333-333333333333"),
        email="outsider@example.com",
        full_name="Outsider",
        password_hash="$2b$12$hashed_password_here",
    )


@pytest.fixture
def space(creator, member):
    """Space with its creator and one regular member; the stream room is not opened yet."""
    return Space(
        id=UUID("12345678-1234-5678-1234-567812345678"),
        name="Calculus crew",
        description="Daily problem sets",
        skill="Math",
        creator_id=creator.id,
        members=[creator.id, member.id],
        max_members=3,
    )


@pytest.fixture
def database():
    return FakeDatabase()


@pytest.fixture
def config():
    return Config(
        database_url="mongodb://localhost:27017/gogrind_test",
        host="127.0.0.1",
        port=3100,
        debug=False,
        jwt_secret_key="test-secret",
        space_write_attempts=3,
    )


@pytest.fixture
def services(database, config, creator, member, outsider, space):
    """All services wired to an in-memory database holding the three users and the space."""
    services = Services(database)
    services.set_core(SimpleNamespace(config=config, database=database, services=services))

    database.get_collection("users").docs.extend(user.to_mongo() for user in (creator, member, outsider))
    database.get_collection("spaces").docs.append(space.to_mongo())
    asyncio.run(services.user.update_all_users_cache())
    return services
