"""
pytest configuration and fixtures for the users API test suite
Fakes for the asyncpg pool and for the users service, so no database is needed
"""

import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from app import create_app
from config.settings import Settings
from models.user import User
from services.users_service import (
    ConstraintViolationError,
    StorageUnavailableError,
    UserNotFoundError,
    UsersService,
    get_users_service,
)


class FakeConnection:
    """Stands in for asyncpg.Connection; records every statement"""

    def __init__(self):
        self.calls: List[tuple] = []
        self.results: Dict[str, Any] = {}

    async def _call(self, method: str, query: str, *args):
        self.calls.append((method, query, args))
        result = self.results.get(method)
        if isinstance(result, Exception):
            raise result
        return result

    async def execute(self, query, *args):
        return await self._call("execute", query, *args)

    async def fetch(self, query, *args):
        return await self._call("fetch", query, *args)

    async def fetchrow(self, query, *args):
        return await self._call("fetchrow", query, *args)

    async def fetchval(self, query, *args):
        return await self._call("fetchval", query, *args)


class FakePool:
    def __init__(self, conn: FakeConnection):
        self.conn = conn
        self.closed = False

    @asynccontextmanager
    async def acquire(self):
        yield self.conn

    async def close(self):
        self.closed = True


class InMemoryUsersService:
    """Users service backed by a dict, enforcing the same rules as the table"""

    def __init__(self):
        self.rows: Dict[int, User] = {}
        self.next_id = 1
        self.storage_down = False

    def _check_storage(self):
        if self.storage_down:
            raise StorageUnavailableError("connection refused")

    async def ping(self) -> None:
        self._check_storage()

    async def list_users(self) -> List[User]:
        self._check_storage()
        return list(self.rows.values())

    async def get_user(self, user_id: int) -> User:
        self._check_storage()
        if user_id not in self.rows:
            raise UserNotFoundError(user_id)
        return self.rows[user_id]

    async def create_user(self, name: str, age: Optional[int] = None) -> User:
        self._check_storage()
        if age is None:
            age = 18
        if age < 18:
            raise ConstraintViolationError('new row violates check constraint "users_test_age_check"')
        if name == "":
            raise ConstraintViolationError('new row violates check constraint "users_test_name_check"')
        if len(name) > 55:
            raise ConstraintViolationError("value too long for type character varying(55)")
        user = User(id=self.next_id, name=name, age=age)
        self.rows[user.id] = user
        self.next_id += 1
        return user

    async def delete_user(self, user_id: int) -> User:
        self._check_storage()
        if user_id not in self.rows:
            raise UserNotFoundError(user_id)
        return self.rows.pop(user_id)


def make_settings(**overrides) -> Settings:
    values = {"db_user": "tester", "db_password": "secret", "db_name": "users"}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def fake_conn():
    return FakeConnection()


@pytest.fixture
def fake_pool(fake_conn):
    return FakePool(fake_conn)


@pytest.fixture
def users_store():
    return InMemoryUsersService()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(settings, users_store):
    """HTTP client for an app whose users service is the in-memory fake"""
    app = create_app(settings)
    app.dependency_overrides[get_users_service] = lambda: users_store
    return TestClient(app)


@pytest.fixture
def gateway_client(settings, fake_pool):
    """HTTP client serving the real UsersService over the fake pool"""
    app = create_app(settings)
    users_service = UsersService(fake_pool)
    app.dependency_overrides[get_users_service] = lambda: users_service
    return TestClient(app, raise_server_exceptions=False)
