"""
Users service - storage gateway for the users_test table

Every operation is one parameterized statement on a connection borrowed from
the pool. asyncpg errors are translated into the service exceptions below so
routes can map them to HTTP status codes.
"""

import logging
from typing import Any, List, Optional

import asyncpg
from fastapi import Request

from models.user import User

logger = logging.getLogger(__name__)

USERS_TABLE = "users_test"

CREATE_USERS_TABLE_SQL = f"""
    CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
        id INT GENERATED ALWAYS AS IDENTITY,
        name VARCHAR(55) NOT NULL CHECK (name <> ''),
        age SMALLINT NOT NULL CHECK (age >= 18) DEFAULT 18
    )
"""

# Postgres rejections that mean the row itself is invalid
CONSTRAINT_ERRORS = (
    asyncpg.exceptions.CheckViolationError,
    asyncpg.exceptions.NotNullViolationError,
    asyncpg.exceptions.StringDataRightTruncationError,
    asyncpg.exceptions.NumericValueOutOfRangeError,
    # value does not fit the column type
    asyncpg.exceptions.DataError,
)


class UsersServiceError(Exception):
    """Base class for users storage errors"""


class UserNotFoundError(UsersServiceError):
    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class ConstraintViolationError(UsersServiceError):
    """A value was rejected by a table constraint (age, empty or long name, NOT NULL)"""


class StorageUnavailableError(UsersServiceError):
    """Connection or query failure unrelated to the data itself"""


class UsersService:
    """Service for user record operations"""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def _run(self, method: str, query: str, *args: Any) -> Any:
        try:
            async with self.pool.acquire() as conn:
                return await getattr(conn, method)(query, *args)
        except CONSTRAINT_ERRORS as e:
            logger.info(f"Write rejected by {USERS_TABLE} constraint: {e}")
            raise ConstraintViolationError(str(e)) from e
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error(f"Query on {USERS_TABLE} failed: {e}")
            raise StorageUnavailableError(str(e)) from e

    async def ensure_schema(self) -> None:
        """Create the users table if it does not exist yet"""
        await self._run("execute", CREATE_USERS_TABLE_SQL)
        logger.info(f"Table {USERS_TABLE} is ready")

    async def ping(self) -> None:
        await self._run("fetchval", "SELECT 1")

    async def list_users(self) -> List[User]:
        """
        Fetch every user

        Returns:
            All rows in storage order, or an empty list for an empty table
        """
        rows = await self._run("fetch", f"SELECT id, name, age FROM {USERS_TABLE}")
        return [User(**dict(row)) for row in rows]

    async def get_user(self, user_id: int) -> User:
        """
        Get a user by id

        Raises:
            UserNotFoundError: when no row has this id
        """
        row = await self._run(
            "fetchrow",
            f"SELECT id, name, age FROM {USERS_TABLE} WHERE id = $1",
            user_id,
        )
        if row is None:
            raise UserNotFoundError(user_id)
        return User(**dict(row))

    async def create_user(self, name: str, age: Optional[int] = None) -> User:
        """
        Insert a user and return it with its assigned id

        Args:
            name: Display name, at most 55 characters
            age: Age in years; None leaves the column out so the table default applies

        Raises:
            ConstraintViolationError: when the table rejects the values
        """
        if age is None:
            row = await self._run(
                "fetchrow",
                f"INSERT INTO {USERS_TABLE} (name) VALUES ($1) RETURNING id, name, age",
                name,
            )
        else:
            row = await self._run(
                "fetchrow",
                f"INSERT INTO {USERS_TABLE} (name, age) VALUES ($1, $2) RETURNING id, name, age",
                name,
                age,
            )
        user = User(**dict(row))
        logger.info(f"Created user {user.id}")
        return user

    async def delete_user(self, user_id: int) -> User:
        """
        Delete a user and return the values it had

        Raises:
            UserNotFoundError: when no row has this id
        """
        row = await self._run(
            "fetchrow",
            f"DELETE FROM {USERS_TABLE} WHERE id = $1 RETURNING id, name, age",
            user_id,
        )
        if row is None:
            raise UserNotFoundError(user_id)
        logger.info(f"Deleted user {user_id}")
        return User(**dict(row))


def get_users_service(request: Request) -> UsersService:
    """Get the users service created at startup"""
    return request.app.state.users_service
