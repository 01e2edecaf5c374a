"""Database operations for worktime data."""

import asyncio
import json
import logging
import os
import secrets
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional

import aiosqlite

from ..models.user import UserRef
from ..models.working import Working

# Set up logging
logger = logging.getLogger(__name__)

# Current schema version
SCHEMA_VERSION = 1

# Database configuration
LOCK_TIMEOUT = 30  # seconds
MAX_CONNECTIONS = 5

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS workings (
    id          TEXT PRIMARY KEY,
    author_id   TEXT,
    author_type TEXT,
    status      TEXT NOT NULL,
    created_at  TEXT NOT NULL,
    document    TEXT NOT NULL  -- JSON
);

CREATE INDEX IF NOT EXISTS idx_workings_author ON workings(author_type, author_id);
CREATE INDEX IF NOT EXISTS idx_workings_created_at ON workings(created_at);

CREATE TABLE IF NOT EXISTS users (
    provider              TEXT NOT NULL,
    provider_id           TEXT NOT NULL,
    time_and_salary_count INTEGER NOT NULL DEFAULT 0,
    email                 TEXT,
    subscribe_email       INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (provider, provider_id)
);

CREATE TABLE IF NOT EXISTS companies (
    id      TEXT PRIMARY KEY,
    name    TEXT NOT NULL,
    type    TEXT,
    capital INTEGER
);

CREATE INDEX IF NOT EXISTS idx_companies_name ON companies(name);

CREATE TABLE IF NOT EXISTS recommendations (
    id        TEXT PRIMARY KEY,
    user_id   TEXT NOT NULL,
    user_type TEXT NOT NULL,
    count     INTEGER NOT NULL DEFAULT 0,
    UNIQUE (user_id, user_type)
);
"""


class DatabaseError(Exception):
    """Custom exception for database operations."""

    pass


class DuplicateKeyError(DatabaseError):
    """Exception raised when a write hits a uniqueness constraint."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Exception raised when database connection fails."""

    pass


class WorktimeDatabase:
    """Handles database operations for worktime data."""

    def __init__(self, db_path: str):
        """Initialize database handle.

        Args:
            db_path: Path to the database file
        """
        self.db_path = db_path
        self._connection_pool: List[aiosqlite.Connection] = []
        self._pool_lock = asyncio.Lock()

        # Ensure the database directory exists (only if directory part is non-empty)
        db_dirname = os.path.dirname(self.db_path)
        if db_dirname:
            os.makedirs(db_dirname, exist_ok=True)

        logger.info(f"Database handle created for: {self.db_path}")

    async def ainit(self) -> "WorktimeDatabase":
        """
        Async helper so callers can do:

            db = await WorktimeDatabase(path).ainit()

        It ensures tables exist and records the schema version.
        """
        await self.init_db()
        return self

    async def init_db(self) -> None:
        """Initialize the database and create necessary tables."""
        try:
            async with self._get_connection() as conn:
                await conn.execute("""
                    CREATE TABLE IF NOT EXISTS schema_version (
                        version INTEGER PRIMARY KEY,
                        applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                async with conn.execute(
                    "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
                ) as cursor:
                    row = await cursor.fetchone()
                current_version = row[0] if row else 0

                if current_version < SCHEMA_VERSION:
                    logger.info(
                        f"Upgrading schema from version {current_version} to {SCHEMA_VERSION}"
                    )
                    await conn.executescript(SCHEMA_SQL)
                    await conn.execute(
                        "INSERT INTO schema_version (version) VALUES (?)",
                        (SCHEMA_VERSION,),
                    )
                    await conn.commit()
                    logger.info(f"Schema upgraded to version {SCHEMA_VERSION}")
                else:
                    logger.info(
                        f"Database schema is up to date (version {current_version})"
                    )
        except aiosqlite.Error as e:
            logger.error(f"Failed to initialize database: {str(e)}")
            raise DatabaseError(f"Failed to initialize database: {str(e)}") from e

    @asynccontextmanager
    async def _get_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection from the pool, opening one if the pool is empty."""
        async with self._pool_lock:
            conn = self._connection_pool.pop() if self._connection_pool else None
        if conn is None:
            try:
                conn = await aiosqlite.connect(self.db_path, timeout=LOCK_TIMEOUT)
            except aiosqlite.Error as e:
                raise DatabaseConnectionError(
                    f"Could not open {self.db_path}: {str(e)}"
                ) from e
            conn.row_factory = aiosqlite.Row
            # Set busy timeout to handle concurrent access
            await conn.execute("PRAGMA busy_timeout = 5000")
        try:
            yield conn
        except BaseException:
            await conn.rollback()
            raise
        finally:
            await self._release_connection(conn)

    async def _release_connection(self, conn: aiosqlite.Connection) -> None:
        """Release a connection back to the pool.

        Args:
            conn: Connection to release
        """
        async with self._pool_lock:
            if len(self._connection_pool) < MAX_CONNECTIONS:
                self._connection_pool.append(conn)
                return
        await conn.close()

    async def check_connection(self) -> bool:
        """Check if the database connection is working."""
        try:
            async with self._get_connection() as conn:
                await conn.execute("SELECT 1")
            return True
        except (aiosqlite.Error, DatabaseError):
            return False

    async def close(self) -> None:
        """Close all database connections."""
        async with self._pool_lock:
            for conn in self._connection_pool:
                await conn.close()
            self._connection_pool.clear()

    # -- Workings ---------------------------------------------------------------

    async def insert_working(self, working: Working) -> str:
        """Insert a working record.

        Returns:
            str: id of the stored record

        Raises:
            DuplicateKeyError: If a record with the same id exists
        """
        document = working.to_document()
        try:
            async with self._get_connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO workings (id, author_id, author_type, status, created_at, document)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        working.id,
                        working.author.id,
                        working.author.type,
                        working.status,
                        document["created_at"],
                        json.dumps(document),
                    ),
                )
                await conn.commit()
        except aiosqlite.IntegrityError as e:
            raise DuplicateKeyError(f"Working {working.id} already exists") from e
        return working.id

    async def get_working(self, working_id: str) -> Optional[Working]:
        """Fetch a stored working record by id, or None."""
        async with self._get_connection() as conn:
            async with conn.execute(
                "SELECT document FROM workings WHERE id = ?", (working_id,)
            ) as cursor:
                row = await cursor.fetchone()
        if row is None:
            return None
        return Working.model_validate(json.loads(row["document"]))

    async def get_working_document(self, working_id: str) -> Optional[Dict[str, Any]]:
        """Fetch the raw stored JSON document of a working record."""
        async with self._get_connection() as conn:
            async with conn.execute(
                "SELECT document FROM workings WHERE id = ?", (working_id,)
            ) as cursor:
                row = await cursor.fetchone()
        return json.loads(row["document"]) if row else None

    async def count_workings(self) -> int:
        async with self._get_connection() as conn:
            async with conn.execute("SELECT COUNT(*) FROM workings") as cursor:
                row = await cursor.fetchone()
        return row[0]

    # -- Users / quota ----------------------------------------------------------

    async def increment_quota(self, user: UserRef) -> int:
        """Atomically add one to the user's submission counter.

        The user row is created on first use. The increment and the read of
        the new value are one statement, so concurrent callers never observe
        the same count.

        Returns:
            int: the counter value after the increment

        Raises:
            DuplicateKeyError: If the upsert races another insert of the same user
        """
        try:
            async with self._get_connection() as conn:
                async with conn.execute(
                    """
                    INSERT INTO users (provider, provider_id, time_and_salary_count)
                    VALUES (?, ?, 1)
                    ON CONFLICT (provider, provider_id)
                    DO UPDATE SET time_and_salary_count = time_and_salary_count + 1
                    RETURNING time_and_salary_count
                    """,
                    (user.type, user.id),
                ) as cursor:
                    row = await cursor.fetchone()
                await conn.commit()
        except aiosqlite.IntegrityError as e:
            raise DuplicateKeyError(f"User {user.type}:{user.id} insert raced") from e
        return row[0]

    async def decrement_quota(self, user: UserRef) -> None:
        """Subtract one from the user's submission counter."""
        async with self._get_connection() as conn:
            await conn.execute(
                """
                UPDATE users SET time_and_salary_count = time_and_salary_count - 1
                WHERE provider = ? AND provider_id = ?
                """,
                (user.type, user.id),
            )
            await conn.commit()

    async def get_quota_count(self, user: UserRef) -> int:
        """Current submission counter of the user, 0 for an unknown user."""
        async with self._get_connection() as conn:
            async with conn.execute(
                "SELECT time_and_salary_count FROM users WHERE provider = ? AND provider_id = ?",
                (user.type, user.id),
            ) as cursor:
                row = await cursor.fetchone()
        return row[0] if row else 0

    async def set_quota_count(self, user: UserRef, count: int) -> None:
        """Overwrite the user's submission counter (seeding and admin use)."""
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO users (provider, provider_id, time_and_salary_count)
                VALUES (?, ?, ?)
                ON CONFLICT (provider, provider_id)
                DO UPDATE SET time_and_salary_count = excluded.time_and_salary_count
                """,
                (user.type, user.id, count),
            )
            await conn.commit()

    async def update_subscribe_email(self, user: UserRef, email: str) -> None:
        """Store the user's email and mark them as subscribed."""
        if not email:
            return
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO users (provider, provider_id, email, subscribe_email)
                VALUES (?, ?, ?, 1)
                ON CONFLICT (provider, provider_id)
                DO UPDATE SET email = excluded.email, subscribe_email = 1
                """,
                (user.type, user.id, email),
            )
            await conn.commit()

    async def get_user(self, user: UserRef) -> Optional[Dict[str, Any]]:
        async with self._get_connection() as conn:
            async with conn.execute(
                "SELECT * FROM users WHERE provider = ? AND provider_id = ?",
                (user.type, user.id),
            ) as cursor:
                row = await cursor.fetchone()
        return dict(row) if row else None

    # -- Companies --------------------------------------------------------------

    async def insert_companies(self, companies: Iterable[Dict[str, Any]]) -> None:
        """Insert company directory rows; names are stored upper-cased."""
        rows = [
            (c["id"], c["name"].upper(), c.get("type"), c.get("capital"))
            for c in companies
        ]
        try:
            async with self._get_connection() as conn:
                await conn.executemany(
                    "INSERT INTO companies (id, name, type, capital) VALUES (?, ?, ?, ?)",
                    rows,
                )
                await conn.commit()
        except aiosqlite.IntegrityError as e:
            raise DuplicateKeyError(f"Failed to insert companies: {str(e)}") from e

    async def find_companies_by_id(self, company_id: str) -> List[Dict[str, Any]]:
        async with self._get_connection() as conn:
            async with conn.execute(
                "SELECT id, name, type, capital FROM companies WHERE id = ?",
                (company_id,),
            ) as cursor:
                rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def find_companies_by_name(self, name: str) -> List[Dict[str, Any]]:
        async with self._get_connection() as conn:
            async with conn.execute(
                "SELECT id, name, type, capital FROM companies WHERE name = ?",
                (name,),
            ) as cursor:
                rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    # -- Recommendations --------------------------------------------------------

    async def get_or_create_recommendation(self, user: UserRef) -> str:
        """Return the recommendation id of a user, creating it on first use."""
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO recommendations (id, user_id, user_type)
                VALUES (?, ?, ?)
                ON CONFLICT (user_id, user_type) DO NOTHING
                """,
                (secrets.token_hex(12), user.id, user.type),
            )
            async with conn.execute(
                "SELECT id FROM recommendations WHERE user_id = ? AND user_type = ?",
                (user.id, user.type),
            ) as cursor:
                row = await cursor.fetchone()
            await conn.commit()
        return row["id"]

    async def insert_recommendation(
        self, recommendation_id: str, user: UserRef, count: int = 0
    ) -> None:
        try:
            async with self._get_connection() as conn:
                await conn.execute(
                    "INSERT INTO recommendations (id, user_id, user_type, count) VALUES (?, ?, ?, ?)",
                    (recommendation_id, user.id, user.type, count),
                )
                await conn.commit()
        except aiosqlite.IntegrityError as e:
            raise DuplicateKeyError(
                f"Recommendation {recommendation_id} already exists"
            ) from e

    async def find_recommendation(self, recommendation_id: str) -> Optional[Dict[str, Any]]:
        async with self._get_connection() as conn:
            async with conn.execute(
                "SELECT id, user_id, user_type, count FROM recommendations WHERE id = ?",
                (recommendation_id,),
            ) as cursor:
                row = await cursor.fetchone()
        return dict(row) if row else None

    async def increment_recommendation_count(self, user: UserRef) -> None:
        async with self._get_connection() as conn:
            await conn.execute(
                """
                UPDATE recommendations SET count = count + 1
                WHERE user_id = ? AND user_type = ?
                """,
                (user.id, user.type),
            )
            await conn.commit()

    async def get_recommendation_count(self, user: UserRef) -> Optional[int]:
        async with self._get_connection() as conn:
            async with conn.execute(
                "SELECT count FROM recommendations WHERE user_id = ? AND user_type = ?",
                (user.id, user.type),
            ) as cursor:
                row = await cursor.fetchone()
        return row["count"] if row else None
