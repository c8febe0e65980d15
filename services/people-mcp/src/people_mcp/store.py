"""
Record store for Person rows.

`PersonStore` is the boundary the dispatcher talks to. `PostgresPersonStore`
implements it on top of an asyncpg pool. Each operation runs one statement
on a pooled connection, so concurrent tool calls never share a connection
and no client-side locking is needed.

Driver failures are translated here into the domain error taxonomy:
  - unique violations become ConflictError (naming the field),
  - missing rows on update/delete become NotFoundError,
  - any other driver or network failure becomes StoreUnavailableError.
"""

import enum
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Optional, Protocol

import asyncpg

from people_mcp.errors import ConflictError, NotFoundError, StoreUnavailableError
from people_mcp.models import Person

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, email, phone_number, created_at, updated_at"

# Fields an update may touch; id and timestamps are store-managed
UPDATABLE_FIELDS = ("name", "email", "phone_number")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS people (
    id           TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    name         TEXT NOT NULL,
    email        TEXT NOT NULL,
    phone_number TEXT NOT NULL,
    created_at   TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at   TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT people_email_key UNIQUE (email)
);
"""


class ListOrder(enum.Enum):
    NEWEST_FIRST = "created_at DESC"
    NAME_ASC = "name ASC"


class PersonStore(Protocol):
    async def find_by_id(self, person_id: str) -> Optional[Person]: ...

    async def find_many(
        self,
        name_contains: Optional[str],
        limit: int,
        order: ListOrder,
    ) -> List[Person]: ...

    async def create(self, name: str, email: str, phone_number: str) -> Person: ...

    async def update(self, person_id: str, fields: Dict[str, str]) -> Person: ...

    async def delete(self, person_id: str) -> Person: ...


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so the query is matched literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _conflict_field(exc: asyncpg.UniqueViolationError) -> str:
    # Constraint names follow <table>_<column>_key
    constraint = getattr(exc, "constraint_name", None) or ""
    if constraint.startswith("people_") and constraint.endswith("_key"):
        column = constraint[len("people_"):-len("_key")]
        return "phoneNumber" if column == "phone_number" else column
    return "email"


class PostgresPersonStore:
    """PersonStore backed by the `people` table in PostgreSQL."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Acquire a pooled connection and translate driver errors.

        Domain errors raised inside the block pass through untouched.
        """
        try:
            async with self._pool.acquire() as conn:
                yield conn
        except asyncpg.UniqueViolationError as exc:
            raise ConflictError(_conflict_field(exc)) from exc
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
            logger.error(f"Record store failure: {exc}")
            raise StoreUnavailableError(str(exc)) from exc

    async def find_by_id(self, person_id: str) -> Optional[Person]:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {_COLUMNS} FROM people WHERE id = $1;",
                person_id,
            )
        return Person.from_record(row) if row else None

    async def find_many(
        self,
        name_contains: Optional[str],
        limit: int,
        order: ListOrder,
    ) -> List[Person]:
        """
        Return up to `limit` people in the requested order, optionally
        filtered by a case-insensitive substring of the name.
        """
        # Tie-break on id so equal sort keys still give a stable order
        order_sql = f"ORDER BY {order.value}, id ASC"

        async with self._connection() as conn:
            if name_contains:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS}
                    FROM people
                    WHERE name ILIKE '%' || $1 || '%' ESCAPE '\\'
                    {order_sql}
                    LIMIT $2;
                    """,
                    _escape_like(name_contains),
                    limit,
                )
            else:
                rows = await conn.fetch(
                    f"SELECT {_COLUMNS} FROM people {order_sql} LIMIT $1;",
                    limit,
                )
        return [Person.from_record(r) for r in rows]

    async def create(self, name: str, email: str, phone_number: str) -> Person:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO people (name, email, phone_number)
                VALUES ($1, $2, $3)
                RETURNING {_COLUMNS};
                """,
                name,
                email,
                phone_number,
            )
        return Person.from_record(row)

    async def update(self, person_id: str, fields: Dict[str, str]) -> Person:
        """
        Apply a partial update and bump updated_at.

        Args:
            person_id: ID of the person to update.
            fields:    Column name → new value; only UPDATABLE_FIELDS allowed.

        Returns:
            Person: The updated row.

        Raises:
            ValueError:    If `fields` is empty or names an unknown column.
            NotFoundError: If no person has this ID.
            ConflictError: If the new email is already taken.
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        if not fields:
            raise ValueError("No fields to update")

        columns = [c for c in UPDATABLE_FIELDS if c in fields]
        assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(columns, start=2))

        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE people
                SET {assignments}, updated_at = now()
                WHERE id = $1
                RETURNING {_COLUMNS};
                """,
                person_id,
                *[fields[c] for c in columns],
            )
        if not row:
            raise NotFoundError()
        return Person.from_record(row)

    async def delete(self, person_id: str) -> Person:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"DELETE FROM people WHERE id = $1 RETURNING {_COLUMNS};",
                person_id,
            )
        if not row:
            raise NotFoundError()
        return Person.from_record(row)

    # --- Maintenance helpers used by the seed/list commands ---

    async def ensure_schema(self) -> None:
        async with self._connection() as conn:
            await conn.execute(SCHEMA_SQL)

    async def clear(self) -> int:
        """Delete every person. Returns the number of rows removed."""
        async with self._connection() as conn:
            status = await conn.execute("DELETE FROM people;")
        # Status string looks like "DELETE 10"
        return int(status.split()[-1])

    async def create_many(self, people: Iterable[Dict[str, str]]) -> int:
        records = [(p["name"], p["email"], p["phone_number"]) for p in people]
        async with self._connection() as conn:
            async with conn.transaction():
                await conn.executemany(
                    "INSERT INTO people (name, email, phone_number) VALUES ($1, $2, $3);",
                    records,
                )
        return len(records)
