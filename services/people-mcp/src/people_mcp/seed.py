"""
Database maintenance commands.

  - people-mcp-seed: create the people table if needed, clear it and
    insert a fixed set of sample people.
  - people-mcp-list: print every person, newest first.
"""

import logging
import sys
from typing import List, TextIO

import anyio

from people_mcp.config import Settings, settings as default_settings
from people_mcp.db import open_pool
from people_mcp.models import Person
from people_mcp.store import ListOrder, PostgresPersonStore

logger = logging.getLogger(__name__)

SAMPLE_PEOPLE = [
    {"name": "John Doe", "phone_number": "0412345678", "email": "john@example.com"},
    {"name": "Jane Smith", "phone_number": "0423456789", "email": "jane@example.com"},
    {"name": "Alice Johnson", "phone_number": "0434567890", "email": "alice@example.com"},
    {"name": "Bob Williams", "phone_number": "0445678901", "email": "bob@example.com"},
    {"name": "Charlie Brown", "phone_number": "0456789012", "email": "charlie@example.com"},
    {"name": "Emily Davis", "phone_number": "0467890123", "email": "emily@example.com"},
    {"name": "Frank Miller", "phone_number": "0478901234", "email": "frank@example.com"},
    {"name": "Grace Lee", "phone_number": "0489012345", "email": "grace@example.com"},
    {"name": "Henry Moore", "phone_number": "0490123456", "email": "henry@example.com"},
    {"name": "Isabella Young", "phone_number": "0401234567", "email": "isabella@example.com"},
]

# Upper bound for the list command; the store needs an explicit limit
_LIST_ALL_LIMIT = 10_000


async def seed(store: PostgresPersonStore) -> int:
    """
    Reset the people table to the sample data.

    Returns:
        int: Number of people inserted.
    """
    await store.ensure_schema()
    removed = await store.clear()
    logger.info(f"Cleared {removed} existing people")
    created = await store.create_many(SAMPLE_PEOPLE)
    logger.info(f"Created {created} people")
    return created


async def list_all(store: PostgresPersonStore) -> List[Person]:
    return await store.find_many(None, _LIST_ALL_LIMIT, ListOrder.NEWEST_FIRST)


def format_people(people: List[Person]) -> str:
    """Render people as a fixed-width text table."""
    headers = ("id", "name", "email", "phoneNumber", "createdAt")
    rows = [
        (p.id, p.name, p.email, p.phone_number, p.created_at.isoformat())
        for p in people
    ]
    widths = [
        max(len(str(cell)) for cell in column)
        for column in zip(headers, *rows)
    ]
    lines = [
        "  ".join(str(cell).ljust(width) for cell, width in zip(row, widths)).rstrip()
        for row in (headers, *rows)
    ]
    return "\n".join(lines)


async def _run_seed(settings: Settings) -> None:
    async with open_pool(settings) as pool:
        await seed(PostgresPersonStore(pool))


async def _run_list(settings: Settings, out: TextIO) -> None:
    async with open_pool(settings) as pool:
        people = await list_all(PostgresPersonStore(pool))
    print(f"Found {len(people)} people:", file=out)
    if people:
        print(format_people(people), file=out)


def seed_main() -> None:
    logging.basicConfig(level=default_settings.LOG_LEVEL)
    try:
        anyio.run(_run_seed, default_settings)
    except Exception as e:
        logger.error(f"Error seeding database: {e}")
        sys.exit(1)
    logger.info("Seeding completed")


def list_main() -> None:
    logging.basicConfig(level=default_settings.LOG_LEVEL)
    try:
        anyio.run(_run_list, default_settings, sys.stdout)
    except Exception as e:
        logger.error(f"Error querying people: {e}")
        sys.exit(1)
