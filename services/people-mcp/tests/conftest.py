import itertools
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import anyio
import pytest

from people_mcp.dispatcher import PeopleDispatcher
from people_mcp.errors import ConflictError, NotFoundError
from people_mcp.models import Person
from people_mcp.store import ListOrder

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class InMemoryPersonStore:
    """PersonStore fake with the same contract as the PostgreSQL store."""

    def __init__(self, delay: float = 0.0):
        self.people: Dict[str, Person] = {}
        self.delay = delay
        self.fail_with: Optional[Exception] = None
        self.calls: List[str] = []
        self._ids = itertools.count(1)
        self._clock = itertools.count()

    def _now(self) -> datetime:
        # Strictly increasing so created_at ordering is deterministic
        return BASE_TIME + timedelta(seconds=next(self._clock))

    async def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if self.fail_with is not None:
            raise self.fail_with
        if self.delay:
            await anyio.sleep(self.delay)

    def _email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        return any(p.email == email and p.id != exclude_id for p in self.people.values())

    async def find_by_id(self, person_id: str) -> Optional[Person]:
        await self._enter("find_by_id")
        return self.people.get(person_id)

    async def find_many(self, name_contains, limit, order) -> List[Person]:
        await self._enter("find_many")
        people = list(self.people.values())
        if name_contains:
            needle = name_contains.lower()
            people = [p for p in people if needle in p.name.lower()]
        if order is ListOrder.NAME_ASC:
            people.sort(key=lambda p: (p.name, p.id))
        else:
            people.sort(key=lambda p: p.created_at, reverse=True)
        return people[:limit]

    async def create(self, name: str, email: str, phone_number: str) -> Person:
        await self._enter("create")
        if self._email_taken(email):
            raise ConflictError("email")
        now = self._now()
        person = Person(
            id=f"person-{next(self._ids)}",
            name=name,
            email=email,
            phone_number=phone_number,
            created_at=now,
            updated_at=now,
        )
        self.people[person.id] = person
        return person

    async def update(self, person_id: str, fields: Dict[str, str]) -> Person:
        await self._enter("update")
        person = self.people.get(person_id)
        if person is None:
            raise NotFoundError()
        if "email" in fields and self._email_taken(fields["email"], exclude_id=person_id):
            raise ConflictError("email")
        updated = person.model_copy(update={**fields, "updated_at": self._now()})
        self.people[person_id] = updated
        return updated

    async def delete(self, person_id: str) -> Person:
        await self._enter("delete")
        person = self.people.pop(person_id, None)
        if person is None:
            raise NotFoundError()
        return person


SAMPLE = [
    ("John Doe", "john@example.com", "0412345678"),
    ("Jane Smith", "jane@example.com", "0423456789"),
    ("Alice Johnson", "alice@example.com", "0434567890"),
]


@pytest.fixture
def store():
    return InMemoryPersonStore()


@pytest.fixture
def seeded_store():
    """Store pre-filled with three people, created in SAMPLE order."""
    store = InMemoryPersonStore()
    for name, email, phone in SAMPLE:
        now = store._now()
        person = Person(
            id=f"person-{next(store._ids)}",
            name=name,
            email=email,
            phone_number=phone,
            created_at=now,
            updated_at=now,
        )
        store.people[person.id] = person
    return store


@pytest.fixture
def dispatcher(store):
    return PeopleDispatcher(store)


@pytest.fixture
def seeded_dispatcher(seeded_store):
    return PeopleDispatcher(seeded_store)


@pytest.fixture
def make_store():
    """Factory for extra stores, e.g. slow ones for timeout tests."""
    return InMemoryPersonStore
