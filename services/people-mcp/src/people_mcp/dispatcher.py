"""
Tool dispatcher.

Turns a tool name plus a raw argument bag into exactly one record-store
action and wraps the outcome in an `Envelope`. Each call is a single
linear pass: lookup → validate → route → wrap. Every failure, expected or
not, comes back as a failure envelope; the transports never see a raw
exception from here (cancellation excepted).

Listing order:
  - without a query: newest first (createdAt descending),
  - with a query:    alphabetical (name ascending).
"""

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from people_mcp.catalog import DEFAULT_LIST_LIMIT, PEOPLE_CATALOG, ToolCatalog
from people_mcp.errors import NoFieldsError, NotFoundError, PeopleError
from people_mcp.models import Envelope
from people_mcp.store import ListOrder, PersonStore
from people_mcp.validation import SchemaValidator

logger = logging.getLogger(__name__)

# Tool argument name → store column for partial updates
_PATCH_FIELDS = {
    "name": "name",
    "email": "email",
    "phoneNumber": "phone_number",
}

Handler = Callable[[Dict[str, Any]], Awaitable[Envelope]]


class PeopleDispatcher:
    """
    Routes tool calls from any transport to the record store.

    Args:
        store:     The record store handle, shared by all calls.
        catalog:   The tool catalog (defaults to the people catalog).
        validator: The schema validator (a fresh one by default).
    """

    def __init__(
        self,
        store: PersonStore,
        catalog: ToolCatalog = PEOPLE_CATALOG,
        validator: Optional[SchemaValidator] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.validator = validator or SchemaValidator()
        self._handlers: Dict[str, Handler] = {
            "list_people": self._list_people,
            "get_person": self._get_person,
            "create_person": self._create_person,
            "update_person": self._update_person,
            "delete_person": self._delete_person,
        }
        missing = [tool.name for tool in catalog if tool.name not in self._handlers]
        if missing:
            raise ValueError(f"No handler for tools: {missing}")

    async def dispatch(self, name: str, arguments: Any) -> Envelope:
        """
        Run one tool call.

        Args:
            name:      Tool name as sent by the agent.
            arguments: Raw, unvalidated arguments.

        Returns:
            Envelope: success or failure; never raises for tool failures.
        """
        started = time.perf_counter()
        try:
            tool = self.catalog.lookup(name)
            args = self.validator.validate(tool, arguments)
            envelope = await self._handlers[tool.name](args)
        except PeopleError as e:
            envelope = Envelope.failure(str(e))
        except Exception as e:
            logger.exception(f"Unexpected error in tool {name!r}")
            envelope = Envelope.failure(str(e) or type(e).__name__)

        elapsed_ms = (time.perf_counter() - started) * 1000
        if envelope.success:
            logger.info(f"Tool {name} succeeded in {elapsed_ms:.1f} ms")
        else:
            logger.info(f"Tool {name} failed in {elapsed_ms:.1f} ms: {envelope.error}")
        return envelope

    async def _list_people(self, args: Dict[str, Any]) -> Envelope:
        query = args.get("query")
        people = await self.store.find_many(
            name_contains=query,
            limit=args.get("limit", DEFAULT_LIST_LIMIT),
            order=ListOrder.NAME_ASC if query else ListOrder.NEWEST_FIRST,
        )
        return Envelope(success=True, count=len(people), people=people)

    async def _get_person(self, args: Dict[str, Any]) -> Envelope:
        person = await self.store.find_by_id(args["id"])
        if person is None:
            raise NotFoundError()
        return Envelope(success=True, person=person)

    async def _create_person(self, args: Dict[str, Any]) -> Envelope:
        person = await self.store.create(
            name=args["name"],
            email=args["email"],
            phone_number=args["phoneNumber"],
        )
        return Envelope(success=True, message="Person created successfully", person=person)

    async def _update_person(self, args: Dict[str, Any]) -> Envelope:
        patch = {
            column: args[field]
            for field, column in _PATCH_FIELDS.items()
            if args.get(field)
        }
        if not patch:
            raise NoFieldsError()

        person = await self.store.update(args["id"], patch)
        return Envelope(success=True, message="Person updated successfully", person=person)

    async def _delete_person(self, args: Dict[str, Any]) -> Envelope:
        await self.store.delete(args["id"])
        return Envelope(success=True, message="Person deleted successfully")
