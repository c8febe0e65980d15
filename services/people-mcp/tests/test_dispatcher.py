"""Tests for the tool dispatcher."""

import json

import pytest

from people_mcp.catalog import GET_PERSON, LIST_PEOPLE, ToolCatalog, ToolDefinition
from people_mcp.dispatcher import PeopleDispatcher
from people_mcp.errors import StoreUnavailableError
from people_mcp.store import ListOrder

VALID = {"name": "Jane Smith", "email": "jane@x.com", "phoneNumber": "0412345678"}


@pytest.mark.asyncio
async def test_unknown_tool(dispatcher, store):
    envelope = await dispatcher.dispatch("not_a_tool", {})
    assert envelope.success is False
    assert envelope.error == "Unknown tool: not_a_tool"
    assert store.calls == []


@pytest.mark.asyncio
async def test_create_then_get_round_trip(dispatcher):
    created = await dispatcher.dispatch("create_person", VALID)
    assert created.success is True
    assert created.message == "Person created successfully"
    person_id = created.person.id
    assert person_id

    fetched = await dispatcher.dispatch("get_person", {"id": person_id})
    assert fetched.success is True
    assert fetched.person.name == VALID["name"]
    assert fetched.person.email == VALID["email"]
    assert fetched.person.phone_number == VALID["phoneNumber"]
    assert fetched.person.created_at == created.person.created_at


@pytest.mark.asyncio
async def test_create_ignores_client_supplied_id(dispatcher):
    envelope = await dispatcher.dispatch("create_person", {**VALID, "id": "chosen-by-client"})
    assert envelope.success is True
    assert envelope.person.id != "chosen-by-client"


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(dispatcher, store):
    first = await dispatcher.dispatch("create_person", VALID)
    second = await dispatcher.dispatch(
        "create_person", {**VALID, "name": "Other", "phoneNumber": "0498765432"}
    )
    assert first.success is True
    assert second.success is False
    assert second.error == "A person with this email already exists"
    assert len(store.people) == 1


@pytest.mark.asyncio
async def test_create_with_bad_phone_fails_validation(dispatcher, store):
    envelope = await dispatcher.dispatch("create_person", {**VALID, "phoneNumber": "12345"})
    assert envelope.success is False
    assert "phoneNumber" in envelope.error
    assert store.calls == []


@pytest.mark.asyncio
async def test_create_with_good_phone_succeeds(dispatcher):
    envelope = await dispatcher.dispatch("create_person", {**VALID, "phoneNumber": "0412345678"})
    assert envelope.success is True


@pytest.mark.asyncio
async def test_partial_update_preserves_other_fields(dispatcher):
    created = await dispatcher.dispatch("create_person", {**VALID, "email": "a@x.com"})
    person_id = created.person.id

    updated = await dispatcher.dispatch("update_person", {"id": person_id, "name": "New"})
    assert updated.success is True
    assert updated.message == "Person updated successfully"
    assert updated.person.name == "New"
    assert updated.person.email == "a@x.com"
    assert updated.person.phone_number == VALID["phoneNumber"]
    assert updated.person.id == person_id


@pytest.mark.asyncio
async def test_update_maps_phone_number_to_store_column(dispatcher, store):
    created = await dispatcher.dispatch("create_person", VALID)
    updated = await dispatcher.dispatch(
        "update_person", {"id": created.person.id, "phoneNumber": "0499999999"}
    )
    assert updated.person.phone_number == "0499999999"


@pytest.mark.asyncio
@pytest.mark.parametrize("fields", [{}, {"name": ""}, {"email": None}, {"nickname": "x"}])
async def test_update_with_no_fields_rejected(dispatcher, store, fields):
    created = await dispatcher.dispatch("create_person", VALID)
    person_id = created.person.id
    store.calls.clear()

    envelope = await dispatcher.dispatch("update_person", {"id": person_id, **fields})
    assert envelope.success is False
    assert envelope.error == "No fields to update"
    assert "update" not in store.calls
    assert store.people[person_id] == created.person


@pytest.mark.asyncio
async def test_update_email_conflict(dispatcher):
    await dispatcher.dispatch("create_person", VALID)
    other = await dispatcher.dispatch(
        "create_person", {**VALID, "email": "other@x.com", "phoneNumber": "0498765432"}
    )
    envelope = await dispatcher.dispatch(
        "update_person", {"id": other.person.id, "email": VALID["email"]}
    )
    assert envelope.success is False
    assert "already exists" in envelope.error


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "tool, args",
    [
        ("get_person", {"id": "nonexistent"}),
        ("update_person", {"id": "nonexistent", "name": "x"}),
        ("delete_person", {"id": "nonexistent"}),
    ],
)
async def test_not_found_is_an_envelope(dispatcher, tool, args):
    envelope = await dispatcher.dispatch(tool, args)
    assert envelope.success is False
    assert envelope.error == "Person not found"


@pytest.mark.asyncio
async def test_delete_removes_person(dispatcher, store):
    created = await dispatcher.dispatch("create_person", VALID)
    person_id = created.person.id

    deleted = await dispatcher.dispatch("delete_person", {"id": person_id})
    assert deleted.success is True
    assert deleted.message == "Person deleted successfully"
    assert person_id not in store.people

    again = await dispatcher.dispatch("delete_person", {"id": person_id})
    assert again.success is False
    assert again.error == "Person not found"


@pytest.mark.asyncio
async def test_list_unfiltered_newest_first(seeded_dispatcher):
    envelope = await seeded_dispatcher.dispatch("list_people", {})
    assert envelope.success is True
    assert envelope.count == 3
    assert [p.name for p in envelope.people] == ["Alice Johnson", "Jane Smith", "John Doe"]


@pytest.mark.asyncio
async def test_list_query_alphabetical_case_insensitive(seeded_dispatcher, seeded_store):
    envelope = await seeded_dispatcher.dispatch("list_people", {"query": "JO"})
    assert [p.name for p in envelope.people] == ["Alice Johnson", "John Doe"]
    assert envelope.count == 2


@pytest.mark.asyncio
async def test_list_passes_order_and_default_limit(seeded_dispatcher, seeded_store, monkeypatch):
    seen = {}
    original = seeded_store.find_many

    async def spy(name_contains, limit, order):
        seen.update(name_contains=name_contains, limit=limit, order=order)
        return await original(name_contains, limit, order)

    monkeypatch.setattr(seeded_store, "find_many", spy)

    await seeded_dispatcher.dispatch("list_people", {})
    assert seen == {"name_contains": None, "limit": 50, "order": ListOrder.NEWEST_FIRST}

    await seeded_dispatcher.dispatch("list_people", {"query": "jane", "limit": 2})
    assert seen == {"name_contains": "jane", "limit": 2, "order": ListOrder.NAME_ASC}


@pytest.mark.asyncio
async def test_list_limit_applies_after_ordering(seeded_dispatcher):
    envelope = await seeded_dispatcher.dispatch("list_people", {"limit": 1})
    assert [p.name for p in envelope.people] == ["Alice Johnson"]


@pytest.mark.asyncio
async def test_list_limit_out_of_range(seeded_dispatcher):
    envelope = await seeded_dispatcher.dispatch("list_people", {"limit": 500})
    assert envelope.success is False
    assert "limit" in envelope.error


@pytest.mark.asyncio
async def test_store_unavailable_becomes_envelope(dispatcher, store):
    store.fail_with = StoreUnavailableError("connection refused")
    envelope = await dispatcher.dispatch("list_people", {})
    assert envelope.success is False
    assert envelope.error == "Record store unavailable: connection refused"


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_envelope(dispatcher, store):
    store.fail_with = RuntimeError("boom")
    envelope = await dispatcher.dispatch("get_person", {"id": "person-1"})
    assert envelope.success is False
    assert envelope.error == "boom"


@pytest.mark.asyncio
async def test_envelope_json_shape(seeded_dispatcher):
    envelope = await seeded_dispatcher.dispatch("get_person", {"id": "person-1"})
    payload = json.loads(envelope.to_json())
    assert payload["success"] is True
    assert set(payload["person"]) == {"id", "name", "email", "phoneNumber", "createdAt", "updatedAt"}
    assert payload["person"]["createdAt"].startswith("2024-01-01T00:00:00")
    assert "error" not in payload

    failure = json.loads((await seeded_dispatcher.dispatch("get_person", {"id": "nope"})).to_json())
    assert failure == {"success": False, "error": "Person not found"}


def test_catalog_tool_without_handler_is_rejected(store):
    catalog = ToolCatalog([LIST_PEOPLE, ToolDefinition(name="merge_people", description="x")])
    with pytest.raises(ValueError, match="merge_people"):
        PeopleDispatcher(store, catalog=catalog)


@pytest.mark.asyncio
async def test_smaller_catalog_limits_reachable_tools(store):
    dispatcher = PeopleDispatcher(store, catalog=ToolCatalog([LIST_PEOPLE, GET_PERSON]))
    envelope = await dispatcher.dispatch("delete_person", {"id": "person-1"})
    assert envelope.error == "Unknown tool: delete_person"
    assert store.calls == []
