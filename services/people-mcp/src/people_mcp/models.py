"""
Data models shared by the store, the dispatcher and the transports.

`Person` mirrors one row of the people table and serializes with the
camelCase field names agents see. `Envelope` is the uniform result of
every tool call; its JSON text is what both transports send back.
"""

import json
from datetime import datetime
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class Person(BaseModel):
    """A person record as stored in the database."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    phone_number: str = Field(alias="phoneNumber")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> "Person":
        """Build a Person from a database row (asyncpg Record or dict)."""
        return cls(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            phone_number=row["phone_number"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


class Envelope(BaseModel):
    """
    Uniform tool result.

    Successful calls set `success=True` plus whichever of message, count,
    person and people apply. Failed calls set `success=False` and `error`.
    Members left as None are omitted from the serialized form.
    """
    success: bool
    message: Optional[str] = None
    count: Optional[int] = None
    person: Optional[Person] = None
    people: Optional[List[Person]] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "Envelope":
        return cls(success=False, error=error)

    def to_json(self) -> str:
        """Serialize to the JSON text placed in the tool result content."""
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return json.dumps(payload, indent=2, ensure_ascii=False)
