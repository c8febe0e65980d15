"""
Tool catalog.

Declares the five people tools and their parameter schemas. A schema is a
mapping of field name to `ToolParam`, a plain description of the field's
type and constraints that does not depend on any validation library. The
catalog renders each definition as a JSON-Schema `inputSchema` for
discovery, and the validator turns the same params into pydantic models.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from people_mcp.errors import UnknownToolError

# Australian mobile number: 04 followed by exactly 8 digits, no separators.
PHONE_PATTERN = r"^04[0-9]{8}$"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
# At least one non-whitespace character
NAME_PATTERN = r"\S"

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 100


@dataclass(frozen=True)
class ToolParam:
    """
    Declaration of a single tool parameter.

    Attributes:
        type:        Semantic type, "string" or "integer".
        description: Prose shown to agents in the tool listing.
        required:    Whether the field must be present.
        min_length:  Minimum string length.
        pattern:     Regular expression the string must match.
        format:      Named string format ("email").
        minimum:     Inclusive lower bound for integers.
        maximum:     Inclusive upper bound for integers.
        default:     Value used when the field is absent.
        message:     Human-readable reason reported on constraint failure.
    """
    type: str
    description: str
    required: bool = False
    min_length: Optional[int] = None
    pattern: Optional[str] = None
    format: Optional[str] = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    default: Any = None
    message: Optional[str] = None

    def to_json_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.type, "description": self.description}
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if self.format is not None:
            schema["format"] = self.format
        if self.pattern is not None:
            schema["pattern"] = self.pattern
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        if self.default is not None:
            schema["default"] = self.default
        return schema


@dataclass(frozen=True)
class ToolDefinition:
    """An immutable catalog entry: name, description and parameter schema."""
    name: str
    description: str
    params: Mapping[str, ToolParam] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze the parameter mapping along with the dataclass itself
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def input_schema(self) -> Dict[str, Any]:
        """Render the parameter schema as a JSON-Schema object."""
        return {
            "type": "object",
            "properties": {
                name: param.to_json_schema() for name, param in self.params.items()
            },
            "required": [name for name, param in self.params.items() if param.required],
        }


class ToolCatalog:
    """
    Ordered, read-only registry of tool definitions.

    Listing preserves declaration order; lookups by an unknown name raise
    `UnknownToolError`.
    """

    def __init__(self, tools: Iterable[ToolDefinition]):
        self._tools: Dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    def list_tools(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def lookup(self, name: str) -> ToolDefinition:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


def _id_field(action: str) -> ToolParam:
    return ToolParam(
        type="string",
        description=f"The unique ID of the person to {action}",
        required=True,
        min_length=1,
        message="ID is required",
    )


def _name_field(description: str, required: bool) -> ToolParam:
    return ToolParam(
        type="string",
        description=description,
        required=required,
        min_length=1,
        pattern=NAME_PATTERN,
        message="Name is required",
    )


def _email_field(description: str, required: bool) -> ToolParam:
    return ToolParam(
        type="string",
        description=description,
        required=required,
        format="email",
        pattern=EMAIL_PATTERN,
        message="Valid email is required",
    )


def _phone_field(description: str, required: bool) -> ToolParam:
    return ToolParam(
        type="string",
        description=description,
        required=required,
        pattern=PHONE_PATTERN,
        message="Phone must be Australian mobile (04XXXXXXXX)",
    )


LIST_PEOPLE = ToolDefinition(
    name="list_people",
    description="List all people in the database or search by name",
    params={
        "query": ToolParam(
            type="string",
            description="Optional search query to filter by name",
        ),
        "limit": ToolParam(
            type="integer",
            description=f"Maximum number of results (default: {DEFAULT_LIST_LIMIT})",
            minimum=1,
            maximum=MAX_LIST_LIMIT,
            default=DEFAULT_LIST_LIMIT,
            message=f"Limit must be an integer between 1 and {MAX_LIST_LIMIT}",
        ),
    },
)

GET_PERSON = ToolDefinition(
    name="get_person",
    description="Get details of a specific person by their ID",
    params={"id": _id_field("retrieve")},
)

CREATE_PERSON = ToolDefinition(
    name="create_person",
    description="Create a new person in the database",
    params={
        "name": _name_field("Full name of the person", required=True),
        "email": _email_field("Email address", required=True),
        "phoneNumber": _phone_field(
            "Australian mobile number (format: 04XXXXXXXX)", required=True
        ),
    },
)

UPDATE_PERSON = ToolDefinition(
    name="update_person",
    description="Update an existing person's information",
    params={
        "id": _id_field("update"),
        "name": _name_field("New name (optional)", required=False),
        "email": _email_field("New email (optional)", required=False),
        "phoneNumber": _phone_field("New phone number (optional)", required=False),
    },
)

DELETE_PERSON = ToolDefinition(
    name="delete_person",
    description="Delete a person from the database",
    params={"id": _id_field("delete")},
)

PEOPLE_CATALOG = ToolCatalog(
    [LIST_PEOPLE, GET_PERSON, CREATE_PERSON, UPDATE_PERSON, DELETE_PERSON]
)
