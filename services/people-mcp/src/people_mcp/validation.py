"""
Schema validation for tool arguments.

Each tool's `ToolParam` mapping is compiled once into a pydantic model.
Raw arguments are checked against that model and any pydantic error is
translated into the domain `ValidationError`, naming the offending field
and the declared reason.

Rules:
  - Unknown fields are ignored.
  - An optional field given as null or "" is treated as absent.
  - Absent optional fields with a default (list limit) get the default.
  - The "at least one field" rule for updates is NOT checked here.
"""

from typing import Annotated, Any, Dict, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, create_model
from pydantic import ValidationError as PydanticValidationError

from people_mcp.catalog import ToolParam, ToolDefinition
from people_mcp.errors import ValidationError


def _field_type(param: ToolParam) -> Any:
    if param.type == "integer":
        return Annotated[int, Field(strict=True, ge=param.minimum, le=param.maximum)]
    if param.type == "string":
        return Annotated[
            str, Field(strict=True, min_length=param.min_length, pattern=param.pattern)
        ]
    raise ValueError(f"Unsupported field type: {param.type}")


def build_model(tool: ToolDefinition) -> Type[BaseModel]:
    """Compile a tool's parameter schema into a pydantic model."""
    fields: Dict[str, Any] = {}
    for name, param in tool.params.items():
        if param.required:
            fields[name] = (_field_type(param), ...)
        else:
            fields[name] = (Optional[_field_type(param)], param.default)

    return create_model(
        f"{tool.name}_arguments",
        __config__=ConfigDict(extra="ignore"),
        **fields,
    )


class SchemaValidator:
    """Validates raw argument bags against tool parameter schemas."""

    def __init__(self):
        self._models: Dict[str, Type[BaseModel]] = {}

    def _model_for(self, tool: ToolDefinition) -> Type[BaseModel]:
        model = self._models.get(tool.name)
        if model is None:
            model = self._models[tool.name] = build_model(tool)
        return model

    def validate(self, tool: ToolDefinition, raw: Any) -> Dict[str, Any]:
        """
        Validate raw arguments for a tool.

        Args:
            tool: The catalog entry whose schema applies.
            raw:  The untyped argument bag received from the agent.

        Returns:
            dict: Only the fields that are present after validation,
                  plus defaults for absent optional fields.

        Raises:
            ValidationError: If a required field is missing or a field
                             fails its constraint.
        """
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise ValidationError("arguments", "must be an object")

        cleaned: Dict[str, Any] = {}
        for name, param in tool.params.items():
            if name not in raw:
                continue
            value = raw[name]
            if value is None:
                continue
            if not param.required and isinstance(value, str) and value == "":
                continue
            cleaned[name] = value

        try:
            validated = self._model_for(tool).model_validate(cleaned)
        except PydanticValidationError as exc:
            raise _translate(tool, exc) from None

        return {
            name: value
            for name, value in validated.model_dump().items()
            if value is not None
        }


def _translate(tool: ToolDefinition, exc: PydanticValidationError) -> ValidationError:
    error = exc.errors()[0]
    loc = error.get("loc") or ("arguments",)
    name = str(loc[0])
    if error.get("type") == "missing":
        return ValidationError(name, "required field is missing")

    param = tool.params.get(name)
    reason = param.message if param is not None and param.message else error.get("msg", "invalid value")
    return ValidationError(name, reason)


_default_validator = SchemaValidator()


def validate(tool: ToolDefinition, raw: Any) -> Dict[str, Any]:
    """Validate with the module-level validator instance."""
    return _default_validator.validate(tool, raw)
