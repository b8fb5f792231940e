"""
Tool input schemas.

Each tool declares its input as a pydantic model. The model produces the
JSON schema advertised to the inference service and validates the raw input
the model sends back.
"""

import json
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from .registry import HandlerResult, ToolDefinition, ToolError

InputT = TypeVar("InputT", bound="ToolInput")


class ToolInputError(ToolError):
    """Raised when a tool receives input that does not match its schema."""


class ToolInput(BaseModel):
    """Base class for tool input models."""

    model_config = ConfigDict(extra="ignore")


def input_schema(model: type[BaseModel]) -> dict:
    """
    Build the object schema for a tool input model.

    Titles are dropped; the description of each field is kept.
    """
    schema = model.model_json_schema()
    properties = {}
    for name, prop in schema.get("properties", {}).items():
        properties[name] = {k: v for k, v in prop.items() if k != "title"}
    result: dict[str, Any] = {"type": "object", "properties": properties}
    required = schema.get("required")
    if required:
        result["required"] = list(required)
    return result


def parse_input(model: type[InputT], raw_input: Any, tool_name: str) -> InputT:
    """
    Validate raw model-issued input against ``model``.

    A JSON string is decoded first; ``None`` counts as an empty object.

    Raises:
        ToolInputError: If the input cannot be decoded or fails validation.
    """
    if raw_input is None:
        raw_input = {}
    if isinstance(raw_input, (str, bytes)):
        try:
            raw_input = json.loads(raw_input or "{}")
        except json.JSONDecodeError as e:
            raise ToolInputError(f"{tool_name} input: invalid JSON: {e}") from e
    try:
        return model.model_validate(raw_input)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
            for err in e.errors()
        )
        raise ToolInputError(f"{tool_name} input: {problems}") from e


def define_tool(
    name: str,
    description: str,
    input_model: type[InputT],
    run: Callable[[InputT], HandlerResult],
) -> ToolDefinition:
    """Wrap a typed tool function into a ToolDefinition."""

    def handler(raw_input: Any) -> HandlerResult:
        return run(parse_input(input_model, raw_input, name))

    return ToolDefinition(
        name=name,
        description=description,
        input_schema=input_schema(input_model),
        handler=handler,
    )
