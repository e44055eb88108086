"""The @tool_spec decorator for declaring worker tools."""

import inspect
from collections.abc import Callable
from typing import Any, get_type_hints

from teamworker.tools.spec import ToolSpec


def _python_type_to_json_type(python_type: Any) -> str:
    """Convert Python type to JSON Schema type.

    Args:
        python_type: A Python type annotation.

    Returns:
        The corresponding JSON Schema type string.
    """
    type_map: dict[Any, str] = {
        str: "string",
        int: "integer",
        float: "number",
        bool: "boolean",
        list: "array",
        dict: "object",
    }
    # Handle generic types by checking origin
    origin = getattr(python_type, "__origin__", None)
    if origin is not None:
        if origin is list:
            return "array"
        if origin is dict:
            return "object"
    return type_map.get(python_type, "string")


def build_input_schema(func: Callable[..., Any]) -> dict[str, Any]:
    """Build a JSON object schema from a function signature."""
    try:
        hints = get_type_hints(func)
    except Exception:
        # Fall back if get_type_hints fails (e.g., forward references)
        hints = {}
    hints.pop("return", None)

    schema: dict[str, Any] = {"type": "object", "properties": {}}
    required: list[str] = []
    for param_name, param in inspect.signature(func).parameters.items():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        schema["properties"][param_name] = {
            "type": _python_type_to_json_type(hints.get(param_name, str))
        }
        if param.default is inspect.Parameter.empty:
            required.append(param_name)
    if required:
        schema["required"] = required
    return schema


def tool_spec(func: Callable[..., Any]) -> ToolSpec:
    """Decorator that turns a function into a ToolSpec.

    The docstring becomes the tool description shown to the model and type
    hints become the JSON schema for its arguments.

    Raises:
        ValueError: If the function has no docstring.

    Example:
        @tool_spec
        async def search(query: str, max_results: int = 5) -> str:
            '''Search the web and return the top results.'''
            ...
    """
    if not func.__doc__:
        raise ValueError(
            f"Tool '{func.__name__}' must have a docstring. "
            "The docstring is used as the tool description for the model."
        )
    return ToolSpec.from_function(func, description=func.__doc__.strip())
