"""ToolSpec model for worker tools."""

import asyncio
import inspect
import json
from collections.abc import Callable
from typing import Any

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import BaseTool
from pydantic import BaseModel, Field, PrivateAttr

from teamworker.exceptions import ToolExecutionError


def _empty_object_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}}


class ToolSpec(BaseModel):
    """A tool a worker may call.

    The model only ever sees ``name``, ``description`` and ``input_schema``.
    The callable behind it is private and never serialized.

    Example:
        search = ToolSpec.from_function(search_web)
        await search.ainvoke({"query": "latest AAPL filing"})
    """

    name: str = Field(..., min_length=1, description="Unique name within a toolset")
    description: str = Field(default="", description="Passed to the model")
    input_schema: dict[str, Any] = Field(
        default_factory=_empty_object_schema,
        description="JSON schema for the tool arguments",
    )

    _callable: Callable[..., Any] | None = PrivateAttr(default=None)
    _config_aware: bool = PrivateAttr(default=False)

    model_config = {"arbitrary_types_allowed": True}

    def bind_callable(
        self, func: Callable[..., Any], config_aware: bool = False
    ) -> "ToolSpec":
        """Attach the implementation and return self.

        A config-aware callable receives the run config as a ``config`` keyword.
        """
        self._callable = func
        self._config_aware = config_aware
        return self

    def to_openai_tool(self) -> dict[str, Any]:
        """Translate to the native function-calling schema."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }

    async def ainvoke(
        self, tool_input: dict[str, Any], config: RunnableConfig | None = None
    ) -> str:
        """Run the tool with the given arguments.

        Coroutine functions are awaited; plain functions run in a worker
        thread so they do not block the event loop.

        Args:
            tool_input: Keyword arguments for the tool.
            config: Run config, forwarded to config-aware callables.

        Returns:
            The tool output as text.

        Raises:
            ToolExecutionError: If the tool has no callable or raises.
        """
        if self._callable is None:
            raise ToolExecutionError(self.name, "no callable is set")

        kwargs = dict(tool_input)
        if self._config_aware:
            kwargs["config"] = config

        try:
            if inspect.iscoroutinefunction(self._callable):
                result = await self._callable(**kwargs)
            else:
                result = await asyncio.to_thread(self._callable, **kwargs)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise ToolExecutionError(self.name, f"{type(e).__name__}: {e}") from e

        return _stringify(result)

    @classmethod
    def from_function(
        cls,
        func: Callable[..., Any],
        name: str | None = None,
        description: str | None = None,
        input_schema: dict[str, Any] | None = None,
    ) -> "ToolSpec":
        """Build a ToolSpec from a plain or async function.

        The input schema is derived from the signature unless given.
        """
        from teamworker.tools.decorator import build_input_schema

        spec = cls(
            name=name or func.__name__,
            description=description or inspect.getdoc(func) or "",
            input_schema=input_schema or build_input_schema(func),
        )
        return spec.bind_callable(func)

    @classmethod
    def from_langchain_tool(cls, tool: BaseTool) -> "ToolSpec":
        """Wrap a LangChain tool, keeping its name, description and args schema."""
        schema = tool.get_input_schema().model_json_schema()
        input_schema = {
            "type": "object",
            "properties": schema.get("properties", {}),
        }
        if schema.get("required"):
            input_schema["required"] = list(schema["required"])

        async def run(config: RunnableConfig | None = None, **kwargs: Any) -> Any:
            return await tool.ainvoke(kwargs, config=config)

        spec = cls(
            name=tool.name,
            description=tool.description or "",
            input_schema=input_schema,
        )
        return spec.bind_callable(run, config_aware=True)


def _stringify(result: Any) -> str:
    if isinstance(result, str):
        return result
    if hasattr(result, "content") and isinstance(result.content, str):
        # LangChain tools may hand back a ToolMessage
        return result.content
    if isinstance(result, (dict, list)):
        try:
            return json.dumps(result, default=str)
        except (TypeError, ValueError):
            return str(result)
    return str(result)
