"""ToolSet: the ordered, duplicate-free tools of one worker."""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import BaseTool

from teamworker.agents.outputs import ToolInvocation, ToolResult
from teamworker.exceptions import (
    ConfigurationError,
    DuplicateToolError,
    ToolExecutionError,
)
from teamworker.tools.spec import ToolSpec

logger = logging.getLogger(__name__)


def flatten_tools(raw: Any) -> list[ToolSpec]:
    """Flatten nested tool inputs into a list of ToolSpecs, keeping order.

    Node inputs can arrive as lists of lists; LangChain tools are wrapped.

    Raises:
        ConfigurationError: If an entry is neither a ToolSpec nor a BaseTool.
    """
    if raw is None:
        return []
    if isinstance(raw, (ToolSpec, BaseTool)):
        raw = [raw]

    tools: list[ToolSpec] = []
    for item in raw:
        if item is None:
            continue
        if isinstance(item, ToolSpec):
            tools.append(item)
        elif isinstance(item, BaseTool):
            tools.append(ToolSpec.from_langchain_tool(item))
        elif isinstance(item, (list, tuple)):
            tools.extend(flatten_tools(item))
        else:
            raise ConfigurationError(
                f"Unsupported tool type: {type(item).__name__}"
            )
    return tools


class ToolSet:
    """Tools available to one worker, dispatched by name.

    Dispatch never raises for tool-side problems: unknown names, unparsable
    arguments and tool failures all come back as error ToolResults.
    """

    def __init__(self, tools: Iterable[ToolSpec] = ()) -> None:
        self._tools: dict[str, ToolSpec] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise DuplicateToolError(tool.name)
            self._tools[tool.name] = tool

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._tools.values())

    def __bool__(self) -> bool:
        return bool(self._tools)

    @property
    def names(self) -> list[str]:
        return list(self._tools.keys())

    async def dispatch(
        self, invocation: ToolInvocation, config: RunnableConfig | None = None
    ) -> ToolResult:
        """Run one tool invocation and capture its result or error."""
        if invocation.parse_error is not None:
            return ToolResult(
                tool=invocation.tool,
                tool_call_id=invocation.tool_call_id,
                error=f"Could not parse arguments for '{invocation.tool}': "
                f"{invocation.parse_error}",
            )

        tool = self._tools.get(invocation.tool)
        if tool is None:
            logger.warning(f"Model requested unknown tool '{invocation.tool}'")
            return ToolResult(
                tool=invocation.tool,
                tool_call_id=invocation.tool_call_id,
                error=f"{invocation.tool} is not a valid tool, "
                f"try one of [{', '.join(self.names)}].",
            )

        try:
            output = await tool.ainvoke(invocation.tool_input, config=config)
        except ToolExecutionError as e:
            logger.warning(str(e))
            return ToolResult(
                tool=invocation.tool,
                tool_call_id=invocation.tool_call_id,
                error=str(e),
            )

        return ToolResult(
            tool=invocation.tool,
            tool_call_id=invocation.tool_call_id,
            output=output,
        )
