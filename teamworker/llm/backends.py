"""Model backends: one capability interface, one variant per tool-calling style.

The executor only ever calls ``BoundModel.ainvoke``. Whether the model speaks
native function calling or has it emulated through the prompt is decided once,
when the backend is selected.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from langchain_core.runnables import Runnable, RunnableConfig

from teamworker.agents.outputs import (
    AgentFinish,
    ConversationStep,
    ModelDecision,
    ToolInvocation,
)
from teamworker.exceptions import ConfigurationError
from teamworker.tools.spec import ToolSpec

logger = logging.getLogger(__name__)


def message_text(message: BaseMessage) -> str:
    """Plain text of a message whose content may be a list of blocks."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


@dataclass
class BoundModel:
    """A model bound to a fixed toolset.

    ``tool_schemas`` holds exactly one entry per tool, in toolset order; it is
    empty for a worker without tools.
    """

    backend: "ModelBackend"
    runnable: Runnable
    tool_schemas: list[dict[str, Any]] = field(default_factory=list)

    @property
    def tool_names(self) -> list[str]:
        return [schema["function"]["name"] for schema in self.tool_schemas]

    async def ainvoke(
        self,
        messages: Sequence[BaseMessage],
        round_index: int,
        config: RunnableConfig | None = None,
    ) -> ModelDecision:
        """Call the model once and parse its reply."""
        prepared = self.backend.prepare_messages(list(messages), self.tool_schemas)
        response = await self.runnable.ainvoke(prepared, config=config)
        if not isinstance(response, AIMessage):
            response = AIMessage(content=str(getattr(response, "content", response)))
        return self.backend.parse(response, round_index, self.tool_names)


class ModelBackend(ABC):
    """Tool-calling capability of one model."""

    def __init__(self, llm: BaseChatModel) -> None:
        self.llm = llm

    @abstractmethod
    def bind(self, tools: Sequence[ToolSpec]) -> BoundModel:
        """Bind the model to a toolset (possibly empty)."""

    @abstractmethod
    def parse(
        self,
        message: AIMessage,
        round_index: int,
        tool_names: Sequence[str] = (),
    ) -> ModelDecision:
        """Turn a model reply into tool invocations or a final answer.

        ``tool_names`` are the names bound to the model, in toolset order.
        """

    @abstractmethod
    def format_scratchpad(
        self, steps: Sequence[ConversationStep]
    ) -> list[BaseMessage]:
        """Replay prior tool calls and results as messages."""

    def prepare_messages(
        self, messages: list[BaseMessage], tool_schemas: list[dict[str, Any]]
    ) -> list[BaseMessage]:
        return messages


class ToolCallingBackend(ModelBackend):
    """Backend for chat models with a native function-calling API."""

    def bind(self, tools: Sequence[ToolSpec]) -> BoundModel:
        schemas = [tool.to_openai_tool() for tool in tools]
        if schemas:
            runnable = self.llm.bind_tools(schemas)
        else:
            # Explicit binding with no tools so both cases invoke the same way
            runnable = self.llm.bind()
        return BoundModel(backend=self, runnable=runnable, tool_schemas=schemas)

    def parse(
        self,
        message: AIMessage,
        round_index: int,
        tool_names: Sequence[str] = (),
    ) -> ModelDecision:
        if not message.tool_calls and not message.invalid_tool_calls:
            return AgentFinish(output=message_text(message), message=message)

        message = _with_call_ids(message, round_index)
        invocations = [
            ToolInvocation(
                tool=call["name"],
                tool_input=call.get("args") or {},
                tool_call_id=call["id"],
                round=round_index,
                message=message,
            )
            for call in message.tool_calls
        ]
        for call in message.invalid_tool_calls:
            invocations.append(
                ToolInvocation(
                    tool=call.get("name") or "",
                    tool_input={},
                    tool_call_id=call["id"],
                    round=round_index,
                    message=message,
                    parse_error=call.get("error") or str(call.get("args")),
                )
            )
        return invocations

    def format_scratchpad(
        self, steps: Sequence[ConversationStep]
    ) -> list[BaseMessage]:
        messages: list[BaseMessage] = []
        current_round: int | None = None
        for step in steps:
            if step.action.round != current_round:
                current_round = step.action.round
                messages.append(step.action.message)
            messages.append(
                ToolMessage(
                    content=step.observation.observation,
                    tool_call_id=step.action.tool_call_id,
                    name=step.action.tool,
                )
            )
        return messages


def _with_call_ids(message: AIMessage, round_index: int) -> AIMessage:
    """Copy of ``message`` where every tool call carries an id.

    Missing ids become ``call_<round>_<position>``.
    """
    if all(call.get("id") for call in message.tool_calls) and all(
        call.get("id") for call in message.invalid_tool_calls
    ):
        return message

    tool_calls = [
        {**call, "id": call.get("id") or f"call_{round_index}_{i}"}
        for i, call in enumerate(message.tool_calls)
    ]
    offset = len(tool_calls)
    invalid_tool_calls = [
        {**call, "id": call.get("id") or f"call_{round_index}_{offset + i}"}
        for i, call in enumerate(message.invalid_tool_calls)
    ]
    return message.model_copy(
        update={"tool_calls": tool_calls, "invalid_tool_calls": invalid_tool_calls}
    )


TOOL_PROTOCOL_PROMPT = """You have access to the following tools:

{tools}

To use a tool, reply with only a JSON object of the form:
{{"tool": "<tool name>", "tool_input": {{<arguments>}}}}
To use several tools at once, reply with a JSON list of such objects.
When you have the final answer, reply with plain text and no JSON."""

_CODE_BLOCK = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


class PromptToolCallingBackend(ModelBackend):
    """Backend that emulates function calling through the prompt.

    For models without a native tool API: the tool schemas are described in a
    system message and the model replies with JSON when it wants a tool.
    """

    def bind(self, tools: Sequence[ToolSpec]) -> BoundModel:
        schemas = [tool.to_openai_tool() for tool in tools]
        return BoundModel(backend=self, runnable=self.llm.bind(), tool_schemas=schemas)

    def prepare_messages(
        self, messages: list[BaseMessage], tool_schemas: list[dict[str, Any]]
    ) -> list[BaseMessage]:
        if not tool_schemas:
            return messages
        described = json.dumps([schema["function"] for schema in tool_schemas], indent=2)
        protocol = SystemMessage(content=TOOL_PROTOCOL_PROMPT.format(tools=described))
        return [protocol, *messages]

    def parse(
        self,
        message: AIMessage,
        round_index: int,
        tool_names: Sequence[str] = (),
    ) -> ModelDecision:
        text = message_text(message)
        calls = _extract_json_calls(text, tool_names)
        if not calls:
            return AgentFinish(output=text, message=message)

        invocations = []
        for i, call in enumerate(calls):
            tool_input = (
                call.get("tool_input")
                or call.get("parameters")
                or call.get("arguments")
                or {}
            )
            parse_error = None
            if isinstance(tool_input, str):
                try:
                    tool_input = json.loads(tool_input)
                except json.JSONDecodeError as e:
                    parse_error = str(e)
                    tool_input = {}
            if not isinstance(tool_input, dict):
                parse_error = f"arguments must be an object, got {tool_input!r}"
                tool_input = {}

            invocations.append(
                ToolInvocation(
                    tool=str(call.get("tool") or call.get("name")),
                    tool_input=tool_input,
                    tool_call_id=f"call_{round_index}_{i}",
                    round=round_index,
                    message=message,
                    parse_error=parse_error,
                )
            )
        return invocations

    def format_scratchpad(
        self, steps: Sequence[ConversationStep]
    ) -> list[BaseMessage]:
        messages: list[BaseMessage] = []
        current_round: int | None = None
        for step in steps:
            if step.action.round != current_round:
                current_round = step.action.round
                messages.append(AIMessage(content=message_text(step.action.message)))
            messages.append(
                HumanMessage(
                    content=f"Tool '{step.action.tool}' returned:\n"
                    f"{step.observation.observation}"
                )
            )
        return messages


def _extract_json_calls(
    text: str, tool_names: Sequence[str]
) -> list[dict[str, Any]]:
    """Find JSON tool calls in a model reply.

    The JSON must be the whole reply, or the whole body of a fenced code
    block, and every entry must name a bound tool. Anything else, including
    prose that merely contains JSON, is a final answer and yields an empty
    list.
    """
    if not tool_names:
        return []

    stripped = text.strip()
    fenced = _CODE_BLOCK.search(stripped)
    raw = fenced.group(1).strip() if fenced else stripped
    if not raw.startswith(("{", "[")):
        return []

    try:
        parsed, end = json.JSONDecoder().raw_decode(raw)
    except json.JSONDecodeError:
        logger.debug(f"Reply is not a JSON tool call: {raw[:200]}")
        return []
    if end != len(raw):
        return []

    candidates = parsed if isinstance(parsed, list) else [parsed]
    calls = [
        c
        for c in candidates
        if isinstance(c, dict) and (c.get("tool") or c.get("name")) in tool_names
    ]
    if not calls or len(calls) != len(candidates):
        return []
    return calls


def select_backend(llm: BaseChatModel, mode: str = "native") -> ModelBackend:
    """Pick the backend variant for a model.

    Args:
        llm: The chat model.
        mode: "native" for function-calling APIs, "prompt" for emulation.

    Raises:
        ConfigurationError: If the mode is unknown.
    """
    if mode == "native":
        return ToolCallingBackend(llm)
    if mode == "prompt":
        return PromptToolCallingBackend(llm)
    raise ConfigurationError(
        f"Invalid tool calling mode '{mode}'. Must be one of: native, prompt"
    )
