"""Pytest configuration and fixtures."""

from collections.abc import Callable, Sequence
from typing import Any

import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import Field

from teamworker.tools import ToolSpec


class ScriptedChatModel(BaseChatModel):
    """Chat model stub that replays scripted replies and records every call.

    Each entry in ``responses`` is an AIMessage, an exception to raise, or a
    callable taking the rendered messages and returning an AIMessage. The last
    entry repeats once the script runs out.
    """

    responses: list[Any] = Field(default_factory=list)
    calls: list[list[BaseMessage]] = Field(default_factory=list)
    call_kwargs: list[dict[str, Any]] = Field(default_factory=list)
    bound_tools: list[Any] | None = None

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def _generate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        self.calls.append(list(messages))
        self.call_kwargs.append(kwargs)
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        if not isinstance(response, AIMessage) and callable(response):
            response = response(messages)
        return ChatResult(generations=[ChatGeneration(message=response)])

    def bind_tools(self, tools: Sequence[Any], **kwargs: Any) -> Any:
        self.bound_tools = list(tools)
        return self.bind(tools=list(tools), **kwargs)


def tool_call_message(
    *calls: tuple[str, dict[str, Any]], content: str = ""
) -> AIMessage:
    """AIMessage requesting the given (name, args) tool calls."""
    return AIMessage(
        content=content,
        tool_calls=[
            {"name": name, "args": args, "id": f"call_{i}"}
            for i, (name, args) in enumerate(calls)
        ],
    )


def make_tool(
    name: str,
    func: Callable[..., Any] | None = None,
    description: str = "",
) -> ToolSpec:
    """ToolSpec with an object schema taking a single ``query`` string."""
    if func is None:

        def func(query: str = "") -> str:
            return f"{name} result for {query}"

    spec = ToolSpec(
        name=name,
        description=description or f"The {name} tool.",
        input_schema={
            "type": "object",
            "properties": {"query": {"type": "string"}},
        },
    )
    return spec.bind_callable(func)


@pytest.fixture
def scripted_model() -> Callable[..., ScriptedChatModel]:
    """Factory for scripted chat models."""

    def _make(*responses: Any) -> ScriptedChatModel:
        return ScriptedChatModel(responses=list(responses))

    return _make


@pytest.fixture
def team_state() -> dict[str, Any]:
    """A minimal team state with one user message."""
    return {
        "messages": [HumanMessage(content="Please summarize: the quick brown fox")],
        "instructions": "Keep it short.",
        "team_members": ["worker", "researcher"],
    }
