"""Output models for agent execution.

Loop-internal records (ToolInvocation, AgentFinish, ToolResult,
ConversationStep) live only for one invocation. AgentOutput and ToolCall are
what leaves the executor.
"""

from dataclasses import dataclass
from typing import Any, Literal

from langchain_core.messages import AIMessage
from pydantic import BaseModel, Field

EARLY_STOP_MESSAGE = "Agent stopped due to max iterations."


@dataclass(frozen=True)
class ToolInvocation:
    """One tool call requested by the model in a given round."""

    tool: str
    tool_input: dict[str, Any]
    tool_call_id: str
    round: int
    message: AIMessage
    parse_error: str | None = None


@dataclass(frozen=True)
class AgentFinish:
    """A final answer from the model."""

    output: str
    message: AIMessage


@dataclass(frozen=True)
class ToolResult:
    """Outcome of dispatching one ToolInvocation."""

    tool: str
    tool_call_id: str
    output: str | None = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def observation(self) -> str:
        """Text the model sees on the next round."""
        if self.error is not None:
            return f"Error: {self.error}"
        return self.output or ""


@dataclass(frozen=True)
class ConversationStep:
    """One dispatched action and what came back."""

    action: ToolInvocation
    observation: ToolResult


ModelDecision = list[ToolInvocation] | AgentFinish


class ToolCall(BaseModel):
    """Record of a tool invocation.

    Captures both the input (tool_name, arguments) and output (result or error)
    of a single tool call during execution.
    """

    tool_name: str
    arguments: dict[str, Any]
    result: str | None = None
    error: str | None = None

    @classmethod
    def from_step(cls, step: ConversationStep) -> "ToolCall":
        return cls(
            tool_name=step.action.tool,
            arguments=step.action.tool_input,
            result=step.observation.output,
            error=step.observation.error,
        )


class AgentOutput(BaseModel):
    """Result of one executor invocation.

    ``status`` tells a natural finish ("completed") apart from a forced stop
    at the iteration cap ("max_iterations"). Both carry a usable ``output``.
    """

    output: str
    status: Literal["completed", "max_iterations"] = Field(default="completed")
    iterations: int = Field(default=1, ge=1)
    tool_calls: list[ToolCall] = Field(default_factory=list)

    @property
    def forced_stop(self) -> bool:
        return self.status == "max_iterations"
