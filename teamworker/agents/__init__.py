"""Agent compilation and execution."""

from teamworker.agents.outputs import (
    AgentFinish,
    AgentOutput,
    ConversationStep,
    ToolCall,
    ToolInvocation,
    ToolResult,
)
from teamworker.agents.scratchpad import Scratchpad
from teamworker.agents.prompt import build_closing_segment, build_worker_prompt
from teamworker.agents.executor import AgentExecutor
from teamworker.agents.compiler import AgentConfig, create_agent

__all__ = [
    "AgentConfig",
    "AgentExecutor",
    "AgentFinish",
    "AgentOutput",
    "ConversationStep",
    "Scratchpad",
    "ToolCall",
    "ToolInvocation",
    "ToolResult",
    "build_closing_segment",
    "build_worker_prompt",
    "create_agent",
]
