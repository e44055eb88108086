"""teamworker - tool-using worker agents for supervisor/worker teams.

A Worker turns a chat model, a toolset, a role instruction and an iteration
budget into one node a supervisor can dispatch work to:

- Agent compiler: instruction + tools -> AgentExecutor (prompt, bound model,
  observe/decide/act loop with an optional round cap)
- Worker adapter: team state snapshot -> executor -> one attributed message
"""

from teamworker.agents import AgentExecutor, AgentOutput, create_agent
from teamworker.config import WorkerSettings, parse_max_iterations
from teamworker.exceptions import (
    ConfigurationError,
    DuplicateToolError,
    InvocationCancelledError,
    ModelInvocationError,
    ToolExecutionError,
    WorkerError,
    WorkerInvocationError,
)
from teamworker.llm import ModelBackend, select_backend
from teamworker.team import SupervisorHandle, TeamState, Worker, build_worker
from teamworker.tools import ToolSpec, ToolSet, tool_spec

__all__ = [
    # Agents
    "AgentExecutor",
    "AgentOutput",
    "create_agent",
    # Team
    "SupervisorHandle",
    "TeamState",
    "Worker",
    "build_worker",
    # Tools
    "ToolSet",
    "ToolSpec",
    "tool_spec",
    # Models
    "ModelBackend",
    "select_backend",
    # Configuration
    "WorkerSettings",
    "parse_max_iterations",
    # Errors
    "ConfigurationError",
    "DuplicateToolError",
    "InvocationCancelledError",
    "ModelInvocationError",
    "ToolExecutionError",
    "WorkerError",
    "WorkerInvocationError",
]
