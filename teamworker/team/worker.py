"""Worker - one agent node in a supervisor/worker team."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Literal

from langchain_core.runnables import RunnableConfig
from pydantic import BaseModel, Field

from teamworker.agents.compiler import create_agent
from teamworker.agents.executor import AgentExecutor
from teamworker.agents.outputs import AgentOutput
from teamworker.config import DEFAULT_WORKER_PROMPT, WorkerSettings
from teamworker.exceptions import (
    ConfigurationError,
    WorkerError,
    WorkerInvocationError,
)
from teamworker.llm.backends import select_backend
from teamworker.team.state import StateDelta, attributed_message
from teamworker.tools.toolset import flatten_tools

logger = logging.getLogger(__name__)

DEFAULT_SUPERVISOR_NAME = "supervisor"


class SupervisorHandle(BaseModel):
    """What a worker needs from its supervisor: the model and a name."""

    llm: Any = Field(
        default=None, description="LangChain chat model shared by the team"
    )
    name: str | None = Field(default=None, description="Supervisor name")
    tool_calling: Literal["native", "prompt"] | None = Field(
        default=None, description="Overrides the settings' tool-calling mode"
    )

    model_config = {"arbitrary_types_allowed": True}


class Worker:
    """Bridges the team state and one AgentExecutor.

    Each invocation reads the full shared history, runs the executor to
    completion or to its cap, and returns a delta with exactly one message
    attributed to this worker.
    """

    type = "worker"

    def __init__(
        self, name: str, executor: AgentExecutor, parent_supervisor_name: str
    ) -> None:
        if not name:
            raise ConfigurationError("Worker name is required!")
        self.name = name
        self.executor = executor
        self.parent_supervisor_name = parent_supervisor_name

    def __repr__(self) -> str:
        return (
            f"Worker(name={self.name!r}, "
            f"parent_supervisor_name={self.parent_supervisor_name!r})"
        )

    async def arun(
        self, state: Mapping[str, Any], config: RunnableConfig | None = None
    ) -> AgentOutput:
        """Run the executor and return its tagged result.

        Raises:
            WorkerInvocationError: If the model call fails or the run is aborted.
        """
        try:
            output = await self.executor.ainvoke(state, config)
        except asyncio.CancelledError:
            logger.info(f"Worker '{self.name}' cancelled")
            raise
        except WorkerError as e:
            logger.error(f"Worker '{self.name}' invocation failed: {e}")
            raise WorkerInvocationError(self.name, str(e)) from e

        if output.forced_stop:
            logger.warning(
                f"Worker '{self.name}' hit its iteration cap after "
                f"{output.iterations} round(s)"
            )
        return output

    async def ainvoke(
        self, state: Mapping[str, Any], config: RunnableConfig | None = None
    ) -> StateDelta:
        """Run one turn and return the state delta to append.

        Args:
            state: Current team state snapshot. Not modified.
            config: Cancellation/propagation context shared by the whole team.

        Returns:
            ``{"messages": [message]}`` with the message attributed to this worker.
        """
        output = await self.arun(state, config)
        return {"messages": [attributed_message(output, self.name)]}

    async def __call__(
        self, state: Mapping[str, Any], config: RunnableConfig | None = None
    ) -> StateDelta:
        return await self.ainvoke(state, config)


def build_worker(
    worker_name: str,
    instruction: str | None,
    tools: Any,
    supervisor: SupervisorHandle | None,
    max_iterations: Any = None,
    settings: WorkerSettings | None = None,
) -> Worker:
    """Build a Worker for a supervisor's team.

    Args:
        worker_name: Name used to attribute the worker's messages.
        instruction: Role prompt. Defaults to a research-assistant prompt.
        tools: ToolSpecs or LangChain tools, possibly nested, possibly empty.
        supervisor: Handle carrying the team's model.
        max_iterations: Raw iteration cap; falls back to the settings' cap.
        settings: Explicit process options. Environment is never read here.

    Returns:
        A ready-to-invoke Worker.

    Raises:
        ConfigurationError: If the name, supervisor or model is missing, tool
            names repeat, or the iteration cap is invalid.
    """
    if not worker_name:
        raise ConfigurationError("Worker name is required!")
    if supervisor is None or supervisor.llm is None:
        raise ConfigurationError(
            f"Worker '{worker_name}' needs a supervisor with a model handle"
        )

    settings = settings or WorkerSettings()
    if max_iterations is None:
        max_iterations = settings.max_iterations

    backend = select_backend(
        supervisor.llm, supervisor.tool_calling or settings.tool_calling
    )
    executor = create_agent(
        backend,
        flatten_tools(tools),
        instruction or DEFAULT_WORKER_PROMPT,
        max_iterations=max_iterations,
        verbose=settings.verbose,
    )

    parent = supervisor.name or DEFAULT_SUPERVISOR_NAME
    logger.info(f"Built worker '{worker_name}' under supervisor '{parent}'")
    return Worker(worker_name, executor, parent)
