"""Compile an instruction and a toolset into an AgentExecutor."""

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from teamworker.agents.executor import AgentExecutor
from teamworker.agents.prompt import build_worker_prompt
from teamworker.config import parse_max_iterations
from teamworker.exceptions import ConfigurationError
from teamworker.llm.backends import ModelBackend
from teamworker.tools.spec import ToolSpec
from teamworker.tools.toolset import ToolSet

logger = logging.getLogger(__name__)


class AgentConfig(BaseModel):
    """Declarative inputs of one agent. Read-only after construction."""

    instruction: str = Field(..., description="Behavioral directive, used verbatim")
    tools: list[ToolSpec] = Field(default_factory=list)
    max_iterations: int | None = Field(
        default=None, ge=1, description="Cap on model rounds, None for unbounded"
    )

    model_config = {"frozen": True}

    @field_validator("instruction")
    @classmethod
    def instruction_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("instruction must not be empty")
        return value


def create_agent(
    backend: ModelBackend,
    tools: Sequence[ToolSpec],
    instruction: str,
    max_iterations: Any = None,
    verbose: bool = False,
) -> AgentExecutor:
    """Build an AgentExecutor.

    Args:
        backend: Tool-calling backend wrapping the model.
        tools: Tools the agent may call, possibly none.
        instruction: The worker's role prompt.
        max_iterations: Raw iteration cap. Empty or non-numeric means no limit.
        verbose: Log every loop round at INFO.

    Returns:
        An executor that can be invoked repeatedly against different histories.

    Raises:
        ConfigurationError: If tool names repeat, the cap is not positive or
            the instruction is empty.
    """
    toolset = ToolSet(tools)
    try:
        config = AgentConfig(
            instruction=instruction,
            tools=list(toolset),
            max_iterations=parse_max_iterations(max_iterations),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid agent configuration: {e}") from e

    prompt = build_worker_prompt(config.instruction, toolset.names)
    model = backend.bind(list(toolset))

    logger.debug(
        f"Compiled agent with {len(toolset)} tool(s) {toolset.names}, "
        f"max_iterations={config.max_iterations}"
    )
    return AgentExecutor(
        prompt=prompt,
        model=model,
        tools=toolset,
        max_iterations=config.max_iterations,
        verbose=verbose,
    )
