"""AgentExecutor - the observe, decide, act loop of a worker."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import RunnableConfig

from teamworker.agents.outputs import (
    EARLY_STOP_MESSAGE,
    AgentFinish,
    AgentOutput,
    ConversationStep,
    ToolCall,
)
from teamworker.agents.prompt import prompt_inputs
from teamworker.agents.scratchpad import Scratchpad
from teamworker.exceptions import InvocationCancelledError, ModelInvocationError
from teamworker.llm.backends import BoundModel, message_text
from teamworker.runtime import raise_if_aborted, run_abortable
from teamworker.tools.toolset import ToolSet

logger = logging.getLogger(__name__)


class AgentExecutor:
    """Runs a compiled agent against one conversation history at a time.

    Holds no per-call state: every invocation gets its own Scratchpad, so the
    same executor can serve concurrent invocations.
    """

    def __init__(
        self,
        prompt: ChatPromptTemplate,
        model: BoundModel,
        tools: ToolSet,
        max_iterations: int | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialize the executor.

        Args:
            prompt: The worker's conversation template.
            model: Model bound to the toolset.
            tools: Tools the model may call.
            max_iterations: Cap on model rounds, None for unbounded.
            verbose: Log every round at INFO instead of DEBUG.
        """
        self.prompt = prompt
        self.model = model
        self.tools = tools
        self.max_iterations = max_iterations
        self.verbose = verbose

    def _log(self, message: str) -> None:
        logger.log(logging.INFO if self.verbose else logging.DEBUG, message)

    def _should_continue(self, iterations: int) -> bool:
        return self.max_iterations is None or iterations < self.max_iterations

    async def ainvoke(
        self, state: Mapping[str, Any], config: RunnableConfig | None = None
    ) -> AgentOutput:
        """Run the loop until a final answer or the iteration cap.

        Args:
            state: Team state snapshot; read, never modified.
            config: Shared run config, passed through to model and tools.

        Returns:
            AgentOutput with status "completed", or "max_iterations" on a
            forced stop.

        Raises:
            ModelInvocationError: If a model call fails.
            InvocationCancelledError: If the run is aborted through the config.
        """
        scratchpad = Scratchpad()
        iterations = 0
        last_text = ""

        while self._should_continue(iterations):
            raise_if_aborted(config)
            scratchpad_messages = self.model.backend.format_scratchpad(scratchpad.steps)
            try:
                messages = self.prompt.format_messages(
                    **prompt_inputs(state, scratchpad_messages)
                )
            except Exception as e:
                raise ModelInvocationError(
                    f"Could not render the prompt on round {iterations + 1}: "
                    f"{type(e).__name__}: {e}"
                ) from e

            try:
                decision = await run_abortable(
                    self.model.ainvoke(messages, iterations, config=config), config
                )
            except (asyncio.CancelledError, InvocationCancelledError):
                raise
            except Exception as e:
                raise ModelInvocationError(
                    f"Model call failed on round {iterations + 1}: "
                    f"{type(e).__name__}: {e}"
                ) from e
            iterations += 1

            if isinstance(decision, AgentFinish):
                self._log(
                    f"Round {iterations}: final answer ({len(decision.output)} chars)"
                )
                return AgentOutput(
                    output=decision.output,
                    status="completed",
                    iterations=iterations,
                    tool_calls=[ToolCall.from_step(step) for step in scratchpad],
                )

            last_text = message_text(decision[0].message) or last_text
            for invocation in decision:
                self._log(
                    f"Round {iterations}: calling '{invocation.tool}' "
                    f"with {invocation.tool_input}"
                )
                result = await run_abortable(
                    self.tools.dispatch(invocation, config=config), config
                )
                scratchpad.append(
                    ConversationStep(action=invocation, observation=result)
                )
                self._log(
                    f"Round {iterations}: '{invocation.tool}' -> "
                    f"{result.observation[:200]}"
                )

        logger.warning(
            f"Agent stopped after {iterations} iterations without a final answer"
        )
        return AgentOutput(
            output=last_text or EARLY_STOP_MESSAGE,
            status="max_iterations",
            iterations=max(iterations, 1),
            tool_calls=[ToolCall.from_step(step) for step in scratchpad],
        )
