"""Tests for the Worker adapter."""

import asyncio
import copy
import logging

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from teamworker.agents.outputs import EARLY_STOP_MESSAGE
from teamworker.config import DEFAULT_WORKER_PROMPT, WorkerSettings
from teamworker.exceptions import (
    ConfigurationError,
    DuplicateToolError,
    WorkerInvocationError,
)
from teamworker.llm import PromptToolCallingBackend, ToolCallingBackend
from teamworker.team import SupervisorHandle, Worker, build_worker
from teamworker.team.state import attributed_to, run_status
from tests.conftest import make_tool, tool_call_message


def search_forever() -> AIMessage:
    return tool_call_message(("search", {"query": "fox"}))


class TestBuildWorker:
    """Tests for build_worker validation and wiring."""

    def test_identity(self, scripted_model) -> None:
        """Test name, parent and type are exposed."""
        supervisor = SupervisorHandle(llm=scripted_model(), name="research_lead")

        worker = build_worker("researcher", "Research", [], supervisor)

        assert isinstance(worker, Worker)
        assert worker.name == "researcher"
        assert worker.parent_supervisor_name == "research_lead"
        assert worker.type == "worker"

    def test_parent_name_defaults(self, scripted_model) -> None:
        """Test an unnamed supervisor is reported as 'supervisor'."""
        worker = build_worker(
            "worker", "Summarize", [], SupervisorHandle(llm=scripted_model())
        )
        assert worker.parent_supervisor_name == "supervisor"

    @pytest.mark.parametrize("name", ["", None])
    def test_missing_name(self, scripted_model, name) -> None:
        """Test a worker must be named."""
        with pytest.raises(ConfigurationError, match="Worker name is required"):
            build_worker(name, "Summarize", [], SupervisorHandle(llm=scripted_model()))

    def test_missing_supervisor(self) -> None:
        """Test a worker needs a supervisor."""
        with pytest.raises(ConfigurationError, match="supervisor"):
            build_worker("worker", "Summarize", [], None)

    def test_supervisor_without_model(self) -> None:
        """Test a supervisor handle without a model is rejected."""
        with pytest.raises(ConfigurationError, match="model"):
            build_worker("worker", "Summarize", [], SupervisorHandle(name="lead"))

    def test_nested_tools_are_flattened(self, scripted_model) -> None:
        """Test list-of-lists tool inputs flatten in order."""
        worker = build_worker(
            "worker",
            "Research",
            [[make_tool("search")], [make_tool("fetch"), None]],
            SupervisorHandle(llm=scripted_model()),
        )
        assert worker.executor.tools.names == ["search", "fetch"]

    def test_duplicate_tools_rejected(self, scripted_model) -> None:
        """Test duplicate tool names fail at construction."""
        with pytest.raises(DuplicateToolError):
            build_worker(
                "worker",
                "Research",
                [make_tool("search"), [make_tool("search")]],
                SupervisorHandle(llm=scripted_model()),
            )

    def test_missing_instruction_uses_default_prompt(self, scripted_model) -> None:
        """Test no instruction falls back to the research-assistant prompt."""
        worker = build_worker("worker", None, [], SupervisorHandle(llm=scripted_model()))
        system = worker.executor.prompt.format_messages(
            messages=[], agent_scratchpad=[], instructions="", team_members=""
        )[0]
        assert system.content.startswith(DEFAULT_WORKER_PROMPT)

    def test_cap_falls_back_to_settings(self, scripted_model) -> None:
        """Test the settings' cap applies when none is given."""
        worker = build_worker(
            "worker",
            "Research",
            [],
            SupervisorHandle(llm=scripted_model()),
            settings=WorkerSettings(max_iterations="3"),
        )
        assert worker.executor.max_iterations == 3

    def test_explicit_cap_wins(self, scripted_model) -> None:
        """Test an explicit cap overrides the settings."""
        worker = build_worker(
            "worker",
            "Research",
            [],
            SupervisorHandle(llm=scripted_model()),
            max_iterations="7",
            settings=WorkerSettings(max_iterations="3"),
        )
        assert worker.executor.max_iterations == 7

    def test_backend_from_settings(self, scripted_model) -> None:
        """Test the tool-calling mode comes from the settings by default."""
        worker = build_worker(
            "worker",
            "Research",
            [],
            SupervisorHandle(llm=scripted_model()),
            settings=WorkerSettings(tool_calling="prompt"),
        )
        assert isinstance(worker.executor.model.backend, PromptToolCallingBackend)

    def test_backend_from_supervisor(self, scripted_model) -> None:
        """Test the supervisor handle overrides the settings' mode."""
        worker = build_worker(
            "worker",
            "Research",
            [],
            SupervisorHandle(llm=scripted_model(), tool_calling="native"),
            settings=WorkerSettings(tool_calling="prompt"),
        )
        assert isinstance(worker.executor.model.backend, ToolCallingBackend)


class TestWorkerInvocation:
    """End-to-end tests of one worker turn."""

    @pytest.mark.asyncio
    async def test_summarize_without_tools(self, scripted_model, team_state) -> None:
        """Test a tool-free worker answers with one attributed message."""
        llm = scripted_model(AIMessage(content="Summary: a quick fox."))
        worker = build_worker(
            "worker", "Summarize the given text", [], SupervisorHandle(llm=llm)
        )

        delta = await worker.ainvoke(team_state)

        assert list(delta.keys()) == ["messages"]
        assert len(delta["messages"]) == 1
        message = delta["messages"][0]
        assert isinstance(message, HumanMessage)
        assert message.content == "Summary: a quick fox."
        assert attributed_to(message) == "worker"
        assert run_status(message) == {
            "status": "completed",
            "forced_stop": False,
            "iterations": 1,
        }
        assert llm.call_kwargs[0].get("tools") is None

    @pytest.mark.asyncio
    async def test_history_reaches_the_model(self, scripted_model, team_state) -> None:
        """Test the model sees the system prompt, history and closing segment."""
        llm = scripted_model(AIMessage(content="ok"))
        worker = build_worker(
            "worker", "Summarize the given text", [], SupervisorHandle(llm=llm)
        )

        await worker(team_state)

        sent = llm.calls[0]
        assert isinstance(sent[0], SystemMessage)
        assert "worker, researcher" in sent[0].content
        assert sent[1].content == "Please summarize: the quick brown fox"
        assert "Supervisor instructions: Keep it short." in sent[-1].content

    @pytest.mark.asyncio
    async def test_forced_stop_is_tagged(self, scripted_model, team_state) -> None:
        """Test a model that always calls tools stops after the cap."""
        llm = scripted_model(search_forever())
        worker = build_worker(
            "worker",
            "Research",
            [make_tool("search")],
            SupervisorHandle(llm=llm),
            max_iterations="2",
        )

        delta = await worker.ainvoke(team_state)

        assert len(llm.calls) == 2
        [message] = delta["messages"]
        assert message.content == EARLY_STOP_MESSAGE
        assert attributed_to(message) == "worker"
        assert run_status(message)["forced_stop"] is True
        assert run_status(message)["status"] == "max_iterations"
        assert run_status(message)["iterations"] == 2

    @pytest.mark.asyncio
    async def test_forced_stop_logs_warning(self, scripted_model, team_state, caplog) -> None:
        """Test hitting the cap is logged."""
        worker = build_worker(
            "worker",
            "Research",
            [make_tool("search")],
            SupervisorHandle(llm=scripted_model(search_forever())),
            max_iterations=1,
        )

        with caplog.at_level(logging.WARNING):
            await worker.ainvoke(team_state)

        assert "iteration cap" in caplog.text

    @pytest.mark.asyncio
    async def test_state_is_not_mutated(self, scripted_model, team_state) -> None:
        """Test the worker never appends to the shared history itself."""
        before = copy.deepcopy(team_state)
        worker = build_worker(
            "worker",
            "Research",
            [make_tool("search")],
            SupervisorHandle(llm=scripted_model(search_forever(), AIMessage(content="done"))),
        )

        await worker.ainvoke(team_state)

        assert team_state == before

    @pytest.mark.asyncio
    async def test_prompt_mode_round_trip(self, scripted_model, team_state) -> None:
        """Test the emulated backend dispatches JSON tool calls."""
        llm = scripted_model(
            AIMessage(content='{"tool": "search", "tool_input": {"query": "fox"}}'),
            AIMessage(content="The fox is quick."),
        )
        worker = build_worker(
            "worker",
            "Research",
            [make_tool("search")],
            SupervisorHandle(llm=llm, tool_calling="prompt"),
        )

        delta = await worker.ainvoke(team_state)

        assert delta["messages"][0].content == "The fox is quick."
        replayed = [m for m in llm.calls[1] if isinstance(m, HumanMessage)]
        assert replayed[-1].content == "Tool 'search' returned:\nsearch result for fox"

    @pytest.mark.asyncio
    async def test_model_failure_names_the_worker(self, scripted_model, team_state) -> None:
        """Test model errors surface as WorkerInvocationError."""
        worker = build_worker(
            "researcher",
            "Research",
            [],
            SupervisorHandle(llm=scripted_model(TimeoutError("model timed out"))),
        )

        with pytest.raises(WorkerInvocationError) as exc_info:
            await worker.ainvoke(team_state)

        assert exc_info.value.worker_name == "researcher"
        assert "model timed out" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_bad_history_names_the_worker(self, scripted_model, team_state) -> None:
        """Test an unrenderable history surfaces as WorkerInvocationError."""
        worker = build_worker(
            "researcher",
            "Research",
            [],
            SupervisorHandle(llm=scripted_model(AIMessage(content="never"))),
        )
        state = {**team_state, "messages": [("narrator", "once upon a time")]}

        with pytest.raises(WorkerInvocationError) as exc_info:
            await worker.ainvoke(state)

        assert exc_info.value.worker_name == "researcher"

    @pytest.mark.asyncio
    async def test_abort_event_fails_the_worker(self, scripted_model, team_state) -> None:
        """Test an aborted run produces no message."""
        abort = asyncio.Event()
        abort.set()
        worker = build_worker(
            "worker",
            "Research",
            [],
            SupervisorHandle(llm=scripted_model(AIMessage(content="never"))),
        )

        with pytest.raises(WorkerInvocationError, match="worker"):
            await worker.ainvoke(team_state, {"configurable": {"abort_event": abort}})

    @pytest.mark.asyncio
    async def test_workers_run_concurrently(self, scripted_model, team_state) -> None:
        """Test two workers sharing one model can run side by side."""
        llm = scripted_model(AIMessage(content="done"))
        supervisor = SupervisorHandle(llm=llm, name="lead")
        first = build_worker("first", "Summarize", [], supervisor)
        second = build_worker("second", "Summarize", [], supervisor)

        deltas = await asyncio.gather(first(team_state), second(team_state))

        assert [attributed_to(d["messages"][0]) for d in deltas] == ["first", "second"]
