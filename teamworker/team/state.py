"""Team state shared between a supervisor and its workers."""

from typing import Any, TypedDict

from langchain_core.messages import BaseMessage, HumanMessage

from teamworker.agents.outputs import AgentOutput


class TeamState(TypedDict, total=False):
    """Shared conversation history and metadata of one team.

    Owned by the supervisor. Workers read a snapshot and return a delta.
    """

    messages: list[BaseMessage]
    instructions: str
    team_members: list[str] | set[str] | str


class StateDelta(TypedDict):
    """What a worker hands back: exactly one new message to append."""

    messages: list[BaseMessage]


def attributed_message(output: AgentOutput, worker_name: str) -> HumanMessage:
    """Wrap an agent result as a message attributed to ``worker_name``."""
    return HumanMessage(
        content=output.output,
        name=worker_name,
        response_metadata={
            "status": output.status,
            "forced_stop": output.forced_stop,
            "iterations": output.iterations,
        },
    )


def attributed_to(message: BaseMessage) -> str | None:
    """Name of the worker a message is attributed to."""
    return message.name


def run_status(message: BaseMessage) -> dict[str, Any]:
    """Run metadata a worker attached to its message, if any."""
    return dict(message.response_metadata or {})
