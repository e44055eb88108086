"""Prompt assembly for worker agents."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

WORKER_DIRECTIVE = (
    "\nWork autonomously according to your specialty, using the tools available to you."
    " Do not ask for clarification."
    " Your other team members (and other teams) will collaborate with you with their"
    " own specialties."
    " You are chosen for a reason! You are one of the following team members:"
    " {team_members}."
)

COMPLETION_DIRECTIVE = (
    "End if you have already completed the requested task. "
    "Communicate the work completed."
)


def _escape_braces(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


def build_closing_segment(tool_names: Sequence[str]) -> str:
    """Build the trailing system segment.

    Supervisor instructions and the completion directive are always present.
    The tool restatement is added only when the worker has tools.
    """
    lines = ["Supervisor instructions: {instructions}"]
    if tool_names:
        names = _escape_braces(", ".join(tool_names))
        lines.append(f"Remember, you individually can only use these tools: {names}")
    lines.extend(["", COMPLETION_DIRECTIVE])
    return "\n".join(lines)


def build_worker_prompt(
    instruction: str, tool_names: Sequence[str]
) -> ChatPromptTemplate:
    """Build the worker's conversation template.

    Order: instruction + autonomy directive, prior messages, tool scratchpad,
    closing segment. Braces in the instruction are taken literally.
    """
    return ChatPromptTemplate.from_messages(
        [
            ("system", _escape_braces(instruction) + WORKER_DIRECTIVE),
            MessagesPlaceholder(variable_name="messages"),
            MessagesPlaceholder(variable_name="agent_scratchpad"),
            ("system", build_closing_segment(tool_names)),
        ]
    )


def format_team_members(team_members: Any) -> str:
    if team_members is None:
        return ""
    if isinstance(team_members, str):
        return team_members
    if isinstance(team_members, (set, frozenset)):
        return ", ".join(sorted(str(m) for m in team_members))
    if isinstance(team_members, Iterable):
        return ", ".join(str(m) for m in team_members)
    return str(team_members)


def prompt_inputs(
    state: Mapping[str, Any], scratchpad_messages: list[BaseMessage]
) -> dict[str, Any]:
    """Map a team state snapshot onto the prompt variables."""
    return {
        "messages": list(state.get("messages") or []),
        "agent_scratchpad": scratchpad_messages,
        "instructions": state.get("instructions") or "",
        "team_members": format_team_members(state.get("team_members")),
    }
