"""Per-invocation log of tool calls and their results."""

from collections.abc import Iterator

from teamworker.agents.outputs import ConversationStep


class Scratchpad:
    """Append-only, ordered log of ConversationSteps.

    One Scratchpad is created per executor invocation and dropped when the
    invocation returns. Backends render it into messages each round.
    """

    def __init__(self) -> None:
        self._steps: list[ConversationStep] = []

    def append(self, step: ConversationStep) -> None:
        self._steps.append(step)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[ConversationStep]:
        return iter(self._steps)

    @property
    def steps(self) -> tuple[ConversationStep, ...]:
        return tuple(self._steps)
