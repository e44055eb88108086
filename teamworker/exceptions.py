"""Exceptions for the teamworker package."""


class WorkerError(Exception):
    """Base class for all worker errors."""

    pass


class ConfigurationError(WorkerError):
    """Raised when a worker or agent cannot be built from its inputs.

    Always raised at construction time, never from inside the agent loop.
    """

    pass


class DuplicateToolError(ConfigurationError):
    """Raised when two tools in one toolset share a name."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(
            f"Tool '{tool_name}' is defined more than once. "
            "Each tool in a worker's toolset must have a unique name."
        )


class ToolExecutionError(WorkerError):
    """Raised when a tool call fails.

    The executor recovers this into a textual observation for the model;
    it never aborts the agent loop.

    Attributes:
        tool_name: Name of the tool that failed.
    """

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' failed: {message}")


class ModelInvocationError(WorkerError):
    """Raised when the model call fails or its input cannot be rendered.

    Fatal to the current invocation.
    """

    pass


class InvocationCancelledError(WorkerError):
    """Raised when an invocation is aborted through its cancellation context."""

    pass


class WorkerInvocationError(WorkerError):
    """Invocation failure attributed to a specific worker.

    Attributes:
        worker_name: Name of the worker whose invocation failed.
    """

    def __init__(self, worker_name: str, message: str) -> None:
        self.worker_name = worker_name
        super().__init__(f"Worker '{worker_name}' failed: {message}")
