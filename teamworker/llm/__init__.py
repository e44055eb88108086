from teamworker.llm.backends import (
    BoundModel,
    ModelBackend,
    PromptToolCallingBackend,
    ToolCallingBackend,
    select_backend,
)
from teamworker.llm.factory import get_chat_model

__all__ = [
    "BoundModel",
    "ModelBackend",
    "PromptToolCallingBackend",
    "ToolCallingBackend",
    "get_chat_model",
    "select_backend",
]
