"""Worker configuration.

Settings are always passed explicitly. ``WorkerSettings.from_env`` is the only
place the environment is read, and only when a caller asks for it.
"""

import logging
import math
import os
import re
from typing import Any, Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from teamworker.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_WORKER_PROMPT = (
    "You are a research assistant who can search for up-to-date info using "
    "search engine."
)

# Leading numeric prefix, as a lenient float parser reads it ("4abc" -> 4)
_NUMERIC_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_max_iterations(raw: Any) -> int | None:
    """Parse a raw iteration cap.

    Anything that does not read as a number means "no limit". That includes
    None, empty or blank strings, booleans and non-finite values.

    Args:
        raw: The raw cap, usually a string from node inputs.

    Returns:
        The cap as a positive int (fractions round up), or None for unbounded.

    Raises:
        ConfigurationError: If the value parses to zero or a negative number.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        match = _NUMERIC_PREFIX.match(str(raw).strip())
        if not match:
            return None
        value = float(match.group(0))

    if math.isnan(value) or math.isinf(value):
        return None
    if value <= 0:
        raise ConfigurationError(
            f"max_iterations must be a positive number, got {raw!r}"
        )
    return math.ceil(value)


class WorkerSettings(BaseModel):
    """Process-level options for building workers."""

    verbose: bool = Field(default=False, description="Log every loop round at INFO")
    max_iterations: str | int | float | None = Field(
        default=None, description="Default raw iteration cap for new workers"
    )
    tool_calling: Literal["native", "prompt"] = Field(
        default="native", description="Tool-calling backend variant"
    )

    @classmethod
    def from_env(cls) -> "WorkerSettings":
        """Build settings from the environment (and a .env file if present).

        Reads DEBUG, WORKER_MAX_ITERATIONS and WORKER_TOOL_CALLING.
        """
        load_dotenv(find_dotenv())

        tool_calling = os.getenv("WORKER_TOOL_CALLING", "native").lower()
        if tool_calling not in ("native", "prompt"):
            raise ConfigurationError(
                f"Invalid WORKER_TOOL_CALLING '{tool_calling}'. "
                "Must be one of: native, prompt"
            )

        settings = cls(
            verbose=os.getenv("DEBUG") == "true",
            max_iterations=os.getenv("WORKER_MAX_ITERATIONS"),
            tool_calling=tool_calling,  # type: ignore[arg-type]
        )
        logger.debug(f"Loaded worker settings from environment: {settings}")
        return settings
