"""Worker tools: specs, the @tool_spec decorator and toolsets."""

from teamworker.tools.spec import ToolSpec
from teamworker.tools.decorator import tool_spec
from teamworker.tools.toolset import ToolSet, flatten_tools

__all__ = ["ToolSpec", "ToolSet", "flatten_tools", "tool_spec"]
