"""Exceptions raised while resolving tool calls."""


class ToolExecutionError(Exception):
    """A capability could not be called or raised while running.

    The original exception is chained as ``__cause__``.

    Attributes:
        tool_id: The tool id the model called
    """

    def __init__(self, tool_id: str, message: str) -> None:
        super().__init__(f"Tool '{tool_id}' failed: {message}")
        self.tool_id = tool_id


class UnknownToolError(LookupError):
    """The model called a tool id that was not offered in this conversation."""

    def __init__(self, tool_id: str) -> None:
        super().__init__(f"Unknown tool: {tool_id}")
        self.tool_id = tool_id
