"""External tool errors."""

from .base import HarvesterError


class ToolUnavailableError(HarvesterError):
    """Raised when an external scanning tool is missing or exits with an error.

    Handlers turn this into a request skip rather than a failure.
    """

    def __init__(self, tool: str, reason: str):
        super().__init__(f"Tool unavailable: {tool}", details={"tool": tool, "reason": reason})
        self.tool = tool
        self.reason = reason
