"""
ToolSet - the registry the orchestrator executes tool calls against.

execute() never raises: unknown names, invalid arguments and tool failures
all come back as a ToolResult with ok=False and a text the model can read.
"""

from typing import Any, Dict, Iterable, List, Optional

from loguru import logger
from pydantic import ValidationError as ArgumentsError

from chat_agent.models.domain import ToolCall, ToolResult
from chat_agent.tools.base import AgentTool, ToolContext, ToolName
from chat_agent.utils.errors import ToolExecutionError
from chat_agent.utils.metrics import record_degradation


def _describe_arguments_error(error: ArgumentsError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        problems.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(problems)


class ToolSet:
    """Closed set of tools offered to the model for one agent."""

    def __init__(self, tools: Iterable[AgentTool]):
        self._tools: Dict[ToolName, AgentTool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool: {tool.name.value}")
            self._tools[tool.name] = tool

    @property
    def names(self) -> List[str]:
        return [name.value for name in self._tools]

    def schemas(self) -> List[Dict[str, Any]]:
        return [tool.schema() for tool in self._tools.values()]

    def get(self, name: str) -> Optional[AgentTool]:
        try:
            return self._tools.get(ToolName(name))
        except ValueError:
            return None

    def _failed(self, call: ToolCall, content: str, component: str, reason: str) -> ToolResult:
        record_degradation(component, reason)
        return ToolResult(call_id=call.call_id, name=call.name, content=content, ok=False)

    def execute(self, call: ToolCall, context: ToolContext) -> ToolResult:
        """Run one tool call and return its textual result."""
        tool = self.get(call.name)
        if tool is None:
            logger.bind(event="unknown_tool", component="tools").warning(
                f"Model requested unknown tool '{call.name}'"
            )
            return self._failed(
                call,
                f"Unknown tool '{call.name}'. Available tools: {', '.join(self.names)}.",
                "tools",
                "unknown_tool",
            )

        component = f"tool:{tool.name.value}"
        try:
            args = tool.args_model.model_validate(call.arguments)
        except ArgumentsError as e:
            details = _describe_arguments_error(e)
            logger.bind(event="invalid_tool_arguments", component=component).warning(
                f"Invalid arguments for {tool.name.value}: {details}"
            )
            return self._failed(
                call, f"Invalid arguments for {tool.name.value}: {details}", component, "invalid_arguments"
            )

        logger.info(f"Running tool {tool.name.value} (call_id={call.call_id})")
        try:
            content = tool.run(args, context)
        except ToolExecutionError as e:
            logger.bind(event="tool_error", component=component).warning(
                f"Tool {tool.name.value} reported: {e}"
            )
            return self._failed(call, str(e), component, "tool_error")
        except Exception:
            logger.bind(event="tool_failed", component=component).exception(
                f"Tool {tool.name.value} failed"
            )
            return self._failed(call, tool.failure_message, component, "exception")

        return ToolResult(call_id=call.call_id, name=tool.name.value, content=content)
