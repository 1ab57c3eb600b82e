"""
Tool turn node - runs every tool call of the last model turn
"""

import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import List

from langchain_core.messages import ToolMessage
from loguru import logger

from chat_agent.agents.orchestrator.context import OrchestratorContext
from chat_agent.agents.orchestrator.state import AgentState
from chat_agent.llm.response_utils import extract_tool_calls
from chat_agent.models.domain import ToolCall, ToolResult
from chat_agent.tools.base import ToolContext
from chat_agent.utils.metrics import record_degradation


TIMED_OUT = "The {name} tool timed out. Please try again later."
OUTCOME_UNKNOWN = (
    "The {name} tool did not finish in time. Its outcome is unknown and it may still complete. "
    "Do not retry it; tell the user to check later whether it went through."
)


def _timed_out(call: ToolCall, timeout: float, ctx: OrchestratorContext) -> ToolResult:
    logger.bind(event="tool_timeout", component=f"tool:{call.name}").warning(
        f"Tool {call.name} (call_id={call.call_id}) timed out after {timeout}s"
    )
    record_degradation(f"tool:{call.name}", "timeout")
    tool = ctx.tool_set.get(call.name)
    template = OUTCOME_UNKNOWN if tool is not None and tool.side_effecting else TIMED_OUT
    return ToolResult(
        call_id=call.call_id,
        name=call.name,
        content=template.format(name=call.name),
        ok=False,
    )


def run_tool_calls(calls: List[ToolCall], tool_context: ToolContext, ctx: OrchestratorContext) -> List[ToolResult]:
    """
    Execute calls concurrently, each with its own deadline.

    Results come back in request order. A call that is still running at its
    deadline is reported as timed out and left to finish in the background.
    """
    if not calls:
        return []

    executor = ThreadPoolExecutor(max_workers=len(calls), thread_name_prefix="tool")
    try:
        deadline = time.monotonic() + ctx.tool_timeout_seconds
        futures = [executor.submit(ctx.tool_set.execute, call, tool_context) for call in calls]

        results = []
        for call, future in zip(calls, futures):
            try:
                results.append(future.result(timeout=max(0.0, deadline - time.monotonic())))
            except FutureTimeoutError:
                future.cancel()
                results.append(_timed_out(call, ctx.tool_timeout_seconds, ctx))
        return results
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def tool_turn_node(state: AgentState, ctx: OrchestratorContext) -> dict:
    """Append one ToolMessage per requested call, in request order."""
    calls = extract_tool_calls(state["messages"][-1])
    results = run_tool_calls(calls, ToolContext(user_id=state["user_id"]), ctx)

    tool_messages = tuple(
        ToolMessage(content=result.content, tool_call_id=result.call_id, name=result.name)
        for result in results
    )
    failed = sum(1 for result in results if not result.ok)
    logger.info(f"Tool turn finished: {len(results)} result(s), {failed} failed")

    return {
        "messages": state["messages"] + tool_messages,
        "tool_results": state["tool_results"] + tuple(results),
    }
