"""
Orchestrator workflow state
"""

from typing import Optional, Tuple, TypedDict

from langchain_core.messages import BaseMessage

from chat_agent.models.domain import ToolResult


class AgentState(TypedDict):
    """State for the tool-calling loop; nodes return new tuples, never mutate them"""
    messages: Tuple[BaseMessage, ...]
    user_id: int
    model_calls: int  # Model turns so far; a tool fan-out does not add to it
    tool_results: Tuple[ToolResult, ...]
    fallback_reason: Optional[str]
