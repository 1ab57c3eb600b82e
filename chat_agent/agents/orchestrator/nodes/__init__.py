"""
Orchestrator workflow nodes
"""

from chat_agent.agents.orchestrator.nodes.model_turn import model_turn_node
from chat_agent.agents.orchestrator.nodes.tool_turn import tool_turn_node, run_tool_calls
from chat_agent.agents.orchestrator.nodes.ceiling import ceiling_node

__all__ = [
    "model_turn_node",
    "tool_turn_node",
    "run_tool_calls",
    "ceiling_node",
]
