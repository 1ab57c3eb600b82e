"""
Orchestrator routing - decides what follows a model turn
"""

from typing import Literal

from langchain_core.messages import AIMessage
from langgraph.graph import END

from chat_agent.agents.orchestrator.context import OrchestratorContext
from chat_agent.agents.orchestrator.state import AgentState


def route_after_model(state: AgentState, ctx: OrchestratorContext) -> Literal["tool_turn", "ceiling", "__end__"]:
    """
    tool_turn while the model asks for tools and turns remain,
    ceiling once it asks for tools on the last allowed turn,
    END as soon as it answers in text.
    """
    last = state["messages"][-1]
    if not (isinstance(last, AIMessage) and last.tool_calls):
        return END
    if state["model_calls"] >= ctx.max_iterations:
        return "ceiling"
    return "tool_turn"
