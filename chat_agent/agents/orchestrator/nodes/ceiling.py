"""
Ceiling node - reached when the model still wants tools after the last allowed turn
"""

from chat_agent.agents.orchestrator.context import OrchestratorContext
from chat_agent.agents.orchestrator.state import AgentState
from chat_agent.utils.errors import OrchestrationLimitExceeded


def ceiling_node(state: AgentState, ctx: OrchestratorContext) -> dict:
    raise OrchestrationLimitExceeded(
        f"Iteration ceiling reached after {state['model_calls']} model calls (max {ctx.max_iterations})"
    )
