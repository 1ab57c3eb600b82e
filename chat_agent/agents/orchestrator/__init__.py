"""
Orchestrator Agent - bounded tool-calling loop
"""

from chat_agent.agents.orchestrator.agent import (
    AgentRunResult,
    OrchestratorAgent,
    build_orchestrator,
)

__all__ = ["AgentRunResult", "OrchestratorAgent", "build_orchestrator"]
