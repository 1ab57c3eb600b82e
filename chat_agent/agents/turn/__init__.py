"""
Turn processing - history, agent run and the dual write
"""

from chat_agent.agents.turn.coordinator import TurnCoordinator, build_turn_coordinator
from chat_agent.agents.turn.history import build_history

__all__ = ["TurnCoordinator", "build_turn_coordinator", "build_history"]
