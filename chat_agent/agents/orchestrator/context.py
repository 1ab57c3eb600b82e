"""
Orchestrator context - dependencies passed to workflow nodes
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo

from chat_agent.agents.orchestrator.prompts import build_system_prompt
from chat_agent.tools.registry import ToolSet


@dataclass
class OrchestratorContext:
    """Context holding dependencies for orchestrator nodes"""

    model: Any  # Chat model with the tool schemas already bound
    tool_set: ToolSet
    max_iterations: int
    tool_timeout_seconds: float
    timezone: str
    utc_offset: str
    sender_name: str
    clock: Optional[Callable[[], datetime]] = None

    def today(self) -> str:
        now = self.clock() if self.clock else datetime.now(ZoneInfo(self.timezone))
        return now.date().isoformat()

    def system_prompt(self) -> str:
        return build_system_prompt(
            today=self.today(),
            timezone=self.timezone,
            utc_offset=self.utc_offset,
            sender_name=self.sender_name,
        )
