"""
Orchestrator Agent - Bounded tool-calling LangGraph workflow

Workflow: START → model_turn → [tool_turn → model_turn]* → END
                               └→ ceiling (iteration limit reached)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Tuple

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langgraph.errors import GraphRecursionError
from langgraph.graph import END, StateGraph
from loguru import logger

from chat_agent.agents.orchestrator.context import OrchestratorContext
from chat_agent.agents.orchestrator.nodes import ceiling_node, model_turn_node, tool_turn_node
from chat_agent.agents.orchestrator.prompts import CEILING_FALLBACK, ERROR_FALLBACK
from chat_agent.agents.orchestrator.routing import route_after_model
from chat_agent.agents.orchestrator.state import AgentState
from chat_agent.llm.response_utils import extract_text_from_response
from chat_agent.models.domain import ConversationHistory, ToolResult
from chat_agent.tools.base import ToolContext
from chat_agent.tools.registry import ToolSet
from chat_agent.utils.errors import OrchestrationLimitExceeded
from chat_agent.utils.metrics import record_degradation


@dataclass(frozen=True)
class AgentRunResult:
    """Final answer of one run"""
    content: str
    model_calls: int
    tool_results: Tuple[ToolResult, ...] = ()
    fallback_reason: Optional[str] = None  # "ceiling" | "error" when the answer is a fallback

    @property
    def degraded(self) -> bool:
        return self.fallback_reason is not None


def history_to_messages(history: ConversationHistory) -> Tuple[BaseMessage, ...]:
    return tuple(
        AIMessage(content=entry.content) if entry.role == "assistant" else HumanMessage(content=entry.content)
        for entry in history
    )


class OrchestratorAgent:
    """
    Tool-calling agent with a hard iteration ceiling.

    The ceiling counts model turns. All tool calls requested in one model
    turn run together and count as a single step.
    """

    def __init__(
        self,
        llm: Any,
        tool_set: ToolSet,
        max_iterations: int = 5,
        tool_timeout_seconds: float = 30.0,
        timezone: str = "Asia/Karachi",
        utc_offset: str = "+05:00",
        sender_name: str = "AI Assistant",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")

        self.tool_set = tool_set
        self.max_iterations = max_iterations
        self.ctx = OrchestratorContext(
            model=llm.bind_tools(tool_set.schemas()),
            tool_set=tool_set,
            max_iterations=max_iterations,
            tool_timeout_seconds=tool_timeout_seconds,
            timezone=timezone,
            utc_offset=utc_offset,
            sender_name=sender_name,
            clock=clock,
        )
        self.workflow = self._build_workflow()

        logger.info(
            f"Initialized OrchestratorAgent (tools: {', '.join(tool_set.names)}, max_iterations={max_iterations})"
        )

    def _build_workflow(self):
        """Build the LangGraph workflow."""
        ctx = self.ctx
        workflow = StateGraph(AgentState)

        workflow.add_node("model_turn", lambda s: model_turn_node(s, ctx))
        workflow.add_node("tool_turn", lambda s: tool_turn_node(s, ctx))
        workflow.add_node("ceiling", lambda s: ceiling_node(s, ctx))

        workflow.set_entry_point("model_turn")
        workflow.add_conditional_edges(
            "model_turn",
            lambda s: route_after_model(s, ctx),
            {"tool_turn": "tool_turn", "ceiling": "ceiling", END: END}
        )
        workflow.add_edge("tool_turn", "model_turn")
        workflow.add_edge("ceiling", END)

        return workflow.compile()

    @property
    def recursion_limit(self) -> int:
        # model_turn + tool_turn per iteration, plus the ceiling step
        return 2 * self.max_iterations + 2

    def _fallback(self, state: AgentState, content: str, reason: str) -> AgentRunResult:
        record_degradation("orchestrator", reason)
        return AgentRunResult(
            content=content,
            model_calls=state["model_calls"],
            tool_results=state["tool_results"],
            fallback_reason=reason,
        )

    def run(self, history: ConversationHistory, context: ToolContext) -> AgentRunResult:
        """
        Run the loop over a conversation history.

        Never raises: the ceiling and any other failure become fixed
        fallback answers.

        Args:
            history: Conversation so far, ending with the user's new message
            context: Caller identity passed to the tools

        Returns:
            AgentRunResult with the final text
        """
        initial_state: AgentState = {
            "messages": history_to_messages(history),
            "user_id": context.user_id,
            "model_calls": 0,
            "tool_results": (),
            "fallback_reason": None,
        }

        state = initial_state
        try:
            for state in self.workflow.stream(
                initial_state,
                config={"recursion_limit": self.recursion_limit},
                stream_mode="values",
            ):
                pass
        except (OrchestrationLimitExceeded, GraphRecursionError) as e:
            logger.bind(event="iteration_ceiling", component="orchestrator").warning(
                f"Agent hit iteration ceiling, returning fallback response: {e}"
            )
            return self._fallback(state, CEILING_FALLBACK, "ceiling")
        except Exception:
            logger.bind(event="orchestration_error", component="orchestrator").exception(
                "Error running AI agent"
            )
            return self._fallback(state, ERROR_FALLBACK, "error")

        content = extract_text_from_response(state["messages"][-1]).strip()
        logger.info(
            f"Agent finished after {state['model_calls']} model call(s), "
            f"{len(state['tool_results'])} tool call(s)"
        )
        return AgentRunResult(
            content=content,
            model_calls=state["model_calls"],
            tool_results=state["tool_results"],
        )


def build_orchestrator(rag_agent=None, llm=None) -> OrchestratorAgent:
    """Composition root: wire the agent from settings."""
    from chat_agent.agents.rag.agent import RAGAgent
    from chat_agent.config.settings import settings
    from chat_agent.llm.client import create_llm
    from chat_agent.services import CalendarService, EmailService
    from chat_agent.tools import build_tool_set

    tool_set = build_tool_set(
        email_service=EmailService(),
        calendar_service=CalendarService(),
        rag_agent=rag_agent or RAGAgent(),
    )
    return OrchestratorAgent(
        llm=llm or create_llm(),
        tool_set=tool_set,
        max_iterations=settings.agent_max_iterations,
        tool_timeout_seconds=settings.tool_timeout_seconds,
        timezone=settings.agent_timezone,
        utc_offset=settings.agent_utc_offset,
        sender_name=settings.email_sender_name,
    )
