"""
Model turn node - one language model call over the whole history
"""

from langchain_core.messages import AIMessage, SystemMessage
from loguru import logger

from chat_agent.agents.orchestrator.context import OrchestratorContext
from chat_agent.agents.orchestrator.state import AgentState
from chat_agent.llm.response_utils import extract_text_from_response


def model_turn_node(state: AgentState, ctx: OrchestratorContext) -> dict:
    """Invoke the model with the system prompt, history and tool schemas."""
    messages = state["messages"]
    call_number = state["model_calls"] + 1
    logger.debug(f"Model turn {call_number}/{ctx.max_iterations} ({len(messages)} messages)")

    response = ctx.model.invoke([SystemMessage(content=ctx.system_prompt()), *messages])
    if not isinstance(response, AIMessage):
        response = AIMessage(content=extract_text_from_response(response))

    if response.tool_calls:
        names = ", ".join(call["name"] for call in response.tool_calls)
        logger.info(f"Model requested {len(response.tool_calls)} tool call(s): {names}")

    return {
        "messages": messages + (response,),
        "model_calls": call_number,
    }
