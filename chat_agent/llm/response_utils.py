"""
LLM response utilities for handling multi-format model outputs.

Chat models answer either with plain text or with a list of content blocks,
and may attach tool-call requests. These helpers normalise both.
"""

from typing import Any, List
import uuid

from loguru import logger

from chat_agent.models.domain import ToolCall


def extract_text_from_response(response: Any) -> str:
    """
    Extract text content from an LLM response.

    Supports:
    - Simple string: "text here"
    - Structured blocks: [{'type': 'reasoning', ...}, {'type': 'text', 'text': '...'}]
    - LangChain AIMessage with content attribute
    """
    content = response.content if hasattr(response, "content") else response

    if not content:
        return ""

    if isinstance(content, str):
        return content

    if isinstance(content, list):
        text_parts = []
        for block in content:
            if isinstance(block, str):
                text_parts.append(block)
            elif isinstance(block, dict) and "text" in block and block.get("type") != "reasoning":
                text_parts.append(block["text"])

        result = "".join(text_parts)
        if not result:
            logger.warning(f"No text blocks found in structured response: {str(content)[:200]}")
        return result

    return str(content)


def extract_tool_calls(response: Any) -> List[ToolCall]:
    """
    Convert the tool-call requests on an AIMessage into ToolCall values.

    Calls without an id get a generated one so results can still be paired
    with their request.
    """
    raw_calls = getattr(response, "tool_calls", None) or []
    calls = []
    for raw in raw_calls:
        arguments = raw.get("args") or {}
        if not isinstance(arguments, dict):
            arguments = {}
        calls.append(ToolCall(
            name=str(raw.get("name") or ""),
            arguments=arguments,
            call_id=raw.get("id") or f"call_{uuid.uuid4().hex[:12]}",
        ))
    return calls
