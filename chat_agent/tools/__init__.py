"""
Agent tools - email, calendar and document search
"""

from chat_agent.tools.base import AgentTool, ToolContext, ToolName
from chat_agent.tools.calendar_tools import (
    CreateCalendarEventArgs,
    CreateCalendarEventTool,
    QueryCalendarRangeArgs,
    QueryCalendarRangeTool,
)
from chat_agent.tools.document_tool import SearchDocumentsArgs, SearchDocumentsTool
from chat_agent.tools.email_tool import SendEmailArgs, SendEmailTool
from chat_agent.tools.registry import ToolSet


def build_tool_set(email_service, calendar_service, rag_agent) -> ToolSet:
    """The four tools the chat agent exposes to the model."""
    return ToolSet([
        SendEmailTool(email_service),
        CreateCalendarEventTool(calendar_service),
        QueryCalendarRangeTool(calendar_service),
        SearchDocumentsTool(rag_agent),
    ])


__all__ = [
    "AgentTool",
    "ToolContext",
    "ToolName",
    "ToolSet",
    "build_tool_set",
    "SendEmailArgs",
    "SendEmailTool",
    "CreateCalendarEventArgs",
    "CreateCalendarEventTool",
    "QueryCalendarRangeArgs",
    "QueryCalendarRangeTool",
    "SearchDocumentsArgs",
    "SearchDocumentsTool",
]
