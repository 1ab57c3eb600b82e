"""
queryDocuments tool - document Q&A scoped to the calling user
"""

from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field, field_validator

from chat_agent.agents.rag.prompts import NO_MATCH_ANSWER
from chat_agent.config.settings import settings
from chat_agent.tools.base import AgentTool, ToolContext, ToolName

if TYPE_CHECKING:
    from chat_agent.agents.rag.agent import RAGAgent


class SearchDocumentsArgs(BaseModel):
    query: str = Field(..., description="The question or query to search for in the documents")

    @field_validator("query")
    @classmethod
    def _check_query(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("query cannot be empty")
        return value.strip()


class SearchDocumentsTool(AgentTool):
    name = ToolName.SEARCH_DOCUMENTS
    description = (
        "Search through uploaded documents to answer questions about their content. "
        "Use this for general knowledge questions that might be in the user's documents."
    )
    args_model = SearchDocumentsArgs
    failure_message = NO_MATCH_ANSWER

    def __init__(self, rag_agent: "RAGAgent", top_k: Optional[int] = None):
        self.rag_agent = rag_agent
        self.top_k = top_k or settings.rag_top_k

    def run(self, args: SearchDocumentsArgs, context: ToolContext) -> str:
        result = self.rag_agent.answer(context.user_id, args.query, top_k=self.top_k)
        if result.success and result.answer:
            return result.answer
        return NO_MATCH_ANSWER
