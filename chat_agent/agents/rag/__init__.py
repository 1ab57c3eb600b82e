"""
RAG Agent - Document Q&A over per-user namespaces
"""

from chat_agent.agents.rag.agent import RAGAgent, namespace_for
from chat_agent.agents.rag.ingestion import DocumentIngestor

__all__ = ["RAGAgent", "DocumentIngestor", "namespace_for"]
