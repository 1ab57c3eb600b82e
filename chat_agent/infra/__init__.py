"""
Infrastructure layer - Database, message store, file store, vector store
"""

from chat_agent.infra.database import Database, get_database
from chat_agent.infra.file_store import FileStore, LocalFileStore
from chat_agent.infra.message_store import MessageStore, SqlMessageStore
from chat_agent.infra.vector_store import VectorIndex, VectorStore

__all__ = [
    "Database",
    "get_database",
    "FileStore",
    "LocalFileStore",
    "MessageStore",
    "SqlMessageStore",
    "VectorIndex",
    "VectorStore",
]
