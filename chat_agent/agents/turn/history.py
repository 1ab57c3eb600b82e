"""
Conversation history reconstruction
"""

from typing import Iterable

from chat_agent.models.domain import ConversationHistory, HistoryEntry, PersistedMessage


def build_history(messages: Iterable[PersistedMessage], agent_user_id: int) -> ConversationHistory:
    """
    Map stored messages to model roles, oldest first.

    Messages sent by the agent identity become "assistant", everything else
    "user". Messages with no text (bare attachments) are skipped.
    """
    ordered = sorted(messages, key=lambda m: (m.created_at, m.id))
    return tuple(
        HistoryEntry(
            role="assistant" if message.sender_id == agent_user_id else "user",
            content=message.content,
        )
        for message in ordered
        if message.content and message.content.strip()
    )
