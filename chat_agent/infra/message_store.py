"""
Message persistence - conversations, membership and messages.

The turn coordinator only relies on the MessageStore protocol. SqlMessageStore
is the bundled implementation so the service can run on its own.
"""

from typing import List, Optional, Protocol

from loguru import logger
from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from chat_agent.infra.database import Database
from chat_agent.models.domain import PersistedMessage, SendMessageRequest, SentMessage
from chat_agent.models.tables import Conversation, ConversationMember, Message
from chat_agent.utils.errors import (
    ConversationNotFoundError,
    NotAMemberError,
    ValidationError,
)


class MessageStore(Protocol):
    """Contract the turn coordinator needs from message persistence."""

    def send_message(self, sender_id: int, request: SendMessageRequest) -> SentMessage:
        ...

    def get_messages(self, requesting_user_id: int, conversation_id: int) -> List[PersistedMessage]:
        ...


def _to_persisted(row: Message) -> PersistedMessage:
    return PersistedMessage(
        id=row.id,
        conversation_id=row.conversation_id,
        sender_id=row.sender_id,
        content=row.content,
        created_at=row.created_at,
        file_url=row.file_url,
    )


class SqlMessageStore:
    """
    SQLAlchemy-backed message store

    send_message lazily creates the direct conversation between sender and
    recipient the first time they talk, and reuses it afterwards.
    """

    def __init__(self, database: Database):
        self.db = database

    def _is_member(self, session: Session, conversation_id: int, user_id: int) -> bool:
        stmt = select(ConversationMember.id).where(
            ConversationMember.conversation_id == conversation_id,
            ConversationMember.user_id == user_id,
        )
        return session.execute(stmt).first() is not None

    def _require_membership(self, session: Session, conversation_id: int, user_id: int) -> None:
        if session.get(Conversation, conversation_id) is None:
            raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
        if not self._is_member(session, conversation_id, user_id):
            raise NotAMemberError(f"User {user_id} is not a member of conversation {conversation_id}")

    def _find_direct_conversation(self, session: Session, user_a: int, user_b: int) -> Optional[int]:
        """Find the non-group conversation whose members are exactly user_a and user_b."""
        wanted = {user_a, user_b}
        stmt = (
            select(ConversationMember.conversation_id)
            .join(Conversation, Conversation.id == ConversationMember.conversation_id)
            .where(Conversation.is_group.is_(False))
            .group_by(ConversationMember.conversation_id)
            .having(func.count(ConversationMember.id) == len(wanted))
            .having(func.sum(case((ConversationMember.user_id.in_(wanted), 1), else_=0)) == len(wanted))
            .order_by(ConversationMember.conversation_id)
        )
        return session.execute(stmt).scalars().first()

    def _create_direct_conversation(self, session: Session, sender_id: int, recipient_id: int) -> int:
        conversation = Conversation(is_group=False)
        for user_id in sorted({sender_id, recipient_id}):
            conversation.members.append(ConversationMember(user_id=user_id))
        session.add(conversation)
        session.flush()
        logger.info(f"Created direct conversation {conversation.id} for users {sender_id} and {recipient_id}")
        return conversation.id

    def send_message(self, sender_id: int, request: SendMessageRequest) -> SentMessage:
        """
        Persist a message

        Args:
            sender_id: Author of the message
            request: Target conversation (or recipient) and content

        Returns:
            SentMessage with the authoritative conversation id

        Raises:
            ValidationError: Neither conversation_id nor recipient_id given
            ConversationNotFoundError: Unknown conversation_id
            NotAMemberError: Sender is not a member of the conversation
        """
        with self.db.session_scope() as session:
            if request.conversation_id is not None:
                conversation_id = request.conversation_id
                self._require_membership(session, conversation_id, sender_id)
            elif request.recipient_id is not None:
                conversation_id = self._find_direct_conversation(session, sender_id, request.recipient_id)
                if conversation_id is None:
                    conversation_id = self._create_direct_conversation(
                        session, sender_id, request.recipient_id
                    )
            else:
                raise ValidationError("Either conversation_id or recipient_id is required")

            message = Message(
                conversation_id=conversation_id,
                sender_id=sender_id,
                content=request.content or "",
                file_url=request.file_url,
            )
            session.add(message)
            session.flush()

            logger.debug(f"Stored message {message.id} in conversation {conversation_id}")
            return SentMessage(conversation_id=conversation_id, message_id=message.id)

    def get_messages(self, requesting_user_id: int, conversation_id: int) -> List[PersistedMessage]:
        """Messages of a conversation, oldest first."""
        with self.db.session_scope() as session:
            self._require_membership(session, conversation_id, requesting_user_id)
            stmt = (
                select(Message)
                .where(Message.conversation_id == conversation_id)
                .order_by(Message.created_at.asc(), Message.id.asc())
            )
            return [_to_persisted(row) for row in session.execute(stmt).scalars()]
