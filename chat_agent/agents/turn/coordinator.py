"""
Turn Coordinator - one chat turn from request to persisted reply

Flow:
1. Validate the turn (no side effects before this passes)
2. Transcribe voice input; the transcription replaces any text
3. Rebuild the conversation history and run the agent
4. Persist the user's message (resolves or creates the conversation)
5. Synthesize and upload the spoken reply for voice turns (fail-soft)
6. Persist the agent's reply under the resolved conversation
"""

import uuid
from typing import Optional, Tuple

from loguru import logger

from chat_agent.agents.turn.history import build_history
from chat_agent.infra.file_store import FileStore
from chat_agent.infra.message_store import MessageStore
from chat_agent.llm.speech import SpeechServiceProtocol, is_supported_audio
from chat_agent.models.domain import (
    ConversationHistory,
    HistoryEntry,
    SendMessageRequest,
    Turn,
    TurnResult,
)
from chat_agent.tools.base import ToolContext
from chat_agent.utils.errors import TurnProcessingError, ValidationError
from chat_agent.utils.metrics import record_degradation


REPLY_AUDIO_MIME_TYPE = "audio/mpeg"


class TurnCoordinator:
    """Drives the orchestrator for one turn and performs the dual write."""

    def __init__(
        self,
        orchestrator,
        message_store: MessageStore,
        file_store: FileStore,
        speech_service: SpeechServiceProtocol,
        agent_user_id: int,
    ):
        self.orchestrator = orchestrator
        self.message_store = message_store
        self.file_store = file_store
        self.speech_service = speech_service
        self.agent_user_id = agent_user_id

        logger.info(f"AI Agent initialized with ID: {agent_user_id}")

    def validate(self, turn: Turn) -> None:
        """
        Reject malformed turns before anything is called or written.

        Raises:
            ValidationError: With a message safe to show to the caller
        """
        if turn.conversation_id is None and turn.recipient_id is None:
            raise ValidationError("Either conversationId or recipientId must be provided.")

        if turn.recipient_id is not None and turn.recipient_id != self.agent_user_id:
            raise ValidationError("Invalid recipient. Messages can only be sent to the AI agent.")

        if turn.is_voice:
            if not is_supported_audio(turn.audio.mime_type):
                raise ValidationError("Invalid file type. Only audio files are supported for transcription.")
            if not turn.audio.data:
                raise ValidationError("The audio file is empty.")
        elif not turn.text or not turn.text.strip():
            raise ValidationError("Either a message or an audio file is required.")

    def _resolve_text(self, turn: Turn) -> Tuple[str, Optional[str]]:
        """Message text and, for voice turns, the transcription it came from."""
        if not turn.is_voice:
            return turn.text, None

        transcription = self.speech_service.transcribe_audio(turn.audio.data, turn.audio.filename)
        if not transcription:
            raise ValidationError("No speech was detected in the audio file.")
        return transcription, transcription

    def _load_history(self, conversation_id: Optional[int]) -> ConversationHistory:
        if conversation_id is None:
            return ()
        messages = self.message_store.get_messages(self.agent_user_id, conversation_id)
        return build_history(messages, self.agent_user_id)

    def _store_user_audio(self, turn: Turn) -> Optional[str]:
        try:
            return self.file_store.upload(turn.audio.data, turn.audio.filename, turn.audio.mime_type)
        except Exception:
            logger.bind(event="voice_input_upload_failed", component="voice").exception(
                "Failed to store the user's audio; saving the message without it"
            )
            record_degradation("voice", "input_upload")
            return None

    def _synthesize_reply(self, text: str) -> Optional[str]:
        """Spoken version of the reply; None when synthesis or upload fails."""
        if not text:
            return None
        try:
            audio = self.speech_service.synthesize(text)
            return self.file_store.upload(audio, f"ai-response-{uuid.uuid4()}.mp3", REPLY_AUDIO_MIME_TYPE)
        except Exception:
            logger.bind(event="voice_synthesis_failed", component="voice").exception(
                "Failed to synthesize the reply; returning text only"
            )
            record_degradation("voice", "synthesis")
            return None

    def process_turn(self, turn: Turn) -> TurnResult:
        """
        Process one turn

        Raises:
            ValidationError: Malformed turn (nothing was written)
            TurnProcessingError: Anything else; internal details are only logged
        """
        self.validate(turn)

        logger.info(
            f"Processing message from user {turn.user_id} to agent {self.agent_user_id} "
            f"in conversation {turn.conversation_id or 'new'}"
        )

        try:
            text, transcription = self._resolve_text(turn)

            history = self._load_history(turn.conversation_id)
            run = self.orchestrator.run(
                history + (HistoryEntry(role="user", content=text),),
                ToolContext(user_id=turn.user_id),
            )

            user_file_url = self._store_user_audio(turn) if turn.is_voice else None
            logger.info(f"Saving user message from {turn.user_id} to agent {self.agent_user_id}")
            user_message = self.message_store.send_message(
                turn.user_id,
                SendMessageRequest(
                    content=text,
                    conversation_id=turn.conversation_id,
                    recipient_id=self.agent_user_id,
                    file_url=user_file_url,
                ),
            )
            conversation_id = user_message.conversation_id

            audio_url = self._synthesize_reply(run.content) if turn.is_voice else None

            logger.info(f"Saving AI response from agent {self.agent_user_id} to user {turn.user_id}")
            agent_message = self.message_store.send_message(
                self.agent_user_id,
                SendMessageRequest(
                    content=run.content,
                    conversation_id=conversation_id,
                    recipient_id=turn.user_id,
                    file_url=audio_url,
                ),
            )
        except ValidationError:
            raise
        except Exception as e:
            logger.bind(event="turn_failed", component="turn").exception("Error processing AI message")
            raise TurnProcessingError() from e

        return TurnResult(
            reply_text=run.content,
            message_id=agent_message.message_id,
            user_message_id=user_message.message_id,
            conversation_id=conversation_id,
            transcription=transcription,
            audio_url=audio_url,
        )


def build_turn_coordinator(orchestrator=None, database=None) -> TurnCoordinator:
    """Composition root: wire the coordinator and its collaborators from settings."""
    from chat_agent.agents.orchestrator import build_orchestrator
    from chat_agent.config.settings import settings
    from chat_agent.infra import LocalFileStore, SqlMessageStore, get_database
    from chat_agent.llm.speech import SpeechService

    return TurnCoordinator(
        orchestrator=orchestrator or build_orchestrator(),
        message_store=SqlMessageStore(database or get_database()),
        file_store=LocalFileStore(),
        speech_service=SpeechService(),
        agent_user_id=settings.agent_user_id,
    )
