"""
Tests for turn processing: validation, history, the dual write and voice turns
"""

from datetime import datetime, timedelta

import pytest
from langchain_core.messages import AIMessage, HumanMessage
from sqlalchemy import func, select

from chat_agent.agents.orchestrator import OrchestratorAgent
from chat_agent.agents.orchestrator.prompts import CEILING_FALLBACK
from chat_agent.agents.turn import TurnCoordinator, build_history
from chat_agent.models.domain import AudioInput, PersistedMessage, SendMessageRequest, Turn
from chat_agent.models.tables import Message
from chat_agent.tools import build_tool_set
from chat_agent.utils.errors import (
    GENERIC_FAILURE_MESSAGE,
    SynthesisError,
    TranscriptionError,
    TurnProcessingError,
    ValidationError,
)
from chat_agent.utils.metrics import get_metrics_summary

from fakes import (
    AGENT_ID,
    USER_ID,
    AlwaysToolModel,
    FakeCalendarService,
    FakeEmailService,
    FakeSpeechService,
    InMemoryFileStore,
    ScriptedChatModel,
    StubRAGAgent,
    tool_call_message,
)


def count_messages(database) -> int:
    with database.session_scope() as session:
        return session.execute(select(func.count(Message.id))).scalar_one()


def voice(data=b"RIFF-fake-wav", mime_type="audio/wav", filename="question.wav") -> AudioInput:
    return AudioInput(data=data, filename=filename, mime_type=mime_type)


class FailingSecondWriteStore:
    """Delegates to a real store but fails the agent's reply write."""

    def __init__(self, store):
        self.store = store
        self.sent = 0

    def send_message(self, sender_id, request):
        self.sent += 1
        if self.sent == 2:
            raise RuntimeError("database is locked")
        return self.store.send_message(sender_id, request)

    def get_messages(self, requesting_user_id, conversation_id):
        return self.store.get_messages(requesting_user_id, conversation_id)


@pytest.fixture
def llm():
    return ScriptedChatModel([AIMessage(content="Hello! How can I help you today?")])


@pytest.fixture
def speech():
    return FakeSpeechService()


@pytest.fixture
def file_store():
    return InMemoryFileStore()


def make_coordinator(llm, message_store, speech=None, file_store=None, max_iterations=5):
    orchestrator = OrchestratorAgent(
        llm=llm,
        tool_set=build_tool_set(FakeEmailService(), FakeCalendarService(), StubRAGAgent()),
        max_iterations=max_iterations,
        clock=lambda: datetime(2025, 7, 3, 10, 0),
    )
    return TurnCoordinator(
        orchestrator=orchestrator,
        message_store=message_store,
        file_store=file_store or InMemoryFileStore(),
        speech_service=speech or FakeSpeechService(),
        agent_user_id=AGENT_ID,
    )


@pytest.fixture
def coordinator(llm, message_store, speech, file_store):
    return make_coordinator(llm, message_store, speech, file_store)


class TestValidation:
    """Invalid turns are rejected before any model call or write"""

    @pytest.mark.parametrize("turn,message", [
        (Turn(user_id=USER_ID, text="hi"), "Either conversationId or recipientId must be provided."),
        (Turn(user_id=USER_ID, text="hi", recipient_id=99), "Invalid recipient. Messages can only be sent to the AI agent."),
        (Turn(user_id=USER_ID, text="   ", recipient_id=AGENT_ID), "Either a message or an audio file is required."),
        (Turn(user_id=USER_ID, recipient_id=AGENT_ID), "Either a message or an audio file is required."),
        (Turn(user_id=USER_ID, recipient_id=AGENT_ID, audio=voice(mime_type="image/png")),
         "Invalid file type. Only audio files are supported for transcription."),
        (Turn(user_id=USER_ID, recipient_id=AGENT_ID, audio=voice(mime_type="video/mp4", filename="clip.mp4")),
         "Invalid file type. Only audio files are supported for transcription."),
        (Turn(user_id=USER_ID, recipient_id=AGENT_ID, audio=voice(data=b"")), "The audio file is empty."),
    ])
    def test_rejected_without_side_effects(self, coordinator, llm, speech, database, turn, message):
        with pytest.raises(ValidationError) as excinfo:
            coordinator.process_turn(turn)

        assert str(excinfo.value) == message
        assert llm.calls == []
        assert speech.transcribed == []
        assert count_messages(database) == 0

    def test_no_speech_detected(self, llm, message_store, database):
        coordinator = make_coordinator(llm, message_store, speech=FakeSpeechService(transcription=""))
        with pytest.raises(ValidationError, match="No speech was detected"):
            coordinator.process_turn(Turn(user_id=USER_ID, recipient_id=AGENT_ID, audio=voice()))
        assert llm.calls == []
        assert count_messages(database) == 0


class TestTextTurns:
    def test_first_message_creates_conversation(self, coordinator, message_store):
        result = coordinator.process_turn(Turn(user_id=USER_ID, text="Hello", recipient_id=AGENT_ID))

        assert result.success
        assert result.reply_text == "Hello! How can I help you today?"
        assert result.audio_url is None
        assert result.transcription is None

        messages = message_store.get_messages(USER_ID, result.conversation_id)
        assert [(m.sender_id, m.content) for m in messages] == [
            (USER_ID, "Hello"),
            (AGENT_ID, "Hello! How can I help you today?"),
        ]
        assert messages[0].id == result.user_message_id
        assert messages[1].id == result.message_id

    def test_same_pair_reuses_conversation(self, coordinator):
        first = coordinator.process_turn(Turn(user_id=USER_ID, text="Hello", recipient_id=AGENT_ID))
        second = coordinator.process_turn(Turn(user_id=USER_ID, text="Again", recipient_id=AGENT_ID))
        assert first.conversation_id == second.conversation_id

    def test_follow_up_sees_history(self, message_store):
        llm = ScriptedChatModel([
            AIMessage(content="Hi there."),
            AIMessage(content="You said hello."),
        ])
        coordinator = make_coordinator(llm, message_store)
        first = coordinator.process_turn(Turn(user_id=USER_ID, text="Hello", recipient_id=AGENT_ID))
        second = coordinator.process_turn(
            Turn(user_id=USER_ID, text="What did I say?", conversation_id=first.conversation_id)
        )

        assert second.conversation_id == first.conversation_id
        history = llm.calls[1][1:]
        assert [(type(m), m.content) for m in history] == [
            (HumanMessage, "Hello"),
            (AIMessage, "Hi there."),
            (HumanMessage, "What did I say?"),
        ]

    def test_tool_turn_persists_final_answer(self, message_store):
        llm = ScriptedChatModel([
            tool_call_message("queryDocuments", {"query": "warranty"}),
            AIMessage(content="Your warranty lasts two years."),
        ])
        coordinator = make_coordinator(llm, message_store)
        result = coordinator.process_turn(Turn(user_id=USER_ID, text="Warranty?", recipient_id=AGENT_ID))

        messages = message_store.get_messages(USER_ID, result.conversation_id)
        assert messages[-1].content == "Your warranty lasts two years."
        assert len(messages) == 2

    def test_ceiling_reply_is_persisted(self, message_store):
        coordinator = make_coordinator(AlwaysToolModel(), message_store, max_iterations=3)
        result = coordinator.process_turn(Turn(user_id=USER_ID, text="Loop forever", recipient_id=AGENT_ID))

        assert result.success
        assert result.reply_text == CEILING_FALLBACK
        messages = message_store.get_messages(USER_ID, result.conversation_id)
        assert messages[-1].content == CEILING_FALLBACK

    def test_conversation_without_agent_fails_generically(self, coordinator, message_store, llm):
        other = message_store.send_message(USER_ID, SendMessageRequest(content="hey", recipient_id=99))
        with pytest.raises(TurnProcessingError) as excinfo:
            coordinator.process_turn(
                Turn(user_id=USER_ID, text="Hello", conversation_id=other.conversation_id)
            )
        assert str(excinfo.value) == GENERIC_FAILURE_MESSAGE
        assert llm.calls == []

    def test_reply_write_failure_is_generic(self, llm, message_store):
        coordinator = make_coordinator(llm, FailingSecondWriteStore(message_store))
        with pytest.raises(TurnProcessingError) as excinfo:
            coordinator.process_turn(Turn(user_id=USER_ID, text="Hello", recipient_id=AGENT_ID))
        assert "database is locked" not in str(excinfo.value)


class TestVoiceTurns:
    def test_transcription_replaces_text(self, coordinator, llm, speech, file_store, message_store):
        result = coordinator.process_turn(
            Turn(user_id=USER_ID, text="ignored", recipient_id=AGENT_ID, audio=voice())
        )

        assert result.transcription == "what is on my calendar today"
        assert llm.calls[0][-1].content == "what is on my calendar today"
        assert speech.synthesized == ["Hello! How can I help you today?"]
        assert result.audio_url in file_store.files
        name, mime_type, _ = file_store.files[result.audio_url]
        assert name.startswith("ai-response-") and name.endswith(".mp3")
        assert mime_type == "audio/mpeg"

        user_message, agent_message = message_store.get_messages(USER_ID, result.conversation_id)
        assert user_message.content == "what is on my calendar today"
        assert user_message.file_url is not None
        assert file_store.files[user_message.file_url][0] == "question.wav"
        assert agent_message.file_url == result.audio_url

    def test_synthesis_failure_keeps_text_reply(self, llm, message_store, file_store):
        speech = FakeSpeechService(synthesis_error=SynthesisError("tts down"))
        coordinator = make_coordinator(llm, message_store, speech=speech, file_store=file_store)
        result = coordinator.process_turn(Turn(user_id=USER_ID, recipient_id=AGENT_ID, audio=voice()))

        assert result.success
        assert result.audio_url is None
        assert result.reply_text == "Hello! How can I help you today?"
        assert get_metrics_summary()["by_component"]["voice"] == {"synthesis": 1}
        assert message_store.get_messages(USER_ID, result.conversation_id)[-1].file_url is None

    def test_transcription_failure_writes_nothing(self, llm, message_store, database):
        speech = FakeSpeechService(transcription_error=TranscriptionError("stt down"))
        coordinator = make_coordinator(llm, message_store, speech=speech)
        with pytest.raises(TurnProcessingError):
            coordinator.process_turn(Turn(user_id=USER_ID, recipient_id=AGENT_ID, audio=voice()))
        assert llm.calls == []
        assert count_messages(database) == 0


class TestBuildHistory:
    def test_roles_and_order(self):
        base = datetime(2025, 7, 3, 9, 0)
        messages = [
            PersistedMessage(id=3, conversation_id=1, sender_id=AGENT_ID, content="reply", created_at=base + timedelta(seconds=5)),
            PersistedMessage(id=1, conversation_id=1, sender_id=USER_ID, content="hello", created_at=base),
            PersistedMessage(id=2, conversation_id=1, sender_id=USER_ID, content="", created_at=base + timedelta(seconds=1)),
        ]
        history = build_history(messages, AGENT_ID)
        assert [(entry.role, entry.content) for entry in history] == [
            ("user", "hello"),
            ("assistant", "reply"),
        ]
