"""
Speech services - speech-to-text for voice turns, text-to-speech for replies.

Both directions go through the OpenAI audio endpoints. The turn coordinator
only sees this small interface, so transcoding stays out of the agent loop.
"""

from pathlib import PurePath
from typing import Any, Optional, Protocol

from loguru import logger

from chat_agent.config.settings import settings
from chat_agent.utils.errors import SynthesisError, TranscriptionError


ALLOWED_AUDIO_MIME_TYPES = frozenset({
    "audio/mpeg",
    "audio/wav",
    "audio/mp4",
    "audio/ogg",
    "audio/flac",
})

_EXTENSION_MIME_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "m4a": "audio/mp4",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
}


def mime_type_for(filename: str) -> str:
    """Guess the audio MIME type from a file name (defaults to mp3)."""
    extension = PurePath(filename or "").suffix.lower().lstrip(".")
    return _EXTENSION_MIME_TYPES.get(extension, "audio/mpeg")


def is_supported_audio(mime_type: Optional[str]) -> bool:
    return (mime_type or "").lower() in ALLOWED_AUDIO_MIME_TYPES


class SpeechServiceProtocol(Protocol):
    def transcribe_audio(self, data: bytes, filename: str) -> str:
        ...

    def synthesize(self, text: str, voice: Optional[str] = None) -> bytes:
        ...


class SpeechService:
    """OpenAI-backed transcription and synthesis."""

    def __init__(
        self,
        client: Any = None,
        transcription_model: Optional[str] = None,
        tts_model: Optional[str] = None,
        default_voice: Optional[str] = None,
        language: Optional[str] = None,
    ):
        if client is None:
            from chat_agent.llm.client import create_openai_client
            client = create_openai_client(timeout=settings.speech_timeout_seconds)
        self.client = client
        self.transcription_model = transcription_model or settings.transcription_model
        self.tts_model = tts_model or settings.tts_model
        self.default_voice = default_voice or settings.tts_voice
        self.language = language or settings.transcription_language

    def transcribe_audio(self, data: bytes, filename: str) -> str:
        """
        Transcribe an audio file to text.

        Raises:
            TranscriptionError: If the provider call fails
        """
        logger.info(f"Transcribing audio file: {filename} ({len(data)} bytes)")
        try:
            transcription = self.client.audio.transcriptions.create(
                file=(filename, data, mime_type_for(filename)),
                model=self.transcription_model,
                language=self.language,
                response_format="text",
            )
        except Exception as e:
            logger.error(f"Failed to transcribe audio: {e}")
            raise TranscriptionError("Failed to transcribe audio. Please try again.") from e

        # response_format="text" returns a plain string
        text = transcription if isinstance(transcription, str) else getattr(transcription, "text", "")
        text = (text or "").strip()
        logger.info(f"Transcription completed: {len(text)} characters")
        return text

    def synthesize(self, text: str, voice: Optional[str] = None) -> bytes:
        """
        Convert text to mp3 speech.

        Raises:
            SynthesisError: If the provider call fails
        """
        logger.info(f"Converting text to speech: {len(text)} characters")
        try:
            response = self.client.audio.speech.create(
                model=self.tts_model,
                voice=voice or self.default_voice,
                input=text,
                response_format="mp3",
            )
            audio = response.read() if hasattr(response, "read") else bytes(response.content)
        except Exception as e:
            logger.error(f"Failed to convert text to speech: {e}")
            raise SynthesisError("Failed to convert text to speech. Please try again.") from e

        logger.info(f"Text-to-speech completed: {len(audio)} bytes")
        return audio
