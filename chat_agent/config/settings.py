"""
Configuration management for the application.
Loads settings from environment variables and the project .env file.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
from loguru import logger

# This file is at chat_agent/config/settings.py, so project root is 3 levels up
_project_root = Path(__file__).resolve().parent.parent.parent

# Export for use by vector_store, embeddings, etc. - ensures consistent data/ paths
PROJECT_ROOT = _project_root

_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(dotenv_path=_env_file, override=True)
    logger.debug(f"Loaded .env from: {_env_file}")
else:
    logger.debug(f".env file not found at: {_env_file}")
    load_dotenv(override=True)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_project_root / ".env"),
        env_file_encoding="utf-8",
        extra="allow",
    )

    # LLM Provider Selection
    llm_provider: str = Field(default="openai")  # Only "openai" is supported

    # API Keys
    openai_api_key: str = Field(default="")

    # OpenAI Configuration
    openai_model: str = Field(default="gpt-4o")
    openai_temperature: float = Field(default=0.0)

    max_output_tokens: int = Field(default=4000)
    llm_timeout_seconds: float = Field(default=60.0)

    # Agent Configuration
    agent_user_id: int = Field(default=1)  # The fixed identity the agent posts messages as
    agent_max_iterations: int = Field(default=5)  # Iteration ceiling (model turns per run)
    agent_timezone: str = Field(default="Asia/Karachi")
    agent_utc_offset: str = Field(default="+05:00")
    email_sender_name: str = Field(default="AI Assistant")
    tool_timeout_seconds: float = Field(default=30.0)

    # Retrieval Configuration
    embedding_model: str = Field(default="text-embedding-3-large")
    embedding_cache_enabled: bool = Field(default=True)
    rag_chunk_size: int = Field(default=1200)
    rag_chunk_overlap: int = Field(default=200)
    rag_top_k: int = Field(default=5)
    rag_max_context_chars: int = Field(default=12000)
    rag_preview_chars: int = Field(default=200)
    rag_temperature: float = Field(default=0.7)
    rag_max_tokens: int = Field(default=1000)
    rag_namespace_template: str = Field(default="user-{user_id}")
    vector_store_path: str = Field(default="data/vector_store")

    # Speech Configuration
    transcription_model: str = Field(default="whisper-1")
    transcription_language: str = Field(default="en")
    tts_model: str = Field(default="tts-1")
    tts_voice: str = Field(default="alloy")
    speech_timeout_seconds: float = Field(default=60.0)

    # Email transport (SMTP)
    smtp_host: str = Field(default="smtp.gmail.com")
    smtp_port: int = Field(default=587)
    smtp_user: str = Field(default="")
    smtp_password: str = Field(default="")
    smtp_from: str = Field(default="")

    # Google Calendar
    google_client_id: str = Field(default="")
    google_client_secret: str = Field(default="")
    google_refresh_token: str = Field(default="")
    google_calendar_id: str = Field(default="primary")

    # Persistence
    database_url: str = Field(default="sqlite:///data/chat_agent.db")
    upload_dir: str = Field(default="uploads")
    upload_url_prefix: str = Field(default="/uploads")

    def resolve_path(self, value: str) -> Path:
        """Resolve a configured path relative to the project root."""
        path = Path(value)
        if not path.is_absolute():
            path = _project_root / path
        return path


# Create global settings instance
settings = Settings()
