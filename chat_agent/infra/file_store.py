"""
File storage for uploaded and synthesized audio.
"""

import uuid
from pathlib import Path, PurePath
from typing import Optional, Protocol

from loguru import logger

from chat_agent.config.settings import settings


class FileStore(Protocol):
    def upload(self, data: bytes, suggested_name: str, mime_type: str) -> Optional[str]:
        ...


class LocalFileStore:
    """Writes files under the upload directory and returns their public url."""

    def __init__(self, upload_dir: Optional[Path] = None, url_prefix: Optional[str] = None):
        self.upload_dir = Path(upload_dir) if upload_dir else settings.resolve_path(settings.upload_dir)
        self.url_prefix = (url_prefix if url_prefix is not None else settings.upload_url_prefix).rstrip("/")
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def upload(self, data: bytes, suggested_name: str, mime_type: str) -> Optional[str]:
        """
        Store bytes under a random name keeping the suggested extension

        Returns:
            Public url ("/uploads/<name>"), or None when there is nothing to store
        """
        if not data:
            return None

        extension = PurePath(suggested_name or "").suffix.lower()
        name = f"{uuid.uuid4().hex}{extension}"
        (self.upload_dir / name).write_bytes(data)

        logger.debug(f"Stored {len(data)} bytes ({mime_type}) as {name}")
        return f"{self.url_prefix}/{name}"
