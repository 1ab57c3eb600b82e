"""
Plain-text extraction for uploaded documents.
"""

import io
from pathlib import PurePath
from typing import Callable, Dict

from docx import Document
from loguru import logger

from chat_agent.utils.errors import DocumentParseError, ValidationError


def _extract_docx(data: bytes) -> str:
    document = Document(io.BytesIO(data))
    parts = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            parts.append(" ".join(cell.text for cell in row.cells))
    return "\n".join(parts)


def _extract_plain(data: bytes) -> str:
    return data.decode("utf-8-sig")


_EXTRACTORS: Dict[str, Callable[[bytes], str]] = {
    "docx": _extract_docx,
    "txt": _extract_plain,
    "md": _extract_plain,
}

SUPPORTED_EXTENSIONS = tuple(sorted(_EXTRACTORS))


def file_extension(file_name: str) -> str:
    return PurePath(file_name or "").suffix.lower().lstrip(".")


def ensure_supported(file_name: str) -> str:
    """
    Check a file name against the document whitelist.

    Returns:
        The lower-case extension

    Raises:
        ValidationError: If the type is not accepted
    """
    extension = file_extension(file_name)
    if extension not in _EXTRACTORS:
        supported = ", ".join(ext.upper() for ext in SUPPORTED_EXTENSIONS)
        raise ValidationError(f"Only {supported} files are supported")
    return extension


def extract_text(data: bytes, file_name: str) -> str:
    """
    Extract plain text from a whitelisted document.

    Raises:
        ValidationError: Unsupported file type
        DocumentParseError: The file could not be read
    """
    extension = ensure_supported(file_name)
    try:
        text = _EXTRACTORS[extension](data)
    except Exception as e:
        logger.error(f"{extension.upper()} parsing error for {file_name}: {e}")
        raise DocumentParseError(
            f"Failed to parse {extension.upper()} file. Please ensure the file is not corrupted."
        ) from e
    return text.strip()
