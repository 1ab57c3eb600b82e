"""
Tool contract shared by every capability the agent can call.

Tool names form a closed set; arguments are pydantic models validated before
a tool runs, so tools only ever see well-typed input.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Type

from pydantic import BaseModel


class ToolName(str, Enum):
    SEND_EMAIL = "sendEmail"
    CREATE_CALENDAR_EVENT = "addCalendarEvent"
    QUERY_CALENDAR_RANGE = "getEventsInRange"
    SEARCH_DOCUMENTS = "queryDocuments"


@dataclass(frozen=True)
class ToolContext:
    """Per-run context handed to every tool call."""
    user_id: int


_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_OFFSET_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?[+-]\d{2}:\d{2}$")


def validate_email_address(value: str) -> str:
    value = (value or "").strip()
    if not _EMAIL_PATTERN.match(value):
        raise ValueError(f"'{value}' is not a valid email address")
    return value


def validate_offset_timestamp(value: str) -> str:
    """
    Accept ISO-8601 timestamps carrying an explicit ±HH:MM offset.

    "2025-07-03T14:00:00+05:00" passes; "2025-07-03T09:00:00Z" and
    "2025-07-03T14:00:00" are rejected.
    """
    value = (value or "").strip()
    if not _OFFSET_TIMESTAMP.match(value):
        raise ValueError(
            f"'{value}' must be ISO 8601 with an explicit UTC offset, e.g. 2025-07-03T14:00:00+05:00 (no 'Z')"
        )
    try:
        datetime.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"'{value}' is not a valid timestamp") from e
    return value


class AgentTool(ABC):
    """Base class for agent tools."""

    name: ClassVar[ToolName]
    description: ClassVar[str]
    args_model: ClassVar[Type[BaseModel]]

    # Returned instead of the error when run() raises
    failure_message: ClassVar[str] = "The tool failed. Please try again later."

    # Changes something outside the process (sends, writes)
    side_effecting: ClassVar[bool] = False

    def schema(self) -> Dict[str, Any]:
        """OpenAI function schema for bind_tools."""
        parameters = self.args_model.model_json_schema(by_alias=True)
        parameters.pop("title", None)
        return {
            "type": "function",
            "function": {
                "name": self.name.value,
                "description": self.description,
                "parameters": parameters,
            },
        }

    @abstractmethod
    def run(self, args: BaseModel, context: ToolContext) -> str:
        """Execute with validated arguments and return the text fed back to the model."""
