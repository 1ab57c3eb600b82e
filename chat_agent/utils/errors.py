"""
Custom error classes for the application
"""


GENERIC_FAILURE_MESSAGE = "Failed to process AI request. Please try again later."


class AgentError(Exception):
    """Base exception for agent errors"""
    pass


class ValidationError(AgentError):
    """Bad or missing input; reported to the caller before any side effect"""
    pass


class DocumentParseError(ValidationError):
    """Text could not be extracted from an uploaded document"""
    pass


class ToolExecutionError(AgentError):
    """Raised inside a tool; its message becomes the tool result text"""
    pass


class OrchestrationLimitExceeded(AgentError):
    """The agent loop reached its iteration ceiling"""
    pass


class UpstreamServiceError(AgentError):
    """A model, index, speech, calendar or email provider call failed"""
    pass


class TranscriptionError(UpstreamServiceError):
    """Speech-to-text failed"""
    pass


class SynthesisError(UpstreamServiceError):
    """Text-to-speech failed"""
    pass


class CalendarAuthError(UpstreamServiceError):
    """Calendar provider rejected or is missing credentials"""
    pass


class MessageStoreError(AgentError):
    """Error raised by the message store"""
    pass


class ConversationNotFoundError(MessageStoreError):
    """Referenced conversation does not exist"""
    pass


class NotAMemberError(MessageStoreError):
    """User is not a member of the conversation"""
    pass


class TurnProcessingError(AgentError):
    """Single user-facing failure for a turn; internal causes are only logged"""

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE):
        super().__init__(message)
