"""
Chat with the AI agent (text or voice)
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from loguru import logger

from chat_agent.agents.turn import TurnCoordinator
from chat_agent.api.dependencies import get_current_user_id, get_turn_coordinator
from chat_agent.api.models import ErrorResponse
from chat_agent.llm.speech import mime_type_for
from chat_agent.models.domain import AudioInput, Turn, TurnResult


router = APIRouter(prefix="/ai-agent", tags=["ai-agent"])


@router.post(
    "/chat",
    response_model=TurnResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def chat(
    message: Optional[str] = Form(None),
    conversation_id: Optional[int] = Form(None, alias="conversationId"),
    recipient_id: Optional[int] = Form(None, alias="recipientId"),
    file: Optional[UploadFile] = File(None),
    user_id: int = Depends(get_current_user_id),
    coordinator: TurnCoordinator = Depends(get_turn_coordinator),
) -> TurnResult:
    """
    Send one message to the agent

    Supports both scenarios:
    1. Existing conversation: provide conversationId
    2. New conversation: provide recipientId (the agent's id)

    An attached audio file is transcribed and replaces the message field.
    """
    audio = None
    if file is not None:
        data = file.file.read()
        audio = AudioInput(
            data=data,
            filename=file.filename or "audio.mp3",
            mime_type=file.content_type or mime_type_for(file.filename or ""),
        )
        logger.debug(f"Voice turn: {audio.filename} ({audio.mime_type}, {len(data)} bytes)")

    turn = Turn(
        user_id=user_id,
        text=message,
        conversation_id=conversation_id,
        recipient_id=recipient_id,
        audio=audio,
    )
    return coordinator.process_turn(turn)
