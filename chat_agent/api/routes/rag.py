"""
Document upload, search and question answering
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from chat_agent.agents.rag import DocumentIngestor, RAGAgent
from chat_agent.api.dependencies import get_current_user_id, get_ingestor, get_rag_agent
from chat_agent.api.models import ErrorResponse, RagQueryRequest
from chat_agent.models.domain import DocumentSearchResult, IngestionResult, RagAnswer
from chat_agent.utils.errors import ValidationError


router = APIRouter(prefix="/rag", tags=["rag"])


@router.post("/upload", response_model=IngestionResult, responses={400: {"model": ErrorResponse}})
def upload(
    file: Optional[UploadFile] = File(None),
    user_id: int = Depends(get_current_user_id),
    ingestor: DocumentIngestor = Depends(get_ingestor),
) -> IngestionResult:
    """Index a DOCX, TXT or MD document into the caller's namespace."""
    if file is None:
        raise ValidationError("No file provided")
    return ingestor.ingest(user_id, file.file.read(), file.filename or "")


@router.post("/search", response_model=DocumentSearchResult, responses={400: {"model": ErrorResponse}})
def search(
    request: RagQueryRequest,
    user_id: int = Depends(get_current_user_id),
    rag_agent: RAGAgent = Depends(get_rag_agent),
) -> DocumentSearchResult:
    return rag_agent.search(user_id, request.query, top_k=request.top_k)


@router.post("/ask", response_model=RagAnswer, responses={400: {"model": ErrorResponse}})
def ask(
    request: RagQueryRequest,
    user_id: int = Depends(get_current_user_id),
    rag_agent: RAGAgent = Depends(get_rag_agent),
) -> RagAnswer:
    """Answer a question from the caller's documents, with sources."""
    return rag_agent.answer(user_id, request.query, top_k=request.top_k)
