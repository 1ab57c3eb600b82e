"""
Main FastAPI application for the chat agent

This module creates and configures the FastAPI application with:
- CORS middleware for frontend integration
- API routes (agent chat, document upload/search/ask)
- Error mapping for the agent error taxonomy
- Health check endpoint
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from chat_agent.api.models import HealthResponse
from chat_agent.api.routes import chat, rag
from chat_agent.config.settings import settings
from chat_agent.llm.client import log_llm_configuration
from chat_agent.utils.errors import (
    AgentError,
    TurnProcessingError,
    UpstreamServiceError,
    ValidationError,
)
from chat_agent.utils.metrics import log_metrics_summary


API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events

    - Startup: log provider configuration
    - Shutdown: log fail-soft metrics collected during the process lifetime
    """
    logger.info("🚀 FastAPI application starting...")
    log_llm_configuration()
    logger.info(f"🤖 Agent user id: {settings.agent_user_id} (max iterations: {settings.agent_max_iterations})")

    yield

    logger.info("🛑 FastAPI application shutting down...")
    log_metrics_summary()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Chat Agent API",
        description="""
    Tool-calling chat agent with document Q&A and voice turns.

    ## Endpoints

    * `POST /ai-agent/chat` - send a text or voice message to the agent
    * `POST /rag/upload` - index a document for the caller
    * `POST /rag/search` - raw retrieval over the caller's documents
    * `POST /rag/ask` - grounded answer with sources
    """,
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",  # React dev server
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(400, str(exc))

    @app.exception_handler(TurnProcessingError)
    async def turn_error_handler(request: Request, exc: TurnProcessingError):
        return _error(500, str(exc))

    @app.exception_handler(UpstreamServiceError)
    async def upstream_error_handler(request: Request, exc: UpstreamServiceError):
        logger.error(f"Upstream failure on {request.url.path}: {exc}")
        return _error(502, "Failed to process the request. Please try again.")

    @app.exception_handler(AgentError)
    async def agent_error_handler(request: Request, exc: AgentError):
        logger.error(f"Unhandled agent error on {request.url.path}: {exc}")
        return _error(500, "Failed to process the request. Please try again later.")

    app.include_router(chat.router)
    app.include_router(rag.router)

    upload_dir = settings.resolve_path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.upload_url_prefix, StaticFiles(directory=str(upload_dir)), name="uploads")

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check():
        """Health check endpoint"""
        return HealthResponse(status="healthy", service="chat-agent", version=API_VERSION)

    return app


app = create_app()
