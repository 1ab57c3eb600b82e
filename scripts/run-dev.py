"""
FastAPI Development Server

Run the chat agent API in development mode.

Usage:
    python scripts/run-dev.py
"""

import sys
import os
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
os.chdir(project_root)

import uvicorn
from loguru import logger

from chat_agent.utils.logger import setup_logger


def main():
    """Start the FastAPI development server"""
    setup_logger()
    logger.info("="*80)
    logger.info("Chat Agent - API Server")
    logger.info("="*80)
    logger.info("Server will be available at: http://localhost:8000")
    logger.info("API Documentation: http://localhost:8000/docs")
    logger.info("Agent chat: POST http://localhost:8000/ai-agent/chat")
    logger.info("Press CTRL+C to stop the server")
    logger.info("="*80)

    uvicorn.run(
        "chat_agent.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
        access_log=True,
        reload_dirs=[str(project_root / "chat_agent")]
    )


if __name__ == "__main__":
    main()
