"""
Index local documents into a user's namespace

This script:
1. Finds DOCX, TXT and MD files under a directory
2. Chunks and embeds them (embeddings are cached on disk)
3. Upserts them into the user's ChromaDB collection

Usage:
    python scripts/ingest_documents.py --user-id 42 data/docs
"""

import argparse
import sys
import os
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
os.chdir(project_root)

from loguru import logger

from chat_agent.agents.rag import DocumentIngestor
from chat_agent.utils.errors import AgentError
from chat_agent.utils.logger import setup_logger
from chat_agent.utils.rag import SUPPORTED_EXTENSIONS


def find_documents(directory: Path):
    for extension in SUPPORTED_EXTENSIONS:
        yield from sorted(directory.rglob(f"*.{extension}"))


def main():
    parser = argparse.ArgumentParser(description="Index documents for one user")
    parser.add_argument("directory", type=Path)
    parser.add_argument("--user-id", type=int, required=True)
    parser.add_argument("--namespace", default=None)
    args = parser.parse_args()

    setup_logger()

    if not args.directory.is_dir():
        logger.error(f"Directory not found: {args.directory}")
        sys.exit(1)

    ingestor = DocumentIngestor()
    total_chunks = 0
    failed = 0

    for path in find_documents(args.directory):
        try:
            result = ingestor.ingest(args.user_id, path.read_bytes(), path.name, namespace=args.namespace)
        except AgentError as e:
            logger.error(f"❌ {path.name}: {e}")
            failed += 1
            continue
        total_chunks += result.chunk_count
        logger.info(f"✅ {path.name}: {result.chunk_count} chunks → {result.namespace}")

    logger.info(f"📈 Indexed {total_chunks} chunks ({failed} file(s) failed)")
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
