"""Main entry point for the Digital Twin question service."""

import asyncio
import logging
import sys

from dotenv import load_dotenv

from twin.config import get_settings
from twin.handlers import build_default_handlers
from twin.llm import create_embedding_provider, create_llm_provider
from twin.routing import Router, TwinOrchestrator
from twin.vectorstore import ChromaVectorDatabase
from twin.web_server import WebServer

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


async def _close(provider) -> None:
    aclose = getattr(provider, "aclose", None)
    if aclose is not None:
        await aclose()


async def main() -> None:
    """Main application entry point."""
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info(f"Starting Digital Twin service in {settings.environment.value} mode")
    logger.info(f"Using LLM provider: {settings.llm_provider.value}")

    # Validate configuration
    try:
        settings.validate_provider_config()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    llm_provider = create_llm_provider()
    embedding_provider = create_embedding_provider()
    vector_db = ChromaVectorDatabase(settings.chroma_host, settings.chroma_port)

    router = Router(
        build_default_handlers(
            llm_provider,
            vector_db,
            settings,
            embedding_provider=embedding_provider,
        )
    )
    orchestrator = TwinOrchestrator.from_settings(llm_provider, router, settings)

    web_server = WebServer(
        orchestrator,
        llm_provider=llm_provider,
        vector_db=vector_db,
        port=settings.server_port,
        allowed_origins=settings.allowed_origins,
    )
    web_runner = await web_server.start()

    try:
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down...")
        await web_server.stop(web_runner)
        await _close(llm_provider)
        if embedding_provider is not llm_provider:
            await _close(embedding_provider)


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
