"""Vector search over the twin's indexed collections using ChromaDB."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import chromadb
from chromadb.config import Settings as ChromaSettings

from twin.config import get_settings

logger = logging.getLogger(__name__)


class VectorDatabase(ABC):
    """Abstract base class for vector databases."""

    @abstractmethod
    async def search(
        self,
        collection_name: str,
        query_embedding: list[float],
        limit: int = 10,
        metadata_filter: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Search for similar records."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the database is healthy."""
        pass


class ChromaVectorDatabase(VectorDatabase):
    """ChromaDB implementation of vector database."""

    def __init__(self, host: str | None = None, port: int | None = None):
        """Initialize ChromaDB client.

        Args:
            host: ChromaDB host (optional, uses config if not provided)
            port: ChromaDB port (optional, uses config if not provided)
        """
        if host is None or port is None:
            settings = get_settings()
            host = host or settings.chroma_host
            port = port or settings.chroma_port

        self.host = host
        self.port = port
        self.chroma_url = f"http://{host}:{port}"

        try:
            self.client = chromadb.HttpClient(
                host=host,
                port=port,
                settings=ChromaSettings(anonymized_telemetry=False),
            )
            logger.info(f"Connected to ChromaDB at {self.chroma_url}")
        except Exception as e:
            logger.error(f"Failed to connect to ChromaDB at {self.chroma_url}: {e}")
            raise

    async def search(
        self,
        collection_name: str,
        query_embedding: list[float],
        limit: int = 10,
        metadata_filter: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Search for similar records in ChromaDB.

        The Chroma client is synchronous, so calls run in a worker thread.
        """
        try:
            collection = await asyncio.to_thread(self.client.get_collection, name=collection_name)

            results = await asyncio.to_thread(
                collection.query,
                query_embeddings=[query_embedding],
                n_results=limit,
                where=metadata_filter,
                include=["documents", "metadatas", "distances"],
            )

            search_results = []
            if results["ids"] and len(results["ids"]) > 0:
                for i in range(len(results["ids"][0])):
                    distance = results["distances"][0][i] if results["distances"] else 0.0
                    search_results.append(
                        {
                            "id": results["ids"][0][i],
                            "content": results["documents"][0][i] if results["documents"] else "",
                            "metadata": results["metadatas"][0][i] if results["metadatas"] else {},
                            "distance": distance,
                            "similarity": 1.0 - distance,
                        }
                    )

            logger.info(f"Found {len(search_results)} results for query in {collection_name}")
            return search_results

        except Exception as e:
            logger.error(f"Failed to search collection {collection_name}: {e}")
            raise

    async def health_check(self) -> bool:
        """Check if ChromaDB is healthy and accessible."""
        try:
            await asyncio.to_thread(self.client.heartbeat)
            return True
        except Exception as e:
            logger.warning(f"ChromaDB health check failed: {e}")
            return False
