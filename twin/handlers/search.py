"""Retrieval-augmented handlers over the twin's indexed collections."""

import logging
from dataclasses import dataclass
from typing import Any

from twin.handlers.base import Handler
from twin.intent.models import ClassificationResult
from twin.intent.taxonomy import DocumentSubType
from twin.llm.base import LLMProvider
from twin.vectorstore import VectorDatabase

logger = logging.getLogger(__name__)


@dataclass
class SearchHit:
    """Individual record returned by the vector database."""

    content: str
    similarity: float
    metadata: dict[str, Any]


class CollectionSearchHandler(Handler):
    """Answer questions from one vector collection, scoped to the asking twin.

    Records are expected to carry a ``twin_id`` metadata field. Filter hints
    from the classification narrow the search through metadata equality on
    ``filter_fields``; document searches can also narrow on ``document_type``.
    """

    def __init__(
        self,
        name: str,
        subject: str,
        collection_name: str,
        llm_provider: LLMProvider,
        vector_db: VectorDatabase,
        embedding_provider: LLMProvider | None = None,
        filter_fields: tuple[str, ...] = (),
        filter_by_sub_type: bool = False,
        search_limit: int = 5,
        calculation_limit: int = 25,
        min_similarity: float = 0.1,
        temperature: float = 0.3,
    ) -> None:
        self.name = name
        self.subject = subject
        self.collection_name = collection_name
        self.llm_provider = llm_provider
        self.embedding_provider = embedding_provider or llm_provider
        self.vector_db = vector_db
        self.filter_fields = filter_fields
        self.filter_by_sub_type = filter_by_sub_type
        self.search_limit = search_limit
        self.calculation_limit = calculation_limit
        self.min_similarity = min_similarity
        self.temperature = temperature

    def build_filter(
        self,
        session_id: str,
        classification: ClassificationResult,
    ) -> dict[str, Any]:
        """Build the Chroma ``where`` clause for a question."""
        conditions: list[dict[str, Any]] = [{"twin_id": session_id}]

        if classification.requires_filter and self.filter_fields:
            criteria = classification.filter_criteria()
            for field in self.filter_fields:
                if field in criteria:
                    conditions.append({field: criteria[field]})

        if self.filter_by_sub_type and classification.sub_type not in (
            DocumentSubType.NOT_APPLICABLE,
            DocumentSubType.OTHER,
        ):
            conditions.append({"document_type": classification.sub_type.value})

        if len(conditions) == 1:
            return conditions[0]
        return {"$and": conditions}

    async def search(
        self,
        query: str,
        limit: int,
        metadata_filter: dict[str, Any],
    ) -> list[SearchHit]:
        """Embed the query and fetch matching records above the similarity floor."""
        embedding = await self.embedding_provider.generate_embedding(query)
        if not embedding.success or not embedding.embedding:
            raise RuntimeError(f"Failed to generate query embedding: {embedding.error}")

        raw_results = await self.vector_db.search(
            collection_name=self.collection_name,
            query_embedding=embedding.embedding,
            limit=limit,
            metadata_filter=metadata_filter,
        )

        return [
            SearchHit(
                content=r["content"],
                similarity=r["similarity"],
                metadata=r.get("metadata") or {},
            )
            for r in raw_results
            if r["similarity"] >= self.min_similarity
        ]

    def build_prompt(
        self,
        question: str,
        hits: list[SearchHit],
        classification: ClassificationResult,
    ) -> str:
        """Build the answer prompt from the retrieved records."""
        records = "\n---\n".join(
            f"[{i}] {hit.content[:800]}" for i, hit in enumerate(hits, 1)
        )

        instructions = [
            f"- Answer using ONLY the {self.subject} records above",
            "- Be direct; use bullet points for lists",
            "- If the records do not contain the answer, say so briefly",
        ]
        if classification.requires_calculation:
            instructions.append(
                "- The question needs a calculation: compute totals, counts or comparisons "
                "from every relevant record and show the figures used"
            )
        criteria = classification.filter_criteria() if classification.requires_filter else {}
        if criteria:
            formatted = ", ".join(f"{k}={v}" for k, v in sorted(criteria.items()))
            instructions.append(f"- Only consider records matching: {formatted}")

        return (
            f"{self.subject.capitalize()} records:\n{records}\n\n"
            f"User Question: {question}\n\n"
            "Instructions:\n" + "\n".join(instructions) + "\n\nAnswer:"
        )

    async def handle(
        self,
        question: str,
        session_id: str,
        classification: ClassificationResult,
    ) -> str:
        logger.info(
            f"Processing {self.name} request ({classification.search_complexity().value} search)"
        )

        try:
            limit = self.calculation_limit if classification.requires_calculation else self.search_limit
            metadata_filter = self.build_filter(session_id, classification)
            hits = await self.search(question, limit, metadata_filter)

            if not hits:
                return (
                    f"I couldn't find any {self.subject} related to your question. "
                    "Try rephrasing it or adding more detail."
                )

            result = await self.llm_provider.generate_response(
                prompt=self.build_prompt(question, hits, classification),
                system="You are the user's Digital Twin. Answer in the language of the question.",
                temperature=self.temperature,
            )

        except Exception as e:
            logger.error(f"Error processing {self.name} request: {e}")
            return f"❌ Error searching {self.subject}: {e}"

        if not result.content.strip():
            logger.error(f"Empty answer generated for {self.name} request")
            return "I encountered an error while generating a response. Please try again."

        return result.content.strip()
