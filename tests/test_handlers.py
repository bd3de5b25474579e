"""Tests for the default handlers."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from twin.config import Settings
from twin.handlers import CollectionSearchHandler, GenericConversationHandler, build_default_handlers
from twin.intent.models import ClassificationResult
from twin.intent.taxonomy import DocumentSubType, Intent
from twin.llm.base import EmbeddingResult, ResponseResult
from twin.routing.router import Router
from twin.vectorstore import VectorDatabase

FIXED_NOW = datetime(2025, 3, 14, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def vector_db():
    db = AsyncMock(spec=VectorDatabase)
    db.search.return_value = [
        {"id": "inv-1", "content": "Microsoft Azure invoice, $120.00", "metadata": {}, "similarity": 0.8},
        {"id": "inv-2", "content": "Unrelated record", "metadata": {}, "similarity": 0.05},
    ]
    return db


@pytest.fixture
def search_provider(llm_provider):
    llm_provider.generate_embedding.return_value = EmbeddingResult(
        embedding=[0.1, 0.2, 0.3], model="test-embed"
    )
    llm_provider.generate_response.return_value = ResponseResult(
        content="You spent $120.00 on Microsoft.", model="test-model"
    )
    return llm_provider


def invoice_handler(provider, vector_db) -> CollectionSearchHandler:
    return CollectionSearchHandler(
        name="invoice search",
        subject="invoices",
        collection_name="invoices",
        llm_provider=provider,
        vector_db=vector_db,
        filter_fields=("vendor", "year"),
    )


class TestGenericConversationHandler:
    """Test the general conversation handler."""

    @pytest.mark.asyncio
    async def test_answer_includes_local_time(self, llm_provider):
        llm_provider.generate_response.return_value = ResponseResult(
            content="¡Hola! Todo bien.", model="test-model"
        )
        handler = GenericConversationHandler(llm_provider, clock=lambda: FIXED_NOW)

        text = await handler.handle("Hola", "twin-1", ClassificationResult())

        assert text.startswith("¡Hola! Todo bien.")
        assert "Local time in Austin, Texas: Friday, March 14, 2025 - 10:30:00 CDT" in text
        kwargs = llm_provider.generate_response.call_args.kwargs
        assert kwargs["prompt"] == "Hola"
        assert "Austin, Texas" in kwargs["system"]

    @pytest.mark.asyncio
    async def test_llm_failure_becomes_text(self, llm_provider):
        llm_provider.generate_response.side_effect = RuntimeError("offline")
        handler = GenericConversationHandler(llm_provider, clock=lambda: FIXED_NOW)

        text = await handler.handle("Hola", "twin-1", ClassificationResult())

        assert "offline" in text
        assert "Local time in Austin, Texas" in text


class TestCollectionSearchHandler:
    """Test retrieval-augmented collection search."""

    def test_filter_scoped_to_twin(self, search_provider, vector_db):
        handler = invoice_handler(search_provider, vector_db)

        where = handler.build_filter("twin-1", ClassificationResult(intent=Intent.INVOICE_SEARCH))

        assert where == {"twin_id": "twin-1"}

    def test_filter_with_criteria(self, search_provider, vector_db):
        handler = invoice_handler(search_provider, vector_db)
        classification = ClassificationResult(
            intent=Intent.INVOICE_SEARCH,
            requires_filter=True,
            original_question="¿Cuánto he gastado en Microsoft este año?",
            processed_at=FIXED_NOW,
        )

        where = handler.build_filter("twin-1", classification)

        assert where == {
            "$and": [{"twin_id": "twin-1"}, {"vendor": "microsoft"}, {"year": "2025"}]
        }

    def test_filter_with_document_sub_type(self, search_provider, vector_db):
        handler = CollectionSearchHandler(
            name="document search",
            subject="documents",
            collection_name="documents",
            llm_provider=search_provider,
            vector_db=vector_db,
            filter_by_sub_type=True,
        )
        licenses = ClassificationResult(
            intent=Intent.DOCUMENT_SEARCH, sub_type=DocumentSubType.LICENSES
        )
        other = ClassificationResult(intent=Intent.DOCUMENT_SEARCH, sub_type=DocumentSubType.OTHER)

        assert handler.build_filter("twin-1", licenses) == {
            "$and": [{"twin_id": "twin-1"}, {"document_type": "Licenses"}]
        }
        assert handler.build_filter("twin-1", other) == {"twin_id": "twin-1"}

    @pytest.mark.asyncio
    async def test_answer_from_records(self, search_provider, vector_db):
        handler = invoice_handler(search_provider, vector_db)
        classification = ClassificationResult(
            intent=Intent.INVOICE_SEARCH,
            requires_calculation=True,
            original_question="¿Cuánto he gastado?",
        )

        text = await handler.handle("¿Cuánto he gastado?", "twin-1", classification)

        assert text == "You spent $120.00 on Microsoft."
        search_kwargs = vector_db.search.call_args.kwargs
        assert search_kwargs["collection_name"] == "invoices"
        assert search_kwargs["limit"] == handler.calculation_limit
        prompt = search_provider.generate_response.call_args.kwargs["prompt"]
        assert "Microsoft Azure invoice" in prompt
        assert "Unrelated record" not in prompt
        assert "calculation" in prompt

    @pytest.mark.asyncio
    async def test_nothing_found(self, search_provider, vector_db):
        vector_db.search.return_value = []
        handler = invoice_handler(search_provider, vector_db)

        text = await handler.handle("facturas", "twin-1", ClassificationResult())

        assert "couldn't find any invoices" in text
        search_provider.generate_response.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_failure_becomes_text(self, search_provider, vector_db):
        vector_db.search.side_effect = RuntimeError("collection not found")
        handler = invoice_handler(search_provider, vector_db)

        text = await handler.handle("facturas", "twin-1", ClassificationResult())

        assert "collection not found" in text


def test_default_handlers_cover_every_intent(llm_provider):
    """Test that the default table is accepted by the router."""
    handlers = build_default_handlers(llm_provider, AsyncMock(spec=VectorDatabase), Settings())

    assert set(handlers) == set(Intent)
    assert isinstance(handlers[Intent.GENERIC], GenericConversationHandler)
    assert handlers[Intent.DOCUMENT_SEARCH].filter_by_sub_type is True
    Router(handlers)
