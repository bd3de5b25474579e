"""Tests for the classification policy service."""

import pytest

from twin.intent.classifier import IntentClassifier
from twin.intent.service import IntentService
from twin.intent.taxonomy import ClassificationSource, ErrorKind, Intent
from twin.llm.base import ContentPolicyError, ResponseResult


def answer(text: str) -> ResponseResult:
    return ResponseResult(content=text, model="test-model")


@pytest.fixture
def service(llm_provider):
    return IntentService(IntentClassifier(llm_provider))


class TestIntentService:
    """Test the model-first, keyword-fallback policy."""

    @pytest.mark.asyncio
    async def test_primary_answer(self, service, llm_provider):
        llm_provider.generate_response.return_value = answer(
            "INTENT: ContactSearch\nREQUIRES_FILTER: YES\nCONFIDENCE: 0.88\nREASON: Asks for a phone"
        )

        result = await service.classify("Busca el teléfono de Jorge Luna", "twin-1")

        assert result.intent == Intent.CONTACT_SEARCH
        assert result.requires_filter is True
        assert result.confidence == pytest.approx(0.88)
        assert result.source == ClassificationSource.PRIMARY
        assert result.error_kind == ErrorKind.NONE
        assert result.session_id == "twin-1"

    @pytest.mark.asyncio
    async def test_content_policy_uses_fallback(self, service, llm_provider):
        """Test the blocked-primary invoice scenario."""
        llm_provider.generate_response.side_effect = ContentPolicyError("filtered")

        result = await service.classify("¿Cuánto he gastado en Microsoft este año?", "twin-1")

        assert result.success is True
        assert result.intent == Intent.INVOICE_SEARCH
        assert result.requires_calculation is True
        assert result.requires_filter is True
        assert result.confidence == 0.9
        assert result.source == ClassificationSource.FALLBACK
        assert result.error_kind == ErrorKind.CONTENT_POLICY_BLOCKED
        llm_provider.generate_response.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_transport_error_is_unsuccessful_generic(self, service, llm_provider):
        llm_provider.generate_response.side_effect = RuntimeError("connection refused")

        result = await service.classify("Busca facturas de Amazon", "twin-1")

        assert result.success is False
        assert result.intent == Intent.GENERIC
        assert result.confidence == 0.0
        assert result.error_kind == ErrorKind.TRANSPORT_ERROR
        assert result.error_message == "connection refused"
        assert result.original_question == "Busca facturas de Amazon"

    @pytest.mark.asyncio
    async def test_missing_intent_uses_fallback(self, service, llm_provider):
        llm_provider.generate_response.return_value = answer("I cannot classify that.")

        result = await service.classify("¿Cuál es mi email?", "twin-1")

        assert result.intent == Intent.PROFILE_SEARCH
        assert result.source == ClassificationSource.FALLBACK
        assert result.error_kind == ErrorKind.PARSE_ERROR

    @pytest.mark.asyncio
    async def test_missing_intent_without_fallback(self, llm_provider):
        service = IntentService(IntentClassifier(llm_provider), fallback_on_parse_error=False)
        llm_provider.generate_response.return_value = answer("INTENT: Weather\nCONFIDENCE: 0.4")

        result = await service.classify("¿Cuál es mi email?", "twin-1")

        assert result.intent == Intent.GENERIC
        assert result.confidence == pytest.approx(0.4)
        assert result.source == ClassificationSource.PRIMARY
        assert result.error_kind == ErrorKind.PARSE_ERROR

    @pytest.mark.asyncio
    async def test_intent_only_keeps_defaults(self, service, llm_provider):
        """Test that a present INTENT line is trusted without the fallback."""
        llm_provider.generate_response.return_value = answer("INTENT: InvoiceSearch")

        result = await service.classify("¿Qué hora es?", "twin-1")

        assert result.intent == Intent.INVOICE_SEARCH
        assert result.confidence == 0.0
        assert result.requires_calculation is False
        assert result.source == ClassificationSource.PRIMARY
