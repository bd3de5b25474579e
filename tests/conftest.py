"""Shared fixtures for twin tests."""

from unittest.mock import AsyncMock

import pytest

from twin.handlers.base import Handler
from twin.intent.models import ClassificationResult
from twin.intent.taxonomy import Intent
from twin.llm.base import LLMProvider, ResponseResult


class RecordingHandler(Handler):
    """Handler that records its calls and answers with a fixed text."""

    def __init__(self, name: str, answer: str | None = None):
        self.name = name
        self.answer = answer or f"answer from {name}"
        self.calls: list[tuple[str, str, ClassificationResult]] = []

    async def handle(self, question, session_id, classification):
        self.calls.append((question, session_id, classification))
        return self.answer


@pytest.fixture
def llm_provider():
    """LLM provider whose calls are AsyncMocks."""
    provider = AsyncMock(spec=LLMProvider)
    provider.generate_response.return_value = ResponseResult(
        content="INTENT: Generic", model="test-model"
    )
    provider.health_check.return_value = True
    return provider


@pytest.fixture
def recording_handlers():
    """One recording handler per intent."""
    return {intent: RecordingHandler(intent.value) for intent in Intent}
