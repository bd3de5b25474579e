"""Tests for the HTTP question API."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from aiohttp import test_utils

from twin.intent.models import ClassificationResult
from twin.intent.taxonomy import ClassificationSource, ErrorKind, Intent
from twin.routing.orchestrator import TwinOrchestrator
from twin.vectorstore import VectorDatabase
from twin.web_server import WebServer, classification_payload

ALLOWED_ORIGIN = "http://localhost:5173"


@pytest.fixture
def orchestrator():
    mock = AsyncMock(spec=TwinOrchestrator)
    mock.route_question.return_value = "You spent $120.00."
    mock.classify_question.return_value = ClassificationResult(
        intent=Intent.INVOICE_SEARCH,
        confidence=0.9,
        original_question="¿Cuánto gasté?",
        session_id="twin-1",
        source=ClassificationSource.FALLBACK,
        error_kind=ErrorKind.CONTENT_POLICY_BLOCKED,
    )
    return mock


@pytest_asyncio.fixture
async def client(orchestrator, llm_provider):
    vector_db = AsyncMock(spec=VectorDatabase)
    vector_db.health_check.return_value = False
    server = WebServer(
        orchestrator,
        llm_provider=llm_provider,
        vector_db=vector_db,
        allowed_origins=[ALLOWED_ORIGIN],
    )
    async with test_utils.TestClient(test_utils.TestServer(server.app)) as test_client:
        yield test_client


class TestProcessQuestion:
    """Test the process-question endpoint."""

    @pytest.mark.asyncio
    async def test_answer(self, client, orchestrator):
        response = await client.post(
            "/api/process-question", json={"question": " ¿Cuánto gasté? ", "twinId": "twin-1"}
        )

        assert response.status == 200
        body = await response.json()
        assert body["success"] is True
        assert body["result"] == "You spent $120.00."
        assert body["question"] == "¿Cuánto gasté?"
        assert body["twinId"] == "twin-1"
        assert "processedAt" in body
        orchestrator.route_question.assert_awaited_once_with("¿Cuánto gasté?", "twin-1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"twinId": "twin-1"}, "Question parameter is required"),
            ({"question": "hola", "twinId": ""}, "Twin ID parameter is required"),
            (["hola"], "JSON object"),
        ],
    )
    async def test_invalid_body(self, client, orchestrator, payload, message):
        response = await client.post("/api/process-question", json=payload)

        assert response.status == 400
        body = await response.json()
        assert body["success"] is False
        assert message in body["errorMessage"]
        orchestrator.route_question.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_json(self, client):
        response = await client.post(
            "/api/process-question", data="{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status == 400
        assert "valid JSON" in (await response.json())["errorMessage"]


class TestClassifyQuestion:
    """Test the classify-question endpoint."""

    @pytest.mark.asyncio
    async def test_camel_case_classification(self, client):
        response = await client.post(
            "/api/classify-question", json={"question": "¿Cuánto gasté?", "twinId": "twin-1"}
        )

        assert response.status == 200
        body = await response.json()
        assert body["intent"] == "InvoiceSearch"
        assert body["subType"] == "NotApplicable"
        assert body["requiresCalculation"] is False
        assert body["errorKind"] == "ContentPolicyBlocked"
        assert body["source"] == "fallback"
        assert body["sessionId"] == "twin-1"

    def test_payload_keys(self):
        payload = classification_payload(ClassificationResult())
        assert set(payload) == {
            "intent",
            "subType",
            "requiresCalculation",
            "requiresFilter",
            "confidence",
            "reason",
            "originalQuestion",
            "sessionId",
            "processedAt",
            "success",
            "errorKind",
            "errorMessage",
            "source",
        }


class TestCorsAndHealth:
    """Test CORS handling and health reporting."""

    @pytest.mark.asyncio
    async def test_preflight_allowed_origin(self, client):
        response = await client.options(
            "/api/process-question", headers={"Origin": ALLOWED_ORIGIN}
        )

        assert response.status == 200
        assert response.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
        assert "POST" in response.headers["Access-Control-Allow-Methods"]

    @pytest.mark.asyncio
    async def test_unknown_origin_not_echoed(self, client):
        response = await client.post(
            "/api/process-question",
            json={"question": "hola", "twinId": "twin-1"},
            headers={"Origin": "http://evil.test"},
        )

        assert response.status == 200
        assert "Access-Control-Allow-Origin" not in response.headers

    @pytest.mark.asyncio
    async def test_health_reports_checks(self, client):
        response = await client.get("/health")

        assert response.status == 200
        body = await response.json()
        assert body["status"] == "degraded"
        assert body["checks"] == {"llm": True, "vectorStore": False}
