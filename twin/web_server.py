"""Web server exposing the question API."""

import logging
from datetime import datetime, timezone
from typing import Any

from aiohttp import web
from pydantic.alias_generators import to_camel

from twin.intent.models import ClassificationResult
from twin.llm.base import LLMProvider
from twin.routing.orchestrator import TwinOrchestrator
from twin.vectorstore import VectorDatabase

logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = "GET, POST, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization, Accept, Origin, User-Agent"


def classification_payload(result: ClassificationResult) -> dict[str, Any]:
    """Serialize a classification as camelCase JSON."""
    return {to_camel(k): v for k, v in result.model_dump(mode="json").items()}


class WebServer:
    """HTTP server for twin question endpoints."""

    def __init__(
        self,
        orchestrator: TwinOrchestrator,
        llm_provider: LLMProvider | None = None,
        vector_db: VectorDatabase | None = None,
        port: int = 7071,
        allowed_origins: list[str] | None = None,
    ):
        """Initialize web server.

        Args:
            orchestrator: Pipeline that answers questions
            llm_provider: Provider reported by the health endpoint
            vector_db: Vector database reported by the health endpoint
            port: Port to listen on
            allowed_origins: CORS origin allow-list; any origin when empty
        """
        self.orchestrator = orchestrator
        self.llm_provider = llm_provider
        self.vector_db = vector_db
        self.port = port
        self.allowed_origins = allowed_origins or []
        self.app = web.Application(middlewares=[self._cors_middleware])
        self._setup_routes()
        logger.info(f"Web server initialized on port {port}")

    def _setup_routes(self):
        """Set up HTTP routes."""
        self.app.router.add_get("/", self._handle_health)
        self.app.router.add_get("/health", self._handle_health)
        self.app.router.add_post("/api/process-question", self._handle_process_question)
        self.app.router.add_post("/api/classify-question", self._handle_classify_question)
        self.app.router.add_route("OPTIONS", "/api/process-question", self._handle_preflight)
        self.app.router.add_route("OPTIONS", "/api/classify-question", self._handle_preflight)
        logger.info("Routes configured: /, /health, /api/process-question, /api/classify-question")

    def _cors_headers(self, request: web.Request) -> dict[str, str]:
        origin = request.headers.get("Origin")
        headers = {
            "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
            "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
            "Access-Control-Max-Age": "3600",
        }
        if not self.allowed_origins:
            headers["Access-Control-Allow-Origin"] = "*"
        elif origin and origin in self.allowed_origins:
            headers["Access-Control-Allow-Origin"] = origin
            headers["Access-Control-Allow-Credentials"] = "true"
            headers["Vary"] = "Origin"
        return headers

    @web.middleware
    async def _cors_middleware(self, request: web.Request, handler) -> web.StreamResponse:
        response = await handler(request)
        if request.path.startswith("/api/"):
            response.headers.update(self._cors_headers(request))
        return response

    async def _handle_preflight(self, request: web.Request) -> web.Response:
        """CORS preflight."""
        return web.Response(status=200)

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        checks: dict[str, bool] = {}
        if self.llm_provider is not None:
            checks["llm"] = await self.llm_provider.health_check()
        if self.vector_db is not None:
            checks["vectorStore"] = await self.vector_db.health_check()

        status = "healthy" if all(checks.values()) else "degraded"
        return web.json_response({"status": status, "service": "Digital Twin", "checks": checks})

    async def _read_question(self, request: web.Request) -> tuple[str, str]:
        """Read and validate the ``question``/``twinId`` body.

        Raises:
            ValueError: If the body is not a JSON object or a field is missing
        """
        try:
            data = await request.json()
        except ValueError:
            raise ValueError("Request body must be valid JSON")

        if not isinstance(data, dict):
            raise ValueError("Request body must be a JSON object")

        question = data.get("question")
        twin_id = data.get("twinId")
        if not isinstance(question, str) or not question.strip():
            raise ValueError("Question parameter is required")
        if not isinstance(twin_id, str) or not twin_id.strip():
            raise ValueError("Twin ID parameter is required")

        return question.strip(), twin_id.strip()

    async def _handle_process_question(self, request: web.Request) -> web.Response:
        """
        Answer a question for a twin.

        Expects JSON: {"question": "...", "twinId": "..."}
        """
        try:
            question, twin_id = await self._read_question(request)
        except ValueError as e:
            logger.warning(f"Rejected question request: {e}")
            return web.json_response({"success": False, "errorMessage": str(e)}, status=400)

        logger.info(f"Question received for twin {twin_id}")

        try:
            result = await self.orchestrator.route_question(question, twin_id)
        except Exception as e:
            logger.error(f"Error processing question: {e}", exc_info=True)
            return web.json_response(
                {"success": False, "errorMessage": str(e), "question": question, "twinId": twin_id},
                status=500,
            )

        return web.json_response(
            {
                "success": True,
                "result": result,
                "question": question,
                "twinId": twin_id,
                "processedAt": datetime.now(timezone.utc).isoformat(),
            }
        )

    async def _handle_classify_question(self, request: web.Request) -> web.Response:
        """Classify a question without answering it."""
        try:
            question, twin_id = await self._read_question(request)
        except ValueError as e:
            logger.warning(f"Rejected classification request: {e}")
            return web.json_response({"success": False, "errorMessage": str(e)}, status=400)

        try:
            classification = await self.orchestrator.classify_question(question, twin_id)
        except Exception as e:
            logger.error(f"Error classifying question: {e}", exc_info=True)
            return web.json_response({"success": False, "errorMessage": str(e)}, status=500)

        return web.json_response(classification_payload(classification))

    async def start(self):
        """Start the web server."""
        runner = web.AppRunner(self.app)
        await runner.setup()
        site = web.TCPSite(runner, "0.0.0.0", self.port)
        await site.start()
        logger.info(f"Web server started on port {self.port}")
        logger.info(f"Question endpoint: http://localhost:{self.port}/api/process-question")
        return runner

    async def stop(self, runner):
        """Stop the web server."""
        await runner.cleanup()
        logger.info("Web server stopped")
