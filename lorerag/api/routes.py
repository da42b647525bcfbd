"""FastAPI routes for LoreRAG.

Service dependencies are resolved from ``app.state`` (populated at startup
by ``lorerag.main``) via ``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                    Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/lore/lookup         GET     Ranked hybrid search hits
# /api/v1/lore/ask            GET     Grounded answer + source hits
# /api/v1/ingest              POST    Ingest a directory of Markdown
# /api/v1/health              GET     Database + embedding checks
# /api/v1/health/ready        GET     503 unless every check passes
# /api/v1/health/live         GET     Process is up
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from lorerag import __version__
from lorerag.api.schemas import HealthResponse, IngestRequest
from lorerag.interfaces.chunk_store import IChunkStore
from lorerag.models.lore import AnswerResponse, IngestionResult, SearchResponse
from lorerag.services.embedding_gateway import EmbeddingGateway
from lorerag.services.ingestion.ingestion_service import IngestionService
from lorerag.services.retrieval.answer_service import AnswerService
from lorerag.services.retrieval.retriever import HybridRetriever
from lorerag.utils.errors import LoreRAGError
from lorerag.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_HEALTH_CHECK_TEXT = "health check"


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_retriever(request: Request) -> HybridRetriever:
    return request.app.state.retriever


def _get_answer_service(request: Request) -> AnswerService:
    return request.app.state.answer_service


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_store(request: Request) -> IChunkStore:
    return request.app.state.store


def _get_embedding_gateway(request: Request) -> EmbeddingGateway:
    return request.app.state.embedding_gateway


RetrieverDep = Annotated[HybridRetriever, Depends(_get_retriever)]
AnswerServiceDep = Annotated[AnswerService, Depends(_get_answer_service)]
IngestionServiceDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
StoreDep = Annotated[IChunkStore, Depends(_get_store)]
EmbeddingGatewayDep = Annotated[EmbeddingGateway, Depends(_get_embedding_gateway)]


# ---------------------------------------------------------------------------
# Lore
# ---------------------------------------------------------------------------


@router.get(
    "/lore/lookup",
    response_model=SearchResponse,
    summary="Hybrid search over the knowledge base",
)
async def lookup(
    retriever: RetrieverDep,
    q: Annotated[str | None, Query(description="Search query, 1-500 characters")] = None,
    k: Annotated[int | None, Query(description="Number of hits, 1-20 (default 6)")] = None,
) -> SearchResponse:
    return await retriever.lookup(q or "", k)


@router.get(
    "/lore/ask",
    response_model=AnswerResponse,
    summary="Answer a question from the knowledge base",
)
async def ask(
    answer_service: AnswerServiceDep,
    q: Annotated[str | None, Query(description="Question, 1-500 characters")] = None,
    k: Annotated[int | None, Query(description="Number of sources, 1-20 (default 6)")] = None,
) -> AnswerResponse:
    return await answer_service.ask(q or "", k)


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


@router.post(
    "/ingest",
    response_model=IngestionResult,
    summary="Ingest every Markdown file under a directory",
)
async def ingest(body: IngestRequest, service: IngestionServiceDep) -> IngestionResult:
    return await service.ingest_directory(body.path)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


async def _run_checks(
    store: IChunkStore,
    gateway: EmbeddingGateway,
) -> tuple[dict[str, bool], int | None]:
    checks: dict[str, bool] = {"database": await store.ping()}
    chunks: int | None = None
    if checks["database"]:
        try:
            chunks = await store.count()
        except LoreRAGError as exc:
            _logger.warning("health_count_failed", error=str(exc))

    # The Ollama availability check is a blocking HTTP call.
    if not await asyncio.to_thread(gateway.is_available):
        _logger.warning("health_embedding_unavailable", provider=gateway.provider_name)
        checks["embeddings"] = False
        return checks, chunks

    try:
        await gateway.embed(_HEALTH_CHECK_TEXT)
        checks["embeddings"] = True
    except LoreRAGError as exc:
        _logger.warning("health_embedding_failed", error=str(exc))
        checks["embeddings"] = False
    return checks, chunks


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(store: StoreDep, gateway: EmbeddingGatewayDep) -> JSONResponse:
    """Report database and embedding health; 503 when the database is down."""
    checks, chunks = await _run_checks(store, gateway)

    if all(checks.values()):
        status = "healthy"
    elif checks["database"]:
        status = "degraded"
    else:
        status = "unhealthy"

    body = HealthResponse(status=status, version=__version__, checks=checks, chunks=chunks)
    return JSONResponse(
        status_code=503 if status == "unhealthy" else 200,
        content=body.model_dump(),
    )


@router.get("/health/ready", summary="Readiness probe")
async def readiness(store: StoreDep, gateway: EmbeddingGatewayDep) -> JSONResponse:
    checks, _ = await _run_checks(store, gateway)
    ready = all(checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "not_ready", "checks": checks},
    )


@router.get("/health/live", summary="Liveness probe")
async def liveness() -> dict[str, str]:
    return {"status": "alive"}
