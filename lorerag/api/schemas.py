"""Pydantic request/response schemas for the LoreRAG API.

Lookup and answer endpoints return the domain envelopes from
``lorerag.models`` directly; this module holds the shapes that exist only
at the HTTP boundary.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class IngestRequest(BaseModel):
    """Directory to ingest, as seen by the server process."""

    path: str = Field(..., min_length=1)


class HealthResponse(BaseModel):
    """Application health check response.

    ``status`` is ``healthy`` when every check passes, ``degraded`` when
    the database is up but embeddings are not, and ``unhealthy`` when the
    database is down.
    """

    status: str
    version: str
    checks: dict[str, bool]
    chunks: int | None = None


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
