"""
Snippet Manager Backend — Pydantic Request/Response Schemas
=============================================================

What:  Pydantic models defining the API contract with clients.
How:   FastAPI validates request bodies against these models, serializes
       responses through them, and generates the OpenAPI docs from them.

Schemas are kept apart from the storage model (models/snippet.py):
the wire carries `id` as a hex string and `created_at` in snake_case,
while the stored document uses `_id` and `createdAt`.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What clients send
# ══════════════════════════════════════════════════════════════════════════


class SnippetWrite(BaseModel):
    """
    What:  Body of POST / and PUT /{codeid}.
    Both fields are optional and default to an empty string; the
    repository rejects the request only when BOTH are empty.
    A JSON null counts as an empty string. Unknown keys (e.g. an `id`
    echoed back by a client) are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    snippetname: StrictStr = Field(default="", description="Free-text label for the snippet")
    code: StrictStr = Field(default="", description="Snippet body")

    @field_validator("snippetname", "code", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return "" if v is None else v


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns
# ══════════════════════════════════════════════════════════════════════════


class CodeSnippet(BaseModel):
    """
    What:  Wire representation of one snippet.
    Who:   Returned inside `data` by GET /{snippet_name} and GET /.
    """

    id: str = Field(description="Snippet identifier (24-char hex ObjectId)")
    snippetname: str = Field(description="Snippet label")
    code: str = Field(description="Snippet body")
    created_at: datetime = Field(description="When the snippet was created (UTC ISO 8601)")


class SnippetResponse(BaseModel):
    """GET /{snippet_name} → {"data": {...}}"""

    data: CodeSnippet


class SnippetListResponse(BaseModel):
    """GET / → {"data": [...]} (storage order, unpaginated)"""

    data: List[CodeSnippet]


class SnippetCreatedResponse(BaseModel):
    """POST / → 201 {"message", "snippet_id"}"""

    message: str = Field(default="Snippet created successfully")
    snippet_id: str = Field(description="Identifier generated for the new snippet")


class MessageResponse(BaseModel):
    """PUT and DELETE success body."""

    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for every failure.

    Fields:
        error: Machine-readable code (e.g. "not_found", "store_error")
        message: Human-readable description
        details: Extra context; store failures carry the raw driver text in `reason`
        request_id: Correlation ID for this request in server logs

    Example:
        {
            "error": "store_error",
            "message": "Failed to fetch snippets",
            "details": {"reason": "localhost:27017: [Errno 111] Connection refused"},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """GET /health body."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="MongoDB connectivity: connected, disconnected")
    lifecycle: str = Field(description="Server lifecycle state")
    uptime_seconds: float = Field(description="Seconds since service started")
