"""
Snippet Manager Backend — Snippet Route Handlers
==================================================

What:  The five CRUD endpoints, mounted under settings.api_prefix
       (default /code-snippets).
How:   Each handler takes its input (body or path parameter), makes one
       SnippetRepository call and shapes the JSON response. Failures are
       raised as application exceptions and rendered by the global
       handlers in main.py.

Route Inventory:
    GET    /                 → list every snippet
    GET    /{snippet_name}   → fetch one snippet by name
    POST   /                 → create a snippet
    PUT    /{codeid}         → replace name and code of a snippet
    DELETE /{id}             → delete a snippet
"""

import logging

from fastapi import APIRouter, Depends, status

from snippet_manager.config import settings
from snippet_manager.dependencies import get_snippet_repository
from snippet_manager.schemas.snippet import (
    ErrorResponse,
    MessageResponse,
    SnippetCreatedResponse,
    SnippetListResponse,
    SnippetResponse,
    SnippetWrite,
)
from snippet_manager.services.snippet_repository import SnippetRepository

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix=settings.api_prefix, tags=["Snippets"])

_ERRORS = {
    400: {"description": "Malformed body, invalid id or empty snippet", "model": ErrorResponse},
    404: {"description": "Snippet not found", "model": ErrorResponse},
    500: {"description": "Storage error", "model": ErrorResponse},
}


@router.get(
    "/",
    response_model=SnippetListResponse,
    responses={500: _ERRORS[500]},
    summary="List every snippet",
)
async def get_all_snippets(
    repository: SnippetRepository = Depends(get_snippet_repository),
) -> SnippetListResponse:
    """Return all stored snippets in storage order (no pagination)."""
    snippets = await repository.get_all()
    return SnippetListResponse(data=snippets)


@router.get(
    "/{snippet_name}",
    response_model=SnippetResponse,
    responses={404: _ERRORS[404], 500: _ERRORS[500]},
    summary="Get a snippet by name",
    description=(
        "Exact match on the snippet name. Names are not unique; when several "
        "snippets share a name the earliest-created one is returned."
    ),
)
async def get_snippet(
    snippet_name: str,
    repository: SnippetRepository = Depends(get_snippet_repository),
) -> SnippetResponse:
    snippet = await repository.get_by_name(snippet_name)
    return SnippetResponse(data=snippet)


@router.post(
    "/",
    response_model=SnippetCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: _ERRORS[400], 500: _ERRORS[500]},
    summary="Create a snippet",
)
async def create_snippet(
    payload: SnippetWrite,
    repository: SnippetRepository = Depends(get_snippet_repository),
) -> SnippetCreatedResponse:
    """
    Create a snippet from `{snippetname, code}`.

    At least one of the two fields must be non-empty. The id and the
    creation time are generated server-side; client-supplied values for
    them are ignored.
    """
    snippet_id = await repository.create(payload.snippetname, payload.code)
    return SnippetCreatedResponse(message="Snippet created successfully", snippet_id=snippet_id)


@router.put(
    "/{codeid}",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Update a snippet's name and code",
)
async def update_snippet(
    codeid: str,
    payload: SnippetWrite,
    repository: SnippetRepository = Depends(get_snippet_repository),
) -> MessageResponse:
    """Replace name and code. The creation time and id never change."""
    await repository.update_by_id(codeid, payload.snippetname, payload.code)
    return MessageResponse(message="Snippet updated successfully")


@router.delete(
    "/{id}",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete a snippet",
)
async def delete_snippet(
    id: str,
    repository: SnippetRepository = Depends(get_snippet_repository),
) -> MessageResponse:
    await repository.delete_by_id(id)
    return MessageResponse(message="Code Snippet deleted successfully")


# The bare prefix is served too; a redirect would drop a POST body.
if settings.api_prefix:
    router.add_api_route(
        "",
        get_all_snippets,
        methods=["GET"],
        response_model=SnippetListResponse,
        include_in_schema=False,
    )
    router.add_api_route(
        "",
        create_snippet,
        methods=["POST"],
        response_model=SnippetCreatedResponse,
        status_code=status.HTTP_201_CREATED,
        include_in_schema=False,
    )
