"""
Snippet Manager Backend — FastAPI Dependencies
================================================

What:  Providers that hand the shared storage adapter and a repository to
       route handlers.
How:   The lifespan stores the connected MongoStorage on app.state; these
       functions read it back per request. Tests replace them through
       app.dependency_overrides.

Example usage in a route:
    @router.get("/")
    async def get_all(repository: SnippetRepository = Depends(get_snippet_repository)):
        return await repository.get_all()
"""

from fastapi import Depends, Request

from snippet_manager.exceptions import StoreError
from snippet_manager.services.snippet_repository import SnippetRepository
from snippet_manager.storage import MongoStorage


def get_storage(request: Request) -> MongoStorage:
    """Return the storage adapter created at startup."""
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise StoreError(
            message="The storage connection is not open",
            reason="the application has not finished starting",
        )
    return storage


def get_snippet_repository(
    storage: MongoStorage = Depends(get_storage),
) -> SnippetRepository:
    """Build a repository bound to the shared storage adapter."""
    return SnippetRepository(storage)
