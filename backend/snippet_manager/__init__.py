"""
Snippet Manager Backend — Application Package Initializer
==========================================================

What: Marks the `snippet_manager` directory as a Python package.
Who:  Used by uvicorn (`snippet_manager.main:app`), pytest and the console entry point.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │        Routes (HTTP handlers)       │  ← status codes, JSON bodies
    ├─────────────────────────────────────┤
    │   SnippetRepository (services/)     │  ← validation, wire ↔ storage mapping
    ├─────────────────────────────────────┤
    │     Models & Schemas (pydantic)     │  ← storage document + API contract
    ├─────────────────────────────────────┤
    │     MongoStorage (storage.py)       │  ← one collection, motor client
    └─────────────────────────────────────┘

    Each layer receives the one below it explicitly (FastAPI dependencies),
    so there is no process-wide connection global.
"""

__version__ = "1.0.0"
