# Services package init
"""
Snippet Manager Backend — Services Layer
==========================================

What:  Business logic sitting between routes (HTTP) and storage (MongoDB).
How:   Services receive their storage dependency explicitly and return
       wire models or raise application exceptions.

Service Inventory:
    - SnippetRepository: validation, id/timestamp generation, and
      wire ↔ storage conversion for code snippets
"""
