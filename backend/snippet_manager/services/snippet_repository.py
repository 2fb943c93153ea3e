"""
Snippet Manager Backend — Snippet Repository
==============================================

What:  Business rules for snippets plus the wire ↔ storage conversion.
How:   Validates input, builds CodeSnippetModel documents, and calls the
       injected MongoStorage. Storage "misses" (None or a zero count) are
       turned into NotFoundError here, keeping HTTP concerns out of storage.
Who:   Constructed per request by dependencies.get_snippet_repository().

Validation order for update/delete:
    1. identifier must parse as an ObjectId  → InvalidIdentifierError
    2. (update only) name and code not both empty → ValidationError
    3. only then is storage contacted
"""

import logging
from typing import List

from bson import ObjectId
from bson.errors import InvalidId

from snippet_manager.exceptions import (
    InvalidIdentifierError,
    NotFoundError,
    ValidationError,
)
from snippet_manager.models.snippet import CodeSnippetModel
from snippet_manager.schemas.snippet import CodeSnippet
from snippet_manager.storage import MongoStorage

logger = logging.getLogger(__name__)

# Earliest-created document wins when several share a name
_NAME_LOOKUP_ORDER = [("createdAt", 1), ("_id", 1)]


class SnippetRepository:
    """
    CRUD over the snippet collection.

    Responsibilities:
        - create(): presence check, id/timestamp generation, insert
        - get_by_name(): exact-match lookup on the (non-unique) name
        - get_all(): every stored snippet
        - update_by_id(): replace name and code of one snippet
        - delete_by_id(): remove one snippet permanently
    """

    def __init__(self, storage: MongoStorage):
        self.storage = storage

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def parse_identifier(value: str) -> ObjectId:
        """
        Convert a path parameter into an ObjectId.

        Surrounding whitespace is ignored. Anything that is not a
        24-character hex string raises InvalidIdentifierError.
        """
        candidate = (value or "").strip()
        try:
            return ObjectId(candidate)
        except (InvalidId, TypeError) as e:
            raise InvalidIdentifierError(identifier=candidate) from e

    @staticmethod
    def _validate_content(snippetname: str, code: str) -> None:
        if snippetname == "" and code == "":
            raise ValidationError(
                message="Either the snippet name or the code must be provided",
                fields=["snippetname", "code"],
            )

    # ── Operations ────────────────────────────────────────────────────────

    async def create(self, snippetname: str, code: str) -> str:
        """
        Persist a new snippet and return its identifier as a hex string.

        Raises:
            ValidationError: both fields empty (nothing is written)
            StoreError: insert failed
        """
        self._validate_content(snippetname, code)

        model = CodeSnippetModel(snippetname=snippetname, code=code)
        inserted_id = await self.storage.insert_one(model.to_document())

        logger.info("Snippet created: %s (name=%r)", inserted_id, snippetname)
        return str(inserted_id)

    async def get_by_name(self, snippetname: str) -> CodeSnippet:
        """
        Fetch one snippet whose name matches exactly.

        Raises:
            NotFoundError: no snippet has this name
            StoreError: query failed
        """
        document = await self.storage.find_one(
            {"snippetname": snippetname},
            sort=_NAME_LOOKUP_ORDER,
        )
        if document is None:
            raise NotFoundError(resource="snippet", lookup=snippetname)
        return CodeSnippetModel.from_document(document).to_wire()

    async def get_all(self) -> List[CodeSnippet]:
        """Every stored snippet, in storage order."""
        documents = await self.storage.find_many({})
        return [CodeSnippetModel.from_document(d).to_wire() for d in documents]

    async def update_by_id(self, snippet_id: str, snippetname: str, code: str) -> int:
        """
        Replace the name and code of the snippet with this id.

        `_id` and `createdAt` are never part of the update document.

        Returns:
            modified count (0 when the stored values were already identical)

        Raises:
            InvalidIdentifierError: malformed id
            ValidationError: both fields empty
            NotFoundError: no snippet has this id
            StoreError: update failed
        """
        object_id = self.parse_identifier(snippet_id)
        self._validate_content(snippetname, code)

        matched, modified = await self.storage.update_one(
            {"_id": object_id},
            {"$set": {"snippetname": snippetname, "code": code}},
        )
        if matched == 0:
            raise NotFoundError(resource="snippet", lookup=str(object_id))

        logger.info("Snippet %s updated: %d document(s) modified", object_id, modified)
        return modified

    async def delete_by_id(self, snippet_id: str) -> int:
        """
        Permanently remove the snippet with this id.

        Raises:
            InvalidIdentifierError: malformed id
            NotFoundError: nothing was deleted
            StoreError: delete failed
        """
        object_id = self.parse_identifier(snippet_id)

        deleted = await self.storage.delete_one({"_id": object_id})
        if deleted == 0:
            raise NotFoundError(resource="snippet", lookup=str(object_id))

        logger.info("Snippet %s deleted", object_id)
        return deleted
