"""
Snippet Manager Backend — Snippet Storage Model
=================================================

What:  Pydantic model mirroring one document in the `code-snippets` collection.
How:   Field aliases carry the on-disk key names (`_id`, `createdAt`);
       to_document()/from_document() convert to and from raw BSON dicts.
Who:   Built by SnippetRepository on create; decoded from every find.

Document shape:
    {
        "_id":         ObjectId("65a1..."),
        "createdAt":   ISODate("2024-01-15T12:00:00.123Z"),
        "snippetname": "hello",
        "code":        "print(1)"
    }

Lifecycle:
    1. Created by POST (one document per call); _id and createdAt set here
    2. snippetname/code replaced in place by PUT; _id and createdAt never touched
    3. Removed permanently by DELETE (no soft delete, no versions)
"""

from datetime import datetime, timezone
from typing import Any, Dict

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

from snippet_manager.schemas.snippet import CodeSnippet


def utc_now_millis() -> datetime:
    """Current UTC time truncated to milliseconds (BSON datetime precision)."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


class CodeSnippetModel(BaseModel):
    """Storage representation of a snippet."""

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    created_at: datetime = Field(default_factory=utc_now_millis, alias="createdAt")
    snippetname: str = ""
    code: str = ""

    def to_document(self) -> Dict[str, Any]:
        """Raw dict ready for insert_one (keys use storage aliases)."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "CodeSnippetModel":
        return cls.model_validate(document)

    def to_wire(self) -> CodeSnippet:
        """Convert to the API representation (id as hex string)."""
        return CodeSnippet(
            id=str(self.id),
            snippetname=self.snippetname,
            code=self.code,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return (
            f"<CodeSnippetModel(id={self.id}, snippetname='{self.snippetname}', "
            f"created_at='{self.created_at}')>"
        )
