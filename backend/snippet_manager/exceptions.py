"""
Snippet Manager Backend — Custom Exception Hierarchy
======================================================

What:  Application-specific exceptions for every failure a request can hit.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching HTTP status.
Who:   Raised by the storage adapter and the repository; caught by handlers.

Exception Hierarchy:
    SnippetManagerError (base)
    ├── DecodeError              → 400 Bad Request (malformed body)
    ├── ValidationError          → 400 Bad Request (both fields empty)
    ├── InvalidIdentifierError   → 400 Bad Request (id is not an ObjectId)
    ├── NotFoundError            → 404 Not Found
    ├── StoreError               → 500 Internal Server Error
    ├── StorageConnectionError   → fatal at startup
    ├── DisconnectError          → logged at shutdown
    └── ConfigurationError       → fatal at startup

None of these are retried: each one is terminal for the request that raised it.
"""

from typing import Any, Dict, Optional


class SnippetManagerError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Human-readable error description (returned in API responses)
        context:  Additional debug info (logged, and selectively exposed)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class DecodeError(SnippetManagerError):
    """
    Raised when a request body cannot be decoded into a snippet payload.

    When:    Invalid JSON, a JSON value that is not an object, or a field
             with the wrong type (e.g. a number for `code`).
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "The request body could not be decoded",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(SnippetManagerError):
    """
    Raised when client input fails the presence check.

    When:    Both `snippetname` and `code` are empty on create or update.
             Either one alone being empty is accepted.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Either the snippet name or the code must be provided",
            "details": {"fields": ["snippetname", "code"]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        fields: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if fields:
            ctx["fields"] = list(fields)
        super().__init__(message=message, context=ctx)
        self.fields = fields or []


class InvalidIdentifierError(SnippetManagerError):
    """
    Raised when a path identifier is not a well-formed ObjectId hex string.

    HTTP:    400 Bad Request
    Raised before storage is contacted.
    """

    def __init__(
        self,
        identifier: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["identifier"] = identifier
        super().__init__(message="The id is invalid", context=ctx)
        self.identifier = identifier


class NotFoundError(SnippetManagerError):
    """
    Raised when no stored document matches the request.

    When:    GET by a name nobody used, PUT/DELETE on an id that matches nothing.
    HTTP:    404 Not Found

    The storage adapter reports a missing document as None (or a zero count);
    the repository converts that into this exception.
    """

    def __init__(
        self,
        resource: str = "snippet",
        lookup: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if lookup:
            message = f"{resource} '{lookup}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if lookup:
            ctx["lookup"] = lookup
        super().__init__(message=message, context=ctx)


class StoreError(SnippetManagerError):
    """
    Raised when a document-store operation fails.

    When:    Network failure, server selection timeout, write error, etc.
    HTTP:    500 Internal Server Error

    The raw driver message travels in context["reason"] and is returned
    to the client under details.reason.
    """

    def __init__(
        self,
        message: str = "A storage error occurred",
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if reason:
            ctx["reason"] = reason
        super().__init__(message=message, context=ctx)
        self.reason = reason


class StorageConnectionError(SnippetManagerError):
    """Raised when the initial connection to MongoDB cannot be established."""

    def __init__(
        self,
        message: str = "Could not connect to MongoDB",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DisconnectError(SnippetManagerError):
    """Raised when closing the MongoDB client fails."""

    def __init__(
        self,
        message: str = "Could not close the MongoDB connection",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(SnippetManagerError):
    """Raised when required settings (MONGODB_URI) are missing at startup."""
