"""
Foods API Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) map them to
       HTTP status codes and a structured JSON body.
Who:   Raised by services, the query builder and the collection layer.

Exception Hierarchy:
    FoodsApiError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── InvalidFilterSyntax      → 500 Internal Server Error
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class FoodsApiError(Exception):
    """
    Base exception for all Foods API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for 5xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(FoodsApiError):
    """
    Raised when client input fails a business rule.

    When:    Duplicate food name, missing upload, non-image upload, oversize file.
    HTTP:    400 Bad Request

    Schema-level problems (wrong JSON types, missing required fields) are
    rejected earlier by FastAPI with 422.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(FoodsApiError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found

    The message follows the API's established wording:
    "Food not found with id #<id>".
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        label = resource.capitalize()
        message = f"{label} not found"
        if resource_id:
            message = f"{label} not found with id #{resource_id}"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class InvalidFilterSyntax(FoodsApiError):
    """
    Raised when list filter parameters cannot be turned into a query.

    When:    Unknown comparison operator (`price[ne]=3`), malformed bracket
             key (`price[gt`), or a value the store cannot coerce to the
             field's type (`calories[gt]=abc`).
    HTTP:    500 Internal Server Error (generic body; details logged only)

    Unknown field names are NOT an error: filters on them match nothing,
    projection and sort skip them.
    """

    def __init__(
        self,
        message: str = "Filter parameters could not be parsed",
        parameter: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if parameter:
            ctx["parameter"] = parameter
        super().__init__(message=message, context=ctx)
        self.parameter = parameter


class FileStorageError(FoodsApiError):
    """
    Raised when writing or reading an uploaded photo fails.

    When:    Disk full, permission denied, upload directory missing.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "An error occurred during file upload",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(FoodsApiError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        SQL text and constraint names are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(FoodsApiError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
