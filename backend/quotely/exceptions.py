"""
Quotely Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for each error scenario.
Why:   Services raise domain errors; global handlers in main.py translate them
       into HTTP status codes and a consistent JSON body. Internal details
       stay in `context`, which is logged but never returned.

Exception Hierarchy:
    QuotelyError (base)
    ├── ValidationError        → 400 Bad Request (blank/missing field)
    ├── ConflictError          → 400 Bad Request (email already registered)
    ├── AuthFailureError       → 401 Unauthorized (bad login)
    ├── UnauthenticatedError   → 401 Unauthorized (missing/invalid/expired token)
    ├── NotFoundError          → 404 Not Found (absent OR owned by someone else)
    └── DatabaseError          → 500 Internal Server Error

All errors are terminal for the request. Nothing in the core retries.
"""

from typing import Any, Dict, Optional


class QuotelyError(Exception):
    """
    Base exception for all Quotely application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(QuotelyError):
    """
    Raised when client input fails a business rule.

    HTTP: 400. Used for blank email/password on registration and blank quote
    text. Schema-level problems (wrong JSON types) still go through FastAPI's
    own 422 handling.
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


class ConflictError(QuotelyError):
    """
    Raised when a unique resource already exists.

    HTTP: 400 (existing clients expect Bad Request for a taken email).
    Also raised when the database's unique constraint rejects the losing side
    of two concurrent registrations, so callers never see IntegrityError.
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthFailureError(QuotelyError):
    """
    Raised when login credentials do not match.

    The message never says whether the email or the password was wrong,
    so the endpoint cannot be used to enumerate accounts.
    """

    def __init__(
        self,
        message: str = "Invalid email or password",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthenticatedError(QuotelyError):
    """Raised when a protected request has no usable bearer token."""

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(QuotelyError):
    """
    Raised when a requested resource does not exist for the caller.

    A quote owned by another user is reported exactly like a missing one.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(QuotelyError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Constraint
        names, SQL and driver messages are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
