"""
TripFolders Backend — Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Typed exceptions let the request layer decide where to redirect and
       which message to show without comparing error strings.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch the terminal
       ones; routes catch the recoverable ones and redirect back to the form.
Who:   Raised by services, stores and the user directory.
When:  During request processing when an operation cannot proceed.

Exception Hierarchy:
    TripFoldersError (base)
    ├── AuthError                → redirect to "/" (terminal for the request)
    ├── InvalidOperationError    → redirect back to the originating form
    ├── ValidationError          → redirect back to the originating form
    ├── NotFoundError            → redirect to the folder list
    └── DatabaseError            → redirect to the folder list, generic message
"""

import enum
from typing import Any, Dict, Optional


class TripFoldersError(Exception):
    """
    Base exception for all TripFolders application errors.

    Attributes:
        message:  User-facing error description (safe to show in a view)
        context:  Additional debug info (logged but NOT shown to the user)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthError(TripFoldersError):
    """
    Raised when the identity token is missing, invalid, or expired.

    Raised by the user directory before any folder operation runs, so an
    AuthError never coexists with a partially applied change.
    """

    def __init__(
        self,
        message: str = "Please log in to continue.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class Rejection(str, enum.Enum):
    """
    Closed set of reasons an operation on a folder can be refused.

    The value is a stable machine-readable code; `message` is what the
    user sees.
    """

    REQUESTER_PRIVATE = "requester_private"
    MISSING_TARGET = "missing_target"
    INVALID_TARGET = "invalid_target"
    ALREADY_MEMBER = "already_member"
    NOT_MEMBER = "not_member"
    PRIVATE_ACCOUNT = "private_account"
    CONCURRENT_UPDATE = "concurrent_update"

    @property
    def message(self) -> str:
        return _REJECTION_MESSAGES[self]


_REJECTION_MESSAGES = {
    Rejection.REQUESTER_PRIVATE: (
        "User must be a shared account to add users. Please update account information."
    ),
    Rejection.MISSING_TARGET: "Please select a user to add.",
    Rejection.INVALID_TARGET: "Error adding selected user.",
    Rejection.ALREADY_MEMBER: "User selected is already added to current folder.",
    Rejection.NOT_MEMBER: "You are not a member of this trip folder.",
    Rejection.PRIVATE_ACCOUNT: (
        "User must be a shared account to access! Please update user information."
    ),
    Rejection.CONCURRENT_UPDATE: (
        "This trip folder was changed by someone else. Please try again."
    ),
}


class InvalidOperationError(TripFoldersError):
    """
    Raised when a membership or visibility rule refuses an operation.

    What:    A precondition of the membership engine was not met.
    When:    Adding a member, leaving a folder, listing folders, or touching a
             folder the requester does not belong to.
    Effect:  Recoverable. Nothing was written; the user is sent back to the
             form they came from with `reason.message`.
    """

    def __init__(
        self,
        reason: Rejection,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason.value
        super().__init__(message=reason.message, context=ctx)
        self.reason = reason


class ValidationError(TripFoldersError):
    """
    Raised when form input cannot be accepted.

    Examples: an empty folder name, an unparseable trip date, or an encoded
    image that is not valid JSON/base64.
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


class NotFoundError(TripFoldersError):
    """
    Raised when a folder, file, or user identifier does not resolve.

    SQLAlchemy returns None for missing rows; the stores convert None into
    this exception so callers never have to check for it.
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


class DatabaseError(TripFoldersError):
    """
    Raised when a database operation fails unexpectedly.

    Security Note:
        The message shown to the user is always generic. Details (statement,
        constraint name, driver error) are kept in `context` and logged
        server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
