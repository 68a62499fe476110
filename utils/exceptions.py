"""
Custom Exception Classes for shippost

This module defines custom exceptions for better error handling and
categorization of failures across the application.
"""

from typing import List, Optional


class ShippostError(Exception):
    """Base exception for all shippost application errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(ShippostError):
    """Raised when configuration validation fails or required settings are missing."""
    pass


# =============================================================================
# Validation Errors (recoverable locally, the screen does not change)
# =============================================================================

class ValidationError(ShippostError):
    """Base exception for invalid user input."""
    pass


class EmptyTextError(ValidationError):
    """Raised when a post has no text and no media."""

    def __init__(self, message: str = "Post cannot be empty"):
        super().__init__(message)


class TooLongError(ValidationError):
    """Raised when a post exceeds the character limit."""

    def __init__(self, length: int, limit: int):
        self.length = length
        self.limit = limit
        super().__init__(f"Post exceeds {limit} characters ({length})")


class UnsupportedMediaTypeError(ValidationError):
    """Raised when a media file extension is not an allowed image type."""

    def __init__(self, extension: str, message: Optional[str] = None):
        self.extension = extension
        super().__init__(message or f"Unsupported file type: {extension or '(none)'}")


class EmptyQueryError(ValidationError):
    """Raised when a free-text query is submitted empty."""

    def __init__(self, message: str = "Query cannot be empty"):
        super().__init__(message)


class ThreadLimitError(ValidationError):
    """Raised when adding a post would exceed the thread cap."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Threads are limited to {limit} posts")


class MediaLimitError(ValidationError):
    """Raised when attaching media would exceed the per-post cap."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Each post can have at most {limit} images")


class InvalidCommitHashError(ValidationError):
    """Raised when a commit hash does not look like a hex object name."""
    pass


# =============================================================================
# Capability Errors (detected once at startup)
# =============================================================================

class CapabilityUnavailableError(ShippostError):
    """Base exception for missing environment capabilities."""
    pass


class NotARepositoryError(CapabilityUnavailableError):
    """Raised when the working directory is not inside a git repository."""

    def __init__(self, message: str = "Not a git repository"):
        super().__init__(message)


class OracleUnavailableError(CapabilityUnavailableError):
    """Raised when the drafting oracle binary cannot be located."""
    pass


# =============================================================================
# Background Task Failures
# =============================================================================

class TaskFailureError(ShippostError):
    """Base exception for failures of background work."""
    pass


class CommitLoadError(TaskFailureError):
    """Raised when git history cannot be read."""
    pass


class NoCommitsError(TaskFailureError):
    """Raised when the repository has no commits to show."""

    def __init__(self, message: str = "No commits found"):
        super().__init__(message)


class OracleError(TaskFailureError):
    """Raised when the drafting oracle exits with a failure."""

    def __init__(self, diagnostic: str):
        self.diagnostic = diagnostic
        super().__init__(f"Claude error: {diagnostic}")


class RemoteError(TaskFailureError):
    """Raised when the X API rejects a request."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class MediaUploadError(TaskFailureError):
    """Raised when media upload fails."""
    pass


class ThreadPostError(TaskFailureError):
    """Raised when a thread fails partway through publishing.

    Attributes:
        index: 1-based position of the post that failed.
        posted: Posts that were published before the failure.
        cause: The underlying error.
    """

    def __init__(self, index: int, posted: List, cause: Exception):
        self.index = index
        self.posted = posted
        self.cause = cause
        super().__init__(f"Failed to post thread item {index}: {cause}")
