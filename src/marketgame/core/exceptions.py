"""Custom exceptions for marketgame.

This module provides the exception hierarchy used by the CSV parsers and
the dashboard data service:
- Structured error information
- HTTP status code mapping for the rendering layer
- User-friendly error messages
- Machine-readable error codes
"""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    # General errors (1xxx)
    INTERNAL_ERROR = "MG1000"
    UNKNOWN_ERROR = "MG1001"
    CONFIGURATION_ERROR = "MG1002"

    # Data source errors (2xxx)
    DATA_UNAVAILABLE = "MG2000"
    PLAYER_DATA_UNAVAILABLE = "MG2001"
    INVALID_DATA_FORMAT = "MG2002"

    # Resource errors (3xxx)
    PLAYER_NOT_FOUND = "MG3000"

    # Roster integrity errors (4xxx)
    SLUG_COLLISION = "MG4000"


class MarketGameError(Exception):
    """Base exception for all marketgame errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code.
        http_status: HTTP status the rendering layer should answer with.
        details: Additional context for debugging.
        user_message: User-friendly message (may differ from message).
    """

    message: str = "An unexpected error occurred"
    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR
    http_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    user_message: str | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: ErrorCode | None = None,
        http_status: HTTPStatus | None = None,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.error_code = error_code or self.__class__.error_code
        self.http_status = http_status or self.__class__.http_status
        self.details = details or {}
        self.user_message = user_message or self.__class__.user_message or self.message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for error views.

        Returns:
            Dictionary with error information.
        """
        return {
            "error": {
                "code": self.error_code.value,
                "message": self.user_message,
                "details": self.details if self.details else None,
            }
        }

    def __str__(self) -> str:
        """String representation including error code."""
        return f"[{self.error_code.value}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code.value}, "
            f"http_status={self.http_status.value}, "
            f"details={self.details!r}"
            f")"
        )


class ConfigurationError(MarketGameError):
    """Invalid or inconsistent configuration."""

    message = "Invalid configuration"
    error_code = ErrorCode.CONFIGURATION_ERROR


# ============================================================================
# Data Source Exceptions
# ============================================================================


class DataUnavailableError(MarketGameError):
    """The leaderboard export is missing or unreadable.

    Every page needs the roster, so this is fatal for the whole dataset.
    """

    message = "Game data is unavailable"
    error_code = ErrorCode.DATA_UNAVAILABLE
    http_status = HTTPStatus.SERVICE_UNAVAILABLE
    user_message = "Results are not available right now"

    def __init__(
        self,
        message: str | None = None,
        *,
        path: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {}) or {}
        if path:
            details["path"] = path
        super().__init__(message, details=details, **kwargs)


class PlayerDataUnavailableError(DataUnavailableError):
    """A per-player export is missing or unreadable.

    Only the affected player's bundle fails; the roster stays usable.
    """

    message = "Player data is unavailable"
    error_code = ErrorCode.PLAYER_DATA_UNAVAILABLE
    http_status = HTTPStatus.NOT_FOUND
    user_message = "No data is available for this player"

    def __init__(
        self,
        message: str | None = None,
        *,
        player_name: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {}) or {}
        if player_name:
            details["player_name"] = player_name
        super().__init__(message, details=details, **kwargs)


class InvalidDataFormatError(MarketGameError):
    """A CSV export lacks columns the parser requires."""

    message = "Invalid data format"
    error_code = ErrorCode.INVALID_DATA_FORMAT
    http_status = HTTPStatus.UNPROCESSABLE_ENTITY

    def __init__(
        self,
        message: str | None = None,
        *,
        path: str | None = None,
        missing_columns: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {}) or {}
        if path:
            details["path"] = path
        if missing_columns:
            details["missing_columns"] = missing_columns
        super().__init__(message, details=details, **kwargs)


# ============================================================================
# Resource Exceptions
# ============================================================================


class PlayerNotFoundError(MarketGameError):
    """A player name that is not on the roster."""

    message = "Player not found"
    error_code = ErrorCode.PLAYER_NOT_FOUND
    http_status = HTTPStatus.NOT_FOUND

    def __init__(
        self,
        message: str | None = None,
        *,
        player_name: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {}) or {}
        if player_name:
            details["player_name"] = player_name
        super().__init__(message, details=details, **kwargs)


class SlugCollisionError(MarketGameError):
    """Two roster names produce the same slug."""

    message = "Player slugs are not unique"
    error_code = ErrorCode.SLUG_COLLISION

    def __init__(
        self,
        message: str | None = None,
        *,
        slug: str | None = None,
        names: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {}) or {}
        if slug:
            details["slug"] = slug
        if names:
            details["names"] = names
        super().__init__(message, details=details, **kwargs)


def get_http_status_for_exception(exc: Exception) -> HTTPStatus:
    """Get the HTTP status the rendering layer should use for an exception.

    Args:
        exc: The exception to map.

    Returns:
        Appropriate HTTP status code.
    """
    if isinstance(exc, MarketGameError):
        return exc.http_status
    if isinstance(exc, FileNotFoundError):
        return HTTPStatus.NOT_FOUND
    if isinstance(exc, ValueError):
        return HTTPStatus.BAD_REQUEST
    return HTTPStatus.INTERNAL_SERVER_ERROR
