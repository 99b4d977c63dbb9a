"""Exception classes for keyset pagination.

Every error raised by the library derives from ``AppException`` so that the
HTTP layer can render it as an RFC 7807 problem detail without knowing the
concrete kind.

Taxonomy:
    InvalidArgumentError   bad connection arguments or sort specification (400)
    MalformedCursorError   cursor that does not decode to a valid key (400)
    DataSourceError        failure reported by an ordered query executor (503)
    CursorEncodeError      row value that cannot be packed into a cursor (500)
"""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    Follows RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
        raise AppException(
            status_code=400,
            detail="Cursor is not valid",
            type="malformed-cursor",
            extra={"cursor": "abc"},
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            status_code: HTTP status code.
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title for HTTP status code."""
        titles = {
            400: "Bad Request",
            422: "Unprocessable Entity",
            500: "Internal Server Error",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")


class BadRequestException(AppException):
    """Exception raised for malformed requests."""

    def __init__(
        self,
        detail: str,
        type: str = "bad-request",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=400,
            detail=detail,
            type=type,
            title="Bad Request",
            instance=instance,
            extra=extra,
        )


class InvalidArgumentError(BadRequestException):
    """Raised when connection arguments or a sort specification are invalid.

    Always raised while an engine is being constructed, before the data
    source is touched.

    Example:
        raise InvalidArgumentError(
            "first and last must not be included at the same time",
            extra={"first": 2, "last": 2},
        )
    """

    def __init__(
        self,
        detail: str,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            detail=detail,
            type="invalid-argument",
            instance=instance,
            extra=extra,
        )


class MalformedCursorError(BadRequestException):
    """Raised when a cursor does not decode to a well-formed cursor key.

    Covers corrupt payloads, unknown type markers and keys whose arity does
    not match the active sort specification.
    """

    def __init__(
        self,
        detail: str,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            detail=detail,
            type="malformed-cursor",
            instance=instance,
            extra=extra,
        )


class ServiceUnavailableException(AppException):
    """Exception raised when a backing service is temporarily unavailable."""

    def __init__(
        self,
        detail: str,
        type: str = "service-unavailable",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=503,
            detail=detail,
            type=type,
            title="Service Unavailable",
            instance=instance,
            extra=extra,
        )


class DataSourceError(ServiceUnavailableException):
    """Raised by executor adapters when the underlying store fails.

    The pagination engine never raises or wraps this itself; it only lets
    it through. Adapters chain the driver exception with ``raise ... from``.

    Example:
        try:
            result = await session.execute(stmt)
        except SQLAlchemyError as e:
            raise DataSourceError(
                "Query failed",
                extra={"operation": "fetch"},
            ) from e
    """

    def __init__(
        self,
        detail: str,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            detail=detail,
            type="data-source-error",
            instance=instance,
            extra=extra,
        )


class InternalServerException(AppException):
    """Exception raised for internal server errors."""

    def __init__(
        self,
        detail: str,
        type: str = "internal-error",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=500,
            detail=detail,
            type=type,
            title="Internal Server Error",
            instance=instance,
            extra=extra,
        )


class CursorEncodeError(InternalServerException, TypeError):
    """Raised when a sort key holds a value the cursor codec cannot encode."""

    def __init__(
        self,
        detail: str,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            detail=detail,
            type="cursor-encode-error",
            extra=extra,
        )


__all__ = [
    "AppException",
    "BadRequestException",
    "CursorEncodeError",
    "DataSourceError",
    "InternalServerException",
    "InvalidArgumentError",
    "MalformedCursorError",
    "ServiceUnavailableException",
]
