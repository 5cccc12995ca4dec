from __future__ import annotations
"""Error taxonomy shared by the console service and its callers."""


class ConsoleError(Exception):
    """Base class for failures surfaced by :class:`S3ConsoleService`.

    Carries the operation name and the bucket/key (or prefix) it touched so
    callers can report something actionable without inspecting the cause.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        bucket: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.bucket = bucket
        self.key = key

    def __str__(self) -> str:
        parts = [self.message]
        if self.operation:
            parts.append(f"operation={self.operation}")
        if self.bucket:
            parts.append(f"bucket={self.bucket}")
        if self.key:
            parts.append(f"key={self.key}")
        return " ".join(parts)


class InvalidArgument(ConsoleError, ValueError):
    """Raised before any store call when an identifier fails a shape check."""


class NotFound(ConsoleError):
    """Raised when the store reports a missing bucket or object."""


class StoreUnavailable(ConsoleError):
    """Raised for network, authentication or backend failures."""


class Cancelled(ConsoleError):
    """Raised when the caller's cancellation token fired mid-operation."""
