"""Error types raised by folio operations."""

from typing import Any


class FolioError(RuntimeError):
    """Base error for failed user-facing operations."""

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        status_code: int | None = None,
        detail: Any = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
        self.detail = detail


class ValidationError(FolioError):
    """A required field is missing or empty. Raised before any backend call."""


class ConflictError(FolioError):
    """A uniqueness constraint rejected the write."""


class UnauthorizedError(FolioError):
    """The operation needs a signed-in identity."""


class BackendError(FolioError):
    """Any other failure reported by the backing store or transport."""


class NotFoundError(BackendError):
    """The requested row does not exist."""


class BucketNotFoundError(BackendError):
    """The storage bucket has not been provisioned."""

    def __init__(self, bucket: str, **kwargs: Any) -> None:
        super().__init__(
            f"Storage bucket '{bucket}' not found. Create a public bucket named "
            f"'{bucket}' in the Supabase dashboard (Storage > New bucket).",
            **kwargs,
        )
        self.bucket = bucket


def require(value: str | None, field: str, *, operation: str = "") -> str:
    """Return the stripped value or raise ValidationError when it is blank."""
    stripped = (value or "").strip()
    if not stripped:
        raise ValidationError(f"{field} is required", operation=operation)
    return stripped
