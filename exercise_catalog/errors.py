"""Exception types shared by the pipeline and the query engine."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog failures."""


class FormatError(CatalogError, ValueError):
    """Raised when a source file has missing or malformed front matter."""

    def __init__(self, message: str, *, source_path: str | None = None) -> None:
        super().__init__(message)
        self.source_path = source_path


class RecordValidationError(CatalogError, ValueError):
    """Raised when an enriched record does not conform to the schema."""

    def __init__(
        self,
        message: str,
        *,
        source_path: str | None = None,
        record_id: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.source_path = source_path
        self.record_id = record_id
        self.errors = list(errors or [])


class NotFoundError(CatalogError, LookupError):
    """Raised when a query references a record that does not exist."""


class DatasetNotFoundError(NotFoundError):
    """Raised when no persisted dataset is available to serve."""


class BadRequestError(CatalogError, ValueError):
    """Raised when a query is missing a required parameter or has an invalid one."""


class DatasetReadError(CatalogError):
    """Raised when persisted artifacts exist but cannot be read."""
