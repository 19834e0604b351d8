from __future__ import annotations


class StorageError(Exception):
    pass


class ValidationError(StorageError, ValueError):
    """Input rejected by a repository before anything was written.

    ``errors`` lists the offending fields as ``{"field": ..., "message": ...}``.
    """

    def __init__(self, message: str, errors: list[dict[str, str]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])


class StorageUnavailable(StorageError):
    """The backing store cannot be reached or the repository is not open."""
