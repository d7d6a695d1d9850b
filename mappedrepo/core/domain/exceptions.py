"""Base repository exceptions.

All repository failures are unchecked: every exception here derives from
``RuntimeError`` through ``RepositoryError``. Subclasses set ``error_code`` to
identify the failure kind.
"""

from typing import Any


class RepositoryError(RuntimeError):
    """Raised when a repository operation fails.

    Wraps lower-level exceptions (driver errors, mapper errors) so callers only
    have to handle one failure kind. The original exception is kept as
    ``__cause__``.
    """

    error_code: str = "REPOSITORY_ERROR"

    def __init__(self, message: str = "A repository error occurred"):
        self.message = message
        super().__init__(self.message)


class EntityNotFoundError(RepositoryError):
    """Raised when an entity that must exist is not found."""

    error_code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: Any | None = None):
        message = f"{entity_type} not found"
        if entity_id is not None:
            message = f"{entity_type} with id '{entity_id}' not found"
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message)


class IncorrectResultSizeError(RepositoryError):
    """Raised when a query expected at most one result but got more."""

    error_code = "INCORRECT_RESULT_SIZE"

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Incorrect result size: expected {expected}, actual {actual}")


class DataIntegrityError(RepositoryError):
    """Raised when a write violates a storage constraint."""

    error_code = "DATA_INTEGRITY"
