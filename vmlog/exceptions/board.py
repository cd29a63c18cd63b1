# vmlog/exceptions/board.py
"""Board error taxonomy.

These are raised by the CRUD layer and by the client-side gateway alike, and
rendered to JSON by ``board_exception_handler``.
"""
from fastapi import status


class BoardError(Exception):
    """Base class for board failures"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Board operation failed"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthorized(BoardError):
    """No authenticated actor for a mutating call"""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class TaskValidationError(BoardError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Invalid task data"


class TaskNotFound(BoardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Task not found"


class TaskNotArchived(BoardError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Task is not archived"


class SchemaMismatch(BoardError):
    """The deployed schema lacks a column this operation needs"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Database schema does not support this operation yet"


class TransientStoreError(BoardError):
    """Network or database failure; the caller should resynchronise"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Task store temporarily unavailable"


STATUS_ERRORS = {
    status.HTTP_401_UNAUTHORIZED: Unauthorized,
    status.HTTP_404_NOT_FOUND: TaskNotFound,
    status.HTTP_422_UNPROCESSABLE_ENTITY: TaskValidationError,
}


ERRORS_BY_NAME = {
    error_cls.__name__: error_cls
    for error_cls in (Unauthorized, TaskValidationError, TaskNotFound, TaskNotArchived, SchemaMismatch, TransientStoreError)
}


def error_for_status(status_code: int, detail: str = None, error_type: str = None) -> BoardError:
    """Map an error response back onto the board taxonomy.

    ``error_type`` (set by ``board_exception_handler``) wins; otherwise the
    status code decides, with an unqualified 409 read as ``TaskNotArchived``.
    """
    if error_type in ERRORS_BY_NAME:
        return ERRORS_BY_NAME[error_type](detail)
    if status_code == status.HTTP_409_CONFLICT:
        return TaskNotArchived(detail)
    error_cls = STATUS_ERRORS.get(status_code, TransientStoreError)
    return error_cls(detail)
