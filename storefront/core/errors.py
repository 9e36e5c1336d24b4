"""Application error kinds.

Every failure the services raise is one of these. The API layer renders them
into the error envelope using ``status_code``; storage errors never leave a
repository without being wrapped into one of them first.
"""
from typing import Any, Optional


class AppError(Exception):
    status_code = 500
    default_message = 'internal server error'

    def __init__(self, message: Optional[str] = None, errors: Any = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class NotFoundError(AppError):
    status_code = 404
    default_message = 'resource not found'

    def __init__(self, entity: str, id: Any):
        self.entity = entity
        self.id = id
        super().__init__(f'{entity} with ID {id} not found')


class InvalidInputError(AppError):
    status_code = 400
    default_message = 'invalid input'


class ConflictError(AppError):
    status_code = 409
    default_message = 'conflict'

    def __init__(self, entity: str, field: str, value: Any):
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f'{entity} with {field} {value} already exists')


class UnauthorizedError(AppError):
    status_code = 401
    default_message = 'unauthorized access'


class ForbiddenError(AppError):
    status_code = 403
    default_message = 'access forbidden'


class InternalError(AppError):
    status_code = 500
    default_message = 'internal server error'

    def __init__(self, cause: Optional[BaseException] = None, message: Optional[str] = None):
        self.cause = cause
        super().__init__(message)


class DeadlineExceededError(InternalError):
    status_code = 504
    default_message = 'deadline exceeded'
