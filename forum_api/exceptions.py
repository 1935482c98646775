"""
Domain errors raised by the forum services.

Each carries the HTTP status the API layer answers with; the handlers in
``forum_api.main`` turn them into ``{"detail": message}`` responses.
"""
from fastapi import status


class ForumError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ForumError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing required fields"


class AuthError(ForumError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class ForbiddenError(ForumError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(ForumError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(ForumError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InternalError(ForumError):
    pass
