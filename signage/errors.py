"""Domain errors raised by services and rendered by the API layer."""


class SignageError(Exception):
    """Base class. `status_code` is the HTTP status the API responds with."""

    status_code = 500
    kind = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ValidationError(SignageError):
    status_code = 400
    kind = "validation_error"


class AuthError(SignageError):
    status_code = 401
    kind = "unauthorized"


class ForbiddenError(SignageError):
    status_code = 403
    kind = "forbidden"


class NotFoundError(SignageError):
    status_code = 404
    kind = "not_found"


class ConflictError(SignageError):
    status_code = 409
    kind = "conflict"


class InvalidStateError(SignageError):
    status_code = 409
    kind = "invalid_state"


class EmptyPlaylistError(SignageError):
    """No eligible advertisement to show. Raised on the display client."""

    kind = "empty_playlist"
