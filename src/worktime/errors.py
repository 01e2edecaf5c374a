"""Error types shared by the submission pipeline and the HTTP layer."""


class HttpError(Exception):
    """An error that maps onto an HTTP status code.

    Args:
        message: Human-readable message sent back to the client
        status_code: HTTP status code for the response
    """

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(HttpError):
    """The submission violates a field constraint."""

    status_code = 422


class NotFoundError(HttpError):
    """A referenced object does not exist."""

    status_code = 404


class QuotaExceededError(HttpError):
    """The user has used up the submission quota."""

    status_code = 429


class MalformedTokenError(Exception):
    """A recommendation token does not have the shape of a token."""

    pass
