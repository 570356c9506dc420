"""AppMate client exceptions."""

import json
from typing import Any


class AppmateError(Exception):
    """Base exception for AppMate errors."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class MalformedResourceError(AppmateError, ValueError):
    """Host string, table name or record path failed validation."""

    pass


class DuplicateCredentialsError(AppmateError, ValueError):
    """Credentials were given both in the host string and as arguments."""

    pass


class TransportError(AppmateError):
    """The HTTP exchange failed before a response was received."""

    pass


class UnexpectedStatusError(AppmateError):
    """The server answered with a status the operation does not accept.

    Args:
        status_code: HTTP status code of the response.
        reason: Status text sent with the code.
        body: Raw response body, kept for server-side validation detail.
    """

    def __init__(self, status_code: int, reason: str, body: str):
        super().__init__(
            f"unexpected response status: {status_code} {reason}".rstrip(),
            str(status_code),
        )
        self.status_code = status_code
        self.reason = reason
        self.body = body

    @property
    def detail(self) -> Any:
        """The ``detail`` member of a JSON error body, if there is one."""
        try:
            data = json.loads(self.body)
        except ValueError:
            return None
        if isinstance(data, dict):
            return data.get("detail")
        return None


class NotFoundError(UnexpectedStatusError):
    """The addressed resource does not exist (404)."""

    pass


class TypeMismatchError(AppmateError, TypeError):
    """A typed record accessor could not coerce the stored value."""

    pass


class UnsupportedOperationError(AppmateError):
    """An operation was called without its precondition being met."""

    pass


class MalformedResponseError(AppmateError):
    """A successful response did not carry the expected JSON document."""

    pass
