from __future__ import annotations


class UssdError(Exception):
    """Base class for caller-facing USSD failures."""

    code = "ussd_error"
    status = 500


class RequestError(UssdError):
    """The request was rejected before any session state was touched."""

    code = "invalid_request"
    status = 400


class MissingFieldError(RequestError):
    code = "missing_field"

    def __init__(self, *fields: str):
        self.fields = fields
        super().__init__("Missing " + " or ".join(fields))


class EmptyFieldError(RequestError):
    code = "empty_field"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"'{field}' must not be empty")


class MalformedRequestError(RequestError):
    code = "malformed_request"

    def __init__(self, message: str = "Invalid request body"):
        super().__init__(message)


class SessionNotFoundError(UssdError):
    code = "session_not_found"
    status = 404

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__("Session not found or expired")


class MenuConfigError(ValueError):
    """Raised when a menu tree document has the wrong shape."""
