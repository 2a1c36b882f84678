"""
core/errors.py -- Domain error taxonomy for the catalog API.

Service code raises these; api/main.py translates every CatalogError into a
`{"error": message}` body with the matching status code. Keeping the status
code on the exception lets auth/ and catalog/ stay free of FastAPI imports.

Unauthorized (no usable session) and Forbidden (authenticated, but neither
owner nor admin) are deliberately separate classes: callers must never
collapse one into the other.
"""


class CatalogError(Exception):
    """Base class for errors that map to a client-visible HTTP status."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CatalogError):
    status_code = 400
    default_message = "Bad Request"


class Unauthorized(CatalogError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(CatalogError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(CatalogError):
    status_code = 404
    default_message = "Not Found"


class Conflict(CatalogError):
    status_code = 409
    default_message = "Conflict"
