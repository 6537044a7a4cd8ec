"""Error taxonomy for maintenance operations.

Every error carries the HTTP status the web layer answers with, so request
handlers only need to catch the base class.
"""


class MaintenanceError(Exception):
    """Base class for all domain errors."""

    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(MaintenanceError):
    """A required field is missing or malformed."""

    http_status = 400


class Unauthenticated(MaintenanceError):
    """No authenticated user accompanies the request."""

    http_status = 401


class Unauthorized(MaintenanceError):
    """The requesting user does not own the target vehicle."""

    http_status = 403


class NotFound(MaintenanceError):
    """The target vehicle does not exist."""

    http_status = 404


class ConflictError(MaintenanceError):
    """A duplicate record was rejected by the store."""

    http_status = 409


class ValidationError(MaintenanceError):
    """A domain rule was violated."""

    http_status = 422


class StoreError(MaintenanceError):
    """The backing store failed or is unreachable."""

    http_status = 503
