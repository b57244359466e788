"""
Domain exceptions for EventHub.

Every exception carries the HTTP status it maps to; the handlers registered in
``eventhub.main`` turn them into ``{"error": message}`` responses.

Usage:
    from eventhub.core.exceptions import NotFoundError

    if not event:
        raise NotFoundError("Event not found")
"""


class EventHubError(Exception):
    """Base exception for all EventHub errors"""

    status_code: int = 500

    def __init__(self, message: str = "Server error"):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(EventHubError):
    """Malformed or missing input"""

    status_code = 400

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)


class AuthenticationError(EventHubError):
    """Missing, invalid or expired credential"""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(EventHubError):
    """Authenticated, but not allowed to touch this resource"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class NotFoundError(EventHubError):
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class ConflictError(EventHubError):
    """Duplicate RSVP, full event or an update the current RSVPs forbid.

    Reported as 400 because that is what existing clients expect.
    """

    status_code = 400

    def __init__(self, message: str = "Conflict"):
        super().__init__(message)


class RevisionConflictError(EventHubError):
    """A conditional write named a revision that is no longer current"""

    status_code = 409

    def __init__(self, message: str = "Document was modified concurrently, please retry"):
        super().__init__(message)


class StoreError(EventHubError):
    """Underlying persistence failure"""

    status_code = 500

    def __init__(self, message: str = "Database error"):
        super().__init__(message)
