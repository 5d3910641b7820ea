"""
Exceptions raised by the bracket sync engine.
"""


class BracketSyncError(Exception):
    """Base exception for all engine errors."""
    pass


class ValidationError(BracketSyncError):
    """Raised before any network call when a write cannot be attempted.

    Local state is never touched when this is raised.
    """
    def __init__(self, message: str, set_id: str | None = None):
        self.set_id = set_id
        if set_id:
            message = f"Set {set_id}: {message}"
        super().__init__(message)


class ConcurrentWriteError(ValidationError):
    """Raised when a save/submit is requested while another write for the same Set is outstanding."""
    pass


class NetworkError(BracketSyncError):
    """Raised when a request to start.gg fails or returns an unusable response."""
    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class AuthenticationError(NetworkError):
    """Raised when no API credential is available for a request."""
    pass
