"""Lift-Log exceptions."""


class LiftLogError(Exception):
    """Base exception for Lift-Log errors."""
    pass


class ValidationFailure(LiftLogError):
    """Raised when a client-side edit is rejected by a presence or range check."""
    pass


class SessionError(LiftLogError):
    """Raised when a workout session operation is called in the wrong state."""
    pass


class TransportError(LiftLogError):
    """Raised when a call to the workouts API fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
