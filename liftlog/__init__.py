"""Lift-Log: gym workout logging client state and HTTP API."""

from liftlog.builder import ExerciseAssembler, SetBuilder
from liftlog.client import WorkoutApiClient
from liftlog.duration import format_duration, format_rest_time, parse_duration
from liftlog.exceptions import LiftLogError, SessionError, TransportError, ValidationFailure
from liftlog.models import Exercise, Modality, Workout, WorkoutSet
from liftlog.rest_timer import RestTimer
from liftlog.session import SessionState, WorkoutLog, WorkoutSession
from liftlog.tracker import WorkoutTracker

__all__ = [
    "SetBuilder", "ExerciseAssembler",
    "WorkoutApiClient",
    "parse_duration", "format_duration", "format_rest_time",
    "LiftLogError", "ValidationFailure", "SessionError", "TransportError",
    "Workout", "Exercise", "WorkoutSet", "Modality",
    "RestTimer",
    "WorkoutSession", "WorkoutLog", "SessionState",
    "WorkoutTracker",
]
__version__ = "1.0.0"
