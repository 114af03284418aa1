"""Wires the builder, session, rest timer and workout log together."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from liftlog.builder import ExerciseAssembler
from liftlog.client import WorkoutApiClient
from liftlog.exceptions import TransportError
from liftlog.models import Exercise, Workout
from liftlog.rest_timer import RestTimer
from liftlog.session import WorkoutLog, WorkoutSession

log = logging.getLogger("liftlog.tracker")

DEFAULT_REST_SECONDS = 90

_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def log_notification(message: str, level: str = "info") -> None:
    log.log(_LEVELS.get(level, logging.INFO), message)


class WorkoutTracker:
    def __init__(
        self,
        api: Optional[WorkoutApiClient] = None,
        notify: Callable[[str, str], None] = log_notification,
        default_rest_seconds: int = DEFAULT_REST_SECONDS,
        timer_interval: float = 1.0,
    ):
        self.notify = notify
        self.default_rest_seconds = default_rest_seconds
        self.session = WorkoutSession()
        self.assembler = ExerciseAssembler()
        self.workout_log = WorkoutLog(api or WorkoutApiClient())
        self.rest_timer = RestTimer(on_complete=self._rest_complete, interval=timer_interval)

    def _rest_complete(self) -> None:
        self.notify("Rest time complete!", "success")

    def start(self, name: str = "") -> None:
        self.session.start_workout()
        self.session.name = name
        self.assembler.reset_exercise()

    def add_set(self) -> bool:
        """Record the staged set; a working set starts the rest countdown."""
        is_warmup = self.assembler.builder.is_warmup
        rest = self.default_rest_seconds if self.default_rest_seconds > 0 else None
        if not self.assembler.builder.add_set(rest_seconds=rest):
            return False
        if not is_warmup and self.default_rest_seconds > 0:
            self.rest_timer.start(self.default_rest_seconds)
        return True

    def add_exercise(self) -> Optional[Exercise]:
        exercise = self.assembler.create_exercise()
        if exercise is None:
            return None
        self.session.add_exercise(exercise)
        self.assembler.reset_exercise()
        return exercise

    def cancel(self) -> None:
        self.session.cancel_workout()
        self.assembler.reset_exercise()
        self.rest_timer.pause()

    async def finish(self) -> Optional[Workout]:
        """Save the session. Returns the stored workout, or None when saving failed."""
        try:
            created = await self.session.finish_workout(self.workout_log)
        except TransportError:
            self.notify("Failed to save workout", "error")
            return None
        self.rest_timer.pause()
        self.notify("Workout saved successfully!", "success")
        return created
