"""Workout session lifecycle and the client's list of saved workouts."""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from liftlog.client import WorkoutApiClient
from liftlog.exceptions import SessionError, TransportError
from liftlog.models import Exercise, Workout

log = logging.getLogger("liftlog.session")


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"


class WorkoutLog:
    """Workouts known to the client, newest first."""

    def __init__(self, api: WorkoutApiClient):
        self.api = api
        self.workouts: List[Workout] = []
        self.loading = False
        self.error: Optional[str] = None

    async def refresh(self) -> None:
        self.loading = True
        self.error = None
        try:
            self.workouts = await self.api.list_workouts()
        except TransportError as e:
            self.error = "Failed to load workouts"
            log.error(f"Error loading workouts: {e}")
        finally:
            self.loading = False

    async def create(self, workout: Workout) -> Workout:
        self.error = None
        try:
            created = await self.api.create_workout(workout)
        except TransportError as e:
            self.error = "Failed to create workout"
            log.error(f"Error creating workout: {e}")
            raise
        self.workouts.insert(0, created)
        return created


class WorkoutSession:
    """The in-progress workout: an optional name and the exercises added so far."""

    def __init__(self):
        self.state = SessionState.NOT_STARTED
        self.name = ""
        self.exercises: List[Exercise] = []
        self.finishing = False

    @property
    def is_started(self) -> bool:
        return self.state is SessionState.IN_PROGRESS

    def _require_started(self, action: str) -> None:
        if not self.is_started:
            raise SessionError(f"Cannot {action}: no workout in progress")

    def _require_editable(self, action: str) -> None:
        self._require_started(action)
        if self.finishing:
            raise SessionError(f"Cannot {action} while the workout is being saved")

    def start_workout(self) -> None:
        self.state = SessionState.IN_PROGRESS
        self.exercises = []

    def add_exercise(self, exercise: Exercise) -> None:
        self._require_editable("add exercise")
        self.exercises.append(exercise)

    def remove_exercise(self, index: int) -> None:
        self._require_editable("remove exercise")
        if index < 0 or index >= len(self.exercises):
            raise IndexError(f"exercise index {index} out of range")
        del self.exercises[index]

    def cancel_workout(self) -> None:
        if self.finishing:
            raise SessionError("Cannot cancel while the workout is being saved")
        self._reset()

    def build_payload(self) -> Workout:
        return Workout(
            name=self.name.strip() or None,
            exercises=[e.model_copy(deep=True) for e in self.exercises],
        )

    async def finish_workout(self, workout_log: WorkoutLog) -> Workout:
        """Save the workout through ``workout_log`` and reset the session.

        On ``TransportError`` the session is left exactly as it was and the error
        propagates, so the caller can retry.
        """
        self._require_started("finish workout")
        if not self.exercises:
            raise SessionError("Cannot finish a workout with no exercises")
        if self.finishing:
            raise SessionError("Workout is already being saved")

        payload = self.build_payload()
        self.finishing = True
        try:
            created = await workout_log.create(payload)
        finally:
            self.finishing = False
        self._reset()
        return created

    def _reset(self) -> None:
        self.state = SessionState.NOT_STARTED
        self.exercises = []
        self.name = ""
