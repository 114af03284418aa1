"""Client-side set entry and exercise assembly.

``SetBuilder`` stages the fields of the next set and keeps the sets already
recorded for one exercise. ``ExerciseAssembler`` adds the exercise name and
turns the builder's sets into an ``Exercise`` value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import ValidationError

from liftlog.duration import format_duration, parse_duration
from liftlog.exceptions import ValidationFailure
from liftlog.models import (
    LOADED_BODYWEIGHT,
    Exercise,
    PRIMARY_METRICS,
    Modality,
    WorkoutSet,
    missing_primary_metric,
)

log = logging.getLogger("liftlog.builder")


@dataclass
class SetEntry:
    """A recorded set plus its presentation-only completion flag."""
    set: WorkoutSet
    done: bool = False


def _check_index(index: int, length: int) -> None:
    if index < 0 or index >= length:
        raise IndexError(f"set index {index} out of range (0..{length - 1})")


class SetBuilder:
    def __init__(self, modality: Modality = Modality.WEIGHT_REPS):
        self.modality = Modality(modality)
        self.entries: List[SetEntry] = []
        self.clear_inputs()

    # -------------------------------------------------------------------------
    # Staging
    # -------------------------------------------------------------------------
    def clear_inputs(self) -> None:
        self.reps: Optional[int] = None
        self.weight: Optional[float] = None
        self.duration_input: str = ""
        self.distance: Optional[float] = None
        self.rpe: Optional[int] = None
        self.notes: str = ""
        self.additional_weight: Optional[float] = None
        self.is_warmup = False
        self.is_dropset = False
        self.is_failure = False

    @property
    def sets(self) -> List[WorkoutSet]:
        return [e.set for e in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def _staged_set(self, rest_seconds: Optional[int]) -> Optional[WorkoutSet]:
        """Build a set from the staging fields, or None if they don't validate."""
        for value in (self.reps, self.weight, self.distance, rest_seconds):
            if value is not None and value < 0:
                return None
        if self.rpe is not None and not 1 <= self.rpe <= 10:
            return None

        loaded = self.modality in LOADED_BODYWEIGHT
        try:
            candidate = WorkoutSet(
                reps=self.reps or 0,
                weight=self.weight or None,
                rpe=self.rpe,
                duration_ms=parse_duration(self.duration_input),
                distance_m=self.distance or None,
                is_warmup=self.is_warmup,
                is_dropset=self.is_dropset,
                is_failure=self.is_failure,
                is_bodyweight=loaded,
                additional_weight=self.additional_weight if loaded else None,
                notes=self.notes.strip() or None,
                rest_seconds=rest_seconds,
            )
        except ValidationError:
            return None
        if missing_primary_metric(self.modality, candidate):
            return None
        return candidate

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------
    def add_set(self, rest_seconds: Optional[int] = None) -> bool:
        """Append the staged set if it validates for the current modality.

        Returns False and leaves the staging fields as they were when it doesn't.
        """
        s = self._staged_set(rest_seconds)
        if s is None:
            log.debug(f"Rejected staged set for {self.modality.name}")
            return False
        self.entries.append(SetEntry(s))
        self.clear_inputs()
        return True

    def remove_set(self, index: int) -> None:
        _check_index(index, len(self.entries))
        del self.entries[index]

    def copy_previous_set(self) -> bool:
        if not self.entries:
            return False
        last = self.entries[-1].set
        self.reps = last.reps or None
        self.weight = last.weight
        self.duration_input = format_duration(last.duration_ms) if last.duration_ms else ""
        self.distance = last.distance_m
        self.rpe = last.rpe
        self.notes = last.notes or ""
        self.additional_weight = last.additional_weight
        self.is_warmup = last.is_warmup
        self.is_dropset = last.is_dropset
        self.is_failure = last.is_failure
        return True

    def increment_weight(self, delta: float) -> None:
        self.weight = (self.weight or 0) + delta

    def toggle_set_done(self, index: int) -> None:
        _check_index(index, len(self.entries))
        entry = self.entries[index]
        entry.done = not entry.done

    def update_set_number(self, old_index: int, new_set_number: int) -> None:
        """Move the set at ``old_index`` to the 1-based position ``new_set_number``.

        Moving a set onto its own position does nothing.
        """
        count = len(self.entries)
        if new_set_number < 1 or new_set_number > count:
            raise ValidationFailure(f"Set number must be between 1 and {count}")
        _check_index(old_index, count)
        new_index = new_set_number - 1
        if new_index == old_index:
            return
        entry = self.entries.pop(old_index)
        self.entries.insert(new_index, entry)

    def update_set_reps(self, index: int, new_reps: int) -> None:
        _check_index(index, len(self.entries))
        if int(new_reps) != new_reps:
            raise ValidationFailure("Reps must be a whole number")
        if new_reps < 0:
            raise ValidationFailure("Reps cannot be negative")
        if new_reps == 0 and PRIMARY_METRICS[self.modality][0] == "reps":
            raise ValidationFailure("Reps must be greater than zero")
        entry = self.entries[index]
        entry.set = entry.set.model_copy(update={"reps": int(new_reps)})


class ExerciseAssembler:
    def __init__(self):
        self.name = ""
        self.builder = SetBuilder()

    @property
    def modality(self) -> Modality:
        return self.builder.modality

    @modality.setter
    def modality(self, value: Modality) -> None:
        self.builder.modality = Modality(value)

    def create_exercise(self) -> Optional[Exercise]:
        """Snapshot the current name, modality and sets, or None if incomplete."""
        if not self.name.strip() or not self.builder.entries:
            return None
        try:
            return Exercise(
                name=self.name,
                modality=self.modality,
                sets=[s.model_copy(deep=True) for s in self.builder.sets],
            )
        except ValidationError as e:
            # Sets recorded under a different modality than the one now selected.
            log.info(f"Exercise '{self.name.strip()}' not created: {e.errors()[0]['msg']}")
            return None

    def reset_exercise(self) -> None:
        self.name = ""
        self.builder = SetBuilder()
