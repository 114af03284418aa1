"""Lift-Log data models.

Shared by the client-side builders and the HTTP API. Field names are snake_case
in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import IntEnum
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Modality(IntEnum):
    WEIGHT_REPS = 1
    TIME = 2
    DISTANCE = 3
    BODYWEIGHT = 4
    ASSISTED = 5


# Primary metric per modality: (wire field, predicate over a WorkoutSet).
PRIMARY_METRICS: Dict[Modality, tuple[str, Callable[["WorkoutSet"], bool]]] = {
    Modality.WEIGHT_REPS: ("reps", lambda s: s.reps > 0),
    Modality.TIME: ("durationMs", lambda s: bool(s.duration_ms)),
    Modality.DISTANCE: ("distanceM", lambda s: (s.distance_m or 0) > 0),
    Modality.BODYWEIGHT: ("reps", lambda s: s.reps > 0),
    Modality.ASSISTED: ("reps", lambda s: s.reps > 0),
}

LOADED_BODYWEIGHT = (Modality.BODYWEIGHT, Modality.ASSISTED)


def missing_primary_metric(modality: Modality, s: "WorkoutSet") -> Optional[str]:
    """Return the name of the required field ``s`` lacks for ``modality``, or None."""
    field, present = PRIMARY_METRICS[Modality(modality)]
    return None if present(s) else field


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",  # e.g. the UI-only "done" flag
    )


class WorkoutSet(_WireModel):
    """One performed set. Which metric is mandatory depends on the parent exercise."""
    id: Optional[str] = None
    reps: int = Field(0, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    rpe: Optional[int] = Field(None, ge=1, le=10)
    duration_ms: Optional[int] = Field(None, ge=0)
    distance_m: Optional[float] = Field(None, ge=0)
    is_warmup: bool = False
    is_dropset: bool = False
    is_failure: bool = False
    is_bodyweight: bool = False
    additional_weight: Optional[float] = None
    notes: Optional[str] = None
    rest_seconds: Optional[int] = Field(None, ge=0)


class Exercise(_WireModel):
    id: Optional[str] = None
    name: str
    modality: Modality = Modality.WEIGHT_REPS
    sets: List[WorkoutSet] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("exercise name cannot be empty")
        return v

    @field_validator("modality", mode="before")
    @classmethod
    def default_modality(cls, v):
        return Modality.WEIGHT_REPS if v is None else v

    @model_validator(mode="after")
    def check_sets(self) -> "Exercise":
        if not self.sets:
            raise ValueError(f"exercise '{self.name}' has no sets")
        for i, s in enumerate(self.sets, start=1):
            missing = missing_primary_metric(self.modality, s)
            if missing:
                raise ValueError(
                    f"set {i} of '{self.name}' is missing {missing} "
                    f"required for {self.modality.name}"
                )
        return self


class Workout(_WireModel):
    id: Optional[str] = None
    date: Optional[datetime] = None
    name: Optional[str] = None
    exercises: List[Exercise]

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("date")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("exercises")
    @classmethod
    def require_exercises(cls, v: List[Exercise]) -> List[Exercise]:
        if not v:
            raise ValueError("workout must contain at least one exercise")
        return v

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
