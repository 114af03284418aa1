"""Workout repositories.

``WorkoutStore`` is the contract the HTTP layer depends on. Two backends:
an in-memory list (the default) and SQLAlchemy 2.x async over any async URL.
Both assign ids and dates on create and hand out copies, never their own rows.
"""

from __future__ import annotations

import abc
import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    asc,
    desc,
    func,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from liftlog.models import Exercise, Modality, Workout, WorkoutSet

log = logging.getLogger("liftlog.store")


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _assign_identity(workout: Workout) -> Workout:
    """Copy ``workout`` with fresh ids throughout and a date if it has none."""
    return workout.model_copy(
        deep=True,
        update={
            "id": _new_id(),
            "date": workout.date or _utcnow(),
            "exercises": [
                e.model_copy(
                    deep=True,
                    update={
                        "id": _new_id(),
                        "sets": [s.model_copy(update={"id": _new_id()}) for s in e.sets],
                    },
                )
                for e in workout.exercises
            ],
        },
    )


class WorkoutStore(abc.ABC):
    name = "abstract"

    async def init(self) -> None:
        pass

    async def close(self) -> None:
        pass

    @abc.abstractmethod
    async def create(self, workout: Workout) -> Workout:
        """Store ``workout`` under a new id and return the stored value."""

    @abc.abstractmethod
    async def list(self) -> List[Workout]:
        """All workouts, most recent date first, ties in insertion order."""

    @abc.abstractmethod
    async def get(self, workout_id: str) -> Optional[Workout]:
        """The workout with ``workout_id``, or None."""

    @abc.abstractmethod
    async def count(self) -> int:
        ...


# -----------------------------------------------------------------------------
# In-memory
# -----------------------------------------------------------------------------
class InMemoryWorkoutStore(WorkoutStore):
    name = "memory"

    def __init__(self):
        self._workouts: List[Workout] = []
        self._lock = asyncio.Lock()

    async def create(self, workout: Workout) -> Workout:
        stored = _assign_identity(workout)
        async with self._lock:
            self._workouts.append(stored)
        return stored.model_copy(deep=True)

    async def list(self) -> List[Workout]:
        # sorted() is stable, and reverse=True keeps equal keys in original order
        ordered = sorted(self._workouts, key=lambda w: w.date, reverse=True)
        return [w.model_copy(deep=True) for w in ordered]

    async def get(self, workout_id: str) -> Optional[Workout]:
        for w in self._workouts:
            if w.id == workout_id:
                return w.model_copy(deep=True)
        return None

    async def count(self) -> int:
        return len(self._workouts)


# -----------------------------------------------------------------------------
# SQLAlchemy
# -----------------------------------------------------------------------------
class Base(DeclarativeBase):
    pass


class WorkoutRow(Base):
    __tablename__ = "workout"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, index=True, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False)  # naive UTC
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    exercises: Mapped[List["ExerciseRow"]] = relationship(
        back_populates="workout",
        order_by="ExerciseRow.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class ExerciseRow(Base):
    __tablename__ = "exercise"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    workout_seq: Mapped[int] = mapped_column(ForeignKey("workout.seq"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    modality: Mapped[int] = mapped_column(Integer, nullable=False, default=int(Modality.WEIGHT_REPS))

    workout: Mapped[WorkoutRow] = relationship(back_populates="exercises")
    sets: Mapped[List["SetRow"]] = relationship(
        back_populates="exercise",
        order_by="SetRow.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class SetRow(Base):
    __tablename__ = "workout_set"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    exercise_seq: Mapped[int] = mapped_column(ForeignKey("exercise.seq"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    rpe: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    duration_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    distance_m: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    is_warmup: Mapped[bool] = mapped_column(Boolean, default=False)
    is_dropset: Mapped[bool] = mapped_column(Boolean, default=False)
    is_failure: Mapped[bool] = mapped_column(Boolean, default=False)
    is_bodyweight: Mapped[bool] = mapped_column(Boolean, default=False)
    additional_weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    rest_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    exercise: Mapped[ExerciseRow] = relationship(back_populates="sets")


_SET_FIELDS = [
    "id", "reps", "weight", "rpe", "duration_ms", "distance_m", "is_warmup",
    "is_dropset", "is_failure", "is_bodyweight", "additional_weight", "notes",
    "rest_seconds",
]


def _to_row(w: Workout) -> WorkoutRow:
    return WorkoutRow(
        id=w.id,
        date=w.date.astimezone(timezone.utc).replace(tzinfo=None),
        name=w.name,
        exercises=[
            ExerciseRow(
                id=e.id,
                position=i,
                name=e.name,
                modality=int(e.modality),
                sets=[
                    SetRow(position=j, **s.model_dump(include=set(_SET_FIELDS)))
                    for j, s in enumerate(e.sets)
                ],
            )
            for i, e in enumerate(w.exercises)
        ],
    )


def _row_to_model(row: WorkoutRow) -> Workout:
    return Workout(
        id=row.id,
        date=row.date.replace(tzinfo=timezone.utc),
        name=row.name,
        exercises=[
            Exercise(
                id=e.id,
                name=e.name,
                modality=Modality(e.modality),
                sets=[WorkoutSet(**{f: getattr(s, f) for f in _SET_FIELDS}) for s in e.sets],
            )
            for e in row.exercises
        ],
    )


class SqlWorkoutStore(WorkoutStore):
    name = "sql"

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine = create_async_engine(url, echo=echo)
        self.async_session = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def init(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    async def create(self, workout: Workout) -> Workout:
        stored = _assign_identity(workout)
        async with self.async_session() as s:
            s.add(_to_row(stored))
            await s.commit()
        return stored

    async def list(self) -> List[Workout]:
        async with self.async_session() as s:
            result = await s.execute(
                select(WorkoutRow).order_by(desc(WorkoutRow.date), asc(WorkoutRow.seq))
            )
            rows = result.scalars().all()
            return [_row_to_model(r) for r in rows]

    async def get(self, workout_id: str) -> Optional[Workout]:
        async with self.async_session() as s:
            result = await s.execute(select(WorkoutRow).where(WorkoutRow.id == workout_id))
            row = result.scalar()
            return _row_to_model(row) if row else None

    async def count(self) -> int:
        async with self.async_session() as s:
            result = await s.execute(select(func.count()).select_from(WorkoutRow))
            return int(result.scalar_one())
