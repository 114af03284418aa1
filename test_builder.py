"""
Tests for the duration codec, set builder and exercise assembler.
"""
import pytest

from liftlog.builder import ExerciseAssembler, SetBuilder
from liftlog.duration import format_duration, format_rest_time, parse_duration
from liftlog.exceptions import ValidationFailure
from liftlog.models import Modality


def _builder_with_sets(*reps, modality=Modality.WEIGHT_REPS) -> SetBuilder:
    b = SetBuilder(modality)
    for r in reps:
        b.reps = r
        assert b.add_set()
    return b


# ─── Duration codec ──────────────────────────────────────────────────────────

@pytest.mark.parametrize("m,s", [(0, 0), (0, 5), (1, 30), (12, 59), (125, 7)])
def test_duration_round_trip(m, s):
    ms = m * 60000 + s * 1000
    assert format_duration(ms) == f"{m}:{s:02d}"
    assert parse_duration(format_duration(ms)) == ms


@pytest.mark.parametrize("text", ["", "   ", "90", "1:2:3", "a:30", "1:xx", "-1:30"])
def test_parse_duration_malformed_is_none(text):
    assert parse_duration(text) is None


def test_parse_duration_lenient_forms():
    assert parse_duration(" 1:30 ") == 90000
    assert parse_duration(":45") == 45000
    assert parse_duration("2:") == 120000
    assert parse_duration("1:75") == 135000


def test_format_duration_drops_partial_seconds():
    assert format_duration(90999) == "1:30"


def test_format_duration_negative_rejected():
    with pytest.raises(ValueError):
        format_duration(-1000)


def test_format_rest_time():
    assert format_rest_time(90) == "1:30"
    assert format_rest_time(5) == "0:05"


# ─── add_set validation ──────────────────────────────────────────────────────

def test_weight_reps_requires_reps():
    b = SetBuilder()
    b.weight = 60.0
    assert b.add_set() is False
    assert len(b) == 0
    assert b.weight == 60.0  # staging untouched

    b.reps = 8
    assert b.add_set(rest_seconds=90) is True
    assert len(b) == 1
    s = b.sets[0]
    assert s.reps == 8 and s.weight == 60.0 and s.rest_seconds == 90


def test_add_set_clears_inputs_but_keeps_modality():
    b = SetBuilder(Modality.WEIGHT_REPS)
    b.reps, b.weight, b.rpe, b.notes, b.is_warmup = 5, 100.0, 8, "  tough ", True
    assert b.add_set()
    assert (b.reps, b.weight, b.rpe, b.notes, b.is_warmup) == (None, None, None, "", False)
    assert b.modality is Modality.WEIGHT_REPS
    assert b.sets[0].notes == "tough"
    assert b.sets[0].is_warmup is True


def test_time_requires_duration():
    b = SetBuilder(Modality.TIME)
    b.duration_input = ""
    assert b.add_set() is False
    assert len(b) == 0

    b.duration_input = "1:30"
    assert b.add_set() is True
    assert b.sets[0].duration_ms == 90000
    assert b.sets[0].reps == 0


def test_time_rejects_zero_duration():
    b = SetBuilder(Modality.TIME)
    b.duration_input = "0:00"
    assert b.add_set() is False


def test_distance_requires_positive_distance():
    b = SetBuilder(Modality.DISTANCE)
    b.distance = 0
    assert b.add_set() is False
    b.distance = 5.2
    assert b.add_set() is True
    assert b.sets[0].distance_m == 5.2


@pytest.mark.parametrize("modality", [Modality.BODYWEIGHT, Modality.ASSISTED])
def test_bodyweight_modalities_require_reps(modality):
    b = SetBuilder(modality)
    b.additional_weight = 10.0
    assert b.add_set() is False
    b.reps = 12
    assert b.add_set() is True
    s = b.sets[0]
    assert s.is_bodyweight is True
    assert s.additional_weight == 10.0


def test_additional_weight_dropped_for_weight_reps():
    b = SetBuilder()
    b.reps, b.additional_weight = 5, 10.0
    assert b.add_set()
    assert b.sets[0].additional_weight is None
    assert b.sets[0].is_bodyweight is False


def test_unset_numbers_become_absent():
    b = SetBuilder()
    b.reps, b.weight = 5, 0
    assert b.add_set()
    s = b.sets[0]
    assert s.weight is None and s.duration_ms is None and s.distance_m is None


@pytest.mark.parametrize("field,value", [("rpe", 11), ("rpe", 0), ("weight", -5.0), ("reps", -1)])
def test_range_checks(field, value):
    b = SetBuilder()
    b.reps = 5
    setattr(b, field, value)
    assert b.add_set() is False
    assert len(b) == 0


# ─── Editing recorded sets ───────────────────────────────────────────────────

def test_remove_set():
    b = _builder_with_sets(1, 2, 3)
    b.remove_set(1)
    assert [s.reps for s in b.sets] == [1, 3]


@pytest.mark.parametrize("index", [-1, 3])
def test_remove_set_out_of_range(index):
    b = _builder_with_sets(1, 2, 3)
    with pytest.raises(IndexError):
        b.remove_set(index)
    assert len(b) == 3


def test_copy_previous_set():
    b = SetBuilder(Modality.TIME)
    assert b.copy_previous_set() is False

    b.duration_input, b.weight, b.notes, b.is_dropset = "2:05", 20.0, "vest", True
    assert b.add_set()
    assert b.copy_previous_set() is True
    assert b.duration_input == "2:05"
    assert b.weight == 20.0
    assert b.notes == "vest"
    assert b.is_dropset is True
    assert b.add_set()
    assert len(b) == 2


def test_increment_weight():
    b = SetBuilder()
    b.increment_weight(2.5)
    assert b.weight == 2.5
    b.increment_weight(5)
    assert b.weight == 7.5


def test_toggle_set_done_is_presentation_only():
    b = _builder_with_sets(5)
    b.toggle_set_done(0)
    assert b.entries[0].done is True
    assert "done" not in b.sets[0].model_dump()
    b.toggle_set_done(0)
    assert b.entries[0].done is False


def test_update_set_number_moves_set():
    b = _builder_with_sets(1, 2, 3)
    b.update_set_number(0, 3)
    assert [s.reps for s in b.sets] == [2, 3, 1]
    b.update_set_number(2, 1)
    assert [s.reps for s in b.sets] == [1, 2, 3]


def test_update_set_number_out_of_range():
    b = _builder_with_sets(1, 2, 3)
    with pytest.raises(ValidationFailure):
        b.update_set_number(0, 5)
    with pytest.raises(ValidationFailure):
        b.update_set_number(0, 0)
    assert [s.reps for s in b.sets] == [1, 2, 3]


def test_update_set_number_same_position_is_noop():
    b = _builder_with_sets(1, 2, 3)
    b.update_set_number(0, 1)
    assert [s.reps for s in b.sets] == [1, 2, 3]


def test_done_flag_follows_moved_set():
    b = _builder_with_sets(1, 2)
    b.toggle_set_done(0)
    b.update_set_number(0, 2)
    assert [e.done for e in b.entries] == [False, True]


def test_update_set_reps():
    b = _builder_with_sets(5, 5)
    b.update_set_reps(1, 4)
    assert [s.reps for s in b.sets] == [5, 4]
    with pytest.raises(ValidationFailure):
        b.update_set_reps(0, -2)
    with pytest.raises(IndexError):
        b.update_set_reps(2, 3)


@pytest.mark.parametrize("value", [5.7, 0, 0.0])
def test_update_set_reps_rejects_invalid_counts(value):
    b = _builder_with_sets(5)
    with pytest.raises(ValidationFailure):
        b.update_set_reps(0, value)
    assert b.sets[0].reps == 5


def test_update_set_reps_accepts_whole_float_and_zero_for_time():
    b = _builder_with_sets(5)
    b.update_set_reps(0, 6.0)
    assert b.sets[0].reps == 6

    t = SetBuilder(Modality.TIME)
    t.duration_input = "0:45"
    assert t.add_set()
    t.update_set_reps(0, 3)
    t.update_set_reps(0, 0)
    assert t.sets[0].reps == 0


# ─── Exercise assembler ──────────────────────────────────────────────────────

def test_create_exercise_requires_name_and_sets():
    a = ExerciseAssembler()
    assert a.create_exercise() is None

    a.name = "Squat"
    assert a.create_exercise() is None

    a.name = "   "
    a.builder.reps = 5
    assert a.builder.add_set()
    assert a.create_exercise() is None


def test_create_exercise_snapshot():
    a = ExerciseAssembler()
    a.name = "  Squat "
    a.builder.reps, a.builder.weight = 5, 100.0
    assert a.builder.add_set()

    e = a.create_exercise()
    assert e is not None
    assert e.name == "Squat"
    assert e.modality is Modality.WEIGHT_REPS
    assert len(e.sets) == 1

    a.builder.update_set_reps(0, 8)
    a.builder.reps = 3
    a.builder.add_set()
    assert len(e.sets) == 1
    assert e.sets[0].reps == 5


def test_create_exercise_rejects_sets_from_other_modality():
    a = ExerciseAssembler()
    a.name = "Row"
    a.builder.reps = 10
    assert a.builder.add_set()
    a.modality = Modality.DISTANCE
    assert a.create_exercise() is None


def test_reset_exercise():
    a = ExerciseAssembler()
    a.name = "Run"
    a.modality = Modality.DISTANCE
    a.builder.distance = 3.0
    assert a.builder.add_set()
    a.builder.notes = "windy"

    a.reset_exercise()
    assert a.name == ""
    assert a.modality is Modality.WEIGHT_REPS
    assert len(a.builder) == 0
    assert a.builder.notes == ""
