"""Pitch script derivation.

Turns a coach's prescription (or, failing that, the generic workout
definition) into the ordered list of prescribed pitches a bullpen session
follows. Derivation runs once, before the session is created; the result is
frozen on the session afterwards.
"""

from __future__ import annotations

import math
import re
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field

from bullpen.sessions.metrics import Metric, find_metric, is_number, parse_metric_bag
from bullpen.sessions.schemas import DEFAULT_PITCH_TYPE, DEFAULT_TARGET_ZONE, ScriptItem

ZONE_PREFIX = "zone_"
# Zone text that parses as a number in the calendar app, radix literals and Infinity included
_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)
_RADIX_RE = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")
_INFINITY_RE = re.compile(r"[+-]?Infinity")


class PrescribedSet(BaseModel):
    """One set of a coach prescription."""

    set_number: int | None = None
    metrics: list[Metric] = Field(default_factory=list)


class ExercisePrescription(BaseModel):
    """Per-set prescription for one exercise of an assignment."""

    sets: list[PrescribedSet] = Field(default_factory=list)


class WorkoutSet(BaseModel):
    metrics: list[Metric] = Field(default_factory=list)


class WorkoutExercise(BaseModel):
    exercise_id: str | None = None
    sets: list[WorkoutSet] = Field(default_factory=list)


class WorkoutDefinition(BaseModel):
    """Generic workout flow: ordered exercises, each with ordered sets."""

    exercises: list[WorkoutExercise] = Field(default_factory=list)


def prescriptions_from_payload(payload: Mapping[str, Any] | None) -> dict[str, ExercisePrescription]:
    """Parse an assignment's ``prescriptions`` mapping.

    Expected shape: ``{exerciseKey: {"prescribedMetrics": [{"setNumber": 1, "metrics": {...}}]}}``.
    Entries without a list of prescribed sets contribute nothing.
    """
    prescriptions: dict[str, ExercisePrescription] = {}
    if not isinstance(payload, Mapping):
        return prescriptions

    for exercise_key, entry in payload.items():
        raw_sets = entry.get("prescribedMetrics") if isinstance(entry, Mapping) else None
        if not isinstance(raw_sets, list):
            continue
        sets = [
            PrescribedSet(
                set_number=raw_set.get("setNumber") if is_number(raw_set.get("setNumber")) else None,
                metrics=parse_metric_bag(raw_set.get("metrics") if isinstance(raw_set.get("metrics"), Mapping) else None),
            )
            for raw_set in raw_sets
            if isinstance(raw_set, Mapping)
        ]
        prescriptions[str(exercise_key)] = ExercisePrescription(sets=sets)
    return prescriptions


def workout_from_payload(payload: Mapping[str, Any] | None) -> WorkoutDefinition | None:
    """Parse a workout document's ``flow.exercises`` into a WorkoutDefinition."""
    if not isinstance(payload, Mapping):
        return None
    flow = payload.get("flow")
    raw_exercises = flow.get("exercises") if isinstance(flow, Mapping) else None
    if not isinstance(raw_exercises, list):
        return None

    exercises = []
    for raw_exercise in raw_exercises:
        if not isinstance(raw_exercise, Mapping):
            continue
        raw_sets = raw_exercise.get("sets")
        sets = [
            WorkoutSet(metrics=parse_metric_bag(raw_set.get("metrics") if isinstance(raw_set.get("metrics"), Mapping) else None))
            for raw_set in (raw_sets if isinstance(raw_sets, list) else [])
            if isinstance(raw_set, Mapping)
        ]
        exercise_id = raw_exercise.get("exercise_id")
        exercises.append(WorkoutExercise(exercise_id=str(exercise_id) if exercise_id is not None else None, sets=sets))
    return WorkoutDefinition(exercises=exercises)


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _expand_count(count: float) -> int:
    """Number of pitches a count expands to; fractions round up, non-positive is zero."""
    if not math.isfinite(count) or count <= 0:
        return 0
    return math.ceil(count)


def _is_numeric_text(text: str) -> bool:
    stripped = text.strip()
    if not stripped:
        # Blank text reads as zero
        return True
    return any(pattern.fullmatch(stripped) for pattern in (_DECIMAL_RE, _RADIX_RE, _INFINITY_RE))


def normalize_target_zone(zone: str) -> str:
    """Prefix numeric zones (``"3"`` -> ``"zone_3"``, ``"1e3"`` -> ``"zone_1e3"``).

    ``"nan"``, ``"inf"`` and other text are kept verbatim.
    """
    if not zone.startswith(ZONE_PREFIX) and _is_numeric_text(zone):
        return f"{ZONE_PREFIX}{zone}"
    return zone


def _prescribed_pitch_count(metrics: list[Metric]) -> int:
    reps = find_metric(metrics, "reps")
    if reps is not None and is_number(reps.value) and reps.value != 0:
        return _expand_count(reps.value)
    return 1


def _prescribed_pitch_type(metrics: list[Metric]) -> str:
    pitch_type = find_metric(metrics, "pitch_type")
    if pitch_type is not None and pitch_type.value:
        return _to_text(pitch_type.value)
    return DEFAULT_PITCH_TYPE


def _prescribed_target_zone(metrics: list[Metric]) -> str:
    target_zone = find_metric(metrics, "target_zone")
    if target_zone is not None and target_zone.value:
        return normalize_target_zone(_to_text(target_zone.value))
    return DEFAULT_TARGET_ZONE


def _fallback_pitch_count(metrics: list[Metric]) -> int:
    numeric = next((metric.value for metric in metrics if is_number(metric.value)), None)
    if numeric is not None and numeric > 0:
        return _expand_count(numeric)
    return 1


def _fallback_target_zone(metrics: list[Metric]) -> str:
    for metric in metrics:
        if isinstance(metric.value, str) and "zone" in metric.value.lower():
            return metric.value
    return DEFAULT_TARGET_ZONE


def _emit(
    items: list[ScriptItem],
    count: int,
    pitch_type: str,
    target_zone: str,
    id_factory: Callable[[], str],
) -> None:
    items.extend(ScriptItem(id=id_factory(), pitch_type=pitch_type, target_zone=target_zone) for _ in range(count))


def _new_script_item_id() -> str:
    return str(uuid.uuid4())


def build_script_from_prescriptions(
    prescriptions: Mapping[str, ExercisePrescription],
    id_factory: Callable[[], str] = _new_script_item_id,
) -> list[ScriptItem]:
    items: list[ScriptItem] = []
    for prescription in prescriptions.values():
        for prescribed_set in prescription.sets:
            _emit(
                items,
                _prescribed_pitch_count(prescribed_set.metrics),
                _prescribed_pitch_type(prescribed_set.metrics),
                _prescribed_target_zone(prescribed_set.metrics),
                id_factory,
            )
    return items


def build_script_from_workout(
    workout: WorkoutDefinition,
    id_factory: Callable[[], str] = _new_script_item_id,
) -> list[ScriptItem]:
    # Workout flows carry no pitch type, so every slot is a 4-seam
    items: list[ScriptItem] = []
    for exercise in workout.exercises:
        for workout_set in exercise.sets:
            _emit(
                items,
                _fallback_pitch_count(workout_set.metrics),
                DEFAULT_PITCH_TYPE,
                _fallback_target_zone(workout_set.metrics),
                id_factory,
            )
    return items


def build_script(
    prescriptions: Mapping[str, ExercisePrescription] | None = None,
    workout: WorkoutDefinition | None = None,
    *,
    id_factory: Callable[[], str] = _new_script_item_id,
) -> list[ScriptItem]:
    """Derive the ordered pitch script for a session.

    The prescription is the primary source. The workout flow is only used
    when the prescription yields no pitches at all. An empty result means
    the session is unscripted.

    Args:
        prescriptions: Exercise key -> per-set prescription (may be None)
        workout: Generic workout definition used as fallback (may be None)
        id_factory: Generator for script item ids

    Returns:
        Ordered list of ScriptItem
    """
    items = build_script_from_prescriptions(prescriptions, id_factory) if prescriptions else []
    if items:
        logger.debug(f"Built script of {len(items)} pitches from prescription")
        return items

    if workout is not None:
        items = build_script_from_workout(workout, id_factory)
        if items:
            logger.debug(f"Built script of {len(items)} pitches from workout flow")
            return items

    logger.debug("No prescription or workout pitches found, session will be unscripted")
    return []
