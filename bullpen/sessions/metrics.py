"""Set metric model.

Prescriptions and workouts carry each set's targets as a free-form
``{key: value}`` bag. The bag is parsed once into a tagged union over the
metric kinds the engine understands, with ``unknown`` keeping anything else
(including its original key) so that positional scans over the bag still
see every value in declared order.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

MetricValue = Union[bool, int, float, str, None]


class RepsMetric(BaseModel):
    kind: Literal["reps"] = "reps"
    value: MetricValue


class PitchTypeMetric(BaseModel):
    kind: Literal["pitch_type"] = "pitch_type"
    value: MetricValue


class TargetZoneMetric(BaseModel):
    kind: Literal["target_zone"] = "target_zone"
    value: MetricValue


class DurationMetric(BaseModel):
    kind: Literal["duration"] = "duration"
    value: MetricValue


class DistanceMetric(BaseModel):
    kind: Literal["distance"] = "distance"
    value: MetricValue


class WeightMetric(BaseModel):
    kind: Literal["weight"] = "weight"
    value: MetricValue


class UnknownMetric(BaseModel):
    kind: Literal["unknown"] = "unknown"
    key: str
    value: Any = None


Metric = Annotated[
    Union[RepsMetric, PitchTypeMetric, TargetZoneMetric, DurationMetric, DistanceMetric, WeightMetric, UnknownMetric],
    Field(discriminator="kind"),
]

_KNOWN_KINDS: dict[str, type[BaseModel]] = {
    "reps": RepsMetric,
    "pitch_type": PitchTypeMetric,
    "target_zone": TargetZoneMetric,
    "duration": DurationMetric,
    "distance": DistanceMetric,
    "weight": WeightMetric,
}


def _scalar(value: Any) -> MetricValue | None:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return None


def parse_metric(key: str, value: Any) -> Metric:
    """Parse a single bag entry into its metric kind.

    Known keys holding a non-scalar value are kept as ``unknown`` so the raw
    value is not lost.
    """
    metric_cls = _KNOWN_KINDS.get(key)
    if metric_cls is None or (value is not None and _scalar(value) is None):
        return UnknownMetric(key=key, value=value)
    return metric_cls(value=value)


def parse_metric_bag(bag: Mapping[str, Any] | None) -> list[Metric]:
    """Parse a raw metric bag, preserving declared order."""
    if not bag:
        return []
    return [parse_metric(key, value) for key, value in bag.items()]


def find_metric(metrics: list[Metric], kind: str) -> Metric | None:
    """Return the first metric of the given kind, if any."""
    for metric in metrics:
        if metric.kind == kind:
            return metric
    return None


def is_number(value: Any) -> bool:
    """True for int/float values, excluding booleans."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)
