"""Tests for set metric parsing and the pitch type catalog."""

import pytest
from pydantic import TypeAdapter

from bullpen.sessions.metrics import (
    Metric,
    PitchTypeMetric,
    RepsMetric,
    UnknownMetric,
    find_metric,
    is_number,
    parse_metric,
    parse_metric_bag,
)
from bullpen.sessions.pitch_types import PITCH_TYPES, resolve_pitch_type


class TestParseMetric:
    def test_known_keys_map_to_kinds(self):
        metrics = parse_metric_bag({"reps": 3, "pitch_type": "CT", "target_zone": "3", "weight": 5, "distance": 60.5})

        assert [m.kind for m in metrics] == ["reps", "pitch_type", "target_zone", "weight", "distance"]
        assert metrics[0] == RepsMetric(value=3)

    def test_unknown_key_keeps_key_and_value(self):
        metric = parse_metric("tempo", "fast")

        assert isinstance(metric, UnknownMetric)
        assert metric.key == "tempo"
        assert metric.value == "fast"

    def test_known_key_with_structured_value_is_unknown(self):
        metric = parse_metric("reps", {"min": 3, "max": 5})

        assert metric.kind == "unknown"
        assert metric.key == "reps"
        assert metric.value == {"min": 3, "max": 5}

    def test_bag_order_preserved(self):
        metrics = parse_metric_bag({"location": "zone 4", "count": 2, "reps": 1})

        assert [getattr(m, "key", m.kind) for m in metrics] == ["location", "count", "reps"]

    @pytest.mark.parametrize("bag", [None, {}])
    def test_empty_bag(self, bag):
        assert parse_metric_bag(bag) == []

    def test_discriminated_union_validates_by_kind(self):
        adapter = TypeAdapter(Metric)

        assert isinstance(adapter.validate_python({"kind": "pitch_type", "value": "SL"}), PitchTypeMetric)
        assert isinstance(adapter.validate_python({"kind": "unknown", "key": "tempo", "value": [1, 2]}), UnknownMetric)


class TestFindMetric:
    def test_first_match_wins(self):
        metrics = [parse_metric("reps", 2), parse_metric("reps", 9)]

        assert find_metric(metrics, "reps").value == 2

    def test_no_match(self):
        assert find_metric([parse_metric("tempo", 1)], "reps") is None


class TestIsNumber:
    @pytest.mark.parametrize(("value", "expected"), [(3, True), (2.5, True), (True, False), ("3", False), (None, False)])
    def test_is_number(self, value, expected):
        assert is_number(value) is expected


class TestPitchTypeCatalog:
    def test_catalog_order(self):
        assert [option.value for option in PITCH_TYPES] == ["4-Seam", "2-Seam", "SI", "CT", "CB", "SL", "CH", "SP", "KN"]

    def test_resolve_known_value(self):
        assert resolve_pitch_type("CH").label == "Changeup"

    @pytest.mark.parametrize("value", [None, "", "FF", "eephus"])
    def test_unknown_values_fall_back_to_first_entry(self, value):
        assert resolve_pitch_type(value) == PITCH_TYPES[0]
