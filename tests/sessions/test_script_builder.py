"""Tests for pitch script derivation.

Tests cover:
- Prescription sets expand into reps copies with normalized zones
- Defaults for missing pitch type / zone / reps
- Workout flow fallback only when the prescription yields nothing
- Empty inputs produce an unscripted (empty) script
"""

from itertools import count

import pytest

from bullpen.sessions.script_builder import (
    build_script,
    normalize_target_zone,
    prescriptions_from_payload,
    workout_from_payload,
)


@pytest.fixture
def sequential_ids():
    counter = count(1)
    return lambda: f"item_{next(counter)}"


def _prescriptions(*sets, key="ex_pitching"):
    return prescriptions_from_payload({key: {"prescribedMetrics": list(sets)}})


class TestPrescriptionPath:
    """Primary path: coach prescription."""

    def test_reps_expand_into_identical_slots(self):
        """One set {reps:3, pitch_type:CT, target_zone:'3'} yields 3 CT slots to zone_3."""
        script = build_script(_prescriptions({"setNumber": 1, "metrics": {"reps": 3, "pitch_type": "CT", "target_zone": "3"}}))

        assert len(script) == 3
        assert all(item.pitch_type == "CT" for item in script)
        assert all(item.target_zone == "zone_3" for item in script)
        assert len({item.id for item in script}) == 3

    def test_sets_expand_in_declared_order(self, sequential_ids):
        """Sets are expanded in order, across exercises in mapping order."""
        prescriptions = prescriptions_from_payload(
            {
                "ex_a": {
                    "prescribedMetrics": [
                        {"setNumber": 1, "metrics": {"pitch_type": "CT", "target_zone": 3}},
                        {"setNumber": 2, "metrics": {"reps": 2, "pitch_type": "SL", "target_zone": "zone_7"}},
                    ]
                },
                "ex_b": {"prescribedMetrics": [{"setNumber": 1, "metrics": {"pitch_type": "CH"}}]},
            }
        )

        script = build_script(prescriptions, id_factory=sequential_ids)

        assert [(item.id, item.pitch_type, item.target_zone) for item in script] == [
            ("item_1", "CT", "zone_3"),
            ("item_2", "SL", "zone_7"),
            ("item_3", "SL", "zone_7"),
            ("item_4", "CH", "Global"),
        ]

    def test_defaults_when_metrics_missing(self):
        """Missing reps/pitch_type/target_zone default to 1 x 4-Seam to Global."""
        script = build_script(_prescriptions({"setNumber": 1, "metrics": {}}))

        assert len(script) == 1
        assert script[0].pitch_type == "4-Seam"
        assert script[0].target_zone == "Global"

    def test_non_numeric_reps_count_as_one(self):
        """Reps given as text are not a pitch count."""
        script = build_script(_prescriptions({"metrics": {"reps": "3", "pitch_type": "CB"}}))

        assert len(script) == 1

    def test_zero_reps_count_as_one(self):
        script = build_script(_prescriptions({"metrics": {"reps": 0}}))

        assert len(script) == 1

    def test_fractional_reps_round_up(self):
        script = build_script(_prescriptions({"metrics": {"reps": 2.5}}))

        assert len(script) == 3

    def test_non_numeric_zone_kept_verbatim(self):
        script = build_script(_prescriptions({"metrics": {"target_zone": "Glove side"}}))

        assert script[0].target_zone == "Glove side"

    def test_unknown_metrics_are_ignored(self):
        script = build_script(_prescriptions({"metrics": {"tempo": "fast", "rest_seconds": 30, "pitch_type": "SI"}}))

        assert len(script) == 1
        assert script[0].pitch_type == "SI"


class TestWorkoutFallback:
    """Fallback path: generic workout flow."""

    def test_fallback_used_when_no_prescription(self):
        """First numeric metric is the count; first 'zone' string is the zone."""
        workout = workout_from_payload(
            {
                "flow": {
                    "exercises": [
                        {"exercise_id": "ex_1", "sets": [{"metrics": {"location": "Zone 4", "count": 2, "weight": 5}}]},
                    ]
                }
            }
        )

        script = build_script(None, workout)

        assert len(script) == 2
        assert all(item.pitch_type == "4-Seam" for item in script)
        assert all(item.target_zone == "Zone 4" for item in script)

    def test_fallback_used_when_prescription_yields_nothing(self):
        """A prescription whose sets all expand to zero pitches falls through to the workout."""
        prescriptions = _prescriptions({"metrics": {"reps": -2}})
        workout = workout_from_payload({"flow": {"exercises": [{"sets": [{"metrics": {}}]}]}})

        script = build_script(prescriptions, workout)

        assert len(script) == 1
        assert script[0].target_zone == "Global"

    def test_fallback_not_used_when_prescription_present(self):
        prescriptions = _prescriptions({"metrics": {"pitch_type": "CT"}})
        workout = workout_from_payload({"flow": {"exercises": [{"sets": [{"metrics": {"reps": 10}}]}]}})

        script = build_script(prescriptions, workout)

        assert len(script) == 1
        assert script[0].pitch_type == "CT"

    def test_fallback_zone_is_not_normalized(self):
        workout = workout_from_payload({"flow": {"exercises": [{"sets": [{"metrics": {"target": "zone_9"}}]}]}})

        script = build_script(None, workout)

        assert script[0].target_zone == "zone_9"


class TestEmptyScript:
    """Neither source produces pitches."""

    def test_no_inputs_yield_empty_script(self):
        assert build_script(None, None) == []

    def test_malformed_payloads_yield_empty_script(self):
        prescriptions = prescriptions_from_payload({"ex": {"prescribedMetrics": "not a list"}})
        workout = workout_from_payload({"flow": {}})

        assert build_script(prescriptions, workout) == []


class TestNormalizeTargetZone:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("3", "zone_3"),
            ("12", "zone_12"),
            ("-2.5", "zone_-2.5"),
            ("1e3", "zone_1e3"),
            ("0x1F", "zone_0x1F"),
            ("Infinity", "zone_Infinity"),
            ("zone_3", "zone_3"),
            ("Global", "Global"),
            ("nan", "nan"),
            ("inf", "inf"),
            ("-0x1F", "-0x1F"),
            ("1_000", "1_000"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_target_zone(raw) == expected
