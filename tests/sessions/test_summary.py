"""Tests for session summary aggregation."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from bullpen.sessions.pitch_types import resolve_pitch_type
from bullpen.sessions.schemas import Pitch
from bullpen.sessions.summary import compute_summary, percentage, round_half_up


def _pitch(number, velocity=90.0, strike=True, compliance=True):
    return Pitch(
        id=f"p{number}",
        number=number,
        pitch_type=resolve_pitch_type("4-Seam"),
        velocity=velocity,
        target_zone="zone_5",
        actual_zone="zone_5",
        compliance=compliance,
        strike=strike,
        timestamp=datetime(2024, 5, 1, 12, 0, number, tzinfo=UTC),
    )


class TestComputeSummary:
    def test_empty_log(self):
        """No pitches: every rate is zero."""
        summary = compute_summary([], total_pitch_prescribed=12)

        assert summary.total_pitch_prescribed == 12
        assert summary.total_pitch_completed == 0
        assert summary.strike_pct == 0
        assert summary.compliance == 0
        assert summary.avg_velocity == 0
        assert summary.top_velocity == 0

    def test_rates_and_velocity(self):
        pitches = [
            _pitch(1, velocity=90, strike=True, compliance=True),
            _pitch(2, velocity=88, strike=False, compliance=False),
        ]

        summary = compute_summary(pitches, total_pitch_prescribed=2)

        assert summary.total_pitch_completed == 2
        assert summary.strike_pct == 50
        assert summary.compliance == 50
        assert summary.avg_velocity == 89.0
        assert summary.top_velocity == 90

    def test_percentages_round_half_up(self):
        """1 of 8 is 12.5%, which rounds up to 13."""
        pitches = [_pitch(1, strike=True)] + [_pitch(n, strike=False) for n in range(2, 9)]

        summary = compute_summary(pitches)

        assert summary.strike_pct == 13

    def test_average_keeps_one_decimal(self):
        pitches = [_pitch(1, velocity=90), _pitch(2, velocity=88.5), _pitch(3, velocity=87)]

        summary = compute_summary(pitches)

        assert summary.avg_velocity == 88.5

    def test_average_rounds_half_up_at_one_decimal(self):
        """(88.5 + 88.0) / 2 = 88.25 -> 88.3, not banker's 88.2."""
        summary = compute_summary([_pitch(1, velocity=88.5), _pitch(2, velocity=88.0)])

        assert summary.avg_velocity == 88.3

    def test_non_positive_velocities_excluded_from_stats(self):
        """Zero or missing velocities do not drag the average down but still count as pitches."""
        pitches = [_pitch(1, velocity=0), _pitch(2, velocity=None), _pitch(3, velocity=91)]

        summary = compute_summary(pitches)

        assert summary.total_pitch_completed == 3
        assert summary.avg_velocity == 91.0
        assert summary.top_velocity == 91

    def test_no_positive_velocities(self):
        summary = compute_summary([_pitch(1, velocity=0)])

        assert summary.avg_velocity == 0
        assert summary.top_velocity == 0

    def test_near_float_max_velocities_average_without_overflow(self):
        summary = compute_summary([_pitch(1, velocity=1e308), _pitch(2, velocity=1.7e308)])

        assert summary.avg_velocity == 1.35e308
        assert summary.top_velocity == 1.7e308

    def test_non_finite_stored_velocities_ignored(self):
        """Logs written before finite-velocity validation may still hold infinities."""
        summary = compute_summary([_pitch(1, velocity=float("inf")), _pitch(2, velocity=90)])

        assert summary.total_pitch_completed == 2
        assert summary.avg_velocity == 90.0
        assert summary.top_velocity == 90

    def test_idempotent(self):
        pitches = [_pitch(1, velocity=92.3, strike=False), _pitch(2, velocity=85.1, compliance=False), _pitch(3, velocity=90)]

        assert compute_summary(pitches, 5) == compute_summary(pitches, 5)

    def test_average_never_exceeds_top(self):
        pitches = [_pitch(n, velocity=80 + n * 1.37) for n in range(1, 11)]

        summary = compute_summary(pitches)

        assert summary.avg_velocity <= summary.top_velocity

    @pytest.mark.parametrize("strikes", [0, 1, 2, 3, 4, 5, 6, 7])
    def test_rates_are_bounded_integers(self, strikes):
        pitches = [_pitch(n, strike=n <= strikes, compliance=n > strikes) for n in range(1, 8)]

        summary = compute_summary(pitches)

        assert isinstance(summary.strike_pct, int)
        assert isinstance(summary.compliance, int)
        assert 0 <= summary.strike_pct <= 100
        assert 0 <= summary.compliance <= 100


class TestRounding:
    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(89.25, places=1) == Decimal("89.3")

    def test_round_half_up_large_magnitude(self):
        assert round_half_up(Decimal("1E+308"), places=1) == Decimal("1E+308")
        assert round_half_up(1.2345678901234568e29, places=1) == Decimal("1.2345678901234568E+29")

    def test_percentage_of_zero_total(self):
        assert percentage(0, 0) == 0
