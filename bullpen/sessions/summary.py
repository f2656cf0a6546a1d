"""Session summary aggregation.

The summary is always recomputed from the full pitch log, never patched
incrementally, so repeated partial updates cannot accumulate rounding drift.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal, localcontext

from bullpen.sessions.metrics import is_number
from bullpen.sessions.schemas import Pitch, Summary


def round_half_up(value: Decimal | float, places: int = 0) -> Decimal:
    """Round half away from zero (12.5 -> 13, 89.25 -> 89.3 at one place)."""
    exponent = Decimal(1).scaleb(-places)
    number = Decimal(str(value))
    with localcontext() as ctx:
        # quantize needs enough digits for the whole integer part plus the kept places
        ctx.prec = max(ctx.prec, number.adjusted() + places + 2)
        return number.quantize(exponent, rounding=ROUND_HALF_UP)


def percentage(part: int, total: int) -> int:
    """Integer percentage of part over total; 0 when total is 0."""
    if total <= 0:
        return 0
    return int(round_half_up(Decimal(part * 100) / Decimal(total)))


def compute_summary(pitches: Sequence[Pitch], total_pitch_prescribed: int = 0) -> Summary:
    """Compute summary statistics over the whole pitch log.

    Args:
        pitches: Every pitch recorded so far, in order
        total_pitch_prescribed: Carried over unchanged (fixed at creation)

    Returns:
        Summary with completion count, strike rate, velocity stats and
        target compliance
    """
    total = len(pitches)
    strikes = sum(1 for pitch in pitches if pitch.strike)
    compliant = sum(1 for pitch in pitches if pitch.compliance)

    velocities = [
        pitch.velocity
        for pitch in pitches
        if is_number(pitch.velocity) and math.isfinite(pitch.velocity) and pitch.velocity > 0
    ]
    top_velocity = max(velocities) if velocities else 0
    avg_velocity = 0.0
    if velocities:
        # Summed as Decimal so large readings cannot overflow to infinity
        mean = sum(Decimal(str(v)) for v in velocities) / len(velocities)
        avg_velocity = float(round_half_up(mean, places=1))

    return Summary(
        total_pitch_prescribed=total_pitch_prescribed,
        total_pitch_completed=total,
        compliance=percentage(compliant, total),
        avg_velocity=avg_velocity,
        top_velocity=top_velocity,
        strike_pct=percentage(strikes, total),
    )
