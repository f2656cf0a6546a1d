"""Pitch type catalog."""

from __future__ import annotations

from bullpen.sessions.schemas import PitchTypeOption

PITCH_TYPES: tuple[PitchTypeOption, ...] = (
    PitchTypeOption(id="fastball_4seam", label="4-Seam Fastball", value="4-Seam"),
    PitchTypeOption(id="fastball_2seam", label="2-Seam Fastball", value="2-Seam"),
    PitchTypeOption(id="sinker", label="Sinker", value="SI"),
    PitchTypeOption(id="cutter", label="Cutter", value="CT"),
    PitchTypeOption(id="curveball", label="Curveball", value="CB"),
    PitchTypeOption(id="slider", label="Slider", value="SL"),
    PitchTypeOption(id="changeup", label="Changeup", value="CH"),
    PitchTypeOption(id="splitter", label="Splitter", value="SP"),
    PitchTypeOption(id="knuckleball", label="Knuckleball", value="KN"),
)

_BY_VALUE = {option.value: option for option in PITCH_TYPES}


def resolve_pitch_type(value: str | None) -> PitchTypeOption:
    """Resolve a pitch type value against the catalog.

    Unknown or missing values fall back to the first catalog entry.
    """
    if value is None:
        return PITCH_TYPES[0]
    return _BY_VALUE.get(value, PITCH_TYPES[0])
