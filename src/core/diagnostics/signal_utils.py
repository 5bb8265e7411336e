"""
Signal and radio helpers for diagnostics.

Pure functions for derived display values - no UI dependencies.
"""

import math
from typing import Optional

BAR_FILLED = "▮"
BAR_EMPTY = "▯"
BAR_COUNT = 5

# Band edges in MHz (inclusive)
BAND_24GHZ = (2412, 2484)
BAND_5GHZ = (5000, 5900)


def round_half_up(value: float) -> int:
    """Round to nearest integer, .5 always rounding up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def _is_number(value) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def signal_bars(percent: Optional[float]) -> str:
    """Map a 0-100 signal percentage to a 5-segment bar glyph.

    Args:
        percent: Signal strength percentage, or None if unknown

    Returns:
        String of filled/empty segments, e.g. "▮▮▮▯▯"
    """
    if not _is_number(percent):
        return BAR_EMPTY * BAR_COUNT

    clamped = max(0, min(100, round_half_up(percent)))
    filled = max(0, min(BAR_COUNT, round_half_up(clamped / 20)))
    return BAR_FILLED * filled + BAR_EMPTY * (BAR_COUNT - filled)


def strength_label(percent: Optional[float]) -> Optional[str]:
    """Installer-friendly word for a 0-100 signal percentage."""
    if not _is_number(percent):
        return None
    if percent >= 75:
        return "strong"
    if percent >= 50:
        return "good"
    if percent >= 25:
        return "weak"
    return "poor"


def wifi_channel(freq_mhz: Optional[float]) -> Optional[int]:
    """Wi-Fi channel number for a center frequency.

    2.4 GHz: channel = (freq - 2407) / 5
    5 GHz:   channel = (freq - 5000) / 5

    Returns:
        Channel number, or None for unknown/out-of-band frequencies
    """
    if not _is_number(freq_mhz) or not freq_mhz:
        return None

    if BAND_24GHZ[0] <= freq_mhz <= BAND_24GHZ[1]:
        return round_half_up((freq_mhz - 2407) / 5)
    if BAND_5GHZ[0] <= freq_mhz <= BAND_5GHZ[1]:
        return round_half_up((freq_mhz - 5000) / 5)
    return None
