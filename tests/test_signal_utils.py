"""
Signal helper tests for Frontline diagnostics.

Run with: python3 -m pytest tests/test_signal_utils.py -v
"""

import sys
import os
import math

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from core.diagnostics.signal_utils import (
    round_half_up,
    signal_bars,
    strength_label,
    wifi_channel,
)


class TestRoundHalfUp:
    """Half values always round up."""

    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1

    def test_below_half_rounds_down(self):
        assert round_half_up(2.45) == 2

    def test_whole_number(self):
        assert round_half_up(4.0) == 4


class TestSignalBars:
    """Test the 5-segment signal glyph."""

    def test_full_strength(self):
        assert signal_bars(100) == "▮▮▮▮▮"

    def test_zero_strength(self):
        assert signal_bars(0) == "▯▯▯▯▯"

    def test_sixty_percent(self):
        assert signal_bars(60) == "▮▮▮▯▯"

    def test_fifty_rounds_up(self):
        """50 / 20 = 2.5 rounds to 3 filled segments."""
        assert signal_bars(50) == "▮▮▮▯▯"

    def test_forty_nine_rounds_down(self):
        assert signal_bars(49) == "▮▮▯▯▯"

    def test_ten_percent_shows_one_bar(self):
        assert signal_bars(10) == "▮▯▯▯▯"

    def test_clamped_above_100(self):
        assert signal_bars(250) == "▮▮▮▮▮"

    def test_clamped_below_0(self):
        assert signal_bars(-40) == "▯▯▯▯▯"

    @pytest.mark.parametrize("value", [None, math.nan, math.inf, -math.inf, True])
    def test_unknown_is_empty(self, value):
        """Unknown or non-numeric input renders all-empty."""
        assert signal_bars(value) == "▯▯▯▯▯"

    def test_always_five_segments(self):
        for pct in range(-10, 111):
            bars = signal_bars(pct)
            assert len(bars) == 5
            assert set(bars) <= {"▮", "▯"}

    def test_monotonic(self):
        """More signal never shows fewer bars."""
        filled = [signal_bars(p).count("▮") for p in range(0, 101)]
        assert filled == sorted(filled)


class TestStrengthLabel:
    """Test installer-friendly signal words."""

    @pytest.mark.parametrize("pct,label", [
        (100, "strong"),
        (75, "strong"),
        (74.9, "good"),
        (50, "good"),
        (49, "weak"),
        (25, "weak"),
        (24, "poor"),
        (0, "poor"),
    ])
    def test_bands(self, pct, label):
        assert strength_label(pct) == label

    def test_unknown(self):
        assert strength_label(None) is None
        assert strength_label(math.nan) is None


class TestWifiChannel:
    """Test frequency to channel mapping."""

    def test_channel_1(self):
        assert wifi_channel(2412) == 1

    def test_channel_6(self):
        assert wifi_channel(2437) == 6

    def test_channel_11(self):
        assert wifi_channel(2462) == 11

    def test_24ghz_upper_edge(self):
        """2484 MHz sits at the top of the 2.4 GHz band."""
        assert wifi_channel(2484) == 15

    def test_5ghz_channel_36(self):
        assert wifi_channel(5180) == 36

    def test_5ghz_channel_149(self):
        assert wifi_channel(5745) == 149

    def test_5ghz_upper_edge(self):
        assert wifi_channel(5900) == 180

    @pytest.mark.parametrize("freq", [None, 0, 2411, 2485, 3000, 4999, 5901, 6115])
    def test_out_of_band(self, freq):
        assert wifi_channel(freq) is None

    def test_non_finite(self):
        assert wifi_channel(math.nan) is None
        assert wifi_channel(math.inf) is None
