"""
samplecutter Frame and PeakAccumulator Tests

Coverage:
- Signed cross-channel peak, tie on first occurrence
- Digital silence detection
- Buffer read/write, channel-count precondition
- Effective peak: skip 3, average 5, half-up rounding
- dB conversion and the silence sentinel
"""

import math

import numpy as np
import pytest

from samplecutter.frame import Frame
from samplecutter.peaks import SILENCE_DB, PeakAccumulator


class TestFrame:
    """Frame value semantics."""

    def test_peak_keeps_sign(self):
        assert Frame((3, -7, 5)).peak == -7
        assert Frame((3, 7, -5)).peak == 7

    def test_peak_tie_resolved_by_first_channel(self):
        assert Frame((-5, 5)).peak == -5
        assert Frame((5, -5)).peak == 5

    def test_peak_of_silence_is_zero(self):
        assert Frame((0, 0)).peak == 0

    def test_peak_of_minimum_value_does_not_overflow(self):
        frame = Frame((-2147483648, 2147483647))
        assert frame.peak == -2147483648
        assert abs(frame.peak) == 2147483648

    def test_is_zero(self):
        assert Frame((0, 0, 0)).is_zero
        assert not Frame((0, 1, 0)).is_zero

    def test_value_and_len(self):
        frame = Frame((1, 2, 3))
        assert frame.value(2) == 3
        assert len(frame) == 3

    def test_from_buffer_reads_one_row(self):
        buffer = np.array([[1, -1], [2, -2], [3, -3]], dtype=np.int32)
        frame = Frame.from_buffer(buffer, 1)
        assert frame == Frame((2, -2))
        assert all(type(v) is int for v in frame.values)

    def test_write_to_buffer(self):
        buffer = np.zeros((2, 2), dtype=np.int32)
        Frame((7, -8)).write_to_buffer(buffer, 1)
        assert buffer.tolist() == [[0, 0], [7, -8]]

    def test_write_to_buffer_rejects_channel_mismatch(self):
        buffer = np.zeros((2, 3), dtype=np.int32)
        with pytest.raises(ValueError, match="channels"):
            Frame((1, 2)).write_to_buffer(buffer, 0)

    def test_frames_are_immutable(self):
        frame = Frame((1,))
        with pytest.raises(AttributeError):
            frame.values = (2,)


class TestPeakAccumulator:
    """Effective peak estimation."""

    def test_skips_three_largest_and_averages_next_five(self):
        peaks = PeakAccumulator(32768)
        for value in [10, 90, 30, 70, 50, 20, 80, 40, 60]:
            peaks.add(value)
        assert peaks.values() == [90, 80, 70, 60, 50, 40, 30, 20, 10]
        # round(avg(60, 50, 40, 30, 20))
        assert peaks.effective_peak_value() == 40

    def test_values_beyond_window_are_ignored(self):
        peaks = PeakAccumulator(32768)
        for value in [100, 100, 100, 50, 50, 50, 50, 50, 1, 1, 1]:
            peaks.add(value)
        assert peaks.effective_peak_value() == 50

    def test_short_window_averages_what_is_there(self):
        peaks = PeakAccumulator(32768)
        for value in [10, 20, 30, 40, 60]:
            peaks.add(value)
        # skip 60, 40, 30 -> avg(20, 10)
        assert peaks.effective_peak_value() == 15

    def test_empty_window_is_zero(self):
        peaks = PeakAccumulator(32768)
        assert peaks.effective_peak_value() == 0
        for value in [5, 6, 7]:
            peaks.add(value)
        assert peaks.effective_peak_value() == 0

    def test_rounds_half_up(self):
        peaks = PeakAccumulator(32768)
        for value in [100, 100, 100, 2, 1]:
            peaks.add(value)
        assert peaks.effective_peak_value() == 2

    def test_duplicates_are_kept(self):
        peaks = PeakAccumulator(32768)
        for _ in range(8):
            peaks.add(500)
        assert len(peaks) == 8
        assert peaks.effective_peak_value() == 500

    def test_add_takes_magnitude(self):
        peaks = PeakAccumulator(32768)
        peaks.add(-300)
        assert peaks.values() == [300]

    def test_clear(self):
        peaks = PeakAccumulator(32768)
        for value in range(10):
            peaks.add(value)
        peaks.clear()
        assert len(peaks) == 0
        assert peaks.effective_peak_value() == 0

    def test_db_full_scale_is_zero(self):
        peaks = PeakAccumulator(32768)
        for _ in range(8):
            peaks.add(32768)
        assert peaks.effective_peak_value_db() == pytest.approx(0.0)

    def test_db_half_scale(self):
        peaks = PeakAccumulator(1 << 23)
        for _ in range(8):
            peaks.add(1 << 22)
        assert peaks.effective_peak_value_db() == pytest.approx(-6.0206, abs=1e-4)

    def test_db_of_silence_is_finite_sentinel(self):
        peaks = PeakAccumulator(32768)
        db = peaks.effective_peak_value_db()
        assert db == SILENCE_DB
        assert math.isfinite(db)
