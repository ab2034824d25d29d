"""
samplecutter Peak Accumulator - effective loudness of a segment.

A short transient attack can produce a peak far above what the ear
perceives as the loudness of the note. Ranking by the single largest
half-wave peak then orders samples wrongly, so the estimator drops the
3 largest half-wave peaks and averages the next 5.

Invariants:
    - One entry per half-wave added since the last clear (duplicates kept)
    - Entries are magnitudes, kept in descending order
    - Silence maps to a finite dB sentinel, never -inf or NaN
"""

import math
from bisect import insort


# Peaks skipped from the top, then averaged
SKIP_LARGEST = 3
AVERAGE_COUNT = 5

# Reported instead of -inf when the effective peak is 0
SILENCE_DB = -999.99


class PeakAccumulator:
    """Multiset of half-wave peak magnitudes for the current segment."""

    def __init__(self, max_sample_value: int):
        self.max_sample_value = max_sample_value
        # Negated magnitudes, so ascending storage reads as descending peaks
        self._peaks: list[int] = []

    def clear(self) -> None:
        self._peaks.clear()

    def add(self, peak: int) -> None:
        """Record the magnitude of one completed half-wave."""
        insort(self._peaks, -abs(peak))

    def values(self) -> list[int]:
        """Recorded magnitudes, largest first."""
        return [-p for p in self._peaks]

    def __len__(self) -> int:
        return len(self._peaks)

    def effective_peak_value(self) -> int:
        """
        Average of the peaks ranked 4th to 8th, rounded half-up.

        Returns:
            The rounded average, or 0 if fewer than 4 peaks were recorded.
        """
        window = self._peaks[SKIP_LARGEST:SKIP_LARGEST + AVERAGE_COUNT]
        if not window:
            return 0
        total = -sum(window)
        count = len(window)
        # floor(total / count + 0.5) in exact integer arithmetic
        return (2 * total + count) // (2 * count)

    def effective_peak_value_db(self) -> float:
        """
        Effective peak relative to full scale, in dBFS.

        Returns:
            20 * log10(effective / max_sample_value), or SILENCE_DB when the
            effective peak is 0.
        """
        effective = self.effective_peak_value()
        if effective == 0:
            return SILENCE_DB
        return 20.0 * math.log10(effective / self.max_sample_value)
