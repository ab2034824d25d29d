"""
samplecutter Frame - one multichannel sample instant.

Responsibilities:
- Snapshot one row of a decoded block
- Write itself back into an output block
- Expose the signed cross-channel peak

Invariants:
- Immutable after construction
- Holds plain Python ints (no fixed-width overflow on negation)
- Channel count is fixed by the source file
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Frame:
    """
    Immutable integer sample values, one per channel.

    Attributes:
        values: Sample values in channel order.
    """

    values: tuple[int, ...]

    @classmethod
    def from_buffer(cls, buffer: np.ndarray, offset: int) -> "Frame":
        """
        Read the offset'th frame from a decoded block.

        Args:
            buffer: Integer array shaped (frames, channels)
            offset: Row to read

        Returns:
            Frame holding that row.
        """
        return cls(tuple(buffer[offset].tolist()))

    def write_to_buffer(self, buffer: np.ndarray, offset: int) -> None:
        """
        Write this frame into row `offset` of a (frames, channels) block.

        Raises:
            ValueError: If the block has a different channel count.
        """
        if buffer.shape[1] != len(self.values):
            raise ValueError(
                f"Buffer has {buffer.shape[1]} channels, frame has {len(self.values)}"
            )
        buffer[offset, :] = self.values

    @property
    def peak(self) -> int:
        """The (signed) value of largest magnitude across all channels."""
        peak = 0
        for value in self.values:
            if abs(value) > abs(peak):
                peak = value
        return peak

    @property
    def is_zero(self) -> bool:
        """True if every channel is digital silence."""
        return not any(self.values)

    def value(self, channel: int) -> int:
        return self.values[channel]

    def __len__(self) -> int:
        return len(self.values)
