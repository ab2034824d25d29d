"""
samplecutter Configuration - cutting parameters and validation.

This module provides:
- CutterConfig: Frozen cutting parameters with the tool's defaults
- Thresholds: Absolute thresholds resolved for one bit depth
- ConfigurationError: Structured configuration failure

Levels are fractions of full scale, -1.0 .. +1.0 (like in Audacity).

INVARIANTS:
- Configuration is validated before the first frame is processed
- Absolute threshold-out is at least 1 (digital silence is always quiet)
- Absolute threshold-in is strictly above absolute threshold-out
"""

from dataclasses import asdict, dataclass
from typing import Any


DEFAULT_ZERO_CROSSING_CHANNEL = 0
DEFAULT_THRESHOLD_IN = 0.03
DEFAULT_THRESHOLD_OUT = 0.0003
DEFAULT_MAX_QUIET_HALF_WAVES = 100
DEFAULT_LEAD_IN_FRAMES = 88  # about 2ms @ 44.1kHz


class ConfigurationError(Exception):
    """
    Raised when cutting parameters are unusable.

    Attributes:
        problems: Human-readable description of every violated rule
    """

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Invalid configuration: " + "; ".join(problems))


@dataclass(frozen=True)
class Thresholds:
    """
    Absolute thresholds for one bit depth.

    Attributes:
        max_sample_value: 1 << (valid_bits - 1)
        threshold_in: Half-wave magnitude that starts a segment
        threshold_out: Half-wave magnitude below which a half-wave is quiet
    """
    max_sample_value: int
    threshold_in: int
    threshold_out: int


@dataclass(frozen=True)
class CutterConfig:
    """
    Cutting parameters.

    Attributes:
        zero_crossing_channel: Channel used for zero-crossing detection
        threshold_in: Level (fraction of full scale) that starts a segment
        threshold_out: Level below which a half-wave counts as quiet
        max_quiet_half_waves: Consecutive quiet half-waves that end a segment
        lead_in_frames: Frames prepended before the attack
    """
    zero_crossing_channel: int = DEFAULT_ZERO_CROSSING_CHANNEL
    threshold_in: float = DEFAULT_THRESHOLD_IN
    threshold_out: float = DEFAULT_THRESHOLD_OUT
    max_quiet_half_waves: int = DEFAULT_MAX_QUIET_HALF_WAVES
    lead_in_frames: int = DEFAULT_LEAD_IN_FRAMES

    def validate(self, num_channels: int | None = None) -> None:
        """
        Check parameter ranges.

        Args:
            num_channels: Channel count of the stream about to be cut.
                When None, the channel index is only checked for sign.

        Raises:
            ConfigurationError: If any rule is violated.
        """
        problems: list[str] = []

        if not 0.0 < self.threshold_in <= 1.0:
            problems.append(f"threshold-in must be > 0 and <= 1, got {self.threshold_in}")
        if self.threshold_out <= 0.0:
            problems.append(f"threshold-out must be > 0, got {self.threshold_out}")
        if self.threshold_out >= self.threshold_in:
            problems.append(
                f"threshold-out ({self.threshold_out}) must be < threshold-in ({self.threshold_in})"
            )
        if self.max_quiet_half_waves < 1:
            problems.append(
                f"threshold-out-reached-count must be >= 1, got {self.max_quiet_half_waves}"
            )
        if self.lead_in_frames < 0:
            problems.append(f"lead-in must be >= 0, got {self.lead_in_frames}")
        if self.zero_crossing_channel < 0:
            problems.append(
                f"channel for zero-crossing detection must be >= 0, got {self.zero_crossing_channel}"
            )
        elif num_channels is not None and self.zero_crossing_channel >= num_channels:
            problems.append(
                f"channel for zero-crossing detection is {self.zero_crossing_channel}, "
                f"but the input has only {num_channels} channel(s)"
            )

        if problems:
            raise ConfigurationError(problems)

    def thresholds(self, valid_bits: int) -> Thresholds:
        """
        Resolve absolute thresholds for a bit depth.

        Args:
            valid_bits: Significant bits per sample (e.g. 16, 24)

        Returns:
            Thresholds with truncated integer magnitudes.

        Raises:
            ConfigurationError: If threshold-in does not resolve above
                threshold-out at this bit depth.
        """
        max_sample_value = 1 << (valid_bits - 1)
        threshold_in = int(max_sample_value * self.threshold_in)
        threshold_out = max(1, int(max_sample_value * self.threshold_out))

        if threshold_in <= threshold_out:
            raise ConfigurationError([
                f"threshold-in {self.threshold_in} resolves to {threshold_in} at "
                f"{valid_bits} bits, which is not above threshold-out ({threshold_out})"
            ])

        return Thresholds(
            max_sample_value=max_sample_value,
            threshold_in=threshold_in,
            threshold_out=threshold_out,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return asdict(self)
