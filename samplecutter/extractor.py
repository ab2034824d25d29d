"""
samplecutter Segment Extractor - the segmentation state machine.

Consumes frames in file order and cuts them into segments:

    SEARCHING      No candidate. Each finished half-wave below threshold-in
                   is noise; its frames only remain as possible lead-in.
    ACCUMULATING   A half-wave reached threshold-in. Every following
                   half-wave belongs to the segment until enough consecutive
                   half-waves stay below threshold-out.

Zero crossings are detected on ONE channel only. With phase-inverted
channels, every channel would yield its own crossings while the signal is
still loud, ending the segment far too early. Peaks on the other hand are
taken across ALL channels, so a channel that is still ringing keeps the
segment open.

Invariants:
    - Candidate frames are always a contiguous suffix of the history
    - While SEARCHING, the history holds at most lead_in_frames frames
      before the current half-wave
    - History is only trimmed when a half-wave completes. A stretch that
      never crosses zero on the detection channel (e.g. DC offset) is held
      in memory until it does
    - The sink runs synchronously; the next frame waits for it
"""

import enum
import logging
from dataclasses import dataclass
from typing import Sequence

from samplecutter.audio import StreamFormat
from samplecutter.config import CutterConfig
from samplecutter.frame import Frame
from samplecutter.peaks import PeakAccumulator


logger = logging.getLogger(__name__)


# Reported when no body frame reaches threshold-in on its own
THRESHOLD_IN_NEVER_REACHED = -1

# Attack delays longer than this are suspicious (~220 frames @ 44.1kHz)
LATE_ATTACK_SECONDS = 0.005


class ExtractorState(enum.Enum):
    SEARCHING = "searching"
    ACCUMULATING = "accumulating"


@dataclass(frozen=True)
class Segment:
    """
    One cut-out sample.

    Attributes:
        lead_in: Trimmed lead-in frames, written before the body
        body: Frames from the attack half-wave to the end of the segment
        effective_peak_db: Effective peak in dBFS (see peaks.py)
        threshold_in_delay: Frames from body start to the first frame
            reaching threshold-in, or THRESHOLD_IN_NEVER_REACHED
        start_frame: Position of the first body frame in the source
        lead_in_available: Lead-in window length before trimming
    """
    lead_in: tuple[Frame, ...]
    body: tuple[Frame, ...]
    effective_peak_db: float
    threshold_in_delay: int
    start_frame: int
    lead_in_available: int

    @property
    def frames(self) -> tuple[Frame, ...]:
        """Lead-in followed by body, in write order."""
        return self.lead_in + self.body


def trim_lead_in(window: Sequence[Frame]) -> tuple[Frame, ...]:
    """
    Drop everything up to and including the last silent frame.

    Digital silence in front of the attack would only delay it, so only
    the frames after the last all-zero frame are kept.

    Example (mono): [0, 0, 3, 0, 7] -> [7]

    Args:
        window: Untrimmed lead-in frames, oldest first

    Returns:
        The kept frames; the whole window if no frame is silent.
    """
    last_zero = -1
    for i, frame in enumerate(window):
        if frame.is_zero:
            last_zero = i
    return tuple(window[last_zero + 1:])


class SegmentExtractor:
    """
    Streaming segmenter for one input stream.

    Usage:
        extractor = SegmentExtractor(config, stream, sink)
        for frame in frames:
            extractor.feed(frame)
        extractor.finalize()

    Every emitted Segment is handed to ``sink.emit`` (if a sink is given)
    and also returned from the call that completed it.
    """

    def __init__(self, config: CutterConfig, stream: StreamFormat, sink=None):
        config.validate(stream.channels)
        thresholds = config.thresholds(stream.valid_bits)

        self.config = config
        self.stream = stream
        self.sink = sink

        self.threshold_in = thresholds.threshold_in
        self.threshold_out = thresholds.threshold_out
        self.max_sample_value = thresholds.max_sample_value
        self.late_attack_frames = int(stream.sample_rate * LATE_ATTACK_SECONDS)

        self._peaks = PeakAccumulator(self.max_sample_value)
        self.reset()

    def reset(self) -> None:
        """Forget all stream state, as if freshly constructed."""
        self._peaks.clear()
        self._history: list[Frame] = []
        self._candidate_start = 0
        self._running_peak = 0
        self._state = ExtractorState.SEARCHING
        self._quiet_half_waves = 0
        self._frames_fed = 0

    @property
    def state(self) -> ExtractorState:
        return self._state

    @property
    def candidate_frames(self) -> list[Frame]:
        return self._history[self._candidate_start:]

    @property
    def frames_fed(self) -> int:
        return self._frames_fed

    # ------------------------------------------------------------------
    # Frame protocol
    # ------------------------------------------------------------------

    def feed(self, frame: Frame) -> Segment | None:
        """
        Process the next frame of the stream.

        Returns:
            The Segment completed by this frame, if any.

        Raises:
            ValueError: If the frame's channel count does not match the stream.
        """
        if len(frame) != self.stream.channels:
            raise ValueError(
                f"Frame has {len(frame)} channels, stream has {self.stream.channels}"
            )

        # Peak over all channels; the sign is kept once set
        frame_peak = frame.peak
        peak = self._running_peak
        if (peak > 0 and frame_peak > peak) or (peak < 0 and frame_peak < peak):
            self._running_peak = frame_peak

        segment = None
        value = frame.value(self.config.zero_crossing_channel)
        if self._running_peak == 0:
            if value == 0:
                # Digital silence is a one-frame half-wave. Otherwise it would
                # pile up in the lead-in and delay the attack.
                segment = self._on_half_wave_complete(0)
            self._running_peak = value
        elif (self._running_peak > 0 and value <= 0) or (self._running_peak < 0 and value >= 0):
            segment = self._on_half_wave_complete(self._running_peak)
            self._running_peak = value

        self._history.append(frame)
        self._frames_fed += 1
        return segment

    def finalize(self) -> Segment | None:
        """
        Signal end of stream.

        A segment still accumulating is emitted even though it never decayed
        below threshold-out, so the tail of the file is not lost.

        Returns:
            The flushed Segment, if any.
        """
        segment = None
        if self._state is ExtractorState.ACCUMULATING:
            logger.warning(
                "Stream ended before the segment decayed below threshold-out; "
                "writing it anyway (%d frames)",
                len(self.candidate_frames),
            )
            segment = self._emit()
        self.reset()
        return segment

    # ------------------------------------------------------------------
    # Half-wave handling
    # ------------------------------------------------------------------

    def _on_half_wave_complete(self, peak: int) -> Segment | None:
        magnitude = abs(peak)

        if self._state is ExtractorState.SEARCHING:
            if magnitude < self.threshold_in:
                # Noise. Keep the history, it may still serve as lead-in.
                self._discard_candidate()
                return None
            self._state = ExtractorState.ACCUMULATING

        self._peaks.add(magnitude)

        if magnitude < self.threshold_out:
            self._quiet_half_waves += 1
        else:
            self._quiet_half_waves = 0

        if self._quiet_half_waves >= self.config.max_quiet_half_waves:
            segment = self._emit()
            self._start_over()
            return segment
        return None

    def _discard_candidate(self) -> None:
        self._peaks.clear()
        keep_from = len(self._history) - self.config.lead_in_frames
        if keep_from > 0:
            del self._history[:keep_from]
        self._candidate_start = len(self._history)

    def _start_over(self) -> None:
        self._peaks.clear()
        self._history.clear()
        self._candidate_start = 0
        self._quiet_half_waves = 0
        self._state = ExtractorState.SEARCHING

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _emit(self) -> Segment:
        lead_in_frames = self.config.lead_in_frames
        body = tuple(self.candidate_frames)

        window = self._history[max(0, self._candidate_start - lead_in_frames):self._candidate_start]
        if len(window) < lead_in_frames:
            logger.warning(
                "Too little data for a lead-in: %d of %d frames available",
                len(window),
                lead_in_frames,
            )

        lead_in = trim_lead_in(window)
        if len(lead_in) < len(window):
            logger.info("Just writing the last %d frames of the lead-in", len(lead_in))

        segment = Segment(
            lead_in=lead_in,
            body=body,
            effective_peak_db=self._peaks.effective_peak_value_db(),
            threshold_in_delay=self._threshold_in_delay(body),
            start_frame=self._frames_fed - len(body),
            lead_in_available=len(window),
        )

        if self.sink is not None:
            self.sink.emit(segment)
        return segment

    def _threshold_in_delay(self, body: Sequence[Frame]) -> int:
        for i, frame in enumerate(body):
            if abs(frame.peak) >= self.threshold_in:
                if i < self.late_attack_frames:
                    logger.info("threshold-in value reached after %d frames", i)
                else:
                    # The waveform may hover just above zero for a long time
                    # after the crossing; such a sample starts with a gap.
                    logger.warning("threshold-in value reached after %d frames", i)
                return i

        logger.warning("threshold-in value never reached by a single frame of the segment")
        return THRESHOLD_IN_NEVER_REACHED
