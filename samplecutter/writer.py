"""
samplecutter Segment Writers - where emitted segments go.

This module provides:
- SegmentSink: Abstract boundary the extractor emits into
- WavSegmentWriter: One WAV per segment, named after its metadata
- WrittenSegment: Record of one written file
- SegmentCollector: Keeps segments in memory

File naming (one counter per input file, starting at 1):

    <source stem>_<NNN>_<effective peak dB>_<threshold-in delay>.wav
    e.g. snare_007_-12.34_00012.wav

Rules:
- Lead-in frames are written before body frames
- Output format equals the input stream format
- Writes are synchronous; a failing write propagates to the caller
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from samplecutter import audio
from samplecutter.audio import StreamFormat
from samplecutter.extractor import Segment


logger = logging.getLogger(__name__)


class SegmentSink(ABC):
    """
    Receives every segment the extractor completes.

    Subclasses must implement `emit(segment)`, which must finish with the
    segment before returning.
    """

    @abstractmethod
    def emit(self, segment: Segment) -> None:
        ...


@dataclass(frozen=True)
class WrittenSegment:
    """
    One segment file on disk.

    Attributes:
        number: 1-based position within the input file
        path: Written file
        start_frame: Source position of the first body frame
        lead_in_frames: Lead-in frames written
        body_frames: Body frames written
        effective_peak_db: Effective peak in dBFS
        threshold_in_delay: Frames until threshold-in (or -1)
    """
    number: int
    path: Path
    start_frame: int
    lead_in_frames: int
    body_frames: int
    effective_peak_db: float
    threshold_in_delay: int

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "file": self.path.name,
            "start_frame": self.start_frame,
            "lead_in_frames": self.lead_in_frames,
            "body_frames": self.body_frames,
            "effective_peak_db": round(self.effective_peak_db, 2),
            "threshold_in_delay": self.threshold_in_delay,
        }


def segment_filename(source_stem: str, number: int, segment: Segment) -> str:
    """
    Build the output file name for a segment.

    Args:
        source_stem: Input file name without extension
        number: 1-based segment number within the input file
        segment: The emitted segment

    Returns:
        File name, e.g. "kick_001_-06.02_00003.wav"
    """
    return (
        f"{source_stem}_{number:03d}_{segment.effective_peak_db:06.2f}"
        f"_{segment.threshold_in_delay:05d}.wav"
    )


class WavSegmentWriter(SegmentSink):
    """
    Write each segment to its own WAV file in the source's format.

    With dry_run=True, names and records segments without touching disk.
    """

    def __init__(
        self,
        source: Path,
        stream: StreamFormat,
        output_dir: Path | None = None,
        dry_run: bool = False,
    ):
        self.source = Path(source)
        self.stream = stream
        self.output_dir = Path(output_dir) if output_dir is not None else Path(".")
        self.dry_run = dry_run
        self.written: list[WrittenSegment] = []

    def emit(self, segment: Segment) -> None:
        number = len(self.written) + 1
        path = self.output_dir / segment_filename(self.source.stem, number, segment)

        if self.dry_run:
            logger.info("Would write %s", path.name)
        else:
            logger.info("Writing %s", path.name)
            audio.write_frames(path, segment.frames, self.stream)

        self.written.append(WrittenSegment(
            number=number,
            path=path,
            start_frame=segment.start_frame,
            lead_in_frames=len(segment.lead_in),
            body_frames=len(segment.body),
            effective_peak_db=segment.effective_peak_db,
            threshold_in_delay=segment.threshold_in_delay,
        ))



class SegmentCollector(SegmentSink):
    """Keep emitted segments in memory, in emission order."""

    def __init__(self):
        self.segments: list[Segment] = []

    def emit(self, segment: Segment) -> None:
        self.segments.append(segment)
