"""
samplecutter Pipeline - cut one file after another.

PER-FILE STEPS (FIXED ORDER):

    A. Detect stream format      → audio.read_format
    B. Validate configuration    → CutterConfig.validate / thresholds
    C. Decode + segment          → audio.iter_frames → SegmentExtractor.feed
    D. Flush                     → SegmentExtractor.finalize
    E. Manifest (optional)       → manifest.write_manifest

INVARIANTS:
    - Configuration errors are raised before any frame is processed
    - A decoding or writing failure aborts the current file only
    - Segments written before a failure stay on disk
    - Files are processed strictly in the given order
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import soundfile as sf

from samplecutter import audio
from samplecutter.config import ConfigurationError, CutterConfig
from samplecutter.context import CutContext
from samplecutter.extractor import SegmentExtractor
from samplecutter.manifest import now_iso, write_manifest
from samplecutter.writer import WavSegmentWriter, WrittenSegment


logger = logging.getLogger(__name__)


class ProcessingFailure(Exception):
    """
    Raised when a file cannot be cut.

    Attributes:
        source: The input file
        errors: Structured error objects (see build_error)
    """

    def __init__(self, source: Path, errors: list[dict]):
        self.source = source
        self.errors = errors
        super().__init__(f"Failed to process {source}: {errors[0]['message']}")


def build_error(code: str, message: str, detail: dict | None = None) -> dict:
    """
    Build a structured error object.

    Args:
        code: Error code (e.g., "DECODE_ERROR")
        message: Human-readable error message
        detail: Optional additional details

    Returns:
        Structured error dictionary.
    """
    error: dict = {
        "code": code,
        "message": message,
    }
    if detail is not None:
        error["detail"] = detail
    return error


@dataclass
class CutResult:
    """Outcome of cutting one file."""

    context: CutContext
    segments: list[WrittenSegment] = field(default_factory=list)
    manifest_path: Path | None = None


def cut_file(
    source: Path,
    config: CutterConfig,
    output_dir: Path | None = None,
    write_manifest_file: bool = False,
    dry_run: bool = False,
) -> CutResult:
    """
    Cut one input file into segment files.

    Args:
        source: Input WAV file
        config: Cutting parameters
        output_dir: Directory for segment files (default: current directory)
        write_manifest_file: Also write <stem>.segments.json
        dry_run: Detect and name segments without writing anything

    Returns:
        CutResult listing the segments in emission order.

    Raises:
        ConfigurationError: If the config does not fit this file.
        ProcessingFailure: If decoding or writing fails.
    """
    source = Path(source)
    output_dir = Path(output_dir) if output_dir is not None else Path(".")
    started_at = now_iso()

    try:
        stream = audio.read_format(source)
    except (audio.AudioFormatError, sf.LibsndfileError, OSError) as e:
        raise ProcessingFailure(source, [build_error(
            code="DECODE_ERROR",
            message=f"Cannot read audio file: {e}",
            detail={"path": str(source)},
        )]) from e

    logger.info("Processing file %s", source)
    logger.info("  channels: %d", stream.channels)
    logger.info("  sample rate: %d", stream.sample_rate)
    logger.info("  sample size: %d", stream.valid_bits)

    ctx = CutContext(
        source_path=source,
        output_dir=output_dir,
        stream=stream,
        config=config,
        dry_run=dry_run,
    )
    writer = WavSegmentWriter(source, stream, ctx.output_dir, dry_run=ctx.dry_run)
    extractor = SegmentExtractor(config, stream, writer)

    manifest_path = None
    try:
        if not ctx.dry_run:
            ctx.output_dir.mkdir(parents=True, exist_ok=True)
        for frame in audio.iter_frames(source, stream):
            extractor.feed(frame)
        extractor.finalize()
        if write_manifest_file and not ctx.dry_run:
            manifest_path = write_manifest(ctx, writer.written, started_at)
    except (sf.LibsndfileError, OSError, ValueError) as e:
        # soundfile raises ValueError for format combinations it cannot write
        raise ProcessingFailure(source, [build_error(
            code="IO_ERROR",
            message=f"Failed while cutting: {e}",
            detail={
                "path": str(source),
                "frames_processed": extractor.frames_fed,
                "segments_written": len(writer.written),
            },
        )]) from e

    result = CutResult(context=ctx, segments=list(writer.written), manifest_path=manifest_path)

    logger.info("%s: %d segment(s)", source.name, len(result.segments))
    return result


def cut_files(
    sources: Iterable[Path],
    config: CutterConfig,
    output_dir: Path | None = None,
    write_manifest_file: bool = False,
    dry_run: bool = False,
) -> tuple[list[CutResult], list[ProcessingFailure]]:
    """
    Cut several files in order, continuing past per-file failures.

    Returns:
        Tuple of (results of successful files, failures).

    Raises:
        ConfigurationError: If the config is invalid regardless of input.
    """
    config.validate()

    results: list[CutResult] = []
    failures: list[ProcessingFailure] = []
    for source in sources:
        try:
            results.append(cut_file(source, config, output_dir, write_manifest_file, dry_run))
        except ProcessingFailure as e:
            logger.error("%s", e)
            failures.append(e)
        except ConfigurationError as e:
            # e.g. detection channel beyond this file's channel count
            logger.error("%s: %s", source, e)
            failures.append(ProcessingFailure(Path(source), [build_error(
                code="CONFIG_ERROR",
                message=str(e),
                detail={"problems": e.problems},
            )]))
    return results, failures
