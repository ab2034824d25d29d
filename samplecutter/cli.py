"""
samplecutter CLI - Argument parsing and dispatch.

Responsibilities:
- Argument parsing
- Logging setup
- Printing results/errors
- Exit codes

Forbidden:
- No segmentation logic
- No audio I/O
"""

import argparse
import logging
import sys
from pathlib import Path

from samplecutter import __version__
from samplecutter.config import (
    DEFAULT_LEAD_IN_FRAMES,
    DEFAULT_MAX_QUIET_HALF_WAVES,
    DEFAULT_THRESHOLD_IN,
    DEFAULT_THRESHOLD_OUT,
    DEFAULT_ZERO_CROSSING_CHANNEL,
)


LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="samplecutter",
        description="Cut individual samples out of continuous WAV recordings.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    cut_parser = subparsers.add_parser(
        "cut",
        help="Detect samples in WAV files and write each to its own file.",
        description=(
            "Detect samples in WAV files and write each to its own file.\n\n"
            "A sample starts with a half-wave reaching --threshold-in and ends after\n"
            "--threshold-out-reached-count consecutive half-waves below --threshold-out.\n"
            "Levels are fractions of full scale (-1.0 .. +1.0, like in Audacity).\n"
            "Output files are named <input>_<NNN>_<peak dB>_<threshold-in delay>.wav"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    cut_parser.add_argument(
        "files",
        metavar="FILE",
        nargs="+",
        help="Input WAV file(s), processed in order.",
    )
    cut_parser.add_argument(
        "--channel-for-zero-crossing-detection",
        metavar="N",
        type=int,
        default=DEFAULT_ZERO_CROSSING_CHANNEL,
        help=f"Channel number for zero-crossing detection (default: {DEFAULT_ZERO_CROSSING_CHANNEL}).",
    )
    cut_parser.add_argument(
        "--threshold-in",
        metavar="LEVEL",
        type=float,
        default=DEFAULT_THRESHOLD_IN,
        help=f"Any value > 0 and <= 1 (default: {DEFAULT_THRESHOLD_IN}).",
    )
    cut_parser.add_argument(
        "--threshold-out",
        metavar="LEVEL",
        type=float,
        default=DEFAULT_THRESHOLD_OUT,
        help=f"Any value > 0 and < threshold-in (default: {DEFAULT_THRESHOLD_OUT}).",
    )
    cut_parser.add_argument(
        "--threshold-out-reached-count",
        metavar="N",
        type=int,
        default=DEFAULT_MAX_QUIET_HALF_WAVES,
        help=(
            "Number of subsequent half-waves with peak < threshold-out that end "
            f"a sample (default: {DEFAULT_MAX_QUIET_HALF_WAVES})."
        ),
    )
    cut_parser.add_argument(
        "--lead-in",
        metavar="FRAMES",
        type=int,
        default=DEFAULT_LEAD_IN_FRAMES,
        help=(
            "Number of frames to prepend before the initial zero-crossing "
            f"(default: {DEFAULT_LEAD_IN_FRAMES}, ~2ms @ 44.1kHz)."
        ),
    )
    cut_parser.add_argument(
        "--output-dir",
        metavar="PATH",
        default=".",
        help="Output directory (default: current directory).",
    )
    cut_parser.add_argument(
        "--manifest",
        action="store_true",
        help="Also write <input>.segments.json listing the written samples.",
    )
    cut_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the samples that would be written without writing files.",
    )
    cut_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging verbosity (default: INFO).",
    )

    return parser


def cmd_cut(args: argparse.Namespace) -> int:
    """
    Handle the 'cut' subcommand.

    Returns exit code.
    """
    from samplecutter.config import ConfigurationError, CutterConfig
    from samplecutter.pipeline import cut_files

    config = CutterConfig(
        zero_crossing_channel=args.channel_for_zero_crossing_detection,
        threshold_in=args.threshold_in,
        threshold_out=args.threshold_out,
        max_quiet_half_waves=args.threshold_out_reached_count,
        lead_in_frames=args.lead_in,
    )

    # Missing inputs are reported up front; no file is touched
    missing = [f for f in args.files if not Path(f).is_file()]
    if missing:
        for f in missing:
            print(f"Error: Input file not found: {f}", file=sys.stderr)
        return 1

    try:
        results, failures = cut_files(
            [Path(f) for f in args.files],
            config,
            output_dir=Path(args.output_dir),
            write_manifest_file=args.manifest,
            dry_run=args.dry_run,
        )
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for result in results:
        for segment in result.segments:
            print(segment.path)
        if result.manifest_path is not None:
            print(result.manifest_path)

    for failure in failures:
        print(f"Error: {failure}", file=sys.stderr)

    return 1 if failures else 0


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(level=args.log_level, format=LOG_FORMAT, stream=sys.stderr)

    if args.command == "cut":
        exit_code = cmd_cut(args)
        sys.exit(exit_code)
