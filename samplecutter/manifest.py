"""
samplecutter Manifest - per-file summary of written segments.

Responsibilities:
- Build the manifest document for one input file
- Serialize JSON deterministically
- UTC timestamps

Invariants:
- Segment entries are in emission order
- Keys sorted, 2-space indent, trailing newline
- Shape matches schemas/manifest.schema.json
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

from samplecutter import __version__
from samplecutter.context import CutContext
from samplecutter.writer import WrittenSegment


MANIFEST_VERSION = "1"


def now_iso() -> str:
    """Current UTC time, ISO-8601 with a trailing Z."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def serialize_json(data: Mapping[str, Any]) -> str:
    """JSON with sorted keys, 2-space indent, trailing newline."""
    return json.dumps(data, indent=2, sort_keys=True) + "\n"


def build_manifest(
    ctx: CutContext,
    segments: Sequence[WrittenSegment],
    started_at: str,
    completed_at: str,
) -> dict[str, Any]:
    """
    Build the manifest document.

    Args:
        ctx: Context of the processed file
        segments: Segments in emission order
        started_at: ISO-8601 timestamp when cutting started
        completed_at: ISO-8601 timestamp when cutting finished

    Returns:
        Manifest dictionary.
    """
    context = ctx.to_dict()
    return {
        "manifest_version": MANIFEST_VERSION,
        "tool_version": __version__,
        "source": context["source"],
        "stream": context["stream"],
        "config": context["config"],
        "started_at": started_at,
        "completed_at": completed_at,
        "segments": [s.to_dict() for s in segments],
    }


def write_manifest(
    ctx: CutContext,
    segments: Sequence[WrittenSegment],
    started_at: str,
) -> Path:
    """
    Write <stem>.segments.json into the output directory.

    Returns:
        Path of the written manifest.
    """
    document = build_manifest(ctx, segments, started_at, now_iso())
    path = ctx.manifest_path
    path.write_text(serialize_json(document))
    return path
