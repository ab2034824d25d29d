"""
samplecutter CutContext - per-file execution context.

Responsibilities:
- Hold the paths, stream format and configuration for one input file
- Serialization of the source, stream and config for the manifest

Invariants:
- Immutable while the file is processed
- One context per input file
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from samplecutter.audio import StreamFormat
from samplecutter.config import CutterConfig


@dataclass(frozen=True)
class CutContext:
    """Context for cutting one input file."""

    source_path: Path
    output_dir: Path
    stream: StreamFormat
    config: CutterConfig
    dry_run: bool = False

    @property
    def manifest_path(self) -> Path:
        return self.output_dir / f"{self.source_path.stem}.segments.json"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "source": self.source_path.name,
            "stream": self.stream.to_dict(),
            "config": self.config.to_dict(),
        }
