"""
samplecutter Audio I/O - integer PCM in, integer PCM out.

Library Stack:
    - soundfile: WAV I/O (libsndfile-backed)
    - numpy: Block buffers

libsndfile scales integer reads to the full range of the requested dtype,
so every block is read as int32 and shifted down to the file's own bit
depth. Writes shift back up. Sample values therefore round-trip exactly.

INVARIANTS:
    - Frames are yielded in file order, block boundaries are invisible
    - No resampling, no dithering, no bit-depth conversion
    - Only integer PCM subtypes are accepted
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

import numpy as np
import soundfile as sf

from samplecutter.frame import Frame


# =============================================================================
# Constants
# =============================================================================

BUF_SIZE = 65536

# Container every segment is written in
OUTPUT_FORMAT = "WAV"

# libsndfile subtype -> significant bits per sample
VALID_BITS = {
    "PCM_S8": 8,
    "PCM_U8": 8,
    "PCM_16": 16,
    "PCM_24": 24,
    "PCM_32": 32,
}


class AudioFormatError(Exception):
    """Raised when a file is not integer PCM audio."""
    pass


# =============================================================================
# Stream Format
# =============================================================================


@dataclass(frozen=True)
class StreamFormat:
    """
    Format of one input stream, shared by every segment cut from it.

    Attributes:
        channels: Number of channels
        sample_rate: Frames per second
        valid_bits: Significant bits per sample
        subtype: libsndfile subtype segments are written with
    """
    channels: int
    sample_rate: int
    valid_bits: int
    subtype: str = "PCM_16"

    @classmethod
    def for_bits(cls, channels: int, sample_rate: int, valid_bits: int) -> "StreamFormat":
        """Build a format from a bit depth, picking the matching subtype."""
        subtype = "PCM_U8" if valid_bits == 8 else f"PCM_{valid_bits}"
        if subtype not in VALID_BITS:
            raise AudioFormatError(f"Unsupported bit depth: {valid_bits}")
        return cls(channels, sample_rate, valid_bits, subtype)

    @property
    def shift(self) -> int:
        """Bits between the file's depth and the int32 read/write buffers."""
        return 32 - self.valid_bits

    def to_dict(self) -> dict:
        return {
            "channels": self.channels,
            "sample_rate": self.sample_rate,
            "valid_bits": self.valid_bits,
            "subtype": self.subtype,
        }


def read_format(path: Path) -> StreamFormat:
    """
    Read the stream format of an audio file.

    Args:
        path: Path to audio file

    Returns:
        StreamFormat of the file. Its subtype is one the output container
        can hold, which may differ from the input's (signed 8-bit AIFF
        becomes unsigned 8-bit WAV, with the same sample values).

    Raises:
        AudioFormatError: If the file is not integer PCM.
        soundfile.LibsndfileError: If the file cannot be opened.
    """
    info = sf.info(str(path))
    if info.subtype not in VALID_BITS:
        raise AudioFormatError(
            f"Unsupported sample format {info.subtype!r} in {path}; "
            f"expected one of {sorted(VALID_BITS)}"
        )
    valid_bits = VALID_BITS[info.subtype]
    if not sf.check_format(OUTPUT_FORMAT, info.subtype):
        return StreamFormat.for_bits(info.channels, info.samplerate, valid_bits)
    return StreamFormat(
        channels=info.channels,
        sample_rate=info.samplerate,
        valid_bits=valid_bits,
        subtype=info.subtype,
    )


# =============================================================================
# Reading
# =============================================================================


def read_blocks(path: Path, stream: StreamFormat, blocksize: int = BUF_SIZE) -> Iterator[np.ndarray]:
    """
    Decode a file in blocks of native-depth integer samples.

    Args:
        path: Path to audio file
        stream: Format returned by read_format()
        blocksize: Frames per block

    Yields:
        int32 arrays shaped (frames, channels)
    """
    with sf.SoundFile(str(path)) as f:
        for block in f.blocks(blocksize=blocksize, dtype="int32", always_2d=True):
            yield np.right_shift(block, stream.shift)


def iter_frames(path: Path, stream: StreamFormat, blocksize: int = BUF_SIZE) -> Iterator[Frame]:
    """Decode a file frame by frame, in file order."""
    for block in read_blocks(path, stream, blocksize):
        for offset in range(len(block)):
            yield Frame.from_buffer(block, offset)


def read_samples(path: Path) -> tuple[np.ndarray, StreamFormat]:
    """
    Read a whole file as native-depth integers.

    Returns:
        Tuple of (int32 samples shaped (frames, channels), stream format)
    """
    stream = read_format(path)
    samples, _ = sf.read(str(path), dtype="int32", always_2d=True)
    return np.right_shift(samples, stream.shift), stream


# =============================================================================
# Writing
# =============================================================================


def frames_to_buffer(frames: Sequence[Frame], channels: int) -> np.ndarray:
    """
    Copy frames into a (frames, channels) int32 block.

    Raises:
        ValueError: If a frame has a different channel count.
    """
    buffer = np.zeros((len(frames), channels), dtype=np.int32)
    for offset, frame in enumerate(frames):
        frame.write_to_buffer(buffer, offset)
    return buffer


def write_samples(path: Path, samples: np.ndarray, stream: StreamFormat) -> None:
    """
    Write native-depth integer samples as a WAV file.

    Args:
        path: Output path
        samples: Integer samples shaped (frames, channels)
        stream: Format to write (subtype, sample rate, channels)
    """
    data = np.left_shift(samples.astype(np.int32), stream.shift)
    sf.write(str(path), data, stream.sample_rate, subtype=stream.subtype, format=OUTPUT_FORMAT)


def write_frames(path: Path, frames: Sequence[Frame], stream: StreamFormat) -> None:
    """Write frames, in order, as a WAV file."""
    write_samples(path, frames_to_buffer(frames, stream.channels), stream)
