"""
samplecutter Test Configuration

Provides helpers for building frame streams and WAV recordings.
"""

import subprocess
import sys
from pathlib import Path

import numpy as np
import pytest

from samplecutter import audio
from samplecutter.audio import StreamFormat
from samplecutter.frame import Frame


MONO_16 = StreamFormat.for_bits(channels=1, sample_rate=44100, valid_bits=16)
STEREO_24 = StreamFormat.for_bits(channels=2, sample_rate=48000, valid_bits=24)


def run_cli(*args: str, cwd: str | None = None) -> subprocess.CompletedProcess:
    """Run samplecutter CLI as subprocess."""
    return subprocess.run(
        [sys.executable, "-m", "samplecutter", *args],
        capture_output=True,
        text=True,
        cwd=cwd,
    )


def mono(*values: int) -> list[Frame]:
    """One single-channel frame per value."""
    return [Frame((v,)) for v in values]


def square_burst(amplitude: int, half_period: int, half_waves: int) -> list[int]:
    """Alternating +/- blocks of `half_period` samples, starting positive."""
    values: list[int] = []
    for i in range(half_waves):
        sign = 1 if i % 2 == 0 else -1
        values.extend([sign * amplitude] * half_period)
    return values


def decaying_hit(
    amplitude: float,
    sample_rate: int,
    frequency: float = 440.0,
    duration_sec: float = 0.25,
    tau_sec: float = 0.03,
) -> np.ndarray:
    """Exponentially decaying sine, rounded to integers."""
    t = np.arange(int(sample_rate * duration_sec)) / sample_rate
    signal = amplitude * np.exp(-t / tau_sec) * np.sin(2 * np.pi * frequency * t)
    return np.round(signal).astype(np.int32)


def create_hits_wav(
    path: Path,
    stream: StreamFormat = MONO_16,
    amplitudes: tuple[float, ...] = (0.5, 0.25),
    gap_sec: float = 0.2,
) -> np.ndarray:
    """
    Write a recording of decaying hits separated by digital silence.

    Args:
        path: Output path
        stream: Format to write
        amplitudes: One hit per entry, as fraction of full scale
        gap_sec: Silence before, between and after the hits

    Returns:
        The written samples, shaped (frames, channels).
    """
    full_scale = 1 << (stream.valid_bits - 1)
    gap = np.zeros(int(stream.sample_rate * gap_sec), dtype=np.int32)

    parts = [gap]
    for amplitude in amplitudes:
        parts.append(decaying_hit(amplitude * full_scale, stream.sample_rate))
        parts.append(gap)
    signal = np.concatenate(parts)

    # Other channels carry the same hit at half level
    columns = [signal] + [signal // 2] * (stream.channels - 1)
    samples = np.stack(columns, axis=1)

    audio.write_samples(path, samples, stream)
    return samples


@pytest.fixture
def hits_wav(tmp_path) -> Path:
    """Mono 16-bit recording with two hits."""
    path = tmp_path / "hits.wav"
    create_hits_wav(path)
    return path


@pytest.fixture
def stereo_hits_wav(tmp_path) -> Path:
    """Stereo 24-bit recording with three hits."""
    path = tmp_path / "stereo.wav"
    create_hits_wav(path, STEREO_24, amplitudes=(0.8, 0.1, 0.4))
    return path
